"""Batch management of DingTalk group chats."""

__version__ = "0.1.0"
