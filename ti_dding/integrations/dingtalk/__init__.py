"""DingTalk open API integration."""

from ti_dding.integrations.dingtalk.client import DingTalkClient
from ti_dding.integrations.dingtalk.errors import (
    AuthError,
    DingTalkError,
    RemoteError,
    TransportError,
)

__all__ = [
    "AuthError",
    "DingTalkClient",
    "DingTalkError",
    "RemoteError",
    "TransportError",
]
