"""Errors raised by the DingTalk integration.

Two failure categories are kept apart:

- remote-reported: the platform answered with a non-zero ``errcode``
  (``RemoteError`` with ``errcode`` set, or a failed OperationResult for
  group creation)
- transport: the request never produced a usable answer (connection error,
  timeout, non-2xx status, malformed JSON) -> ``TransportError``
"""

from typing import Optional


class DingTalkError(Exception):
    """Base class for DingTalk integration errors."""


class AuthError(DingTalkError):
    """Raised when no access token can be obtained. Aborts the command."""


class RemoteError(DingTalkError):
    """Raised when a DingTalk call fails.

    Attributes:
        errcode: Platform error code, None for transport failures.
    """

    def __init__(self, message: str, errcode: Optional[int] = None):
        super().__init__(message)
        self.errcode = errcode


class TransportError(RemoteError):
    """Raised when the HTTP exchange itself fails."""
