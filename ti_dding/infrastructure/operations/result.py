"""Result type for remote operations whose failures are values.

Group creation reports a platform rejection (non-zero ``errcode``) as an
unsuccessful result so the import loop can record it against the row and
carry on. Transport failures are raised instead.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ti_dding.infrastructure.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Outcome of one remote operation.

    Attributes:
        status: high-level outcome
        message: human-readable summary, used verbatim in failure reports
        data: payload of a successful call, e.g. ``{"chat_id": "..."}``
        error_code: platform errcode as a string, when the platform gave one
    """

    status: OperationStatus
    message: str
    data: Optional[Dict[str, Any]] = None
    error_code: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    def value(self, key: str, default: Any = None) -> Any:
        """Read one field of the payload; ``default`` when absent."""
        return (self.data or {}).get(key, default)

    @classmethod
    def success(
        cls, data: Optional[Dict[str, Any]] = None, message: str = "ok"
    ) -> "OperationResult":
        return cls(status=OperationStatus.SUCCESS, message=message, data=data)

    @classmethod
    def rejected(
        cls, message: str, errcode: Optional[int] = None
    ) -> "OperationResult":
        """Platform rejected the request; nothing here is ever retried."""
        return cls(
            status=OperationStatus.PERMANENT_ERROR,
            message=message,
            error_code=None if errcode is None else str(errcode),
        )
