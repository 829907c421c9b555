"""Operation result types and status enums."""

from ti_dding.infrastructure.operations.result import OperationResult
from ti_dding.infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
]
