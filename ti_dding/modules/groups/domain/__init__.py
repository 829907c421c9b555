"""Domain models and errors for the groups module."""

from ti_dding.modules.groups.domain.errors import (
    DuplicateError,
    FormatError,
    GroupsError,
    NotFoundError,
    StorageIOError,
)
from ti_dding.modules.groups.domain.models import (
    Group,
    GroupStatus,
    GroupStoreDocument,
    GroupType,
    ImportRow,
    local_now,
)

__all__ = [
    "DuplicateError",
    "FormatError",
    "Group",
    "GroupStatus",
    "GroupStoreDocument",
    "GroupType",
    "GroupsError",
    "ImportRow",
    "NotFoundError",
    "StorageIOError",
    "local_now",
]
