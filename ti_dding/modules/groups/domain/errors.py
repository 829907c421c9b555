"""Errors for the groups module.

Batch flows turn NotFoundError and DuplicateError into per-item failure
strings; StorageIOError and FormatError always abort the command.
"""

from typing import Optional


class GroupsError(Exception):
    """Base class for local group record errors."""


class StorageIOError(GroupsError):
    """Raised when the record file cannot be read, parsed or written."""


class FormatError(GroupsError):
    """Raised for a malformed import CSV.

    Attributes:
        row: 1-indexed CSV row the problem was found on (header is row 1),
            or None when the problem concerns the file as a whole.
    """

    def __init__(self, message: str, row: Optional[int] = None):
        super().__init__(message)
        self.row = row


class NotFoundError(GroupsError):
    """Raised when no non-deleted record matches a lookup."""


class DuplicateError(GroupsError):
    """Raised when adding a record whose id or name is already taken."""
