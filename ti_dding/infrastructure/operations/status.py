"""Outcome categories of a remote operation."""

from enum import Enum


class OperationStatus(Enum):
    SUCCESS = "success"
    # platform refused the request or answered without a usable result
    PERMANENT_ERROR = "permanent_error"
