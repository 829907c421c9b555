"""Organisation directory lookups."""

from ti_dding.modules.directory.service import DirectoryService, write_employees_csv

__all__ = ["DirectoryService", "write_employees_csv"]
