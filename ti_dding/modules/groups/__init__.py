"""Group chat management: local records, CSV import/export, orchestration."""

from ti_dding.modules.groups.service import GroupService
from ti_dding.modules.groups.storage import FileGroupStore, GroupStore

__all__ = ["FileGroupStore", "GroupService", "GroupStore"]
