"""Local record store for group records.

``GroupStore`` is the single storage contract used by the service layer,
CSV import/export included. ``FileGroupStore`` keeps every record in one
JSON document (``<data_dir>/groups.json``) and rewrites it completely on
each mutation:

    {"groups": [...], "total": 3, "updated_at": "2025-01-01T10:00:00+08:00"}

Deletion is logical: deleted records stay in the file and are skipped by
lookups, listings, exports and existence checks. There is no locking; two
concurrent invocations writing the same file race and the last writer wins.
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from ti_dding.infrastructure.logging import get_module_logger
from ti_dding.modules.groups import csv_bridge
from ti_dding.modules.groups.domain.errors import (
    DuplicateError,
    NotFoundError,
    StorageIOError,
)
from ti_dding.modules.groups.domain.models import (
    Group,
    GroupStoreDocument,
    ImportRow,
    local_now,
)
from ti_dding.modules.groups.mappings import Locale

logger = get_module_logger()

GROUPS_FILE_NAME = "groups.json"


class GroupStore(ABC):
    """Storage contract for group records."""

    @abstractmethod
    def load(self) -> List[Group]:
        """Return every record, deleted ones included, in storage order."""

    @abstractmethod
    def save(self, records: List[Group]) -> None:
        """Replace the whole record set."""

    def active(self) -> List[Group]:
        """Return the non-deleted records in storage order."""
        return [group for group in self.load() if not group.is_deleted]

    def add(self, record: Group) -> None:
        """Append a record.

        Raises:
            DuplicateError: If a non-deleted record shares the id or name.
        """
        records = self.load()
        for existing in records:
            if existing.is_deleted:
                continue
            same_id = bool(record.id) and existing.id == record.id
            if same_id or existing.name == record.name:
                raise DuplicateError(
                    f"group already exists: id={record.id}, name={record.name}"
                )

        records.append(record)
        self.save(records)
        logger.info("group_record_added", group_id=record.id, name=record.name)

    def update(self, record: Group) -> None:
        """Replace the record with the same id.

        Raises:
            NotFoundError: If no record has that id.
        """
        records = self.load()
        for index, existing in enumerate(records):
            if existing.id == record.id:
                records[index] = record
                self.save(records)
                logger.debug("group_record_updated", group_id=record.id)
                return

        raise NotFoundError(f"group not found: id={record.id}")

    def soft_delete(self, group_id: str) -> None:
        """Mark the record with ``group_id`` as deleted.

        Raises:
            NotFoundError: If no record has that id.
        """
        records = self.load()
        for existing in records:
            if existing.id == group_id:
                existing.mark_deleted()
                self.save(records)
                logger.info("group_record_deleted", group_id=group_id)
                return

        raise NotFoundError(f"group not found: id={group_id}")

    def get_by_id(self, group_id: str) -> Group:
        for group in self.load():
            if group.id == group_id and not group.is_deleted:
                return group
        raise NotFoundError(f"group not found: id={group_id}")

    def get_by_name(self, name: str) -> Group:
        for group in self.load():
            if group.name == name and not group.is_deleted:
                return group
        raise NotFoundError(f"group not found: name={name}")

    def exists(self, name: str) -> bool:
        """Best-effort check for a non-deleted record named ``name``.

        Read failures are logged and reported as False.
        """
        try:
            records = self.load()
        except StorageIOError as exc:
            logger.warning("group_exists_check_failed", name=name, error=str(exc))
            return False
        return any(group.name == name and not group.is_deleted for group in records)

    def load_import_rows(self, csv_path: Union[str, Path]) -> List[ImportRow]:
        return csv_bridge.read_import_rows(csv_path)

    def export_csv(
        self, output_path: Union[str, Path], locale: Locale = Locale.EN_US
    ) -> int:
        """Write the non-deleted records to ``output_path``.

        Returns:
            Number of records exported.
        """
        return csv_bridge.write_export(output_path, self.active(), locale)


class FileGroupStore(GroupStore):
    """GroupStore backed by a single JSON file in ``data_dir``."""

    def __init__(self, data_dir: Union[str, Path], file_name: Optional[str] = None):
        self.data_dir = Path(data_dir)
        self.groups_file = self.data_dir / (file_name or GROUPS_FILE_NAME)

    def load(self) -> List[Group]:
        if not self.groups_file.exists():
            return []

        try:
            raw = self.groups_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageIOError(
                f"failed to read group data file {self.groups_file}: {exc}"
            ) from exc

        try:
            document = GroupStoreDocument.model_validate_json(raw)
        except ValidationError as exc:
            raise StorageIOError(
                f"failed to parse group data file {self.groups_file}: {exc}"
            ) from exc

        return document.groups

    def save(self, records: List[Group]) -> None:
        document = GroupStoreDocument(
            groups=records, total=len(records), updated_at=local_now()
        )
        payload = document.model_dump_json(indent=2)

        tmp_path = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.data_dir, prefix=".groups-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.groups_file)
        except OSError as exc:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageIOError(
                f"failed to write group data file {self.groups_file}: {exc}"
            ) from exc

        logger.debug(
            "group_records_saved", path=str(self.groups_file), total=len(records)
        )
