"""CSV import and export of group records.

Import format (positional, header row required but not interpreted):

    name, description, owner_id, member ids (comma-joined), [group type]

Export format: see ``mappings.EXPORT_HEADERS``.
"""

import csv
from pathlib import Path
from typing import Iterable, List, Union

from ti_dding.infrastructure.logging import get_module_logger
from ti_dding.modules.groups.domain.errors import FormatError, StorageIOError
from ti_dding.modules.groups.domain.models import Group, ImportRow
from ti_dding.modules.groups.mappings import (
    EXPORT_TIMESTAMP_FORMAT,
    Locale,
    export_headers,
    group_type_label,
)

logger = get_module_logger()

MIN_IMPORT_FIELDS = 4

PathLike = Union[str, Path]


def read_import_rows(path: PathLike) -> List[ImportRow]:
    """Parse an import CSV into trimmed rows.

    The whole file is validated before anything is returned, so a single bad
    row rejects the import as a whole.

    Args:
        path: CSV file to read (UTF-8, an Excel BOM is tolerated).

    Returns:
        One ImportRow per data row, in file order.

    Raises:
        FormatError: If the file cannot be read, has no data rows, or a row
            is short or lacks a name or owner id.
    """
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as handle:
            records = [record for record in csv.reader(handle) if record]
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise FormatError(f"failed to read CSV file {path}: {exc}") from exc

    if len(records) < 2:
        raise FormatError(
            "invalid CSV file: a header row and at least one data row are required"
        )

    rows: List[ImportRow] = []
    for index, record in enumerate(records[1:]):
        row_number = index + 2
        if len(record) < MIN_IMPORT_FIELDS:
            raise FormatError(
                f"row {row_number} is incomplete: at least "
                f"{MIN_IMPORT_FIELDS} fields are required",
                row=row_number,
            )

        row = ImportRow(
            name=record[0].strip(),
            description=record[1].strip(),
            owner_id=record[2].strip(),
            member_ids_raw=record[3].strip(),
            group_type_label=record[4].strip() if len(record) > 4 else "",
            row_number=row_number,
        )

        if not row.name:
            raise FormatError(
                f"row {row_number}: group name must not be empty", row=row_number
            )
        if not row.owner_id:
            raise FormatError(
                f"row {row_number}: owner id must not be empty", row=row_number
            )

        rows.append(row)

    logger.info("import_rows_parsed", path=str(path), rows=len(rows))
    return rows


def write_export(
    path: PathLike, groups: Iterable[Group], locale: Locale = Locale.EN_US
) -> int:
    """Write group records to an export CSV.

    Args:
        path: Output file, overwritten if present.
        groups: Records to write, already filtered by the caller.
        locale: Locale of the header row and group-type labels.

    Returns:
        Number of data rows written.

    Raises:
        StorageIOError: If the file cannot be written.
    """
    count = 0
    try:
        with open(path, "w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(export_headers(locale))
            for group in groups:
                writer.writerow(
                    [
                        group.id,
                        group.name,
                        group.description,
                        group.owner_id,
                        str(group.member_count),
                        group_type_label(group.group_type, locale),
                        group.created_at.strftime(EXPORT_TIMESTAMP_FORMAT),
                        group.status.value,
                    ]
                )
                count += 1
    except OSError as exc:
        raise StorageIOError(f"failed to write CSV file {path}: {exc}") from exc

    logger.info("groups_exported", path=str(path), rows=count, locale=locale.value)
    return count
