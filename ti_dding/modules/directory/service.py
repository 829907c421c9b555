"""Employee directory export.

Walks every department, lists its users and fetches each user's details so
operators can look up the user ids needed in an import CSV. A failing
department or user is reported as a warning and skipped; only a failure to
list departments aborts the walk.
"""

import csv
from pathlib import Path
from typing import Iterable, Union

from ti_dding.infrastructure.logging import get_module_logger
from ti_dding.integrations.dingtalk import DingTalkClient, RemoteError
from ti_dding.modules.directory.models import Department, DirectoryExport, Employee
from ti_dding.modules.groups.domain.errors import StorageIOError

logger = get_module_logger()

EMPLOYEE_CSV_HEADERS = ("User ID", "Name", "Mobile", "Department", "Position", "Email")


class DirectoryService:
    """Collects employees from the DingTalk contact API."""

    def __init__(self, client: DingTalkClient) -> None:
        self.client = client

    def collect_employees(self) -> DirectoryExport:
        """Fetch all departments and their employees.

        Raises:
            AuthError: If no token can be obtained.
            RemoteError: If the department list cannot be fetched.
        """
        export = DirectoryExport(
            departments=[
                Department.model_validate(item)
                for item in self.client.list_departments()
            ]
        )
        logger.info("departments_listed", count=len(export.departments))

        for department in export.departments:
            try:
                users = self.client.list_department_users(department.id)
            except RemoteError as exc:
                export.warnings.append(f"department {department.name}: {exc}")
                continue

            logger.debug(
                "department_users_listed", department=department.name, count=len(users)
            )
            for user in users:
                user_id = str(user.get("userid", ""))
                try:
                    detail = self.client.get_user(user_id)
                except RemoteError as exc:
                    export.warnings.append(
                        f"user {user.get('name') or user_id}: {exc}"
                    )
                    continue
                export.employees.append(
                    Employee.from_user_detail(detail, department.name)
                )

        logger.info(
            "employees_collected",
            employees=len(export.employees),
            warnings=len(export.warnings),
        )
        return export


def write_employees_csv(path: Union[str, Path], employees: Iterable[Employee]) -> int:
    """Write employees to ``path``; returns the number of rows written.

    Raises:
        StorageIOError: If the file cannot be written.
    """
    count = 0
    try:
        with open(path, "w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(EMPLOYEE_CSV_HEADERS)
            for employee in employees:
                writer.writerow(
                    [
                        employee.user_id,
                        employee.name,
                        employee.mobile,
                        employee.department,
                        employee.position,
                        employee.email,
                    ]
                )
                count += 1
    except OSError as exc:
        raise StorageIOError(f"failed to write CSV file {path}: {exc}") from exc
    return count
