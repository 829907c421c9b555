"""Group lifecycle service.

Coordinates the CSV bridge, the DingTalk client and the local record store
for every group command. One command runs per process; the service holds no
state between calls.

Failure policy:
  - batch flows (create from CSV, all-groups member changes) record a
    per-item reason and move on to the next item
  - single-group flows stop at the first failure and report one message
  - a local save failing after the remote call succeeded is recorded like
    any other per-item failure
  - AuthError is never caught here and aborts the command, as do storage
    failures while reading the records or the import file
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from ti_dding.infrastructure.logging import get_module_logger
from ti_dding.integrations.dingtalk import DingTalkClient, RemoteError, TransportError
from ti_dding.modules.groups.domain.errors import GroupsError, NotFoundError
from ti_dding.modules.groups.domain.models import Group, ImportRow
from ti_dding.modules.groups.mappings import (
    Locale,
    parse_member_ids,
    resolve_group_type,
)
from ti_dding.modules.groups.schemas import (
    GroupCreateResponse,
    GroupListResponse,
    GroupMemberRequest,
    GroupMemberResponse,
)
from ti_dding.modules.groups.storage import GroupStore

logger = get_module_logger()


@dataclass(frozen=True)
class _MemberOperation:
    """Wiring of one member operation (add or remove)."""

    name: str
    remote_method: str
    local: Callable[[Group, str], bool]
    failure_verb: str
    success_template: str


_ADD_MEMBERS = _MemberOperation(
    name="add_members",
    remote_method="add_members",
    local=Group.add_member,
    failure_verb="add",
    success_template="Added members to {affected} group(s)",
)

_REMOVE_MEMBERS = _MemberOperation(
    name="remove_members",
    remote_method="remove_members",
    local=Group.remove_member,
    failure_verb="remove",
    success_template="Removed members from {affected} group(s)",
)


class GroupService:
    """Group lifecycle orchestrator.

    Args:
        client: DingTalk API client.
        store: Local record store.
        locale: Locale used for CSV exports.
    """

    def __init__(
        self,
        client: DingTalkClient,
        store: GroupStore,
        locale: Locale = Locale.EN_US,
    ) -> None:
        self.client = client
        self.store = store
        self.locale = locale

    def create_groups_from_csv(self, csv_path: Union[str, Path]) -> GroupCreateResponse:
        """Create one group per import row.

        The CSV is fully validated first; a FormatError aborts before any
        remote call. Rows are then processed in file order and a failing row
        never stops the rest.

        Args:
            csv_path: Import CSV file.

        Returns:
            GroupCreateResponse summarizing created and failed rows;
            ``success`` is True iff at least one group was created.
        """
        rows = self.store.load_import_rows(csv_path)
        if not rows:
            return GroupCreateResponse(
                success=False, message="No valid group rows found in the CSV file"
            )

        log = logger.bind(csv_path=str(csv_path), rows=len(rows))
        log.info("create_from_csv_started")

        created_ids: List[str] = []
        failures: List[str] = []
        for row in rows:
            reason = self._create_from_row(row, created_ids)
            if reason:
                failures.append(f"{row.name} ({reason})")
                log.warning(
                    "group_row_failed", row=row.row_number, name=row.name, reason=reason
                )

        created = len(created_ids)
        if created > 0:
            message = f"Created {created} group(s)"
            if failures:
                message += f", {len(failures)} failed"
        else:
            message = "No groups were created"
        if failures:
            message += "\nFailed groups: " + "; ".join(failures)

        log.info("create_from_csv_finished", created=created, failed=len(failures))
        return GroupCreateResponse(
            success=created > 0,
            message=message,
            created=created,
            failed=len(failures),
            failures=failures,
            group_ids=created_ids,
        )

    def _create_from_row(self, row: ImportRow, created_ids: List[str]) -> Optional[str]:
        """Create the group described by ``row``.

        Returns:
            None on success, otherwise the failure reason.
        """
        if self.store.exists(row.name):
            return "name already exists"

        member_ids = parse_member_ids(row.member_ids_raw, row.owner_id)
        group_type = resolve_group_type(row.group_type_label)
        group = Group.new(
            name=row.name,
            description=row.description,
            owner_id=row.owner_id,
            member_ids=member_ids,
            group_type=group_type,
        )

        try:
            result = self.client.create_group(
                name=group.name,
                description=group.description,
                owner_id=group.owner_id,
                member_ids=group.member_ids,
                is_external=group.is_external,
            )
        except TransportError as exc:
            return f"API call failed: {exc}"

        if not result.is_success:
            return result.message

        group.id = result.value("chat_id", "")
        try:
            self.store.add(group)
        except GroupsError as exc:
            logger.error("group_save_failed", group_id=group.id, error=str(exc))
            return f"save failed: {exc}"

        created_ids.append(group.id)
        return None

    def list_groups(self) -> GroupListResponse:
        groups = self.store.active()
        return GroupListResponse(groups=groups, total=len(groups))

    def get_group(
        self, group_id: Optional[str] = None, name: Optional[str] = None
    ) -> Group:
        """Look up one non-deleted group by id or, failing that, by name.

        Raises:
            NotFoundError: If nothing matches.
            ValueError: If neither id nor name is given.
        """
        if group_id:
            return self.store.get_by_id(group_id)
        if name:
            return self.store.get_by_name(name)
        raise ValueError("either group_id or name is required")

    def add_members(self, request: GroupMemberRequest) -> GroupMemberResponse:
        """Add users to one group or to every non-deleted group."""
        return self._change_members(request, _ADD_MEMBERS)

    def remove_members(self, request: GroupMemberRequest) -> GroupMemberResponse:
        """Remove users from one group or from every non-deleted group.

        Owners are never removed locally, even when listed.
        """
        return self._change_members(request, _REMOVE_MEMBERS)

    def _change_members(
        self, request: GroupMemberRequest, operation: _MemberOperation
    ) -> GroupMemberResponse:
        if not request.user_ids:
            return GroupMemberResponse(
                success=False, message="User id list must not be empty"
            )

        log = logger.bind(
            operation=operation.name,
            user_ids=request.user_ids,
            all_groups=request.all_groups,
        )

        if request.all_groups:
            affected, errors = self._change_members_everywhere(
                request.user_ids, operation
            )
        else:
            if not request.group_id:
                return GroupMemberResponse(
                    success=False,
                    message="A group id is required unless all groups are targeted",
                )

            try:
                group = self.store.get_by_id(request.group_id)
            except NotFoundError as exc:
                return GroupMemberResponse(success=False, message=str(exc))

            try:
                self._call_remote(operation, group.id, request.user_ids)
            except RemoteError as exc:
                log.warning("member_change_failed", group_id=group.id, error=str(exc))
                return GroupMemberResponse(
                    success=False,
                    message=f"Failed to {operation.failure_verb} members: {exc}",
                )

            self._apply_locally(group, request.user_ids, operation)
            try:
                self.store.update(group)
            except GroupsError as exc:
                return GroupMemberResponse(
                    success=False, message=f"Failed to update group record: {exc}"
                )
            affected, errors = 1, []

        if errors:
            message = (
                f"Partially succeeded: {affected} group(s), errors: "
                + "; ".join(errors)
            )
        else:
            message = operation.success_template.format(affected=affected)

        log.info("member_change_finished", affected=affected, errors=len(errors))
        return GroupMemberResponse(
            success=affected > 0, message=message, affected=affected, errors=errors
        )

    def _change_members_everywhere(
        self, user_ids: List[str], operation: _MemberOperation
    ) -> Tuple[int, List[str]]:
        affected = 0
        errors: List[str] = []
        for group in self.store.active():
            try:
                self._call_remote(operation, group.id, user_ids)
            except RemoteError as exc:
                errors.append(f"group {group.name}: {exc}")
                continue

            self._apply_locally(group, user_ids, operation)
            try:
                self.store.update(group)
            except GroupsError as exc:
                errors.append(f"group {group.name} update failed: {exc}")
                continue

            affected += 1
        return affected, errors

    def _call_remote(
        self, operation: _MemberOperation, group_id: str, user_ids: List[str]
    ) -> None:
        getattr(self.client, operation.remote_method)(group_id, user_ids)

    @staticmethod
    def _apply_locally(
        group: Group, user_ids: List[str], operation: _MemberOperation
    ) -> None:
        for user_id in user_ids:
            if not operation.local(group, user_id):
                logger.debug(
                    "member_change_skipped",
                    operation=operation.name,
                    group_id=group.id,
                    user_id=user_id,
                )

    def export_groups(self, output_path: Union[str, Path]) -> int:
        """Export non-deleted groups to CSV; returns the number of rows."""
        return self.store.export_csv(output_path, self.locale)

    def check_group_exists(self, name: str) -> bool:
        return self.store.exists(name)
