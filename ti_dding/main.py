"""ti-dding command-line interface.

Usage:
    ti-dding --config configs/config.yaml create --file groups.csv
    ti-dding add-member --user-id u1 --user-id u2 --group-id chat123
    ti-dding remove-member --user-id u1 --all-groups
    ti-dding export --output groups.csv

Every command loads the settings once, configures logging from them and
builds its components explicitly. Command output goes to stdout; errors go
to stderr with exit code 1.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, NoReturn, Optional

import typer

from ti_dding.infrastructure.configuration import (
    ConfigError,
    Settings,
    load_settings,
)
from ti_dding.infrastructure.logging import (
    bind_command_context,
    configure_logging,
    get_module_logger,
)
from ti_dding.integrations.dingtalk import DingTalkClient, DingTalkError
from ti_dding.modules.directory import DirectoryService, write_employees_csv
from ti_dding.modules.groups import FileGroupStore, GroupService
from ti_dding.modules.groups.domain import Group, GroupsError
from ti_dding.modules.groups.mappings import (
    EXPORT_TIMESTAMP_FORMAT,
    Locale,
    group_type_label,
)
from ti_dding.modules.groups.schemas import GroupMemberRequest, GroupMemberResponse

logger = get_module_logger()

app = typer.Typer(
    name="ti-dding",
    help="Batch management of DingTalk group chats.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to the YAML config file"
    ),
) -> None:
    ctx.obj = {"config_path": str(config) if config else None}


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


@contextmanager
def _command(ctx: typer.Context, command: str, **context: Any) -> Iterator[Settings]:
    """Load settings and run one command with its logging context bound.

    Taxonomy errors raised by the body are reported on stderr and turned
    into exit code 1.
    """
    config_path = (ctx.obj or {}).get("config_path")
    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        _fail(f"configuration error: {exc}")

    configure_logging(log_level=settings.app.log_level, debug=settings.app.debug)
    with bind_command_context(command=command, **context):
        logger.info("command_started")
        try:
            yield settings
        except (GroupsError, DingTalkError) as exc:
            logger.error("command_failed", error=str(exc))
            _fail(str(exc))
        logger.info("command_finished")


def _build_client(settings: Settings) -> DingTalkClient:
    return DingTalkClient(settings.dingtalk, settings.group.default_settings)


@contextmanager
def _group_service(settings: Settings) -> Iterator[GroupService]:
    client = _build_client(settings)
    try:
        yield GroupService(
            client=client,
            store=FileGroupStore(settings.data_dir),
            locale=Locale.from_string(settings.app.locale),
        )
    finally:
        client.close()


def _member_request(
    user_ids: List[str], group_id: Optional[str], all_groups: bool
) -> GroupMemberRequest:
    if bool(group_id) == all_groups:
        raise typer.BadParameter(
            "specify exactly one of --group-id or --all-groups",
            param_hint="'--group-id' / '--all-groups'",
        )
    return GroupMemberRequest(
        user_ids=user_ids, group_id=group_id, all_groups=all_groups
    )


def _report_members(response: GroupMemberResponse) -> None:
    if not response.success:
        _fail(response.message)
    typer.echo(response.message)


def _print_group(group: Group, locale: Locale, index: Optional[int] = None) -> None:
    prefix = f"{index}. " if index is not None else ""
    typer.echo(f"{prefix}{group.name} (ID: {group.id})")
    typer.echo(f"   Description: {group.description}")
    typer.echo(f"   Owner: {group.owner_id}")
    typer.echo(f"   Members: {group.member_count}")
    typer.echo(f"   Type: {group_type_label(group.group_type, locale)}")
    typer.echo(
        f"   Created at: {group.created_at.strftime(EXPORT_TIMESTAMP_FORMAT)}"
    )
    typer.echo(f"   Status: {group.status.value}")


@app.command("create")
def create_groups(
    ctx: typer.Context,
    file: Path = typer.Option(
        ..., "--file", "-f", help="CSV file of groups to create"
    ),
) -> None:
    """Create groups from a CSV file."""
    with _command(ctx, "create", csv_file=str(file)) as settings, _group_service(
        settings
    ) as service:
        response = service.create_groups_from_csv(file)

    if not response.success:
        _fail(response.message)
    typer.echo(response.message)


@app.command("list")
def list_groups(ctx: typer.Context) -> None:
    """List all non-deleted groups."""
    with _command(ctx, "list") as settings, _group_service(settings) as service:
        response = service.list_groups()

    if response.total == 0:
        typer.echo("No groups found.")
        return

    typer.echo(f"{response.total} group(s):\n")
    for index, group in enumerate(response.groups, start=1):
        _print_group(group, service.locale, index)
        typer.echo("")


@app.command("show")
def show_group(
    ctx: typer.Context,
    group_id: Optional[str] = typer.Option(None, "--group-id", "-g", help="Group id"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Group name"),
) -> None:
    """Show one group by id or name."""
    if not group_id and not name:
        raise typer.BadParameter(
            "specify --group-id or --name", param_hint="'--group-id' / '--name'"
        )

    with _command(ctx, "show") as settings, _group_service(settings) as service:
        group = service.get_group(group_id=group_id, name=name)
        _print_group(group, service.locale)
        typer.echo(f"   Member ids: {', '.join(group.member_ids)}")


@app.command("add-member")
def add_member(
    ctx: typer.Context,
    user_ids: List[str] = typer.Option(
        ..., "--user-id", "-u", help="User id to add (repeatable)"
    ),
    group_id: Optional[str] = typer.Option(None, "--group-id", "-g", help="Group id"),
    all_groups: bool = typer.Option(
        False, "--all-groups", "-a", help="Apply to every group"
    ),
) -> None:
    """Add users to one group or to all groups."""
    request = _member_request(user_ids, group_id, all_groups)
    with _command(
        ctx, "add-member", group_id=group_id, all_groups=all_groups
    ) as settings, _group_service(settings) as service:
        response = service.add_members(request)
    _report_members(response)


@app.command("remove-member")
def remove_member(
    ctx: typer.Context,
    user_ids: List[str] = typer.Option(
        ..., "--user-id", "-u", help="User id to remove (repeatable)"
    ),
    group_id: Optional[str] = typer.Option(None, "--group-id", "-g", help="Group id"),
    all_groups: bool = typer.Option(
        False, "--all-groups", "-a", help="Apply to every group"
    ),
) -> None:
    """Remove users from one group or from all groups."""
    request = _member_request(user_ids, group_id, all_groups)
    with _command(
        ctx, "remove-member", group_id=group_id, all_groups=all_groups
    ) as settings, _group_service(settings) as service:
        response = service.remove_members(request)
    _report_members(response)


@app.command("export")
def export_groups(
    ctx: typer.Context,
    output: Path = typer.Option(
        Path("groups_export.csv"), "--output", "-o", help="Output CSV file"
    ),
) -> None:
    """Export all non-deleted groups to CSV."""
    with _command(ctx, "export", output=str(output)) as settings, _group_service(
        settings
    ) as service:
        count = service.export_groups(output)
    typer.echo(f"Exported {count} group(s) to {output}")


@app.command("check")
def check_group(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Group name"),
) -> None:
    """Check whether a group name is already taken."""
    with _command(ctx, "check", name=name) as settings, _group_service(
        settings
    ) as service:
        exists = service.check_group_exists(name)

    if exists:
        typer.echo(f"Group '{name}' exists.")
    else:
        typer.echo(f"Group '{name}' does not exist.")


@app.command("employees")
def export_employees(
    ctx: typer.Context,
    output: Path = typer.Option(
        Path("employees.csv"), "--output", "-o", help="Output CSV file"
    ),
) -> None:
    """Export the organisation's employees (user ids for import files)."""
    with _command(ctx, "employees", output=str(output)) as settings:
        client = _build_client(settings)
        try:
            export = DirectoryService(client).collect_employees()
            count = write_employees_csv(output, export.employees)
        finally:
            client.close()

    for warning in export.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    typer.echo(
        f"Exported {count} employee(s) from {len(export.departments)} "
        f"department(s) to {output}"
    )
