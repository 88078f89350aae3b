"""Rendering of batch summaries and result tables."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from rich.markup import escape
from rich.table import Table

from ironhide.cli import exit_codes
from ironhide.cli.console import console, flag, out_console
from ironhide.core.batch import BatchSummary
from ironhide.core.models import (
    AccessChange,
    AccessResult,
    FileAccessReport,
    FileInfo,
    GroupDetail,
    GroupMaps,
    GroupRecord,
)


def report_batch(
    summary: BatchSummary[Any],
    *,
    noun: str,
    verb: str,
) -> None:
    """Print one line per failure, then the success and failure counts.

    The two count lines are independent: a mixed batch prints both.
    """
    for message in summary.failures:
        console.print(f"[red]{escape(message)}[/red]")
    if summary.success_count > 0:
        console.print(f"\n[green]{summary.success_count} {noun} successfully {verb}.[/green]")
    if summary.failure_count > 0:
        console.print(f"\n[red]{summary.failure_count} {noun} failed to be {verb}.[/red]")


def batch_exit_code(summary: BatchSummary[Any]) -> int:
    """Exit code of a finished batch: failure if any item failed."""
    return exit_codes.GENERAL_ERROR if summary.failure_count else exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Grant / revoke
# ---------------------------------------------------------------------------

def _succeeded_label(change: AccessChange, maps: GroupMaps) -> str:
    if change.kind == "group":
        return maps.display_name(change.id)
    return change.id


def _failed_label(change: AccessChange, maps: GroupMaps) -> str:
    error = change.error or "unknown error"
    if change.kind == "user" or change.id not in maps.by_id:
        return f"{change.id} ({error})"
    name = maps.display_name(change.id)
    return f"{name} ({error.replace(change.id, name)})"


def access_table(reports: Sequence[FileAccessReport], maps: GroupMaps, *, action: str) -> Table:
    """One row per file: who was changed and who could not be."""
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("File")
    table.add_column(f"Successful {action}")
    table.add_column(f"Failed {action}")
    for report in reports:
        table.add_row(
            escape(Path(report.source).name),
            "[green]" + escape("\n".join(_succeeded_label(c, maps) for c in report.result.succeeded)) + "[/green]",
            "[red]" + escape("\n".join(_failed_label(c, maps) for c in report.result.failed)) + "[/red]",
        )
    return table


def print_access_reports(reports: Sequence[FileAccessReport], maps: GroupMaps, *, action: str) -> None:
    if reports:
        out_console.print(access_table(reports, maps, action=action))


# ---------------------------------------------------------------------------
# File info
# ---------------------------------------------------------------------------

def _group_label(group_id: str, maps: GroupMaps) -> str:
    name = maps.display_name(group_id)
    return group_id if name == group_id else f"{name} ({group_id})"


def file_info_table(infos: Sequence[FileInfo], maps: GroupMaps) -> Table:
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("File")
    table.add_column("ID")
    table.add_column("Association")
    table.add_column("Users with access")
    table.add_column("Groups with access")
    for info in infos:
        meta = info.metadata
        table.add_row(
            escape(Path(info.source).name),
            escape(meta.id),
            escape(meta.association),
            escape("\n".join(meta.users)),
            escape("\n".join(_group_label(group_id, maps) for group_id in meta.groups)),
        )
    return table


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

def group_table(groups: Sequence[GroupRecord]) -> Table:
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Group Name")
    table.add_column("Group ID")
    table.add_column("Admin", justify="center")
    table.add_column("Member", justify="center")
    for group in groups:
        table.add_row(escape(group.name or ""), escape(group.id), flag(group.is_admin), flag(group.is_member))
    return table


def group_detail_table(detail: GroupDetail) -> Table:
    """Name, roles, and admin and member lists when the caller may see them."""
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Group")
    table.add_column("Admin", justify="center")
    table.add_column("Member", justify="center")
    row = [escape(detail.name or detail.id), flag(detail.is_admin), flag(detail.is_member)]
    if detail.can_see_details:
        table.add_column("Admins")
        table.add_column("Members")
        row += [escape("\n".join(detail.admins)), escape("\n".join(detail.members))]
    table.add_row(*row)
    return table


def admin_table(result: AccessResult, *, verb: str) -> Table:
    """One row per user: a tick for each success, the error for each failure."""
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("User")
    table.add_column("Result")
    for change in result.succeeded:
        table.add_row(escape(change.id), f"[green]✔ {verb} as admin[/green]")
    for change in result.failed:
        table.add_row(escape(change.id), f"[red]{escape(change.error or 'unknown error')}[/red]")
    return table
