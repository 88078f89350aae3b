"""``ironhide group ...`` — manage groups, their members and their admins."""

from __future__ import annotations

import argparse

from rich.markup import escape

from ironhide.cli import exit_codes
from ironhide.cli.console import console, out_console
from ironhide.cli.context import CommandContext
from ironhide.cli.report import admin_table, batch_exit_code, group_detail_table, group_table, report_batch
from ironhide.core.batch import check_batch_size, run_batch, run_single, settled, summarize
from ironhide.core.models import BatchTarget
from ironhide.core.resolver import UnresolvedPolicy
from ironhide.exceptions import UsageError, UserCancelledError


async def run_list(args: argparse.Namespace, ctx: CommandContext) -> int:
    maps = await ctx.resolver.cache.populate()
    if not maps.by_id:
        console.print("You aren't currently an admin or member of any groups.")
        return exit_codes.SUCCESS
    out_console.print(group_table(list(maps.by_id.values())))
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# create / info / rename / delete
# ---------------------------------------------------------------------------

async def run_create(args: argparse.Namespace, ctx: CommandContext) -> int:
    record = await ctx.groups.create(args.name)
    console.print(f"[green]Group '{escape(args.name)}' successfully created with ID '{escape(record.id)}'.[/green]")
    return exit_codes.SUCCESS


async def run_info(args: argparse.Namespace, ctx: CommandContext) -> int:
    group_id = await ctx.resolver.resolve(args.group, policy=UnresolvedPolicy.FAIL)
    detail = await ctx.groups.detail(group_id, args.group)
    out_console.print(group_detail_table(detail))
    if not detail.can_see_details:
        console.print("[yellow]Only admins and members can see who else belongs to a group.[/yellow]")
    return exit_codes.SUCCESS


async def run_rename(args: argparse.Namespace, ctx: CommandContext) -> int:
    """Rename a group the caller administers.

    The new name is checked before the current one is resolved, so a
    taken name never triggers a disambiguation prompt.
    """
    await ctx.groups.ensure_name_available(args.new_name, action="update")
    group_id = await ctx.resolver.resolve(args.group, policy=UnresolvedPolicy.FAIL)
    await ctx.groups.require_admin(group_id, args.group, action="rename")
    await ctx.groups.rename(group_id, args.new_name)
    console.print(f"[green]Group successfully renamed to '{escape(args.new_name)}'.[/green]")
    return exit_codes.SUCCESS


async def run_delete(args: argparse.Namespace, ctx: CommandContext) -> int:
    """Delete a group after the caller retypes its reference."""
    group_id = await ctx.resolver.resolve(args.group, policy=UnresolvedPolicy.FAIL)
    await ctx.groups.require_admin(group_id, args.group, action="delete")
    detail = await ctx.groups.detail(group_id, args.group)

    console.print(
        f"[yellow]Warning! Deleting group '{escape(args.group)}' removes access to every file "
        f"shared with it for its {len(detail.admins)} admin(s) and {len(detail.members)} member(s). "
        "This cannot be undone.[/yellow]",
    )
    answer = await ctx.prompt_line("Type the group name again to confirm")
    if answer is None:
        raise UserCancelledError()
    if answer.strip() != args.group:
        raise UsageError(
            f"Group confirmation failed. Original group provided was '{args.group}' "
            f"but confirmation value was '{answer.strip()}'.",
        )

    await ctx.groups.delete(group_id)
    console.print(f"[green]Group '{escape(args.group)}' successfully deleted.[/green]")
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

async def run_add_member(args: argparse.Namespace, ctx: CommandContext) -> int:
    return await _change_members(args, ctx, add=True)


async def run_remove_member(args: argparse.Namespace, ctx: CommandContext) -> int:
    return await _change_members(args, ctx, add=False)


async def _change_members(args: argparse.Namespace, ctx: CommandContext, *, add: bool) -> int:
    """Add or remove every ``-u`` user as its own batch item.

    The group must resolve to a known group: an unknown name fails the
    command before any member is touched.
    """
    users: list[str] = args.users
    check_batch_size(len(users), ctx.settings.max_batch_size, noun="users")

    group_id = await ctx.resolver.resolve(args.group, policy=UnresolvedPolicy.FAIL)
    targets = [BatchTarget(item=user, params=group_id) for user in users]
    operation = settled(ctx.membership.add if add else ctx.membership.remove)
    verb = "added" if add else "removed"

    if len(targets) == 1:
        user = await run_single(targets[0], operation)
        console.print(f"[green]{escape(user)} successfully {verb} as a member.[/green]")
        return exit_codes.SUCCESS

    summary = summarize(await run_batch(targets, operation))
    report_batch(summary, noun="member(s)", verb=verb)
    return batch_exit_code(summary)


# ---------------------------------------------------------------------------
# Admins
# ---------------------------------------------------------------------------

async def run_add_admin(args: argparse.Namespace, ctx: CommandContext) -> int:
    return await _change_admins(args, ctx, add=True)


async def run_remove_admin(args: argparse.Namespace, ctx: CommandContext) -> int:
    return await _change_admins(args, ctx, add=False)


async def _change_admins(args: argparse.Namespace, ctx: CommandContext, *, add: bool) -> int:
    """Change the admins of a group in one request and tabulate the result."""
    users: list[str] = args.users
    check_batch_size(len(users), ctx.settings.max_batch_size, noun="users")

    group_id = await ctx.resolver.resolve(args.group, policy=UnresolvedPolicy.FAIL)
    if add:
        result = await ctx.membership.add_admins(group_id, users)
    else:
        result = await ctx.membership.remove_admins(group_id, users)

    out_console.print(admin_table(result, verb="added" if add else "removed"))
    if result.failed:
        action = "add" if add else "remove"
        console.print(f"[red]Failed to {action} {len(result.failed)} admin(s).[/red]")
        return exit_codes.GENERAL_ERROR
    return exit_codes.SUCCESS
