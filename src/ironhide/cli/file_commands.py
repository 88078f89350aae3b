"""``ironhide file ...`` — encrypt, decrypt, grant, revoke and info.

Every command accepts one or many files.  Several files run as one
partial-failure batch with a summary; a single file skips batching and
its failure becomes the command's error.  Encrypt and decrypt can also
read their input from stdin with ``-s``.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Awaitable, Callable
from typing import TypeVar

from rich.markup import escape

from ironhide.cli import exit_codes
from ironhide.cli.console import console, out_console
from ironhide.cli.context import CommandContext
from ironhide.cli.report import batch_exit_code, file_info_table, print_access_reports, report_batch
from ironhide.core.batch import check_batch_size, run_batch, run_single, settled, summarize
from ironhide.core.file_service import (
    AccessParams,
    DecryptParams,
    EncryptParams,
    check_distinct_destinations,
)
from ironhide.core.models import AccessList, BatchTarget, ProcessedFile
from ironhide.core.resolver import UnresolvedPolicy
from ironhide.exceptions import UsageError

P = TypeVar("P")


def _check_sources(args: argparse.Namespace, action: str) -> None:
    """Validate how files, ``-s``, ``-o`` and ``-d`` are combined."""
    files: list[str] = args.files
    if files and args.stdin:
        raise UsageError("You cannot provide both source files and the -s flag.")
    if not files and not args.stdin:
        raise UsageError(
            f"You must either provide a path to a file to {action} or use the -s flag to read from stdin.",
        )
    if args.stdin and not args.out:
        raise UsageError("The -s flag requires the output flag (-o).", hint="Use '-o -' to write to stdout.")
    if args.stdin and args.delete:
        raise UsageError("The -d flag cannot be used together with -s.")
    if args.out and len(files) > 1:
        raise UsageError(
            "The output flag (-o) can only be provided when processing a single file.",
        )


def _read_stdin() -> bytes:
    return sys.stdin.buffer.read()


async def _access_list(args: argparse.Namespace, ctx: CommandContext) -> AccessList:
    """Resolve ``-g`` groups in order; unknown names pass through as IDs."""
    groups = await ctx.resolver.resolve_many(args.groups or [], policy=UnresolvedPolicy.ECHO)
    return AccessList(users=tuple(args.users or ()), groups=tuple(groups))


def _emit(processed: ProcessedFile, verb: str) -> None:
    if processed.warning:
        console.print(f"[yellow]{escape(processed.warning)}[/yellow]")
    if processed.destination is None:
        sys.stdout.buffer.write(processed.content)
        sys.stdout.buffer.flush()
        return
    console.print(f"[green]File successfully {verb} and written to {escape(processed.destination)}.[/green]")


# ---------------------------------------------------------------------------
# encrypt / decrypt
# ---------------------------------------------------------------------------

async def run_encrypt(args: argparse.Namespace, ctx: CommandContext) -> int:
    _check_sources(args, "encrypt")
    files: list[str] = args.files
    check_batch_size(len(files), ctx.settings.max_batch_size)

    params = EncryptParams(
        access=await _access_list(args, ctx),
        out=args.out,
        delete_source=args.delete,
    )
    if args.stdin:
        _emit(await ctx.files.encrypt_data(_read_stdin(), params), "encrypted")
        return exit_codes.SUCCESS

    check_distinct_destinations(ctx.files.encrypt_destination(file, args.out) for file in files)
    return await _process_files(files, params, ctx.files.encrypt, verb="encrypted")


async def run_decrypt(args: argparse.Namespace, ctx: CommandContext) -> int:
    _check_sources(args, "decrypt")
    files: list[str] = args.files
    check_batch_size(len(files), ctx.settings.max_batch_size)

    params = DecryptParams(out=args.out, delete_source=args.delete)
    if args.stdin:
        _emit(await ctx.files.decrypt_data(_read_stdin(), params), "decrypted")
        return exit_codes.SUCCESS

    check_distinct_destinations(ctx.files.decrypt_destination(file, args.out) for file in files)
    return await _process_files(files, params, ctx.files.decrypt, verb="decrypted")


async def _process_files(
    files: list[str],
    params: P,
    func: Callable[[BatchTarget[str, P]], Awaitable[ProcessedFile]],
    *,
    verb: str,
) -> int:
    targets = [BatchTarget(item=file, params=params) for file in files]
    operation = settled(func)

    if len(targets) == 1:
        _emit(await run_single(targets[0], operation), verb)
        return exit_codes.SUCCESS

    summary = summarize(await run_batch(targets, operation))
    for processed in summary.successes:
        if processed.warning:
            console.print(f"[yellow]{escape(processed.warning)}[/yellow]")
    report_batch(summary, noun="file(s)", verb=verb)
    return batch_exit_code(summary)


# ---------------------------------------------------------------------------
# grant / revoke
# ---------------------------------------------------------------------------

async def run_grant(args: argparse.Namespace, ctx: CommandContext) -> int:
    return await _change_access(args, ctx, grant=True)


async def run_revoke(args: argparse.Namespace, ctx: CommandContext) -> int:
    return await _change_access(args, ctx, grant=False)


async def _change_access(args: argparse.Namespace, ctx: CommandContext, *, grant: bool) -> int:
    if not args.users and not args.groups:
        raise UsageError("You must provide at least one user or group.")
    files: list[str] = args.files
    check_batch_size(len(files), ctx.settings.max_batch_size)

    maps = await ctx.resolver.cache.populate()
    params = AccessParams(access=await _access_list(args, ctx))
    targets = [BatchTarget(item=file, params=params) for file in files]
    operation = settled(ctx.files.grant if grant else ctx.files.revoke)
    action = "Grants" if grant else "Revokes"

    if len(targets) == 1:
        report = await run_single(targets[0], operation)
        print_access_reports([report], maps, action=action)
        return exit_codes.SUCCESS

    summary = summarize(await run_batch(targets, operation))
    print_access_reports(summary.successes, maps, action=action)
    report_batch(summary, noun="file(s)", verb="granted" if grant else "revoked")
    return batch_exit_code(summary)


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------

async def run_info(args: argparse.Namespace, ctx: CommandContext) -> int:
    """Show who can decrypt each file, with group IDs named where known."""
    files: list[str] = args.files
    check_batch_size(len(files), ctx.settings.max_batch_size)

    operation = settled(ctx.files.info)
    if len(files) == 1:
        info = await run_single(files[0], operation)
        out_console.print(file_info_table([info], await ctx.resolver.cache.populate()))
        return exit_codes.SUCCESS

    summary = summarize(await run_batch(files, operation))
    if summary.successes:
        out_console.print(file_info_table(summary.successes, await ctx.resolver.cache.populate()))
    report_batch(summary, noun="file(s)", verb="read")
    return batch_exit_code(summary)
