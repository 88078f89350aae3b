"""``ironhide user ...`` — device key management."""

from __future__ import annotations

import argparse

from ironhide.cli import exit_codes
from ironhide.cli.console import console
from ironhide.cli.context import CommandContext
from ironhide.cli.report import batch_exit_code, report_batch
from ironhide.core.batch import check_batch_size, run_batch, run_single, settled, summarize


async def run_device_delete(args: argparse.Namespace, ctx: CommandContext) -> int:
    """Delete device keys by ID, never the current device's."""
    device_ids: list[str] = args.device_ids
    check_batch_size(len(device_ids), ctx.settings.max_batch_size, noun="devices")
    await ctx.devices.ensure_not_current_device(device_ids)

    operation = settled(ctx.devices.delete)
    if len(device_ids) == 1:
        deleted = await run_single(device_ids[0], operation)
        console.print(f"[green]Device key {deleted} successfully deleted.[/green]")
        return exit_codes.SUCCESS

    summary = summarize(await run_batch(device_ids, operation))
    report_batch(summary, noun="device key(s)", verb="deleted")
    return batch_exit_code(summary)
