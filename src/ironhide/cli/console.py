"""Shared Rich consoles.

Messages, prompts and summaries go to stderr through :data:`console`;
result tables go to stdout through :data:`out_console`, so ``-o -``
output and piped tables stay clean.
"""

from __future__ import annotations

from rich.console import Console

console = Console(stderr=True, highlight=False)
out_console = Console(highlight=False)

CHECK = "[green]✔[/green]"
NOPE = "[red]✖[/red]"


def flag(value: bool) -> str:
    """Render a boolean as a coloured tick or cross."""
    return CHECK if value else NOPE
