"""Interactive choice between groups that share a display name.

This module is responsible for:

* Rendering a Rich table of the competing groups, numbered from 1.
* Reading the user's choice one line at a time through questionary,
  re-prompting on anything that is not a number in range.
* Turning a closed or interrupted input stream into
  :class:`~ironhide.exceptions.UserCancelledError`.

It satisfies :class:`~ironhide.core.protocols.ChoicePrompter`.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from typing import Any

from rich.markup import escape
from rich.table import Table

from ironhide.cli.console import console, flag
from ironhide.core.models import GroupRecord
from ironhide.exceptions import EnvironmentCheckError, UserCancelledError

PromptLine = Callable[[str], Awaitable[str | None]]
"""Reads one line for *message*; ``None`` means the stream closed."""


def _import_questionary() -> Any:
    """Import questionary lazily; only prompts need it."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentCheckError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


async def questionary_prompt_line(message: str) -> str | None:
    """Read one line with questionary on the running event loop."""
    questionary = _import_questionary()
    try:
        answer: str | None = await questionary.text(message).unsafe_ask_async()
    except (EOFError, KeyboardInterrupt):
        return None
    return answer


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

def _format_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


def build_candidate_table(candidates: Sequence[GroupRecord]) -> Table:
    """Build the numbered table of candidate groups."""
    table = Table(show_header=True, header_style="bold blue", border_style="dim")
    table.add_column("Option", justify="right")
    table.add_column("ID")
    table.add_column("Admin", justify="center")
    table.add_column("Member", justify="center")
    table.add_column("Created")
    table.add_column("Updated")

    for option, group in enumerate(candidates, start=1):
        table.add_row(
            str(option),
            escape(group.id),
            flag(group.is_admin),
            flag(group.is_member),
            _format_date(group.created),
            _format_date(group.updated),
        )
    return table


def parse_choice(answer: str, size: int) -> int | None:
    """Map a typed option to a 0-based index, or ``None`` if invalid."""
    try:
        option = int(answer.strip())
    except ValueError:
        return None
    if 1 <= option <= size:
        return option - 1
    return None


# ---------------------------------------------------------------------------
# Prompter
# ---------------------------------------------------------------------------

class GroupChoicePrompter:
    """Asks which of several same-named groups to use.

    Parameters
    ----------
    prompt_line:
        Coroutine reading one line of input.  Defaults to questionary.
    """

    def __init__(self, prompt_line: PromptLine | None = None) -> None:
        self._prompt_line: PromptLine = prompt_line or questionary_prompt_line

    async def choose(self, name: str, candidates: Sequence[GroupRecord]) -> int:
        """Return the 0-based index of the group the user picks.

        Invalid answers re-prompt without limit.

        Raises
        ------
        UserCancelledError
            If the input stream closes before a valid choice.
        """
        size = len(candidates)
        console.print(
            f"\n[yellow]Multiple groups found with the provided name "
            f"'{escape(name)}', which one do you want to use?[/yellow]\n",
        )
        console.print(build_candidate_table(candidates))

        while True:
            answer = await self._prompt_line(f"Enter a choice (1 - {size})")
            if answer is None:
                raise UserCancelledError()
            index = parse_choice(answer, size)
            if index is not None:
                return index
            console.print("[red]Invalid option, please try again.[/red]")
