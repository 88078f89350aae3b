"""Logging configuration for the CLI process."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> None:
    """Route log records through Rich on stderr.

    Without *verbose* only warnings are shown.  With it, every
    ``ironhide`` module logs at DEBUG while third-party libraries stay
    at WARNING.
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    logging.getLogger("ironhide").setLevel(logging.DEBUG if verbose else logging.WARNING)
