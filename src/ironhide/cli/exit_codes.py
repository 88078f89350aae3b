"""Exit-code constants used by the CLI layer."""

from __future__ import annotations

SUCCESS: int = 0
"""Command completed, or the user cancelled an interactive prompt."""

GENERAL_ERROR: int = 1
"""A known IronhideError was reported, or a batch had failed items."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C outside a prompt.  POSIX convention (128 + SIGINT)."""
