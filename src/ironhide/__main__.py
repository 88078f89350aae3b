"""Allow ``python -m ironhide`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m ironhide`` behaves identically to the ``ironhide`` console
script.
"""

from __future__ import annotations

from ironhide.cli.app import cli

if __name__ == "__main__":
    cli()
