"""CLI application entry point and command routing for ironhide.

This module is the **sole error boundary** for the entire application.
It catches :class:`~ironhide.exceptions.IronhideError`,
``KeyboardInterrupt`` and any unexpected ``Exception``, renders a
user-friendly message via Rich and returns well-defined exit codes.

Architecture notes
------------------
* No business logic lives here; handlers in the ``*_commands`` modules
  delegate to the core services.
* Each invocation runs its handler on one ``asyncio`` event loop.
* :class:`~ironhide.exceptions.UserCancelledError` is not an error: the
  process exits quietly with :data:`exit_codes.SUCCESS`.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from rich.markup import escape

from ironhide.cli import exit_codes
from ironhide.cli.arguments import group_list_type, group_name_type, group_reference_type, user_list_type
from ironhide.cli.console import console
from ironhide.cli.context import build_context
from ironhide.cli.logging_setup import configure_logging
from ironhide.config import Settings
from ironhide.exceptions import IronhideError, UserCancelledError
from ironhide.infra.backend_loader import load_backend
from ironhide.version import __version__

GROUP_HELP = "Name of the group. Refer to a group by ID with the 'id^' prefix, e.g. 'id^groupID'."


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _add_file_commands(subparsers: argparse._SubParsersAction) -> None:
    from ironhide.cli import file_commands

    file_parser = subparsers.add_parser("file", help="Encrypt, decrypt and share files.")
    file_parser.set_defaults(help_parser=file_parser)
    commands = file_parser.add_subparsers(title="commands", metavar="COMMAND")

    encrypt = commands.add_parser("encrypt", help="Encrypt a file or list of files.")
    encrypt.add_argument("files", nargs="*", help="Path of file or files to encrypt.")
    encrypt.add_argument("-s", "--stdin", action="store_true", help="Read the content to encrypt from stdin. Requires -o.")
    encrypt.add_argument("-u", "--users", type=user_list_type, help="Comma-separated user emails to also encrypt to.")
    encrypt.add_argument("-g", "--groups", type=group_list_type, help="Comma-separated groups to also encrypt to.")
    encrypt.add_argument("-o", "--out", help="Output file; single file only. Use '-o -' for stdout.")
    encrypt.add_argument("-d", "--delete", action="store_true", help="Delete the source file after encryption.")
    encrypt.set_defaults(handler=file_commands.run_encrypt)

    decrypt = commands.add_parser("decrypt", help="Decrypt a file or list of files.")
    decrypt.add_argument("files", nargs="*", help="Path of file or files to decrypt.")
    decrypt.add_argument("-s", "--stdin", action="store_true", help="Read the content to decrypt from stdin. Requires -o.")
    decrypt.add_argument("-o", "--out", help="Output file; single file only. Use '-o -' for stdout.")
    decrypt.add_argument("-d", "--delete", action="store_true", help="Delete the encrypted file after decryption.")
    decrypt.set_defaults(handler=file_commands.run_decrypt)

    for name, handler, verb in (
        ("grant", file_commands.run_grant, "Grant"),
        ("revoke", file_commands.run_revoke, "Revoke"),
    ):
        access = commands.add_parser(name, help=f"{verb} decryption access to a file or list of files.")
        access.add_argument("files", nargs="+", help="Path of file or files to change access to.")
        access.add_argument("-u", "--users", type=user_list_type, help="Comma-separated list of user emails.")
        access.add_argument("-g", "--groups", type=group_list_type, help="Comma-separated list of groups.")
        access.set_defaults(handler=handler)

    info = commands.add_parser("info", help="Show who has access to an encrypted file or list of files.")
    info.add_argument("files", nargs="+", help="Path of file or files to inspect.")
    info.set_defaults(handler=file_commands.run_info)


def _add_group_commands(subparsers: argparse._SubParsersAction) -> None:
    from ironhide.cli import group_commands

    group_parser = subparsers.add_parser("group", help="Create and manage groups, members and admins.")
    group_parser.set_defaults(help_parser=group_parser)
    commands = group_parser.add_subparsers(title="commands", metavar="COMMAND")

    listing = commands.add_parser("list", help="List the groups you're an admin or member of.")
    listing.set_defaults(handler=group_commands.run_list)

    create = commands.add_parser("create", help="Create a new group. You become its first admin and member.")
    create.add_argument("name", type=group_name_type, help="Name of the new group.")
    create.set_defaults(handler=group_commands.run_create)

    info = commands.add_parser("info", help="Show a group's admins and members.")
    info.add_argument("group", type=group_reference_type, help=GROUP_HELP)
    info.set_defaults(handler=group_commands.run_info)

    rename = commands.add_parser("rename", help="Rename a group you're an admin of.")
    rename.add_argument("group", type=group_reference_type, help=GROUP_HELP)
    rename.add_argument("new_name", type=group_name_type, help="New name for the group.")
    rename.set_defaults(handler=group_commands.run_rename)

    delete = commands.add_parser("delete", help="Delete a group you're an admin of.")
    delete.add_argument("group", type=group_reference_type, help=GROUP_HELP)
    delete.set_defaults(handler=group_commands.run_delete)

    for name, handler, help_text in (
        ("add-member", group_commands.run_add_member, "Add members to a group by email."),
        ("remove-member", group_commands.run_remove_member, "Remove members from a group by email."),
        ("add-admin", group_commands.run_add_admin, "Make users admins of a group by email."),
        ("remove-admin", group_commands.run_remove_admin, "Remove admins from a group by email."),
    ):
        members = commands.add_parser(name, help=help_text)
        members.add_argument("group", type=group_reference_type, help=GROUP_HELP)
        members.add_argument("-u", "--users", type=user_list_type, required=True, help="Comma-separated list of user emails.")
        members.set_defaults(handler=handler)


def _add_user_commands(subparsers: argparse._SubParsersAction) -> None:
    from ironhide.cli import user_commands

    user_parser = subparsers.add_parser("user", help="Manage your device keys.")
    user_parser.set_defaults(help_parser=user_parser)
    commands = user_parser.add_subparsers(title="commands", metavar="COMMAND")

    delete = commands.add_parser("device-delete", help="Deauthorize one or more other devices.")
    delete.add_argument("device_ids", nargs="+", metavar="DEVICE_ID", help="ID of the device keys to delete.")
    delete.set_defaults(handler=user_commands.run_device_delete)


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="ironhide",
        description="Encrypt files and share them with users and groups.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging on stderr.")
    parser.add_argument("-k", "--keyfile", help="Path to the device key file. Overrides IRONHIDE_KEYFILE.")
    parser.set_defaults(help_parser=parser, handler=None)

    subparsers = parser.add_subparsers(title="command groups", metavar="GROUP")
    _add_file_commands(subparsers)
    _add_group_commands(subparsers)
    _add_user_commands(subparsers)
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

async def _dispatch(args: argparse.Namespace, settings: Settings) -> int:
    backend = load_backend(settings)
    ctx = build_context(settings, backend)
    return await args.handler(args, ctx)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the ironhide CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.handler is None:
        args.help_parser.print_help()
        return exit_codes.SUCCESS

    configure_logging(args.verbose)
    settings = Settings.from_env().with_overrides(keyfile=args.keyfile)
    return asyncio.run(_dispatch(args, settings))


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point."""
    try:
        code = main()
        sys.exit(code)
    except UserCancelledError:
        sys.exit(exit_codes.SUCCESS)
    except IronhideError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
