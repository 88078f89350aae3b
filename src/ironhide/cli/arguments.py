"""Parsing of comma-separated user and group lists.

Commas separate entries and ``^`` is reserved for the ``id^`` escape,
so entries using either character any other way never reach the
resolver.
"""

from __future__ import annotations

import argparse
from collections.abc import Callable
from typing import TypeVar

from ironhide.core.resolver import GROUP_ID_PREFIX
from ironhide.exceptions import InvalidReferenceError

T = TypeVar("T")


def split_list(raw: str, *, kind: str = "entry") -> list[str]:
    """Split ``"a,b,c"`` into trimmed, non-empty entries."""
    entries = [entry.strip() for entry in raw.split(",")]
    if any(not entry for entry in entries):
        raise InvalidReferenceError(
            f"Empty {kind} in list '{raw}'.",
            hint="Separate entries with single commas, e.g. 'a,b'.",
        )
    return entries


def validate_group_reference(reference: str) -> str:
    """Reject group references that misuse the reserved ``^`` character."""
    body = reference[len(GROUP_ID_PREFIX):] if reference.startswith(GROUP_ID_PREFIX) else reference
    if not body:
        raise InvalidReferenceError(f"Group reference '{reference}' has no ID after '{GROUP_ID_PREFIX}'.")
    if "^" in body:
        raise InvalidReferenceError(
            f"Group reference '{reference}' contains the reserved character '^'.",
            hint=f"Refer to a group by ID as '{GROUP_ID_PREFIX}<groupID>'.",
        )
    return reference


def validate_group_name(name: str) -> str:
    """Reject names for new groups that could not be referred to later."""
    if not name.strip():
        raise InvalidReferenceError("Group names cannot be empty.")
    if "," in name or "^" in name:
        raise InvalidReferenceError("Group names cannot contain commas or carets.")
    return name


def parse_group_list(raw: str) -> list[str]:
    return [validate_group_reference(entry) for entry in split_list(raw, kind="group")]


def parse_user_list(raw: str) -> list[str]:
    return split_list(raw, kind="user")


def _argparse_type(parser_func: Callable[[str], T]) -> Callable[[str], T]:
    """Adapt a list parser so argparse reports failures as usage errors."""

    def convert(raw: str) -> T:
        try:
            return parser_func(raw)
        except InvalidReferenceError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc

    convert.__name__ = parser_func.__name__
    return convert


group_list_type = _argparse_type(parse_group_list)
user_list_type = _argparse_type(parse_user_list)
group_reference_type = _argparse_type(validate_group_reference)
group_name_type = _argparse_type(validate_group_name)
