"""Group reference resolution.

A reference is either *escaped* (``id^<groupID>``), taken literally as a
canonical ID without touching the directory, or *bare*, resolved by
display name through the :class:`~ironhide.core.group_cache.GroupCache`.
A name shared by several groups is handed to a
:class:`~ironhide.core.protocols.ChoicePrompter`.

What happens to a bare name that matches nothing is an explicit choice
of the caller, see :class:`UnresolvedPolicy`.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable

from ironhide.core.group_cache import GroupCache
from ironhide.core.models import MultipleGroups, NameEntry, SingleGroup
from ironhide.core.protocols import ChoicePrompter
from ironhide.exceptions import (
    DirectoryUnavailableError,
    ReferenceLookupFailedError,
    UnknownReferenceError,
)

logger = logging.getLogger(__name__)

GROUP_ID_PREFIX = "id^"


class UnresolvedPolicy(enum.Enum):
    """What to do with a bare name that matches no group."""

    FAIL = "fail"
    """Raise :class:`UnknownReferenceError`."""

    ECHO = "echo"
    """Return the reference unchanged and let the service reject it."""


def is_escaped(reference: str) -> bool:
    return reference.startswith(GROUP_ID_PREFIX)


def strip_escape(reference: str) -> str:
    return reference[len(GROUP_ID_PREFIX):]


class ReferenceResolver:
    """Turns group references into canonical group IDs.

    Parameters
    ----------
    cache:
        The process-wide group cache.  The resolver is its only user.
    prompter:
        Asked to break ties between groups sharing a name.
    """

    def __init__(self, cache: GroupCache, prompter: ChoicePrompter) -> None:
        self._cache: GroupCache = cache
        self._prompter: ChoicePrompter = prompter

    @property
    def cache(self) -> GroupCache:
        return self._cache

    async def resolve(
        self,
        reference: str,
        *,
        policy: UnresolvedPolicy = UnresolvedPolicy.FAIL,
    ) -> str:
        """Resolve one reference to a canonical group ID.

        Raises
        ------
        ReferenceLookupFailedError
            If the directory had to be fetched and could not be.
        UnknownReferenceError
            If the name matches no group and *policy* is ``FAIL``.
        UserCancelledError
            If the user abandons the disambiguation prompt.
        """
        if is_escaped(reference):
            return strip_escape(reference)

        try:
            maps = await self._cache.populate()
        except DirectoryUnavailableError as exc:
            raise ReferenceLookupFailedError(
                "Unable to make request for provided group.",
                hint=exc.hint,
            ) from exc

        entry = maps.by_name.get(reference)
        if entry is None:
            if policy is UnresolvedPolicy.ECHO:
                logger.debug("No group named %r; passing it through unchanged", reference)
                return reference
            raise UnknownReferenceError(reference)

        return await self._pick(reference, entry)

    async def resolve_many(
        self,
        references: Iterable[str],
        *,
        policy: UnresolvedPolicy = UnresolvedPolicy.ECHO,
    ) -> list[str]:
        """Resolve *references* one after another, keeping input order.

        Resolution is strictly sequential: a disambiguation prompt for
        one reference completes before the next reference is looked at,
        so prompts never interleave.
        """
        resolved: list[str] = []
        for reference in references:
            resolved.append(await self.resolve(reference, policy=policy))
        return resolved

    async def _pick(self, name: str, entry: NameEntry) -> str:
        if isinstance(entry, SingleGroup):
            return entry.record.id
        if isinstance(entry, MultipleGroups):
            logger.debug("%d groups named %r; asking which one", len(entry.records), name)
            index = await self._prompter.choose(name, entry.records)
            return entry.records[index].id
        raise TypeError(f"Unexpected name entry: {entry!r}")
