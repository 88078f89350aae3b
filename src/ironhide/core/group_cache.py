"""Process-lifetime cache of the caller's group directory.

The directory is fetched at most once per process.  Both lookup maps
are built from that single snapshot and published together, so the
cache is either empty or complete, never partially populated.

Concurrency
-----------
There is no lock.  The cache runs on a single-threaded event loop and
callers never trigger two first-populations concurrently.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ironhide.core.models import GroupMaps, GroupRecord, MultipleGroups, NameEntry, SingleGroup
from ironhide.core.protocols import GroupDirectory
from ironhide.exceptions import DirectoryUnavailableError, IronhideError

logger = logging.getLogger(__name__)


def build_group_maps(records: Iterable[GroupRecord]) -> GroupMaps:
    """Index *records* by display name and by canonical ID.

    Unnamed records only go into the ID map; they can be reached with
    an escaped ``id^`` reference.  A name seen a second time turns its
    entry into :class:`MultipleGroups`, in directory order.
    """
    by_name: dict[str, NameEntry] = {}
    by_id: dict[str, GroupRecord] = {}

    for record in records:
        by_id[record.id] = record
        if not record.name:
            continue
        existing = by_name.get(record.name)
        if existing is None:
            by_name[record.name] = SingleGroup(record)
        elif isinstance(existing, SingleGroup):
            by_name[record.name] = MultipleGroups((existing.record, record))
        else:
            by_name[record.name] = MultipleGroups((*existing.records, record))

    return GroupMaps(by_name=by_name, by_id=by_id)


class GroupCache:
    """Lazily populated, explicitly cleared group directory cache.

    Parameters
    ----------
    directory:
        Any object satisfying the :class:`GroupDirectory` protocol.
    """

    def __init__(self, directory: GroupDirectory) -> None:
        self._directory: GroupDirectory = directory
        self._maps: GroupMaps | None = None

    @property
    def is_populated(self) -> bool:
        return self._maps is not None

    async def populate(self) -> GroupMaps:
        """Return the group maps, fetching the directory on first use.

        Raises
        ------
        DirectoryUnavailableError
            When the fetch fails.  The cache stays empty so a later call
            retries.
        """
        if self._maps is not None:
            logger.debug("Group cache hit (%d groups)", len(self._maps.by_id))
            return self._maps

        logger.debug("Fetching group directory")
        try:
            records = await self._directory.list_groups()
        except IronhideError as exc:
            raise DirectoryUnavailableError(
                "Unable to make request to lookup group information.",
                hint=str(exc),
            ) from exc
        except Exception as exc:
            raise DirectoryUnavailableError(
                f"Unexpected directory error: {exc}",
            ) from exc

        maps = build_group_maps(records)
        self._maps = maps
        logger.debug("Cached %d groups under %d names", len(maps.by_id), len(maps.by_name))
        return maps

    async def has_name(self, name: str) -> bool:
        """Whether any of the caller's groups is called *name*.

        Raises
        ------
        DirectoryUnavailableError
            When the directory has to be fetched and cannot be.
        """
        maps = await self.populate()
        return name in maps.by_name

    def clear(self) -> None:
        """Forget the cached directory; the next populate re-fetches."""
        self._maps = None
