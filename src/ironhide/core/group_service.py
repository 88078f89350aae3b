"""Group lifecycle: create, inspect, rename and delete.

Commands resolve the group reference first; this service only ever sees
canonical group IDs.  Every change to the directory clears the group
cache so later lookups in the same process see the new names.
"""

from __future__ import annotations

import logging

from ironhide.core.group_cache import GroupCache
from ironhide.core.models import GroupDetail, GroupRecord
from ironhide.core.protocols import GroupDirectory
from ironhide.exceptions import (
    DirectoryUnavailableError,
    GroupNameTakenError,
    IronhideError,
    RefusedOperationError,
    RemoteOperationError,
)

logger = logging.getLogger(__name__)


class GroupService:
    """Manages groups through the directory.

    Parameters
    ----------
    directory:
        Any object satisfying the :class:`GroupDirectory` protocol.
    cache:
        The process-wide group cache, used for name checks and cleared
        after every change.
    """

    def __init__(self, directory: GroupDirectory, cache: GroupCache) -> None:
        self._directory: GroupDirectory = directory
        self._cache: GroupCache = cache

    async def ensure_name_available(self, name: str, *, action: str) -> None:
        """Refuse *name* if the caller already has a group called that.

        Raises
        ------
        RemoteOperationError
            If the directory cannot be fetched to check.
        GroupNameTakenError
            If the name is in use.
        """
        try:
            taken = await self._cache.has_name(name)
        except DirectoryUnavailableError as exc:
            raise RemoteOperationError(f"Unable to make group {action} request.", hint=exc.hint) from exc
        if taken:
            raise GroupNameTakenError(name)

    async def require_admin(self, group_id: str, reference: str, *, action: str) -> None:
        """Refuse unless the caller is an admin of the group."""
        maps = await self._cache.populate()
        record = maps.by_id.get(group_id)
        if record is None or not record.is_admin:
            raise RefusedOperationError(
                f"You aren't currently an admin of '{reference}' so you may not {action} it.",
            )

    async def create(self, name: str) -> GroupRecord:
        await self.ensure_name_available(name, action="create")
        try:
            record = await self._directory.create_group(name)
        except IronhideError as exc:
            raise RemoteOperationError("Unable to make group create request.", hint=str(exc)) from exc
        logger.debug("Created group %s (%r)", record.id, name)
        self._cache.clear()
        return record

    async def detail(self, group_id: str, reference: str) -> GroupDetail:
        try:
            return await self._directory.get_group(group_id)
        except IronhideError as exc:
            raise RemoteOperationError(f"Group '{reference}' couldn't be retrieved.", hint=str(exc)) from exc

    async def rename(self, group_id: str, name: str) -> None:
        """Rename a group; the caller checks the name is free first."""
        try:
            await self._directory.rename_group(group_id, name)
        except IronhideError as exc:
            raise RemoteOperationError("Group could not be updated.", hint=str(exc)) from exc
        self._cache.clear()

    async def delete(self, group_id: str) -> None:
        try:
            await self._directory.delete_group(group_id)
        except IronhideError as exc:
            raise RemoteOperationError("Group delete request failed.", hint=str(exc)) from exc
        logger.debug("Deleted group %s", group_id)
        self._cache.clear()
