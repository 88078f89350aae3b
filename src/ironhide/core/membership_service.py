"""Group membership changes.

Members are changed one user per batch item; admins are changed in one
call whose result lists every user that failed.
"""

from __future__ import annotations

from collections.abc import Sequence

from ironhide.core.models import AccessResult, BatchTarget
from ironhide.core.protocols import MembershipProvider


class MembershipService:
    """Adds and removes members and admins of a resolved group.

    Targets carry the user as the item and the canonical group ID as the
    shared parameter.
    """

    def __init__(self, membership: MembershipProvider) -> None:
        self._membership: MembershipProvider = membership

    async def add(self, target: BatchTarget[str, str]) -> str:
        await self._membership.add_member(target.params, target.item)
        return target.item

    async def remove(self, target: BatchTarget[str, str]) -> str:
        await self._membership.remove_member(target.params, target.item)
        return target.item

    async def add_admins(self, group_id: str, users: Sequence[str]) -> AccessResult:
        """Grant admin rights to *users* in a single call."""
        return await self._membership.add_admins(group_id, list(users))

    async def remove_admins(self, group_id: str, users: Sequence[str]) -> AccessResult:
        return await self._membership.remove_admins(group_id, list(users))
