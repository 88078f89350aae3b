"""Protocols (interfaces) consumed by the core layer.

These define the contracts that backend adapters and the CLI must
satisfy.  Core code depends ONLY on these protocols, never on concrete
implementations.  Every remote call is a coroutine: the engine runs on a
single-threaded event loop and each call is a suspension point.

Backend implementations must map all SDK-specific exceptions to
:class:`~ironhide.exceptions.RemoteOperationError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ironhide.core.models import (
    AccessList,
    AccessResult,
    DeviceRecord,
    DocumentMetadata,
    GroupDetail,
    GroupRecord,
)


class GroupDirectory(Protocol):
    """Lists, inspects and manages the groups the current identity belongs to."""

    async def list_groups(self) -> Sequence[GroupRecord]:
        """Return every group the caller is an admin or member of.

        Order is the service's response order; it decides the order of
        candidates when several groups share a name.

        Raises
        ------
        RemoteOperationError
            When the directory cannot be fetched.
        """
        ...  # pragma: no cover

    async def get_group(self, group_id: str) -> GroupDetail:
        ...  # pragma: no cover

    async def create_group(self, name: str) -> GroupRecord:
        """Create a group with the caller as its first admin and member."""
        ...  # pragma: no cover

    async def rename_group(self, group_id: str, name: str) -> None:
        ...  # pragma: no cover

    async def delete_group(self, group_id: str) -> None:
        ...  # pragma: no cover


class DocumentProvider(Protocol):
    """Encrypts, decrypts and re-shares documents through the SDK."""

    async def document_id_of(self, encrypted: bytes) -> str | None:
        """Parse the document ID out of an encrypted header.

        Returns ``None`` when *encrypted* is not an encrypted document.
        """
        ...  # pragma: no cover

    async def encrypt(self, data: bytes, access: AccessList) -> bytes:
        """Encrypt *data* to the caller plus everyone in *access*."""
        ...  # pragma: no cover

    async def decrypt(self, document_id: str, encrypted: bytes) -> bytes:
        """Decrypt a document the caller has access to."""
        ...  # pragma: no cover

    async def grant_access(self, document_id: str, access: AccessList) -> AccessResult:
        """Grant decrypt access; per-user/group failures are in the result."""
        ...  # pragma: no cover

    async def revoke_access(self, document_id: str, access: AccessList) -> AccessResult:
        """Revoke decrypt access; per-user/group failures are in the result."""
        ...  # pragma: no cover

    async def metadata(self, document_id: str) -> DocumentMetadata:
        ...  # pragma: no cover


class DeviceProvider(Protocol):
    """Manages the current user's device keys."""

    async def list_devices(self) -> Sequence[DeviceRecord]:
        ...  # pragma: no cover

    async def delete_device(self, device_id: int) -> int:
        """Delete the device key pair and return the deleted ID."""
        ...  # pragma: no cover


class MembershipProvider(Protocol):
    """Adds and removes group members and admins."""

    async def add_member(self, group_id: str, user: str) -> None:
        ...  # pragma: no cover

    async def remove_member(self, group_id: str, user: str) -> None:
        ...  # pragma: no cover

    async def add_admins(self, group_id: str, users: Sequence[str]) -> AccessResult:
        """Grant admin rights in one call; per-user failures are in the result."""
        ...  # pragma: no cover

    async def remove_admins(self, group_id: str, users: Sequence[str]) -> AccessResult:
        ...  # pragma: no cover


class ChoicePrompter(Protocol):
    """Asks the user to pick one group among several sharing a name."""

    async def choose(self, name: str, candidates: Sequence[GroupRecord]) -> int:
        """Return the 0-based index of the chosen candidate.

        Raises
        ------
        UserCancelledError
            When the input stream closes before a valid choice.
        """
        ...  # pragma: no cover


class FileStore(Protocol):
    """Local filesystem access used by file commands."""

    def check_readable(self, path: Path) -> None:
        ...  # pragma: no cover

    def check_writable_destination(self, path: Path) -> None:
        ...  # pragma: no cover

    def read_bytes(self, path: Path) -> bytes:
        ...  # pragma: no cover

    def write_bytes(self, path: Path, data: bytes) -> None:
        ...  # pragma: no cover

    def delete(self, path: Path) -> None:
        ...  # pragma: no cover


@dataclass(frozen=True)
class Backend:
    """The set of remote collaborators a backend factory returns."""

    directory: GroupDirectory
    documents: DocumentProvider
    devices: DeviceProvider
    membership: MembershipProvider
