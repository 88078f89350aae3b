"""Shared pytest fixtures and fakes for the ironhide test suite.

Guidelines
----------
* No network access and no terminal in any test.
* The key-management backend is replaced by the in-memory fakes below.
* Async code is driven with ``asyncio.run`` inside each test.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from ironhide.core.models import (
    AccessChange,
    AccessList,
    AccessResult,
    DeviceRecord,
    DocumentMetadata,
    GroupDetail,
    GroupRecord,
)
from ironhide.core.protocols import Backend
from ironhide.exceptions import FileAccessError, RemoteOperationError, UserCancelledError

CREATED = datetime(2023, 1, 2, tzinfo=timezone.utc)
UPDATED = datetime(2023, 3, 4, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def make_group(group_id: str, name: str | None = "group", **overrides: Any) -> GroupRecord:
    defaults: dict[str, Any] = {
        "id": group_id,
        "name": name,
        "is_admin": True,
        "is_member": True,
        "created": CREATED,
        "updated": UPDATED,
    }
    defaults.update(overrides)
    return GroupRecord(**defaults)


def make_detail(record: GroupRecord, **overrides: Any) -> GroupDetail:
    defaults: dict[str, Any] = {
        "id": record.id,
        "name": record.name,
        "is_admin": record.is_admin,
        "is_member": record.is_member,
        "created": record.created,
        "updated": record.updated,
        "admins": ("admin@example.com",),
        "members": ("admin@example.com", "member@example.com"),
    }
    defaults.update(overrides)
    return GroupDetail(**defaults)


def make_device(device_id: int, *, current: bool = False) -> DeviceRecord:
    return DeviceRecord(
        id=device_id,
        name=f"device-{device_id}",
        is_current_device=current,
        created=CREATED,
        updated=UPDATED,
    )


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeDirectory:
    """GroupDirectory over an in-memory list, counting fetches and recording changes."""

    def __init__(self, groups: Sequence[GroupRecord] = (), *, error: Exception | None = None) -> None:
        self.groups = list(groups)
        self.error = error
        self.calls = 0
        self.renamed: list[tuple[str, str]] = []
        self.deleted: list[str] = []

    async def list_groups(self) -> Sequence[GroupRecord]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.groups)

    async def get_group(self, group_id: str) -> GroupDetail:
        record = next((group for group in self.groups if group.id == group_id), None)
        if record is None:
            raise RemoteOperationError(f"Group {group_id} not found.")
        return make_detail(record)

    async def create_group(self, name: str) -> GroupRecord:
        record = make_group(f"gid{len(self.groups) + 1}", name)
        self.groups.append(record)
        return record

    async def rename_group(self, group_id: str, name: str) -> None:
        self.renamed.append((group_id, name))
        self.groups = [replace(group, name=name) if group.id == group_id else group for group in self.groups]

    async def delete_group(self, group_id: str) -> None:
        self.deleted.append(group_id)
        self.groups = [group for group in self.groups if group.id != group_id]


class ScriptedPrompter:
    """ChoicePrompter answering from a fixed list of indexes."""

    def __init__(self, *answers: int) -> None:
        self.answers = list(answers)
        self.asked: list[tuple[str, tuple[GroupRecord, ...]]] = []

    async def choose(self, name: str, candidates: Sequence[GroupRecord]) -> int:
        self.asked.append((name, tuple(candidates)))
        if not self.answers:
            raise UserCancelledError()
        return self.answers.pop(0)


class FakeDocuments:
    """DocumentProvider treating ``b"ENC:<id>:"`` prefixed bytes as encrypted."""

    def __init__(self, *, failing_ids: Sequence[str] = ()) -> None:
        self.failing_ids = set(failing_ids)
        self.encrypted_with: list[AccessList] = []
        self.access_calls: list[tuple[str, str, AccessList]] = []

    async def document_id_of(self, encrypted: bytes) -> str | None:
        if not encrypted.startswith(b"ENC:"):
            return None
        return encrypted.split(b":", 2)[1].decode()

    async def encrypt(self, data: bytes, access: AccessList) -> bytes:
        self.encrypted_with.append(access)
        return b"ENC:doc-" + str(len(self.encrypted_with)).encode() + b":" + data

    async def decrypt(self, document_id: str, encrypted: bytes) -> bytes:
        if document_id in self.failing_ids:
            raise RemoteOperationError(f"Document {document_id} is not shared with you.")
        return encrypted.split(b":", 2)[2]

    async def metadata(self, document_id: str) -> DocumentMetadata:
        return DocumentMetadata(
            id=document_id,
            association="owner",
            users=("owner@example.com",),
            groups=("gid1", "gid9"),
        )

    async def grant_access(self, document_id: str, access: AccessList) -> AccessResult:
        return self._change("grant", document_id, access)

    async def revoke_access(self, document_id: str, access: AccessList) -> AccessResult:
        return self._change("revoke", document_id, access)

    def _change(self, action: str, document_id: str, access: AccessList) -> AccessResult:
        self.access_calls.append((action, document_id, access))
        succeeded = tuple(AccessChange(id=user, kind="user") for user in access.users)
        succeeded += tuple(AccessChange(id=group, kind="group") for group in access.groups if group != "missing")
        failed = tuple(
            AccessChange(id=group, kind="group", error=f"Group {group} not found")
            for group in access.groups
            if group == "missing"
        )
        return AccessResult(succeeded=succeeded, failed=failed)


class FakeDevices:
    def __init__(self, devices: Sequence[DeviceRecord] = (), *, failing: Sequence[int] = ()) -> None:
        self.devices = list(devices)
        self.failing = set(failing)
        self.deleted: list[int] = []

    async def list_devices(self) -> Sequence[DeviceRecord]:
        return list(self.devices)

    async def delete_device(self, device_id: int) -> int:
        if device_id in self.failing:
            raise RemoteOperationError(f"Device {device_id} could not be deleted.")
        self.deleted.append(device_id)
        return device_id


class FakeMembership:
    def __init__(self, *, rejected: Sequence[str] = ()) -> None:
        self.rejected = set(rejected)
        self.added: list[tuple[str, str]] = []
        self.removed: list[tuple[str, str]] = []
        self.admins_added: list[tuple[str, str]] = []
        self.admins_removed: list[tuple[str, str]] = []

    async def add_member(self, group_id: str, user: str) -> None:
        if user in self.rejected:
            raise RemoteOperationError(f"User '{user}' does not exist.")
        self.added.append((group_id, user))

    async def remove_member(self, group_id: str, user: str) -> None:
        if user in self.rejected:
            raise RemoteOperationError(f"User '{user}' is not a member.")
        self.removed.append((group_id, user))

    async def add_admins(self, group_id: str, users: Sequence[str]) -> AccessResult:
        return self._admins(self.admins_added, group_id, users)

    async def remove_admins(self, group_id: str, users: Sequence[str]) -> AccessResult:
        return self._admins(self.admins_removed, group_id, users)

    def _admins(self, log: list[tuple[str, str]], group_id: str, users: Sequence[str]) -> AccessResult:
        log.extend((group_id, user) for user in users if user not in self.rejected)
        return AccessResult(
            succeeded=tuple(AccessChange(id=user, kind="user") for user in users if user not in self.rejected),
            failed=tuple(
                AccessChange(id=user, kind="user", error=f"User '{user}' does not exist.")
                for user in users
                if user in self.rejected
            ),
        )


class MemoryFileStore:
    """FileStore over a dict, keyed by the path string as given."""

    def __init__(self, files: dict[str, bytes] | None = None, *, locked: Sequence[str] = ()) -> None:
        self.files: dict[str, bytes] = dict(files or {})
        self.locked = set(locked)

    def check_readable(self, path: Path) -> None:
        if str(path) not in self.files:
            raise FileAccessError(f"Provided path '{path}' doesn't exist or is not readable.")

    def check_writable_destination(self, path: Path) -> None:
        if str(path) in self.files:
            raise FileAccessError(f"Output path '{path}' already exists.")

    def read_bytes(self, path: Path) -> bytes:
        return self.files[str(path)]

    def write_bytes(self, path: Path, data: bytes) -> None:
        self.files[str(path)] = data

    def delete(self, path: Path) -> None:
        if str(path) in self.locked:
            raise FileAccessError(f"Unable to delete '{path}' as it is not writable.")
        del self.files[str(path)]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def run() -> Any:
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run


@pytest.fixture()
def backend() -> Backend:
    return Backend(
        directory=FakeDirectory([make_group("gid1", "gname"), make_group("gid2", "dup"), make_group("gid3", "dup")]),
        documents=FakeDocuments(),
        devices=FakeDevices([make_device(1, current=True), make_device(2), make_device(3)]),
        membership=FakeMembership(rejected=["nobody@example.com"]),
    )


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("IRONHIDE_BACKEND", "IRONHIDE_KEYFILE", "IRONHIDE_MAX_BATCH", "IRONHIDE_ENCRYPTED_EXTENSION"):
        monkeypatch.delenv(name, raising=False)
