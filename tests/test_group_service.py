"""Tests for group create, detail, rename and delete."""

from __future__ import annotations

from typing import Any

import pytest

from conftest import FakeDirectory, make_group
from ironhide.core.group_cache import GroupCache
from ironhide.core.group_service import GroupService
from ironhide.exceptions import GroupNameTakenError, RefusedOperationError, RemoteOperationError


def _service(*groups: Any) -> tuple[GroupService, FakeDirectory, GroupCache]:
    directory = FakeDirectory(groups or [make_group("gid1", "gname")])
    cache = GroupCache(directory)
    return GroupService(directory, cache), directory, cache


class _FailingDirectory(FakeDirectory):
    async def create_group(self, name: str) -> Any:
        raise RemoteOperationError("quota reached")

    async def get_group(self, group_id: str) -> Any:
        raise RemoteOperationError("gone")

    async def delete_group(self, group_id: str) -> None:
        raise RemoteOperationError("forbidden")


# ---------------------------------------------------------------------------
# Name checks
# ---------------------------------------------------------------------------

class TestNameChecks:
    def test_free_name(self, run: Any) -> None:
        service, _, _ = _service()
        run(service.ensure_name_available("other", action="create"))

    def test_taken_name(self, run: Any) -> None:
        service, _, _ = _service()
        with pytest.raises(GroupNameTakenError, match="'gname'"):
            run(service.ensure_name_available("gname", action="create"))

    def test_directory_down(self, run: Any) -> None:
        directory = FakeDirectory(error=RemoteOperationError("offline"))
        service = GroupService(directory, GroupCache(directory))
        with pytest.raises(RemoteOperationError, match="Unable to make group update request."):
            run(service.ensure_name_available("x", action="update"))

    def test_require_admin(self, run: Any) -> None:
        service, _, _ = _service(make_group("gid1", "gname"), make_group("gid2", "other", is_admin=False))
        run(service.require_admin("gid1", "gname", action="delete"))
        with pytest.raises(RefusedOperationError, match="may not delete it"):
            run(service.require_admin("gid2", "other", action="delete"))

    def test_require_admin_unknown_id(self, run: Any) -> None:
        service, _, _ = _service()
        with pytest.raises(RefusedOperationError):
            run(service.require_admin("raw", "id^raw", action="rename"))


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestLifecycle:
    def test_create_clears_cache(self, run: Any) -> None:
        service, directory, cache = _service()

        record = run(service.create("fresh"))

        assert record.name == "fresh"
        assert not cache.is_populated
        assert run(cache.has_name("fresh"))
        assert directory.calls == 2

    def test_create_failure(self, run: Any) -> None:
        directory = _FailingDirectory()
        service = GroupService(directory, GroupCache(directory))
        with pytest.raises(RemoteOperationError, match="Unable to make group create request.") as exc_info:
            run(service.create("fresh"))
        assert exc_info.value.hint == "quota reached"

    def test_detail(self, run: Any) -> None:
        service, _, _ = _service()
        detail = run(service.detail("gid1", "gname"))
        assert detail.can_see_details
        assert detail.admins == ("admin@example.com",)

    def test_detail_failure(self, run: Any) -> None:
        directory = _FailingDirectory()
        service = GroupService(directory, GroupCache(directory))
        with pytest.raises(RemoteOperationError, match="Group 'ops' couldn't be retrieved."):
            run(service.detail("gid1", "ops"))

    def test_rename(self, run: Any) -> None:
        service, directory, cache = _service()
        run(cache.populate())

        run(service.rename("gid1", "renamed"))

        assert directory.renamed == [("gid1", "renamed")]
        assert run(cache.has_name("renamed"))
        assert not run(cache.has_name("gname"))

    def test_delete(self, run: Any) -> None:
        service, directory, cache = _service()
        run(cache.populate())

        run(service.delete("gid1"))

        assert directory.deleted == ["gid1"]
        assert not cache.is_populated

    def test_delete_failure(self, run: Any) -> None:
        directory = _FailingDirectory()
        service = GroupService(directory, GroupCache(directory))
        with pytest.raises(RemoteOperationError, match="Group delete request failed."):
            run(service.delete("gid1"))
