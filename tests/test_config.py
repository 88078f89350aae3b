"""Tests for environment settings and backend loading."""

from __future__ import annotations

import sys
import types
from pathlib import Path
from typing import Any

import pytest

from conftest import FakeDevices, FakeDirectory, FakeDocuments, FakeMembership
from ironhide.config import DEFAULT_KEYFILE, Settings
from ironhide.core.protocols import Backend
from ironhide.exceptions import ConfigurationError, EnvironmentCheckError, RemoteOperationError
from ironhide.infra.backend_loader import load_backend, resolve_factory


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings.from_env({})
        assert settings.backend is None
        assert settings.keyfile == DEFAULT_KEYFILE
        assert settings.max_batch_size == 75
        assert settings.encrypted_extension == ".iron"

    def test_reads_environment(self) -> None:
        settings = Settings.from_env(
            {
                "IRONHIDE_BACKEND": "sdk:create",
                "IRONHIDE_KEYFILE": "/tmp/keys",
                "IRONHIDE_MAX_BATCH": "10",
                "IRONHIDE_ENCRYPTED_EXTENSION": "enc",
            },
        )
        assert settings.backend == "sdk:create"
        assert settings.keyfile == Path("/tmp/keys")
        assert settings.max_batch_size == 10
        assert settings.encrypted_extension == ".enc"

    def test_blank_values_fall_back(self) -> None:
        settings = Settings.from_env({"IRONHIDE_BACKEND": "  ", "IRONHIDE_MAX_BATCH": ""})
        assert settings.backend is None
        assert settings.max_batch_size == 75

    def test_defaults_to_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IRONHIDE_MAX_BATCH", "3")
        assert Settings.from_env().max_batch_size == 3

    @pytest.mark.parametrize(("raw", "match"), [("many", "must be an integer"), ("0", "at least 1")])
    def test_bad_batch_size(self, raw: str, match: str) -> None:
        with pytest.raises(ConfigurationError, match=match):
            Settings.from_env({"IRONHIDE_MAX_BATCH": raw})

    def test_keyfile_override(self) -> None:
        settings = Settings().with_overrides(keyfile="/other/keys")
        assert settings.keyfile == Path("/other/keys")

    def test_no_override_returns_same(self) -> None:
        settings = Settings()
        assert settings.with_overrides() is settings

    def test_keyfile_path_expands_home(self) -> None:
        assert "~" not in str(Settings().keyfile_path)


# ---------------------------------------------------------------------------
# Backend loading
# ---------------------------------------------------------------------------

def _fake_backend() -> Backend:
    return Backend(
        directory=FakeDirectory(),
        documents=FakeDocuments(),
        devices=FakeDevices(),
        membership=FakeMembership(),
    )


@pytest.fixture()
def adapter_module(monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    """Register an importable backend adapter module for the test."""
    module = types.ModuleType("fake_ironhide_adapter")
    received: list[Settings] = []

    def create(settings: Settings) -> Backend:
        received.append(settings)
        return _fake_backend()

    def broken(settings: Settings) -> Backend:
        raise RuntimeError("keys missing")

    def offline(settings: Settings) -> Backend:
        raise RemoteOperationError("Service unreachable.")

    def wrong_type(settings: Settings) -> Any:
        return object()

    module.create = create  # type: ignore[attr-defined]
    module.broken = broken  # type: ignore[attr-defined]
    module.offline = offline  # type: ignore[attr-defined]
    module.wrong_type = wrong_type  # type: ignore[attr-defined]
    module.not_callable = 42  # type: ignore[attr-defined]
    module.received = received  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "fake_ironhide_adapter", module)
    return module


class TestResolveFactory:
    @pytest.mark.parametrize("import_path", ["no_colon", ":attr", "module:"])
    def test_malformed(self, import_path: str) -> None:
        with pytest.raises(ConfigurationError, match="Invalid backend"):
            resolve_factory(import_path)

    def test_missing_module(self) -> None:
        with pytest.raises(EnvironmentCheckError, match="not installed"):
            resolve_factory("ironhide_no_such_adapter_xyz:create")

    def test_not_callable(self, adapter_module: types.ModuleType) -> None:
        with pytest.raises(ConfigurationError, match="not callable"):
            resolve_factory("fake_ironhide_adapter:not_callable")

    def test_found(self, adapter_module: types.ModuleType) -> None:
        assert resolve_factory("fake_ironhide_adapter:create") is adapter_module.create


class TestLoadBackend:
    def test_unconfigured(self) -> None:
        with pytest.raises(ConfigurationError, match="No key-management backend"):
            load_backend(Settings())

    def test_factory_receives_settings(self, adapter_module: types.ModuleType) -> None:
        settings = Settings(backend="fake_ironhide_adapter:create")
        assert isinstance(load_backend(settings), Backend)
        assert adapter_module.received == [settings]

    def test_factory_crash_is_configuration_error(self, adapter_module: types.ModuleType) -> None:
        with pytest.raises(ConfigurationError, match="keys missing"):
            load_backend(Settings(backend="fake_ironhide_adapter:broken"))

    def test_domain_error_passes_through(self, adapter_module: types.ModuleType) -> None:
        with pytest.raises(RemoteOperationError, match="Service unreachable"):
            load_backend(Settings(backend="fake_ironhide_adapter:offline"))

    def test_wrong_return_type(self, adapter_module: types.ModuleType) -> None:
        with pytest.raises(ConfigurationError, match="not a Backend"):
            load_backend(Settings(backend="fake_ironhide_adapter:wrong_type"))
