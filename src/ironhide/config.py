"""Runtime settings read from the environment.

Settings are resolved once per CLI invocation.  Command-line flags take
precedence and are applied with :meth:`Settings.with_overrides`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from ironhide.exceptions import ConfigurationError

IRONHIDE_BACKEND = "IRONHIDE_BACKEND"
IRONHIDE_KEYFILE = "IRONHIDE_KEYFILE"
IRONHIDE_MAX_BATCH = "IRONHIDE_MAX_BATCH"
IRONHIDE_ENCRYPTED_EXTENSION = "IRONHIDE_ENCRYPTED_EXTENSION"

DEFAULT_KEYFILE: Path = Path("~/.iron/keys")
DEFAULT_MAX_BATCH_SIZE: int = 75
"""Upper bound on targets per batch, to keep request bursts polite."""

DEFAULT_ENCRYPTED_EXTENSION: str = ".iron"


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved configuration for one CLI run."""

    backend: str | None = None
    """``"module:factory"`` import path of the SDK backend factory."""

    keyfile: Path = DEFAULT_KEYFILE
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE
    encrypted_extension: str = DEFAULT_ENCRYPTED_EXTENSION

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from *environ* (defaults to ``os.environ``).

        Raises
        ------
        ConfigurationError
            If a numeric variable does not hold a positive integer.
        """
        env = os.environ if environ is None else environ
        keyfile = _env_or_none(env, IRONHIDE_KEYFILE)
        extension = _env_or_none(env, IRONHIDE_ENCRYPTED_EXTENSION)
        return cls(
            backend=_env_or_none(env, IRONHIDE_BACKEND),
            keyfile=Path(keyfile) if keyfile else DEFAULT_KEYFILE,
            max_batch_size=_positive_int(env, IRONHIDE_MAX_BATCH, DEFAULT_MAX_BATCH_SIZE),
            encrypted_extension=_normalize_extension(extension) if extension else DEFAULT_ENCRYPTED_EXTENSION,
        )

    def with_overrides(self, *, keyfile: str | None = None) -> Settings:
        """Return a copy with command-line overrides applied."""
        if keyfile:
            return replace(self, keyfile=Path(keyfile))
        return self

    @property
    def keyfile_path(self) -> Path:
        """The key file with ``~`` expanded."""
        return self.keyfile.expanduser()


def _env_or_none(env: Mapping[str, str], name: str) -> str | None:
    value = (env.get(name) or "").strip()
    return value or None


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _env_or_none(env, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'.") from exc
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {value}.")
    return value


def _normalize_extension(extension: str) -> str:
    return extension if extension.startswith(".") else f".{extension}"
