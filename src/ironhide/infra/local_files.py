"""Local filesystem implementation of :class:`~ironhide.core.protocols.FileStore`.

All ``OSError`` variants are caught here and re-raised as
:class:`~ironhide.exceptions.FileAccessError` with a message suitable
for a per-file failure line.
"""

from __future__ import annotations

import os
from pathlib import Path

from ironhide.exceptions import FileAccessError


class LocalFileStore:
    """Reads and writes files relative to the current working directory."""

    @staticmethod
    def _absolute(path: Path) -> Path:
        return path.expanduser().resolve()

    def check_readable(self, path: Path) -> None:
        """Raise unless *path* exists, is readable and is a regular file."""
        full = self._absolute(path)
        if not full.exists() or not os.access(full, os.R_OK):
            raise FileAccessError(f"Provided path '{path}' doesn't exist or is not readable.")
        if not full.is_file():
            raise FileAccessError(f"Provided path '{path}' does not appear to be a file.")

    def check_writable_destination(self, path: Path) -> None:
        """Raise if *path* already exists or its directory is not writable."""
        full = self._absolute(path)
        if full.exists():
            raise FileAccessError(f"Output path '{path}' already exists.")
        if not os.access(full.parent, os.W_OK):
            raise FileAccessError(f"Output path '{full.parent}' is not writable.")

    def read_bytes(self, path: Path) -> bytes:
        try:
            return self._absolute(path).read_bytes()
        except OSError as exc:
            raise FileAccessError(f"Unable to read '{path}': {exc.strerror or exc}") from exc

    def write_bytes(self, path: Path, data: bytes) -> None:
        try:
            self._absolute(path).write_bytes(data)
        except OSError as exc:
            raise FileAccessError(f"Unable to write '{path}': {exc.strerror or exc}") from exc

    def delete(self, path: Path) -> None:
        full = self._absolute(path)
        if not os.access(full, os.W_OK):
            raise FileAccessError(f"Unable to delete '{path}' as it is not writable.")
        try:
            full.unlink()
        except OSError as exc:
            raise FileAccessError(f"Unable to delete '{path}': {exc.strerror or exc}") from exc
