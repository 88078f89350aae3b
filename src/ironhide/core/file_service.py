"""Per-file operations: encrypt, decrypt, grant, revoke and info.

Each public method handles exactly one file, or one blob read from
stdin, and raises on failure.  Commands turn them into batch operations
with :func:`~ironhide.core.batch.settled`, so a failing file never
affects the rest of the batch.

The service depends on injected :class:`DocumentProvider` and
:class:`FileStore` implementations; it imports no SDK and touches the
filesystem only through the store.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ironhide.core.models import AccessList, BatchTarget, FileAccessReport, FileInfo, ProcessedFile
from ironhide.core.protocols import DocumentProvider, FileStore
from ironhide.exceptions import IronhideError, RemoteOperationError, UsageError

logger = logging.getLogger(__name__)

STDOUT_MARKER = "-"
"""``--out`` value meaning "write to stdout"."""

STDIN_SOURCE = "<stdin>"
"""Source label for content read from standard input."""


@dataclass(frozen=True)
class EncryptParams:
    access: AccessList
    out: str | None = None
    delete_source: bool = False


@dataclass(frozen=True)
class DecryptParams:
    out: str | None = None
    delete_source: bool = False


@dataclass(frozen=True)
class AccessParams:
    access: AccessList


def strip_last_extension(path: str) -> str:
    """Drop the last extension: ``a.json.iron`` -> ``a.json``.

    A path without an extension is returned unchanged.
    """
    suffix = Path(path).suffix
    if not suffix:
        return path
    return path[: -len(suffix)]


def check_distinct_destinations(destinations: Iterable[str | None]) -> None:
    """Reject a batch in which two items would write the same file.

    Paths are compared after normalization against the working
    directory.  Stdout destinations (``None``) are ignored.

    Raises
    ------
    UsageError
        On the first destination claimed twice.
    """
    seen: set[str] = set()
    for destination in destinations:
        if destination is None:
            continue
        key = os.path.normpath(os.path.abspath(os.path.expanduser(destination)))
        if key in seen:
            raise UsageError(
                f"More than one input file would be written to '{destination}'.",
                hint="Process those files separately with -o.",
            )
        seen.add(key)


class FileService:
    """Encrypts, decrypts and re-shares individual files.

    Parameters
    ----------
    documents:
        Any object satisfying the :class:`DocumentProvider` protocol.
    files:
        Any object satisfying the :class:`FileStore` protocol.
    encrypted_extension:
        Suffix appended to encrypted output files.
    """

    def __init__(
        self,
        documents: DocumentProvider,
        files: FileStore,
        *,
        encrypted_extension: str = ".iron",
    ) -> None:
        self._documents: DocumentProvider = documents
        self._files: FileStore = files
        self._extension: str = encrypted_extension

    # ------------------------------------------------------------------
    # Output paths (pure)
    # ------------------------------------------------------------------

    def encrypt_destination(self, source: str, out: str | None) -> str | None:
        if out == STDOUT_MARKER:
            return None
        return out or f"{source}{self._extension}"

    @staticmethod
    def decrypt_destination(source: str, out: str | None) -> str | None:
        if out == STDOUT_MARKER:
            return None
        return out or strip_last_extension(source)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def encrypt(self, target: BatchTarget[str, EncryptParams]) -> ProcessedFile:
        """Encrypt one file to the caller plus the shared access list."""
        source = target.item
        params = target.params
        destination = self.encrypt_destination(source, params.out)

        self._files.check_readable(Path(source))
        if destination is not None:
            self._files.check_writable_destination(Path(destination))

        data = self._files.read_bytes(Path(source))
        encrypted = await self._documents.encrypt(data, params.access)
        return self._finish(source, destination, encrypted, params.delete_source)

    async def decrypt(self, target: BatchTarget[str, DecryptParams]) -> ProcessedFile:
        """Decrypt one file, by default next to it without its extension."""
        source = target.item
        params = target.params
        destination = self.decrypt_destination(source, params.out)

        if destination is not None:
            self._files.check_writable_destination(Path(destination))
        self._files.check_readable(Path(source))

        encrypted = self._files.read_bytes(Path(source))
        document_id = await self._documents.document_id_of(encrypted)
        if not document_id:
            raise RemoteOperationError(
                f"Failed to decrypt '{source}'. Input doesn't appear to be encrypted.",
            )
        decrypted = await self._documents.decrypt(document_id, encrypted)
        return self._finish(source, destination, decrypted, params.delete_source)

    async def encrypt_data(self, data: bytes, params: EncryptParams) -> ProcessedFile:
        """Encrypt content that did not come from a file, such as stdin.

        *params* must name an output; ``-`` means stdout.
        """
        destination = self._stream_destination(params.out)
        encrypted = await self._documents.encrypt(data, params.access)
        return self._finish(STDIN_SOURCE, destination, encrypted, delete_source=False)

    async def decrypt_data(self, data: bytes, params: DecryptParams) -> ProcessedFile:
        """Decrypt content that did not come from a file, such as stdin."""
        destination = self._stream_destination(params.out)
        document_id = await self._documents.document_id_of(data)
        if not document_id:
            raise RemoteOperationError("Failed to decrypt stdin. Input doesn't appear to be encrypted.")
        decrypted = await self._documents.decrypt(document_id, data)
        return self._finish(STDIN_SOURCE, destination, decrypted, delete_source=False)

    async def info(self, source: str) -> FileInfo:
        """Look up the service-side metadata of one encrypted file."""
        self._files.check_readable(Path(source))
        document_id = await self._documents.document_id_of(self._files.read_bytes(Path(source)))
        if not document_id:
            raise RemoteOperationError(
                f"Failed to parse '{source}'. File doesn't appear to be an encrypted file.",
            )
        return FileInfo(source=source, metadata=await self._documents.metadata(document_id))

    async def grant(self, target: BatchTarget[str, AccessParams]) -> FileAccessReport:
        """Grant decrypt access to one file."""
        document_id = await self._read_document_id(target.item, "grant")
        result = await self._documents.grant_access(document_id, target.params.access)
        return FileAccessReport(source=target.item, result=result)

    async def revoke(self, target: BatchTarget[str, AccessParams]) -> FileAccessReport:
        """Revoke decrypt access to one file."""
        document_id = await self._read_document_id(target.item, "revoke")
        result = await self._documents.revoke_access(document_id, target.params.access)
        return FileAccessReport(source=target.item, result=result)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _stream_destination(self, out: str | None) -> str | None:
        if not out:
            raise UsageError("Reading from stdin requires the output flag (-o).")
        if out == STDOUT_MARKER:
            return None
        self._files.check_writable_destination(Path(out))
        return out

    async def _read_document_id(self, source: str, action: str) -> str:
        self._files.check_readable(Path(source))
        document_id = await self._documents.document_id_of(self._files.read_bytes(Path(source)))
        if not document_id:
            raise RemoteOperationError(
                f"Failed to {action} '{source}'. File doesn't appear to be an ironhide encrypted file.",
            )
        return document_id

    def _finish(
        self,
        source: str,
        destination: str | None,
        content: bytes,
        delete_source: bool,
    ) -> ProcessedFile:
        """Write the output file and optionally delete the source.

        Content bound for stdout is returned instead of written.  A
        source that cannot be deleted is a warning, not a failure.
        """
        if destination is not None:
            self._files.write_bytes(Path(destination), content)
            content = b""

        warning: str | None = None
        if delete_source:
            try:
                self._files.delete(Path(source))
            except IronhideError:
                warning = f"Unable to delete source file '{source}' as it is not writable."
                logger.debug("%s", warning)

        return ProcessedFile(source=source, destination=destination, content=content, warning=warning)
