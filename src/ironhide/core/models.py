"""Domain models for ironhide.

All models are **frozen** dataclasses: immutable value objects with no
behaviour beyond data access and a few derived properties.  They carry
zero I/O and no dependencies on external packages.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar, Union

R = TypeVar("R")
T = TypeVar("T")
P = TypeVar("P")


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class GroupRecord:
    """One group the current identity is an admin or member of."""

    id: str
    """Canonical, server-assigned group ID."""

    name: str | None
    """Display name.  ``None`` for groups created outside this tool."""

    is_admin: bool
    is_member: bool
    created: datetime
    updated: datetime


@dataclass(frozen=True, slots=True)
class SingleGroup:
    """Name-map entry for a display name held by exactly one group."""

    record: GroupRecord


@dataclass(frozen=True, slots=True)
class MultipleGroups:
    """Name-map entry for a display name shared by several groups.

    ``records`` keeps directory response order.
    """

    records: tuple[GroupRecord, ...]


NameEntry = Union[SingleGroup, MultipleGroups]


@dataclass(frozen=True, slots=True)
class GroupDetail:
    """Full view of one group as returned by the directory.

    ``admins`` and ``members`` are only filled in for callers who are an
    admin or member themselves.
    """

    id: str
    name: str | None
    is_admin: bool
    is_member: bool
    created: datetime
    updated: datetime
    admins: tuple[str, ...] = ()
    members: tuple[str, ...] = ()

    @property
    def can_see_details(self) -> bool:
        return self.is_admin or self.is_member


@dataclass(frozen=True, slots=True)
class GroupMaps:
    """Both lookup maps, built together from one directory snapshot."""

    by_name: Mapping[str, NameEntry]
    by_id: Mapping[str, GroupRecord]

    def display_name(self, group_id: str) -> str:
        """Return the group's name when known, else *group_id* itself."""
        record = self.by_id.get(group_id)
        if record is None or not record.name:
            return group_id
        return record.name


# ---------------------------------------------------------------------------
# Sharing
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AccessList:
    """Users and groups a document is shared with."""

    users: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.users or self.groups)


@dataclass(frozen=True, slots=True)
class AccessChange:
    """One user or group whose access was (or failed to be) changed."""

    id: str
    kind: str
    """``"user"`` or ``"group"``."""

    error: str | None = None


@dataclass(frozen=True, slots=True)
class AccessResult:
    """Provider response to a grant or revoke call on one document."""

    succeeded: tuple[AccessChange, ...] = ()
    failed: tuple[AccessChange, ...] = ()


@dataclass(frozen=True, slots=True)
class FileAccessReport:
    """Successful grant/revoke outcome for one file."""

    source: str
    result: AccessResult


@dataclass(frozen=True, slots=True)
class DocumentMetadata:
    """Service-side information about one encrypted document."""

    id: str
    association: str
    """How the caller can reach the document: ``"owner"``, ``"fromUser"`` or ``"fromGroup"``."""

    users: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()
    """IDs of the groups the document is shared with."""


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Successful ``file info`` outcome for one file."""

    source: str
    metadata: DocumentMetadata


@dataclass(frozen=True, slots=True)
class ProcessedFile:
    """Successful encrypt/decrypt outcome for one file.

    ``destination`` is ``None`` when the content went to stdout.
    """

    source: str
    destination: str | None
    content: bytes = field(repr=False, default=b"")
    warning: str | None = None
    """Set when the source should have been deleted but could not be."""


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DeviceRecord:
    """A device key pair authorized for the current user."""

    id: int
    name: str | None
    is_current_device: bool
    created: datetime
    updated: datetime


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BatchTarget(Generic[T, P]):
    """One item of a batch plus the parameters shared by the whole batch."""

    item: T
    params: P


@dataclass(frozen=True, slots=True)
class Success(Generic[R]):
    """Batch outcome of an item whose operation completed."""

    value: R


@dataclass(frozen=True, slots=True)
class Failure:
    """Batch outcome of an item whose operation failed."""

    message: str


BatchOutcome = Union[Success[R], Failure]


@dataclass(frozen=True, slots=True)
class BatchResult(Generic[R]):
    """Outcomes of a batch, one per target, in target order."""

    outcomes: tuple[BatchOutcome[R], ...]

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, Success))

    @property
    def failure_count(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, Failure))
