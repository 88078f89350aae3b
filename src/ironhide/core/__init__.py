"""Core / service layer — reference resolution and batch execution.

Rules
-----
* No ``print()`` calls.
* No direct filesystem or network I/O; everything goes through the
  protocols in :mod:`ironhide.core.protocols`.
* No imports from ``cli`` or ``infra``.
"""

from ironhide.core.batch import BatchSummary, run_batch, run_single, settled, summarize
from ironhide.core.group_cache import GroupCache, build_group_maps
from ironhide.core.models import (
    BatchOutcome,
    BatchResult,
    BatchTarget,
    Failure,
    GroupMaps,
    GroupRecord,
    MultipleGroups,
    SingleGroup,
    Success,
)
from ironhide.core.resolver import GROUP_ID_PREFIX, ReferenceResolver, UnresolvedPolicy

__all__: list[str] = [
    "GROUP_ID_PREFIX",
    "BatchOutcome",
    "BatchResult",
    "BatchSummary",
    "BatchTarget",
    "Failure",
    "GroupCache",
    "GroupMaps",
    "GroupRecord",
    "MultipleGroups",
    "ReferenceResolver",
    "SingleGroup",
    "Success",
    "UnresolvedPolicy",
    "build_group_maps",
    "run_batch",
    "run_single",
    "settled",
    "summarize",
]
