"""Partial-failure batch execution.

A batch applies one operation to many independent targets.  Every
operation starts at once on the event loop and the batch waits for all
of them: there is no early exit on failure and no timeout.  One item
failing never affects another.

Operations return a :data:`~ironhide.core.models.BatchOutcome` instead
of raising.  :func:`settled` adapts an ordinary coroutine function that
raises into one that reports failures as values.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from ironhide.core.models import BatchOutcome, BatchResult, Failure, Success
from ironhide.exceptions import BatchLimitExceededError, ItemOperationFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Operation = Callable[[T], Awaitable[BatchOutcome[R]]]


def settled(func: Callable[[T], Awaitable[R]]) -> Operation[T, R]:
    """Wrap *func* so any exception becomes a :class:`Failure`.

    The failure message is the exception's message, which is what gets
    shown to the user for that item.
    """

    @functools.wraps(func)
    async def operation(target: T) -> BatchOutcome[R]:
        try:
            return Success(await func(target))
        except Exception as exc:
            logger.debug("Batch item %r failed", target, exc_info=True)
            return Failure(str(exc) or type(exc).__name__)

    return operation


async def run_batch(targets: Sequence[T], operation: Operation[T, R]) -> BatchResult[R]:
    """Run *operation* on every target concurrently.

    The result lists one outcome per target in target order, however
    the operations interleave or finish.
    """
    logger.debug("Starting batch of %d item(s)", len(targets))
    outcomes = await asyncio.gather(*(operation(target) for target in targets))
    result: BatchResult[R] = BatchResult(outcomes=tuple(outcomes))
    logger.debug(
        "Batch finished: %d succeeded, %d failed",
        result.success_count,
        result.failure_count,
    )
    return result


async def run_single(target: T, operation: Operation[T, R]) -> R:
    """Run *operation* on one target without batching.

    Raises
    ------
    ItemOperationFailedError
        With the item's failure message, when the operation fails.
    """
    outcome = await operation(target)
    if isinstance(outcome, Failure):
        raise ItemOperationFailedError(outcome.message)
    return outcome.value


def check_batch_size(count: int, limit: int, noun: str = "files") -> None:
    """Reject batches larger than *limit* before any remote call."""
    if count > limit:
        raise BatchLimitExceededError(
            f"List of {count} {noun} exceeds {limit} which is the maximum number "
            f"of {noun} that can be processed at one time.",
            hint="Split the list into smaller batches.",
        )


@dataclass(frozen=True)
class BatchSummary(Generic[R]):
    """A batch result split into its successes and failures."""

    successes: tuple[R, ...]
    failures: tuple[str, ...]

    @property
    def success_count(self) -> int:
        return len(self.successes)

    @property
    def failure_count(self) -> int:
        return len(self.failures)


def summarize(result: BatchResult[R]) -> BatchSummary[R]:
    """Partition *result* into success values and failure messages.

    Both partitions keep target order.
    """
    successes: list[R] = []
    failures: list[str] = []
    for outcome in result.outcomes:
        if isinstance(outcome, Success):
            successes.append(outcome.value)
        elif isinstance(outcome, Failure):
            failures.append(outcome.message)
        else:
            raise TypeError(f"Unexpected batch outcome: {outcome!r}")
    return BatchSummary(successes=tuple(successes), failures=tuple(failures))
