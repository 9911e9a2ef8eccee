"""Deletion jobs, confirmation and outcome aggregation.

A provider delete call yields a DeletionJob:
- Done: nothing left to wait for (deleted synchronously, or already absent)
- Pending: a long-running operation that must be confirmed

ResourceDeleted is the blocking confirmation predicate. It never raises on a
timeout or on a failed operation; both surface as False.

DeletionTally collects per-item outcomes of a multi-resource step so every item
is attempted and the stragglers can be logged together.

attempt() is the single boundary that turns arbitrary errors into a value.

Public API:
    Done, Pending, DeletionJob: Job handle sum type
    ResourceDeleted: Confirmation predicate
    DeletionTally: Best-effort outcome accumulator
    Ok, Swallowed, attempt: Error-swallowing boundary
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

from azure.core.exceptions import AzureError, ResourceNotFoundError

logger = logging.getLogger(__name__)

__all__ = [
    "DeletionJob",
    "DeletionTally",
    "Done",
    "Ok",
    "Pending",
    "ResourceDeleted",
    "Swallowed",
    "attempt",
]

T = TypeVar("T")

# Terminal status reported by azure-core pollers for a successful operation
SUCCEEDED = "succeeded"


@dataclass(frozen=True)
class Done:
    """Deletion needs no confirmation."""

    description: str = ""


@dataclass(frozen=True)
class Pending:
    """Deletion is in progress; handle is an azure-core LROPoller."""

    handle: Any
    description: str = ""


DeletionJob = Union[Done, Pending]


class ResourceDeleted:
    """Blocking predicate confirming that a deletion job finished successfully.

    Args:
        timeout: Maximum seconds to wait for a pending operation
    """

    def __init__(self, timeout: float = 600.0) -> None:
        self.timeout = timeout

    def __call__(self, job: DeletionJob | None) -> bool:
        return self.confirm(job)

    def confirm(self, job: DeletionJob | None) -> bool:
        """Wait for a deletion job.

        Args:
            job: Job returned by a delete call; None is treated like Done

        Returns:
            True if the resource is gone, False on timeout or failure
        """
        if job is None or isinstance(job, Done):
            return True

        poller = job.handle
        label = job.description or "deletion"

        try:
            poller.wait(timeout=self.timeout)
        except ResourceNotFoundError:
            logger.debug(f"{label}: resource already gone")
            return True
        except AzureError as e:
            logger.warning(f"{label} failed: {e}")
            return False

        if not poller.done():
            logger.warning(f"{label} did not finish within {self.timeout:.0f}s")
            return False

        status = str(poller.status()).lower()
        if status != SUCCEEDED:
            logger.warning(f"{label} finished with status {poller.status()}")
            return False

        return True


@dataclass
class DeletionTally:
    """Outcomes of a best-effort, multi-resource deletion step."""

    outcomes: list[tuple[str, bool]] = field(default_factory=list)

    def record(self, name: str, deleted: bool) -> bool:
        """Record one outcome and return it."""
        self.outcomes.append((name, deleted))
        return deleted

    @property
    def all_succeeded(self) -> bool:
        return all(deleted for _, deleted in self.outcomes)

    def failed(self) -> list[str]:
        return [name for name, deleted in self.outcomes if not deleted]


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Operation completed with a value."""

    value: T


@dataclass(frozen=True)
class Swallowed:
    """Operation raised; the error was logged and contained."""

    error: Exception


def attempt(operation: Callable[[], T], description: str) -> "Ok[T] | Swallowed":
    """Run operation, converting any exception into Swallowed.

    Args:
        operation: Zero-argument callable
        description: Context for the warning logged on failure

    Returns:
        Ok with the result, or Swallowed with the exception
    """
    try:
        return Ok(operation())
    except Exception as e:
        logger.warning(f"{description}: {e}", exc_info=True)
        return Swallowed(e)
