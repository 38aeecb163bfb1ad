"""Pydantic models for the mirroring engine.

Defines the data contracts shared by the engine, worker and reporter:

- ``SyncAction``: Enum of filesystem changes the engine can make.
- ``SyncOperation``: Outcome of one change on one path.
- ``SyncResult``: Aggregate outcome of a full cycle.
- ``CycleOutcome``: How a worker cycle ended.
- ``SyncCancelled``: Raised inside a phase when the stop signal is seen.

All models are frozen (immutable) for safety. None of them is persisted;
a result lives only until the cycle has been reported.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel


class SyncCancelled(Exception):
    """A phase stopped early because cancellation was requested."""


class SyncAction(str, Enum):
    """Filesystem changes made while mirroring."""

    CREATE_DIRECTORY = "create_directory"
    COPY_FILE = "copy_file"
    DELETE_FILE = "delete_file"
    DELETE_DIRECTORY = "delete_directory"
    COMPARE_FILE = "compare_file"


class CycleOutcome(str, Enum):
    """How one worker cycle ended."""

    COMPLETED = "completed"
    FAILED = "failed"
    """The cycle could not run; the next one is attempted after the interval"""
    CANCELLED = "cancelled"
    FATAL = "fatal"
    """The source root is missing; the worker must stop"""


class SyncOperation(BaseModel):
    """Result of one change on one path.

    Attributes:
        action: What was attempted.
        path: The path acted on (replica path, or source path for copies
            and comparisons).
        target: Destination path for copies.
        success: Whether the change was applied.
        error: Error message if the change failed.
    """

    action: SyncAction
    path: Path
    target: Path | None = None
    success: bool = True
    error: str | None = None

    model_config = {"frozen": True}


class SyncResult(BaseModel):
    """Aggregate result of one synchronization cycle.

    Attributes:
        source_root: Tree mirrored from.
        replica_root: Tree mirrored to.
        operations: Every change attempted, in order.
        cancelled: True if the cycle stopped early on request.
        started_at: ISO 8601 timestamp when the cycle started.
        completed_at: ISO 8601 timestamp when the cycle ended.
    """

    source_root: Path
    replica_root: Path
    operations: list[SyncOperation] = []
    cancelled: bool = False
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    def _succeeded(self, action: SyncAction) -> list[SyncOperation]:
        return [
            op
            for op in self.operations
            if op.action == action and op.success
        ]

    @property
    def created_directories(self) -> list[SyncOperation]:
        return self._succeeded(SyncAction.CREATE_DIRECTORY)

    @property
    def copied_files(self) -> list[SyncOperation]:
        return self._succeeded(SyncAction.COPY_FILE)

    @property
    def deleted_files(self) -> list[SyncOperation]:
        return self._succeeded(SyncAction.DELETE_FILE)

    @property
    def deleted_directories(self) -> list[SyncOperation]:
        return self._succeeded(SyncAction.DELETE_DIRECTORY)

    @property
    def errors(self) -> list[SyncOperation]:
        """Operations where success is False."""
        return [op for op in self.operations if not op.success]

    @property
    def changed(self) -> bool:
        """True if the replica was modified during the cycle."""
        return any(op.success for op in self.operations)

    def summary(self) -> str:
        """One-line count of the cycle's changes."""
        status = " (cancelled)" if self.cancelled else ""
        return (
            f"Cycle{status}: "
            f"{len(self.created_directories)} directories created, "
            f"{len(self.copied_files)} files copied, "
            f"{len(self.deleted_files)} files deleted, "
            f"{len(self.deleted_directories)} directories deleted, "
            f"{len(self.errors)} errors"
        )
