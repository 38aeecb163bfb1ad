"""Mirroring engine: one-way reconciliation of a replica tree with a source tree.

A cycle runs two phases, strictly in this order:

1. **Check-and-copy** -- every source file is compared with its replica
   counterpart and copied when the counterpart is missing or differs.
   Missing replica directories are created on the way.
2. **Cleanup** -- every replica file without a source counterpart is
   deleted. When a whole source directory has disappeared, the matching
   replica directory is removed in one recursive delete.

Copying before deleting means a file moved inside the source tree lands at
its new replica location before the old one is removed.

Error handling is per item: a failure on one file or directory is reported
to the log sink and the pass continues. Nothing is remembered between
cycles; both trees are rescanned every time.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path

from folder_mirror.core.async_utils import run_sync
from folder_mirror.log_sink import LogSink
from folder_mirror.sync.comparator import Comparison, FileComparator
from folder_mirror.sync.models import (
    SyncAction,
    SyncCancelled,
    SyncOperation,
    SyncResult,
)
from folder_mirror.sync.scanner import FileEntry, scan_files

logger = logging.getLogger(__name__)


class SyncEngine:
    """Mirror *source_root* into *replica_root*.

    Args:
        source_root: Tree to mirror from.
        replica_root: Tree to mirror to.
        log_sink: Receives one message per change and per error.
        stop_event: Shared cancellation signal. Checked before every file.
        comparator: File comparator; defaults to a ``FileComparator``
            bound to *stop_event*.
    """

    def __init__(
        self,
        source_root: Path,
        replica_root: Path,
        log_sink: LogSink,
        stop_event: asyncio.Event | None = None,
        comparator: FileComparator | None = None,
    ) -> None:
        self.source_root = Path(source_root)
        self.replica_root = Path(replica_root)
        self.log_sink = log_sink
        self.stop_event = stop_event if stop_event is not None else asyncio.Event()
        self.comparator = comparator or FileComparator(self.stop_event)

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    async def synchronize(self) -> SyncResult:
        """Run one full cycle: check-and-copy, then cleanup.

        Cancellation ends the cycle early without raising; it is logged
        and reported through ``SyncResult.cancelled``.

        Returns:
            A ``SyncResult`` listing every change attempted.
        """
        started_at = datetime.now(timezone.utc).isoformat()
        operations: list[SyncOperation] = []
        cancelled = False

        try:
            await self.check_and_copy(operations)
            await self.cleanup(operations)
        except SyncCancelled:
            cancelled = True
            await self.log_sink.log("Synchronization cancelled")

        return SyncResult(
            source_root=self.source_root,
            replica_root=self.replica_root,
            operations=operations,
            cancelled=cancelled,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )

    # ------------------------------------------------------------------
    # Phase 1: check and copy
    # ------------------------------------------------------------------

    async def check_and_copy(
        self, operations: list[SyncOperation] | None = None
    ) -> None:
        """Copy every new or changed source file into the replica tree.

        Args:
            operations: List to append each attempted change to
                (modified in place).

        Raises:
            SyncCancelled: If the stop signal is set before a file is
                processed.
            OSError: If the source root cannot be listed.
        """
        ops = operations if operations is not None else []
        source_files = await run_sync(scan_files, self.source_root)
        logger.debug(
            "Found %d source file(s) under %s",
            len(source_files),
            self.source_root,
        )

        for entry in source_files:
            self._raise_if_cancelled()

            replica_dir = self.replica_root / entry.relative_dir
            replica_file = entry.under(self.replica_root)

            if not await run_sync(replica_dir.is_dir):
                if not await self._create_directory(replica_dir, ops):
                    continue

            if not await self._copy_needed(entry, replica_file, ops):
                continue

            await self._copy_file(entry.path, replica_file, ops)

    async def _create_directory(
        self, directory: Path, ops: list[SyncOperation]
    ) -> bool:
        try:
            await run_sync(directory.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            await self._record_error(
                ops,
                SyncAction.CREATE_DIRECTORY,
                directory,
                f"Error creating directory {directory}: {exc}",
                exc,
            )
            return False

        ops.append(
            SyncOperation(action=SyncAction.CREATE_DIRECTORY, path=directory)
        )
        await self.log_sink.log(f"Created directory {directory}")
        return True

    async def _copy_needed(
        self,
        entry: FileEntry,
        replica_file: Path,
        ops: list[SyncOperation],
    ) -> bool:
        """Decide whether *entry* must be copied over *replica_file*."""
        if not await run_sync(replica_file.exists):
            return True

        try:
            comparison = await self.comparator.compare(
                entry.path, replica_file
            )
        except OSError as exc:
            await self._record_error(
                ops,
                SyncAction.COMPARE_FILE,
                entry.path,
                f"Error comparing {entry.path} with {replica_file}: {exc}",
                exc,
            )
            return False

        if comparison == Comparison.INCONCLUSIVE:
            logger.debug("Copy of %s skipped: comparison interrupted", entry.path)
            return False
        return comparison == Comparison.DIFFERENT

    async def _copy_file(
        self, source: Path, target: Path, ops: list[SyncOperation]
    ) -> None:
        try:
            await run_sync(shutil.copyfile, source, target)
        except OSError as exc:
            await self._record_error(
                ops,
                SyncAction.COPY_FILE,
                source,
                f"Error copying file {source}: {exc}",
                exc,
                target=target,
            )
            return

        ops.append(
            SyncOperation(action=SyncAction.COPY_FILE, path=source, target=target)
        )
        await self.log_sink.log(f"Copied file {source} to {target}")

    # ------------------------------------------------------------------
    # Phase 2: cleanup
    # ------------------------------------------------------------------

    async def cleanup(
        self, operations: list[SyncOperation] | None = None
    ) -> None:
        """Delete replica files and directories that have no source counterpart.

        Args:
            operations: List to append each attempted change to
                (modified in place).

        Raises:
            SyncCancelled: If the stop signal is set before a replica file
                is processed.
            OSError: If the replica root cannot be listed.
        """
        ops = operations if operations is not None else []
        if not await run_sync(self.source_root.is_dir):
            await self.log_sink.log(
                f"Source directory '{self.source_root}' does not exist, "
                "cleanup skipped"
            )
            return

        replica_files = await run_sync(scan_files, self.replica_root)
        removed_dirs: list[Path] = []

        for entry in replica_files:
            self._raise_if_cancelled()

            if any(entry.relative_path.is_relative_to(d) for d in removed_dirs):
                continue

            missing_dir = await run_sync(self._topmost_missing_dir, entry)
            if missing_dir is not None:
                # Attempted once, whatever the outcome
                removed_dirs.append(missing_dir)
                await self._delete_directory(
                    self.replica_root / missing_dir, ops
                )
                continue

            if not await run_sync(entry.under(self.source_root).is_file):
                await self._delete_file(entry.path, ops)

    def _topmost_missing_dir(self, entry: FileEntry) -> Path | None:
        """Highest ancestor of *entry* whose source directory is gone.

        Returns a path relative to the roots, or None when the file's
        source directory still exists.
        """
        if entry.relative_dir == Path(".") or (
            self.source_root / entry.relative_dir
        ).is_dir():
            return None
        for ancestor in reversed(entry.relative_dir.parents):
            if ancestor == Path("."):
                continue
            if not (self.source_root / ancestor).is_dir():
                return ancestor
        return entry.relative_dir

    async def _delete_directory(
        self, directory: Path, ops: list[SyncOperation]
    ) -> None:
        try:
            await run_sync(shutil.rmtree, directory)
        except OSError as exc:
            await self._record_error(
                ops,
                SyncAction.DELETE_DIRECTORY,
                directory,
                f"Error deleting directory {directory}: {exc}",
                exc,
            )
            return

        ops.append(
            SyncOperation(action=SyncAction.DELETE_DIRECTORY, path=directory)
        )
        await self.log_sink.log(f"Deleted directory {directory}")

    async def _delete_file(self, path: Path, ops: list[SyncOperation]) -> None:
        try:
            await run_sync(path.unlink)
        except OSError as exc:
            await self._record_error(
                ops,
                SyncAction.DELETE_FILE,
                path,
                f"Error deleting file {path}: {exc}",
                exc,
            )
            return

        ops.append(SyncOperation(action=SyncAction.DELETE_FILE, path=path))
        await self.log_sink.log(f"Deleted file {path}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _raise_if_cancelled(self) -> None:
        if self.stop_event.is_set():
            raise SyncCancelled()

    async def _record_error(
        self,
        ops: list[SyncOperation],
        action: SyncAction,
        path: Path,
        message: str,
        exc: OSError,
        target: Path | None = None,
    ) -> None:
        logger.debug("%s failed for %s", action.value, path, exc_info=exc)
        ops.append(
            SyncOperation(
                action=action,
                path=path,
                target=target,
                success=False,
                error=str(exc),
            )
        )
        await self.log_sink.log(message)
