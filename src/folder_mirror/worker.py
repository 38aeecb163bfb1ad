"""Scheduler loop that drives the mirroring engine.

The worker cycles through ``VALIDATING -> SYNCING -> SLEEPING`` until it is
told to stop or the source root disappears:

- A missing source root is fatal: nothing can be mirrored, so the loop
  ends with ``EXIT_SOURCE_MISSING``.
- A missing replica root is created and the cycle carries on.
- A cycle that cannot run (e.g. the replica root cannot be listed) is
  logged and retried only after the full interval.
- Setting the stop event ends the current cycle or sleep early and the
  loop returns ``EXIT_OK``.

The worker never exits the process itself; the caller owns that decision.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from folder_mirror.config import SyncConfig
from folder_mirror.core.async_utils import run_sync, wait_for_stop
from folder_mirror.log_sink import LogSink
from folder_mirror.sync.engine import SyncEngine
from folder_mirror.sync.models import CycleOutcome, SyncResult

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SOURCE_MISSING = -1


class WorkerState(str, Enum):
    """Where the worker loop currently is."""

    IDLE = "idle"
    VALIDATING = "validating"
    SYNCING = "syncing"
    SLEEPING = "sleeping"
    TERMINATED = "terminated"


class SyncWorker:
    """Run mirroring cycles on a fixed interval.

    Args:
        config: Resolved mirroring configuration.
        log_sink: Receives lifecycle messages; also handed to the engine.
        stop_event: Shared cancellation signal. A fresh event is created
            when omitted.
        engine: Engine to drive; built from *config* when omitted.
    """

    def __init__(
        self,
        config: SyncConfig,
        log_sink: LogSink,
        stop_event: asyncio.Event | None = None,
        engine: SyncEngine | None = None,
    ) -> None:
        self.config = config
        self.log_sink = log_sink
        self.stop_event = stop_event if stop_event is not None else asyncio.Event()
        self.engine = engine or SyncEngine(
            source_root=config.source_root,
            replica_root=config.replica_root,
            log_sink=log_sink,
            stop_event=self.stop_event,
        )
        self.state = WorkerState.IDLE
        self.last_result: SyncResult | None = None

    def stop(self) -> None:
        """Request a clean shutdown at the next checkpoint."""
        self.stop_event.set()

    async def run(self, once: bool = False) -> int:
        """Run cycles until stopped.

        Args:
            once: Run a single cycle and return instead of looping.

        Returns:
            ``EXIT_OK`` on a requested or single-shot shutdown,
            ``EXIT_SOURCE_MISSING`` when the source root is gone.
        """
        while not self.stop_event.is_set():
            outcome = await self.run_cycle()
            if outcome == CycleOutcome.FATAL:
                return await self._terminate(EXIT_SOURCE_MISSING)
            if once:
                break

            self.state = WorkerState.SLEEPING
            if await wait_for_stop(
                self.stop_event, self.config.interval_seconds
            ):
                break

        return await self._terminate(EXIT_OK)

    async def run_cycle(self) -> CycleOutcome:
        """Validate both roots and run one synchronization cycle."""
        self.state = WorkerState.VALIDATING
        if not await self.check_directories():
            return CycleOutcome.FATAL
        if not await run_sync(self.config.replica_root.is_dir):
            # Replica creation failed; already reported
            return CycleOutcome.FAILED

        self.state = WorkerState.SYNCING
        try:
            result = await self.engine.synchronize()
        except OSError as exc:
            logger.debug("Cycle failed", exc_info=exc)
            await self.log_sink.log(f"Synchronization failed: {exc}")
            return CycleOutcome.FAILED

        self.last_result = result
        logger.debug("%s", result.summary())
        if result.cancelled:
            return CycleOutcome.CANCELLED
        return CycleOutcome.COMPLETED

    async def check_directories(self) -> bool:
        """Check the source root exists and create the replica root if needed.

        Returns:
            False if the source root is missing (fatal), True otherwise.
        """
        source = self.config.source_root
        replica = self.config.replica_root

        if not await run_sync(source.is_dir):
            await self.log_sink.log(f"Source directory '{source}' does not exist")
            return False

        if not await run_sync(replica.is_dir):
            try:
                await run_sync(replica.mkdir, parents=True, exist_ok=True)
            except OSError as exc:
                await self.log_sink.log(
                    f"Error creating replica directory '{replica}': {exc}"
                )
                return True
            await self.log_sink.log(f"Created replica directory '{replica}'")

        return True

    async def _terminate(self, exit_code: int) -> int:
        self.state = WorkerState.TERMINATED
        await self.log_sink.log(
            f"Application terminated with exit code {exit_code}"
        )
        return exit_code
