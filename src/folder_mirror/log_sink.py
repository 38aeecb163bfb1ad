"""Log sink: the persistent, human-readable record of mirroring activity.

The engine and worker report every directory creation, copy, deletion,
error and lifecycle event through a ``LogSink``. ``FileLogSink`` appends
one timestamped line per message to a plain text file and echoes the
message to the stdlib logger so it also shows on stderr.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol

from folder_mirror.core.async_utils import run_sync

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogSink(Protocol):
    """Anything that can persist mirroring messages."""

    async def log(self, message: str) -> None: ...

    @property
    def log_directory(self) -> Path: ...

    @property
    def log_file_name(self) -> str: ...


class FileLogSink:
    """Append timestamped messages to a log file.

    Args:
        log_file: Path of the log file. Its directory is created on the
            first write if it does not exist.
    """

    def __init__(self, log_file: Path) -> None:
        self.log_file = Path(log_file)
        self._lock = asyncio.Lock()

    @property
    def log_directory(self) -> Path:
        return self.log_file.parent

    @property
    def log_file_name(self) -> str:
        return self.log_file.name

    async def log(self, message: str) -> None:
        """Persist *message* as ``[timestamp] message``.

        Awaiting this call guarantees the line is on disk before the caller
        moves on, so lines keep the order in which events happened. Write
        failures are reported on stderr and swallowed: a broken log file
        must not stop mirroring.
        """
        logger.info("%s", message)
        async with self._lock:
            try:
                await run_sync(self._append, message)
            except (OSError, UnicodeError) as exc:
                logger.error(
                    "Failed to write to log file %s: %s", self.log_file, exc
                )

    def _append(self, message: str) -> None:
        lines = []
        if not self.log_directory.exists():
            self.log_directory.mkdir(parents=True, exist_ok=True)
            lines.append(
                self.format_line(
                    f"Created log directory '{self.log_directory}' "
                    f"with file {self.log_file_name}"
                )
            )
        lines.append(self.format_line(message))
        # Undecodable filename bytes surface as lone surrogates
        with open(
            self.log_file, "a", encoding="utf-8", errors="backslashreplace"
        ) as fh:
            fh.writelines(lines)

    @staticmethod
    def format_line(message: str, now: datetime | None = None) -> str:
        stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        return f"[{stamp}] {message}\n"
