"""Exact file comparison for deciding whether a replica file is stale."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from folder_mirror.core.async_utils import run_sync

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class Comparison(str, Enum):
    """Outcome of comparing two files."""

    SAME = "same"
    DIFFERENT = "different"
    INCONCLUSIVE = "inconclusive"
    """The stop signal arrived before the comparison finished"""


class FileComparator:
    """Byte-for-byte file comparison.

    No hashing and no mtime shortcut: the only shortcut is a size check,
    after which both files are streamed from the start in fixed-size
    chunks until they differ or both end.

    Args:
        stop_event: Optional shared cancellation signal, checked before
            every chunk.
        chunk_size: Bytes read from each file per step.
    """

    def __init__(
        self,
        stop_event: asyncio.Event | None = None,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        self.stop_event = stop_event
        self.chunk_size = chunk_size

    async def compare(self, path_a: Path, path_b: Path) -> Comparison:
        """Compare the contents of two files.

        Args:
            path_a: First file.
            path_b: Second file.

        Returns:
            ``SAME`` if the files hold identical bytes, ``DIFFERENT`` if
            they do not, ``INCONCLUSIVE`` if cancellation was requested
            before an answer was reached.

        Raises:
            OSError: If either file cannot be opened or read.
        """
        fa = await run_sync(open, path_a, "rb")
        try:
            fb = await run_sync(open, path_b, "rb")
            try:
                return await self._compare_streams(fa, fb)
            finally:
                fb.close()
        finally:
            fa.close()

    async def identical(self, path_a: Path, path_b: Path) -> bool:
        """True unless the files are known to differ.

        An interrupted comparison counts as identical so that shutdown
        never triggers a copy.
        """
        return await self.compare(path_a, path_b) != Comparison.DIFFERENT

    async def _compare_streams(self, fa: BinaryIO, fb: BinaryIO) -> Comparison:
        size_a = await run_sync(_stream_size, fa)
        size_b = await run_sync(_stream_size, fb)
        if size_a != size_b:
            return Comparison.DIFFERENT

        while True:
            if self.stop_event is not None and self.stop_event.is_set():
                logger.debug("Comparison of %s interrupted", fa.name)
                return Comparison.INCONCLUSIVE

            chunk_a = await run_sync(fa.read, self.chunk_size)
            chunk_b = await run_sync(fb.read, self.chunk_size)
            if chunk_a != chunk_b:
                return Comparison.DIFFERENT
            if not chunk_a:
                return Comparison.SAME


def _stream_size(fh: BinaryIO) -> int:
    fh.seek(0, 2)
    size = fh.tell()
    fh.seek(0)
    return size
