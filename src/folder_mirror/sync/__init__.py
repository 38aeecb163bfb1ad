"""One-way mirroring engine.

Public API for replicating a source directory tree into a replica tree.

Architecture
------------
The engine is stateless: every cycle rescans both trees, copies new or
changed files (exact byte comparison, no hashing or mtime shortcuts), and
then removes replica entries whose source counterpart is gone. No manifest
or catalog is kept between cycles; the filesystem is the only state.

Modules:

- ``engine``     -- ``SyncEngine``: check-and-copy and cleanup phases.
- ``comparator`` -- ``FileComparator``: size check then chunked byte compare.
- ``scanner``    -- ``FileEntry``, ``scan_files``: recursive enumeration.
- ``models``     -- ``SyncAction``, ``SyncOperation``, ``SyncResult``,
  ``CycleOutcome``, ``SyncCancelled``.
- ``reporter``   -- Human-readable and JSON cycle reports.

Usage example
-------------
::

    import asyncio
    from pathlib import Path
    from folder_mirror.log_sink import FileLogSink
    from folder_mirror.sync import SyncEngine, format_sync_result

    async def main():
        engine = SyncEngine(
            source_root=Path("/data/source"),
            replica_root=Path("/data/replica"),
            log_sink=FileLogSink(Path("logs/folder-mirror.log")),
        )
        result = await engine.synchronize()
        print(format_sync_result(result))

    asyncio.run(main())
"""

from .comparator import Comparison, FileComparator
from .engine import SyncEngine
from .models import (
    CycleOutcome,
    SyncAction,
    SyncCancelled,
    SyncOperation,
    SyncResult,
)
from .reporter import format_sync_result, result_to_json
from .scanner import FileEntry, scan_files

__all__ = [
    "Comparison",
    "CycleOutcome",
    "FileComparator",
    "FileEntry",
    "SyncAction",
    "SyncCancelled",
    "SyncEngine",
    "SyncOperation",
    "SyncResult",
    "format_sync_result",
    "result_to_json",
    "scan_files",
]
