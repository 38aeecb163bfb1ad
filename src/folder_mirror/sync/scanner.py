"""Directory enumeration for a single mirroring pass."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileEntry:
    """A file discovered under a root directory.

    Entries are built fresh on every pass and never cached.
    """

    path: Path
    """Absolute path to the file"""

    relative_path: Path
    """Path relative to the scanned root"""

    @property
    def relative_dir(self) -> Path:
        """Directory part of the relative path (``Path(".")`` at the root)."""
        return self.relative_path.parent

    def under(self, root: Path) -> Path:
        """The equivalent path of this file below another root."""
        return root / self.relative_path


def scan_files(root: Path) -> list[FileEntry]:
    """Recursively list every regular file under *root*.

    Directories are not reported on their own, so empty directories are
    invisible to the engine. Symbolic links to directories are not
    followed. Unreadable subdirectories are logged and skipped.

    Args:
        root: Directory to scan.

    Returns:
        FileEntry objects sorted by relative path.

    Raises:
        OSError: If *root* itself cannot be listed.
    """
    entries: list[FileEntry] = []

    def _on_error(exc: OSError) -> None:
        if Path(exc.filename or "") == root:
            raise exc
        logger.warning("Skipping unreadable directory %s: %s", exc.filename, exc)

    for dirpath, _dirnames, filenames in os.walk(root, onerror=_on_error):
        directory = Path(dirpath)
        for name in filenames:
            file_path = directory / name
            if not file_path.is_file():
                continue
            entries.append(
                FileEntry(
                    path=file_path,
                    relative_path=file_path.relative_to(root),
                )
            )

    entries.sort(key=lambda e: e.relative_path.as_posix())
    return entries
