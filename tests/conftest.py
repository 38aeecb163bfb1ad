"""Shared pytest fixtures for folder-mirror tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable

import pytest

from folder_mirror.config import SyncConfig


class RecordingLogSink:
    """In-memory LogSink that keeps every message in order."""

    def __init__(self, log_file: Path | None = None) -> None:
        self.log_file = log_file or Path("logs/test.log")
        self.messages: list[str] = []
        self.on_log: Callable[[str], None] | None = None

    async def log(self, message: str) -> None:
        self.messages.append(message)
        if self.on_log is not None:
            self.on_log(message)

    @property
    def log_directory(self) -> Path:
        return self.log_file.parent

    @property
    def log_file_name(self) -> str:
        return self.log_file.name

    def matching(self, prefix: str) -> list[str]:
        return [m for m in self.messages if m.startswith(prefix)]


def _write_tree(root: Path, files: dict[str, bytes | str]) -> None:
    """Create *files* (relative path -> content) under *root*."""
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)


def _read_tree(root: Path) -> dict[str, bytes]:
    """Map every file under *root* to its content, keyed by posix relative path."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def write_tree():
    return _write_tree


@pytest.fixture
def read_tree():
    return _read_tree


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def replica_dir(tmp_path: Path) -> Path:
    path = tmp_path / "replica"
    path.mkdir()
    return path


@pytest.fixture
def log_sink() -> RecordingLogSink:
    return RecordingLogSink()


@pytest.fixture
def stop_event() -> asyncio.Event:
    return asyncio.Event()


@pytest.fixture
def sync_config(tmp_path: Path, source_dir: Path, replica_dir: Path) -> SyncConfig:
    return SyncConfig(
        source_root=source_dir,
        replica_root=replica_dir,
        interval_ms=10,
        log_file=tmp_path / "logs" / "mirror.log",
    )


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path):
    """Keep the host's FOLDER_MIRROR_* settings and config files out of tests."""
    for name in (
        "FOLDER_MIRROR_INTERVAL_MS",
        "FOLDER_MIRROR_LOG_FILE",
        "FOLDER_MIRROR_SOURCE",
        "FOLDER_MIRROR_REPLICA",
        "FOLDER_MIRROR_CONFIG",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
