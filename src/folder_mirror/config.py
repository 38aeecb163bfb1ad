"""Runtime configuration for the mirroring daemon.

Reads the four mirroring settings from CLI args, environment variables,
.env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    FOLDER_MIRROR_INTERVAL_MS: Sync interval in milliseconds (optional, default: 60000)
    FOLDER_MIRROR_LOG_FILE: Log sink file path (optional, default: logs/folder-mirror.log)
    FOLDER_MIRROR_SOURCE: Source root directory (required)
    FOLDER_MIRROR_REPLICA: Replica root directory (required)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 60_000
DEFAULT_LOG_FILE = "logs/folder-mirror.log"


@dataclass(frozen=True)
class SyncConfig:
    source_root: Path
    replica_root: Path
    interval_ms: int = DEFAULT_INTERVAL_MS
    log_file: Path = Path(DEFAULT_LOG_FILE)

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000


def _is_within(path: Path, parent: Path) -> bool:
    return path == parent or path.is_relative_to(parent)


def validate_config(config: SyncConfig) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Existence of the source root is deliberately not checked here: the
    worker re-checks it at the start of every cycle.

    Args:
        config: SyncConfig instance to validate.

    Raises:
        ValueError: If the interval is not positive, the log path names no
            file, the source and replica trees overlap, or the log file lies
            inside either tree.
    """
    if isinstance(config.interval_ms, bool) or not isinstance(
        config.interval_ms, int
    ):
        raise ValueError(
            f"Invalid sync interval '{config.interval_ms}': must be an integer number of milliseconds"
        )
    if config.interval_ms <= 0:
        raise ValueError(
            f"Invalid sync interval '{config.interval_ms}': must be a positive number of milliseconds"
        )

    if config.log_file.name == "":
        raise ValueError(
            f"Log file path '{config.log_file}' must name a file"
        )

    source = config.source_root.resolve()
    replica = config.replica_root.resolve()
    if source == replica:
        raise ValueError(
            f"Source and replica must be different directories: {source}"
        )
    if _is_within(replica, source):
        raise ValueError(
            f"Replica directory {replica} cannot be inside source directory {source}"
        )
    if _is_within(source, replica):
        raise ValueError(
            f"Source directory {source} cannot be inside replica directory {replica}"
        )

    log_file = config.log_file.resolve()
    for label, root in (("source", source), ("replica", replica)):
        if _is_within(log_file, root):
            raise ValueError(
                f"Log file {log_file} cannot be inside {label} directory {root}"
            )


def _parse_interval(raw: str | int, origin: str) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(
            f"Invalid {origin} '{raw}': must be a number of milliseconds"
        ) from None


def load_config(
    interval_ms: str | int | None = None,
    log_file: str | None = None,
    source: str | None = None,
    replica: str | None = None,
    yaml_fallbacks: dict | None = None,
) -> SyncConfig:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        interval_ms: Override sync interval (milliseconds).
        log_file: Override log sink path.
        source: Override source root directory.
        replica: Override replica root directory.
        yaml_fallbacks: Dict of values from the YAML ``mirror`` section.
            Used as fallback when CLI arg and env var are both unset.

    Returns:
        Validated SyncConfig instance.

    Raises:
        ValueError: If source or replica is missing after checking all
            sources, or any value fails validation.
    """
    fb = yaml_fallbacks or {}

    source_root = str(
        source or os.getenv("FOLDER_MIRROR_SOURCE") or fb.get("source") or ""
    ).strip()
    if not source_root:
        raise ValueError(
            "Source directory not found. Set FOLDER_MIRROR_SOURCE environment variable, "
            "pass it as the third CLI argument, or add 'source' to config.yml."
        )

    replica_root = str(
        replica
        or os.getenv("FOLDER_MIRROR_REPLICA")
        or fb.get("replica")
        or ""
    ).strip()
    if not replica_root:
        raise ValueError(
            "Replica directory not found. Set FOLDER_MIRROR_REPLICA environment variable, "
            "pass it as the fourth CLI argument, or add 'replica' to config.yml."
        )

    final_log_file = (
        log_file
        or os.getenv("FOLDER_MIRROR_LOG_FILE")
        or fb.get("log_file")
        or DEFAULT_LOG_FILE
    )

    if interval_ms is not None:
        final_interval = _parse_interval(interval_ms, "sync interval")
    else:
        env_interval = os.getenv("FOLDER_MIRROR_INTERVAL_MS")
        if env_interval is not None:
            final_interval = _parse_interval(
                env_interval, "FOLDER_MIRROR_INTERVAL_MS"
            )
        elif fb.get("interval_ms") is not None:
            final_interval = _parse_interval(
                fb["interval_ms"], "interval_ms"
            )
        else:
            final_interval = DEFAULT_INTERVAL_MS

    config = SyncConfig(
        source_root=Path(source_root).expanduser(),
        replica_root=Path(replica_root).expanduser(),
        interval_ms=final_interval,
        log_file=Path(str(final_log_file).strip()).expanduser(),
    )

    validate_config(config)
    logger.debug(
        "Mirroring %s -> %s every %d ms",
        config.source_root,
        config.replica_root,
        config.interval_ms,
    )

    return config
