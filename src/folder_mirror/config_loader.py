"""
Config file discovery and loading for folder_mirror.

Finds YAML config files by convention, merges them with "project wins"
semantics and interpolates ``${VAR}`` references from the environment.

Usage:
    from folder_mirror.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FOLDER_MIRROR_CONFIG"
PROJECT_CONFIG_DIR = ".folder_mirror"

# ---------------------------------------------------------------------------
# 1. Env var interpolation
# ---------------------------------------------------------------------------

# ${VAR} and ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


def interpolate_env_vars(value: str) -> str:
    """Replace ``${VAR}`` and ``${VAR:-default}`` patterns with env values.

    * ``${VAR}`` becomes the value of VAR, or ``""`` when unset.
    * ``${VAR:-default}`` uses *default* when VAR is unset or empty.
    * An unterminated ``${`` is kept as written.
    """

    def _substitute(match: re.Match) -> str:
        env_val = os.environ.get(match.group(1))
        if env_val:
            return env_val
        return match.group(2) or ""

    return _ENV_VAR_PATTERN.sub(_substitute, value)


def _interpolate_recursive(obj: Any) -> Any:
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _interpolate_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_interpolate_recursive(item) for item in obj]
    return obj


def load_yaml_file(path: Path) -> Any:
    """Parse one YAML file with the safe loader."""
    with open(path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh)


# ---------------------------------------------------------------------------
# 2. Convention-based file discovery
# ---------------------------------------------------------------------------


def discover_config_files(explicit: str | None = None) -> list[Path]:
    """Return existing config file paths in precedence order (highest first).

    Search order:
        1. *explicit* (the ``--config`` CLI option), else the
           ``FOLDER_MIRROR_CONFIG`` env var
        2. ``.folder_mirror/config.yml`` in CWD
        3. ``.folder_mirror/config.yaml`` in CWD
        4. ``~/.config/folder_mirror/config.yml``

    Only paths that exist on disk are returned.
    """
    candidates: list[Path] = []

    chosen = explicit or os.environ.get(CONFIG_ENV_VAR)
    if chosen:
        candidates.append(Path(chosen).expanduser().resolve())

    cwd = Path.cwd()
    candidates.append(cwd / PROJECT_CONFIG_DIR / "config.yml")
    candidates.append(cwd / PROJECT_CONFIG_DIR / "config.yaml")
    candidates.append(
        Path.home() / ".config" / "folder_mirror" / "config.yml"
    )

    return [p for p in candidates if p.exists()]


# ---------------------------------------------------------------------------
# 3. Starter config
# ---------------------------------------------------------------------------

_STARTER_CONFIG = """\
# folder-mirror configuration
#
# Values can also be set via environment variables:
#   FOLDER_MIRROR_INTERVAL_MS, FOLDER_MIRROR_LOG_FILE,
#   FOLDER_MIRROR_SOURCE, FOLDER_MIRROR_REPLICA
#
# mirror:
#   source: /path/to/source
#   replica: /path/to/replica
#   interval_ms: 60000
#   log_file: logs/folder-mirror.log
#
# logging:
#   level: INFO
#   file: null
#   format: text
"""


def ensure_config(target: Path | None = None) -> Path:
    """Ensure a config file exists, creating a commented starter if needed.

    Args:
        target: Explicit path to create. Defaults to
            ``CWD / .folder_mirror / config.yml``.

    Returns:
        Path to the config file (existing or newly created).
    """
    if target is not None:
        existing = [target] if target.exists() else []
    else:
        existing = discover_config_files()
    if existing:
        logger.debug("Config file already exists: %s", existing[0])
        return existing[0]

    config_path = target or Path.cwd() / PROJECT_CONFIG_DIR / "config.yml"
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(_STARTER_CONFIG, encoding="utf-8")
    logger.info("Created starter config: %s", config_path)

    return config_path


# ---------------------------------------------------------------------------
# 4. Hierarchical merge
# ---------------------------------------------------------------------------


def load_hierarchical_config(explicit: str | None = None) -> dict[str, Any]:
    """Load and merge all discovered config files.

    Files are applied from lowest precedence to highest; each file's
    top-level keys replace (not deep-merge) those from earlier files.
    Env var interpolation runs after the merge.

    Returns an empty dict when no config files exist (zero-config).
    """
    paths = discover_config_files(explicit)

    if not paths:
        logger.debug("No config files found, using zero-config defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        try:
            data = load_yaml_file(path)
        except Exception:
            logger.exception("Failed to load config file %s", path)
            raise

        if isinstance(data, dict):
            merged.update(data)
        elif data is not None:
            logger.warning(
                "Config file %s has non-dict root (%s), skipping",
                path,
                type(data).__name__,
            )

    return _interpolate_recursive(merged)
