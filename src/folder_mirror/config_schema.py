"""Configuration file schema for folder_mirror.

Defines Pydantic models for the YAML config structure with dedicated
sections for the mirrored directories and logging, plus an adapter that
turns a parsed file into the runtime ``SyncConfig``.

Usage:
    from folder_mirror.config_schema import build_config, to_sync_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
    config = to_sync_config(unified, cli_overrides={"source": "/data"})
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from .config import SyncConfig, load_config

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class MirrorConfig(BaseModel):
    """Mirroring settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    source: str | None = Field(
        default=None, description="Source root directory"
    )
    replica: str | None = Field(
        default=None, description="Replica root directory"
    )
    interval_ms: int | None = Field(
        default=None,
        gt=0,
        description="Delay between synchronization cycles (milliseconds)",
    )
    log_file: str | None = Field(
        default=None, description="Log sink file path"
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Diagnostic logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional diagnostic log file path (separate from the sink).
        format: ``text`` or ``json``.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(
        default=None, description="Diagnostic log file path"
    )
    format: str = Field(
        default="text", pattern="^(text|json)$", description="Log format"
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level configuration file model.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid.
    """

    mirror: MirrorConfig = Field(default_factory=MirrorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Missing sections get defaults.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.

    Raises:
        pydantic.ValidationError: If a section holds invalid values.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


def mirror_fallbacks(unified: UnifiedConfig) -> dict:
    """Return the non-None ``mirror`` values for ``load_config()``."""
    return {
        k: v
        for k, v in unified.mirror.model_dump().items()
        if v is not None
    }


def to_sync_config(
    unified: UnifiedConfig,
    cli_overrides: dict | None = None,
) -> SyncConfig:
    """Resolve a ``SyncConfig`` from a parsed file plus CLI overrides.

    Environment variables sit between the two, exactly as in
    ``load_config()``.

    CLI overrides dict keys: interval_ms, log_file, source, replica.

    Args:
        unified: The unified config produced by ``build_config()``.
        cli_overrides: Optional dict of CLI argument values.

    Returns:
        Validated ``SyncConfig`` instance.

    Raises:
        ValueError: If the resolved configuration is incomplete or invalid.
    """
    overrides = cli_overrides or {}

    return load_config(
        interval_ms=overrides.get("interval_ms"),
        log_file=overrides.get("log_file"),
        source=overrides.get("source"),
        replica=overrides.get("replica"),
        yaml_fallbacks=mirror_fallbacks(unified),
    )
