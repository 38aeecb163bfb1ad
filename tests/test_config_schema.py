"""Tests for the config file schema and its adapter to SyncConfig.

Covers the Pydantic models in config_schema.py (UnifiedConfig,
MirrorConfig, LoggingConfig), the build_config() factory, and the
to_sync_config() adapter.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from folder_mirror.config_schema import (
    LoggingConfig,
    MirrorConfig,
    UnifiedConfig,
    build_config,
    mirror_fallbacks,
    to_sync_config,
)

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TestUnifiedConfig:
    """Tests for the top-level UnifiedConfig model."""

    def test_zero_config_defaults(self):
        config = UnifiedConfig()
        assert config.mirror.source is None
        assert config.mirror.interval_ms is None
        assert config.logging.level == "INFO"
        assert config.logging.format == "text"
        assert config.logging.file is None

    def test_frozen(self):
        config = UnifiedConfig()
        with pytest.raises(ValidationError):
            config.mirror = MirrorConfig(source="/x")


class TestMirrorConfig:
    """Tests for MirrorConfig validation."""

    def test_valid(self):
        config = MirrorConfig(
            source="/a", replica="/b", interval_ms=1000, log_file="m.log"
        )
        assert config.interval_ms == 1000

    @pytest.mark.parametrize("interval", [0, -1])
    def test_non_positive_interval_rejected(self, interval):
        with pytest.raises(ValidationError):
            MirrorConfig(interval_ms=interval)


class TestLoggingConfig:
    """Tests for LoggingConfig validation."""

    def test_json_format_accepted(self):
        assert LoggingConfig(format="json").format == "json"

    def test_unknown_format_rejected(self):
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")


# ---------------------------------------------------------------------------
# build_config()
# ---------------------------------------------------------------------------


class TestBuildConfig:
    """Tests for build_config()."""

    def test_empty_dict(self):
        assert build_config({}) == UnifiedConfig()

    def test_sections_parsed(self):
        config = build_config(
            {
                "mirror": {"source": "/a", "interval_ms": 10},
                "logging": {"level": "DEBUG"},
            }
        )
        assert config.mirror.source == "/a"
        assert config.mirror.interval_ms == 10
        assert config.logging.level == "DEBUG"

    def test_invalid_section_raises(self):
        with pytest.raises(ValidationError):
            build_config({"mirror": {"interval_ms": "never"}})

    def test_validation_error_is_value_error(self):
        """The CLI catches ValueError for config file problems."""
        with pytest.raises(ValueError):
            build_config({"logging": {"format": "yaml"}})


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------


class TestAdapters:
    """Tests for mirror_fallbacks() and to_sync_config()."""

    def test_fallbacks_drop_unset(self):
        unified = build_config({"mirror": {"source": "/a"}})
        assert mirror_fallbacks(unified) == {"source": "/a"}

    def test_yaml_values_used(self, tmp_path):
        unified = build_config(
            {
                "mirror": {
                    "source": str(tmp_path / "a"),
                    "replica": str(tmp_path / "b"),
                    "interval_ms": 250,
                }
            }
        )
        config = to_sync_config(unified)
        assert config.source_root == tmp_path / "a"
        assert config.interval_ms == 250

    def test_cli_overrides_win(self, tmp_path):
        unified = build_config(
            {
                "mirror": {
                    "source": str(tmp_path / "a"),
                    "replica": str(tmp_path / "b"),
                    "log_file": "yaml.log",
                }
            }
        )
        config = to_sync_config(
            unified,
            cli_overrides={"replica": str(tmp_path / "c"), "log_file": "cli.log"},
        )
        assert config.replica_root == tmp_path / "c"
        assert config.log_file == Path("cli.log")

    def test_incomplete_raises(self):
        with pytest.raises(ValueError, match="Source directory not found"):
            to_sync_config(UnifiedConfig())
