"""Tests for folder_mirror.config: env-var config loading and validation.

NOT to be confused with test_config_loader.py (hierarchical YAML config)
or test_config_schema.py (Pydantic models). This tests the runtime
resolution path: validate_config() and load_config().
"""

from pathlib import Path

import pytest

from folder_mirror.config import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_LOG_FILE,
    SyncConfig,
    load_config,
    validate_config,
)

# -------------------------------------------------------------------------
# validate_config()
# -------------------------------------------------------------------------


class TestValidateConfig:
    """Tests for validate_config(): interval, log path and overlap checks."""

    def test_valid_config(self, tmp_path):
        config = SyncConfig(
            source_root=tmp_path / "source",
            replica_root=tmp_path / "replica",
        )
        validate_config(config)  # should not raise

    def test_missing_source_is_not_an_error(self, tmp_path):
        """The worker checks existence per cycle, not at load time."""
        config = SyncConfig(
            source_root=tmp_path / "does-not-exist",
            replica_root=tmp_path / "replica",
        )
        validate_config(config)

    @pytest.mark.parametrize("interval", [0, -5])
    def test_non_positive_interval(self, tmp_path, interval):
        config = SyncConfig(
            source_root=tmp_path / "a",
            replica_root=tmp_path / "b",
            interval_ms=interval,
        )
        with pytest.raises(ValueError, match="positive"):
            validate_config(config)

    def test_bool_interval_rejected(self, tmp_path):
        config = SyncConfig(
            source_root=tmp_path / "a",
            replica_root=tmp_path / "b",
            interval_ms=True,
        )
        with pytest.raises(ValueError, match="integer"):
            validate_config(config)

    def test_same_directory_rejected(self, tmp_path):
        config = SyncConfig(source_root=tmp_path, replica_root=tmp_path)
        with pytest.raises(ValueError, match="different directories"):
            validate_config(config)

    def test_replica_inside_source_rejected(self, tmp_path):
        config = SyncConfig(
            source_root=tmp_path / "src",
            replica_root=tmp_path / "src" / "backup",
        )
        with pytest.raises(ValueError, match="cannot be inside source"):
            validate_config(config)

    def test_source_inside_replica_rejected(self, tmp_path):
        config = SyncConfig(
            source_root=tmp_path / "backup" / "src",
            replica_root=tmp_path / "backup",
        )
        with pytest.raises(ValueError, match="cannot be inside replica"):
            validate_config(config)

    def test_sibling_with_common_prefix_allowed(self, tmp_path):
        config = SyncConfig(
            source_root=tmp_path / "data",
            replica_root=tmp_path / "data-copy",
        )
        validate_config(config)

    @pytest.mark.parametrize("tree", ["source", "replica"])
    def test_log_file_inside_tree_rejected(self, tmp_path, tree):
        config = SyncConfig(
            source_root=tmp_path / "source",
            replica_root=tmp_path / "replica",
            log_file=tmp_path / tree / "logs" / "mirror.log",
        )
        with pytest.raises(ValueError, match=f"cannot be inside {tree}"):
            validate_config(config)

    def test_log_file_beside_trees_allowed(self, tmp_path):
        config = SyncConfig(
            source_root=tmp_path / "source",
            replica_root=tmp_path / "replica",
            log_file=tmp_path / "replica.log",
        )
        validate_config(config)

    def test_interval_seconds(self, tmp_path):
        config = SyncConfig(
            source_root=tmp_path / "a",
            replica_root=tmp_path / "b",
            interval_ms=1500,
        )
        assert config.interval_seconds == 1.5


# -------------------------------------------------------------------------
# load_config()
# -------------------------------------------------------------------------


class TestLoadConfig:
    """Tests for load_config() precedence: CLI > env > YAML > defaults."""

    def test_defaults(self, tmp_path):
        config = load_config(
            source=str(tmp_path / "a"), replica=str(tmp_path / "b")
        )
        assert config.interval_ms == DEFAULT_INTERVAL_MS
        assert config.log_file == Path(DEFAULT_LOG_FILE)
        assert config.source_root == tmp_path / "a"
        assert config.replica_root == tmp_path / "b"

    def test_cli_args(self, tmp_path):
        config = load_config(
            interval_ms="2500",
            log_file=str(tmp_path / "mirror.log"),
            source=str(tmp_path / "a"),
            replica=str(tmp_path / "b"),
        )
        assert config.interval_ms == 2500
        assert config.log_file == tmp_path / "mirror.log"

    def test_env_vars(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FOLDER_MIRROR_INTERVAL_MS", "750")
        monkeypatch.setenv("FOLDER_MIRROR_LOG_FILE", str(tmp_path / "env.log"))
        monkeypatch.setenv("FOLDER_MIRROR_SOURCE", str(tmp_path / "a"))
        monkeypatch.setenv("FOLDER_MIRROR_REPLICA", str(tmp_path / "b"))

        config = load_config()

        assert config.interval_ms == 750
        assert config.log_file == tmp_path / "env.log"
        assert config.source_root == tmp_path / "a"

    def test_cli_beats_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FOLDER_MIRROR_INTERVAL_MS", "750")
        monkeypatch.setenv("FOLDER_MIRROR_SOURCE", str(tmp_path / "env"))

        config = load_config(
            interval_ms=100,
            source=str(tmp_path / "cli"),
            replica=str(tmp_path / "b"),
        )

        assert config.interval_ms == 100
        assert config.source_root == tmp_path / "cli"

    def test_env_beats_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FOLDER_MIRROR_REPLICA", str(tmp_path / "env"))
        config = load_config(
            yaml_fallbacks={
                "source": str(tmp_path / "yaml-src"),
                "replica": str(tmp_path / "yaml-dst"),
                "interval_ms": 42,
                "log_file": "yaml.log",
            }
        )
        assert config.source_root == tmp_path / "yaml-src"
        assert config.replica_root == tmp_path / "env"
        assert config.interval_ms == 42
        assert config.log_file == Path("yaml.log")

    def test_missing_source(self, tmp_path):
        with pytest.raises(ValueError, match="Source directory not found"):
            load_config(replica=str(tmp_path / "b"))

    def test_blank_source_is_missing(self, tmp_path):
        with pytest.raises(ValueError, match="Source directory not found"):
            load_config(source="   ", replica=str(tmp_path / "b"))

    def test_missing_replica(self, tmp_path):
        with pytest.raises(ValueError, match="Replica directory not found"):
            load_config(source=str(tmp_path / "a"))

    def test_non_numeric_interval(self, tmp_path):
        with pytest.raises(ValueError, match="number of milliseconds"):
            load_config(
                interval_ms="soon",
                source=str(tmp_path / "a"),
                replica=str(tmp_path / "b"),
            )

    def test_non_numeric_env_interval_names_variable(
        self, tmp_path, monkeypatch
    ):
        monkeypatch.setenv("FOLDER_MIRROR_INTERVAL_MS", "1m")
        with pytest.raises(ValueError, match="FOLDER_MIRROR_INTERVAL_MS"):
            load_config(
                source=str(tmp_path / "a"), replica=str(tmp_path / "b")
            )

    def test_zero_interval_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="positive"):
            load_config(
                interval_ms="0",
                source=str(tmp_path / "a"),
                replica=str(tmp_path / "b"),
            )

    def test_tilde_expanded(self, tmp_path):
        config = load_config(source="~/src", replica=str(tmp_path / "b"))
        assert config.source_root == tmp_path / "home" / "src"
