"""Tests for configuration management."""

import os

import pytest

from opsbook.config import (
    ConfigLoader,
    EngineConfig,
    GlobalConfig,
    OpsbookConfig,
    get_default_config,
    load_config,
)
from opsbook.core.exceptions import ConfigError
from opsbook.core.logging import LogLevel
from opsbook.core.output import OutputFormat


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_default_values(self):
        config = EngineConfig()
        assert config.command_delay == 1.0
        assert config.step_delay == 0.5
        assert config.validation_delay == 0.5
        assert config.load_builtin is True
        assert config.reject_duplicate_ids is False
        assert config.runbook_paths == []

    def test_env_override(self):
        os.environ["OPSBOOK_ENGINE_STEP_DELAY"] = "0"
        config = EngineConfig()
        assert config.step_delay == 0
        del os.environ["OPSBOOK_ENGINE_STEP_DELAY"]

    def test_env_wins_over_file_values(self):
        os.environ["OPSBOOK_ENGINE_COMMAND_DELAY"] = "0.25"
        config = OpsbookConfig(engine={"command_delay": 3})
        assert config.engine.command_delay == 0.25
        del os.environ["OPSBOOK_ENGINE_COMMAND_DELAY"]

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            EngineConfig(step_delay=-1)

    def test_relative_paths_resolved(self, tmp_path):
        config = EngineConfig(runbook_paths=["runbooks", "/abs/path.yaml"])
        paths = config.get_runbook_paths(tmp_path)
        assert paths[0] == tmp_path / "runbooks"
        assert str(paths[1]) == "/abs/path.yaml"


class TestGlobalConfig:
    """Tests for GlobalConfig."""

    def test_default_values(self):
        config = GlobalConfig()
        assert config.output_format == OutputFormat.TABLE
        assert config.color == "auto"
        assert config.verbosity == LogLevel.WARNING

    def test_invalid_color(self):
        with pytest.raises(ValueError):
            GlobalConfig(color="sometimes")


class TestOpsbookConfig:
    """Tests for the root configuration model."""

    def test_defaults(self):
        config = get_default_config()
        assert config.version == "1"
        assert isinstance(config.engine, EngineConfig)

    def test_global_alias(self):
        config = OpsbookConfig(**{"global": {"output_format": "json"}})
        assert config.global_settings.output_format == OutputFormat.JSON


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_load_explicit_file(self, temp_config_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))

        config = load_config(temp_config_file)

        assert config.engine.step_delay == 0
        assert config.engine.command_delay == 0
        assert config.source_dir == tmp_path.resolve()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            ConfigLoader().load(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("engine: [oops\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            ConfigLoader().load(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("global:\n  color: sometimes\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            ConfigLoader().load(path)

    def test_project_config_found_upward(self, tmp_path, monkeypatch):
        (tmp_path / "opsbook.yaml").write_text("engine:\n  load_builtin: false\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))

        config = ConfigLoader().load()

        assert config.engine.load_builtin is False
        assert config.source_dir == tmp_path.resolve()

    def test_deep_merge(self):
        loader = ConfigLoader()
        merged = loader._merge_configs([
            {"engine": {"step_delay": 1, "command_delay": 2}},
            {"engine": {"step_delay": 5}},
        ])
        assert merged == {"engine": {"step_delay": 5, "command_delay": 2}}
