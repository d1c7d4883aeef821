"""Configuration management for opsbook using Pydantic."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from opsbook.core.exceptions import ConfigError
from opsbook.core.output import OutputFormat
from opsbook.core.logging import LogLevel


class EngineConfig(BaseSettings):
    """Runbook engine settings.

    Values can be overridden with ``OPSBOOK_ENGINE_*`` environment variables.
    """

    model_config = SettingsConfigDict(env_prefix="OPSBOOK_ENGINE_", extra="ignore")

    command_delay: float = Field(default=1.0, ge=0)
    step_delay: float = Field(default=0.5, ge=0)
    validation_delay: float = Field(default=0.5, ge=0)
    load_builtin: bool = True
    reject_duplicate_ids: bool = False
    runbook_paths: list[str] = Field(default_factory=list)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        # Environment wins over values read from config files
        return env_settings, init_settings

    def get_runbook_paths(self, base_dir: Path | None = None) -> list[Path]:
        """Resolve configured runbook paths, relative ones against ``base_dir``."""
        paths = []
        for raw in self.runbook_paths:
            path = Path(raw).expanduser()
            if not path.is_absolute() and base_dir is not None:
                path = base_dir / path
            paths.append(path)
        return paths


class GlobalConfig(BaseModel):
    """Global settings."""

    output_format: OutputFormat = OutputFormat.TABLE
    color: str = "auto"  # auto, always, never
    verbosity: LogLevel = LogLevel.WARNING

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in ("auto", "always", "never"):
            raise ValueError("color must be 'auto', 'always', or 'never'")
        return v


class OpsbookConfig(BaseModel):
    """Main configuration model."""

    model_config = {"populate_by_name": True}

    version: str = "1"
    global_settings: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    engine: EngineConfig = Field(default_factory=EngineConfig)
    source_dir: Path | None = Field(default=None, exclude=True)

    @field_validator("engine", mode="before")
    @classmethod
    def build_engine_settings(cls, v: Any) -> Any:
        # Go through the settings constructor so environment overrides apply
        if isinstance(v, dict):
            return EngineConfig(**v)
        return v


class ConfigLoader:
    """Loads and merges configuration from multiple sources."""

    CONFIG_FILENAMES = ["opsbook.yaml", "opsbook.yml", ".opsbook.yaml", ".opsbook.yml"]

    def __init__(self):
        self._config: OpsbookConfig | None = None

    def load(self, config_file: str | Path | None = None) -> OpsbookConfig:
        """Load configuration from files and environment.

        Priority (highest to lowest):
        1. Explicitly specified config file
        2. Project config (./opsbook.yaml)
        3. User config (~/.opsbook/config.yaml)

        Args:
            config_file: Optional explicit config file path

        Returns:
            Merged configuration
        """
        configs: list[dict[str, Any]] = []
        source_dir: Path | None = None

        user_config_path = Path.home() / ".opsbook" / "config.yaml"
        if user_config_path.exists():
            configs.append(self._load_yaml_file(user_config_path))
            source_dir = user_config_path.parent

        project_config = self._find_project_config()
        if project_config:
            configs.append(self._load_yaml_file(project_config))
            source_dir = project_config.parent

        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_file}")
            configs.append(self._load_yaml_file(config_path))
            source_dir = config_path.resolve().parent

        merged = self._merge_configs(configs)

        try:
            self._config = OpsbookConfig(**merged)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}")

        self._config.source_dir = source_dir
        return self._config

    def _find_project_config(self) -> Path | None:
        """Find project config file in current or parent directories."""
        current = Path.cwd()

        while current != current.parent:
            for filename in self.CONFIG_FILENAMES:
                config_path = current / filename
                if config_path.exists():
                    return config_path
            current = current.parent

        return None

    def _load_yaml_file(self, path: Path) -> dict[str, Any]:
        """Load a YAML config file."""
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}")

        if not isinstance(content, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")
        return content

    def _merge_configs(self, configs: list[dict[str, Any]]) -> dict[str, Any]:
        """Deep merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = self._deep_merge(result, config)
        return result

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


def load_config(config_file: str | Path | None = None) -> OpsbookConfig:
    """Load opsbook configuration.

    Args:
        config_file: Optional explicit config file path

    Returns:
        Loaded configuration
    """
    return ConfigLoader().load(config_file)


def get_default_config() -> OpsbookConfig:
    """Get default configuration without loading from files."""
    return OpsbookConfig()
