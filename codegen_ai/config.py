"""Configuration management for codegen-ai.

Configuration files are loaded with project-level priority (no merging):

1. **config.toml**:
   - Global: ~/.config/codegen-ai/config.toml
   - Project: .codegen/config.toml (overrides global entirely)
   - Contains: general, gemini, display, logging

2. **config.json** (legacy, project directory only):
   - Used only when no config.toml exists
   - Format: {"gemini": {"api_key": ..., "model_name": ...}, "database": {...}}
   - The database section is accepted and ignored

3. **Environment variables** (CODEGEN_*):
   - Merged on top of the file configuration
   - GOOGLE_API_KEY is a fallback for the Gemini API key
"""

from __future__ import annotations

import json
import os
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from codegen_ai.exceptions import ConfigError

# =============================================================================
# Configuration Models
# =============================================================================


class GeneralConfig(BaseModel):
    """General application configuration."""

    backend: str = "gemini"
    """Generation backend identifier."""

    templates_dir: str = "templates"
    """Directory whose sub-directories are the selectable templates."""

    prompt_file: str = "prompt.txt"
    """Prompt file name inside each template directory."""

    request_timeout: float = Field(default=120.0, ge=0)
    """Seconds to wait for a generation before reporting a timeout. 0 disables."""


class GeminiConfig(BaseModel):
    """Gemini API settings."""

    api_key: str = ""
    model_name: str = "gemini-2.0-flash"

    @property
    def is_configured(self) -> bool:
        """Check if an API key is present."""
        return bool(self.api_key)


class DisplayConfig(BaseModel):
    """Display and rendering configuration (rich style strings)."""

    color: bool = True
    """Emit ANSI colors."""

    title_style: str = "bold #FAFAFA on #7D56F4"
    item_style: str = "#DDDDDD"
    selected_style: str = "bold #FFFFFF on #7D56F4"
    info_style: str = "italic #ABABAB"
    hint_style: str = "#FF5555"
    error_style: str = "bold #FFFFFF on #FF0000"
    loading_style: str = "bold #FFFF00"


class LoggingConfig(BaseModel):
    """Log file configuration."""

    log_dir: str = "logs"
    """Directory for daily log files."""

    level: str = "INFO"


class CodegenConfig(BaseModel):
    """Complete codegen-ai configuration."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def is_configured(self) -> bool:
        """Check if the selected backend has credentials."""
        if self.general.backend == "gemini":
            return self.gemini.is_configured
        return True


# =============================================================================
# Environment Settings (using pydantic-settings)
# =============================================================================


class EnvSettings(BaseSettings):
    """Overrides from CODEGEN_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CODEGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # General
    backend: str | None = None
    templates_dir: str | None = None
    request_timeout: float | None = None

    # Gemini
    api_key: str | None = None
    model_name: str | None = None

    # Display
    color: bool | None = None

    # Logging
    log_dir: str | None = None
    log_level: str | None = None


# =============================================================================
# ConfigManager
# =============================================================================


class ConfigManager:
    """Manages configuration loading from global, project, and environment sources."""

    DEFAULT_CONFIG_DIR = Path.home() / ".config" / "codegen-ai"
    PROJECT_CONFIG_DIR = ".codegen"
    LEGACY_CONFIG_FILE = "config.json"

    def __init__(
        self,
        config_dir: Path | None = None,
        project_dir: Path | None = None,
    ) -> None:
        self._config_dir = config_dir or self.DEFAULT_CONFIG_DIR
        self._project_dir = project_dir or Path.cwd()
        self._config: CodegenConfig | None = None
        self._loaded_sources: list[str] = []

    @property
    def config(self) -> CodegenConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load()
        return self._config

    @property
    def config_dir(self) -> Path:
        """Get global config directory."""
        return self._config_dir

    @property
    def project_dir(self) -> Path:
        """Get project directory."""
        return self._project_dir

    @property
    def loaded_sources(self) -> list[str]:
        """Get list of loaded configuration sources."""
        return self._loaded_sources.copy()

    def load(self) -> CodegenConfig:
        """Load configuration from all sources.

        Priority (higher wins, no merging between file levels):
        1. Project config.toml > global config.toml > legacy config.json
        2. Environment overrides (merged on top)

        Raises:
            ConfigError: If a file cannot be parsed or values are invalid.
        """
        self._loaded_sources = []
        merged: dict[str, Any] = {}

        project_config_file = self.get_project_config_file()
        global_config_file = self.get_global_config_file()
        legacy_config_file = self._project_dir / self.LEGACY_CONFIG_FILE

        if project_config_file.exists():
            merged = _read_toml(project_config_file)
            self._loaded_sources.append(str(project_config_file))
        elif global_config_file.exists():
            merged = _read_toml(global_config_file)
            self._loaded_sources.append(str(global_config_file))
        elif legacy_config_file.exists():
            merged = _read_json(legacy_config_file)
            self._loaded_sources.append(str(legacy_config_file))

        env_overrides = self._load_env_overrides()
        if env_overrides:
            merged = _deep_merge(merged, env_overrides)
            self._loaded_sources.append("environment")

        try:
            config = CodegenConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

        if not config.gemini.api_key:
            config.gemini.api_key = os.getenv("GOOGLE_API_KEY", "")

        self._config = config
        return self._config

    def reload(self) -> CodegenConfig:
        """Force reload configuration."""
        self._config = None
        return self.load()

    def _load_env_overrides(self) -> dict[str, Any]:
        """Load overrides from environment using pydantic-settings."""
        env = EnvSettings()
        overrides: dict[str, Any] = {}

        general: dict[str, Any] = {}
        if env.backend is not None:
            general["backend"] = env.backend
        if env.templates_dir is not None:
            general["templates_dir"] = env.templates_dir
        if env.request_timeout is not None:
            general["request_timeout"] = env.request_timeout
        if general:
            overrides["general"] = general

        gemini: dict[str, Any] = {}
        if env.api_key is not None:
            gemini["api_key"] = env.api_key
        if env.model_name is not None:
            gemini["model_name"] = env.model_name
        if gemini:
            overrides["gemini"] = gemini

        if env.color is not None:
            overrides["display"] = {"color": env.color}

        logging_overrides: dict[str, Any] = {}
        if env.log_dir is not None:
            logging_overrides["log_dir"] = env.log_dir
        if env.log_level is not None:
            logging_overrides["level"] = env.log_level
        if logging_overrides:
            overrides["logging"] = logging_overrides

        return overrides

    def resolve_path(self, value: str) -> Path:
        """Resolve a configured path relative to the project directory."""
        path = Path(value).expanduser()
        if path.is_absolute():
            return path
        return self._project_dir / path

    def ensure_config_dir(self) -> None:
        """Create global config directory."""
        self._config_dir.mkdir(parents=True, exist_ok=True)

    def save_default_config(self, force: bool = False) -> Path | None:
        """Save default global configuration.

        Returns:
            Path written, or None if the file exists and force is False.
        """
        config_file = self.get_global_config_file()
        if config_file.exists() and not force:
            return None

        self.ensure_config_dir()
        config_file.write_text(_load_resource("config.toml"))
        return config_file

    def get_global_config_file(self) -> Path:
        """Get path to global config file."""
        return self._config_dir / "config.toml"

    def get_project_config_file(self) -> Path:
        """Get path to project config file."""
        return self._project_dir / self.PROJECT_CONFIG_DIR / "config.toml"


# =============================================================================
# Internal Utilities
# =============================================================================


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot load {path}: {e}") from e


def _read_json(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot load {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Cannot load {path}: expected a JSON object")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_resource(name: str) -> str:
    """Load a packaged resource file."""
    resource_files = resources.files("codegen_ai").joinpath("resources")
    return resource_files.joinpath(name).read_text(encoding="utf-8")


# =============================================================================
# Convenience Functions
# =============================================================================


def load_config(
    config_dir: Path | None = None,
    project_dir: Path | None = None,
) -> CodegenConfig:
    """Load configuration from all sources.

    Args:
        config_dir: Optional custom global config directory.
        project_dir: Optional custom project directory.

    Returns:
        Loaded CodegenConfig.
    """
    manager = ConfigManager(config_dir=config_dir, project_dir=project_dir)
    return manager.load()
