"""Tests for codegen_ai.config module."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path

import pytest

from codegen_ai.config import (
    CodegenConfig,
    ConfigManager,
    EnvSettings,
    GeminiConfig,
    load_config,
)
from codegen_ai.exceptions import ConfigError


def _write_project_config(project_dir: Path, content: str) -> Path:
    path = project_dir / ".codegen" / "config.toml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


# =============================================================================
# Model Tests
# =============================================================================


def test_config_defaults() -> None:
    """Should have correct default values."""
    config = CodegenConfig()
    assert config.general.backend == "gemini"
    assert config.general.templates_dir == "templates"
    assert config.general.prompt_file == "prompt.txt"
    assert config.general.request_timeout == 120.0
    assert config.gemini.model_name == "gemini-2.0-flash"
    assert config.display.color is True
    assert config.logging.log_dir == "logs"


def test_is_configured_requires_gemini_key() -> None:
    assert not CodegenConfig().is_configured
    assert CodegenConfig(gemini=GeminiConfig(api_key="k")).is_configured


def test_negative_timeout_rejected(config_manager: ConfigManager, clean_env) -> None:
    config_manager.ensure_config_dir()
    config_manager.get_global_config_file().write_text("[general]\nrequest_timeout = -1\n")

    with pytest.raises(ConfigError, match="Invalid configuration"):
        config_manager.load()


# =============================================================================
# File Source Tests
# =============================================================================


def test_load_without_files(config_manager: ConfigManager, clean_env) -> None:
    """No files and no environment yields defaults."""
    config = config_manager.load()

    assert config == CodegenConfig()
    assert config_manager.loaded_sources == []


def test_load_global_config(config_manager: ConfigManager, clean_env) -> None:
    config_manager.get_global_config_file().write_text('[gemini]\napi_key = "global-key"\nmodel_name = "gemini-pro"\n')

    config = config_manager.load()

    assert config.gemini.api_key == "global-key"
    assert config.gemini.model_name == "gemini-pro"
    assert config_manager.loaded_sources == [str(config_manager.get_global_config_file())]


def test_project_config_replaces_global(config_manager: ConfigManager, temp_project_dir: Path, clean_env) -> None:
    """Project config.toml wins entirely; global values are not merged in."""
    config_manager.get_global_config_file().write_text('[gemini]\napi_key = "global-key"\nmodel_name = "gemini-pro"\n')
    project_file = _write_project_config(temp_project_dir, '[gemini]\napi_key = "project-key"\n')

    config = config_manager.load()

    assert config.gemini.api_key == "project-key"
    assert config.gemini.model_name == "gemini-2.0-flash"
    assert config_manager.loaded_sources == [str(project_file)]


def test_legacy_json_config(config_manager: ConfigManager, temp_project_dir: Path, clean_env) -> None:
    legacy = temp_project_dir / "config.json"
    legacy.write_text(
        json.dumps(
            {
                "database": {"host": "localhost", "port": 5432},
                "gemini": {"api_key": "legacy-key", "model_name": "gemini-1.5-pro"},
            }
        )
    )

    config = config_manager.load()

    assert config.gemini.api_key == "legacy-key"
    assert config.gemini.model_name == "gemini-1.5-pro"
    assert config_manager.loaded_sources == [str(legacy)]


def test_toml_beats_legacy_json(config_manager: ConfigManager, temp_project_dir: Path, clean_env) -> None:
    (temp_project_dir / "config.json").write_text(json.dumps({"gemini": {"api_key": "legacy-key"}}))
    config_manager.get_global_config_file().write_text('[gemini]\napi_key = "global-key"\n')

    assert config_manager.load().gemini.api_key == "global-key"


def test_invalid_toml_raises(config_manager: ConfigManager, clean_env) -> None:
    config_manager.get_global_config_file().write_text("[gemini\napi_key = ")

    with pytest.raises(ConfigError, match="Cannot load"):
        config_manager.load()


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_invalid_legacy_json_raises(
    config_manager: ConfigManager, temp_project_dir: Path, clean_env, content: str
) -> None:
    (temp_project_dir / "config.json").write_text(content)

    with pytest.raises(ConfigError):
        config_manager.load()


# =============================================================================
# Environment Tests
# =============================================================================


def test_env_settings_from_env(monkeypatch, clean_env) -> None:
    """Should load from CODEGEN_* environment variables."""
    monkeypatch.setenv("CODEGEN_API_KEY", "env-key")
    monkeypatch.setenv("CODEGEN_REQUEST_TIMEOUT", "30")
    monkeypatch.setenv("CODEGEN_COLOR", "false")

    env = EnvSettings()
    assert env.api_key == "env-key"
    assert env.request_timeout == 30.0
    assert env.color is False
    assert env.backend is None


def test_env_overrides_file(config_manager: ConfigManager, monkeypatch, clean_env) -> None:
    config_manager.get_global_config_file().write_text(
        '[gemini]\napi_key = "file-key"\nmodel_name = "gemini-pro"\n\n[general]\ntemplates_dir = "tpl"\n'
    )
    monkeypatch.setenv("CODEGEN_API_KEY", "env-key")
    monkeypatch.setenv("CODEGEN_LOG_DIR", "/var/log/codegen")

    config = config_manager.load()

    assert config.gemini.api_key == "env-key"
    assert config.gemini.model_name == "gemini-pro"
    assert config.general.templates_dir == "tpl"
    assert config.logging.log_dir == "/var/log/codegen"
    assert config_manager.loaded_sources[-1] == "environment"


def test_google_api_key_fallback(config_manager: ConfigManager, monkeypatch, clean_env) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "google-key")

    config = config_manager.load()

    assert config.gemini.api_key == "google-key"
    assert config.is_configured


def test_google_api_key_does_not_override_configured_key(
    config_manager: ConfigManager, monkeypatch, clean_env
) -> None:
    config_manager.get_global_config_file().write_text('[gemini]\napi_key = "file-key"\n')
    monkeypatch.setenv("GOOGLE_API_KEY", "google-key")

    assert config_manager.load().gemini.api_key == "file-key"


# =============================================================================
# ConfigManager Tests
# =============================================================================


def test_resolve_path(config_manager: ConfigManager, temp_project_dir: Path, tmp_path: Path) -> None:
    assert config_manager.resolve_path("templates") == temp_project_dir / "templates"
    assert config_manager.resolve_path(str(tmp_path / "abs")) == tmp_path / "abs"


def test_save_default_config(temp_home: Path, temp_project_dir: Path, clean_env) -> None:
    config_dir = temp_home / ".config" / "codegen-ai"
    manager = ConfigManager(config_dir=config_dir, project_dir=temp_project_dir)

    path = manager.save_default_config()

    assert path == config_dir / "config.toml"
    data = tomllib.loads(path.read_text())
    assert data["general"]["backend"] == "gemini"
    assert data["gemini"]["model_name"] == "gemini-2.0-flash"
    assert manager.load() == CodegenConfig()


def test_save_default_config_does_not_overwrite(config_manager: ConfigManager) -> None:
    config_file = config_manager.get_global_config_file()
    config_file.write_text("# mine\n")

    assert config_manager.save_default_config() is None
    assert config_file.read_text() == "# mine\n"

    assert config_manager.save_default_config(force=True) == config_file
    assert config_file.read_text() != "# mine\n"


def test_reload_picks_up_changes(config_manager: ConfigManager, clean_env) -> None:
    assert config_manager.config.gemini.api_key == ""

    config_manager.get_global_config_file().write_text('[gemini]\napi_key = "new-key"\n')

    assert config_manager.config.gemini.api_key == ""
    assert config_manager.reload().gemini.api_key == "new-key"


def test_load_config_helper(temp_config_dir: Path, temp_project_dir: Path, clean_env) -> None:
    _write_project_config(temp_project_dir, '[general]\nbackend = "gemini"\nrequest_timeout = 0\n')

    config = load_config(config_dir=temp_config_dir, project_dir=temp_project_dir)

    assert config.general.request_timeout == 0
