"""Tests for codegen_ai.cli module."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from codegen_ai import __version__
from codegen_ai.backends import GeminiGateway
from codegen_ai.catalog import FilePromptSource, Template
from codegen_ai.cli import EXIT_INTERRUPTED, EXIT_OK, EXIT_STARTUP_FAILURE, cli
from codegen_ai.config import ConfigManager


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def cli_env(monkeypatch, temp_config_dir: Path, temp_project_dir: Path, clean_env) -> Path:
    """Isolate config lookup and run from the temp project directory."""
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_DIR", temp_config_dir)
    monkeypatch.chdir(temp_project_dir)
    return temp_project_dir


@pytest.fixture
def tui_calls(monkeypatch) -> list[dict[str, Any]]:
    """Replace the TUI with a recorder."""
    calls: list[dict[str, Any]] = []

    async def fake_run_tui(config, templates, prompt_source, gateway, log_dir) -> None:
        calls.append(
            {
                "config": config,
                "templates": templates,
                "prompt_source": prompt_source,
                "gateway": gateway,
                "log_dir": log_dir,
            }
        )

    monkeypatch.setattr("codegen_ai.cli._run_tui", fake_run_tui)
    return calls


def test_version(runner: CliRunner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_config_once(runner: CliRunner, cli_env: Path, temp_config_dir: Path):
    result = runner.invoke(cli, ["--init"])

    assert result.exit_code == EXIT_OK
    assert "Created:" in result.output
    assert (temp_config_dir / "config.toml").exists()

    result = runner.invoke(cli, ["--init"])

    assert result.exit_code == EXIT_OK
    assert "Skipped:" in result.output


def test_missing_api_key_fails(runner: CliRunner, cli_env: Path, tui_calls):
    result = runner.invoke(cli, [])

    assert result.exit_code == EXIT_STARTUP_FAILURE
    assert "No API key configured" in result.output
    assert tui_calls == []


def test_unsupported_backend_fails(runner: CliRunner, cli_env: Path, tui_calls, monkeypatch):
    monkeypatch.setenv("CODEGEN_API_KEY", "k")

    result = runner.invoke(cli, ["--backend", "openai"])

    assert result.exit_code == EXIT_STARTUP_FAILURE
    assert "unsupported backend: openai" in result.output
    assert tui_calls == []


def test_unreadable_templates_dir_fails(runner: CliRunner, cli_env: Path, tui_calls, monkeypatch):
    not_a_dir = cli_env / "templates"
    not_a_dir.write_text("oops")
    monkeypatch.setenv("CODEGEN_API_KEY", "k")

    result = runner.invoke(cli, [])

    assert result.exit_code == EXIT_STARTUP_FAILURE
    assert "Cannot read templates" in result.output
    assert tui_calls == []


def test_invalid_config_fails(runner: CliRunner, cli_env: Path, temp_config_dir: Path, tui_calls):
    (temp_config_dir / "config.toml").write_text("[general\n")

    result = runner.invoke(cli, [])

    assert result.exit_code == EXIT_STARTUP_FAILURE
    assert "Cannot load" in result.output


def test_launches_tui(runner: CliRunner, cli_env: Path, templates_dir: Path, tui_calls, monkeypatch):
    monkeypatch.setenv("CODEGEN_API_KEY", "k")

    result = runner.invoke(cli, ["--templates-dir", str(templates_dir)])

    assert result.exit_code == EXIT_OK, result.output
    (call,) = tui_calls
    assert call["templates"] == [Template("api-client"), Template("crud-service")]
    assert isinstance(call["gateway"], GeminiGateway)
    assert isinstance(call["prompt_source"], FilePromptSource)
    assert call["prompt_source"].read_prompt("crud-service") == "prompt for crud-service"
    assert call["log_dir"] == cli_env / "logs"


def test_missing_templates_dir_launches_with_empty_catalog(runner: CliRunner, cli_env: Path, tui_calls, monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "k")

    result = runner.invoke(cli, [])

    assert result.exit_code == EXIT_OK, result.output
    assert tui_calls[0]["templates"] == []


def test_keyboard_interrupt_exit_code(runner: CliRunner, cli_env: Path, monkeypatch):
    monkeypatch.setenv("CODEGEN_API_KEY", "k")

    async def interrupted(*args) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr("codegen_ai.cli._run_tui", interrupted)

    result = runner.invoke(cli, [])

    assert result.exit_code == EXIT_INTERRUPTED


def test_fatal_error_banner(runner: CliRunner, cli_env: Path, monkeypatch):
    monkeypatch.setenv("CODEGEN_API_KEY", "k")

    async def crash(*args) -> None:
        raise RuntimeError("TUI crashed: boom")

    monkeypatch.setattr("codegen_ai.cli._run_tui", crash)

    result = runner.invoke(cli, [])

    assert result.exit_code == EXIT_STARTUP_FAILURE
    assert "FATAL ERROR" in result.output
    assert "TUI crashed: boom" in result.output
