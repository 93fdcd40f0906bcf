"""Fixtures for codegen_ai tests."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from codegen_ai.backends.base import GenerationGateway
from codegen_ai.catalog import Template
from codegen_ai.config import ConfigManager
from codegen_ai.exceptions import PromptNotFoundError
from codegen_ai.logging import reset_logging


class StubGateway(GenerationGateway):
    """Gateway returning a canned result (or raising a canned error)."""

    name = "stub"

    def __init__(self, result: str | Exception = "", delay: float = 0) -> None:
        self.result = result
        self.delay = delay
        self.prompts: list[str] = []
        self.closed = False

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    async def aclose(self) -> None:
        self.closed = True


class DictPromptSource:
    """In-memory prompt source; unknown names are reported as missing."""

    def __init__(self, prompts: dict[str, str]) -> None:
        self.prompts = prompts
        self.reads: list[str] = []

    def read_prompt(self, template_name: str) -> str:
        self.reads.append(template_name)
        if template_name not in self.prompts:
            raise PromptNotFoundError(template_name, Path("templates") / template_name / "prompt.txt")
        return self.prompts[template_name]


@pytest.fixture
def templates() -> list[Template]:
    """The two-template catalog used by most scenarios."""
    return [Template("api-client"), Template("crud-service")]


@pytest.fixture
def prompt_source() -> DictPromptSource:
    """Prompts for both catalog templates."""
    return DictPromptSource({"api-client": "hello", "crud-service": "hello"})


@pytest.fixture
def make_gateway() -> Callable[..., StubGateway]:
    """Factory for stub gateways."""
    return StubGateway


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Create a templates directory with two templates on disk."""
    root = tmp_path / "templates"
    for name in ("crud-service", "api-client"):
        (root / name).mkdir(parents=True)
        (root / name / "prompt.txt").write_text(f"prompt for {name}", encoding="utf-8")
    return root


@pytest.fixture
def temp_home(tmp_path: Path) -> Path:
    """Create a temporary home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def temp_config_dir(temp_home: Path) -> Path:
    """Create a temporary config directory under fake home."""
    config_dir = temp_home / ".config" / "codegen-ai"
    config_dir.mkdir(parents=True)
    return config_dir


@pytest.fixture
def temp_project_dir(tmp_path: Path) -> Path:
    """Create a temporary project directory."""
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    return project_dir


@pytest.fixture
def config_manager(temp_config_dir: Path, temp_project_dir: Path) -> ConfigManager:
    """Create a ConfigManager with temp directories."""
    return ConfigManager(config_dir=temp_config_dir, project_dir=temp_project_dir)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Remove CODEGEN_* and GOOGLE_API_KEY variables for the duration of a test."""
    for key in list(os.environ.keys()):
        if key.startswith("CODEGEN_") or key == "GOOGLE_API_KEY":
            monkeypatch.delenv(key)
    yield


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Leave logger handlers as they were before each test."""
    yield
    reset_logging()


@pytest.fixture
def make_prompt_source() -> Callable[[dict[str, str]], DictPromptSource]:
    """Factory for in-memory prompt sources."""
    return DictPromptSource
