"""Template catalog and prompt sources.

A template is a sub-directory of the templates root; its prompt lives in a
file inside it (``prompt.txt`` by default):

    templates/
        api-client/prompt.txt
        crud-service/prompt.txt

The interaction core only sees the TemplateSource and PromptSource
protocols, so tests can substitute in-memory implementations.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from codegen_ai.exceptions import PromptNotFoundError, PromptReadError, TemplateSourceError
from codegen_ai.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PROMPT_FILE = "prompt.txt"


@dataclass(frozen=True)
class Template:
    """One selectable template."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Template name must not be empty")


class TemplateSource(Protocol):
    """Provides the ordered list of available templates."""

    def list_templates(self) -> list[Template]: ...


class PromptSource(Protocol):
    """Reads the prompt text of a template."""

    def read_prompt(self, template_name: str) -> str: ...


class DirectoryTemplateSource:
    """Lists sub-directories of a templates root as templates."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        """Templates root directory."""
        return self._root

    def list_templates(self) -> list[Template]:
        """List templates sorted by name.

        A missing root yields an empty catalog.

        Raises:
            TemplateSourceError: If the root exists but is not a readable directory.
        """
        if not self._root.exists():
            logger.warning("Templates directory not found: %s", self._root)
            return []
        if not self._root.is_dir():
            raise TemplateSourceError(self._root, "not a directory")

        try:
            entries = sorted(self._root.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise TemplateSourceError(self._root, str(e)) from e

        templates = [Template(name=entry.name) for entry in entries if entry.is_dir()]
        logger.info("Found %d templates in %s", len(templates), self._root)
        return templates


class FilePromptSource:
    """Reads ``<root>/<template>/<file_name>``."""

    def __init__(self, root: Path, file_name: str = DEFAULT_PROMPT_FILE) -> None:
        self._root = root
        self._file_name = file_name

    def prompt_path(self, template_name: str) -> Path:
        """Get the prompt file path for a template."""
        return self._root / template_name / self._file_name

    def read_prompt(self, template_name: str) -> str:
        """Read a template's prompt text.

        Raises:
            PromptNotFoundError: If the prompt file does not exist.
            PromptReadError: If the file cannot be checked, read or decoded.
        """
        path = self.prompt_path(template_name)
        logger.info("Attempting to use template %s (prompt file: %s)", template_name, path)

        try:
            if not path.is_file():
                logger.error("Prompt file not found: %s", path)
                raise PromptNotFoundError(template_name, path)
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading %s: %s", path, e)
            raise PromptReadError(template_name, path, e) from e

        logger.info("Read prompt file %s (%d bytes)", path, len(content.encode("utf-8")))
        return content
