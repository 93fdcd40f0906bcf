"""codegen-ai - generate code from prompt templates in the terminal."""

from __future__ import annotations

import importlib.metadata
import logging


def _configure_logging() -> None:
    """Configure logging to suppress noisy third-party logs.

    Suppresses:
    - httpx request lines (one INFO record per API call)
    - google_genai client INFO logs
    """
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


_configure_logging()

try:
    __version__ = importlib.metadata.version("codegen-ai")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"
