"""Logging configuration for codegen-ai.

Before the TUI starts, log records go to stderr. While the full-screen TUI
is running, stderr output would corrupt the display, so all records are
redirected to a daily log file instead.

Key components:
- configure_logging(): stderr logging for CLI startup
- configure_tui_logging(): redirect all loggers to <log_dir>/YYYY-MM-DD.log
- get_logger(): namespaced module logger

Usage:
    from codegen_ai.logging import configure_tui_logging, get_logger

    logger = get_logger(__name__)

    # At TUI startup
    log_file = configure_tui_logging(Path("logs"))
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

# Logger namespace for the application
APP_LOGGER_NAME = "codegen_ai"

# Library loggers that can emit records while the TUI owns the terminal
LIBRARY_LOGGER_NAMES = ("httpx", "google_genai", "pydantic_ai")

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_initialized = False
_log_file: Path | None = None


def log_file_path(log_dir: Path, today: date | None = None) -> Path:
    """Get the daily log file path.

    Args:
        log_dir: Directory holding log files.
        today: Date to use (default: current date).

    Returns:
        Path like ``logs/2025-01-31.log``.
    """
    day = today or date.today()
    return log_dir / f"{day.isoformat()}.log"


def configure_tui_logging(
    log_dir: Path,
    level: int = logging.INFO,
) -> Path:
    """Configure logging for TUI mode.

    Replaces all handlers of the application logger and of the library
    loggers (httpx, google_genai, pydantic_ai) with a file handler appending
    to the daily log file. Nothing is written to the terminal. Library
    logger levels are left as they are.

    Args:
        log_dir: Directory for log files. Created if missing.
        level: Minimum log level to record (default: INFO).

    Returns:
        Path of the log file in use.
    """
    global _initialized, _log_file

    if _initialized and _log_file is not None:
        return _log_file

    log_dir.mkdir(parents=True, exist_ok=True)
    path = log_file_path(log_dir)

    logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False

    for name in LIBRARY_LOGGER_NAMES:
        library_logger = logging.getLogger(name)
        library_logger.handlers.clear()
        library_logger.addHandler(handler)
        library_logger.propagate = False

    _log_file = path
    _initialized = True
    return path


def reset_logging() -> None:
    """Reset logging configuration.

    Useful for tests or when reconfiguring.
    """
    global _initialized, _log_file

    logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

    for name in LIBRARY_LOGGER_NAMES:
        library_logger = logging.getLogger(name)
        library_logger.handlers.clear()
        library_logger.propagate = True

    _initialized = False
    _log_file = None


def configure_logging(verbose: bool = False) -> None:
    """Configure basic stderr logging for CLI startup.

    Once the TUI starts, call configure_tui_logging() to switch to file mode.

    Args:
        verbose: If True, set DEBUG level; otherwise WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name.

    Args:
        name: Module name (typically __name__).

    Returns:
        Logger instance.
    """
    if not name.startswith(APP_LOGGER_NAME):
        name = f"{APP_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
