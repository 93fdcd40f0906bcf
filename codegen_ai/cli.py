"""CLI entry point for codegen-ai.

Minimal CLI that loads configuration and launches the TUI. Startup failures
(missing credentials, unsupported backend, unusable template directory)
exit with status 1; quitting the TUI exits with status 0.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import NoReturn

import click

from codegen_ai import __version__
from codegen_ai.backends import create_gateway
from codegen_ai.backends.base import GenerationGateway
from codegen_ai.catalog import DirectoryTemplateSource, FilePromptSource, Template
from codegen_ai.config import CodegenConfig, ConfigManager
from codegen_ai.exceptions import ConfigError, TemplateSourceError, UnsupportedBackendError
from codegen_ai.logging import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_STARTUP_FAILURE = 1
EXIT_INTERRUPTED = 130


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(EXIT_STARTUP_FAILURE)


@click.command()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.option(
    "-t",
    "--templates-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory containing template sub-directories",
)
@click.option("-b", "--backend", default=None, help="Generation backend (default from config)")
@click.option("--init", "init_config", is_flag=True, help="Write the default global config and exit")
@click.version_option(version=__version__, prog_name="codegen-ai")
def cli(verbose: bool, templates_dir: Path | None, backend: str | None, init_config: bool) -> None:
    """codegen-ai - pick a template and generate code from its prompt.

    Keys inside the TUI:
      up/k, down/j  - Move the cursor
      Enter         - Generate from the selected template
      Esc/Backspace - Return to the list
      q, Ctrl+C     - Quit
    """
    configure_logging(verbose=verbose)
    logger.info("Starting codegen-ai v%s", __version__)

    config_manager = ConfigManager()

    if init_config:
        path = config_manager.save_default_config()
        if path is None:
            click.echo(f"Skipped: {config_manager.get_global_config_file()} (already exists)")
        else:
            click.echo(f"Created: {path}")
        sys.exit(EXIT_OK)

    try:
        config = config_manager.load()
    except ConfigError as e:
        _fail(str(e))

    if backend:
        config.general.backend = backend
    if templates_dir is not None:
        config.general.templates_dir = str(templates_dir)

    if not config.is_configured:
        _fail(
            "No API key configured for backend "
            f"'{config.general.backend}'. Set CODEGEN_API_KEY or GOOGLE_API_KEY, "
            "or run 'codegen-ai --init' and edit the config file."
        )

    try:
        gateway = create_gateway(config.general.backend, config)
    except UnsupportedBackendError as e:
        _fail(str(e))

    templates_root = config_manager.resolve_path(config.general.templates_dir)
    try:
        templates = DirectoryTemplateSource(templates_root).list_templates()
    except TemplateSourceError as e:
        _fail(str(e))

    prompt_source = FilePromptSource(templates_root, config.general.prompt_file)
    log_dir = config_manager.resolve_path(config.logging.log_dir)

    try:
        asyncio.run(_run_tui(config, templates, prompt_source, gateway, log_dir))
    except KeyboardInterrupt:
        click.echo("\nGoodbye!")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        logger.exception("Fatal error")
        click.echo()
        click.echo(click.style("=" * 60, fg="red"))
        click.echo(click.style("FATAL ERROR", fg="red", bold=True))
        click.echo(click.style("=" * 60, fg="red"))
        click.echo()
        click.echo(f"Error type: {type(e).__name__}")
        click.echo(f"Message: {e}")
        click.echo()
        if verbose:
            import traceback

            click.echo(click.style("Traceback:", fg="yellow"))
            click.echo(traceback.format_exc())
        else:
            click.echo("Run with --verbose flag for full traceback.")
        click.echo()
        click.echo(f"Check logs at: {log_dir}")
        sys.exit(EXIT_STARTUP_FAILURE)

    sys.exit(EXIT_OK)


async def _run_tui(
    config: CodegenConfig,
    templates: list[Template],
    prompt_source: FilePromptSource,
    gateway: GenerationGateway,
    log_dir: Path,
) -> None:
    """Run the TUI application."""
    from codegen_ai.app.tui import TUIApp

    async with TUIApp(
        config=config,
        templates=templates,
        prompt_source=prompt_source,
        gateway=gateway,
        log_dir=log_dir,
    ) as app:
        await app.run()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
