"""Main CLI entry point for the inkdrop-export command.

This module provides the Typer application that serves as the entry point
for the inkdrop-export command-line tool. It exports one Inkdrop notebook
to Markdown files and can keep watching it for changes.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from src.cli.config_loader import ConfigLoader
from src.cli.default_hooks import DefaultHooks
from src.cli.errors import CLIError
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.inkdrop_client.errors import (
    InvalidCredentialsError,
    SyncError,
    TransportError,
)
from src.live_export.live_exporter import LiveExporter

__version__ = "0.1.0"

app = typer.Typer(
    name="inkdrop-export",
    help="""Export an Inkdrop notebook to Markdown files and keep it up to date.

QUICK START:
  inkdrop-export --book book:tjnPbJakw --out ./posts            # Export once
  inkdrop-export --book book:tjnPbJakw --out ./posts --watch    # Export and watch

Credentials are read from INKDROP_USERNAME / INKDROP_PASSWORD (and optionally
INKDROP_HOSTNAME / INKDROP_PORT), or from a .env file.""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"inkdrop-export_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _exit_code_for(error: BaseException) -> ExitCode:
    """Map an exception to the exit code reported to the shell."""
    if isinstance(error, InvalidCredentialsError):
        return ExitCode.AUTH_ERROR
    if isinstance(error, TransportError):
        return ExitCode.NETWORK_ERROR
    return ExitCode.GENERAL_ERROR


def _run_export(
    config_path: str,
    overrides: Dict[str, Any],
    output: OutputHandler,
) -> ExitCode:
    """Run the export and, in live mode, watch until interrupted.

    Args:
        config_path: Path to the YAML configuration file
        overrides: Values from command-line options
        output: Output handler for user-facing messages

    Returns:
        Exit code
    """
    try:
        if os.path.exists(config_path) or config_path != ConfigLoader.DEFAULT_CONFIG_PATH:
            config = ConfigLoader.load(config_path, overrides)
        else:
            config = ConfigLoader.from_dict({}, overrides)
    except CLIError as e:
        output.error(str(e))
        return ExitCode.GENERAL_ERROR

    os.makedirs(config.output_dir, exist_ok=True)
    os.makedirs(config.files_dir, exist_ok=True)

    output.info(f"Exporting {config.book_id}")
    output.info(f"  Notes: {config.output_dir}")
    output.info(f"  Images: {config.files_dir}")

    exporter = LiveExporter()
    params = DefaultHooks(config).to_params()

    try:
        with output.spinner("Exporting notes..."):
            watcher = exporter.start(params)
    except SyncError as e:
        logger.error(f"Export failed: {e}")
        output.error(f"Export failed: {e}")
        return _exit_code_for(e)

    output.print_summary(exporter.exported_count, len(exporter.tracker))

    if watcher is None:
        return ExitCode.SUCCESS

    output.success(f"Watching for changes since sequence {watcher.since} (Ctrl-C to stop)")
    try:
        while not watcher.wait(timeout=1.0):
            pass
    except KeyboardInterrupt:
        watcher.stop()
        watcher.wait()
        output.info("Stopped watching")
        return ExitCode.SUCCESS

    if watcher.error is not None:
        output.error(f"Stopped watching: {watcher.error}")
        return _exit_code_for(watcher.error)
    return ExitCode.SUCCESS


@app.command()
def main_command(
    config_path: str = typer.Option(
        ConfigLoader.DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Path to the YAML configuration file",
        metavar="PATH",
    ),
    book_id: Optional[str] = typer.Option(
        None,
        "--book",
        help="Notebook to export (e.g., book:tjnPbJakw)",
        metavar="BOOK_ID",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--out",
        help="Directory for exported notes",
        metavar="DIR",
    ),
    files_dir: Optional[str] = typer.Option(
        None,
        "--files-dir",
        help="Directory for exported images (default: <out>/images)",
        metavar="DIR",
    ),
    require_public: Optional[bool] = typer.Option(
        None,
        "--require-public",
        help="Only export notes with 'public: true' in their frontmatter",
    ),
    live: Optional[bool] = typer.Option(
        None,
        "--watch/--once",
        help="Keep watching for changes after the initial export",
    ),
    since: Optional[int] = typer.Option(
        None,
        "--since",
        help="Change feed sequence to watch from (default: latest)",
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Seconds between change polls",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Export an Inkdrop notebook to Markdown files.

    \b
    EXAMPLES:
      inkdrop-export --book book:tjnPbJakw --out ./posts
      inkdrop-export --config export.yaml --watch
      inkdrop-export --book book:tjnPbJakw --out ./posts --require-public --watch
    """
    if version:
        typer.echo(f"inkdrop-export version {__version__}")
        raise typer.Exit()

    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    overrides = {
        'book_id': book_id,
        'output_dir': output_dir,
        'files_dir': files_dir,
        'require_public': require_public,
        'live': live,
        'since': since,
        'interval': interval,
    }

    try:
        exit_code = _run_export(config_path, overrides, output)
    except Exception as e:
        logger.exception("Unexpected error during export")
        output.error(f"Unexpected error: {e}")
        exit_code = ExitCode.GENERAL_ERROR

    raise typer.Exit(exit_code)


def main() -> None:
    """Main entry point for the CLI application."""
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
