"""Command-line interface for exporting Inkdrop notebooks.

This package provides the `inkdrop-export` CLI tool that exports a notebook
to Markdown files through the default hooks, with progress indication and
error handling, and optionally keeps watching for changes.
"""

from .config_loader import ConfigLoader
from .default_hooks import DefaultHooks
from .models import ExitCode, ExportConfig
from .errors import (
    CLIError,
    ConfigError,
    ConfigNotFoundError,
)

__all__ = [
    'ConfigLoader',
    'DefaultHooks',
    'ExitCode',
    'ExportConfig',
    'CLIError',
    'ConfigError',
    'ConfigNotFoundError',
]
