"""Data models for CLI operations.

This module defines the exit codes and the export configuration used by
the CLI module.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): General error (config issues, export failures)
    - AUTH_ERROR (3): Authentication failure
    - NETWORK_ERROR (4): Inkdrop local server unreachable or failing

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 3
    NETWORK_ERROR = 4


@dataclass
class ExportConfig:
    """Export configuration loaded from .inkdrop-export/config.yaml.

    Attributes:
        book_id: Notebook to export (e.g., "book:tjnPbJakw")
        output_dir: Directory receiving the exported notes
        files_dir: Directory receiving image attachments
        files_url_prefix: URL prefix used to reference images from notes
        notes_url_prefix: URL prefix used for links between exported notes
        require_public: Only export notes whose frontmatter has public: true
        live: Keep watching for changes after the initial export
        interval: Seconds between change feed polls
        since: Change feed sequence to start watching from (default: latest)

    Example:
        >>> config = ExportConfig(book_id="book:tjnPbJakw", output_dir="./out")
    """
    book_id: str
    output_dir: str
    files_dir: str = ""
    files_url_prefix: str = ""
    notes_url_prefix: str = "./"
    require_public: bool = False
    live: bool = False
    interval: float = 0.5
    since: Optional[int] = None
