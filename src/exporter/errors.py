"""Typed exception hierarchy for export errors."""

from typing import Optional

from src.inkdrop_client.errors import SyncError


class ExportError(SyncError):
    """Base exception for all export errors."""
    pass


class FilesystemError(ExportError):
    """Raised when filesystem operations fail (write, delete, permissions, etc)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class SpliceError(ExportError):
    """Raised when text edits overlap or fall outside the source text."""

    def __init__(self, message: str):
        super().__init__(message)
