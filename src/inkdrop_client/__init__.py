"""Inkdrop client library for live export.

This package provides Python abstractions over the Inkdrop local server HTTP
API, enabling typed access to notes, attachments, tags and the change feed.
"""

from .errors import (
    SyncError,
    InkdropError,
    TransportError,
    InvalidCredentialsError,
    DocumentNotFoundError,
    APIUnreachableError,
    APIAccessError,
    MalformedResponseError,
    AttachmentError,
)

__all__ = [
    "SyncError",
    "InkdropError",
    "TransportError",
    "InvalidCredentialsError",
    "DocumentNotFoundError",
    "APIUnreachableError",
    "APIAccessError",
    "MalformedResponseError",
    "AttachmentError",
]
