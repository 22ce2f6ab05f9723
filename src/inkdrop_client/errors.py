"""Typed exception hierarchy for Inkdrop-related errors.

This module defines all custom exceptions used by the Inkdrop client library.
All exceptions inherit from the SyncError base class for easy catching and
include descriptive messages with context to help with debugging.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all inkdrop-live-export errors.

    Use this to catch any application-level error from the export tool.
    """
    pass


class InkdropError(SyncError):
    """Base exception for all Inkdrop-related errors."""
    pass


class TransportError(InkdropError):
    """Raised when a request to the Inkdrop local server fails.

    Covers network failures, non-success HTTP status codes and
    responses that cannot be decoded.
    """
    pass


class InvalidCredentialsError(TransportError):
    """Raised when API credentials are missing, invalid or rejected."""

    def __init__(self, user: str, endpoint: str):
        super().__init__(
            f"Credentials are invalid (user: {user}, endpoint: {endpoint})"
        )
        self.user = user
        self.endpoint = endpoint


class DocumentNotFoundError(TransportError):
    """Raised when a requested document does not exist."""

    def __init__(self, doc_id: str):
        super().__init__(f"Document {doc_id} not found")
        self.doc_id = doc_id


class APIUnreachableError(TransportError):
    """Raised when the Inkdrop local server is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class APIAccessError(TransportError):
    """Raised when the server answers with an unexpected HTTP status."""

    def __init__(self, path: str, status_code: Optional[int] = None):
        if status_code is not None:
            message = f"Request to {path} failed with HTTP {status_code}"
        else:
            message = f"Request to {path} failed"
        super().__init__(message)
        self.path = path
        self.status_code = status_code


class MalformedResponseError(TransportError):
    """Raised when a response body is not valid JSON."""

    def __init__(self, path: str):
        super().__init__(f"Malformed JSON response from {path}")
        self.path = path


class AttachmentError(InkdropError):
    """Raised when an attachment payload is missing or cannot be decoded."""

    def __init__(self, file_id: str, reason: str):
        super().__init__(f"Attachment {file_id} is unusable: {reason}")
        self.file_id = file_id
        self.reason = reason
