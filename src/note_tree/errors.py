"""Typed exception hierarchy for note tree errors."""

from src.inkdrop_client.errors import SyncError


class NoteTreeError(SyncError):
    """Base exception for all note tree errors."""
    pass


class FrontmatterError(NoteTreeError):
    """Raised when YAML frontmatter parsing or validation fails."""

    def __init__(self, doc_id: str, message: str):
        super().__init__(
            f"Frontmatter error in {doc_id}: {message}"
        )
        self.doc_id = doc_id
        self.message = message
