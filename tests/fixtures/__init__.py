"""Test fixtures for Inkdrop export tests.

This module provides builders for Inkdrop documents (notes, files, tags)
and sample note bodies used across the unit tests.
"""

from .inkdrop_documents import (
    PNG_BYTES,
    SAMPLE_BODY_WITH_CODE,
    SAMPLE_BODY_WITH_REFERENCES,
    file_doc,
    note_doc,
    tag_doc,
)

__all__ = [
    "PNG_BYTES",
    "SAMPLE_BODY_WITH_CODE",
    "SAMPLE_BODY_WITH_REFERENCES",
    "file_doc",
    "note_doc",
    "tag_doc",
]
