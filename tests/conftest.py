"""Root pytest configuration for all tests.

Provides factories for Inkdrop documents shared by the unit tests.
"""

from unittest.mock import Mock

import pytest

from src.models.note import Note, NoteFile, Tag
from tests.fixtures import file_doc, note_doc, tag_doc


@pytest.fixture
def make_note():
    """Factory fixture returning Note objects."""
    def _make(**kwargs) -> Note:
        return Note.from_dict(note_doc(**kwargs))
    return _make


@pytest.fixture
def make_file():
    """Factory fixture returning NoteFile objects."""
    def _make(**kwargs) -> NoteFile:
        return NoteFile.from_dict(file_doc(**kwargs))
    return _make


@pytest.fixture
def mock_api():
    """Mock APIWrapper knowing a single tag."""
    api = Mock()
    api.get_tags.return_value = [Tag.from_dict(tag_doc())]
    return api
