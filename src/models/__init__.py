"""Data models for Inkdrop notes, files, tags and change records."""

from src.models.note import Change, ChangesResult, Note, NoteFile, Tag

__all__ = ['Note', 'NoteFile', 'Tag', 'Change', 'ChangesResult']
