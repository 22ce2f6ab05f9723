"""Export pipeline for writing Inkdrop notes as Markdown files.

This package exports single notes (with their image attachments) through
caller-supplied hooks and tracks the files it has written so renamed,
excluded and deleted notes leave no stale files behind.
"""

from .errors import ExportError, FilesystemError, SpliceError
from .hooks import (
    ExportParams,
    FileContext,
    FileDestination,
    LinkContext,
    NoteContext,
    PostProcessContext,
)
from .lifecycle import ExportLifecycleTracker
from .note_exporter import NoteExporter
from .slugify import to_kebab_case
from .splicer import Splice, apply_splices

__all__ = [
    'ExportError',
    'FilesystemError',
    'SpliceError',
    'ExportParams',
    'FileContext',
    'FileDestination',
    'LinkContext',
    'NoteContext',
    'PostProcessContext',
    'ExportLifecycleTracker',
    'NoteExporter',
    'to_kebab_case',
    'Splice',
    'apply_splices',
]
