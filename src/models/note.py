"""Inkdrop document data models.

Notes, attachments (files), tags and change feed records as returned by the
Inkdrop local server. Each model keeps the raw document so hooks can reach
fields this package does not model explicitly.
"""

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.inkdrop_client.errors import AttachmentError


@dataclass
class Note:
    """A user-authored Markdown note.

    Attributes:
        id: Document identifier (e.g., "note:abc123")
        book_id: Identifier of the notebook the note belongs to
        title: Note title
        body: Markdown source
        tags: Tag identifiers attached to the note
        status: Note status ("none", "active", "onHold", "completed", "dropped")
        created_at: Creation time in milliseconds since epoch
        updated_at: Last update time in milliseconds since epoch
        rev: CouchDB revision
        deleted: True for deletion tombstones
        raw: The document as returned by the server
    """
    id: str
    book_id: Optional[str] = None
    title: str = ""
    body: str = ""
    tags: List[str] = field(default_factory=list)
    status: Optional[str] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None
    rev: Optional[str] = None
    deleted: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, doc: Dict[str, Any]) -> 'Note':
        return cls(
            id=doc['_id'],
            book_id=doc.get('bookId'),
            title=doc.get('title') or "",
            body=doc.get('body') or "",
            tags=list(doc.get('tags') or []),
            status=doc.get('status'),
            created_at=doc.get('createdAt'),
            updated_at=doc.get('updatedAt'),
            rev=doc.get('_rev'),
            deleted=bool(doc.get('_deleted', False)),
            raw=doc,
        )


@dataclass
class NoteFile:
    """An attachment referenced from a note body.

    Attributes:
        id: Document identifier (e.g., "file:xyz789")
        name: Original file name
        content_type: MIME type (e.g., "image/png")
        data: Decoded binary payload
    """
    id: str
    content_type: str
    data: bytes = field(repr=False)
    name: str = ""

    @classmethod
    def from_dict(cls, doc: Dict[str, Any]) -> 'NoteFile':
        """Build a NoteFile from a document fetched with attachments=true.

        Raises:
            AttachmentError: If the payload is missing or not valid base64
        """
        file_id = doc.get('_id', 'unknown')
        try:
            encoded = doc['_attachments']['index']['data']
        except (KeyError, TypeError):
            raise AttachmentError(file_id, "no inline attachment data")

        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise AttachmentError(file_id, f"invalid base64 payload: {e}")

        content_type = doc.get('contentType') or ""
        if not content_type:
            raise AttachmentError(file_id, "missing content type")

        return cls(
            id=file_id,
            content_type=content_type,
            data=data,
            name=doc.get('name') or "",
        )


@dataclass
class Tag:
    """A tag with its display name."""
    id: str
    name: str
    color: Optional[str] = None

    @classmethod
    def from_dict(cls, doc: Dict[str, Any]) -> 'Tag':
        return cls(id=doc['_id'], name=doc.get('name') or "", color=doc.get('color'))


@dataclass
class Change:
    """A single record of the change feed.

    Attributes:
        seq: Sequence number of this change
        id: Identifier of the changed document
        deleted: True when the record is a deletion tombstone
        doc: Current document body (None when the feed omitted it)
    """
    seq: Any
    id: str
    deleted: bool = False
    doc: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> 'Change':
        doc = record.get('doc')
        deleted = bool(record.get('deleted')) or bool(doc and doc.get('_deleted'))
        return cls(seq=record.get('seq'), id=record['id'], deleted=deleted, doc=doc)

    @property
    def is_note(self) -> bool:
        return self.id.startswith('note:')

    @property
    def note(self) -> Optional[Note]:
        """The changed note, or None for tombstones and non-note documents."""
        if self.deleted or not self.is_note or not self.doc:
            return None
        return Note.from_dict(self.doc)


@dataclass
class ChangesResult:
    """A batch of change feed records and the sequence it ends at."""
    results: List[Change]
    last_seq: Any

    @classmethod
    def from_dict(cls, response: Dict[str, Any]) -> 'ChangesResult':
        return cls(
            results=[Change.from_dict(r) for r in response.get('results') or []],
            last_seq=response.get('last_seq'),
        )
