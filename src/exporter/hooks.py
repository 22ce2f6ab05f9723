"""Export parameters and the contexts passed to export hooks.

Hooks are the only configuration surface of the export pipeline. Each hook
is a plain synchronous callable receiving one context object:

    pre_process_note(NoteContext) -> None
        May mutate context.frontmatter before any path decision.
    path_for_note(NoteContext) -> path or falsy
        Falsy excludes the note (and removes a previous export).
    path_for_file(FileContext) -> FileDestination / (file_path, url) or falsy
        Where to write an image attachment and the URL to reference it by.
    url_for_note(LinkContext) -> url or falsy
        URL for a link to another note. Falsy leaves the link unchanged.
    post_process_note(PostProcessContext) -> str
        Final body to write.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from src.models.note import Note, NoteFile, Tag
from src.note_tree.models import Node

Frontmatter = Dict[str, Any]


@dataclass
class NoteContext:
    """Context for pre_process_note and path_for_note."""
    note: Note
    frontmatter: Frontmatter
    tags: List[Tag]
    tree: Node


@dataclass
class FileContext:
    """Context for path_for_file.

    Attributes:
        node: The image node referencing the attachment
        note: The note being exported
        file: The fetched attachment
        extension: File extension derived from the content type (e.g., ".png")
        frontmatter: Frontmatter of the note being exported
        tags: Tags of the note being exported
    """
    node: Node
    note: Note
    file: NoteFile
    extension: str
    frontmatter: Frontmatter
    tags: List[Tag]


@dataclass
class LinkContext:
    """Context for url_for_note.

    note, frontmatter and tags describe the link target, not the note
    being exported.
    """
    note: Note
    frontmatter: Frontmatter
    tags: List[Tag]
    node: Optional[Node] = None


@dataclass
class PostProcessContext:
    """Context for post_process_note."""
    md: str
    frontmatter: Frontmatter
    tags: List[Tag]
    note: Optional[Note] = None


class FileDestination(NamedTuple):
    """Where an attachment is written and how the note refers to it."""
    file_path: str
    url: str


PathResult = Union[str, None, bool]


@dataclass
class ExportParams:
    """Parameters of an export run.

    Attributes:
        book_id: Notebook whose notes are exported
        path_for_note: Destination path of a note, or falsy to skip it
        path_for_file: Destination of an image attachment, or falsy to skip it
        url_for_note: URL for links to other notes (links untouched if None)
        pre_process_note: Called before path resolution; may mutate frontmatter
        post_process_note: Returns the final body
        live: Keep watching the change feed after the initial export
        since: Change feed sequence to watch from (default: latest)
        interval: Seconds between change feed polls
    """
    book_id: str
    path_for_note: Callable[[NoteContext], PathResult]
    path_for_file: Callable[[FileContext], Any]
    url_for_note: Optional[Callable[[LinkContext], PathResult]] = None
    pre_process_note: Optional[Callable[[NoteContext], Any]] = None
    post_process_note: Optional[Callable[[PostProcessContext], str]] = None
    live: bool = False
    since: Optional[int] = None
    interval: float = 0.5
