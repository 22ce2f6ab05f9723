"""Data models for the note document tree.

The tree separates a note body into a frontmatter block and content blocks,
with inline image and link nodes inside headings and paragraphs. Every node
sourced from the body records where its literal text starts and ends.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class NodeType(Enum):
    """Types of nodes in a note tree."""

    ROOT = "root"
    FRONTMATTER = "frontmatter"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODE = "code"
    HTML = "html"
    THEMATIC_BREAK = "thematicBreak"
    TEXT = "text"
    INLINE_CODE = "inlineCode"
    IMAGE = "image"
    LINK = "link"


@dataclass(frozen=True)
class Position:
    """Half-open [start, end) character range in the original body."""

    start: int
    end: int


@dataclass
class Node:
    """A node in the note tree.

    Attributes:
        type: Node type
        position: Source range of the node's literal text
        value: Literal text for text, code and frontmatter nodes; alt text for images
        url: Destination for images and links
        title: Optional title of images and links
        label: Source range of the bracketed label of images and links
            (without the brackets)
        level: Heading level (1-6) for headings, 0 otherwise
        children: Child nodes
    """

    type: NodeType
    position: Optional[Position] = None
    value: str = ""
    url: Optional[str] = None
    title: Optional[str] = None
    label: Optional[Position] = None
    level: int = 0
    children: List['Node'] = field(default_factory=list)

    @property
    def is_reference(self) -> bool:
        return self.type in (NodeType.IMAGE, NodeType.LINK)
