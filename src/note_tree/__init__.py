"""Note tree library for locating and rewriting references in note bodies.

This package parses Inkdrop note bodies into trees with source offsets,
extracts and renders YAML frontmatter, and serializes image and link nodes
back to Markdown.
"""

from .models import Node, NodeType, Position
from .errors import NoteTreeError, FrontmatterError
from .frontmatter_handler import FrontmatterHandler
from .parser import (
    NoteParser,
    find_nodes,
    is_image,
    is_link,
    is_reference,
    parse_reference_url,
    render_destination,
    render_node,
)

__all__ = [
    'Node',
    'NodeType',
    'Position',
    'NoteTreeError',
    'FrontmatterError',
    'FrontmatterHandler',
    'NoteParser',
    'find_nodes',
    'is_image',
    'is_link',
    'is_reference',
    'parse_reference_url',
    'render_destination',
    'render_node',
]
