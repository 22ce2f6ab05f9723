"""YAML frontmatter extraction and rendering for note trees.

Frontmatter is the YAML block between --- lines at the top of a note body.
It is loaded into an ordered dict that export hooks may mutate, and written
back in a canonical form when the note is exported.
"""

from typing import Any, Dict, Optional

import yaml

from .errors import FrontmatterError
from .models import Node, NodeType


class FrontmatterHandler:
    """Handles YAML frontmatter operations for note trees.

    Canonical rendering:
        ---
        <yaml, keys in insertion order>
        ---

    The rendering has no trailing newline: it replaces exactly the source
    range of the frontmatter node, whose end is the closing marker.
    """

    OPENING_MARKER = '---'
    CLOSING_MARKER = '---'

    # Maximum allowed depth for YAML structures to prevent DoS attacks
    MAX_YAML_DEPTH = 10

    @classmethod
    def _validate_yaml_depth(cls, obj, current_depth: int = 0, max_depth: int = MAX_YAML_DEPTH) -> None:
        """Validate that YAML structure depth doesn't exceed maximum.

        Raises:
            FrontmatterError: If depth exceeds maximum
        """
        if current_depth > max_depth:
            raise FrontmatterError(
                "<yaml>",
                f"YAML structure exceeds maximum depth of {max_depth}"
            )

        if isinstance(obj, dict):
            for value in obj.values():
                cls._validate_yaml_depth(value, current_depth + 1, max_depth)
        elif isinstance(obj, list):
            for item in obj:
                cls._validate_yaml_depth(item, current_depth + 1, max_depth)

    @staticmethod
    def find(tree: Node) -> Optional[Node]:
        """Return the frontmatter node of a tree, or None."""
        for child in tree.children:
            if child.type is NodeType.FRONTMATTER:
                return child
        return None

    @classmethod
    def extract(cls, tree: Node, doc_id: str = "<unknown>") -> Dict[str, Any]:
        """Load the frontmatter of a tree into a dict.

        Args:
            tree: Parsed note tree
            doc_id: Note identifier (for error messages)

        Returns:
            Frontmatter mapping, empty when the note has no frontmatter

        Raises:
            FrontmatterError: If the YAML is invalid, not a mapping or too deep
        """
        node = cls.find(tree)
        if node is None or not node.value.strip():
            return {}

        try:
            frontmatter = yaml.safe_load(node.value)
        except yaml.YAMLError as e:
            raise FrontmatterError(doc_id, f"Invalid YAML syntax: {str(e)}")

        if frontmatter is None:
            return {}

        if not isinstance(frontmatter, dict):
            raise FrontmatterError(
                doc_id,
                f"Frontmatter must be a YAML dictionary, got {type(frontmatter).__name__}"
            )

        try:
            cls._validate_yaml_depth(frontmatter)
        except FrontmatterError as e:
            raise FrontmatterError(doc_id, e.message)

        return frontmatter

    @classmethod
    def render(cls, frontmatter: Dict[str, Any]) -> str:
        """Render a frontmatter dict as a --- delimited YAML block.

        Example:
            >>> FrontmatterHandler.render({'title': 'X'})
            '---\\ntitle: X\\n---'
        """
        if not frontmatter:
            return f"{cls.OPENING_MARKER}\n{cls.CLOSING_MARKER}"

        yaml_str = yaml.safe_dump(
            frontmatter,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )
        return f"{cls.OPENING_MARKER}\n{yaml_str}{cls.CLOSING_MARKER}"
