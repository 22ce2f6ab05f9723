"""Unit tests for note_tree.frontmatter_handler module."""

import pytest
import yaml

from src.note_tree.errors import FrontmatterError
from src.note_tree.frontmatter_handler import FrontmatterHandler
from src.note_tree.parser import NoteParser


def parse(body):
    return NoteParser().parse(body)


class TestExtract:
    """Test cases for FrontmatterHandler.extract."""

    def test_extract_mapping(self):
        """Valid YAML frontmatter is loaded in key order."""
        tree = parse("---\ntitle: Hello\npublic: true\ntags: [a, b]\n---\nBody")

        frontmatter = FrontmatterHandler.extract(tree, "note:abc")

        assert frontmatter == {'title': 'Hello', 'public': True, 'tags': ['a', 'b']}
        assert list(frontmatter) == ['title', 'public', 'tags']

    def test_no_frontmatter_is_empty(self):
        assert FrontmatterHandler.extract(parse("# Just a note")) == {}

    def test_empty_block_is_empty(self):
        assert FrontmatterHandler.extract(parse("---\n---\nBody")) == {}

    def test_comment_only_block_is_empty(self):
        """A block that loads as null yields an empty mapping."""
        assert FrontmatterHandler.extract(parse("---\n# nothing here\n---\n")) == {}

    def test_invalid_yaml_raises(self):
        """Malformed YAML raises FrontmatterError naming the note."""
        tree = parse("---\ntitle: [unclosed\n---\n")

        with pytest.raises(FrontmatterError) as exc_info:
            FrontmatterHandler.extract(tree, "note:abc")

        assert exc_info.value.doc_id == "note:abc"
        assert "Invalid YAML syntax" in exc_info.value.message

    def test_non_mapping_raises(self):
        """Frontmatter that is not a mapping raises FrontmatterError."""
        tree = parse("---\n- a\n- b\n---\n")

        with pytest.raises(FrontmatterError) as exc_info:
            FrontmatterHandler.extract(tree, "note:abc")

        assert "list" in exc_info.value.message

    def test_excessive_depth_raises(self):
        """Deeply nested frontmatter is rejected."""
        nested = 'leaf'
        for _ in range(12):
            nested = {'a': nested}
        tree = parse(f"---\n{yaml.safe_dump(nested)}---\n")

        with pytest.raises(FrontmatterError) as exc_info:
            FrontmatterHandler.extract(tree, "note:deep")

        assert exc_info.value.doc_id == "note:deep"
        assert "maximum depth" in exc_info.value.message


class TestRender:
    """Test cases for FrontmatterHandler.render."""

    def test_render_keeps_insertion_order(self):
        rendered = FrontmatterHandler.render({'title': 'Hello', 'slug': 'hello', 'public': True})

        assert rendered == "---\ntitle: Hello\nslug: hello\npublic: true\n---"

    def test_render_empty(self):
        assert FrontmatterHandler.render({}) == "---\n---"

    def test_render_unicode(self):
        """Non-ASCII text is written as-is."""
        assert FrontmatterHandler.render({'title': 'Café'}) == "---\ntitle: Café\n---"

    def test_render_then_extract(self):
        """A rendered block parses back to the same mapping."""
        frontmatter = {'title': 'Hello: World', 'tags': ['a', 'b'], 'n': 3}

        tree = parse(FrontmatterHandler.render(frontmatter) + "\nBody")

        assert FrontmatterHandler.extract(tree) == frontmatter
