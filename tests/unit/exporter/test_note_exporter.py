"""Unit tests for exporter.note_exporter module."""

import os

import pytest
from unittest.mock import Mock

from src.exporter.hooks import ExportParams, FileDestination
from src.exporter.note_exporter import NoteExporter
from src.inkdrop_client.errors import DocumentNotFoundError
from src.models.note import Note, NoteFile
from src.note_tree.errors import FrontmatterError
from tests.fixtures import note_doc


def file_for(file_id):
    return NoteFile(id=file_id, content_type="image/png", data=f"data-{file_id}".encode())


@pytest.fixture
def exporter(mock_api):
    mock_api.get_file.side_effect = file_for
    exporter = NoteExporter(mock_api)
    exporter.load_tags()
    return exporter


@pytest.fixture
def params(tmp_path):
    """Hooks writing notes to <tmp>/<id>.md and images to <tmp>/<id>.<ext>."""
    def path_for_note(ctx):
        return str(tmp_path / f"{ctx.note.id.split(':')[1]}.md")

    def path_for_file(ctx):
        name = f"{ctx.file.id.split(':')[1]}{ctx.extension}"
        return FileDestination(str(tmp_path / name), f"./images/{name}")

    return ExportParams(
        book_id="book:tjnPbJakw",
        path_for_note=path_for_note,
        path_for_file=path_for_file,
    )


def read(path):
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


class TestExportNote:
    """Test cases for the basic export flow."""

    def test_plain_note_is_written_unchanged(self, exporter, params, make_note, tmp_path):
        """A note without references or frontmatter is written as-is."""
        note = make_note(body="# Hello\n\nJust text.\n")

        path = exporter.export_note(note, params)

        assert path == str(tmp_path / "abc.md")
        assert read(path) == "# Hello\n\nJust text.\n"
        assert exporter.tracker.path_for("note:abc") == path

    def test_export_is_idempotent(self, exporter, params, make_note, tmp_path):
        """Exporting the same note twice yields identical content in one file."""
        note = make_note(body="---\ntitle: X\n---\n![a](inkdrop://file:A)\n")

        first = read(exporter.export_note(note, params))
        second = read(exporter.export_note(note, params))

        assert first == second
        assert sorted(p.name for p in tmp_path.iterdir()) == ["A.png", "abc.md"]

    def test_renamed_export_removes_old_file(self, exporter, params, make_note, tmp_path):
        """A changed destination leaves only the new file."""
        note = make_note(body="Body")
        exporter.export_note(note, params)

        params.path_for_note = lambda ctx: str(tmp_path / "renamed.md")
        exporter.export_note(note, params)

        assert not (tmp_path / "abc.md").exists()
        assert read(tmp_path / "renamed.md") == "Body"

    def test_excluded_note_removes_previous_export(self, exporter, params, make_note, tmp_path):
        """A falsy path removes the earlier export and writes nothing."""
        note = make_note(body="Body")
        exporter.export_note(note, params)

        params.path_for_note = lambda ctx: None

        assert exporter.export_note(note, params) is None
        assert not (tmp_path / "abc.md").exists()
        assert "note:abc" not in exporter.tracker

    def test_excluded_note_never_exported(self, exporter, params, make_note, tmp_path):
        params.path_for_note = lambda ctx: False

        assert exporter.export_note(make_note(body="Body"), params) is None
        assert list(tmp_path.iterdir()) == []

    def test_path_like_destination(self, exporter, params, make_note, tmp_path):
        """path_for_note may return a path object."""
        params.path_for_note = lambda ctx: tmp_path / "p.md"

        path = exporter.export_note(make_note(body="Body"), params)

        assert path == str(tmp_path / "p.md")

    def test_invalid_frontmatter_raises(self, exporter, params, make_note):
        with pytest.raises(FrontmatterError):
            exporter.export_note(make_note(body="---\ntitle: [x\n---\nBody"), params)

    def test_post_process_output_is_written(self, exporter, params, make_note):
        params.post_process_note = lambda ctx: ctx.md.upper()

        path = exporter.export_note(make_note(body="body"), params)

        assert read(path) == "BODY"

    def test_hook_contexts(self, exporter, params, make_note):
        """Hooks see the note, its frontmatter and its known tags."""
        seen = {}

        def pre_process_note(ctx):
            seen['pre'] = ctx

        def post_process_note(ctx):
            seen['post'] = ctx
            return ctx.md

        params.pre_process_note = pre_process_note
        params.post_process_note = post_process_note
        note = make_note(body="---\npublic: true\n---\nBody", tags=["tag:blog", "tag:unknown"])

        exporter.export_note(note, params)

        assert seen['pre'].note is note
        assert seen['pre'].frontmatter == {'public': True}
        assert [t.name for t in seen['pre'].tags] == ["Blog"]
        assert seen['post'].note is note
        assert seen['post'].md == "---\npublic: true\n---\nBody"


class TestFrontmatterRewrite:
    """Test cases for frontmatter re-serialization."""

    def test_added_key_is_serialized(self, exporter, params, make_note):
        """Keys added by pre_process_note appear in the exported block."""
        def add_slug(ctx):
            ctx.frontmatter['slug'] = 'hello'

        params.pre_process_note = add_slug
        note = make_note(body="---\ntitle: Hello\n---\n# Hi\n")

        path = exporter.export_note(note, params)

        assert read(path) == "---\ntitle: Hello\nslug: hello\n---\n# Hi\n"

    def test_block_added_when_missing(self, exporter, params, make_note):
        """A note without frontmatter gains a block when hooks add keys."""
        def add_slug(ctx):
            ctx.frontmatter['slug'] = 'hello'

        params.pre_process_note = add_slug

        path = exporter.export_note(make_note(body="# Hi\n"), params)

        assert read(path) == "---\nslug: hello\n---\n# Hi\n"

    def test_existing_block_is_canonicalized(self, exporter, params, make_note):
        """An existing block is re-rendered even when unchanged."""
        path = exporter.export_note(make_note(body="---\ntitle:   'Hello'\n---\nBody"), params)

        assert read(path) == "---\ntitle: Hello\n---\nBody"


class TestImageRewrite:
    """Test cases for image reference rewriting."""

    def test_two_images_rewritten(self, exporter, params, make_note, tmp_path):
        """Every referenced attachment is exported and its image repointed."""
        note = make_note(body="![a](inkdrop://file:A) text ![b](inkdrop://file:B \"Bee\")\n")

        path = exporter.export_note(note, params)

        assert read(path) == '![a](./images/A.png) text ![b](./images/B.png "Bee")\n'
        assert (tmp_path / "A.png").read_bytes() == b"data-file:A"
        assert (tmp_path / "B.png").read_bytes() == b"data-file:B"
        assert exporter.tracker.path_for("file:B") == str(tmp_path / "B.png")

    def test_external_images_untouched(self, exporter, params, make_note, mock_api):
        note = make_note(body="![x](https://example.com/x.png)")

        path = exporter.export_note(note, params)

        assert read(path) == "![x](https://example.com/x.png)"
        mock_api.get_file.assert_not_called()

    def test_file_context(self, exporter, params, make_note):
        """path_for_file receives the image node, file and extension."""
        contexts = []
        original = params.path_for_file

        def path_for_file(ctx):
            contexts.append(ctx)
            return original(ctx)

        params.path_for_file = path_for_file
        note = make_note(body="---\nslug: s\n---\n![alt](inkdrop://file:A)")

        exporter.export_note(note, params)

        ctx = contexts[0]
        assert ctx.node.value == "alt"
        assert ctx.file.id == "file:A"
        assert ctx.extension == ".png"
        assert ctx.note is note
        assert ctx.frontmatter == {'slug': 's'}

    def test_fetch_failure_leaves_image(self, exporter, params, make_note, mock_api):
        """A missing attachment is logged and its image left unchanged."""
        mock_api.get_file.side_effect = DocumentNotFoundError("file:A")
        body = "![a](inkdrop://file:A) after"

        path = exporter.export_note(make_note(body=body), params)

        assert read(path) == body

    def test_one_failure_does_not_block_others(self, exporter, params, make_note, mock_api):
        def get_file(file_id):
            if file_id == "file:A":
                raise DocumentNotFoundError(file_id)
            return file_for(file_id)

        mock_api.get_file.side_effect = get_file

        path = exporter.export_note(make_note(body="![a](inkdrop://file:A) ![b](inkdrop://file:B)"), params)

        assert read(path) == "![a](inkdrop://file:A) ![b](./images/B.png)"

    def test_no_file_destination(self, exporter, params, make_note, tmp_path):
        """A falsy path_for_file leaves the image unchanged."""
        params.path_for_file = lambda ctx: None

        path = exporter.export_note(make_note(body="![a](inkdrop://file:A)"), params)

        assert read(path) == "![a](inkdrop://file:A)"
        assert not (tmp_path / "A.png").exists()

    @pytest.mark.parametrize("destination", [
        None,
        False,
        ("A.png", None),
        ("", "./images/A.png"),
    ])
    def test_no_file_destination_removes_previous_export(
        self, exporter, params, make_note, tmp_path, destination
    ):
        """Dropping an attachment's destination deletes its earlier export."""
        note = make_note(body="![a](inkdrop://file:A)")
        exporter.export_note(note, params)
        assert (tmp_path / "A.png").exists()

        params.path_for_file = lambda ctx: destination
        path = exporter.export_note(note, params)

        assert read(path) == "![a](inkdrop://file:A)"
        assert not (tmp_path / "A.png").exists()
        assert exporter.tracker.path_for("file:A") is None

    def test_fetch_failure_removes_previous_export(
        self, exporter, params, make_note, mock_api, tmp_path
    ):
        """An attachment that can no longer be fetched loses its earlier export."""
        note = make_note(body="![a](inkdrop://file:A)")
        exporter.export_note(note, params)
        assert (tmp_path / "A.png").exists()

        mock_api.get_file.side_effect = DocumentNotFoundError("file:A")
        path = exporter.export_note(note, params)

        assert read(path) == "![a](inkdrop://file:A)"
        assert not (tmp_path / "A.png").exists()
        assert exporter.tracker.path_for("file:A") is None

    @pytest.mark.parametrize("content_type,extension", [
        ("image/png", ".png"),
        ("image/jpeg", ".jpg"),
        ("image/svg+xml", ".svg"),
        ("image/gif", ".gif"),
    ])
    def test_get_extension_for_file(self, content_type, extension):
        file = NoteFile(id="file:A", content_type=content_type, data=b"")

        assert NoteExporter.get_extension_for_file(file) == extension


class TestLinkRewrite:
    """Test cases for note link rewriting."""

    @pytest.fixture
    def link_params(self, params, mock_api):
        target = Note.from_dict(note_doc("note:other", title="Other Note", body="---\npublic: true\n---\nText"))
        mock_api.get_note.return_value = target

        def pre_process_note(ctx):
            ctx.frontmatter.setdefault('slug', ctx.note.title.lower().replace(' ', '-'))

        params.pre_process_note = pre_process_note
        params.url_for_note = lambda ctx: f"./{ctx.frontmatter['slug']}.md"
        return params

    def test_link_is_repointed(self, exporter, link_params, make_note, mock_api):
        """Links use the URL chosen for the pre-processed target."""
        note = make_note(body='See [the other](inkdrop://note:other "Other") now')

        path = exporter.export_note(note, link_params)

        assert read(path).endswith('See [the other](./other-note.md "Other") now')
        mock_api.get_note.assert_called_once_with("note:other")

    def test_link_context_describes_target(self, exporter, link_params, make_note):
        contexts = []
        link_params.url_for_note = lambda ctx: contexts.append(ctx)

        exporter.export_note(make_note(body="[x](inkdrop://note:other)"), link_params)

        assert contexts[0].note.id == "note:other"
        assert contexts[0].frontmatter == {'public': True, 'slug': 'other-note'}
        assert contexts[0].node.url == "inkdrop://note:other"

    def test_image_inside_link(self, exporter, link_params, make_note):
        """An image nested in a link label and the link are both rewritten."""
        note = make_note(body="[![a](inkdrop://file:A)](inkdrop://note:other)")

        path = exporter.export_note(note, link_params)

        assert read(path).endswith("[![a](./images/A.png)](./other-note.md)")

    def test_no_url_for_note_hook(self, exporter, params, make_note, mock_api):
        """Without url_for_note, links are not resolved."""
        body = "[x](inkdrop://note:other)"

        path = exporter.export_note(make_note(body=body), params)

        assert read(path) == body
        mock_api.get_note.assert_not_called()

    def test_falsy_url_leaves_link(self, exporter, link_params, make_note):
        link_params.url_for_note = lambda ctx: None
        body = "[x](inkdrop://note:other)"

        path = exporter.export_note(make_note(body=body), link_params)

        assert read(path).endswith(body)

    def test_missing_target_leaves_link(self, exporter, link_params, make_note, mock_api):
        mock_api.get_note.side_effect = DocumentNotFoundError("note:other")
        body = "[x](inkdrop://note:other)"

        path = exporter.export_note(make_note(body=body), link_params)

        assert read(path).endswith(body)

    def test_external_links_untouched(self, exporter, link_params, make_note, mock_api):
        body = "[x](https://example.com)"

        path = exporter.export_note(make_note(body=body), link_params)

        assert read(path).endswith(body)
        mock_api.get_note.assert_not_called()


class TestRemoveNote:
    """Test cases for NoteExporter.remove_note."""

    def test_remove_exported_note(self, exporter, params, make_note, tmp_path):
        exporter.export_note(make_note(body="Body"), params)

        assert exporter.remove_note("note:abc") == str(tmp_path / "abc.md")
        assert not os.path.exists(tmp_path / "abc.md")

    def test_remove_unknown_note(self, exporter):
        assert exporter.remove_note("note:unknown") is None

    def test_resolve_tags_without_snapshot(self, make_note):
        """Before load_tags, tags resolve to nothing."""
        exporter = NoteExporter(Mock())

        assert exporter.resolve_tags(make_note(tags=["tag:blog"])) == []
