"""Export hooks used by the inkdrop-export command.

Notes are written as <output_dir>/<slug>.md, where the slug comes from the
frontmatter or the note title. Images go to <files_dir>/<slug>_<alt><ext>
and links between exported notes point at <notes_url_prefix><slug>.md.
With require_public, only notes whose frontmatter has public: true are
exported (and linked to).
"""

import os
from typing import Any, Dict, Optional

from src.exporter.hooks import (
    ExportParams,
    FileContext,
    FileDestination,
    LinkContext,
    NoteContext,
)
from src.exporter.slugify import to_kebab_case
from src.models.note import Note

from .models import ExportConfig


def note_slug(note: Note, frontmatter: Dict[str, Any]) -> str:
    """Slug of a note: frontmatter slug, else title, else the note id."""
    slug = to_kebab_case(str(frontmatter.get('slug') or '')) or to_kebab_case(note.title)
    return slug or note.id.split(':', 1)[-1]


class DefaultHooks:
    """Hooks implementing the command's file layout for an ExportConfig."""

    def __init__(self, config: ExportConfig):
        self._config = config

    def _is_exported(self, frontmatter: Dict[str, Any]) -> bool:
        return not self._config.require_public or frontmatter.get('public') is True

    def pre_process_note(self, ctx: NoteContext) -> None:
        frontmatter = ctx.frontmatter
        if 'title' not in frontmatter and ctx.note.title:
            frontmatter['title'] = ctx.note.title
        if not frontmatter.get('slug'):
            frontmatter['slug'] = note_slug(ctx.note, frontmatter)
        if ctx.tags and 'tags' not in frontmatter:
            frontmatter['tags'] = [tag.name for tag in ctx.tags]

    def path_for_note(self, ctx: NoteContext) -> Optional[str]:
        if not self._is_exported(ctx.frontmatter):
            return None
        return os.path.join(self._config.output_dir, f"{note_slug(ctx.note, ctx.frontmatter)}.md")

    def url_for_note(self, ctx: LinkContext) -> Optional[str]:
        if not self._is_exported(ctx.frontmatter):
            return None
        return f"{self._config.notes_url_prefix}{note_slug(ctx.note, ctx.frontmatter)}.md"

    def path_for_file(self, ctx: FileContext) -> FileDestination:
        name = to_kebab_case(ctx.node.value) or ctx.file.id.split(':', 1)[-1]
        file_name = f"{note_slug(ctx.note, ctx.frontmatter)}_{name}{ctx.extension}"
        return FileDestination(
            file_path=os.path.join(self._config.files_dir, file_name),
            url=f"{self._config.files_url_prefix}{file_name}",
        )

    def to_params(self) -> ExportParams:
        return ExportParams(
            book_id=self._config.book_id,
            path_for_note=self.path_for_note,
            path_for_file=self.path_for_file,
            url_for_note=self.url_for_note,
            pre_process_note=self.pre_process_note,
            live=self._config.live,
            since=self._config.since,
            interval=self._config.interval,
        )
