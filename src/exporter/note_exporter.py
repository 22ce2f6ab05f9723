"""Export of a single note to a Markdown file.

This module provides the NoteExporter class, which runs the export pipeline
for one note:

1. Parse the body into a tree and load its frontmatter and tags
2. Run the pre_process_note hook
3. Resolve the destination path (falsy: remove any previous export and stop)
4. Rewrite image and note-link references in reverse document order
5. Re-render the frontmatter block
6. Run the post_process_note hook
7. Write the file through the lifecycle tracker

A failure while resolving one reference is logged and skipped. Failures in
parsing, path resolution or the final write propagate to the caller.
"""

import logging
import os
from dataclasses import replace
from typing import Dict, List, Optional

from src.inkdrop_client.api_wrapper import APIWrapper
from src.inkdrop_client.errors import SyncError
from src.models.note import Note, NoteFile, Tag
from src.note_tree.frontmatter_handler import FrontmatterHandler
from src.note_tree.models import Node
from src.note_tree.parser import (
    NoteParser,
    find_nodes,
    is_image,
    is_reference,
    parse_reference_url,
    render_destination,
    render_node,
)

from .errors import FilesystemError
from .hooks import (
    ExportParams,
    FileContext,
    Frontmatter,
    LinkContext,
    NoteContext,
    PostProcessContext,
)
from .lifecycle import ExportLifecycleTracker
from .splicer import Splice, apply_splices

logger = logging.getLogger(__name__)


class NoteExporter:
    """Exports notes to Markdown files with rewritten references.

    Owns the lifecycle tracker and the tag snapshot. Both are in-memory and
    are rebuilt from scratch when a new exporter is created.

    Example:
        >>> exporter = NoteExporter(APIWrapper(Authenticator()))
        >>> exporter.load_tags()
        >>> exporter.export_note(note, params)
        './out/hello-world.md'
    """

    def __init__(
        self,
        api: APIWrapper,
        tracker: Optional[ExportLifecycleTracker] = None,
        parser: Optional[NoteParser] = None,
    ):
        self._api = api
        self.tracker = tracker if tracker is not None else ExportLifecycleTracker()
        self._parser = parser if parser is not None else NoteParser()
        self.tags: Dict[str, Tag] = {}

    def load_tags(self) -> None:
        """Load the tag snapshot used to resolve note tags."""
        self.tags = {tag.id: tag for tag in self._api.get_tags()}
        logger.debug(f"Loaded {len(self.tags)} tags")

    def resolve_tags(self, note: Note) -> List[Tag]:
        """Return the Tag objects of a note, skipping unknown tag ids."""
        return [self.tags[tag_id] for tag_id in note.tags if tag_id in self.tags]

    @staticmethod
    def get_extension_for_file(file: NoteFile) -> str:
        """Map an attachment content type to a file extension.

        Examples:
            image/jpeg -> .jpg
            image/svg+xml -> .svg
            image/png -> .png
        """
        if file.content_type == 'image/jpeg':
            return '.jpg'
        if file.content_type == 'image/svg+xml':
            return '.svg'
        _, _, subtype = file.content_type.partition('/')
        return '.' + (subtype or file.content_type)

    def export_note(self, note: Note, params: ExportParams) -> Optional[str]:
        """Export one note.

        Args:
            note: The note to export
            params: Export hooks

        Returns:
            Path the note was written to, or None if path_for_note excluded it

        Raises:
            FrontmatterError: If the note's frontmatter is invalid
            FilesystemError: If the note file cannot be written
            Exception: Anything raised by path_for_note or the process hooks
        """
        logger.debug(f"Exporting {note.id}")
        tree = self._parser.parse(note.body)
        frontmatter = FrontmatterHandler.extract(tree, note.id)
        tags = self.resolve_tags(note)

        context = NoteContext(note=note, frontmatter=frontmatter, tags=tags, tree=tree)
        if params.pre_process_note:
            params.pre_process_note(context)

        note_path = params.path_for_note(context)
        if not note_path:
            removed = self.tracker.remove(note.id)
            if removed:
                logger.info(f"{note.id} is no longer exported, removed {removed}")
            else:
                logger.debug(f"Skipping {note.id}")
            return None
        note_path = os.fspath(note_path)

        splices: List[Splice] = []
        for node in find_nodes(tree, is_reference, reverse=True):
            if is_image(node):
                splice = self._rewrite_image(node, note, frontmatter, tags, params)
            else:
                splice = self._rewrite_link(node, note, params)
            if splice is not None:
                splices.append(splice)

        frontmatter_splice = self._frontmatter_splice(tree, frontmatter)
        if frontmatter_splice is not None:
            splices.append(frontmatter_splice)

        md = apply_splices(note.body, splices)

        if params.post_process_note:
            md = params.post_process_note(PostProcessContext(
                md=md, frontmatter=frontmatter, tags=tags, note=note
            ))

        self.tracker.record_write(note.id, note_path, md)
        return note_path

    def remove_note(self, note_id: str) -> Optional[str]:
        """Remove the exported file of a note, if any."""
        return self.tracker.remove(note_id)

    def _forget_file(self, file_id: str) -> None:
        """Remove an attachment's previous export while isolating failures."""
        try:
            self.tracker.remove(file_id)
        except FilesystemError as e:
            logger.warning(f"Could not remove previous export of {file_id}: {e}")

    def _rewrite_image(
        self,
        node: Node,
        note: Note,
        frontmatter: Frontmatter,
        tags: List[Tag],
        params: ExportParams,
    ) -> Optional[Splice]:
        """Export the attachment of an image node and point the image at it."""
        file_id = parse_reference_url(node.url)
        if not file_id or not file_id.startswith('file:'):
            return None

        try:
            file = self._api.get_file(file_id)
            extension = self.get_extension_for_file(file)
            destination = params.path_for_file(FileContext(
                node=node,
                note=note,
                file=file,
                extension=extension,
                frontmatter=frontmatter,
                tags=tags,
            ))
            file_path, url = destination if destination else (None, None)
            if not file_path or not url:
                logger.debug(f"No destination for {file_id} in {note.id}")
                self._forget_file(file_id)
                return None

            self.tracker.record_write(file_id, os.fspath(file_path), file.data)
        except SyncError as e:
            logger.warning(f"Failed to export {file_id} referenced from {note.id}: {e}")
            self._forget_file(file_id)
            return None

        rewritten = replace(node, url=url)
        return Splice(node.position.start, node.position.end, render_node(rewritten))

    def _rewrite_link(self, node: Node, note: Note, params: ExportParams) -> Optional[Splice]:
        """Point a link to another note at the URL chosen by url_for_note.

        Only the destination part of the link is replaced, so images nested
        in the link label keep their own edits.
        """
        if params.url_for_note is None:
            return None

        target_id = parse_reference_url(node.url)
        if not target_id or not target_id.startswith('note:'):
            return None

        try:
            target = self._api.get_note(target_id)
            target_tree = self._parser.parse(target.body)
            target_frontmatter = FrontmatterHandler.extract(target_tree, target.id)
        except SyncError as e:
            logger.warning(f"Failed to resolve link to {target_id} from {note.id}: {e}")
            return None

        target_tags = self.resolve_tags(target)
        if params.pre_process_note:
            params.pre_process_note(NoteContext(
                note=target,
                frontmatter=target_frontmatter,
                tags=target_tags,
                tree=target_tree,
            ))

        url = params.url_for_note(LinkContext(
            note=target,
            frontmatter=target_frontmatter,
            tags=target_tags,
            node=node,
        ))
        if not url:
            return None

        return Splice(node.label.end, node.position.end, render_destination(url, node.title))

    @staticmethod
    def _frontmatter_splice(tree: Node, frontmatter: Frontmatter) -> Optional[Splice]:
        """Edit replacing the frontmatter block with its canonical rendering.

        A block is introduced at the top only when the note had none and
        pre-processing left a non-empty frontmatter.
        """
        node = FrontmatterHandler.find(tree)
        if node is not None:
            return Splice(node.position.start, node.position.end, FrontmatterHandler.render(frontmatter))
        if frontmatter:
            return Splice(0, 0, FrontmatterHandler.render(frontmatter) + "\n")
        return None
