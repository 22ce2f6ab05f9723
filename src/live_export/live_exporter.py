"""Entry point for exporting a notebook and keeping the export up to date."""

import logging
from typing import Optional

from src.inkdrop_client.api_wrapper import APIWrapper
from src.inkdrop_client.auth import Authenticator, Credentials
from src.exporter.hooks import ExportParams
from src.exporter.note_exporter import NoteExporter

from .change_watcher import ChangeWatcher

logger = logging.getLogger(__name__)


class LiveExporter:
    """Exports every note of a notebook, then optionally watches for changes.

    Example:
        >>> exporter = LiveExporter(Credentials("localhost", 19840, "foo", "bar"))
        >>> watcher = exporter.start(ExportParams(
        ...     book_id="book:tjnPbJakw",
        ...     path_for_note=lambda ctx: f"./out/{ctx.note.id[5:]}.md",
        ...     path_for_file=lambda ctx: None,
        ...     live=True,
        ... ))
        >>> watcher.stop()
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        api: Optional[APIWrapper] = None,
    ):
        """Initialize the exporter.

        Args:
            credentials: Server credentials; loaded from the environment when omitted
            api: Preconfigured API wrapper (takes precedence over credentials)
        """
        self._api = api if api is not None else APIWrapper(Authenticator(credentials))
        self.exporter = NoteExporter(self._api)
        self.exported_count = 0

    @property
    def tracker(self):
        return self.exporter.tracker

    def export_all(self, params: ExportParams) -> int:
        """Export every note of the notebook, most recently updated first.

        Returns:
            Number of notes written
        """
        notes = self._api.get_notes(params.book_id)
        logger.info(f"Exporting {len(notes)} note(s) from {params.book_id}")
        written = 0
        for note in notes:
            if self.exporter.export_note(note, params):
                written += 1
        return written

    def start(self, params: ExportParams) -> Optional[ChangeWatcher]:
        """Run the full export, then start watching when params.live is set.

        Returns:
            The running ChangeWatcher in live mode, otherwise None

        Raises:
            TransportError: If the server cannot be queried during the full export
            SyncError: If a note fails to export during the full export
        """
        self.exporter.load_tags()

        # Watermark precedes the full pass; edits made during it are replayed
        since = params.since
        if params.live and since is None:
            since = self._api.get_latest_seq()

        self.exported_count = self.export_all(params)

        if not params.live:
            return None

        watcher = ChangeWatcher(self.exporter, self._api, params, since)
        watcher.start()
        return watcher
