"""Polling of the Inkdrop change feed.

This module provides the ChangeWatcher class, which polls the change feed
from a sequence number on a fixed interval and re-exports changed notes of
the target notebook. Deleted documents have their exported files removed.

Polling runs on a single background thread, so two poll cycles never
overlap and the export state needs no locking.
"""

import logging
import threading
from enum import Enum
from typing import Any, Optional

from src.inkdrop_client.api_wrapper import APIWrapper
from src.inkdrop_client.errors import SyncError
from src.exporter.hooks import ExportParams
from src.exporter.note_exporter import NoteExporter
from src.models.note import Change

logger = logging.getLogger(__name__)


class WatchState(Enum):
    """Lifecycle states of a ChangeWatcher."""

    INITIALIZING = "initializing"
    RUNNING = "running"
    STOPPED = "stopped"


class ChangeWatcher:
    """Re-exports notes as the change feed reports changes.

    Attributes:
        since: Watermark; the last change feed sequence fully processed
        state: Current WatchState
        error: The exception that stopped the watcher, if any

    Example:
        >>> watcher = ChangeWatcher(exporter, api, params, since=42)
        >>> watcher.start()
        >>> ...
        >>> watcher.stop()
    """

    def __init__(
        self,
        exporter: NoteExporter,
        api: APIWrapper,
        params: ExportParams,
        since: Any,
    ):
        self._exporter = exporter
        self._api = api
        self._params = params
        self.since = since
        self.state = WatchState.INITIALIZING
        self.error: Optional[BaseException] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self.state is WatchState.RUNNING

    def start(self) -> None:
        """Start polling on a background thread.

        Raises:
            RuntimeError: If the watcher was already started
        """
        if self._thread is not None:
            raise RuntimeError("ChangeWatcher can only be started once")
        if self._stop_event.is_set():
            self.state = WatchState.STOPPED
            return

        self.state = WatchState.RUNNING
        self._thread = threading.Thread(
            target=self._run,
            name="inkdrop-change-watcher",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Watching changes since {self.since}")

    def stop(self) -> None:
        """Stop polling. An in-flight poll cycle runs to completion.

        Safe to call more than once, and after the watcher stopped itself.
        """
        self._stop_event.set()
        if self._thread is None:
            self.state = WatchState.STOPPED

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the watcher has stopped.

        Returns:
            True if the watcher stopped within the timeout
        """
        if self._thread is None:
            return self.state is WatchState.STOPPED
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        try:
            while not self._stop_event.wait(self._params.interval):
                self.poll_once()
        except Exception as e:
            logger.exception(f"Stopped watching changes at sequence {self.since}")
            self.error = e
        finally:
            self._stop_event.set()
            self.state = WatchState.STOPPED
            logger.info("Change watcher stopped")

    def poll_once(self) -> Any:
        """Process one batch of changes and advance the watermark.

        Failures exporting individual documents are logged and do not hold
        back the watermark. Failures fetching the batch propagate.

        Returns:
            The new watermark

        Raises:
            TransportError: If the change feed cannot be fetched
        """
        result = self._api.get_changes(self.since)
        if result.results:
            logger.debug(f"{len(result.results)} change(s) since {self.since}")

        for change in result.results:
            try:
                self._process_change(change)
            except SyncError as e:
                logger.error(f"Failed to process change of {change.id}: {e}")

        if result.last_seq is not None:
            self.since = result.last_seq
        return self.since

    def _process_change(self, change: Change) -> None:
        if change.deleted:
            removed = self._exporter.remove_note(change.id)
            if removed:
                logger.info(f"{change.id} was deleted, removed {removed}")
            return

        note = change.note
        if note is None:
            return

        if note.book_id != self._params.book_id:
            # Moved to another notebook or to the trash
            removed = self._exporter.remove_note(note.id)
            if removed:
                logger.info(f"{note.id} left notebook {self._params.book_id}, removed {removed}")
            return

        self._exporter.export_note(note, self._params)
