"""Live export of an Inkdrop notebook.

This package runs the initial export of a notebook and keeps it in sync by
polling the change feed.
"""

from .change_watcher import ChangeWatcher, WatchState
from .live_exporter import LiveExporter

__all__ = [
    'ChangeWatcher',
    'WatchState',
    'LiveExporter',
]
