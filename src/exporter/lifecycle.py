"""Tracking of exported artifacts.

Maps each note or attachment identifier to the path it was last written to,
so that a renamed export removes its previous file and a deleted or excluded
note removes its exported file.
"""

import logging
import os
from typing import Dict, ItemsView, Optional, Union

from .errors import FilesystemError

logger = logging.getLogger(__name__)


class ExportLifecycleTracker:
    """In-memory map from identifier to last written path.

    Invariant: at most one exported file exists per identifier written
    through this tracker, and the map holds that file's path.

    The map is process-local and starts empty; re-running the full export
    rebuilds it.

    Example:
        >>> tracker = ExportLifecycleTracker()
        >>> tracker.record_write("note:abc", "./out/abc.md", "# Hello")
        >>> tracker.remove("note:abc")
    """

    def __init__(self):
        self._paths: Dict[str, str] = {}

    def __contains__(self, doc_id: str) -> bool:
        return doc_id in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def path_for(self, doc_id: str) -> Optional[str]:
        return self._paths.get(doc_id)

    def items(self) -> ItemsView[str, str]:
        return self._paths.items()

    def _delete_file(self, file_path: str) -> None:
        """Delete a file, ignoring a file that is already gone.

        Raises:
            FilesystemError: If the file exists but cannot be deleted
        """
        try:
            os.remove(file_path)
            logger.info(f"Removed {file_path}")
        except FileNotFoundError:
            logger.debug(f"Already removed: {file_path}")
        except OSError as e:
            raise FilesystemError(file_path, 'delete', str(e))

    def record_write(self, doc_id: str, file_path: str, data: Union[str, bytes]) -> None:
        """Write an artifact for an identifier, removing its previous path first.

        Args:
            doc_id: Note or attachment identifier
            file_path: Destination path
            data: Text (written as UTF-8) or bytes

        Raises:
            FilesystemError: If the previous file cannot be deleted or the
                new file cannot be written
        """
        old_path = self._paths.get(doc_id)
        if old_path and old_path != file_path:
            logger.debug(f"{doc_id} moved from {old_path} to {file_path}")
            self._delete_file(old_path)
            del self._paths[doc_id]

        try:
            if isinstance(data, bytes):
                with open(file_path, 'wb') as f:
                    f.write(data)
            else:
                with open(file_path, 'w', encoding='utf-8', newline='') as f:
                    f.write(data)
        except OSError as e:
            self._paths.pop(doc_id, None)
            raise FilesystemError(file_path, 'write', str(e))

        self._paths[doc_id] = file_path
        logger.info(f"Wrote {doc_id} to {file_path}")

    def remove(self, doc_id: str) -> Optional[str]:
        """Delete the exported artifact of an identifier and forget it.

        No-op when the identifier was never exported.

        Returns:
            The removed path, or None
        """
        file_path = self._paths.get(doc_id)
        if file_path is None:
            return None
        self._delete_file(file_path)
        del self._paths[doc_id]
        return file_path
