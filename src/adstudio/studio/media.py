"""Generated media files kept under the workspace."""

import logging
from pathlib import Path
from typing import List

from ..models import Scene

logger = logging.getLogger(__name__)


class MediaLibrary:
    """Stores generated bytes as files named after their scene."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def save(self, scene_id: str, role: str, data: bytes, extension: str) -> str:
        """Write ``data`` as ``<scene_id>_<role>.<extension>`` and return its path."""
        self._root.mkdir(parents=True, exist_ok=True)
        path = self._root / f"{scene_id}_{role}.{extension}"
        path.write_bytes(data)
        logger.debug(f"Saved {len(data)} bytes to {path}")
        return str(path)

    def discard(self, scene_id: str) -> None:
        """Remove every file saved for ``scene_id``."""
        if not self._root.exists():
            return
        for path in self._root.glob(f"{scene_id}_*"):
            self._unlink(path)

    def remove(self, scenes: List[Scene]) -> None:
        """Remove the media files of deleted scenes that live in this library."""
        for scene in scenes:
            for value in (scene.visual_path, scene.audio_path):
                if value and self._owns(Path(value)):
                    self._unlink(Path(value))

    def _owns(self, path: Path) -> bool:
        try:
            path.resolve().relative_to(self._root.resolve())
        except ValueError:
            return False
        return True

    def _unlink(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")
