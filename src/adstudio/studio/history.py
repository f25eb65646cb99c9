"""Durable scene history stored as a JSON array under the workspace."""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from ..models import Scene

logger = logging.getLogger(__name__)

_scene_list = TypeAdapter(List[Scene])


class HistoryStore:
    """Load-all / save-all persistence of the scene collection.

    Failures are logged and never raised: an unreadable history loads as
    empty and a failed save leaves the in-memory state authoritative.
    """

    def __init__(self, path: Path, selection_path: Optional[Path] = None) -> None:
        self._path = Path(path)
        self._selection_path = selection_path or self._path.with_suffix(".selected")

    @property
    def path(self) -> Path:
        return self._path

    def load_all(self) -> List[Scene]:
        if not self._path.exists():
            return []
        try:
            with open(self._path, "r") as f:
                data = json.load(f)
            scenes = _scene_list.validate_python(data)
        except (OSError, ValueError, ValidationError) as e:
            logger.error(f"Failed to load history from {self._path}: {e}")
            return []
        logger.debug(f"Loaded {len(scenes)} scene(s) from {self._path}")
        return scenes

    def save_all(self, scenes: Sequence[Scene]) -> bool:
        """Write the whole collection; returns False when the write failed."""
        data = [scene.model_dump(mode="json") for scene in scenes]
        partial = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(partial, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(partial, self._path)
        except OSError as e:
            logger.error(f"Failed to save history to {self._path}: {e}")
            return False
        return True

    def load_selection(self) -> Optional[str]:
        """Id of the scene selected in the previous session, if any."""
        try:
            scene_id = self._selection_path.read_text().strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read selection: {e}")
            return None
        return scene_id or None

    def save_selection(self, scene_id: Optional[str]) -> None:
        try:
            self._selection_path.parent.mkdir(parents=True, exist_ok=True)
            self._selection_path.write_text(scene_id or "")
        except OSError as e:
            logger.error(f"Failed to save selection: {e}")
