"""Export scenes and stories as downloadable files.

- image scene: composited JPEG, ``{Product}.jpg``
- video scene: zip of raw video and voiceover, ``{Product}.zip``
- story: zip of every scene's visual and audio plus an HTML playlist,
  ``{Product}_story.zip``

Archives are assembled in memory and written only once complete, so a
failed export never leaves a partial file behind.
"""

import io
import logging
import os
import re
import zipfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from ..errors import ExportError
from ..models import Scene, VisualType
from .compositor import compose_still
from .playlist import PLAYLIST_FILENAME, PlaylistClip, render_playlist

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def safe_name(product: str) -> str:
    """File-name stem for a product: whitespace runs become underscores."""
    stem = re.sub(r"\s+", "_", product.strip())
    stem = re.sub(r"[\\/:*?\"<>|]", "", stem)
    return stem or "ad"


def _read(path: Optional[str], what: str, scene: Scene) -> bytes:
    if not path:
        raise ExportError(f"Scene {scene.scene_number} has no {what} to export")
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise ExportError(f"Could not read {what} of scene {scene.scene_number}: {e}") from e


def _write(destination: Path, data: bytes) -> Path:
    """Write ``data`` next to ``destination`` and move it into place."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(destination.name + ".part")
    try:
        partial.write_bytes(data)
        os.replace(partial, destination)
    except OSError as e:
        partial.unlink(missing_ok=True)
        raise ExportError(f"Could not write {destination}: {e}") from e
    return destination


def _zip(entries: Sequence[Tuple[str, bytes]]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries:
            archive.writestr(name, data)
    return buffer.getvalue()


def scene_bundle(scene: Scene) -> Tuple[str, bytes]:
    """File name and content for exporting a single scene.

    Raises:
        ExportError: If the scene's media is missing or unreadable.
    """
    name = safe_name(scene.product)
    visual = _read(scene.visual_path, "visual", scene)

    if scene.visual_type is VisualType.IMAGE:
        return f"{name}.jpg", compose_still(scene, visual)

    entries = [(f"{name}_video.mp4", visual)]
    if scene.audio_path:
        entries.append((f"{name}_audio.wav", _read(scene.audio_path, "audio", scene)))
    return f"{name}.zip", _zip(entries)


def story_bundle(
    scenes: Sequence[Scene],
    on_progress: Optional[ProgressCallback] = None,
) -> Tuple[str, bytes]:
    """File name and content of a story archive.

    Scenes are numbered in the order given. ``on_progress`` receives a
    percentage of files packed after each
    visual or audio file is added.

    Raises:
        ExportError: If the story is empty or a scene's visual is missing.
    """
    if not scenes:
        raise ExportError("Cannot export an empty story")

    entries: List[Tuple[str, bytes]] = []
    clips: List[PlaylistClip] = []
    total = len(scenes) + sum(1 for scene in scenes if scene.audio_path)

    def added() -> None:
        if on_progress:
            on_progress(len(entries) / total * 100)

    for index, scene in enumerate(scenes, start=1):
        visual = _read(scene.visual_path, "visual", scene)
        if scene.visual_type is VisualType.VIDEO:
            video_name = f"scene_{index}_visual.mp4"
            entries.append((video_name, visual))
            added()
            clip = PlaylistClip(scene=index, video=video_name)
            clips.append(clip)
        else:
            entries.append((f"scene_{index}_visual.jpg", compose_still(scene, visual)))
            added()
            clip = None

        if scene.audio_path:
            audio_name = f"scene_{index}_audio.wav"
            entries.append((audio_name, _read(scene.audio_path, "audio", scene)))
            added()
            if clip is not None:
                clip.audio = audio_name

    product = scenes[0].product
    if clips:
        entries.append((PLAYLIST_FILENAME, render_playlist(f"{product} story", clips).encode("utf-8")))

    try:
        data = _zip(entries)
    except (OSError, zipfile.BadZipFile) as e:
        raise ExportError(f"Could not build story archive: {e}") from e
    return f"{safe_name(product)}_story.zip", data


def export_scene(scene: Scene, destination_dir: Path) -> Path:
    """Export one scene into ``destination_dir``.

    Returns:
        Path of the written file.
    """
    filename, data = scene_bundle(scene)
    path = _write(Path(destination_dir) / filename, data)
    logger.info(f"Exported scene {scene.id} to {path}")
    return path


def export_story(
    scenes: Sequence[Scene],
    destination_dir: Path,
    on_progress: Optional[ProgressCallback] = None,
) -> Path:
    """Export a whole story as one archive into ``destination_dir``.

    Returns:
        Path of the written archive.
    """
    filename, data = story_bundle(scenes, on_progress)
    path = _write(Path(destination_dir) / filename, data)
    logger.info(f"Exported {len(scenes)}-scene story to {path}")
    return path
