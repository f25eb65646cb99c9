"""
Pytest configuration and fixtures for Ad Studio tests.
"""
import io
import pytest
from datetime import datetime, timedelta
from itertools import count
from pathlib import Path
from unittest.mock import MagicMock

from PIL import Image

from adstudio.config import config
from adstudio.models import ChildLink, RootLink, Scene, VideoHandle, VisualType
from adstudio.services import VideoResult, pcm_to_wav
from adstudio.studio import HistoryStore, MediaLibrary, StudioSession

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch):
    """Retries in tests never sleep."""
    monkeypatch.setattr(config, "retry_delay", 0.0)


def make_jpeg(width=320, height=180, color=(20, 40, 160)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes():
    """A small solid-blue JPEG."""
    return make_jpeg()


@pytest.fixture
def logo_file(tmp_path):
    """A 200x100 solid red PNG logo."""
    path = tmp_path / "logo.png"
    Image.new("RGBA", (200, 100), (255, 0, 0, 255)).save(path)
    return path


@pytest.fixture
def make_scene(tmp_path, jpeg_bytes):
    """Factory for scenes with media files on disk."""
    numbers = count(1)

    def factory(
        scene_id=None,
        minutes=0,
        visual_type=VisualType.VIDEO,
        parent=None,
        scene_number=None,
        continuation=True,
        audio=False,
        product="Starlight Soda",
        **fields,
    ):
        n = next(numbers)
        scene_id = scene_id or f"ad_{n}"
        media = tmp_path / "scene-media"
        media.mkdir(exist_ok=True)

        if visual_type is VisualType.IMAGE:
            visual = media / f"{scene_id}_visual.jpg"
            visual.write_bytes(jpeg_bytes)
        else:
            visual = media / f"{scene_id}_visual.mp4"
            visual.write_bytes(f"mp4:{scene_id}".encode())

        audio_path = None
        if audio:
            audio_path = media / f"{scene_id}_audio.wav"
            audio_path.write_bytes(pcm_to_wav(b"\x00\x00" * 100))

        story = ChildLink(parent_id=parent.id, scene_number=scene_number) if parent else RootLink()
        handle = None
        if continuation and visual_type is VisualType.VIDEO:
            handle = VideoHandle(uri=f"gs://bucket/{scene_id}.mp4", aspect_ratio="16:9")

        values = dict(
            id=scene_id,
            created_at=BASE_TIME + timedelta(minutes=minutes),
            product=product,
            era="1980s",
            tone="Nostalgic",
            aspect_ratio="16:9",
            visual_type=visual_type,
            voice="Puck",
            visual_idea="Neon arcade",
            script=["Taste the stars."],
            visual_path=str(visual),
            continuation=handle,
            audio_path=str(audio_path) if audio_path else None,
            story=story,
        )
        values.update(fields)
        return Scene(**values)

    return factory


@pytest.fixture
def text_generator():
    """Text generator returning a fixed two-line script."""
    generator = MagicMock()
    generator.generate_script.return_value = ["Taste the stars.", "Starlight Soda."]
    return generator


@pytest.fixture
def visual_generator(jpeg_bytes):
    """Visual generator returning a JPEG or a numbered fake video."""
    generator = MagicMock()
    generator.generate_image.return_value = jpeg_bytes
    videos = count(1)

    def generate_video(prompt, aspect_ratio, previous=None):
        n = next(videos)
        return VideoResult(
            data=f"video-{n}".encode(),
            handle=VideoHandle(uri=f"gs://bucket/video-{n}.mp4", aspect_ratio=aspect_ratio),
        )

    generator.generate_video.side_effect = generate_video
    return generator


@pytest.fixture
def speech_generator():
    """Speech generator returning a short silent WAV."""
    generator = MagicMock()
    generator.generate_audio.return_value = pcm_to_wav(b"\x00\x00" * 240)
    return generator


@pytest.fixture
def credentials():
    """Credential gate with a usable credential selected."""
    gate = MagicMock()
    gate.is_selected.return_value = True
    gate.select.return_value = True
    return gate


@pytest.fixture
def workspace(tmp_path) -> Path:
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def history_store(workspace):
    return HistoryStore(workspace / "history.json")


@pytest.fixture
def media_library(workspace):
    return MediaLibrary(workspace / "media")


@pytest.fixture
def session(history_store, media_library, text_generator, visual_generator, speech_generator, credentials):
    """Studio session wired to fake collaborators."""
    return StudioSession(
        history=history_store,
        media=media_library,
        text=text_generator,
        visuals=visual_generator,
        speech=speech_generator,
        credentials=credentials,
    )
