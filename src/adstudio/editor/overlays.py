"""Overlay edit operations.

Scenes are frozen; every edit returns a copy of the scene with its
overlay collections replaced. Overlays are the only content that changes
after generation; the store may also renumber a child when an earlier
sibling is deleted.
"""

import uuid
from typing import List, Optional, Tuple, Union

from PIL import Image

from ..constants import (
    CAPTION_SPACING_Y,
    CAPTION_START_Y,
    DEFAULT_FONT,
    DEFAULT_LOGO_SIZE,
    DEFAULT_TEXT_COLOR,
    DEFAULT_TEXT_SIZE,
    DEFAULT_TEXT_WIDTH,
)
from ..models import LogoOverlay, OverlayKind, Position, Scene, TextOverlay

Overlay = Union[TextOverlay, LogoOverlay]

# Fields a text edit may change
TEXT_STYLE_FIELDS = ("text", "font", "size", "color", "width", "position")


def new_overlay_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}"


def caption_overlays(script: List[str]) -> List[TextOverlay]:
    """One caption per script line, stacked down from 75% height."""
    return [
        TextOverlay(
            id=new_overlay_id("txt"),
            text=line,
            font=DEFAULT_FONT,
            size=DEFAULT_TEXT_SIZE,
            color=DEFAULT_TEXT_COLOR,
            width=DEFAULT_TEXT_WIDTH,
            position=Position(x=50, y=CAPTION_START_Y + index * CAPTION_SPACING_Y),
        )
        for index, line in enumerate(script)
    ]


def find_text(scene: Scene, overlay_id: str) -> TextOverlay:
    """Return a text overlay of ``scene``.

    Raises:
        KeyError: If the scene has no such overlay.
    """
    for overlay in scene.text_overlays:
        if overlay.id == overlay_id:
            return overlay
    raise KeyError(f"Scene {scene.id} has no text overlay {overlay_id}")


def find_overlay(scene: Scene, kind: OverlayKind, overlay_id: str) -> Overlay:
    if kind is OverlayKind.TEXT:
        return find_text(scene, overlay_id)
    if scene.logo is None or scene.logo.id != overlay_id:
        raise KeyError(f"Scene {scene.id} has no logo {overlay_id}")
    return scene.logo


def add_text_overlay(scene: Scene, text: str, **style) -> Tuple[Scene, TextOverlay]:
    """Append a text overlay using the caption defaults for unset style fields."""
    values = {
        "font": DEFAULT_FONT,
        "size": DEFAULT_TEXT_SIZE,
        "color": DEFAULT_TEXT_COLOR,
        "width": DEFAULT_TEXT_WIDTH,
        "position": Position(x=50, y=50),
    }
    values.update(style)
    overlay = TextOverlay(id=new_overlay_id("txt"), text=text, **values)
    return scene.with_overlays(text_overlays=[*scene.text_overlays, overlay]), overlay


def update_text_overlay(scene: Scene, overlay_id: str, **changes) -> Scene:
    """Change text, font, size, color, width or position of one text overlay.

    Raises:
        KeyError: If the overlay does not exist.
        ValueError: For unknown fields or invalid values.
    """
    unknown = set(changes) - set(TEXT_STYLE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot change {', '.join(sorted(unknown))} on a text overlay")

    current = find_text(scene, overlay_id)
    # Re-validate so bad sizes or widths are rejected
    updated = TextOverlay.model_validate({**current.model_dump(), **changes})
    overlays = [updated if o.id == overlay_id else o for o in scene.text_overlays]
    return scene.with_overlays(text_overlays=overlays)


def align_center(scene: Scene, overlay_id: str) -> Scene:
    """Snap a text overlay's horizontal anchor to 50%, keeping its y."""
    current = find_text(scene, overlay_id)
    return update_text_overlay(scene, overlay_id, position=Position(x=50, y=current.position.y))


def remove_text_overlay(scene: Scene, overlay_id: str) -> Scene:
    find_text(scene, overlay_id)
    return scene.with_overlays(
        text_overlays=[o for o in scene.text_overlays if o.id != overlay_id]
    )


def move_overlay(scene: Scene, kind: OverlayKind, overlay_id: str, position: Position) -> Scene:
    """Place an overlay's anchor at ``position``."""
    overlay = find_overlay(scene, kind, overlay_id)
    moved = overlay.with_position(position.x, position.y)
    if kind is OverlayKind.LOGO:
        return scene.with_overlays(logo=moved)
    overlays = [moved if o.id == overlay_id else o for o in scene.text_overlays]
    return scene.with_overlays(text_overlays=overlays)


def set_logo(
    scene: Scene,
    image_path: str,
    size: float = DEFAULT_LOGO_SIZE,
    position: Optional[Position] = None,
) -> Scene:
    """Attach a logo, replacing any existing one.

    Raises:
        OSError: If the image cannot be opened.
    """
    with Image.open(image_path) as image:
        aspect_ratio = image.width / image.height

    logo = LogoOverlay(
        id=new_overlay_id("logo"),
        image=str(image_path),
        aspect_ratio=aspect_ratio,
        size=size,
        position=position or Position(x=85, y=15),
    )
    return scene.with_overlays(logo=logo)


def resize_logo(scene: Scene, size: float) -> Scene:
    if scene.logo is None:
        raise KeyError(f"Scene {scene.id} has no logo")
    return scene.with_overlays(logo=scene.logo.with_size(size))


def remove_logo(scene: Scene) -> Scene:
    return scene.with_overlays(logo=None)
