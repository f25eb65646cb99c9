"""Still-image compositor for exporting image scenes with their overlays."""

import io
import logging
from functools import lru_cache
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError

from ..config import config
from ..constants import AVAILABLE_FONTS
from ..errors import ExportError
from ..models import LogoOverlay, Scene, TextOverlay, parse_aspect_ratio

logger = logging.getLogger(__name__)

LINE_HEIGHT = 1.2
SHADOW_OFFSET = 0.04  # of the font size
SHADOW_COLOR = (0, 0, 0)
JPEG_QUALITY = 92


def canvas_size(aspect_ratio: str, width: Optional[int] = None) -> Tuple[int, int]:
    """Export canvas size for an aspect ratio such as ``"16:9"``."""
    width = width or config.export_width
    return width, round(width / parse_aspect_ratio(aspect_ratio))


def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """Greedy word wrap.

    Words are added to the current line while its measured width stays
    within ``max_width``. Explicit newlines always break. A word wider
    than ``max_width`` is broken between characters; only a single
    character wider than the line can still overflow it.

    Args:
        text: Text to wrap.
        max_width: Maximum line width, in the unit ``measure`` returns.
        measure: Returns the rendered width of a string.

    Returns:
        Wrapped lines.
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if measure(candidate) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            pieces = _break_word(word, max_width, measure)
            lines.extend(pieces[:-1])
            current = pieces[-1]
        lines.append(current)
    return lines


def _break_word(word: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    pieces: List[str] = []
    piece = ""
    for char in word:
        if piece and measure(piece + char) > max_width:
            pieces.append(piece)
            piece = char
        else:
            piece += char
    pieces.append(piece)
    return pieces


@lru_cache(maxsize=64)
def load_font(font: str, size: int) -> ImageFont.ImageFont:
    """Load a font by studio font id, falling back to Pillow's default."""
    filename = AVAILABLE_FONTS.get(font)
    candidates = []
    if filename and config.fonts_dir:
        candidates.append(str(Path(config.fonts_dir) / filename))
    if filename:
        candidates.append(filename)
    candidates.append(font)

    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue

    logger.warning(f"Font {font!r} not found, using default font")
    return ImageFont.load_default(size=size)


def _draw_text(canvas: Image.Image, overlay: TextOverlay) -> None:
    width, height = canvas.size
    draw = ImageDraw.Draw(canvas)

    font_px = max(1, round(overlay.font_pixels(height)))
    font = load_font(overlay.font, font_px)
    fill = ImageColor.getrgb(overlay.color)

    lines = wrap_text(
        overlay.text,
        overlay.pixel_width(width, height),
        lambda s: draw.textlength(s, font=font),
    )
    line_height = font_px * LINE_HEIGHT
    box = overlay.box(width, height, line_height * len(lines))
    shadow = max(1, round(font_px * SHADOW_OFFSET))

    for index, line in enumerate(lines):
        if not line:
            continue
        line_width = draw.textlength(line, font=font)
        x = box.left + (box.width - line_width) / 2
        y = box.top + index * line_height + (line_height - font_px) / 2
        draw.text((x + shadow, y + shadow), line, font=font, fill=SHADOW_COLOR)
        draw.text((x, y), line, font=font, fill=fill)


def _draw_logo(canvas: Image.Image, overlay: LogoOverlay) -> None:
    width, height = canvas.size
    with Image.open(overlay.image) as source:
        logo = source.convert("RGBA")

    logo_width = max(1, round(overlay.pixel_width(width, height)))
    logo_height = max(1, round(logo_width * logo.height / logo.width))
    logo = logo.resize((logo_width, logo_height), Image.Resampling.LANCZOS)

    box = overlay.box(width, height, logo_height)
    canvas.paste(logo, (round(box.left), round(box.top)), logo)


def compose_still(scene: Scene, visual: bytes, width: Optional[int] = None) -> bytes:
    """Render an image scene with its overlays to JPEG bytes.

    The visual is scaled to cover a canvas of the scene's aspect ratio.
    Text and logo positions use the same percentage rules as the
    interactive preview.

    Args:
        scene: Scene whose overlays to draw.
        visual: Encoded image bytes of the scene's visual.
        width: Canvas width in pixels; defaults to the configured export width.

    Returns:
        JPEG-encoded image.

    Raises:
        ExportError: If the visual, a logo or a color cannot be used.
    """
    size = canvas_size(scene.aspect_ratio, width)
    try:
        with Image.open(io.BytesIO(visual)) as source:
            canvas = ImageOps.fit(source.convert("RGB"), size, Image.Resampling.LANCZOS)

        for overlay in scene.text_overlays:
            _draw_text(canvas, overlay)
        if scene.logo is not None:
            _draw_logo(canvas, scene.logo)

        output = io.BytesIO()
        canvas.save(output, format="JPEG", quality=JPEG_QUALITY)
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise ExportError(f"Could not compose image for scene {scene.id}: {e}") from e

    logger.debug(f"Composed {size[0]}x{size[1]} still for scene {scene.id}")
    return output.getvalue()
