"""Overlay data models.

All positions and sizes are percentages of the rendering container, so an
overlay keeps its place at any resolution or aspect ratio. Each overlay kind
owns its anchor convention:

- text: ``x`` is the horizontal center, ``y`` is the top edge
- logo: ``x`` and ``y`` are both the center
"""

from abc import abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, Field


class OverlayKind(str, Enum):
    """Kind of overlay, used to route selection and drags."""
    TEXT = "text"
    LOGO = "logo"


class Anchor(str, Enum):
    """Point of the overlay box that ``position`` refers to."""
    TOP_CENTER = "top-center"
    CENTER = "center"


@dataclass(frozen=True)
class Box:
    """Axis-aligned box in pixels."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


class Position(BaseModel):
    """Anchor position as percentages of the container."""

    x: float = Field(..., description="Percent of container width")
    y: float = Field(..., description="Percent of container height")

    class Config:
        """Pydantic config."""
        frozen = True


class PositionedOverlay(BaseModel):
    """Common positionable capability shared by text and logo overlays."""

    kind: ClassVar[OverlayKind]
    anchor: ClassVar[Anchor]

    id: str = Field(..., description="Unique overlay identifier")
    position: Position = Field(..., description="Anchor position in percent")
    size: float = Field(..., gt=0, description="Size in percent of the container")

    class Config:
        """Pydantic config."""
        frozen = True

    @abstractmethod
    def pixel_width(self, container_width: float, container_height: float) -> float:
        """Rendered box width in pixels for the given container."""
        ...

    @abstractmethod
    def anchor_offset_y(self, box_height: float) -> float:
        """Distance from the box top edge to the anchor point."""
        ...

    def with_position(self, x: float, y: float) -> "PositionedOverlay":
        return self.model_copy(update={"position": Position(x=x, y=y)})

    def with_size(self, size: float) -> "PositionedOverlay":
        if size <= 0:
            raise ValueError(f"Overlay size must be positive, got {size}")
        return self.model_copy(update={"size": size})

    def box(self, container_width: float, container_height: float, box_height: float) -> Box:
        """Pixel box of this overlay inside a container.

        Args:
            container_width: Container width in pixels.
            container_height: Container height in pixels.
            box_height: Rendered height of the overlay in pixels.

        Returns:
            The overlay's box, placed according to its anchor convention.
        """
        width = self.pixel_width(container_width, container_height)
        anchor_x = self.position.x / 100 * container_width
        anchor_y = self.position.y / 100 * container_height
        return Box(
            left=anchor_x - width / 2,
            top=anchor_y - self.anchor_offset_y(box_height),
            width=width,
            height=box_height,
        )

    def position_for_box(
        self,
        left: float,
        top: float,
        box_width: float,
        box_height: float,
        container_width: float,
        container_height: float,
    ) -> Position:
        """Inverse of :meth:`box`: anchor position for a box placed at (left, top)."""
        if container_width <= 0 or container_height <= 0:
            raise ValueError("Container must have a positive size")
        return Position(
            x=(left + box_width / 2) / container_width * 100,
            y=(top + self.anchor_offset_y(box_height)) / container_height * 100,
        )


class TextOverlay(PositionedOverlay):
    """Text drawn over a scene.

    ``size`` is the font size in percent of the container height and
    ``width`` the wrapping width in percent of the container width.
    """

    kind: ClassVar[OverlayKind] = OverlayKind.TEXT
    anchor: ClassVar[Anchor] = Anchor.TOP_CENTER

    text: str = Field(..., description="Literal text content")
    font: str = Field(..., description="Font identifier")
    color: str = Field(default="#FFFFFF", description="Hex color")
    width: float = Field(..., gt=0, le=100, description="Percent of container width")

    def pixel_width(self, container_width: float, container_height: float) -> float:
        return self.width / 100 * container_width

    def anchor_offset_y(self, box_height: float) -> float:
        return 0.0

    def font_pixels(self, container_height: float) -> float:
        """Font size in pixels for a container of the given height."""
        return self.size / 100 * container_height


class LogoOverlay(PositionedOverlay):
    """Brand logo drawn over a scene.

    ``size`` is the logo width in percent of the container width; the
    height follows the image's own aspect ratio.
    """

    kind: ClassVar[OverlayKind] = OverlayKind.LOGO
    anchor: ClassVar[Anchor] = Anchor.CENTER

    image: str = Field(..., description="Path to the logo image")
    aspect_ratio: Optional[float] = Field(None, gt=0, description="Logo width / height")

    def pixel_width(self, container_width: float, container_height: float) -> float:
        return self.size / 100 * container_width

    def pixel_height(self, container_width: float) -> Optional[float]:
        """Logo height in pixels when its aspect ratio is known."""
        if not self.aspect_ratio:
            return None
        return self.size / 100 * container_width / self.aspect_ratio

    def anchor_offset_y(self, box_height: float) -> float:
        return box_height / 2
