"""Ad request (draft brief) data model."""

from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class VisualType(str, Enum):
    """Kind of visual generated for a scene."""
    IMAGE = "image"
    VIDEO = "video"


def parse_aspect_ratio(aspect_ratio: str) -> float:
    """Return width / height for a ratio such as '16:9'.

    Raises:
        ValueError: If the ratio is not two positive integers separated by ':'.
    """
    parts = aspect_ratio.split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid aspect ratio: {aspect_ratio}")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid aspect ratio: {aspect_ratio}")
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid aspect ratio: {aspect_ratio}")
    return width / height


class AdRequest(BaseModel):
    """Working brief for the next generation."""

    product: str = Field(..., description="Product name")
    era: str = Field(default="1980s", description="Era the ad should evoke")
    tone: str = Field(default="Nostalgic", description="Tone of voice")
    aspect_ratio: str = Field(default="16:9", description="Output aspect ratio")
    visual_type: VisualType = Field(default=VisualType.VIDEO, description="Image or video")
    voice: Optional[str] = Field(None, description="Prebuilt voice for the voiceover")
    visual_idea: str = Field(default="", description="Visual idea for this scene")
    notes: str = Field(default="", description="Free-text notes")

    class Config:
        """Pydantic config."""
        frozen = False

    @field_validator("aspect_ratio")
    @classmethod
    def _check_aspect_ratio(cls, value: str) -> str:
        parse_aspect_ratio(value)
        return value

    @classmethod
    def default(cls) -> "AdRequest":
        """The brief a fresh studio starts with."""
        return cls(
            product="Starlight Soda",
            era="1980s",
            tone="Nostalgic",
            aspect_ratio="16:9",
            visual_type=VisualType.VIDEO,
            voice="Puck",
            visual_idea="Teenagers at a retro arcade, sharing a can of Starlight Soda under neon lights.",
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "AdRequest":
        """Load a brief from a YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save the brief to a YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)
