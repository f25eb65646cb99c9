"""Data models for the ad studio."""

from .request import AdRequest, VisualType, parse_aspect_ratio
from .overlay import Anchor, Box, LogoOverlay, OverlayKind, Position, TextOverlay
from .scene import ChildLink, RootLink, Scene, VideoHandle
from .state import GenerationState

__all__ = [
    "AdRequest",
    "VisualType",
    "parse_aspect_ratio",
    "Anchor",
    "Box",
    "LogoOverlay",
    "OverlayKind",
    "Position",
    "TextOverlay",
    "ChildLink",
    "RootLink",
    "Scene",
    "VideoHandle",
    "GenerationState",
]
