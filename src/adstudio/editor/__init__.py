"""Overlay editing, compositing and export."""

from .bundle import export_scene, export_story, safe_name, scene_bundle, story_bundle
from .compositor import canvas_size, compose_still, load_font, wrap_text
from .interaction import DragState, InteractionController, Point
from .overlays import (
    add_text_overlay,
    align_center,
    caption_overlays,
    find_overlay,
    find_text,
    move_overlay,
    remove_logo,
    remove_text_overlay,
    resize_logo,
    set_logo,
    update_text_overlay,
)
from .playlist import PLAYLIST_FILENAME, PlaylistClip, render_playlist

__all__ = [
    "add_text_overlay",
    "align_center",
    "canvas_size",
    "caption_overlays",
    "compose_still",
    "DragState",
    "export_scene",
    "export_story",
    "find_overlay",
    "find_text",
    "InteractionController",
    "load_font",
    "move_overlay",
    "PLAYLIST_FILENAME",
    "PlaylistClip",
    "Point",
    "remove_logo",
    "remove_text_overlay",
    "render_playlist",
    "resize_logo",
    "safe_name",
    "scene_bundle",
    "set_logo",
    "story_bundle",
    "update_text_overlay",
    "wrap_text",
]
