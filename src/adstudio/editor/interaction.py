"""Pointer interaction with overlays.

The controller is independent of any rendering surface: callers pass
pointer positions and boxes in one shared pixel space (e.g. page
coordinates) and get back scenes with updated overlay positions.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..models import Box, OverlayKind, Position, Scene
from . import overlays as ops

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Point:
    """Pointer position in pixels."""

    x: float
    y: float


@dataclass(frozen=True)
class DragState:
    """Which overlay is being dragged and where it was grabbed."""

    kind: OverlayKind
    overlay_id: str
    offset_x: float
    offset_y: float
    box_width: float
    box_height: float


class InteractionController:
    """Tracks the active overlay and converts drags into overlay positions."""

    def __init__(self) -> None:
        self._drag: Optional[DragState] = None
        self._active_text_id: Optional[str] = None
        self._logo_active = False

    @property
    def drag(self) -> Optional[DragState]:
        return self._drag

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    @property
    def active_text_id(self) -> Optional[str]:
        return self._active_text_id

    @property
    def logo_active(self) -> bool:
        return self._logo_active

    # Selection

    def select_text(self, overlay_id: str) -> None:
        self._active_text_id = overlay_id
        self._logo_active = False

    def select_logo(self) -> None:
        self._logo_active = True
        self._active_text_id = None

    def clear_selection(self) -> None:
        self._active_text_id = None
        self._logo_active = False

    # Dragging

    def begin_drag(
        self,
        scene: Scene,
        kind: OverlayKind,
        overlay_id: str,
        pointer: Point,
        overlay_box: Box,
    ) -> None:
        """Start dragging an overlay grabbed at ``pointer``.

        Args:
            scene: Scene owning the overlay.
            kind: Text or logo.
            overlay_id: Id of the grabbed overlay.
            pointer: Pointer position at pointer-down.
            overlay_box: Rendered box of the overlay at pointer-down.

        Raises:
            RuntimeError: If another drag is still active.
            KeyError: If the scene has no such overlay.
        """
        if self._drag is not None:
            raise RuntimeError(f"Overlay {self._drag.overlay_id} is already being dragged")

        ops.find_overlay(scene, kind, overlay_id)

        if kind is OverlayKind.TEXT:
            self.select_text(overlay_id)
        else:
            self.select_logo()

        self._drag = DragState(
            kind=kind,
            overlay_id=overlay_id,
            offset_x=pointer.x - overlay_box.left,
            offset_y=pointer.y - overlay_box.top,
            box_width=overlay_box.width,
            box_height=overlay_box.height,
        )
        logger.debug(f"Begin drag of {kind.value} overlay {overlay_id}")

    def update_drag(self, scene: Scene, pointer: Point, container: Box) -> Scene:
        """Move the dragged overlay so it stays under the pointer.

        Returns:
            The scene with the overlay moved, or ``scene`` unchanged when
            nothing is being dragged.
        """
        drag = self._drag
        if drag is None:
            return scene

        overlay = ops.find_overlay(scene, drag.kind, drag.overlay_id)
        left = pointer.x - container.left - drag.offset_x
        top = pointer.y - container.top - drag.offset_y
        position = overlay.position_for_box(
            left, top, drag.box_width, drag.box_height, container.width, container.height
        )
        return ops.move_overlay(scene, drag.kind, drag.overlay_id, position)

    def end_drag(self) -> None:
        """Finish the drag, wherever the pointer was released."""
        self._drag = None

    # Edits on the active overlay

    def edit_active_text(self, scene: Scene, **changes) -> Scene:
        if self._active_text_id is None:
            return scene
        return ops.update_text_overlay(scene, self._active_text_id, **changes)

    def align_active_center(self, scene: Scene) -> Scene:
        if self._active_text_id is None:
            return scene
        return ops.align_center(scene, self._active_text_id)

    def delete_active(self, scene: Scene) -> Scene:
        """Delete whichever overlay is active and clear the selection."""
        if self._active_text_id is not None:
            scene = ops.remove_text_overlay(scene, self._active_text_id)
        elif self._logo_active:
            scene = ops.remove_logo(scene)
        self.clear_selection()
        return scene

    def resize_active_logo(self, scene: Scene, size: float) -> Scene:
        if not self._logo_active:
            return scene
        return ops.resize_logo(scene, size)

    def forget(self, scene: Scene) -> None:
        """Drop selection and drag state that point at overlays ``scene`` no longer has."""
        if self._active_text_id and all(o.id != self._active_text_id for o in scene.text_overlays):
            self._active_text_id = None
        if self._logo_active and scene.logo is None:
            self._logo_active = False
        if self._drag is not None:
            try:
                ops.find_overlay(scene, self._drag.kind, self._drag.overlay_id)
            except KeyError:
                self._drag = None
