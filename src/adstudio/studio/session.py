"""Top-level studio controller tying the store, workflow and editor together."""

import logging
import random
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from ..agents import Concept
from ..config import config
from ..constants import ASPECT_RATIOS, ERAS, TONES, VIDEO_ASPECT_RATIOS, VOICES
from ..editor import bundle
from ..editor import overlays as ops
from ..editor.interaction import InteractionController, Point
from ..errors import AdStudioError, GenerationError, PreconditionError
from ..models import AdRequest, Box, OverlayKind, Position, Scene, VisualType
from ..services import CredentialGate
from .collaborators import (
    ClaudeTextGenerator,
    GoogleSpeechGenerator,
    GoogleVisualGenerator,
    SpeechGenerator,
    TextGenerator,
    VisualGenerator,
)
from .history import HistoryStore
from .media import MediaLibrary
from .store import SceneStore, Story, StorySummary
from .workflow import GenerationWorkflow, ProgressCallback, StoryContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StudioSession:
    """One user's studio: scene history, working draft and selection.

    Every change to the scene collection is mirrored to the history file
    by a store listener.
    """

    def __init__(
        self,
        history: Optional[HistoryStore] = None,
        media: Optional[MediaLibrary] = None,
        text: Optional[TextGenerator] = None,
        visuals: Optional[VisualGenerator] = None,
        speech: Optional[SpeechGenerator] = None,
        credentials: Optional[CredentialGate] = None,
        on_progress: Optional[ProgressCallback] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize the session.

        Args:
            history: Durable scene history. Defaults to the workspace history file.
            media: Where generated files are kept. Defaults to the workspace media dir.
            text: Script, brainstorm and idea generator.
            visuals: Image and video generator.
            speech: Voiceover generator.
            credentials: Google credential gate.
            on_progress: Receives workflow state changes and loading messages.
            rng: Random source for randomize.
        """
        self.history = history or HistoryStore(config.history_path)
        self.media = media or MediaLibrary(config.media_dir)
        self.store = SceneStore()
        self.interaction = InteractionController()
        self.text = text or ClaudeTextGenerator()
        self.workflow = GenerationWorkflow(
            store=self.store,
            text=self.text,
            visuals=visuals or GoogleVisualGenerator(),
            speech=speech or GoogleSpeechGenerator(),
            credentials=credentials or CredentialGate(),
            media=self.media,
            on_progress=on_progress,
        )
        self.draft = AdRequest.default()
        self._story_context: Optional[StoryContext] = None
        self._rng = rng or random.Random()
        self.store.subscribe(self._persist)

    @classmethod
    def open(cls, **kwargs) -> "StudioSession":
        """Create a session and load the saved history."""
        session = cls(**kwargs)
        session.load()
        return session

    def load(self) -> None:
        """Load saved scenes and restore the previous selection."""
        self.store.load(self.history.load_all())
        selected_id = self.history.load_selection()
        if selected_id and selected_id in self.store:
            self.store.select(selected_id)
        logger.info(f"Loaded {len(self.store)} scene(s)")

    def _persist(self, scenes) -> None:
        self.history.save_all(scenes)
        self.history.save_selection(self.store.selected.id if self.store.selected else None)

    # Reads

    @property
    def scenes(self) -> List[Scene]:
        return list(self.store.scenes)

    @property
    def selected(self) -> Optional[Scene]:
        return self.store.selected

    @property
    def story_context(self) -> Optional[StoryContext]:
        return self._story_context

    def scene(self, scene_id: Optional[str] = None) -> Scene:
        """A scene by id, or the selected scene.

        Raises:
            PreconditionError: If no id is given and nothing is selected.
            KeyError: If the id is unknown.
        """
        if scene_id:
            return self.store.get(scene_id)
        if self.store.selected is None:
            raise PreconditionError("No scene selected.")
        return self.store.selected

    def history_listing(self) -> List[StorySummary]:
        return self.store.history()

    def view_story(self, scene_id: Optional[str] = None) -> Story:
        return self.store.derive_story(self.scene(scene_id))

    def select(self, scene_id: str) -> Scene:
        scene = self.store.select(scene_id)
        self.interaction.clear_selection()
        self.history.save_selection(scene_id)
        return scene

    # Generation

    def submit(self, request: Optional[AdRequest] = None) -> Scene:
        """Generate a scene from the draft (or ``request``).

        When a story context is active the scene continues that story and
        the context is cleared on success.
        """
        if request is not None:
            self.draft = request
        scene = self.workflow.run(self.draft, self._story_context)
        self._story_context = None
        self.interaction.clear_selection()
        self.history.save_selection(scene.id)
        return scene

    def begin_add_scene(self, scene_id: Optional[str] = None) -> StoryContext:
        """Prepare the draft to add the next scene to a scene's story."""
        story = self.view_story(scene_id)
        self._story_context = StoryContext(root=story.root, scene_number=self.store.next_scene_number(story.root))
        self.draft = story.root.brief().model_copy(update={"visual_idea": "", "notes": ""})
        return self._story_context

    def cancel_add_scene(self) -> None:
        self._story_context = None
        selected = self.store.selected
        self.draft = selected.brief() if selected else AdRequest.default()

    def delete(self, scene_id: str) -> List[Scene]:
        """Delete a scene (and its story when it is a root) with its media."""
        removed = self.store.delete(scene_id)
        self.media.remove(removed)
        if self._story_context and any(s.id == self._story_context.root.id for s in removed):
            self._story_context = None
        if self.store.selected is not None:
            self.interaction.forget(self.store.selected)
        else:
            self.interaction.clear_selection()
        return removed

    # Ideas

    def brainstorm(self, product: Optional[str] = None, notes: Optional[str] = None) -> List[Concept]:
        """Three ad concepts for the product.

        Raises:
            PreconditionError: If there is no product name.
            GenerationError: If the text generator failed.
        """
        product = (product if product is not None else self.draft.product).strip()
        if not product:
            raise PreconditionError("Please enter a product name first.")
        return self._ask(lambda: self.text.brainstorm(product, notes if notes is not None else self.draft.notes))

    def apply_concept(self, concept: Concept) -> AdRequest:
        self.draft = self.draft.model_copy(update={"tone": concept.tone, "visual_idea": concept.visual_idea})
        return self.draft

    def random_idea(self) -> AdRequest:
        """Fill the draft's product and visual idea with a generated idea."""
        idea = self._ask(self.text.random_idea)
        self.draft = self.draft.model_copy(update={"product": idea.product, "visual_idea": idea.visual_idea})
        return self.draft

    def randomize(self) -> AdRequest:
        """Random era, tone, voice and aspect ratio, then a generated idea."""
        ratios = VIDEO_ASPECT_RATIOS if self.draft.visual_type is VisualType.VIDEO else ASPECT_RATIOS
        self.draft = self.draft.model_copy(
            update={
                "era": self._rng.choice(ERAS),
                "tone": self._rng.choice(TONES),
                "voice": self._rng.choice(list(VOICES)),
                "aspect_ratio": self._rng.choice(ratios),
            }
        )
        return self.random_idea()

    def _ask(self, call: Callable[[], T]) -> T:
        try:
            return call()
        except AdStudioError:
            raise
        except Exception as e:
            raise GenerationError(str(e)) from e

    # Overlay editing

    def edit(self, scene_id: Optional[str], operation: Callable[..., Scene], *args, **kwargs) -> Scene:
        """Apply an overlay operation to a scene and store the result."""
        scene = operation(self.scene(scene_id), *args, **kwargs)
        self.store.replace(scene)
        self.interaction.forget(scene)
        return scene

    def add_text(self, text: str, scene_id: Optional[str] = None, **style) -> Scene:
        scene, overlay = ops.add_text_overlay(self.scene(scene_id), text, **style)
        self.store.replace(scene)
        self.interaction.select_text(overlay.id)
        return scene

    def edit_text(self, overlay_id: str, scene_id: Optional[str] = None, **changes) -> Scene:
        self.interaction.select_text(overlay_id)
        return self.edit(scene_id, ops.update_text_overlay, overlay_id, **changes)

    def align_center(self, overlay_id: str, scene_id: Optional[str] = None) -> Scene:
        self.interaction.select_text(overlay_id)
        return self.edit(scene_id, ops.align_center, overlay_id)

    def remove_text(self, overlay_id: str, scene_id: Optional[str] = None) -> Scene:
        return self.edit(scene_id, ops.remove_text_overlay, overlay_id)

    def set_logo(self, image_path: Path, size: Optional[float] = None, scene_id: Optional[str] = None) -> Scene:
        kwargs = {"size": size} if size is not None else {}
        scene = self.edit(scene_id, ops.set_logo, str(image_path), **kwargs)
        self.interaction.select_logo()
        return scene

    def resize_logo(self, size: float, scene_id: Optional[str] = None) -> Scene:
        self.interaction.select_logo()
        return self.edit(scene_id, ops.resize_logo, size)

    def move_logo(self, x: float, y: float, scene_id: Optional[str] = None) -> Scene:
        scene = self.scene(scene_id)
        if scene.logo is None:
            raise KeyError(f"Scene {scene.id} has no logo")
        self.interaction.select_logo()
        return self.edit(scene.id, ops.move_overlay, OverlayKind.LOGO, scene.logo.id, Position(x=x, y=y))

    def remove_logo(self, scene_id: Optional[str] = None) -> Scene:
        return self.edit(scene_id, ops.remove_logo)

    # Dragging on the selected scene

    def begin_drag(self, kind: OverlayKind, overlay_id: str, pointer: Point, overlay_box: Box) -> None:
        self.interaction.begin_drag(self.scene(), kind, overlay_id, pointer, overlay_box)

    def drag_to(self, pointer: Point, container: Box) -> Scene:
        scene = self.scene()
        moved = self.interaction.update_drag(scene, pointer, container)
        if moved is not scene:
            self.store.replace(moved)
        return moved

    def end_drag(self) -> None:
        self.interaction.end_drag()

    # Export

    def export_scene(self, destination: Path, scene_id: Optional[str] = None) -> Path:
        return bundle.export_scene(self.scene(scene_id), destination)

    def export_story(
        self,
        destination: Path,
        scene_id: Optional[str] = None,
        on_progress: Optional[Callable[[float], None]] = None,
    ) -> Path:
        return bundle.export_story(self.view_story(scene_id).scenes, destination, on_progress)
