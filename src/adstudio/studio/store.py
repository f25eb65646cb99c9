"""Scene collection and the stories derived from it."""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from ..errors import StoryGraphError
from ..models import ChildLink, Scene

logger = logging.getLogger(__name__)

Listener = Callable[[Tuple[Scene, ...]], None]


@dataclass(frozen=True)
class Story:
    """A root scene followed by its children in scene-number order."""

    root: Scene
    children: Tuple[Scene, ...] = ()

    @property
    def scenes(self) -> List[Scene]:
        return [self.root, *self.children]

    @property
    def product(self) -> str:
        return self.root.product

    @property
    def latest(self) -> Scene:
        return self.children[-1] if self.children else self.root

    def __len__(self) -> int:
        return 1 + len(self.children)

    def __iter__(self) -> Iterator[Scene]:
        return iter(self.scenes)

    def __contains__(self, scene_id: object) -> bool:
        return any(scene.id == scene_id for scene in self.scenes)


@dataclass(frozen=True)
class StorySummary:
    """One row of the history listing."""

    story: Story
    selected: bool

    @property
    def root(self) -> Scene:
        return self.story.root

    @property
    def scene_count(self) -> int:
        return len(self.story)


def _renumbered(children: Sequence[Scene]) -> List[Scene]:
    """Children numbered 2, 3, ... in their current order."""
    result = []
    for number, child in enumerate(children, start=2):
        if child.scene_number != number:
            child = child.model_copy(
                update={"story": ChildLink(parent_id=child.story.parent_id, scene_number=number)}
            )
        result.append(child)
    return result


class SceneStore:
    """Owns the scene collection and the current selection.

    The collection is an immutable tuple swapped in whole on every
    mutation, so readers always see a consistent snapshot. Listeners are
    called with the new snapshot after each mutation of the collection.
    """

    def __init__(self, scenes: Iterable[Scene] = ()) -> None:
        self._scenes: Tuple[Scene, ...] = ()
        self._selected_id: Optional[str] = None
        self._listeners: List[Listener] = []
        self.load(scenes)

    # Reads

    @property
    def scenes(self) -> Tuple[Scene, ...]:
        return self._scenes

    def __len__(self) -> int:
        return len(self._scenes)

    def __contains__(self, scene_id: object) -> bool:
        return any(scene.id == scene_id for scene in self._scenes)

    def find(self, scene_id: str) -> Optional[Scene]:
        for scene in self._scenes:
            if scene.id == scene_id:
                return scene
        return None

    def get(self, scene_id: str) -> Scene:
        """Return a scene by id.

        Raises:
            KeyError: If no scene has that id.
        """
        scene = self.find(scene_id)
        if scene is None:
            raise KeyError(f"Scene not found: {scene_id}")
        return scene

    @property
    def selected(self) -> Optional[Scene]:
        return self.find(self._selected_id) if self._selected_id else None

    def select(self, scene_id: Optional[str]) -> Optional[Scene]:
        """Select a scene, or clear the selection with ``None``."""
        if scene_id is not None:
            self.get(scene_id)
        self._selected_id = scene_id
        return self.selected

    def derive_story(self, scene: Union[Scene, str]) -> Story:
        """Story containing ``scene`` (a Scene or a scene id)."""
        if isinstance(scene, str):
            scene = self.get(scene)
        root = self.get(scene.root_id)
        children = sorted(
            (s for s in self._scenes if s.parent_id == root.id),
            key=lambda s: s.scene_number,
        )
        return Story(root=root, children=tuple(children))

    def next_scene_number(self, root: Union[Scene, str]) -> int:
        """Scene number the next scene added to ``root``'s story gets."""
        return len(self.derive_story(root)) + 1

    def history(self) -> List[StorySummary]:
        """Stories newest first, flagged when they contain the selection."""
        roots = sorted((s for s in self._scenes if s.is_root), key=lambda s: s.created_at, reverse=True)
        summaries = []
        for root in roots:
            story = self.derive_story(root)
            summaries.append(StorySummary(story=story, selected=self._selected_id in story))
        return summaries

    # Mutations

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a mutation listener; returns a function that removes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def load(self, scenes: Iterable[Scene]) -> None:
        """Replace the collection without notifying listeners.

        Scenes whose story link cannot be satisfied are dropped with a
        warning. The newest scene becomes the selection.
        """
        accepted: Dict[str, Scene] = {}
        incoming = list(scenes)
        for scene in sorted(incoming, key=lambda s: (not s.is_root, s.created_at)):
            try:
                self._validate(scene, accepted.values())
            except StoryGraphError as e:
                logger.warning(f"Dropping scene {scene.id} from history: {e}")
                continue
            accepted[scene.id] = scene

        self._scenes = tuple(s for s in incoming if s.id in accepted)
        newest = max(self._scenes, key=lambda s: s.created_at, default=None)
        self._selected_id = newest.id if newest else None

    def append(self, scene: Scene, select: bool = True) -> Scene:
        """Insert a newly generated scene.

        Raises:
            StoryGraphError: If the id is taken, the parent is missing or
                not a root, or the scene number is already used.
        """
        self._validate(scene, self._scenes)
        self._commit((*self._scenes, scene), scene.id if select else self._selected_id)
        logger.debug(f"Appended scene {scene.id} (story {scene.root_id}, #{scene.scene_number})")
        return scene

    def replace(self, scene: Scene) -> Scene:
        """Store an edited copy of an existing scene.

        Raises:
            StoryGraphError: If the scene is unknown or its story link changed.
        """
        current = self.find(scene.id)
        if current is None:
            raise StoryGraphError(f"Cannot replace unknown scene {scene.id}")
        if current.story != scene.story:
            raise StoryGraphError(f"Scene {scene.id} cannot move to another story")
        self._commit(tuple(scene if s.id == scene.id else s for s in self._scenes), self._selected_id)
        return scene

    def delete(self, scene_id: str) -> List[Scene]:
        """Delete a scene, and its children when it is a root.

        Remaining children of the story are renumbered so scene numbers
        stay contiguous. This is the one change the store makes to a
        scene besides overlay edits; brief, script and media are kept.

        Returns:
            The removed scenes.

        Raises:
            KeyError: If no scene has that id.
        """
        target = self.get(scene_id)
        removed_ids = {target.id}
        if target.is_root:
            removed_ids.update(s.id for s in self._scenes if s.parent_id == target.id)

        remaining = [s for s in self._scenes if s.id not in removed_ids]
        if not target.is_root:
            siblings = sorted(
                (s for s in remaining if s.parent_id == target.parent_id),
                key=lambda s: s.scene_number,
            )
            renumbered = {s.id: s for s in _renumbered(siblings)}
            remaining = [renumbered.get(s.id, s) for s in remaining]

        selected_id = self._selected_id
        if selected_id in removed_ids:
            newest = max(remaining, key=lambda s: s.created_at, default=None)
            selected_id = newest.id if newest else None

        removed = [s for s in self._scenes if s.id in removed_ids]
        self._commit(tuple(remaining), selected_id)
        logger.info(f"Deleted {len(removed)} scene(s) starting at {scene_id}")
        return removed

    def _validate(self, scene: Scene, existing: Iterable[Scene]) -> None:
        existing = list(existing)
        if any(s.id == scene.id for s in existing):
            raise StoryGraphError(f"Duplicate scene id {scene.id}")
        if scene.is_root:
            return

        parent = next((s for s in existing if s.id == scene.parent_id), None)
        if parent is None:
            raise StoryGraphError(f"Parent scene {scene.parent_id} does not exist")
        if not parent.is_root:
            raise StoryGraphError(f"Parent scene {parent.id} is not a story root")
        if any(s.parent_id == parent.id and s.scene_number == scene.scene_number for s in existing):
            raise StoryGraphError(
                f"Story {parent.id} already has a scene number {scene.scene_number}"
            )

    def _commit(self, scenes: Tuple[Scene, ...], selected_id: Optional[str]) -> None:
        self._scenes = scenes
        self._selected_id = selected_id
        for listener in list(self._listeners):
            listener(scenes)
