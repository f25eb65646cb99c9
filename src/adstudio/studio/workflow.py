"""Generation workflow: script, then visual, then optional voiceover."""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..editor.overlays import caption_overlays
from ..constants import ASPECT_RATIOS, VIDEO_ASPECT_RATIOS
from ..errors import (
    CredentialRequiredError,
    GenerationError,
    PreconditionError,
    StoryGraphError,
    WorkflowBusyError,
    is_authorization_failure,
)
from ..models import AdRequest, ChildLink, GenerationState, RootLink, Scene, VideoHandle, VisualType
from ..services import CredentialGate
from .collaborators import SpeechGenerator, TextGenerator, VisualGenerator
from .media import MediaLibrary
from .store import SceneStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[GenerationState, str], None]

CONTINUATION_MISSING = (
    "Cannot add a scene because the previous scene's video data is missing. "
    "Please regenerate the first scene."
)

MESSAGES = {
    "script": "Generating script...",
    "next_script": "Generating next scene script...",
    "image": "Generating image...",
    "video": "Generating video (this may take a minute)...",
    "audio": "Generating voiceover...",
}


def new_scene_id() -> str:
    return f"ad_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


@dataclass(frozen=True)
class StoryContext:
    """Story a new scene is added to."""

    root: Scene
    scene_number: int


class GenerationWorkflow:
    """Runs one generation at a time and commits the result to the store.

    Collaborator calls carry their own retries; a failure reaching this
    layer ends the run in ``FAILED`` and is re-raised as
    :class:`GenerationError` with the collaborator's message.
    """

    def __init__(
        self,
        store: SceneStore,
        text: TextGenerator,
        visuals: VisualGenerator,
        speech: SpeechGenerator,
        credentials: CredentialGate,
        media: MediaLibrary,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self._store = store
        self._text = text
        self._visuals = visuals
        self._speech = speech
        self._credentials = credentials
        self._media = media
        self._on_progress = on_progress
        self._state = GenerationState.IDLE
        self._error: Optional[str] = None

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        """Message of the last failed run."""
        return self._error

    @property
    def is_running(self) -> bool:
        return self._state is not GenerationState.IDLE and not self._state.is_terminal

    def run(self, request: AdRequest, context: Optional[StoryContext] = None) -> Scene:
        """Generate a scene from ``request`` and append it to the store.

        Args:
            request: The working brief.
            context: Story to continue, or None to start a new story.

        Returns:
            The committed scene.

        Raises:
            WorkflowBusyError: If a run is already in flight.
            PreconditionError: If the request cannot be generated; raised
                before any collaborator call.
            GenerationError: If a collaborator failed.
        """
        if self.is_running:
            raise WorkflowBusyError()

        self._state = GenerationState.IDLE
        self._error = None
        self._check_request(request)
        scene_id = new_scene_id()
        previous_script, previous_video = self._story_inputs(context)
        if context is not None and previous_video is None:
            self._advance(GenerationState.SCRIPTING, MESSAGES["next_script"])
            error = PreconditionError(CONTINUATION_MISSING)
            self._fail(scene_id, error)
            raise error
        self._check_credentials()

        try:
            self._advance(
                GenerationState.SCRIPTING,
                MESSAGES["next_script"] if context else MESSAGES["script"],
            )
            script = self._text.generate_script(request, previous_script or None)

            visual_path, continuation = self._render_visual(scene_id, request, previous_video)
            audio_path = self._render_audio(scene_id, request, script)

            scene = Scene(
                id=scene_id,
                created_at=datetime.now(),
                **request.model_dump(),
                script=script,
                visual_path=visual_path,
                continuation=continuation,
                audio_path=audio_path,
                text_overlays=caption_overlays(script),
                story=(
                    ChildLink(parent_id=context.root.id, scene_number=context.scene_number)
                    if context
                    else RootLink()
                ),
            )
            self._store.append(scene)
        except (PreconditionError, StoryGraphError) as e:
            self._fail(scene_id, e)
            raise
        except Exception as e:
            authorization = is_authorization_failure(e)
            self._fail(scene_id, e)
            if authorization:
                self._credentials.reset()
            raise GenerationError(str(e), authorization=authorization) from e

        self._advance(GenerationState.COMPLETE, "")
        logger.info(f"Generated scene {scene.id} (#{scene.scene_number} of story {scene.root_id})")
        return scene

    def _check_request(self, request: AdRequest) -> None:
        if not request.product.strip():
            raise PreconditionError("Please enter a product name.")
        if not request.visual_idea.strip():
            raise PreconditionError("Please describe a visual idea.")
        if request.aspect_ratio not in ASPECT_RATIOS:
            raise PreconditionError(f"Unsupported aspect ratio: {request.aspect_ratio}.")
        if request.visual_type is VisualType.VIDEO and request.aspect_ratio not in VIDEO_ASPECT_RATIOS:
            raise PreconditionError(
                f"Videos can only be {' or '.join(VIDEO_ASPECT_RATIOS)}, not {request.aspect_ratio}."
            )

    def _check_credentials(self) -> None:
        if self._credentials.is_selected():
            return
        if not self._credentials.select():
            raise CredentialRequiredError()

    def _story_inputs(self, context: Optional[StoryContext]) -> Tuple[List[str], Optional[VideoHandle]]:
        """Earlier script lines and the video to extend.

        The video is None when the story cannot be continued, that is when
        the root or the latest scene carries no continuation token.
        """
        if context is None:
            return [], None

        story = self._store.derive_story(context.root.id)
        if story.root.continuation is None:
            return [], None

        previous_script = [line for scene in story for line in scene.script]
        return previous_script, story.latest.continuation

    def _render_visual(
        self,
        scene_id: str,
        request: AdRequest,
        previous: Optional[VideoHandle],
    ) -> Tuple[str, Optional[VideoHandle]]:
        if request.visual_type is VisualType.IMAGE:
            self._advance(GenerationState.RENDERING_VISUAL, MESSAGES["image"])
            data = self._visuals.generate_image(request.visual_idea, request.aspect_ratio)
            return self._media.save(scene_id, "visual", data, "jpg"), None

        self._advance(GenerationState.RENDERING_VISUAL, MESSAGES["video"])
        result = self._visuals.generate_video(request.visual_idea, request.aspect_ratio, previous)
        return self._media.save(scene_id, "visual", result.data, "mp4"), result.handle

    def _render_audio(self, scene_id: str, request: AdRequest, script: List[str]) -> Optional[str]:
        if request.visual_type is not VisualType.VIDEO or not request.voice or not script:
            return None
        self._advance(GenerationState.RENDERING_AUDIO, MESSAGES["audio"])
        data = self._speech.generate_audio(" ".join(script), request.voice)
        return self._media.save(scene_id, "audio", data, "wav")

    def _advance(self, state: GenerationState, message: str) -> None:
        if not self._state.can_advance_to(state):
            raise RuntimeError(f"Invalid workflow transition {self._state.value} -> {state.value}")
        logger.info(f"Workflow {self._state.value} -> {state.value}")
        self._state = state
        if self._on_progress:
            self._on_progress(state, message)

    def _fail(self, scene_id: str, error: Exception) -> None:
        logger.error(f"Generation failed: {error}")
        self._media.discard(scene_id)
        self._error = str(error)
        self._state = GenerationState.FAILED
        if self._on_progress:
            self._on_progress(GenerationState.FAILED, self._error)
