"""Narrow contracts for the external generators, with default implementations."""

from functools import cached_property
from typing import List, Optional, Protocol

from ..agents import Concept, ConceptAgent, ConceptInput, Idea, IdeaAgent, ScriptAgent, ScriptInput
from ..models import AdRequest, VideoHandle
from ..services import ImagenClient, SpeechClient, VeoClient, VertexSession, VideoResult


class TextGenerator(Protocol):
    def generate_script(self, request: AdRequest, previous_script: Optional[List[str]] = None) -> List[str]:
        ...

    def brainstorm(self, product: str, notes: Optional[str] = None) -> List[Concept]:
        ...

    def random_idea(self) -> Idea:
        ...


class VisualGenerator(Protocol):
    def generate_image(self, prompt: str, aspect_ratio: str) -> bytes:
        ...

    def generate_video(
        self, prompt: str, aspect_ratio: str, previous: Optional[VideoHandle] = None
    ) -> VideoResult:
        ...


class SpeechGenerator(Protocol):
    def generate_audio(self, text: str, voice: str) -> bytes:
        ...


class ClaudeTextGenerator:
    """Text generation through the Claude agents."""

    def __init__(
        self,
        script_agent: Optional[ScriptAgent] = None,
        concept_agent: Optional[ConceptAgent] = None,
        idea_agent: Optional[IdeaAgent] = None,
    ) -> None:
        self._script_agent = script_agent
        self._concept_agent = concept_agent
        self._idea_agent = idea_agent

    def generate_script(self, request: AdRequest, previous_script: Optional[List[str]] = None) -> List[str]:
        if self._script_agent is None:
            self._script_agent = ScriptAgent()
        return self._script_agent.run(ScriptInput(request=request, previous_script=previous_script or []))

    def brainstorm(self, product: str, notes: Optional[str] = None) -> List[Concept]:
        if self._concept_agent is None:
            self._concept_agent = ConceptAgent()
        return self._concept_agent.run(ConceptInput(product=product, notes=notes))

    def random_idea(self) -> Idea:
        if self._idea_agent is None:
            self._idea_agent = IdeaAgent()
        return self._idea_agent.run(None)


class GoogleVisualGenerator:
    """Images from Imagen and videos from Veo, sharing one Vertex AI session.

    Clients are created on first use so an image-only session never needs
    the Veo output bucket.
    """

    def __init__(self, session: Optional[VertexSession] = None) -> None:
        self._session = session

    @cached_property
    def session(self) -> VertexSession:
        return self._session or VertexSession()

    @cached_property
    def images(self) -> ImagenClient:
        return ImagenClient(session=self.session)

    @cached_property
    def videos(self) -> VeoClient:
        return VeoClient(session=self.session)

    def generate_image(self, prompt: str, aspect_ratio: str) -> bytes:
        return self.images.generate_image(prompt, aspect_ratio)

    def generate_video(
        self, prompt: str, aspect_ratio: str, previous: Optional[VideoHandle] = None
    ) -> VideoResult:
        return self.videos.generate_video(prompt, aspect_ratio, previous)


class GoogleSpeechGenerator:
    """Voiceovers from Gemini TTS."""

    def __init__(self, session: Optional[VertexSession] = None) -> None:
        self._session = session

    @cached_property
    def client(self) -> SpeechClient:
        return SpeechClient(session=self._session)

    def generate_audio(self, text: str, voice: str) -> bytes:
        return self.client.generate_audio(text, voice)
