"""Scene data model."""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .overlay import LogoOverlay, TextOverlay
from .request import AdRequest, VisualType


class VideoHandle(BaseModel):
    """Continuation token returned by the video generator.

    Passing it back lets the next generation extend this video.
    """

    uri: str = Field(..., description="Storage URI of the generated video")
    aspect_ratio: Optional[str] = Field(None, description="Aspect ratio reported by the generator")

    class Config:
        """Pydantic config."""
        frozen = True


class RootLink(BaseModel):
    """Story link of a scene that starts a story."""

    kind: Literal["root"] = "root"
    scene_number: Literal[1] = 1

    class Config:
        """Pydantic config."""
        frozen = True


class ChildLink(BaseModel):
    """Story link of a scene continuing a root scene."""

    kind: Literal["child"] = "child"
    parent_id: str = Field(..., min_length=1, description="Id of the story root")
    scene_number: int = Field(..., ge=2, description="1-based position within the story")

    class Config:
        """Pydantic config."""
        frozen = True


StoryLink = Annotated[Union[RootLink, ChildLink], Field(discriminator="kind")]


class Scene(BaseModel):
    """One generated creative unit: script, visual, optional audio, overlays.

    Frozen once generated. Edits produce copies that differ only in their
    overlays, or in the story link's scene number when the store closes
    the gap left by a deleted sibling.
    """

    id: str = Field(..., description="Unique scene identifier")
    created_at: datetime = Field(..., description="Creation timestamp")

    # Brief
    product: str
    era: str
    tone: str
    aspect_ratio: str
    visual_type: VisualType
    voice: Optional[str] = None
    visual_idea: str = ""
    notes: str = ""

    # Generated payload
    script: List[str] = Field(default_factory=list)
    visual_path: Optional[str] = Field(None, description="Path to the generated visual")
    continuation: Optional[VideoHandle] = Field(None, description="Token to extend this video")
    audio_path: Optional[str] = Field(None, description="Path to the voiceover")

    # Presentation payload
    text_overlays: List[TextOverlay] = Field(default_factory=list)
    logo: Optional[LogoOverlay] = None

    story: StoryLink = Field(default_factory=RootLink)

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def parent_id(self) -> Optional[str]:
        return self.story.parent_id if isinstance(self.story, ChildLink) else None

    @property
    def scene_number(self) -> int:
        return self.story.scene_number

    @property
    def is_root(self) -> bool:
        return isinstance(self.story, RootLink)

    @property
    def root_id(self) -> str:
        """Id of the story this scene belongs to."""
        return self.parent_id or self.id

    def brief(self) -> AdRequest:
        """The request this scene was generated from."""
        return AdRequest(
            product=self.product,
            era=self.era,
            tone=self.tone,
            aspect_ratio=self.aspect_ratio,
            visual_type=self.visual_type,
            voice=self.voice,
            visual_idea=self.visual_idea,
            notes=self.notes,
        )

    def with_overlays(
        self,
        text_overlays: Optional[List[TextOverlay]] = None,
        logo: Union[LogoOverlay, None, Literal[False]] = False,
    ) -> "Scene":
        """Copy of this scene with replaced overlay collections.

        Pass ``logo=None`` to remove the logo; leave it out to keep it.
        """
        update: dict = {}
        if text_overlays is not None:
            update["text_overlays"] = list(text_overlays)
        if logo is not False:
            update["logo"] = logo
        return self.model_copy(update=update)
