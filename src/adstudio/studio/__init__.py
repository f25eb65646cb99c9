"""Studio session: scene graph, generation workflow and persistence."""

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
from .session import StudioSession
from .store import SceneStore, Story, StorySummary
from .workflow import CONTINUATION_MISSING, GenerationWorkflow, StoryContext

__all__ = [
    "ClaudeTextGenerator",
    "CONTINUATION_MISSING",
    "GenerationWorkflow",
    "GoogleSpeechGenerator",
    "GoogleVisualGenerator",
    "HistoryStore",
    "MediaLibrary",
    "SceneStore",
    "SpeechGenerator",
    "Story",
    "StoryContext",
    "StorySummary",
    "StudioSession",
    "TextGenerator",
    "VisualGenerator",
]
