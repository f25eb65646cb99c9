"""AI agents for scripts, concepts and ideas."""

from .base import BaseAgent
from .concepts import Concept, ConceptAgent, ConceptInput, Idea, IdeaAgent
from .script import ScriptAgent, ScriptInput

__all__ = [
    "BaseAgent",
    "Concept",
    "ConceptAgent",
    "ConceptInput",
    "Idea",
    "IdeaAgent",
    "ScriptAgent",
    "ScriptInput",
]
