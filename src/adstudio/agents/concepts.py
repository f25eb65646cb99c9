"""Concept lab agents: brainstormed ad concepts and random product ideas."""

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

from ..config import config
from ..constants import TONES
from ..services.anthropic import AnthropicClient
from ..services.retry import retry
from .base import BaseAgent

CONCEPT_SYSTEM_PROMPT = """You are a creative director at a boutique ad agency.
You brainstorm distinct, memorable ad concepts.

Output valid JSON only, with no additional text or markdown formatting."""

IDEA_SYSTEM_PROMPT = """You invent fun, slightly absurd fictional products for ads.

Output valid JSON only, with no additional text or markdown formatting."""


class Concept(BaseModel):
    """One brainstormed creative direction."""

    headline: str
    tagline: str
    tone: str
    visual_idea: str = Field(..., alias="visualIdea")

    class Config:
        """Pydantic config."""
        populate_by_name = True


class Idea(BaseModel):
    """A random product and visual idea."""

    product: str
    visual_idea: str = Field(..., alias="visualIdea")

    class Config:
        """Pydantic config."""
        populate_by_name = True


@dataclass
class ConceptInput:
    """Input data for the concept agent."""

    product: str
    notes: Optional[str] = None
    count: int = 3


class ConceptAgent(BaseAgent[ConceptInput, List[Concept]]):
    """Agent that brainstorms distinct concepts for a product."""

    @property
    def name(self) -> str:
        return "ConceptAgent"

    @property
    def system_prompt(self) -> str:
        return CONCEPT_SYSTEM_PROMPT

    @retry()
    def run(self, input_data: ConceptInput) -> List[Concept]:
        """Brainstorm concepts.

        Raises:
            ValueError: If the response is not a JSON array of concepts.
        """
        self._logger.info(f"Brainstorming {input_data.count} concepts for '{input_data.product}'")

        prompt = (
            f"Brainstorm {input_data.count} distinct, creative ad concepts for a product "
            f"called \"{input_data.product}\".\n"
            "For each concept, provide a catchy headline, a short tagline, a suggested tone "
            f"(choose from this list: {', '.join(TONES)}), and a compelling visual idea.\n"
        )
        if input_data.notes:
            prompt += f"Keep these notes in mind: \"{input_data.notes}\"\n"
        prompt += (
            "Return the concepts as a JSON array of objects with the keys "
            "\"headline\", \"tagline\", \"tone\" and \"visualIdea\"."
        )

        response = self._create_message(prompt=prompt, temperature=1.0)
        data = self._parse_json(response)

        if isinstance(data, dict):
            data = data.get("concepts", data)
        if not isinstance(data, list):
            raise ValueError("Response does not contain a concepts array")

        try:
            return [Concept.model_validate(item) for item in data]
        except ValidationError as e:
            raise ValueError(f"Malformed concept in response: {e}")


class IdeaAgent(BaseAgent[None, Idea]):
    """Agent that invents a product and a one-sentence visual idea."""

    def __init__(
        self,
        client: Optional[AnthropicClient] = None,
        model: Optional[str] = None,
    ) -> None:
        super().__init__(client=client, model=model or config.idea_model)

    @property
    def name(self) -> str:
        return "IdeaAgent"

    @property
    def system_prompt(self) -> str:
        return IDEA_SYSTEM_PROMPT

    @retry()
    def run(self, input_data: None = None) -> Idea:
        """Invent a random idea.

        Raises:
            ValueError: If the response is not a JSON idea object.
        """
        prompt = (
            "Generate a single, fun, and slightly absurd product name and a one-sentence "
            "visual idea for a fictional ad.\n"
            "Return the result as a JSON object with keys \"product\" and \"visualIdea\"."
        )
        response = self._create_message(prompt=prompt, max_tokens=512, temperature=1.0)
        data = self._parse_json(response)

        try:
            return Idea.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Malformed idea in response: {e}")
