"""Script agent: writes the lines spoken or shown in one scene."""

from dataclasses import dataclass, field
from typing import List

from ..models import AdRequest
from ..services.retry import retry
from .base import BaseAgent

SYSTEM_PROMPT = """You are an award-winning advertising copywriter.
You write short, punchy ad scripts that match a requested era and tone.

Output valid JSON only, with no additional text or markdown formatting.
The JSON must be an array of strings, one string per script line."""


@dataclass
class ScriptInput:
    """Input data for the script agent."""

    request: AdRequest
    previous_script: List[str] = field(default_factory=list)


class ScriptAgent(BaseAgent[ScriptInput, List[str]]):
    """Agent that writes a 1-2 line script for a scene.

    When earlier scenes of a story are given, the new lines continue
    their narrative.
    """

    @property
    def name(self) -> str:
        return "ScriptAgent"

    @property
    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    @retry()
    def run(self, input_data: ScriptInput) -> List[str]:
        """Generate the script lines for one scene.

        Raises:
            ValueError: If the response is not a JSON array of strings.
        """
        request = input_data.request
        self._logger.info(
            f"Writing script for '{request.product}' ({request.era}, {request.tone})"
            + (" as a continuation" if input_data.previous_script else "")
        )

        response = self._create_message(
            prompt=self._build_prompt(input_data),
            max_tokens=1024,
            temperature=0.9,
        )
        return self._parse_response(response)

    def _build_prompt(self, input_data: ScriptInput) -> str:
        request = input_data.request
        prompt_parts = [
            f"Write a short, punchy ad script for a {request.visual_type.value} ad "
            f"for a product called \"{request.product}\".",
            f"The ad should evoke the style of the {request.era}.",
            f"The tone should be {request.tone}.",
        ]

        if input_data.previous_script:
            prompt_parts.append(
                "This is a multi-part ad. The script for the previous scene(s) was: "
                f"\"{' '.join(input_data.previous_script)}\". Continue the story seamlessly."
            )

        prompt_parts.append(f"The core visual idea for THIS SCENE is: \"{request.visual_idea}\".")

        if request.notes:
            prompt_parts.append(f"Additional notes for this scene: \"{request.notes}\"")

        prompt_parts.append(
            "The script should be concise, ideally 1-2 lines for this specific scene. "
            "Return the script as a JSON array of strings."
        )
        return "\n".join(prompt_parts)

    def _parse_response(self, response: str) -> List[str]:
        data = self._parse_json(response)

        # Accept {"script": [...]} as well as a bare array
        if isinstance(data, dict):
            data = data.get("script", data.get("lines"))

        if not isinstance(data, list) or not all(isinstance(line, str) for line in data):
            raise ValueError("Response is not a JSON array of script lines")

        return [line.strip() for line in data if line.strip()]

