"""
Tests for the Claude-backed text agents.
"""
import pytest
from unittest.mock import MagicMock

from adstudio.agents import ConceptAgent, ConceptInput, IdeaAgent, ScriptAgent, ScriptInput
from adstudio.agents.base import extract_json
from adstudio.models import AdRequest, VisualType


def agent_with_response(agent_class, *responses):
    client = MagicMock()
    client.create_message.side_effect = list(responses)
    return agent_class(client=client, model="test-model"), client


class TestExtractJson:
    """Tests for pulling JSON out of model responses."""

    def test_fenced_block(self):
        """JSON inside a ```json fence is extracted."""
        assert extract_json('Here:\n```json\n["a"]\n```\nDone') == '["a"]'

    def test_bare_fence(self):
        """Fences without a language tag work too."""
        assert extract_json('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_embedded_array(self):
        """The earliest JSON value wins, brackets inside strings are ignored."""
        response = 'Sure! ["one ] two", "three"] and {"ignored": true}'
        assert extract_json(response) == '["one ] two", "three"]'

    def test_embedded_object(self):
        """Objects surrounded by prose are found."""
        assert extract_json('Result: {"product": "Gum", "visualIdea": "x"} ok') == '{"product": "Gum", "visualIdea": "x"}'


class TestScriptAgent:
    """Tests for script writing."""

    def test_parses_lines(self):
        """The JSON array becomes trimmed script lines."""
        agent, _ = agent_with_response(ScriptAgent, '["  Taste the stars. ", "", "Starlight Soda."]')
        lines = agent.run(ScriptInput(request=AdRequest.default()))
        assert lines == ["Taste the stars.", "Starlight Soda."]

    def test_accepts_object(self):
        """A {"script": [...]} object is accepted."""
        agent, _ = agent_with_response(ScriptAgent, '{"script": ["One line."]}')
        assert agent.run(ScriptInput(request=AdRequest.default())) == ["One line."]

    def test_prompt_includes_brief(self):
        """The prompt carries product, era, tone and visual idea."""
        agent, client = agent_with_response(ScriptAgent, '["x"]')
        request = AdRequest(product="Moon Gum", era="1950s", tone="Humorous", visual_type=VisualType.IMAGE, visual_idea="A diner")
        agent.run(ScriptInput(request=request))

        prompt = client.create_message.call_args.kwargs["prompt"]
        assert '"Moon Gum"' in prompt
        assert "1950s" in prompt and "Humorous" in prompt
        assert "image ad" in prompt
        assert '"A diner"' in prompt
        assert "previous scene" not in prompt

    def test_prompt_continues_story(self):
        """Earlier lines are passed as continuity context."""
        agent, client = agent_with_response(ScriptAgent, '["x"]')
        agent.run(ScriptInput(request=AdRequest.default(), previous_script=["First.", "Second."]))

        prompt = client.create_message.call_args.kwargs["prompt"]
        assert '"First. Second."' in prompt
        assert "Continue the story" in prompt

    def test_invalid_json_retried(self):
        """A malformed response is retried and then reported."""
        agent, client = agent_with_response(ScriptAgent, "no json", "still none", "[1, 2]")
        with pytest.raises(ValueError):
            agent.run(ScriptInput(request=AdRequest.default()))
        assert client.create_message.call_count == 3

    def test_recovers_on_retry(self):
        """A later valid response is used."""
        agent, _ = agent_with_response(ScriptAgent, "oops", '["Fine."]')
        assert agent.run(ScriptInput(request=AdRequest.default())) == ["Fine."]


class TestConceptAgents:
    """Tests for the Concept Lab and random ideas."""

    def test_concepts(self):
        """Concepts accept the visualIdea key."""
        response = """[
            {"headline": "H1", "tagline": "T1", "tone": "Edgy", "visualIdea": "V1"},
            {"headline": "H2", "tagline": "T2", "tone": "Wholesome", "visualIdea": "V2"},
            {"headline": "H3", "tagline": "T3", "tone": "Surreal", "visualIdea": "V3"}
        ]"""
        agent, client = agent_with_response(ConceptAgent, response)
        concepts = agent.run(ConceptInput(product="Moon Gum", notes="For kids"))

        assert [c.visual_idea for c in concepts] == ["V1", "V2", "V3"]
        assert concepts[0].tone == "Edgy"
        prompt = client.create_message.call_args.kwargs["prompt"]
        assert "3 distinct" in prompt and '"For kids"' in prompt

    def test_malformed_concept(self):
        """Missing keys are reported as ValueError."""
        agent, _ = agent_with_response(ConceptAgent, *['[{"headline": "H"}]'] * 3)
        with pytest.raises(ValueError):
            agent.run(ConceptInput(product="Moon Gum"))

    def test_random_idea(self):
        """Ideas parse product and visual idea."""
        agent, _ = agent_with_response(IdeaAgent, '{"product": "Cloud Socks", "visualIdea": "Socks floating"}')
        idea = agent.run(None)
        assert idea.product == "Cloud Socks"
        assert idea.visual_idea == "Socks floating"

    def test_idea_model_default(self):
        """Idea generation uses its own model by default."""
        from adstudio.config import config

        agent = IdeaAgent(client=MagicMock())
        assert agent.model == config.idea_model
