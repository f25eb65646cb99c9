"""Anthropic Claude API client wrapper."""

import logging
from typing import Optional

from anthropic import Anthropic, APIConnectionError, APIStatusError

from ..config import config
from ..errors import AuthorizationError, CollaboratorError

logger = logging.getLogger(__name__)

SERVICE = "anthropic"


class AnthropicClient:
    """Client wrapper for the Anthropic Claude API.

    Failures are raised as :class:`CollaboratorError`; retrying is left to
    the callers' retry policy.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        """Initialize the Anthropic client.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            model: Model to use. Defaults to config.default_model.
        """
        self._api_key = api_key or config.anthropic_api_key
        if not self._api_key:
            raise ValueError(
                "Anthropic API key not provided. Set ANTHROPIC_API_KEY env var."
            )

        self._client = Anthropic(api_key=self._api_key)
        self._model = model or config.default_model

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    def create_message(
        self,
        prompt: str,
        max_tokens: int = 2048,
        system: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        """Create a message using Claude.

        Args:
            prompt: The user prompt to send.
            max_tokens: Maximum tokens in the response.
            system: Optional system prompt.
            temperature: Sampling temperature (0.0-1.0).

        Returns:
            The text content of Claude's response.

        Raises:
            AuthorizationError: If the key is rejected.
            CollaboratorError: For any other API or connection failure.
        """
        kwargs = {
            "model": self._model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        try:
            logger.debug(f"Sending request to Claude ({self._model})")
            response = self._client.messages.create(**kwargs)

        except APIStatusError as e:
            logger.error(f"API error: {e}")
            if e.status_code in (401, 403):
                raise AuthorizationError(SERVICE, str(e), e.status_code) from e
            raise CollaboratorError(SERVICE, str(e), e.status_code) from e

        except APIConnectionError as e:
            logger.warning(f"Connection error: {e}")
            raise CollaboratorError(SERVICE, f"Connection error: {e}") from e

        # Extract text content from response
        content = response.content[0]
        if hasattr(content, "text"):
            return content.text
        return str(content)
