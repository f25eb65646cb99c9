"""Google credential selection gate."""

import logging
from typing import Callable, Optional

import google.auth
from google.auth.exceptions import DefaultCredentialsError

from .vertex import SCOPES

logger = logging.getLogger(__name__)


class CredentialGate:
    """Remembers whether a usable Google credential is currently selected.

    Generation checks the gate before calling any generator. An
    authorization failure resets it, so the next attempt prompts again.
    """

    def __init__(self, selector: Optional[Callable[[], None]] = None) -> None:
        """Initialize the gate.

        Args:
            selector: Interactive hook that lets the user pick a credential
                (e.g. point GOOGLE_APPLICATION_CREDENTIALS at a key file).
                Called by :meth:`select` before rediscovery.
        """
        self._selector = selector
        self._selected: Optional[bool] = None

    def is_selected(self) -> bool:
        """Whether a usable credential is selected."""
        if self._selected is None:
            self._selected = self._discover()
        return self._selected

    def select(self) -> bool:
        """Prompt for a credential and re-check availability."""
        if self._selector is not None:
            self._selector()
        self._selected = self._discover()
        return self._selected

    def reset(self) -> None:
        """Forget the cached validity after an authorization failure."""
        logger.info("Credential marked invalid; selection required before next generation")
        self._selected = False

    def _discover(self) -> bool:
        try:
            google.auth.default(scopes=SCOPES)
            return True
        except DefaultCredentialsError as e:
            logger.warning(f"No Google credential available: {e}")
            return False
