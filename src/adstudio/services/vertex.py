"""Authenticated REST access to Vertex AI publisher models."""

import logging
from typing import Any, Optional

import google.auth
import google.auth.transport.requests
import requests
from google.auth.exceptions import DefaultCredentialsError, RefreshError

from ..config import config
from ..errors import AuthorizationError, CollaboratorError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]

# Status codes meaning the credential cannot reach the requested entity
AUTHORIZATION_STATUS_CODES = (401, 403, 404)


class VertexSession:
    """Shared credentials and request plumbing for Vertex AI models."""

    DEFAULT_TIMEOUT = 120.0

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the session.

        Args:
            project_id: Google Cloud project ID. Defaults to GOOGLE_CLOUD_PROJECT.
            location: Vertex AI region. Defaults to GOOGLE_CLOUD_LOCATION.
            timeout: Per-request timeout in seconds.
        """
        self._project_id = project_id or config.google_cloud_project
        self._location = location or config.google_cloud_location
        self._timeout = timeout
        self._credentials = None

        if not self._project_id:
            raise ValueError("GOOGLE_CLOUD_PROJECT not set")

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def location(self) -> str:
        return self._location

    def model_url(self, model: str, method: str) -> str:
        """REST URL of ``method`` on a Google publisher model."""
        return (
            f"https://{self._location}-aiplatform.googleapis.com/v1/"
            f"projects/{self._project_id}/locations/{self._location}/"
            f"publishers/google/models/{model}:{method}"
        )

    def _token(self, service: str) -> str:
        try:
            if self._credentials is None:
                self._credentials, _ = google.auth.default(scopes=SCOPES)
            if not self._credentials.valid:
                self._credentials.refresh(google.auth.transport.requests.Request())
        except (DefaultCredentialsError, RefreshError) as e:
            self._credentials = None
            raise AuthorizationError(service, f"Credential unavailable: {e}") from e
        return self._credentials.token

    def post(self, model: str, method: str, body: dict, service: str) -> Any:
        """POST a JSON body to a model method and return the decoded response.

        Raises:
            AuthorizationError: On 401/403/404 responses or missing credentials.
            CollaboratorError: On any other non-200 response or transport error.
        """
        headers = {
            "Authorization": f"Bearer {self._token(service)}",
            "Content-Type": "application/json",
        }
        url = self.model_url(model, method)

        try:
            response = requests.post(url, json=body, headers=headers, timeout=self._timeout)
        except requests.RequestException as e:
            raise CollaboratorError(service, f"Request to {service} failed: {e}") from e

        if response.status_code != 200:
            error_msg = f"{response.status_code}: {response.text[:500]}"
            logger.error(f"{service} API error: {error_msg}")
            if response.status_code in AUTHORIZATION_STATUS_CODES:
                raise AuthorizationError(service, error_msg, response.status_code)
            raise CollaboratorError(service, error_msg, response.status_code)

        return response.json()
