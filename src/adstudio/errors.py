"""Error taxonomy for the studio."""

from typing import Optional

AUTHORIZATION_MARKERS = (
    "Requested entity was not found",
    "PERMISSION_DENIED",
    "UNAUTHENTICATED",
)


def is_authorization_failure(error: BaseException) -> bool:
    """Return True when an error means the selected credential is unusable."""
    if isinstance(error, AuthorizationError):
        return True
    message = str(error)
    return any(marker in message for marker in AUTHORIZATION_MARKERS)


class AdStudioError(Exception):
    """Base exception for all studio errors."""


class PreconditionError(AdStudioError):
    """An operation was refused before any external call was made."""


class WorkflowBusyError(PreconditionError):
    """A generation is already in flight."""

    def __init__(self) -> None:
        super().__init__("A generation is already in progress. Wait for it to finish.")


class CredentialRequiredError(PreconditionError):
    """No usable Google credential is selected."""

    def __init__(self, reason: str = "no credential selected") -> None:
        super().__init__(
            f"A Google Cloud credential is required ({reason}). "
            "Select a valid credential and try again."
        )
        self.reason = reason


class CollaboratorError(AdStudioError):
    """An external generation service returned an error."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        self.service = service
        self.status_code = status_code
        super().__init__(message)


class AuthorizationError(CollaboratorError):
    """The service rejected the credential or cannot see the requested entity."""


class GenerationError(AdStudioError):
    """Terminal failure of a generation run.

    ``str(error)`` is the collaborator's message, unchanged.
    """

    def __init__(self, message: str, authorization: bool = False):
        super().__init__(message)
        self.authorization = authorization


class StoryGraphError(AdStudioError):
    """The scene collection would violate its story invariants."""


class ExportError(AdStudioError):
    """An export could not be constructed."""
