"""External service integrations."""

from .anthropic import AnthropicClient
from .credentials import CredentialGate
from .imagen import ImagenClient
from .retry import linear_backoff, retry
from .speech import SpeechClient, pcm_to_wav
from .veo import VeoClient, VideoResult
from .vertex import VertexSession

__all__ = [
    "AnthropicClient",
    "CredentialGate",
    "ImagenClient",
    "linear_backoff",
    "retry",
    "SpeechClient",
    "pcm_to_wav",
    "VeoClient",
    "VideoResult",
    "VertexSession",
]
