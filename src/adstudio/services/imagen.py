"""Google Imagen API client wrapper via Vertex AI."""

import base64
import logging
from typing import Optional

from ..config import config
from ..errors import CollaboratorError
from .retry import retry
from .vertex import VertexSession

logger = logging.getLogger(__name__)

SERVICE = "imagen"

IMAGEN_ASPECT_RATIOS = ("1:1", "16:9", "9:16", "4:3", "3:4")


class ImagenClient:
    """Client wrapper for Google Imagen still-image generation."""

    def __init__(
        self,
        session: Optional[VertexSession] = None,
        model: Optional[str] = None,
    ) -> None:
        """Initialize the Imagen client.

        Args:
            session: Vertex AI session. Created if not provided.
            model: Imagen model name. Defaults to config.imagen_model.
        """
        self._session = session or VertexSession()
        self._model = model or config.imagen_model

    @property
    def model(self) -> str:
        return self._model

    def generate_image(self, prompt: str, aspect_ratio: str = "1:1") -> bytes:
        """Generate a JPEG image from a text prompt.

        Args:
            prompt: Text description of the image to generate.
            aspect_ratio: One of '1:1', '16:9', '9:16', '4:3', '3:4'.

        Returns:
            JPEG bytes of the first generated image.

        Raises:
            ValueError: If the aspect ratio is not supported by Imagen.
            CollaboratorError: If the service fails or returns no image.
        """
        if aspect_ratio not in IMAGEN_ASPECT_RATIOS:
            raise ValueError(f"Unsupported aspect ratio for images: {aspect_ratio}")
        return self._generate_image(prompt, aspect_ratio)

    @retry()
    def _generate_image(self, prompt: str, aspect_ratio: str) -> bytes:
        request_body = {
            "instances": [
                {"prompt": prompt}
            ],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": aspect_ratio,
                "outputOptions": {"mimeType": "image/jpeg"},
            },
        }

        logger.info(f"Generating image with Imagen: {prompt[:50]}...")
        data = self._session.post(self._model, "predict", request_body, SERVICE)

        predictions = data.get("predictions", [])
        if not predictions:
            raise CollaboratorError(SERVICE, "Image generation failed.")

        image_data = predictions[0].get("bytesBase64Encoded")
        if not image_data:
            raise CollaboratorError(SERVICE, "Image generation failed.")

        return base64.b64decode(image_data)
