"""Google Veo API client wrapper via Vertex AI."""

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import storage

from ..config import config
from ..errors import AuthorizationError, CollaboratorError
from ..models import VideoHandle
from .retry import retry
from .vertex import VertexSession

logger = logging.getLogger(__name__)

SERVICE = "veo"

VEO_ASPECT_RATIOS = ("16:9", "9:16")


@dataclass
class VideoResult:
    """A finished Veo generation."""

    data: bytes
    handle: VideoHandle


class VeoClient:
    """Client wrapper for Google Veo video generation via Vertex AI.

    This client handles:
    - Submitting long-running generation requests, optionally extending
      a previous video
    - Polling the operation until it finishes
    - Downloading the generated video from GCS
    """

    DEFAULT_RESOLUTION = "720p"

    def __init__(
        self,
        session: Optional[VertexSession] = None,
        output_bucket: Optional[str] = None,
        model: Optional[str] = None,
        extend_model: Optional[str] = None,
        poll_interval: Optional[float] = None,
        max_poll_time: Optional[float] = None,
        storage_client: Optional[storage.Client] = None,
    ) -> None:
        """Initialize the Veo client.

        Args:
            session: Vertex AI session. Created if not provided.
            output_bucket: GCS bucket for output videos. Defaults to VEO_OUTPUT_BUCKET.
            model: Model for first scenes.
            extend_model: Model used when extending a previous video.
            poll_interval: Seconds between operation polls.
            max_poll_time: Maximum seconds to wait for one generation.
            storage_client: GCS client. Created if not provided.
        """
        self._session = session or VertexSession()
        self._output_bucket = output_bucket or config.veo_output_bucket
        self._model = model or config.veo_model
        self._extend_model = extend_model or config.veo_extend_model
        self._poll_interval = poll_interval if poll_interval is not None else config.veo_poll_interval
        self._max_poll_time = max_poll_time if max_poll_time is not None else config.veo_max_poll_time

        self._validate_config()
        self._storage_client = storage_client or storage.Client(project=self._session.project_id)

    def _validate_config(self) -> None:
        """Validate that required configuration is set."""
        if not self._output_bucket:
            raise ValueError(
                "Missing required configuration: VEO_OUTPUT_BUCKET. "
                "Set the corresponding environment variable."
            )

        if not self._output_bucket.startswith("gs://"):
            raise ValueError(
                f"VEO_OUTPUT_BUCKET must be a GCS URI starting with 'gs://'. "
                f"Got: {self._output_bucket}"
            )

    @property
    def output_bucket(self) -> str:
        """Return the output GCS bucket."""
        return self._output_bucket

    def generate_video(
        self,
        prompt: str,
        aspect_ratio: str = "16:9",
        previous: Optional[VideoHandle] = None,
    ) -> VideoResult:
        """Generate a video clip, optionally continuing ``previous``.

        Args:
            prompt: Text description of the video to generate.
            aspect_ratio: '16:9' or '9:16'.
            previous: Continuation token of the video to extend.

        Returns:
            VideoResult with the MP4 bytes and the new continuation token.

        Raises:
            ValueError: If the aspect ratio is not supported by Veo.
            CollaboratorError: If the operation fails, times out or returns no video.
        """
        if aspect_ratio not in VEO_ASPECT_RATIOS:
            raise ValueError(f"Invalid aspect_ratio: {aspect_ratio}. Must be '16:9' or '9:16'")
        return self._generate_video(prompt, aspect_ratio, previous)

    @retry()
    def _generate_video(self, prompt: str, aspect_ratio: str, previous: Optional[VideoHandle]) -> VideoResult:
        model = self._extend_model if previous else self._model
        bucket_name = self._output_bucket.replace("gs://", "").rstrip("/")
        storage_uri = f"gs://{bucket_name}/adstudio/{uuid.uuid4().hex}/"

        instance: dict = {"prompt": prompt}
        if previous:
            instance["video"] = {"gcsUri": previous.uri, "mimeType": "video/mp4"}

        request_body = {
            "instances": [instance],
            "parameters": {
                "aspectRatio": aspect_ratio,
                "sampleCount": 1,
                "resolution": self.DEFAULT_RESOLUTION,
                "storageUri": storage_uri,
            },
        }

        logger.info(f"Starting Veo generation with {model}" + (" (extending)" if previous else ""))
        logger.debug(f"Prompt: {prompt[:100]}...")

        operation = self._session.post(model, "predictLongRunning", request_body, SERVICE)
        operation_name = operation.get("name")
        if not operation_name:
            raise CollaboratorError(SERVICE, "Video generation did not return an operation.")

        response = self._poll_operation(model, operation_name)

        videos = response.get("videos") or []
        video_uri = videos[0].get("gcsUri") if videos else None
        if not video_uri:
            raise CollaboratorError(SERVICE, "Video generation failed or returned no URI.")

        data = self._download_from_gcs(video_uri)
        return VideoResult(data=data, handle=VideoHandle(uri=video_uri, aspect_ratio=aspect_ratio))

    def _poll_operation(self, model: str, operation_name: str) -> dict:
        """Poll an operation until it is done.

        Returns:
            The operation's ``response`` payload.
        """
        start_time = time.time()
        poll_count = 0

        while True:
            elapsed = time.time() - start_time
            if elapsed > self._max_poll_time:
                logger.warning(f"Operation {operation_name} timed out after {elapsed:.1f}s")
                raise CollaboratorError(
                    SERVICE, f"Operation timed out after {self._max_poll_time}s"
                )

            poll_count += 1
            logger.debug(f"Polling operation (attempt {poll_count}): {operation_name}")

            operation = self._session.post(
                model, "fetchPredictOperation", {"operationName": operation_name}, SERVICE
            )

            if operation.get("done"):
                error = operation.get("error")
                if error:
                    message = error.get("message", "Video generation failed.")
                    logger.error(f"Operation {operation_name} failed: {message}")
                    raise CollaboratorError(SERVICE, message, error.get("code"))
                logger.info(f"Operation {operation_name} completed successfully")
                return operation.get("response", {})

            time.sleep(self._poll_interval)

    def _download_from_gcs(self, gcs_uri: str) -> bytes:
        """Download a GCS object into memory.

        Args:
            gcs_uri: GCS URI (gs://bucket/path/to/file).
        """
        if not gcs_uri.startswith("gs://"):
            raise CollaboratorError(SERVICE, f"Invalid GCS URI: {gcs_uri}")

        uri_parts = gcs_uri[5:].split("/", 1)
        if len(uri_parts) != 2:
            raise CollaboratorError(SERVICE, f"Invalid GCS URI format: {gcs_uri}")

        bucket_name, blob_name = uri_parts

        try:
            blob = self._storage_client.bucket(bucket_name).blob(blob_name)
            data = blob.download_as_bytes()
        except google_exceptions.NotFound as e:
            logger.error(f"File not found in GCS: {gcs_uri}")
            raise AuthorizationError(SERVICE, f"Requested entity was not found: {gcs_uri}", 404) from e
        except google_exceptions.GoogleAPICallError as e:
            raise CollaboratorError(SERVICE, f"Failed to download video: {e}") from e

        logger.debug(f"Downloaded {gcs_uri} ({len(data)} bytes)")
        return data
