"""
Tests for the Google service clients, with the network mocked out.
"""
import base64
import io
import wave
import pytest
from unittest.mock import MagicMock, patch

from google.api_core import exceptions as google_exceptions

from adstudio.errors import AuthorizationError, CollaboratorError
from adstudio.models import VideoHandle
from adstudio.services import ImagenClient, SpeechClient, VeoClient, VertexSession, pcm_to_wav


@pytest.fixture
def vertex():
    """Session whose post() is a mock."""
    session = MagicMock(spec=VertexSession)
    session.project_id = "test-project"
    return session


class TestVertexSession:
    """Tests for REST plumbing."""

    @pytest.fixture
    def session(self, monkeypatch):
        session = VertexSession(project_id="test-project", location="us-central1")
        monkeypatch.setattr(session, "_token", lambda service: "token")
        return session

    def test_requires_project(self, monkeypatch):
        """A project id is mandatory."""
        from adstudio.config import config

        monkeypatch.setattr(config, "google_cloud_project", "")
        with pytest.raises(ValueError):
            VertexSession()

    def test_model_url(self, session):
        """Publisher model URLs are regional."""
        assert session.model_url("imagen-4.0-generate-001", "predict") == (
            "https://us-central1-aiplatform.googleapis.com/v1/projects/test-project/"
            "locations/us-central1/publishers/google/models/imagen-4.0-generate-001:predict"
        )

    @pytest.mark.parametrize("status, error", [(404, AuthorizationError), (403, AuthorizationError), (500, CollaboratorError)])
    def test_error_mapping(self, session, status, error):
        """Error statuses map to authorization or collaborator errors."""
        response = MagicMock(status_code=status, text="Requested entity was not found.")
        with patch("adstudio.services.vertex.requests.post", return_value=response):
            with pytest.raises(error) as exc_info:
                session.post("model", "predict", {}, "imagen")
        assert str(exc_info.value).startswith(f"{status}:")

    def test_success(self, session):
        """200 responses are decoded."""
        response = MagicMock(status_code=200)
        response.json.return_value = {"ok": True}
        with patch("adstudio.services.vertex.requests.post", return_value=response) as post:
            assert session.post("model", "predict", {"a": 1}, "imagen") == {"ok": True}
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer token"


class TestImagen:
    """Tests for image generation."""

    def test_returns_image_bytes(self, vertex):
        """The first prediction's bytes are decoded."""
        vertex.post.return_value = {"predictions": [{"bytesBase64Encoded": base64.b64encode(b"jpeg").decode()}]}
        client = ImagenClient(session=vertex, model="imagen-test")

        assert client.generate_image("A can", "16:9") == b"jpeg"
        model, method, body, _ = vertex.post.call_args.args
        assert (model, method) == ("imagen-test", "predict")
        assert body["parameters"]["aspectRatio"] == "16:9"

    def test_empty_response(self, vertex):
        """No predictions means the generation failed."""
        vertex.post.return_value = {"predictions": []}
        with pytest.raises(CollaboratorError, match="Image generation failed."):
            ImagenClient(session=vertex).generate_image("A can", "1:1")
        assert vertex.post.call_count == 3

    def test_rejects_unknown_ratio(self, vertex, caplog):
        """An unsupported ratio fails at once without calling the service."""
        with caplog.at_level("WARNING"):
            with pytest.raises(ValueError, match="Unsupported aspect ratio"):
                ImagenClient(session=vertex).generate_image("A can", "5:4")
        vertex.post.assert_not_called()
        assert caplog.records == []


class TestVeo:
    """Tests for video generation."""

    @pytest.fixture
    def storage_client(self):
        client = MagicMock()
        client.bucket.return_value.blob.return_value.download_as_bytes.return_value = b"mp4"
        return client

    @pytest.fixture
    def veo(self, vertex, storage_client):
        return VeoClient(
            session=vertex,
            output_bucket="gs://test-bucket",
            model="veo-fast",
            extend_model="veo-extend",
            poll_interval=0,
            storage_client=storage_client,
        )

    def operation_responses(self, uri="gs://test-bucket/out/sample_0.mp4"):
        return [
            {"name": "operations/123"},
            {"done": False},
            {"done": True, "response": {"videos": [{"gcsUri": uri}]}},
        ]

    def test_generates_and_downloads(self, veo, vertex, storage_client):
        """The finished operation's video is downloaded and becomes the continuation token."""
        vertex.post.side_effect = self.operation_responses()
        result = veo.generate_video("Arcade", "16:9")

        assert result.data == b"mp4"
        assert result.handle == VideoHandle(uri="gs://test-bucket/out/sample_0.mp4", aspect_ratio="16:9")
        storage_client.bucket.assert_called_with("test-bucket")
        methods = [c.args[1] for c in vertex.post.call_args_list]
        assert methods == ["predictLongRunning", "fetchPredictOperation", "fetchPredictOperation"]
        assert vertex.post.call_args_list[0].args[0] == "veo-fast"

    def test_extends_previous(self, veo, vertex):
        """Passing a handle uses the extend model and the previous video."""
        vertex.post.side_effect = self.operation_responses()
        veo.generate_video("Next", "16:9", VideoHandle(uri="gs://test-bucket/prev.mp4"))

        model, _, body, _ = vertex.post.call_args_list[0].args
        assert model == "veo-extend"
        assert body["instances"][0]["video"] == {"gcsUri": "gs://test-bucket/prev.mp4", "mimeType": "video/mp4"}

    def test_operation_error(self, veo, vertex):
        """Operation errors carry the service message."""
        vertex.post.side_effect = [
            {"name": "operations/1"},
            {"done": True, "error": {"code": 3, "message": "Prompt rejected"}},
        ] * 3
        with pytest.raises(CollaboratorError, match="Prompt rejected"):
            veo.generate_video("Arcade", "16:9")

    def test_missing_video_is_authorization_failure(self, veo, vertex, storage_client):
        """A vanished output object reads as entity-not-found."""
        vertex.post.side_effect = self.operation_responses()
        storage_client.bucket.return_value.blob.return_value.download_as_bytes.side_effect = (
            google_exceptions.NotFound("gone")
        )
        with pytest.raises(AuthorizationError, match="Requested entity was not found"):
            veo.generate_video("Arcade", "16:9")

    def test_bucket_must_be_gcs_uri(self, vertex, storage_client):
        """The output bucket is a gs:// URI."""
        with pytest.raises(ValueError):
            VeoClient(session=vertex, output_bucket="test-bucket", storage_client=storage_client)

    def test_rejects_square_video(self, veo, vertex, caplog):
        """Veo renders only landscape or portrait, and the check is not retried."""
        with caplog.at_level("WARNING"):
            with pytest.raises(ValueError, match="Invalid aspect_ratio: 1:1"):
                veo.generate_video("Arcade", "1:1")
        vertex.post.assert_not_called()
        assert caplog.records == []


class TestSpeech:
    """Tests for voiceover generation."""

    def test_wav_wrapping(self):
        """PCM is wrapped as 24 kHz 16-bit mono WAV."""
        with wave.open(io.BytesIO(pcm_to_wav(b"\x00\x01" * 48))) as wav:
            assert wav.getframerate() == 24000
            assert wav.getsampwidth() == 2
            assert wav.getnchannels() == 1
            assert wav.getnframes() == 48

    def test_generate_audio(self, vertex):
        """Inline PCM audio comes back as WAV using the reported rate."""
        pcm = b"\x00\x00" * 10
        vertex.post.return_value = {
            "candidates": [{"content": {"parts": [{"inlineData": {
                "mimeType": "audio/L16;codec=pcm;rate=16000",
                "data": base64.b64encode(pcm).decode(),
            }}]}}]
        }
        audio = SpeechClient(session=vertex, model="tts").generate_audio("Hello there", "Kore")

        with wave.open(io.BytesIO(audio)) as wav:
            assert wav.getframerate() == 16000
            assert wav.readframes(10) == pcm
        body = vertex.post.call_args.args[2]
        assert body["generationConfig"]["speechConfig"]["voiceConfig"]["prebuiltVoiceConfig"]["voiceName"] == "Kore"

    def test_no_audio(self, vertex):
        """Responses without audio fail."""
        vertex.post.return_value = {"candidates": []}
        with pytest.raises(CollaboratorError, match="Audio generation failed."):
            SpeechClient(session=vertex).generate_audio("Hello", "Kore")
