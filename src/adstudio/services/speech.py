"""Gemini text-to-speech client via Vertex AI."""

import base64
import io
import logging
import wave
from typing import Optional

from ..config import config
from ..errors import CollaboratorError
from .retry import retry
from .vertex import VertexSession

logger = logging.getLogger(__name__)

SERVICE = "speech"

# Gemini TTS returns raw 16-bit mono PCM at 24 kHz
PCM_SAMPLE_RATE = 24000
PCM_SAMPLE_WIDTH = 2
PCM_CHANNELS = 1


def pcm_to_wav(pcm: bytes, sample_rate: int = PCM_SAMPLE_RATE) -> bytes:
    """Wrap raw PCM samples in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(PCM_CHANNELS)
        wav.setsampwidth(PCM_SAMPLE_WIDTH)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return buffer.getvalue()


def _sample_rate(mime_type: str) -> int:
    # e.g. "audio/L16;codec=pcm;rate=24000"
    for part in mime_type.split(";"):
        key, _, value = part.strip().partition("=")
        if key == "rate" and value.isdigit():
            return int(value)
    return PCM_SAMPLE_RATE


class SpeechClient:
    """Client wrapper for Gemini prebuilt-voice speech synthesis."""

    def __init__(
        self,
        session: Optional[VertexSession] = None,
        model: Optional[str] = None,
    ) -> None:
        self._session = session or VertexSession()
        self._model = model or config.tts_model

    @retry()
    def generate_audio(self, text: str, voice: str) -> bytes:
        """Synthesize ``text`` with a prebuilt voice.

        Returns:
            WAV bytes.

        Raises:
            CollaboratorError: If the service fails or returns no audio.
        """
        request_body = {
            "contents": [{"role": "user", "parts": [{"text": text}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}},
                },
            },
        }

        logger.info(f"Generating voiceover with voice {voice}")
        data = self._session.post(self._model, "generateContent", request_body, SERVICE)

        try:
            inline = data["candidates"][0]["content"]["parts"][0]["inlineData"]
            audio = inline["data"]
        except (KeyError, IndexError, TypeError):
            raise CollaboratorError(SERVICE, "Audio generation failed.")

        if not audio:
            raise CollaboratorError(SERVICE, "Audio generation failed.")

        return pcm_to_wav(base64.b64decode(audio), _sample_rate(inline.get("mimeType", "")))
