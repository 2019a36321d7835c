"""Audio transcription and speech synthesis via the OpenAI SDK."""

import base64
import logging
from typing import Any

from openai import AsyncOpenAI

from playground.agent.config import Settings, get_settings

logger = logging.getLogger(__name__)


class AudioService:
    """Speech-to-text and text-to-speech against the hosted API.

    The OpenAI client is created lazily so that constructing the service
    never requires a credential; each call checks for one first.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        api_key = self._settings.require_api_key()
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=self._settings.base_url,
                timeout=self._settings.request_timeout,
            )
        return self._client

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "recording.webm",
        language: str | None = None,
        instructions: str | None = None,
    ) -> str:
        """Transcribe recorded audio to text.

        Args:
            audio: Raw audio bytes.
            filename: Name used by the API to infer the audio format.
            language: Optional ISO-639-1 language hint.
            instructions: Optional prompt guiding the transcription.

        Returns:
            The transcribed text.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        client = self._get_client()
        params: dict[str, Any] = {
            "model": self._settings.transcription_model,
            "file": (filename, audio),
        }
        if language:
            params["language"] = language
        if instructions:
            params["prompt"] = instructions

        result = await client.audio.transcriptions.create(**params)
        logger.info(f"Transcribed {len(audio)} bytes of audio")
        return result.text

    async def synthesize(self, text: str, voice: str | None = None) -> str:
        """Synthesize speech and return it as a `data:audio/mpeg` URL.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        client = self._get_client()
        response = await client.audio.speech.create(
            model=self._settings.speech_model,
            voice=voice or self._settings.speech_voice,
            input=text,
        )
        encoded = base64.b64encode(response.content).decode("ascii")
        return f"data:audio/mpeg;base64,{encoded}"

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None


_audio_service: AudioService | None = None


def get_audio_service() -> AudioService:
    """Get or create the global audio service."""
    global _audio_service
    if _audio_service is None:
        _audio_service = AudioService()
    return _audio_service
