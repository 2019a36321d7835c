"""Unit tests for AudioService with the OpenAI client mocked out."""

import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from playground.agent.audio import AudioService
from playground.agent.config import Settings
from playground.errors import ConfigurationError


def mock_client() -> MagicMock:
    client = MagicMock()
    client.audio.transcriptions.create = AsyncMock(return_value=SimpleNamespace(text="play music"))
    client.audio.speech.create = AsyncMock(return_value=SimpleNamespace(content=b"mp3-bytes"))
    client.close = AsyncMock()
    return client


class TestTranscribe:
    @patch("playground.agent.audio.AsyncOpenAI")
    async def test_forwards_language_and_instructions(self, mock_openai: MagicMock) -> None:
        client = mock_client()
        mock_openai.return_value = client
        service = AudioService(Settings(openai_api_key="sk-test"))

        text = await service.transcribe(
            b"audio", filename="clip.webm", language="fr", instructions="Names: Zoë"
        )

        assert text == "play music"
        client.audio.transcriptions.create.assert_awaited_once_with(
            model="whisper-1",
            file=("clip.webm", b"audio"),
            language="fr",
            prompt="Names: Zoë",
        )

    @patch("playground.agent.audio.AsyncOpenAI")
    async def test_omits_blank_options(self, mock_openai: MagicMock) -> None:
        client = mock_client()
        mock_openai.return_value = client
        service = AudioService(Settings(openai_api_key="sk-test"))

        await service.transcribe(b"audio", language="", instructions=None)

        kwargs = client.audio.transcriptions.create.call_args.kwargs
        assert "language" not in kwargs
        assert "prompt" not in kwargs

    @patch("playground.agent.audio.AsyncOpenAI")
    async def test_requires_api_key(self, mock_openai: MagicMock) -> None:
        service = AudioService(Settings(openai_api_key=""))

        with pytest.raises(ConfigurationError):
            await service.transcribe(b"audio")

        mock_openai.assert_not_called()


class TestSynthesize:
    @patch("playground.agent.audio.AsyncOpenAI")
    async def test_returns_data_url(self, mock_openai: MagicMock) -> None:
        client = mock_client()
        mock_openai.return_value = client
        service = AudioService(Settings(openai_api_key="sk-test"))

        url = await service.synthesize("Hello")

        expected = base64.b64encode(b"mp3-bytes").decode("ascii")
        assert url == f"data:audio/mpeg;base64,{expected}"
        client.audio.speech.create.assert_awaited_once_with(
            model="tts-1", voice="alloy", input="Hello"
        )

    @patch("playground.agent.audio.AsyncOpenAI")
    async def test_client_is_reused_and_closed(self, mock_openai: MagicMock) -> None:
        client = mock_client()
        mock_openai.return_value = client
        service = AudioService(Settings(openai_api_key="sk-test"))

        await service.synthesize("one")
        await service.synthesize("two", voice="nova")
        await service.close()

        mock_openai.assert_called_once()
        client.close.assert_awaited_once()
        assert client.audio.speech.create.call_args.kwargs["voice"] == "nova"
