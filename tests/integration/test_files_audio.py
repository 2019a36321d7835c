"""Integration tests for the attachment and audio endpoints."""

import io

from httpx import AsyncClient
from pypdf import PdfWriter

from playground.errors import ConfigurationError
from playground.parsing.file_parser import MAX_FILE_SIZE
from tests.fakes import FakeAudioService


def blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class TestFileUpload:
    """Integration tests for POST /api/files."""

    async def test_text_upload(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/files", files={"file": ("notes.md", b"# Notes\nhello", "text/markdown")}
        )

        assert response.status_code == 200
        assert response.json() == {
            "name": "notes.md",
            "type": "text/markdown",
            "size": 13,
            "content": "# Notes\nhello",
        }

    async def test_pdf_upload(self, async_client: AsyncClient) -> None:
        data = blank_pdf()

        response = await async_client.post(
            "/api/files", files={"file": ("doc.pdf", data, "application/pdf")}
        )

        assert response.status_code == 200
        assert response.json()["type"] == "application/pdf"
        assert response.json()["size"] == len(data)

    async def test_empty_file_returns_400(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/files", files={"file": ("empty.txt", b"", "text/plain")}
        )

        assert response.status_code == 400
        assert "Empty file" in response.json()["detail"]

    async def test_unsupported_type_returns_400(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/files", files={"file": ("tool.exe", b"MZ", "application/octet-stream")}
        )

        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["detail"]

    async def test_oversized_file_returns_413(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/files",
            files={"file": ("big.txt", b"a" * (MAX_FILE_SIZE + 1), "text/plain")},
        )

        assert response.status_code == 413

    async def test_missing_file_returns_422(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/files")

        assert response.status_code == 422


class TestAudioEndpoints:
    """Integration tests for /api/audio."""

    async def test_transcribe(
        self, async_client: AsyncClient, fake_audio_service: FakeAudioService
    ) -> None:
        fake_audio_service.text = "play music"

        response = await async_client.post(
            "/api/audio/transcribe",
            files={"file": ("clip.webm", b"audio-bytes", "audio/webm")},
            data={"language": "en", "instructions": "Song titles"},
        )

        assert response.status_code == 200
        assert response.json() == {"text": "play music"}
        assert fake_audio_service.transcriptions[0] == {
            "audio": b"audio-bytes",
            "filename": "clip.webm",
            "language": "en",
            "instructions": "Song titles",
        }

    async def test_transcribe_failure_returns_500(
        self, async_client: AsyncClient, fake_audio_service: FakeAudioService
    ) -> None:
        fake_audio_service.error = ConfigurationError("OpenAI API key not configured")

        response = await async_client.post(
            "/api/audio/transcribe", files={"file": ("clip.webm", b"audio", "audio/webm")}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "OpenAI API key not configured"}

    async def test_speech(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/audio/speech", json={"text": "Hello"})

        assert response.status_code == 200
        assert response.json()["audio"].startswith("data:audio/mpeg;base64,")

    async def test_speech_requires_text(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/audio/speech", json={"text": ""})

        assert response.status_code == 422
