"""Clients for the side-channel collaborators: session store and audio.

Every failure surfaces as `SideChannelError`; the conversation controller
logs these and carries on.
"""

from playground.conversation.client import ApiClient
from playground.errors import SideChannelError
from playground.models.chat import ChatMessage, ChatSession, FileData, ModelConfig
from playground.models.schemas import SessionSummary

SESSIONS_PATH = "/api/chat/sessions"


class SessionStoreClient(ApiClient):
    """Create/read/append access to persisted chat sessions."""

    error_cls = SideChannelError

    async def create_session(self, title: str) -> ChatSession:
        data = await self._request("POST", SESSIONS_PATH, json={"title": title})
        return ChatSession.model_validate(data)

    async def list_sessions(self) -> list[SessionSummary]:
        data = await self._request("GET", SESSIONS_PATH)
        return [SessionSummary.model_validate(item) for item in data]

    async def get_session(self, session_id: str) -> ChatSession:
        data = await self._request("GET", f"{SESSIONS_PATH}/{session_id}")
        return ChatSession.model_validate(data)

    async def append_message(self, session_id: str, message: ChatMessage) -> None:
        payload = {"role": message.role, "content": message.content}
        if message.audio_url:
            payload["audioUrl"] = message.audio_url
        await self._request("POST", f"{SESSIONS_PATH}/{session_id}/messages", json=payload)


class FileClient(ApiClient):
    """Attachment ingestion through the files endpoint."""

    error_cls = SideChannelError

    async def upload(self, filename: str, content: bytes, content_type: str | None = None) -> FileData:
        data = await self._request(
            "POST",
            "/api/files",
            files={"file": (filename, content, content_type or "application/octet-stream")},
        )
        return FileData.model_validate(data)


class AudioClient(ApiClient):
    """Transcription and synthesis through the audio endpoints."""

    error_cls = SideChannelError

    async def transcribe(
        self,
        audio: bytes,
        model_config: ModelConfig,
        filename: str = "recording.webm",
    ) -> str:
        """Transcribe a recording using the config's language and instructions."""
        form: dict[str, str] = {}
        if model_config.audio_language:
            form["language"] = model_config.audio_language
        if model_config.audio_instructions:
            form["instructions"] = model_config.audio_instructions

        data = await self._request(
            "POST",
            "/api/audio/transcribe",
            files={"file": (filename, audio)},
            data=form,
        )
        return data.get("text", "")

    async def synthesize(self, text: str, model_config: ModelConfig) -> str:
        """Return a playable URL for `text` spoken aloud."""
        data = await self._request("POST", "/api/audio/speech", json={"text": text})
        if not data.get("audio"):
            raise SideChannelError(f"No audio returned for model {model_config.model}")
        return data["audio"]
