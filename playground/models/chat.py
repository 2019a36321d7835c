"""Conversation domain models shared by the API, the controller and the UI.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Role = Literal["user", "assistant", "system"]
ReasoningEffort = Literal["low", "medium", "high"]


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


class WireModel(BaseModel):
    """Base for models exchanged with the browser-facing API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class FileData(WireModel):
    """A file attached to a user message.

    Attributes:
        name: Original filename.
        type: MIME type reported at upload.
        size: Size of the raw upload in bytes.
        content: Extracted text content.
    """

    name: str
    type: str = "application/octet-stream"
    size: int = Field(default=0, ge=0)
    content: str = ""


class ChatMessage(WireModel):
    """A single entry in the conversation transcript."""

    role: Role
    content: str
    timestamp: str = Field(default_factory=utc_now_iso)
    files: list[FileData] = Field(default_factory=list)
    audio_url: str | None = None

    def to_model_message(self) -> dict[str, str]:
        """Render as a `{role, content}` pair for the generation endpoint.

        Attached file text is appended to the content so the model sees it.
        """
        content = self.content
        for file in self.files:
            if file.content:
                content += f"\n\n--- {file.name} ---\n{file.content}"
        return {"role": self.role, "content": content}


class ModelConfig(WireModel):
    """User-selected model and sampling parameters."""

    model: str = "gpt-4o"
    model_category: str = "gpt"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, ge=1, le=128000)
    top_p: float = Field(default=1.0, ge=0.0, le=1.0)
    streaming: bool = True
    reasoning_effort: ReasoningEffort | None = None
    supports_reasoning: bool = False
    supports_audio: bool = False
    supports_audio_output: bool = False
    audio_language: str = "en"
    audio_instructions: str = ""


class LogType(str, Enum):
    """Categories of diagnostic log entries."""

    CONFIG = "config"
    FILES = "files"
    AUDIO = "audio"
    REQUEST = "request"
    RESPONSE = "response"
    ERROR = "error"
    SYSTEM = "system"


class LogEntry(WireModel):
    """One line of the in-memory diagnostic trail. Never persisted."""

    timestamp: str = Field(default_factory=utc_now_iso)
    type: LogType
    message: str
    details: Any = None


class ChatSession(WireModel):
    """A persisted, named conversation."""

    id: str
    title: str
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
    messages: list[ChatMessage] = Field(default_factory=list)
