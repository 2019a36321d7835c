from pydantic import Field, field_validator

from playground.models.chat import ReasoningEffort, Role, WireModel


class ModelMessage(WireModel):
    """A `{role, content}` pair forwarded to the model."""

    role: Role
    content: str


class GenerationRequest(WireModel):
    """Request payload for the generation endpoint.

    Attributes:
        model: Model identifier.
        messages: Conversation history, oldest first.
        temperature: Sampling temperature.
        max_tokens: Maximum tokens to generate.
        top_p: Nucleus sampling parameter.
        stream: Whether to answer with an NDJSON stream.
        reasoning_effort: Optional reasoning directive for reasoning models.
    """

    model: str = Field(..., min_length=1)
    messages: list[ModelMessage] = Field(..., min_length=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    stream: bool = False
    reasoning_effort: ReasoningEffort | None = None

    @field_validator("reasoning_effort", mode="before")
    @classmethod
    def blank_effort_is_none(cls, v: object) -> object:
        """Treat an empty reasoning effort as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class StreamLine(WireModel):
    """One NDJSON line of a streaming generation response.

    Attributes:
        text: Text fragment to append.
        error: Error description; the stream ends after this line.
        completion: Canonical full text reported by the provider, sent on
            the last line of a clean stream.
    """

    text: str | None = None
    error: str | None = None
    completion: str | None = None

    def to_line(self) -> str:
        return self.model_dump_json(exclude_none=True) + "\n"


class GenerationResponse(WireModel):
    """Non-streaming generation result."""

    text: str


class ErrorResponse(WireModel):
    """Uniform failure envelope for generation and audio endpoints."""

    error: str


class SessionCreate(WireModel):
    """Request payload for creating a chat session."""

    title: str = Field(..., min_length=1, max_length=200)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: str) -> str:
        """Strip whitespace from title before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class MessageCreate(WireModel):
    """Request payload for appending a message to a session."""

    role: Role
    content: str
    audio_url: str | None = None


class SessionSummary(WireModel):
    """A session as listed in the history sidebar."""

    id: str
    title: str
    created_at: str
    updated_at: str
    message_count: int = Field(default=0, ge=0)


class TranscriptionResponse(WireModel):
    text: str


class SpeechRequest(WireModel):
    text: str = Field(..., min_length=1)
    voice: str | None = None


class SpeechResponse(WireModel):
    """Synthesized audio as a `data:` URL."""

    audio: str
