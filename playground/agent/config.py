"""Application settings with environment variable loading.

Pydantic-based configuration built once at startup and passed by reference
to every collaborator. Settings are frozen: nothing in the application
mutates them or writes back to the environment.
"""

import os
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from playground.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

MISSING_API_KEY_MESSAGE = "OpenAI API key not configured"


class Settings(BaseModel):
    """Process-wide configuration for the playground.

    Supports OpenAI and any OpenAI-compatible API via LLM_BASE_URL.

    Attributes:
        openai_api_key: API key for model access. May be empty; requests
            then fail with a configuration error.
        base_url: API base URL (None for OpenAI default).
        api_base_url: Where the UI reaches this application's HTTP API.
            Defaults to localhost on `port` unless API_BASE_URL is set.
        database_path: SQLite file holding chat sessions.
        request_timeout: Ceiling in seconds for a single generation request.
        transcription_model: Model used for audio transcription.
        speech_model: Model used for audio synthesis.
        speech_voice: Default synthesis voice.
        host: Interface the API server binds to.
        port: Port the API server binds to.
        ui_port: Port of the standalone page server in separate mode.
        log_level: Root logging level.
        run_mode: `integrated` (one server) or `separate` (two processes).
        storage_secret: Secret for NiceGUI's per-browser storage.
    """

    model_config = ConfigDict(frozen=True)

    openai_api_key: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", os.getenv("LLM_API_KEY", "")),
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (None for OpenAI default)",
    )
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the playground HTTP API",
    )
    database_path: str = Field(
        default_factory=lambda: os.getenv("DATABASE_PATH", "data/playground.db"),
        description="SQLite database file for chat sessions",
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "60")),
        gt=0,
        description="Maximum duration of a generation request in seconds",
    )
    transcription_model: str = Field(
        default_factory=lambda: os.getenv("TRANSCRIPTION_MODEL", "whisper-1"),
    )
    speech_model: str = Field(
        default_factory=lambda: os.getenv("SPEECH_MODEL", "tts-1"),
    )
    speech_voice: str = Field(
        default_factory=lambda: os.getenv("SPEECH_VOICE", "alloy"),
    )
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "8000")), gt=0, lt=65536)
    ui_port: int = Field(
        default_factory=lambda: int(os.getenv("UI_PORT", "8080")), gt=0, lt=65536
    )
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    run_mode: Literal["integrated", "separate"] = Field(
        default_factory=lambda: os.getenv("RUN_MODE", "integrated").lower()
    )
    storage_secret: str = Field(
        default_factory=lambda: os.getenv("NICEGUI_STORAGE_SECRET", "llm-playground-secret"),
    )

    @model_validator(mode="before")
    @classmethod
    def default_api_base_url(cls, data: Any) -> Any:
        """Point the UI at the bound API port unless API_BASE_URL is set."""
        if isinstance(data, dict) and not data.get("api_base_url"):
            url = os.getenv("API_BASE_URL")
            if not url:
                port = data.get("port") or os.getenv("PORT", "8000")
                url = f"http://localhost:{port}"
            data = {**data, "api_base_url": url}
        return data

    @field_validator("openai_api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        """Strip surrounding whitespace; a blank key counts as missing."""
        return v.strip()

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def has_api_key(self) -> bool:
        return bool(self.openai_api_key)

    def require_api_key(self) -> str:
        """Return the API key or fail before any provider call is made.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        if not self.openai_api_key:
            raise ConfigurationError(MISSING_API_KEY_MESSAGE)
        return self.openai_api_key


# Module-level singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the process-wide settings.

    Returns:
        The Settings instance, constructed from the environment on first use.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
