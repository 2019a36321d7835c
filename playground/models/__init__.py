"""Pydantic models for the conversation domain and the HTTP API.

Provides type safety, validation, and camelCase wire serialization.

Models:
    - ChatMessage: Individual message in the transcript
    - FileData: Text extracted from an attached file
    - ModelConfig: Selected model and sampling parameters
    - LogEntry: Diagnostic trail entry
    - ChatSession: Persisted conversation
    - schemas: Request/response payloads of the API
    - catalog: Known models and their capabilities
"""

from playground.models.chat import (
    ChatMessage,
    ChatSession,
    FileData,
    LogEntry,
    LogType,
    ModelConfig,
    utc_now_iso,
)

__all__ = [
    "ChatMessage",
    "ChatSession",
    "FileData",
    "LogEntry",
    "LogType",
    "ModelConfig",
    "utc_now_iso",
]
