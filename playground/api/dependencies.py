"""FastAPI dependency providers.

Routes receive their collaborators through `Depends` so tests can swap
them with `app.dependency_overrides`.
"""

from playground.agent.audio import AudioService, get_audio_service
from playground.agent.config import get_settings
from playground.agent.model_service import ModelService, get_model_service
from playground.storage.session_repository import SessionRepository

_session_repository: SessionRepository | None = None


def get_session_repository() -> SessionRepository:
    """Get or create the global session repository."""
    global _session_repository
    if _session_repository is None:
        _session_repository = SessionRepository(get_settings().database_path)
    return _session_repository


async def close_session_repository() -> None:
    global _session_repository
    if _session_repository is not None:
        await _session_repository.disconnect()
        _session_repository = None


__all__ = [
    "AudioService",
    "ModelService",
    "SessionRepository",
    "close_session_repository",
    "get_audio_service",
    "get_model_service",
    "get_session_repository",
]
