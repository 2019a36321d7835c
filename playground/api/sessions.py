"""Chat session endpoints backed by the SQLite session store."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from playground.api.dependencies import get_session_repository
from playground.errors import SessionNotFoundError
from playground.models.chat import ChatMessage, ChatSession
from playground.models.schemas import MessageCreate, SessionCreate, SessionSummary
from playground.storage.session_repository import SessionRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat/sessions", tags=["sessions"])


@router.get("", response_model=list[SessionSummary])
async def list_sessions(
    repository: SessionRepository = Depends(get_session_repository),
) -> list[SessionSummary]:
    """List chat sessions, newest first."""
    return await repository.list_sessions()


@router.post("", response_model=ChatSession, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: SessionCreate,
    repository: SessionRepository = Depends(get_session_repository),
) -> ChatSession:
    """Create an empty chat session."""
    session = await repository.create_session(payload.title)
    logger.info(f"Created chat session {session.id}")
    return session


@router.get("/{session_id}", response_model=ChatSession)
async def get_session(
    session_id: str,
    repository: SessionRepository = Depends(get_session_repository),
) -> ChatSession:
    """Load a chat session with its messages.

    Raises:
        404: Unknown session id.
    """
    try:
        return await repository.get_session(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post(
    "/{session_id}/messages",
    response_model=ChatMessage,
    status_code=status.HTTP_201_CREATED,
)
async def append_message(
    session_id: str,
    payload: MessageCreate,
    repository: SessionRepository = Depends(get_session_repository),
) -> ChatMessage:
    """Append a message to a chat session.

    Raises:
        404: Unknown session id.
    """
    try:
        return await repository.append_message(
            session_id,
            role=payload.role,
            content=payload.content,
            audio_url=payload.audio_url,
        )
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
