"""Audio transcription and synthesis endpoints."""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from playground.agent.audio import AudioService
from playground.api.dependencies import get_audio_service
from playground.models.schemas import (
    ErrorResponse,
    SpeechRequest,
    SpeechResponse,
    TranscriptionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/audio", tags=["audio"])


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.post(
    "/transcribe",
    response_model=TranscriptionResponse,
    responses={500: {"model": ErrorResponse}},
)
async def transcribe(
    file: UploadFile = File(...),
    language: str | None = Form(None),
    instructions: str | None = Form(None),
    service: AudioService = Depends(get_audio_service),
):
    """Transcribe an uploaded recording."""
    audio = await file.read()
    try:
        text = await service.transcribe(
            audio,
            filename=file.filename or "recording.webm",
            language=language,
            instructions=instructions,
        )
    except Exception as e:
        logger.error(f"Transcription failed: {e}")
        return _error_response(str(e) or "Failed to transcribe audio")
    return TranscriptionResponse(text=text)


@router.post(
    "/speech",
    response_model=SpeechResponse,
    responses={500: {"model": ErrorResponse}},
)
async def speech(
    payload: SpeechRequest,
    service: AudioService = Depends(get_audio_service),
):
    """Synthesize speech for a piece of text."""
    try:
        audio = await service.synthesize(payload.text, voice=payload.voice)
    except Exception as e:
        logger.error(f"Speech synthesis failed: {e}")
        return _error_response(str(e) or "Failed to synthesize audio")
    return SpeechResponse(audio=audio)
