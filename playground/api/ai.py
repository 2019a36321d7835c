"""Generation endpoint.

Streams newline-delimited JSON (`{"text": ...}` per fragment) or returns a
single `{"text": ...}` body. Every failure uses the `{"error": ...}`
envelope with HTTP 500.
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, StreamingResponse

from playground.agent.model_service import ModelService
from playground.agent.stream_decoder import StreamDecoder
from playground.api.dependencies import get_model_service
from playground.errors import ConfigurationError
from playground.models.schemas import (
    ErrorResponse,
    GenerationRequest,
    GenerationResponse,
    StreamLine,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["generation"])

STREAM_ERROR_MESSAGE = "An error occurred during streaming"


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=message).model_dump(),
    )


async def _ndjson_stream(
    service: ModelService,
    request: GenerationRequest,
) -> AsyncGenerator[str]:
    """Encode fragments as NDJSON lines.

    A failure mid-stream is reported as one error line, after which the
    stream closes.
    """
    decoder = StreamDecoder()
    accumulated: list[str] = []
    try:
        async for fragment in service.stream_fragments(request, decoder=decoder):
            accumulated.append(fragment)
            yield StreamLine(text=fragment).to_line()
    except Exception as e:
        logger.error(f"Streaming error for model {request.model}: {e}")
        yield StreamLine(error=STREAM_ERROR_MESSAGE).to_line()
        return

    if decoder.completion_text:
        if decoder.completion_text != "".join(accumulated):
            logger.info("Provider completion text differs from streamed fragments")
        yield StreamLine(text="", completion=decoder.completion_text).to_line()


@router.post(
    "/ai",
    response_model=GenerationResponse,
    responses={500: {"model": ErrorResponse}},
)
async def generate(
    request: GenerationRequest,
    service: ModelService = Depends(get_model_service),
):
    """Generate a completion, streamed or in one piece.

    Returns:
        An NDJSON stream when `stream` is true, otherwise `{"text": ...}`.
        HTTP 500 with `{"error": ...}` when the API key is missing or the
        provider call fails.
    """
    try:
        # Fail fast on a missing credential before any provider call.
        service.ensure_configured()

        if request.stream:
            return StreamingResponse(
                _ndjson_stream(service, request),
                media_type="text/event-stream",
                headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
            )

        text = await service.generate(request)
        return GenerationResponse(text=text)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return _error_response(str(e))
    except Exception as e:
        logger.error(f"Model API error: {e}")
        return _error_response(str(e) or "Failed to process request")
