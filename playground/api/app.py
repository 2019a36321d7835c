"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from playground import __version__
from playground.agent.audio import get_audio_service
from playground.api.ai import router as ai_router
from playground.api.audio import router as audio_router
from playground.api.dependencies import close_session_repository, get_session_repository
from playground.api.files import router as files_router
from playground.api.sessions import router as sessions_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Opens the session store on startup and closes provider clients and the
    store on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting LLM Playground API...")
    await get_session_repository().connect()
    yield
    # Shutdown
    logger.info("Shutting down LLM Playground API...")
    await get_audio_service().close()
    await close_session_repository()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="LLM Playground API",
        description=(
            "Chat playground for hosted language models. Streams model "
            "responses as newline-delimited JSON, persists chat sessions, and "
            "offers audio transcription and synthesis."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.include_router(ai_router)
    application.include_router(sessions_router)
    application.include_router(audio_router)
    application.include_router(files_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "llm-playground"}

    return application


app = create_app()
