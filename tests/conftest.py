"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - settings: Settings with a temporary database and a fake API key
    - fake_model_service: Scripted stand-in for the model service
    - fake_audio_service: Scripted stand-in for the audio service
    - session_repository: SQLite session store in a temporary directory
    - app: FastAPI application with collaborators overridden
    - async_client: HTTPX client for API testing

The application never reaches the model provider in tests.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from playground.agent.config import Settings
from playground.api import dependencies
from playground.api.app import create_app
from playground.storage.session_repository import SessionRepository
from tests.fakes import FakeAudioService, FakeModelService

TEST_BASE_URL = "http://test"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Return settings isolated from the process environment."""
    return Settings(
        openai_api_key="sk-test-key",
        base_url=None,
        api_base_url=TEST_BASE_URL,
        database_path=str(tmp_path / "playground.db"),
        request_timeout=5,
    )


@pytest.fixture
def fake_model_service() -> FakeModelService:
    return FakeModelService()


@pytest.fixture
def fake_audio_service() -> FakeAudioService:
    return FakeAudioService(text="transcribed text")


@pytest.fixture
async def session_repository(settings: Settings) -> AsyncGenerator[SessionRepository]:
    """Create a session store backed by a temporary SQLite file.

    Yields:
        Connected SessionRepository, disconnected after the test.
    """
    repository = SessionRepository(settings.database_path)
    await repository.connect()
    yield repository
    await repository.disconnect()


@pytest.fixture
def app(
    fake_model_service: FakeModelService,
    fake_audio_service: FakeAudioService,
    session_repository: SessionRepository,
) -> FastAPI:
    """Create the application with every external collaborator overridden."""
    application = create_app()
    application.dependency_overrides[dependencies.get_model_service] = lambda: fake_model_service
    application.dependency_overrides[dependencies.get_audio_service] = lambda: fake_audio_service
    application.dependency_overrides[dependencies.get_session_repository] = (
        lambda: session_repository
    )
    return application


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=TEST_BASE_URL) as client:
        yield client
