"""End-to-end conversation flow.

Drives a ConversationController against the real FastAPI app over
ASGITransport: generation, session persistence and failure reporting all
travel through HTTP.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from playground.agent.config import Settings
from playground.agent.model_service import ModelService
from playground.api import dependencies
from playground.conversation import (
    ConversationController,
    EventKind,
    GenerationTransport,
    SessionStoreClient,
)
from playground.models.chat import ModelConfig
from tests.conftest import TEST_BASE_URL
from tests.fakes import FakeModelService, run_event


@pytest.fixture
def controller(app: FastAPI) -> ConversationController:
    transport = ASGITransport(app=app)
    return ConversationController(
        transport=GenerationTransport(TEST_BASE_URL, transport=transport),
        session_store=SessionStoreClient(TEST_BASE_URL, transport=transport),
    )


class TestConversationFlow:
    async def test_streamed_reply_is_reconciled_and_persisted(
        self,
        controller: ConversationController,
        fake_model_service: FakeModelService,
        async_client: AsyncClient,
    ) -> None:
        fake_model_service.events = [
            run_event("RunContent", "Hi"),
            run_event("RunContent", " ther"),
            run_event("RunCompleted", "Hi there"),
        ]
        progress: list[str] = []
        controller.subscribe(
            lambda e: progress.append(e.payload) if e.kind is EventKind.STREAM_PROGRESS else None
        )

        await controller.send_message("hello")
        await controller.drain()

        assert progress == ["Hi", "Hi ther"]
        assert controller.messages[-1].content == "Hi there"

        stored = (await async_client.get(f"/api/chat/sessions/{controller.session_id}")).json()
        assert stored["title"] == "hello"
        assert [(m["role"], m["content"]) for m in stored["messages"]] == [
            ("user", "hello"),
            ("assistant", "Hi there"),
        ]

    async def test_non_streaming_reply(
        self, controller: ConversationController, fake_model_service: FakeModelService
    ) -> None:
        fake_model_service.text = "Complete answer"
        controller.update_model_config(streaming=False)

        await controller.send_message("hello")

        assert controller.messages[-1].content == "Complete answer"

    async def test_mid_stream_failure_keeps_partial_text(
        self, controller: ConversationController, fake_model_service: FakeModelService
    ) -> None:
        fake_model_service.events = [
            run_event("RunContent", "Hel"),
            run_event("RunError", "upstream exploded"),
        ]

        await controller.send_message("hello")
        await controller.drain()

        assert [(m.role, m.content) for m in controller.messages] == [
            ("user", "hello"),
            ("assistant", "Hel"),
            ("system", "Error: An error occurred during streaming"),
        ]
        assert controller.is_processing is False

    @pytest.mark.parametrize("streaming", [True, False])
    async def test_missing_api_key_is_reported(
        self,
        app: FastAPI,
        settings: Settings,
        controller: ConversationController,
        streaming: bool,
    ) -> None:
        service = ModelService(settings.model_copy(update={"openai_api_key": ""}))
        app.dependency_overrides[dependencies.get_model_service] = lambda: service
        controller.update_model_config(streaming=streaming)

        await controller.send_message("hello")
        await controller.drain()

        assert controller.messages[-1].role == "system"
        assert controller.messages[-1].content == "Error: OpenAI API key not configured"
        assert sum(1 for m in controller.messages if m.role == "system") == 1

    async def test_reload_session_in_new_controller(
        self, app: FastAPI, controller: ConversationController, fake_model_service: FakeModelService
    ) -> None:
        fake_model_service.events = [run_event("RunContent", "Stored reply")]
        await controller.send_message("remember this")
        await controller.drain()

        transport = ASGITransport(app=app)
        reopened = ConversationController(
            transport=GenerationTransport(TEST_BASE_URL, transport=transport),
            session_store=SessionStoreClient(TEST_BASE_URL, transport=transport),
            model_config=ModelConfig(),
        )

        assert await reopened.load_session(controller.session_id) is True
        assert [m.content for m in reopened.messages] == ["remember this", "Stored reply"]
        summaries = await reopened.list_sessions()
        assert summaries[0].message_count == 2
