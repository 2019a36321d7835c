"""Agno-backed access to the hosted text-generation API.

Core module for talking to the model provider.

Architecture decisions:

1. **Agent per request** - Every request carries its own model id and sampling
   parameters, so an Agno `Agent` with an `OpenAIChat` model is assembled for
   each call. The agent has no storage: the playground sends the full history
   with every request and owns persistence itself.

2. **Credential check first** - A missing API key raises `ConfigurationError`
   before any provider object is created, so no network call is attempted.

3. **Streaming generator** - Agno yields typed run events. `StreamDecoder`
   reduces them to text fragments and keeps the canonical completion text
   for the caller to reconcile against.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from agno.agent import Agent
from agno.models.message import Message
from agno.models.openai import OpenAIChat

from playground.agent.config import Settings, get_settings
from playground.agent.stream_decoder import StreamDecoder
from playground.errors import TransportError
from playground.models.catalog import is_reasoning_model
from playground.models.schemas import GenerationRequest

logger = logging.getLogger(__name__)


class ModelService:
    """Service wrapping Agno for single and streamed completions.

    Wraps Agno's Agent with:
    - Per-request model and sampling configuration
    - Optional reasoning-effort directive
    - Clean fragment streaming for the NDJSON endpoint
    - Centralized error translation
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the model service.

        Args:
            settings: Application settings. Loads from environment if not provided.
        """
        self._settings = settings or get_settings()

    def ensure_configured(self) -> None:
        """Raise ConfigurationError if no API key is configured."""
        self._settings.require_api_key()

    def _create_model(self, request: GenerationRequest) -> OpenAIChat:
        """Create the OpenAI chat model for a request.

        Returns:
            OpenAIChat configured with the request's sampling parameters.
            Reasoning models get `max_completion_tokens` and no temperature
            or top-p.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        params: dict[str, Any] = {
            "id": request.model,
            "api_key": self._settings.require_api_key(),
        }
        if self._settings.base_url:
            params["base_url"] = self._settings.base_url

        if is_reasoning_model(request.model):
            # Reasoning models take no sampling parameters and a different token limit.
            if request.max_tokens is not None:
                params["max_completion_tokens"] = request.max_tokens
            if request.reasoning_effort:
                params["reasoning_effort"] = request.reasoning_effort
            return OpenAIChat(**params)

        params["temperature"] = request.temperature
        if request.max_tokens is not None:
            params["max_tokens"] = request.max_tokens
        if request.top_p is not None:
            params["top_p"] = request.top_p
        if request.reasoning_effort:
            params["reasoning_effort"] = request.reasoning_effort
        return OpenAIChat(**params)

    def _create_agent(self, request: GenerationRequest) -> Agent:
        return Agent(
            model=self._create_model(request),
            telemetry=False,
        )

    @staticmethod
    def _to_messages(request: GenerationRequest) -> list[Message]:
        return [Message(role=m.role, content=m.content) for m in request.messages]

    async def stream_fragments(
        self,
        request: GenerationRequest,
        decoder: StreamDecoder | None = None,
    ) -> AsyncGenerator[str]:
        """Stream text fragments for a request.

        The agent is created before the first fragment is requested, so a
        missing credential surfaces on the first iteration step.

        Args:
            request: Validated generation request.
            decoder: Decoder to use; pass one in to read its completion
                text after iteration.

        Yields:
            Text fragments as they arrive.

        Raises:
            ConfigurationError: If no API key is configured.
            TransportError: If the provider fails mid-stream.
        """
        decoder = decoder or StreamDecoder()
        agent = self._create_agent(request)
        try:
            events = agent.arun(
                self._to_messages(request),
                stream=True,
                stream_events=True,
            )
            async for fragment in decoder.decode(events):
                yield fragment
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(str(e) or "Streaming failed") from e

    async def generate(self, request: GenerationRequest) -> str:
        """Get the complete response for a request.

        Returns:
            Complete response text.

        Raises:
            ConfigurationError: If no API key is configured.
            TransportError: If the provider call fails.
        """
        agent = self._create_agent(request)
        try:
            response = await agent.arun(self._to_messages(request))
        except Exception as e:
            raise TransportError(str(e) or "Failed to process request") from e

        content = response.content
        if content is None:
            return ""
        return content if isinstance(content, str) else str(content)


# Module-level singleton instance
_model_service: ModelService | None = None


def get_model_service() -> ModelService:
    """Get or create the global model service.

    Returns:
        The ModelService instance.
    """
    global _model_service
    if _model_service is None:
        _model_service = ModelService()
    return _model_service
