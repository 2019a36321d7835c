"""Transport adapter for the generation endpoint.

Consumes the NDJSON stream from `/api/ai`, relaying each fragment to a
callback as it arrives.
"""

import logging
from collections.abc import Callable, Sequence

import httpx
from pydantic import ValidationError

from playground.conversation.client import ApiClient, error_message
from playground.conversation.relay import ChunkCallback, ChunkRelay
from playground.errors import StreamDecodeError, TransportError
from playground.models.chat import ChatMessage, ModelConfig
from playground.models.schemas import GenerationRequest, ModelMessage, StreamLine

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[TransportError], None]

GENERATION_PATH = "/api/ai"


def build_request(
    model_config: ModelConfig,
    messages: Sequence[ChatMessage],
    stream: bool,
) -> GenerationRequest:
    """Assemble the generation request for a model config and history."""
    return GenerationRequest(
        model=model_config.model,
        messages=[ModelMessage(**m.to_model_message()) for m in messages],
        temperature=model_config.temperature,
        max_tokens=model_config.max_tokens,
        top_p=model_config.top_p,
        stream=stream,
        reasoning_effort=model_config.reasoning_effort or None,
    )


def decode_line(line: str) -> StreamLine:
    """Parse one NDJSON line of the stream.

    Raises:
        StreamDecodeError: If the line is not a valid stream object.
    """
    try:
        return StreamLine.model_validate_json(line)
    except ValidationError as e:
        raise StreamDecodeError(f"Malformed stream line: {line[:80]!r}") from e


class GenerationTransport(ApiClient):
    """Client for single and streamed completions."""

    error_cls = TransportError

    async def complete(
        self,
        model_config: ModelConfig,
        messages: Sequence[ChatMessage],
        on_chunk: ChunkCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> str:
        """Request a completion for the conversation so far.

        Streams when the config asks for it and `on_chunk` is supplied;
        otherwise issues a single blocking request.

        Args:
            model_config: Model and sampling parameters.
            messages: Conversation history including the new user message.
            on_chunk: Called synchronously with each text fragment.
            on_error: Called with the failure of a streamed request.

        Returns:
            The final text. After a streaming failure reported through
            `on_error`, the partial text received so far.

        Raises:
            TransportError: On non-streaming failure, or streaming failure
                without an `on_error` callback.
        """
        stream = model_config.streaming and on_chunk is not None
        request = build_request(model_config, messages, stream)
        payload = request.model_dump(mode="json", by_alias=True, exclude_none=True)

        if stream:
            return await self._stream(payload, on_chunk, on_error)
        data = await self._request("POST", GENERATION_PATH, json=payload)
        if data.get("error"):
            raise TransportError(data["error"])
        return data.get("text") or ""

    async def _stream(
        self,
        payload: dict,
        on_chunk: ChunkCallback,
        on_error: ErrorCallback | None,
    ) -> str:
        relay = ChunkRelay(on_chunk)
        completion: str | None = None
        failure: TransportError | None = None

        async with self._client() as client:
            try:
                async with client.stream(
                    "POST",
                    GENERATION_PATH,
                    json=payload,
                    headers={"Accept": "text/event-stream"},
                ) as response:
                    if response.is_error:
                        await response.aread()
                        raise TransportError(error_message(response))

                    async for line in response.aiter_lines():
                        if not line.strip():
                            continue
                        data = decode_line(line)
                        if data.error:
                            raise TransportError(data.error)
                        if data.text:
                            relay.feed(data.text)
                        if data.completion:
                            completion = data.completion
            except TransportError as e:
                failure = e
            except httpx.TimeoutException:
                failure = TransportError(f"Request timed out after {self._timeout:.0f}s")
            except httpx.RequestError as e:
                failure = TransportError(f"Connection failed: {e}")

        if failure is not None:
            logger.warning(
                f"Stream failed after {relay.fragment_count} fragments: {failure}"
            )
            if on_error is None:
                raise failure
            on_error(failure)

        return relay.finish(completion, failed=failure is not None)
