"""Unit tests for GenerationTransport against a mocked HTTP layer."""

import json

import httpx
import pytest

from playground.conversation.transport import GenerationTransport, build_request, decode_line
from playground.errors import StreamDecodeError, TransportError
from playground.models.chat import ChatMessage, FileData, ModelConfig

BASE_URL = "http://test"


def ndjson(*objects: dict) -> bytes:
    return "".join(json.dumps(o) + "\n" for o in objects).encode()


def make_transport(handler) -> GenerationTransport:
    return GenerationTransport(BASE_URL, timeout=5, transport=httpx.MockTransport(handler))


def stream_handler(body: bytes, status_code: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code,
            content=body,
            headers={"content-type": "text/event-stream"},
        )

    return handler


HISTORY = [ChatMessage(role="user", content="hello")]


class TestBuildRequest:
    def test_wire_payload_uses_camel_case(self) -> None:
        config = ModelConfig(model="gpt-4o-mini", temperature=0.2, max_tokens=256, top_p=0.9)

        payload = build_request(config, HISTORY, stream=True).model_dump(
            mode="json", by_alias=True, exclude_none=True
        )

        assert payload == {
            "model": "gpt-4o-mini",
            "messages": [{"role": "user", "content": "hello"}],
            "temperature": 0.2,
            "maxTokens": 256,
            "topP": 0.9,
            "stream": True,
        }

    def test_attachments_are_inlined(self) -> None:
        message = ChatMessage(
            role="user",
            content="Summarize",
            files=[FileData(name="notes.txt", type="text/plain", size=5, content="hello")],
        )

        request = build_request(ModelConfig(), [message], stream=False)

        assert request.messages[0].content == "Summarize\n\n--- notes.txt ---\nhello"

    def test_reasoning_effort_forwarded_when_set(self) -> None:
        config = ModelConfig(model="o3-mini", reasoning_effort="low")

        assert build_request(config, HISTORY, stream=False).reasoning_effort == "low"


class TestDecodeLine:
    def test_text_line(self) -> None:
        assert decode_line('{"text": "Hi"}').text == "Hi"

    def test_malformed_line_raises(self) -> None:
        with pytest.raises(StreamDecodeError, match="Malformed stream line"):
            decode_line("not json")


class TestStreaming:
    """Tests for the streamed completion path."""

    async def test_relays_fragments_and_returns_completion(self) -> None:
        transport = make_transport(
            stream_handler(
                ndjson({"text": "Hi"}, {"text": " ther"}, {"text": "", "completion": "Hi there"})
            )
        )
        chunks: list[str] = []

        text = await transport.complete(ModelConfig(), HISTORY, on_chunk=chunks.append)

        assert chunks == ["Hi", " ther"]
        assert text == "Hi there"

    async def test_returns_accumulated_without_completion(self) -> None:
        transport = make_transport(stream_handler(ndjson({"text": "Hi"}, {"text": " there"})))
        chunks: list[str] = []

        text = await transport.complete(ModelConfig(), HISTORY, on_chunk=chunks.append)

        assert text == "Hi there"

    async def test_skips_blank_lines(self) -> None:
        body = b'{"text": "a"}\n\n{"text": "b"}\n'
        transport = make_transport(stream_handler(body))
        chunks: list[str] = []

        await transport.complete(ModelConfig(), HISTORY, on_chunk=chunks.append)

        assert chunks == ["a", "b"]

    async def test_error_line_reports_once_and_keeps_partial(self) -> None:
        transport = make_transport(
            stream_handler(
                ndjson(
                    {"text": "Hel"},
                    {"error": "An error occurred during streaming"},
                    {"text": "ignored"},
                )
            )
        )
        chunks: list[str] = []
        errors: list[TransportError] = []

        text = await transport.complete(
            ModelConfig(), HISTORY, on_chunk=chunks.append, on_error=errors.append
        )

        assert chunks == ["Hel"]
        assert text == "Hel"
        assert len(errors) == 1
        assert str(errors[0]) == "An error occurred during streaming"

    async def test_error_without_callback_raises(self) -> None:
        transport = make_transport(stream_handler(ndjson({"error": "boom"})))

        with pytest.raises(TransportError, match="boom"):
            await transport.complete(ModelConfig(), HISTORY, on_chunk=lambda _: None)

    async def test_http_error_status_uses_error_envelope(self) -> None:
        transport = make_transport(
            stream_handler(b'{"error": "OpenAI API key not configured"}', status_code=500)
        )
        errors: list[TransportError] = []

        text = await transport.complete(
            ModelConfig(), HISTORY, on_chunk=lambda _: None, on_error=errors.append
        )

        assert text == ""
        assert [str(e) for e in errors] == ["OpenAI API key not configured"]

    async def test_malformed_line_is_reported(self) -> None:
        transport = make_transport(stream_handler(b'{"text": "ok"}\n<html>\n'))
        errors: list[TransportError] = []

        text = await transport.complete(
            ModelConfig(), HISTORY, on_chunk=lambda _: None, on_error=errors.append
        )

        assert text == "ok"
        assert isinstance(errors[0], StreamDecodeError)

    async def test_connection_failure_is_reported(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        errors: list[TransportError] = []

        await make_transport(handler).complete(
            ModelConfig(), HISTORY, on_chunk=lambda _: None, on_error=errors.append
        )

        assert "Connection failed" in str(errors[0])

    async def test_timeout_is_reported(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        errors: list[TransportError] = []

        await make_transport(handler).complete(
            ModelConfig(), HISTORY, on_chunk=lambda _: None, on_error=errors.append
        )

        assert "timed out" in str(errors[0])

    async def test_sends_stream_flag_and_accept_header(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, content=ndjson({"text": "x"}))

        await make_transport(handler).complete(ModelConfig(), HISTORY, on_chunk=lambda _: None)

        request = captured[0]
        assert request.url.path == "/api/ai"
        assert request.headers["accept"] == "text/event-stream"
        assert json.loads(request.content)["stream"] is True


class TestSingleRequest:
    """Tests for the non-streaming path."""

    async def test_returns_text(self) -> None:
        captured: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(json.loads(request.content))
            return httpx.Response(200, json={"text": "Complete answer"})

        text = await make_transport(handler).complete(ModelConfig(streaming=False), HISTORY)

        assert text == "Complete answer"
        assert captured[0]["stream"] is False

    async def test_streaming_config_without_callback_uses_single_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content)["stream"] is False
            return httpx.Response(200, json={"text": "whole"})

        assert await make_transport(handler).complete(ModelConfig(), HISTORY) == "whole"

    async def test_error_status_raises_with_server_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "OpenAI API key not configured"})

        with pytest.raises(TransportError, match="OpenAI API key not configured"):
            await make_transport(handler).complete(ModelConfig(streaming=False), HISTORY)

    async def test_validation_detail_is_surfaced(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"detail": [{"msg": "field required"}]})

        with pytest.raises(TransportError, match="HTTP 422"):
            await make_transport(handler).complete(ModelConfig(streaming=False), HISTORY)
