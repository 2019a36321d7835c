"""Unit tests for StreamDecoder."""

import pytest

from playground.agent.stream_decoder import StreamDecoder, event_tag
from playground.errors import StreamDecodeError, TransportError
from tests.fakes import RunEventTag, aiter_events, run_event


async def decode_all(decoder: StreamDecoder, events) -> list[str]:
    return [fragment async for fragment in decoder.decode(aiter_events(events))]


class TestEventTag:
    def test_plain_string_tag(self) -> None:
        assert event_tag(run_event("RunContent")) == "RunContent"

    def test_enum_tag_is_unwrapped(self) -> None:
        assert event_tag(run_event(RunEventTag.RUN_COMPLETED)) == "RunCompleted"

    def test_untagged_object(self) -> None:
        assert event_tag(object()) is None


class TestDecode:
    """Tests for reducing run events to text."""

    async def test_yields_text_in_order(self) -> None:
        decoder = StreamDecoder()

        fragments = await decode_all(
            decoder,
            [run_event("RunContent", "Hel"), run_event("RunContent", "lo")],
        )

        assert fragments == ["Hel", "lo"]
        assert decoder.completion_text is None

    async def test_skips_empty_and_missing_content(self) -> None:
        decoder = StreamDecoder()

        fragments = await decode_all(
            decoder,
            [
                run_event("RunContent", ""),
                run_event("RunContent", None),
                run_event("RunContent", "x"),
            ],
        )

        assert fragments == ["x"]

    async def test_ignores_unrelated_events(self) -> None:
        """Tool calls and lifecycle markers never become text."""
        decoder = StreamDecoder()

        fragments = await decode_all(
            decoder,
            [
                run_event("RunStarted"),
                run_event(RunEventTag.TOOL_CALL_STARTED, {"tool": "search"}),
                run_event(RunEventTag.RUN_CONTENT, "answer"),
                object(),
            ],
        )

        assert fragments == ["answer"]
        assert decoder.ignored_events == 3

    async def test_records_completion_text(self) -> None:
        decoder = StreamDecoder()

        fragments = await decode_all(
            decoder,
            [run_event("RunContent", "Hi"), run_event("RunCompleted", "Hi there")],
        )

        assert fragments == ["Hi"]
        assert decoder.completion_text == "Hi there"

    async def test_non_text_content_raises(self) -> None:
        decoder = StreamDecoder()

        with pytest.raises(StreamDecodeError, match="Expected text content"):
            await decode_all(decoder, [run_event("RunContent", {"not": "text"})])

    async def test_run_error_raises_transport_error(self) -> None:
        decoder = StreamDecoder()
        received: list[str] = []

        with pytest.raises(TransportError, match="quota exceeded"):
            async for fragment in decoder.decode(
                aiter_events([run_event("RunContent", "a"), run_event("RunError", "quota exceeded")])
            ):
                received.append(fragment)

        assert received == ["a"]
