"""Decoder for Agno's streaming run events.

Agno yields heterogeneous event objects while a run streams: content
deltas, tool calls, reasoning steps, run lifecycle markers. The chat UI only
renders text, so the decoder keeps content deltas and drops everything
else. The run's completion event, when present, carries the provider's
canonical full text; the decoder records it for reconciliation.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterable
from typing import Any

from playground.errors import StreamDecodeError, TransportError

logger = logging.getLogger(__name__)

TEXT_DELTA_EVENT = "RunContent"
COMPLETED_EVENT = "RunCompleted"
ERROR_EVENT = "RunError"


def event_tag(event: Any) -> str | None:
    """Return the discriminant tag of a run event.

    Agno events expose the tag as an `event` attribute holding either a
    plain string or a str-valued enum.
    """
    tag = getattr(event, "event", None)
    if tag is None:
        return None
    return getattr(tag, "value", tag)


class StreamDecoder:
    """Turns a run-event stream into plain-text fragments.

    Attributes:
        completion_text: Canonical full text reported by the provider, or
            None if the stream ended without a completion event.
    """

    def __init__(self) -> None:
        self.completion_text: str | None = None
        self.ignored_events = 0

    async def decode(self, events: AsyncIterable[Any]) -> AsyncGenerator[str]:
        """Yield text fragments in arrival order.

        Args:
            events: Async iterable of provider run events.

        Yields:
            Non-empty text fragments.

        Raises:
            StreamDecodeError: If a text event carries non-text content.
            TransportError: If the provider reports a run error.
        """
        async for event in events:
            tag = event_tag(event)
            content = getattr(event, "content", None)

            if tag == TEXT_DELTA_EVENT:
                if content is None:
                    continue
                if not isinstance(content, str):
                    raise StreamDecodeError(
                        f"Expected text content in {tag} event, got {type(content).__name__}"
                    )
                if content:
                    yield content
            elif tag == COMPLETED_EVENT:
                if isinstance(content, str):
                    self.completion_text = content
            elif tag == ERROR_EVENT:
                raise TransportError(str(content or "Provider reported a run error"))
            else:
                self.ignored_events += 1

        if self.ignored_events:
            logger.debug(f"Ignored {self.ignored_events} non-text stream events")
