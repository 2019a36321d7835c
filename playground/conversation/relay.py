"""Chunk relay between a fragment source and an incremental renderer."""

from collections.abc import Callable

ChunkCallback = Callable[[str], None]


class ChunkRelay:
    """Delivers fragments to a sink and accumulates the full text.

    Each fragment reaches the sink exactly once, in the order fed.
    """

    def __init__(self, on_chunk: ChunkCallback | None = None) -> None:
        self._on_chunk = on_chunk
        self._parts: list[str] = []

    @property
    def text(self) -> str:
        return "".join(self._parts)

    @property
    def fragment_count(self) -> int:
        return len(self._parts)

    def feed(self, fragment: str) -> None:
        if not fragment:
            return
        if self._on_chunk is not None:
            self._on_chunk(fragment)
        self._parts.append(fragment)

    def finish(self, completion: str | None = None, failed: bool = False) -> str:
        """Reconcile the final text.

        The provider's canonical completion wins after a clean stream. After
        a failure the accumulated text wins.
        """
        if completion and not failed:
            return completion
        return self.text
