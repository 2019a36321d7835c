"""Conversation controller: the send/receive state machine behind the UI.

Owns the transcript, the diagnostic log trail, pending attachments and the
current session id. Renderers subscribe to `ConversationEvent`s and redraw
on notification; the controller never touches UI code.

State machine::

    idle -> sending -> streaming | waiting -> finalizing -> idle
                  \\-------------+---------> error -------> idle

Only one send cycle runs at a time. A send attempted while another is in
flight is rejected, not queued.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from playground.conversation.collaborators import AudioClient, SessionStoreClient
from playground.conversation.export import export_transcript
from playground.conversation.transport import GenerationTransport
from playground.errors import SideChannelError, TransportError
from playground.models.catalog import (
    MODEL_CATEGORIES,
    capability_changes,
    default_model_config,
    find_model,
    max_context_size,
)
from playground.models.chat import ChatMessage, FileData, LogEntry, LogType, ModelConfig
from playground.models.schemas import SessionSummary

logger = logging.getLogger(__name__)

TITLE_LENGTH = 30
DEFAULT_TITLE = "New chat"
FALLBACK_ERROR = (
    "Failed to get a response from the API. Please check your API key and try again."
)


class ConversationState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    WAITING = "waiting"
    FINALIZING = "finalizing"
    ERROR = "error"


class EventKind(str, Enum):
    STATE_CHANGED = "state_changed"
    TRANSCRIPT_CHANGED = "transcript_changed"
    STREAM_PROGRESS = "stream_progress"
    LOG_ADDED = "log_added"
    NOTIFICATION = "notification"
    SESSION_CHANGED = "session_changed"
    FILES_CHANGED = "files_changed"
    CONFIG_CHANGED = "config_changed"


@dataclass(frozen=True)
class ConversationEvent:
    kind: EventKind
    payload: Any = None


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    level: str = "negative"


@dataclass(frozen=True)
class ContextUsage:
    tokens: int
    max_tokens: int
    percent: float


Listener = Callable[[ConversationEvent], None]


def session_title(content: str) -> str:
    """Title for a new session: the first 30 characters of the message."""
    if not content.strip():
        return DEFAULT_TITLE
    suffix = "..." if len(content) > TITLE_LENGTH else ""
    return content[:TITLE_LENGTH] + suffix


def estimate_tokens(messages: Sequence[ChatMessage]) -> int:
    # Rough estimate: four characters per token.
    return int(sum(len(m.content) / 4 for m in messages))


class ConversationController:
    """Drives send/receive cycles for one playground page.

    Args:
        transport: Generation transport.
        session_store: Optional session persistence client.
        audio: Optional audio transcription/synthesis client.
        model_config: Initial model configuration.
    """

    def __init__(
        self,
        transport: GenerationTransport,
        session_store: SessionStoreClient | None = None,
        audio: AudioClient | None = None,
        model_config: ModelConfig | None = None,
    ) -> None:
        self._transport = transport
        self._store = session_store
        self._audio = audio
        self.model_config = model_config or default_model_config()
        self.messages: list[ChatMessage] = []
        self.logs: list[LogEntry] = []
        self.files: list[FileData] = []
        self.current_streamed_text = ""
        self.session_id: str | None = None
        self._state = ConversationState.IDLE
        self._listeners: list[Listener] = []
        self._background: set[asyncio.Task] = set()
        self._persist_tail: asyncio.Task | None = None

    # === Observers ===

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, kind: EventKind, payload: Any = None) -> None:
        event = ConversationEvent(kind, payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Listener failed handling {kind.value}")

    # === State ===

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def is_processing(self) -> bool:
        return self._state is not ConversationState.IDLE

    def _set_state(self, state: ConversationState) -> None:
        if state is self._state:
            return
        self._state = state
        self._publish(EventKind.STATE_CHANGED, state)

    # === Logging ===

    def add_log(self, log_type: LogType, message: str, details: Any = None) -> LogEntry:
        entry = LogEntry(type=log_type, message=message, details=details)
        self.logs = [*self.logs, entry]
        if log_type is LogType.ERROR:
            logger.warning(f"{message}: {details}")
        else:
            logger.info(message)
        self._publish(EventKind.LOG_ADDED, entry)
        return entry

    def clear_logs(self) -> None:
        self.logs = []
        self._publish(EventKind.LOG_ADDED, None)

    def _notify(self, title: str, description: str) -> None:
        self._publish(EventKind.NOTIFICATION, Notification(title, description))

    # === Configuration and attachments ===

    def update_model_config(self, **changes: Any) -> ModelConfig:
        """Apply config changes by copy, validating the result."""
        merged = {**self.model_config.model_dump(), **changes}
        self.model_config = ModelConfig.model_validate(merged)
        self.add_log(LogType.CONFIG, "Model configuration updated", changes)
        self._publish(EventKind.CONFIG_CHANGED, self.model_config)
        return self.model_config

    def select_model(self, model_id: str) -> ModelConfig:
        """Select a model, taking its capability flags from the catalog."""
        found = find_model(model_id)
        if found is None:
            return self.update_model_config(model=model_id)
        return self.update_model_config(**capability_changes(*found))

    def select_category(self, category: str) -> ModelConfig:
        """Switch category and select its first model."""
        models = MODEL_CATEGORIES.get(category)
        if not models:
            raise ValueError(f"Unknown model category: {category}")
        return self.update_model_config(**capability_changes(category, models[0]))

    def add_files(self, files: Sequence[FileData]) -> None:
        if not files:
            return
        self.files = [*self.files, *files]
        self.add_log(
            LogType.FILES,
            f"{len(files)} file(s) uploaded",
            [f.name for f in files],
        )
        self._publish(EventKind.FILES_CHANGED, self.files)

    def clear_files(self) -> None:
        self.files = []
        self._publish(EventKind.FILES_CHANGED, self.files)

    # === Transcript ===

    def clear_conversation(self) -> None:
        self.messages = []
        self.current_streamed_text = ""
        self.add_log(LogType.SYSTEM, "Conversation cleared")
        self._publish(EventKind.TRANSCRIPT_CHANGED, self.messages)

    def new_chat(self) -> None:
        """Start over with no session; the next send creates one."""
        self.session_id = None
        self._publish(EventKind.SESSION_CHANGED, None)
        self.clear_conversation()

    def context_usage(self) -> ContextUsage:
        tokens = estimate_tokens(self.messages)
        max_tokens = max_context_size(self.model_config.model)
        percent = min(100.0, tokens / max_tokens * 100)
        return ContextUsage(tokens=tokens, max_tokens=max_tokens, percent=percent)

    def export(self, fmt: str = "json") -> str:
        return export_transcript(self.messages, fmt)

    # === Sessions ===

    async def list_sessions(self) -> list[SessionSummary]:
        if self._store is None:
            return []
        try:
            return await self._store.list_sessions()
        except SideChannelError as e:
            self.add_log(LogType.ERROR, "Error fetching chat sessions", str(e))
            return []

    async def load_session(self, session_id: str) -> bool:
        """Replace the transcript with a stored session's messages."""
        if self._store is None or self.is_processing:
            return False
        try:
            session = await self._store.get_session(session_id)
        except SideChannelError as e:
            self.add_log(LogType.ERROR, "Error loading chat session", str(e))
            return False

        self.session_id = session.id
        self.messages = list(session.messages)
        self.current_streamed_text = ""
        self._publish(EventKind.SESSION_CHANGED, session.id)
        self._publish(EventKind.TRANSCRIPT_CHANGED, self.messages)
        return True

    async def _ensure_session(self, content: str) -> None:
        if self.session_id is not None or self._store is None:
            return
        try:
            session = await self._store.create_session(session_title(content))
        except SideChannelError as e:
            self.add_log(LogType.ERROR, "Error creating chat session", str(e))
            return
        self.session_id = session.id
        self._publish(EventKind.SESSION_CHANGED, session.id)

    def _persist(self, message: ChatMessage) -> None:
        """Persist a message in the background, after earlier persists."""
        if self._store is None or self.session_id is None:
            return
        task = asyncio.create_task(
            self._persist_after(self._persist_tail, self.session_id, message)
        )
        self._persist_tail = task
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _persist_after(
        self,
        previous: asyncio.Task | None,
        session_id: str,
        message: ChatMessage,
    ) -> None:
        if previous is not None:
            await asyncio.wait({previous})
        try:
            await self._store.append_message(session_id, message)
        except Exception as e:
            self.add_log(LogType.ERROR, f"Error saving {message.role} message", str(e))

    async def drain(self) -> None:
        """Wait for background persistence to settle."""
        while self._background:
            await asyncio.gather(*list(self._background))

    # === Send cycle ===

    def _can_send(self, content: str) -> bool:
        if self.is_processing:
            logger.debug("Send rejected: a request is already in flight")
            return False
        return bool(content.strip()) or bool(self.files)

    async def send_message(self, content: str) -> bool:
        """Send a user message and collect the model's reply.

        Returns:
            True if a send cycle ran, False if the send was rejected
            (empty input without files, or a cycle already in flight).
        """
        if not self._can_send(content):
            return False
        # Claim the cycle before the first suspension point.
        self._set_state(ConversationState.SENDING)
        await self._run_cycle(content)
        return True

    async def handle_audio_recorded(
        self,
        audio: bytes,
        filename: str = "recording.webm",
    ) -> bool:
        """Transcribe a recording and send the text as a user message.

        Returns:
            True if a send cycle ran with the transcribed text.
        """
        if not audio or self._audio is None or self.is_processing:
            return False
        self._set_state(ConversationState.SENDING)
        self.add_log(LogType.AUDIO, "Processing audio recording")

        try:
            text = await self._audio.transcribe(audio, self.model_config, filename=filename)
        except SideChannelError as e:
            self.add_log(LogType.ERROR, "Error processing audio", str(e))
            self._notify("Audio Processing Error", "Failed to process audio recording.")
            self._set_state(ConversationState.IDLE)
            return False

        self.add_log(LogType.AUDIO, "Audio transcription completed", {"text": text})
        if not text.strip() and not self.files:
            self._set_state(ConversationState.IDLE)
            return False
        await self._run_cycle(text)
        return True

    async def _run_cycle(self, content: str) -> None:
        config = self.model_config
        try:
            await self._ensure_session(content)

            user_message = ChatMessage(role="user", content=content, files=list(self.files))
            history = [*self.messages, user_message]
            self.messages = history
            self.current_streamed_text = ""
            if self.files:
                self.clear_files()
            self._publish(EventKind.TRANSCRIPT_CHANGED, self.messages)
            self._persist(user_message)

            self.add_log(
                LogType.REQUEST,
                "Sending request to model API",
                {
                    "model": config.model,
                    "content": content,
                    "files": [f.name for f in user_message.files],
                    "parameters": {
                        "temperature": config.temperature,
                        "maxTokens": config.max_tokens,
                        "topP": config.top_p,
                        "reasoningEffort": config.reasoning_effort,
                    },
                },
            )

            failures: list[TransportError] = []
            text = ""
            try:
                if config.streaming:
                    self._set_state(ConversationState.STREAMING)
                    text = await self._transport.complete(
                        config,
                        history,
                        on_chunk=self._on_chunk,
                        on_error=failures.append,
                    )
                else:
                    self._set_state(ConversationState.WAITING)
                    text = await self._transport.complete(config, history)
            except TransportError as e:
                failures.append(e)
            except Exception as e:
                logger.exception("Unexpected error during generation")
                failures.append(TransportError(str(e) or type(e).__name__))

            if failures:
                self._fail(failures[0])
            else:
                await self._finalize(config, text)
        finally:
            self._set_state(ConversationState.IDLE)

    def _on_chunk(self, chunk: str) -> None:
        self.current_streamed_text = self.current_streamed_text + chunk
        self._publish(EventKind.STREAM_PROGRESS, self.current_streamed_text)

    async def _finalize(self, config: ModelConfig, text: str) -> None:
        self._set_state(ConversationState.FINALIZING)
        # An empty result never replaces text the user already saw.
        final_text = text or self.current_streamed_text

        audio_url: str | None = None
        if config.supports_audio and config.supports_audio_output and self._audio and final_text:
            try:
                audio_url = await self._audio.synthesize(final_text, config)
            except SideChannelError as e:
                self.add_log(LogType.ERROR, "Error generating audio response", str(e))

        assistant_message = ChatMessage(
            role="assistant",
            content=final_text,
            audio_url=audio_url,
        )
        self.messages = [*self.messages, assistant_message]
        self.current_streamed_text = ""
        self._publish(EventKind.TRANSCRIPT_CHANGED, self.messages)

        self.add_log(
            LogType.RESPONSE,
            "Received response from model API",
            {"model": config.model, "content": final_text},
        )
        self._persist(assistant_message)

    def _fail(self, error: TransportError) -> None:
        self._set_state(ConversationState.ERROR)
        description = str(error) or FALLBACK_ERROR
        self.add_log(LogType.ERROR, "Error calling model API", description)
        self._notify("API Error", description)

        transcript = list(self.messages)
        partial = self.current_streamed_text
        if partial:
            partial_message = ChatMessage(role="assistant", content=partial)
            transcript.append(partial_message)
            self._persist(partial_message)
        transcript.append(ChatMessage(role="system", content=f"Error: {description}"))

        self.messages = transcript
        self.current_streamed_text = ""
        self._publish(EventKind.TRANSCRIPT_CHANGED, self.messages)
