"""Client-side conversation orchestration.

Responsibilities:
    - Transport adapter for the generation endpoint (single or streamed)
    - Chunk relay feeding incremental renders
    - Conversation controller state machine with observer events
    - Session-store and audio collaborator clients
    - Transcript export

Contains no UI code. Renderers subscribe to controller events.
"""

from playground.conversation.collaborators import AudioClient, FileClient, SessionStoreClient
from playground.conversation.controller import (
    ConversationController,
    ConversationEvent,
    ConversationState,
    EventKind,
    Notification,
)
from playground.conversation.relay import ChunkRelay
from playground.conversation.transport import GenerationTransport

__all__ = [
    "AudioClient",
    "ChunkRelay",
    "ConversationController",
    "ConversationEvent",
    "ConversationState",
    "EventKind",
    "FileClient",
    "GenerationTransport",
    "Notification",
    "SessionStoreClient",
]
