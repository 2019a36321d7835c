"""Exception taxonomy for the playground.

Primary-path errors (configuration, transport) are surfaced to the user.
Side-channel errors (audio, persistence) are logged and swallowed by the
conversation controller.
"""


class PlaygroundError(Exception):
    """Base class for all playground errors."""


class ConfigurationError(PlaygroundError):
    """Raised when a required setting such as the API key is missing."""


class TransportError(PlaygroundError):
    """Raised when a generation request fails at the network or provider level."""


class StreamDecodeError(TransportError):
    """Raised when the provider emits an event that cannot be decoded."""


class SideChannelError(PlaygroundError):
    """Raised by audio and persistence collaborators."""


class FileParseError(PlaygroundError):
    """Raised when an uploaded file cannot be ingested."""


class SessionNotFoundError(PlaygroundError):
    """Raised when a chat session id is unknown to the store."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Chat session not found: {session_id}")
        self.session_id = session_id
