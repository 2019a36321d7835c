"""Model-provider access for the playground.

Responsibilities:
    - Process-wide settings loaded once from the environment
    - Agno agent construction with OpenAI chat models
    - Decoding streamed run events into text fragments
    - Audio transcription and synthesis

Leverages the Agno framework for model calls.
Maintains clean separation from the HTTP layer.
"""

from playground.agent.audio import AudioService, get_audio_service
from playground.agent.config import Settings, get_settings
from playground.agent.model_service import ModelService, get_model_service
from playground.agent.stream_decoder import StreamDecoder

__all__ = [
    "AudioService",
    "ModelService",
    "Settings",
    "StreamDecoder",
    "get_audio_service",
    "get_model_service",
    "get_settings",
]
