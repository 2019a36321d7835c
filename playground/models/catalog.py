"""Known models grouped by category, with capability flags and context sizes."""

from pydantic import BaseModel

from playground.models.chat import ModelConfig


class ModelInfo(BaseModel):
    """Capabilities of a selectable model."""

    id: str
    supports_reasoning: bool = False
    supports_audio: bool = False
    supports_audio_output: bool = False


MODEL_CATEGORIES: dict[str, list[ModelInfo]] = {
    "reasoning": [
        ModelInfo(id="o3-mini", supports_reasoning=True),
        ModelInfo(id="o1", supports_reasoning=True),
        ModelInfo(id="o1-mini", supports_reasoning=True),
    ],
    "gpt": [
        ModelInfo(id="gpt-4o"),
        ModelInfo(id="gpt-4o-mini"),
        ModelInfo(id="gpt-4.5-preview"),
    ],
    "audio": [
        ModelInfo(id="gpt-4o-audio-preview", supports_audio=True, supports_audio_output=True),
        ModelInfo(id="gpt-4o-mini-audio-preview", supports_audio=True, supports_audio_output=True),
    ],
}

CONTEXT_SIZES: dict[str, int] = {
    "gpt-4o": 128000,
    "gpt-4o-mini": 128000,
    "gpt-4.5-preview": 128000,
    "gpt-4o-audio-preview": 128000,
    "gpt-4o-mini-audio-preview": 128000,
    "o1": 32000,
    "o1-mini": 32000,
    "o3-mini": 32000,
    "whisper-1": 0,
}
DEFAULT_CONTEXT_SIZE = 8000


def find_model(model_id: str) -> tuple[str, ModelInfo] | None:
    """Return `(category, info)` for a known model id, or None."""
    for category, models in MODEL_CATEGORIES.items():
        for info in models:
            if info.id == model_id:
                return category, info
    return None


def is_reasoning_model(model_id: str) -> bool:
    found = find_model(model_id)
    return found is not None and found[1].supports_reasoning


def capability_changes(category: str, info: ModelInfo) -> dict[str, object]:
    """Config fields to update when a model is selected."""
    return {
        "model": info.id,
        "model_category": category,
        "supports_reasoning": info.supports_reasoning,
        "supports_audio": info.supports_audio,
        "supports_audio_output": info.supports_audio_output,
    }


def max_context_size(model_id: str) -> int:
    # Unknown models fall back to a conservative window.
    return CONTEXT_SIZES.get(model_id) or DEFAULT_CONTEXT_SIZE


def default_model_config() -> ModelConfig:
    """Initial configuration for a fresh playground page."""
    return ModelConfig(model="gpt-4o", model_category="gpt")
