"""Model settings for chat agents, gated by model capability."""

from __future__ import annotations

from typing import Any

from pydantic_ai.settings import ModelSettings

_REASONING_PREFIXES = ("o1", "o3", "o4", "gpt-5")


def is_reasoning_model(model_name: str | None) -> bool:
    return bool(model_name) and model_name.strip().lower().startswith(
        _REASONING_PREFIXES
    )


def build_model_settings(
    model_name: str | None,
    *,
    temperature: float | None = None,
) -> ModelSettings:
    """Create ModelSettings, dropping sampling kwargs reasoning models reject."""
    kwargs: dict[str, Any] = {}
    if temperature is not None and not is_reasoning_model(model_name):
        kwargs["temperature"] = temperature
    return ModelSettings(**kwargs)
