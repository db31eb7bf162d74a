"""
Backend selection.

Backends are built per orchestrator and injected; there are no module
level backend instances.
"""

from __future__ import annotations

from award_interpreter.core.config import Settings, settings as default_settings
from award_interpreter.interpretation.base import InterpretationBackend
from award_interpreter.interpretation.gemini_backend import GeminiBackend
from award_interpreter.interpretation.openai_backend import OpenAIBackend

PRIMARY_NAMES = {"primary", "openai", "chatgpt"}
SECONDARY_NAMES = {"secondary", "gemini"}


def create_backend(
    name: str | None = None,
    config: Settings | None = None,
) -> InterpretationBackend:
    """
    Build the backend called `name` (defaults to INTERPRETATION_BACKEND).

    Raises:
        ValueError: `name` is not a known backend.
    """
    config = config or default_settings
    key = (name or config.INTERPRETATION_BACKEND).strip().lower()
    generation = {
        "temperature": config.LLM_TEMPERATURE,
        "max_tokens": config.LLM_MAX_TOKENS,
        "timeout": config.LLM_TIMEOUT_SECONDS,
    }

    if key in PRIMARY_NAMES:
        return OpenAIBackend(
            config.OPENAI_API_KEY,
            config.OPENAI_MODEL,
            base_url=config.OPENAI_BASE_URL,
            **generation,
        )
    if key in SECONDARY_NAMES:
        return GeminiBackend(
            config.GOOGLE_API_KEY,
            config.GEMINI_MODEL,
            **generation,
        )
    raise ValueError(f"Unknown interpretation backend: {name!r}")
