"""
Interpretation backends — turn document text into structured proposals.
"""

from award_interpreter.interpretation.base import InterpretationBackend, default_proposal
from award_interpreter.interpretation.factory import create_backend
from award_interpreter.interpretation.gemini_backend import GeminiBackend
from award_interpreter.interpretation.openai_backend import OpenAIBackend

__all__ = [
    "GeminiBackend",
    "InterpretationBackend",
    "OpenAIBackend",
    "create_backend",
    "default_proposal",
]
