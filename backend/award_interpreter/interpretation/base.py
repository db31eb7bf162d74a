"""
InterpretationBackend — abstract base for every text-generation backend.

A backend turns extracted document text into an InterpretationProposal.
It must ALWAYS return a proposal: when it is not configured, when the
remote call fails, or when the reply can't be parsed, it returns the
deterministic default proposal instead of raising.

Subclasses only implement generate(prompt) -> str.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from award_interpreter.core.constants import AwardType, IncentiveStatus
from award_interpreter.core.logging import get_logger
from award_interpreter.interpretation.parsing import PLACEHOLDER_DEADLINE, parse_response
from award_interpreter.interpretation.prompts import build_interpretation_prompt
from award_interpreter.schemas.proposal import (
    BasicFields,
    InterpretationProposal,
    SpecificFields,
)

logger = get_logger(__name__)

DEFAULT_CONFIDENCE = 0.1


def default_proposal(api_key_setting: str) -> InterpretationProposal:
    """The fixed low-confidence proposal returned whenever interpretation is unavailable."""
    return InterpretationProposal(
        award_type=AwardType.EFFICIENT_STAR,
        basic_fields=BasicFields(
            title="PDF interpretation result",
            description=(
                "The PDF was parsed successfully, but AI interpretation is unavailable. "
                "Please fill in the fields manually."
            ),
            deadline=PLACEHOLDER_DEADLINE,
        ),
        specific_fields=SpecificFields(status=IncentiveStatus.OPEN),
        score_rules=[],
        team_management=None,
        confidence=DEFAULT_CONFIDENCE,
        extracted_keywords=[],
        notes=(
            "PDF parsed, but AI interpretation did not produce a result. "
            "Manual entry is required. "
            f"Configure a valid {api_key_setting} to enable AI interpretation."
        ),
    )


class InterpretationBackend(ABC):
    """
    Base class for interpretation backends.

    Subclasses MUST set:
        - label (str)            — short name stored as interpretation source
        - api_key_setting (str)  — settings field that enables the backend
    and implement generate(prompt).
    """

    label: str = "base"
    api_key_setting: str = ""

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        temperature: float = 0.1,
        max_tokens: int = 3000,
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_prompt(self, text: str, filename: str) -> str:
        return build_interpretation_prompt(text, filename)

    def default_proposal(self) -> InterpretationProposal:
        return default_proposal(self.api_key_setting)

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Send `prompt` to the remote service and return its raw text reply."""
        ...

    async def interpret(self, text: str, filename: str) -> InterpretationProposal:
        """Interpret document text; never raises for backend-side failures."""
        log = logger.bind(backend=self.label, model=self.model, filename=filename)

        if not self.is_configured():
            log.warning("Backend not configured, using default proposal", setting=self.api_key_setting)
            return self.default_proposal()

        prompt = self.build_prompt(text, filename)
        log.info("Calling interpretation backend", prompt_length=len(prompt))

        try:
            reply = await self.generate(prompt)
        except Exception as exc:
            log.warning(
                "Backend call failed, using default proposal",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return self.default_proposal()

        proposal = parse_response(reply, self.default_proposal())
        log.info(
            "Interpretation complete",
            award_type=proposal.award_type,
            confidence=proposal.confidence,
            score_rules=len(proposal.score_rules),
            keywords=len(proposal.extracted_keywords),
        )
        return proposal
