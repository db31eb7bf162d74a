"""
InterpretDocumentStep — asks the configured backend for a structured proposal.

The backend never raises for its own failures, so this step always
completes; a fallback is visible as the default proposal's low
confidence.
"""

from __future__ import annotations

from award_interpreter.interpretation.base import InterpretationBackend
from award_interpreter.pipeline.context import PipelineContext, StepResult
from award_interpreter.pipeline.step import PipelineStep


class InterpretDocumentStep(PipelineStep):
    """Interpret cleaned text with an interpretation backend."""

    name = "interpret_document"
    description = "Interpret document text into a structured proposal"

    def __init__(self, backend: InterpretationBackend) -> None:
        self.backend = backend

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()

        ctx.backend_label = self.backend.label
        ctx.proposal = await self.backend.interpret(ctx.cleaned_text, ctx.filename)

        return self._success(started_at, metadata={
            "backend": self.backend.label,
            "award_type": ctx.proposal.award_type,
            "confidence": ctx.proposal.confidence,
            "score_rules": len(ctx.proposal.score_rules),
        })
