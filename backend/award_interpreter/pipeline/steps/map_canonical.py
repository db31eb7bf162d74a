"""
MapCanonicalStep — maps the backend proposal to the canonical record schema.
"""

from __future__ import annotations

from award_interpreter.pipeline.context import PipelineContext, StepResult
from award_interpreter.pipeline.errors import MappingError
from award_interpreter.pipeline.step import PipelineStep
from award_interpreter.processing.mapper import FieldMapper


class MapCanonicalStep(PipelineStep):
    """Map the proposal on the context to a CanonicalRecord."""

    name = "map_canonical"
    description = "Map proposal to canonical award record"

    def __init__(self, mapper: FieldMapper) -> None:
        self.mapper = mapper

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()

        if ctx.proposal is None:
            raise MappingError("No proposal to map", details={"filename": ctx.filename})

        ctx.record = self.mapper.map_to_canonical(ctx.proposal, ctx.cleaned_text, ctx.filename)

        return self._success(started_at, metadata={
            "award_type": ctx.record.award_type,
            "deadline": ctx.record.deadline,
            "score_rules": len(ctx.record.score_rules),
            "team_positions": (
                len(ctx.record.team_management.positions) if ctx.record.team_management else 0
            ),
        })
