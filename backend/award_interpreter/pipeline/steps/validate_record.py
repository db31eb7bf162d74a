"""
ValidateRecordStep — repairs common issues, then applies business rules.

Validation findings are data: this step completes even when the record
has errors.  Blocking happens later, at persistence time.
"""

from __future__ import annotations

from award_interpreter.core.logging import get_logger
from award_interpreter.pipeline.context import PipelineContext, StepResult
from award_interpreter.pipeline.errors import StepExecutionError
from award_interpreter.pipeline.step import PipelineStep
from award_interpreter.validation.business_rules import DataValidator, fix_common_issues

logger = get_logger(__name__)


class ValidateRecordStep(PipelineStep):
    """Run fix_common_issues then DataValidator on the canonical record."""

    name = "validate_record"
    description = "Apply business rules to the canonical record"

    def __init__(self, validator: DataValidator) -> None:
        self.validator = validator

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()

        if ctx.record is None:
            raise StepExecutionError("No canonical record to validate")

        ctx.record = fix_common_issues(ctx.record, today=self.validator.today)
        ctx.validation = self.validator.validate(ctx.record)

        if not ctx.validation.is_valid:
            logger.info(
                "Record needs manual correction",
                filename=ctx.filename,
                error_codes=ctx.validation.codes("error"),
            )

        return self._success(started_at, metadata={
            "is_valid": ctx.validation.is_valid,
            "errors": len(ctx.validation.errors),
            "warnings": len(ctx.validation.warnings),
        })
