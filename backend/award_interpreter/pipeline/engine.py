"""
PipelineEngine — runs steps sequentially against one context.

Responsibilities:
    - Execute each step with timing, logging, and error handling
    - Stop at the first failed step and give it a chance to roll back
    - Keep the failing exception so the caller can surface it
    - Return a complete PipelineResult

There are no retries: the only remote call in the pipeline (the
interpretation backend) already degrades to a default proposal.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

from award_interpreter.core.constants import PipelineStatus, StepStatus
from award_interpreter.pipeline.context import PipelineContext, StepResult
from award_interpreter.pipeline.errors import PipelineError
from award_interpreter.pipeline.step import PipelineStep


@dataclass
class PipelineResult:
    """Final outcome of a pipeline execution."""

    execution_id: str
    status: str                     # PipelineStatus value
    started_at: datetime | None = None
    completed_at: datetime | None = None
    total_duration_ms: int = 0
    steps_completed: int = 0
    total_steps: int = 0
    step_results: list[dict[str, Any]] = field(default_factory=list)
    context_summary: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    exception: BaseException | None = field(default=None, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.status == PipelineStatus.COMPLETED


class PipelineEngine:
    """
    Runs a sequence of PipelineStep objects against a PipelineContext.

    Usage::

        engine = PipelineEngine()
        result = await engine.run_steps(ctx, [ExtractTextStep(extractor), ...])
    """

    def __init__(self) -> None:
        self.logger = structlog.get_logger("pipeline.engine")

    async def run_steps(
        self,
        ctx: PipelineContext,
        steps: list[PipelineStep],
    ) -> PipelineResult:
        """Execute an ordered list of steps against a context."""
        started_at = datetime.now(timezone.utc)
        ctx.total_steps = len(steps)

        log = self.logger.bind(
            execution_id=ctx.execution_id,
            filename=ctx.filename,
            total_steps=len(steps),
        )
        log.info("Pipeline started", user_id=ctx.user_id)

        pipeline_status = PipelineStatus.RUNNING
        steps_completed = 0
        failure: StepResult | None = None

        for index, step in enumerate(steps):
            ctx.current_step_index = index
            step_number = index + 1

            step_log = log.bind(
                step_name=step.name,
                step_index=step_number,
                step_description=step.description,
            )

            # ── Check skip condition ──────────────────
            try:
                if await step.should_skip(ctx):
                    step_log.info("Step skipped")
                    skip_result = StepResult(
                        step_name=step.name,
                        status=StepStatus.SKIPPED,
                        started_at=datetime.now(timezone.utc),
                        completed_at=datetime.now(timezone.utc),
                    )
                    ctx.step_results.append(skip_result)
                    steps_completed += 1
                    continue
            except Exception as exc:
                step_log.warning("should_skip raised, running step anyway", error=str(exc))

            step_log.info(f"Step {step_number}/{len(steps)}: {step.description}")

            result = await self._execute(step, ctx, step_log)
            ctx.step_results.append(result)

            if result.status == StepStatus.COMPLETED:
                steps_completed += 1
                step_log.info(
                    "Step completed",
                    duration_ms=result.duration_ms,
                    metadata=result.metadata,
                )
                continue

            step_log.error(
                "Step failed, pipeline stopping",
                error=result.error,
                duration_ms=result.duration_ms,
            )
            ctx.add_error(f"Step '{step.name}' failed: {result.error}")
            pipeline_status = PipelineStatus.FAILED
            failure = result

            try:
                await step.rollback(ctx)
            except Exception as rollback_exc:
                step_log.warning("Rollback failed", error=str(rollback_exc))
            break

        # ── Finalise ──────────────────────────────────
        completed_at = datetime.now(timezone.utc)
        total_duration_ms = int((completed_at - started_at).total_seconds() * 1000)

        if pipeline_status != PipelineStatus.FAILED:
            pipeline_status = PipelineStatus.COMPLETED

        log.info(
            "Pipeline finished",
            status=pipeline_status,
            steps_completed=steps_completed,
            duration_ms=total_duration_ms,
        )

        return PipelineResult(
            execution_id=ctx.execution_id,
            status=pipeline_status,
            started_at=started_at,
            completed_at=completed_at,
            total_duration_ms=total_duration_ms,
            steps_completed=steps_completed,
            total_steps=len(steps),
            step_results=[sr.to_dict() for sr in ctx.step_results],
            context_summary=ctx.to_summary_dict(),
            error=failure.error if failure else None,
            exception=failure.exception if failure else None,
        )

    async def _execute(
        self,
        step: PipelineStep,
        ctx: PipelineContext,
        log: structlog.stdlib.BoundLogger,
    ) -> StepResult:
        """Execute a step, turning any raised exception into a failed StepResult."""
        started_at = datetime.now(timezone.utc)
        try:
            return await step.execute(ctx)

        except PipelineError as exc:
            if exc.execution_id is None:
                exc.execution_id = ctx.execution_id
            if exc.step_name is None:
                exc.step_name = step.name
            return StepResult(
                step_name=step.name,
                status=StepStatus.FAILED,
                started_at=started_at,
                completed_at=datetime.now(timezone.utc),
                error=str(exc),
                metadata={"error_type": type(exc).__name__, **exc.details},
                exception=exc,
            )

        except Exception as exc:
            log.exception("Unexpected error in step", error=str(exc))
            return StepResult(
                step_name=step.name,
                status=StepStatus.FAILED,
                started_at=started_at,
                completed_at=datetime.now(timezone.utc),
                error=f"Unexpected: {exc}",
                metadata={"traceback": traceback.format_exc()},
                exception=exc,
            )
