"""
Pipeline Engine — step-based orchestration of document interpretation.

This package provides the step engine that takes an uploaded award
document through extraction, interpretation, canonical mapping and
validation, with per-step logging and error handling.
"""

from award_interpreter.pipeline.context import PipelineContext, StepResult
from award_interpreter.pipeline.engine import PipelineEngine, PipelineResult
from award_interpreter.pipeline.step import PipelineStep

__all__ = ["PipelineEngine", "PipelineResult", "PipelineContext", "PipelineStep", "StepResult"]
