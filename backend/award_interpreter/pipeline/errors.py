"""
Domain-specific exception hierarchy for the interpretation pipeline.

All pipeline exceptions inherit from PipelineError so callers can
catch broadly or narrowly as needed.  Each exception carries structured
context (step name, execution ID, etc.) for logging/debugging.

Backend (LLM) failures are deliberately absent: every backend absorbs
them into a default proposal.  The mapper raises nothing and the
validator reports problems as data.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        *,
        execution_id: str | None = None,
        step_name: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.execution_id = execution_id
        self.step_name = step_name
        self.details = details or {}
        super().__init__(message)


class StepExecutionError(PipelineError):
    """A step failed during execution."""
    pass


class ExtractionError(PipelineError):
    """Text extraction from a document failed."""
    pass


class UnsupportedFormatError(ExtractionError):
    """The uploaded document is not a recognised PDF."""
    pass


class SizeLimitError(ExtractionError):
    """The uploaded document exceeds the configured size limit."""

    def __init__(
        self,
        message: str,
        *,
        size: int = 0,
        limit: int = 0,
        **kwargs,
    ) -> None:
        self.size = size
        self.limit = limit
        super().__init__(message, **kwargs)


class MappingError(PipelineError):
    """Mapping a proposal to the canonical schema failed."""
    pass


class ValidationError(PipelineError):
    """A canonical record still has blocking validation errors."""

    def __init__(
        self,
        message: str,
        *,
        errors: list[str] | None = None,
        **kwargs,
    ) -> None:
        self.errors = errors or []
        super().__init__(message, **kwargs)


class PersistenceError(PipelineError):
    """Writing a record or its child rows to the document store failed."""

    def __init__(
        self,
        message: str,
        *,
        collection: str | None = None,
        **kwargs,
    ) -> None:
        self.collection = collection
        super().__init__(message, **kwargs)
