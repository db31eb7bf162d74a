"""
PipelineContext — mutable state object carried through every step.

This is the single source of truth for one interpretation run.  Each
step reads from and writes to the context.  Nothing on it is shared
between runs: the orchestrator builds a fresh context per document.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from award_interpreter.schemas.document import ExtractedText, KeyInformation, RawDocument
    from award_interpreter.schemas.proposal import InterpretationProposal
    from award_interpreter.schemas.record import CanonicalRecord
    from award_interpreter.validation.business_rules import ValidationResult


# ═══════════════════════════════════════════════════════════
#  StepResult
# ═══════════════════════════════════════════════════════════

@dataclass
class StepResult:
    """Outcome of a single pipeline step execution."""

    step_name: str
    status: str                     # StepStatus value
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    # The exception that failed the step, kept so callers can re-raise it.
    exception: BaseException | None = field(default=None, repr=False)

    def to_dict(self) -> dict[str, Any]:
        """Serialise for logging."""
        return {
            "step_name": self.step_name,
            "status": self.status,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "metadata": self.metadata,
        }


# ═══════════════════════════════════════════════════════════
#  PipelineContext
# ═══════════════════════════════════════════════════════════

@dataclass
class PipelineContext:
    """
    Carries all state between pipeline steps.

    Populated progressively: extraction fills in the text, the backend
    step fills in the proposal, mapping builds the canonical record and
    validation attaches the result.
    """

    # ─── Identity (set at init) ────────────────────────
    document: RawDocument
    user_id: str
    execution_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    # ─── Extraction ────────────────────────────────────
    extracted: ExtractedText | None = None
    cleaned_text: str = ""
    key_information: KeyInformation | None = None

    # ─── Interpretation ────────────────────────────────
    backend_label: str = ""
    proposal: InterpretationProposal | None = None

    # ─── Canonical record + validation ─────────────────
    record: CanonicalRecord | None = None
    validation: ValidationResult | None = None

    # ─── Execution tracking ────────────────────────────
    current_step_index: int = 0
    total_steps: int = 0
    step_results: list[StepResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def filename(self) -> str:
        return self.document.filename

    # ─── General helpers ───────────────────────────────

    def add_error(self, error: str) -> None:
        """Record a non-fatal error."""
        self.errors.append(error)

    def to_summary_dict(self) -> dict[str, Any]:
        """Compact summary for logging."""
        return {
            "execution_id": self.execution_id,
            "user_id": self.user_id,
            "filename": self.filename,
            "document_bytes": self.document.size,
            "pages": self.extracted.pages if self.extracted else 0,
            "text_length": len(self.cleaned_text),
            "backend": self.backend_label,
            "award_type": self.record.award_type if self.record else None,
            "score_rules": len(self.record.score_rules) if self.record else 0,
            "validation_errors": len(self.validation.errors) if self.validation else 0,
            "validation_warnings": len(self.validation.warnings) if self.validation else 0,
            "steps_completed": len(self.step_results),
            "total_steps": self.total_steps,
            "errors": self.errors,
        }
