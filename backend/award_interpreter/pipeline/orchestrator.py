"""
InterpretationPipeline — end-to-end entry point.

    interpret(document, user_id)      → (CanonicalRecord, ValidationResult)
    persist(record, user_id)          → record id
    update(record_id, record, user_id) → record id
    revalidate(record)                → ValidationResult

`interpret` runs the four pipeline steps over a fresh context and never
writes anything.  Persistence is a separate call so a user can review
and correct the record first; both write paths refuse a record that
still has blocking validation errors.
"""

from __future__ import annotations

from award_interpreter.core.config import Settings, settings as default_settings
from award_interpreter.core.logging import get_logger
from award_interpreter.interpretation.base import InterpretationBackend
from award_interpreter.interpretation.factory import create_backend
from award_interpreter.persistence.store import DocumentStore, InMemoryDocumentStore
from award_interpreter.persistence.writer import PersistenceWriter
from award_interpreter.pipeline.context import PipelineContext
from award_interpreter.pipeline.engine import PipelineEngine
from award_interpreter.pipeline.errors import PipelineError, StepExecutionError, ValidationError
from award_interpreter.pipeline.step import PipelineStep
from award_interpreter.pipeline.steps.extract_text import ExtractTextStep
from award_interpreter.pipeline.steps.interpret_document import InterpretDocumentStep
from award_interpreter.pipeline.steps.map_canonical import MapCanonicalStep
from award_interpreter.pipeline.steps.validate_record import ValidateRecordStep
from award_interpreter.processing.extractors.pdf_extractor import PdfTextExtractor
from award_interpreter.processing.mapper import FieldMapper
from award_interpreter.schemas.document import RawDocument
from award_interpreter.schemas.record import CanonicalRecord
from award_interpreter.validation.business_rules import DataValidator, ValidationResult

logger = get_logger(__name__)


class InterpretationPipeline:
    """Composes extractor, backend, mapper, validator and writer."""

    def __init__(
        self,
        backend: InterpretationBackend,
        store: DocumentStore | None = None,
        *,
        extractor: PdfTextExtractor | None = None,
        mapper: FieldMapper | None = None,
        validator: DataValidator | None = None,
        engine: PipelineEngine | None = None,
    ) -> None:
        self.backend = backend
        self.extractor = extractor or PdfTextExtractor()
        self.mapper = mapper or FieldMapper()
        self.validator = validator or DataValidator()
        self.engine = engine or PipelineEngine()
        self.writer = PersistenceWriter(store or InMemoryDocumentStore(), source=backend.label)

    def build_steps(self) -> list[PipelineStep]:
        """The interpretation steps, in execution order."""
        return [
            ExtractTextStep(self.extractor),
            InterpretDocumentStep(self.backend),
            MapCanonicalStep(self.mapper),
            ValidateRecordStep(self.validator),
        ]

    # ═══════════════════════════════════════════
    #  Interpretation
    # ═══════════════════════════════════════════

    async def interpret(
        self,
        document: RawDocument,
        user_id: str = "system",
    ) -> tuple[CanonicalRecord, ValidationResult]:
        """
        Extract, interpret, map and validate one document.

        Raises:
            ExtractionError: the document was rejected or unreadable.
        """
        ctx = PipelineContext(document=document, user_id=user_id)
        result = await self.engine.run_steps(ctx, self.build_steps())

        if not result.succeeded:
            if isinstance(result.exception, PipelineError):
                raise result.exception
            raise StepExecutionError(
                result.error or "Interpretation failed",
                execution_id=result.execution_id,
                details={"steps_completed": result.steps_completed},
            ) from result.exception

        logger.info(
            "Document interpreted",
            execution_id=ctx.execution_id,
            filename=ctx.filename,
            award_type=str(ctx.record.award_type),
            confidence=ctx.record.confidence,
            is_valid=ctx.validation.is_valid,
        )
        return ctx.record, ctx.validation

    def revalidate(self, record: CanonicalRecord) -> ValidationResult:
        """Validate a (possibly hand-edited) record."""
        return self.validator.validate(record)

    # ═══════════════════════════════════════════
    #  Persistence
    # ═══════════════════════════════════════════

    async def persist(self, record: CanonicalRecord, user_id: str = "system") -> str:
        """
        Store a validated record.

        Raises:
            ValidationError: the record still has blocking errors; nothing is written.
            PersistenceError: the store rejected a write.
        """
        self._ensure_valid(record)
        return await self.writer.save(record, user_id)

    async def update(self, record_id: str, record: CanonicalRecord, user_id: str = "system") -> str:
        """Replace a stored record in place; same gate as persist()."""
        self._ensure_valid(record)
        return await self.writer.update(record_id, record, user_id)

    def _ensure_valid(self, record: CanonicalRecord) -> None:
        validation = self.revalidate(record)
        if not validation.is_valid:
            logger.warning(
                "Refusing to persist invalid record",
                title=record.title,
                error_codes=validation.codes("error"),
            )
            raise ValidationError(
                "Record has validation errors and cannot be saved",
                errors=validation.errors,
                details={"codes": validation.codes("error")},
            )


def create_pipeline(
    backend_name: str | None = None,
    store: DocumentStore | None = None,
    config: Settings | None = None,
) -> InterpretationPipeline:
    """Build a pipeline from settings (backend choice and document size limit)."""
    config = config or default_settings
    return InterpretationPipeline(
        create_backend(backend_name, config),
        store,
        extractor=PdfTextExtractor(max_bytes=config.MAX_DOCUMENT_BYTES),
    )
