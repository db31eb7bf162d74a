import json
from unittest.mock import patch

import pytest

from conftest import TODAY, StubBackend, fake_pdf

from award_interpreter.core.config import Settings
from award_interpreter.core.constants import AwardType, Collection
from award_interpreter.interpretation.base import default_proposal
from award_interpreter.interpretation.openai_backend import OpenAIBackend
from award_interpreter.pipeline.errors import (
    ExtractionError,
    PersistenceError,
    SizeLimitError,
    UnsupportedFormatError,
    ValidationError,
)
from award_interpreter.pipeline.orchestrator import InterpretationPipeline, create_pipeline
from award_interpreter.processing.extractors.pdf_extractor import PdfTextExtractor
from award_interpreter.processing.mapper import FieldMapper
from award_interpreter.schemas.document import RawDocument
from award_interpreter.validation.business_rules import DataValidator

PDFPLUMBER_OPEN = "award_interpreter.processing.extractors.pdf_extractor.pdfplumber.open"

PAGES = [
    "JCI Efficient Star 2025\nPage 1 of 2",
    "Deadline: 2025-12-31. Recruit 5 new members to earn 10 points.\n2",
]

REPLY = "Here is the result:\n```json\n" + json.dumps({
    "awardType": "efficient_star",
    "basicFields": {
        "title": "Best Chapter 2025",
        "description": "Recruit new members during the 2025 membership drive.",
        "deadline": "31/12/2025",
    },
    "specificFields": {"no": 1},
    "scoreRules": [{
        "name": "Membership growth",
        "baseScore": 10,
        "enabled": True,
        "conditions": [{"type": "memberCount", "memberCount": 5, "points": 10}],
    }],
    "confidence": 0.85,
    "extractedKeywords": ["JCI", "member"],
    "notes": "Clear document.",
}) + "\n```"


def _pipeline(backend, store=None):
    return InterpretationPipeline(
        backend,
        store,
        mapper=FieldMapper(today=TODAY),
        validator=DataValidator(today=TODAY),
    )


class TestInterpret:

    @pytest.mark.asyncio
    async def test_end_to_end(self, pdf_document):
        backend = StubBackend(reply=REPLY)
        with patch(PDFPLUMBER_OPEN, return_value=fake_pdf(PAGES)):
            record, validation = await _pipeline(backend).interpret(pdf_document, "user-1")

        assert record.award_type == AwardType.EFFICIENT_STAR
        assert record.deadline == "2025-12-31"
        assert record.score_rules[0].conditions[0].member_count == 5
        assert record.source_filename == "indicator.pdf"
        assert "Page 1 of 2" not in record.source_text
        assert record.proposal.confidence == 0.85
        assert validation.is_valid
        assert validation.warnings == []

        prompt = backend.prompts[0]
        assert "indicator.pdf" in prompt
        assert "Recruit 5 new members" in prompt

    @pytest.mark.asyncio
    async def test_backend_failure_yields_default_record(self, pdf_document):
        backend = StubBackend(error=ConnectionError("network down"))
        with patch(PDFPLUMBER_OPEN, return_value=fake_pdf(PAGES)):
            record, validation = await _pipeline(backend).interpret(pdf_document)

        assert record.title == "PDF interpretation result"
        assert record.confidence == 0.1
        assert record.proposal == default_proposal("STUB_API_KEY")
        assert validation.is_valid
        assert "score_rules_empty" in validation.codes()
        assert "confidence_low" in validation.codes()

    @pytest.mark.asyncio
    async def test_unconfigured_openai_backend(self, pdf_document):
        backend = OpenAIBackend("")
        with patch(PDFPLUMBER_OPEN, return_value=fake_pdf(PAGES)):
            record, _ = await _pipeline(backend).interpret(pdf_document)

        assert "OPENAI_API_KEY" in record.notes

    @pytest.mark.asyncio
    async def test_rejects_non_pdf(self):
        document = RawDocument(content=b"a,b", filename="list.csv", content_type="text/csv")
        backend = StubBackend(reply=REPLY)

        with pytest.raises(UnsupportedFormatError):
            await _pipeline(backend).interpret(document)
        assert backend.prompts == []

    @pytest.mark.asyncio
    async def test_rejects_oversized(self):
        pipeline = InterpretationPipeline(StubBackend(reply=REPLY), extractor=PdfTextExtractor(max_bytes=4))

        with pytest.raises(SizeLimitError):
            await pipeline.interpret(RawDocument(content=b"%PDF-1.4", filename="a.pdf"))

    @pytest.mark.asyncio
    async def test_unreadable_pdf(self, pdf_document):
        with patch(PDFPLUMBER_OPEN, side_effect=Exception("broken xref")):
            with pytest.raises(ExtractionError):
                await _pipeline(StubBackend(reply=REPLY)).interpret(pdf_document)

    @pytest.mark.asyncio
    async def test_runs_do_not_share_state(self, pdf_document):
        pipeline = _pipeline(StubBackend(reply=REPLY))
        with patch(PDFPLUMBER_OPEN, side_effect=[fake_pdf(PAGES), fake_pdf(["Other text"])]):
            first, _ = await pipeline.interpret(pdf_document)
            second, _ = await pipeline.interpret(pdf_document)

        assert first.source_text != second.source_text
        assert first.score_rules[0].id != second.score_rules[0].id


class TestPersist:

    @pytest.mark.asyncio
    async def test_persist_valid_record(self, memory_store, valid_record):
        pipeline = _pipeline(StubBackend(), memory_store)

        record_id = await pipeline.persist(valid_record, "user-1")

        base = await memory_store.get(Collection.STANDARDS, record_id)
        assert base["interpretationSource"] == "stub"
        assert base["createdBy"] == "user-1"

    @pytest.mark.asyncio
    async def test_invalid_record_writes_nothing(self, memory_store, valid_record):
        pipeline = _pipeline(StubBackend(), memory_store)
        invalid = valid_record.model_copy(update={"title": "", "deadline": "31/12/2025"})

        with pytest.raises(ValidationError) as exc_info:
            await pipeline.persist(invalid)

        assert exc_info.value.details["codes"] == ["title_required", "deadline_invalid"]
        assert len(exc_info.value.errors) == 2
        for collection in Collection:
            assert memory_store.count(collection) == 0

    @pytest.mark.asyncio
    async def test_update_after_manual_edit(self, memory_store, valid_record):
        pipeline = _pipeline(StubBackend(), memory_store)
        record_id = await pipeline.persist(valid_record)

        edited = valid_record.model_copy(update={"title": "Edited title"})
        assert pipeline.revalidate(edited).is_valid
        assert await pipeline.update(record_id, edited) == record_id

        base = await memory_store.get(Collection.STANDARDS, record_id)
        assert base["title"] == "Edited title"

    @pytest.mark.asyncio
    async def test_update_is_gated(self, memory_store, valid_record):
        pipeline = _pipeline(StubBackend(), memory_store)
        record_id = await pipeline.persist(valid_record)

        with pytest.raises(ValidationError):
            await pipeline.update(record_id, valid_record.model_copy(update={"description": ""}))

        base = await memory_store.get(Collection.STANDARDS, record_id)
        assert base["description"] == valid_record.description

    @pytest.mark.asyncio
    async def test_store_failure_surfaces(self, memory_store, valid_record):
        async def broken(collection, fields):
            raise OSError("disk full")

        memory_store.create = broken
        pipeline = _pipeline(StubBackend(), memory_store)

        with pytest.raises(PersistenceError):
            await pipeline.persist(valid_record)


class TestCreatePipeline:

    def test_builds_from_settings(self):
        config = Settings(INTERPRETATION_BACKEND="gemini", GOOGLE_API_KEY="g", MAX_DOCUMENT_BYTES=1024)
        pipeline = create_pipeline(config=config)

        assert pipeline.backend.label == "gemini"
        assert pipeline.extractor.max_bytes == 1024
        assert pipeline.writer.source == "gemini"

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_pipeline("nope", config=Settings())

    def test_uses_real_date_by_default(self):
        pipeline = create_pipeline(config=Settings())
        assert pipeline.validator.today is None
