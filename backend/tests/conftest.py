"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest

from award_interpreter.interpretation.base import InterpretationBackend
from award_interpreter.persistence.store import InMemoryDocumentStore
from award_interpreter.schemas.document import RawDocument
from award_interpreter.schemas.proposal import (
    BasicFields,
    InterpretationProposal,
    ProposedScoreCondition,
    ProposedScoreRule,
    ProposedTeamManagement,
    ProposedTeamPosition,
    SpecificFields,
)
from award_interpreter.schemas.record import (
    CanonicalRecord,
    EfficientStarFields,
    ScoreCondition,
    ScoreRule,
    TeamManagement,
    TeamPosition,
)

# Deadline checks are relative to "today"; tests pin it.
TODAY = date(2025, 6, 1)


class StubBackend(InterpretationBackend):
    """Backend whose reply is fixed up front."""

    label = "stub"
    api_key_setting = "STUB_API_KEY"

    def __init__(self, reply: str = "", api_key: str = "test-key", error: Exception | None = None) -> None:
        super().__init__(api_key, "stub-model")
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def fake_pdf(pages: list[str | None], metadata: dict | None = None) -> MagicMock:
    """A stand-in for the object pdfplumber.open() returns."""
    pdf = MagicMock()
    pdf.pages = []
    for text in pages:
        page = MagicMock()
        page.extract_text.return_value = text
        pdf.pages.append(page)
    pdf.metadata = metadata or {}
    pdf.__enter__.return_value = pdf
    pdf.__exit__.return_value = False
    return pdf


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def pdf_document() -> RawDocument:
    return RawDocument(content=b"%PDF-1.4 test", filename="indicator.pdf", content_type="application/pdf")


@pytest.fixture
def sample_proposal() -> InterpretationProposal:
    return InterpretationProposal(
        award_type="efficient_star",
        basic_fields=BasicFields(
            title="  Best Chapter 2025 ",
            description="Recognises the chapter with the most active membership drive.",
            deadline="31/12/2025",
            external_link="https://jci.cc/awards",
        ),
        specific_fields=SpecificFields(no=3, guidelines="Submit evidence\nby email"),
        score_rules=[
            ProposedScoreRule(
                name="Membership growth",
                base_score=10,
                enabled=True,
                conditions=[
                    ProposedScoreCondition(type="memberCount", member_count=5, points=10),
                ],
            ),
            ProposedScoreRule(base_score=-4, conditions=[]),
        ],
        team_management=ProposedTeamManagement(
            positions=[
                ProposedTeamPosition(name="Project lead", is_required=True, max_members=1),
                ProposedTeamPosition(max_members=3),
            ],
        ),
        confidence=0.9,
        extracted_keywords=["JCI", "member"],
        notes="Looks complete.",
    )


@pytest.fixture
def valid_record() -> CanonicalRecord:
    """A record that passes every rule with no warnings (on the pinned date)."""
    return CanonicalRecord(
        title="Best Chapter 2025",
        description="A" * 50,
        deadline="2025-12-31",
        specific=EfficientStarFields(no=1),
        score_rules=[
            ScoreRule(
                id="rule_1",
                name="Membership growth",
                base_score=10,
                enabled=True,
                conditions=[
                    ScoreCondition(id="condition_1", type="memberCount", member_count=5, points=10),
                ],
            ),
        ],
        confidence=0.9,
        extracted_keywords=["JCI"],
        source_text="JCI Efficient Star indicator. Recruit 5 members to score 10 points.",
        source_filename="indicator.pdf",
    )


@pytest.fixture
def record_with_team(valid_record) -> CanonicalRecord:
    return valid_record.model_copy(update={
        "team_management": TeamManagement(positions=[
            TeamPosition(id="position_1", name="Project lead", is_required=True, max_members=1),
        ]),
    })


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()
