"""
InterpretationProposal — the backend's best-effort structured guess.

Field names follow the JSON shape the backends are asked to return
(camelCase aliases).  Values here have already been through
standardization (see interpretation.parsing) but are NOT yet
sanitized or narrowed to an award type; that is the mapper's job.

Proposals are frozen once a backend returns them.
"""

from __future__ import annotations

from pydantic import ConfigDict, Field

from award_interpreter.core.constants import AwardType, IncentiveStatus
from award_interpreter.schemas.base import CamelModel


class FrozenCamelModel(CamelModel):
    model_config = ConfigDict(frozen=True)


# ─── Score rules ──────────────────────────────────────────

class ProposedScoreCondition(FrozenCamelModel):
    """A single condition as proposed by the backend; `type` is unchecked here."""

    id: str | None = None
    type: str = "memberCount"
    member_count: float | None = None
    non_member_count: float | None = None
    total_count: float | None = None
    activity_count: float | None = None
    activity_type: str | None = None
    activity_category: str | None = None
    specific_activity: str | None = None
    partner_count: float | None = None
    partner_type: str | None = None
    points: float = 0
    description: str = ""


class ProposedScoreRule(FrozenCamelModel):
    id: str | None = None
    name: str | None = None
    base_score: float = 0
    description: str = ""
    enabled: bool = False
    conditions: list[ProposedScoreCondition] = Field(default_factory=list)


# ─── Team management ──────────────────────────────────────

class ProposedTeamPosition(FrozenCamelModel):
    id: str | None = None
    name: str | None = None
    description: str = ""
    is_required: bool = False
    max_members: float | None = None


class ProposedTeamManagement(FrozenCamelModel):
    positions: list[ProposedTeamPosition] = Field(default_factory=list)


# ─── Field groups ─────────────────────────────────────────

class BasicFields(FrozenCamelModel):
    title: str
    description: str
    deadline: str
    external_link: str | None = None


class CategoryFields(FrozenCamelModel):
    category_id: str | None = None
    category: str | None = None


class SpecificFields(FrozenCamelModel):
    """Flat bag of every award-specific field; only some apply to a given award type."""

    no: float | None = None
    guidelines: str | None = None
    objective: float | None = None
    national_allocation: str | None = None
    area_allocation: str | None = None
    status: str | None = IncentiveStatus.OPEN


# ─── Proposal ─────────────────────────────────────────────

class InterpretationProposal(FrozenCamelModel):
    award_type: AwardType
    basic_fields: BasicFields
    category_fields: CategoryFields = Field(default_factory=CategoryFields)
    specific_fields: SpecificFields = Field(default_factory=SpecificFields)
    score_rules: list[ProposedScoreRule] = Field(default_factory=list)
    team_management: ProposedTeamManagement | None = None
    confidence: float = 0.5
    extracted_keywords: list[str] = Field(default_factory=list)
    notes: str = ""
