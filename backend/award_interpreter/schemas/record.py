"""
CanonicalRecord — the normalized "standard" record.

Award-specific fields live in a discriminated union keyed by
`award_type`, so a record can only ever carry the fields of its own
award family.  Numeric payloads are typed `int | float` so that a
non-integer count survives to the validator instead of being rejected
at construction time.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field

from award_interpreter.core.constants import AwardType
from award_interpreter.schemas.base import CamelModel
from award_interpreter.schemas.proposal import InterpretationProposal

Number = int | float


# ─── Score rules ──────────────────────────────────────────

class ScoreCondition(CamelModel):
    id: str
    type: str
    member_count: Number | None = None
    non_member_count: Number | None = None
    total_count: Number | None = None
    activity_count: Number | None = None
    activity_type: str | None = None
    activity_category: str | None = None
    specific_activity: str | None = None
    partner_count: Number | None = None
    partner_type: str | None = None
    points: Number = 0
    description: str = ""


class ScoreRule(CamelModel):
    id: str
    name: str
    base_score: Number = 0
    description: str = ""
    enabled: bool = True
    conditions: list[ScoreCondition] = Field(default_factory=list)


# ─── Team management ──────────────────────────────────────

class TeamPosition(CamelModel):
    id: str
    name: str
    description: str = ""
    is_required: bool = False
    max_members: Number | None = None


class TeamManagement(CamelModel):
    positions: list[TeamPosition] = Field(default_factory=list)


# ─── Award-specific variants ──────────────────────────────

class EfficientStarFields(CamelModel):
    award_type: Literal["efficient_star"] = "efficient_star"
    no: Number | None = None
    guidelines: str | None = None


class StarPointFields(CamelModel):
    award_type: Literal["star_point"] = "star_point"
    objective: Number | None = None


class NationalAreaIncentiveFields(CamelModel):
    award_type: Literal["national_area_incentive"] = "national_area_incentive"
    national_allocation: str | None = None
    area_allocation: str | None = None
    status: str | None = None


AwardSpecificFields = Annotated[
    Union[EfficientStarFields, StarPointFields, NationalAreaIncentiveFields],
    Field(discriminator="award_type"),
]


# ─── Record ───────────────────────────────────────────────

class CanonicalRecord(CamelModel):
    title: str
    description: str
    deadline: str
    external_link: str | None = None
    category_id: str | None = None
    category: str | None = None
    specific: AwardSpecificFields
    score_rules: list[ScoreRule] = Field(default_factory=list)
    team_management: TeamManagement | None = None
    confidence: float = 0.0
    extracted_keywords: list[str] = Field(default_factory=list)
    notes: str = ""

    # provenance
    source_text: str = ""
    source_filename: str = ""
    proposal: InterpretationProposal | None = None

    @property
    def award_type(self) -> AwardType:
        return AwardType(self.specific.award_type)
