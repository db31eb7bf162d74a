"""
Canonical Schema Mapper — maps an InterpretationProposal to a CanonicalRecord.

Mapping is total: any proposal, however poor, yields a structurally
valid record.  Semantic problems are left for the validator to report.

    - strings are sanitized (see processing.coercion)
    - the deadline is normalized to YYYY-MM-DD (see processing.dates)
    - only the award type's own specific fields are carried over
    - every rule, condition and position gets a fresh id
"""

from __future__ import annotations

import uuid
from datetime import date

from award_interpreter.core.constants import AwardType, ConditionType
from award_interpreter.core.logging import get_logger
from award_interpreter.processing.coercion import (
    coerce_bool,
    non_negative_number,
    optional_non_negative_number,
    optional_number,
    optional_string,
    sanitize_string,
)
from award_interpreter.processing.dates import normalize_date
from award_interpreter.schemas.proposal import (
    InterpretationProposal,
    ProposedScoreCondition,
    ProposedScoreRule,
    ProposedTeamManagement,
)
from award_interpreter.schemas.record import (
    CanonicalRecord,
    EfficientStarFields,
    NationalAreaIncentiveFields,
    ScoreCondition,
    ScoreRule,
    StarPointFields,
    TeamManagement,
    TeamPosition,
)

logger = get_logger(__name__)


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


class FieldMapper:
    """Map backend proposals onto the canonical record schema."""

    def __init__(self, today: date | None = None) -> None:
        # Pinned "today" for the deadline fallback; None means the real date.
        self.today = today

    def map_to_canonical(
        self,
        proposal: InterpretationProposal,
        extracted_text: str,
        filename: str = "",
    ) -> CanonicalRecord:
        basic = proposal.basic_fields
        category = proposal.category_fields

        record = CanonicalRecord(
            title=sanitize_string(basic.title),
            description=sanitize_string(basic.description),
            deadline=normalize_date(basic.deadline, today=self.today),
            external_link=optional_string(basic.external_link),
            category_id=optional_string(category.category_id),
            category=optional_string(category.category),
            specific=self.map_specific_fields(proposal),
            score_rules=self.map_score_rules(proposal.score_rules),
            team_management=self.map_team_management(proposal.team_management),
            confidence=proposal.confidence,
            extracted_keywords=list(proposal.extracted_keywords),
            notes=proposal.notes,
            source_text=extracted_text,
            source_filename=filename,
            proposal=proposal,
        )

        logger.info(
            "Canonical mapping complete",
            award_type=record.award_type,
            deadline=record.deadline,
            score_rules=len(record.score_rules),
            has_team_management=record.team_management is not None,
        )
        return record

    # ─── Specific fields ───────────────────────────────

    @staticmethod
    def map_specific_fields(
        proposal: InterpretationProposal,
    ) -> EfficientStarFields | StarPointFields | NationalAreaIncentiveFields:
        """Narrow the flat specific-field bag to the proposal's award type."""
        specific = proposal.specific_fields

        if proposal.award_type == AwardType.STAR_POINT:
            return StarPointFields(objective=optional_number(specific.objective))

        if proposal.award_type == AwardType.NATIONAL_AREA_INCENTIVE:
            return NationalAreaIncentiveFields(
                national_allocation=optional_string(specific.national_allocation),
                area_allocation=optional_string(specific.area_allocation),
                status=optional_string(specific.status),
            )

        return EfficientStarFields(
            no=optional_number(specific.no),
            guidelines=optional_string(specific.guidelines),
        )

    # ─── Nested collections ────────────────────────────

    def map_score_rules(self, rules: list[ProposedScoreRule]) -> list[ScoreRule]:
        return [
            ScoreRule(
                id=new_id("rule"),
                name=sanitize_string(rule.name) or f"Rule {index}",
                base_score=non_negative_number(rule.base_score),
                description=sanitize_string(rule.description),
                enabled=coerce_bool(rule.enabled),
                conditions=[self.map_condition(c) for c in rule.conditions],
            )
            for index, rule in enumerate(rules, start=1)
        ]

    @staticmethod
    def map_condition(condition: ProposedScoreCondition) -> ScoreCondition:
        return ScoreCondition(
            id=new_id("condition"),
            type=condition.type or ConditionType.MEMBER_COUNT,
            member_count=optional_non_negative_number(condition.member_count),
            non_member_count=optional_non_negative_number(condition.non_member_count),
            total_count=optional_non_negative_number(condition.total_count),
            activity_count=optional_non_negative_number(condition.activity_count),
            activity_type=optional_string(condition.activity_type),
            activity_category=optional_string(condition.activity_category),
            specific_activity=optional_string(condition.specific_activity),
            partner_count=optional_non_negative_number(condition.partner_count),
            partner_type=optional_string(condition.partner_type),
            points=non_negative_number(condition.points),
            description=sanitize_string(condition.description),
        )

    @staticmethod
    def map_team_management(team: ProposedTeamManagement | None) -> TeamManagement | None:
        if team is None:
            return None
        return TeamManagement(
            positions=[
                TeamPosition(
                    id=new_id("position"),
                    name=sanitize_string(position.name) or f"Position {index}",
                    description=sanitize_string(position.description),
                    is_required=coerce_bool(position.is_required),
                    max_members=optional_non_negative_number(position.max_members),
                )
                for index, position in enumerate(team.positions, start=1)
            ],
        )
