"""
Business rules for canonical award records.

validate() never raises and never stops early: every rule category runs
and each problem becomes a tagged ValidationIssue.  Errors block
persistence; warnings are for review only.

Categories, in order:
    1. basic fields (title, description, deadline, external link)
    2. award-type specific fields
    3. score rules and their conditions
    4. team management (only when present)
    5. metadata (confidence, keywords, source text)

fix_common_issues() is the companion repair pass meant to run once
before validation.  It only reshapes values that are already there.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from dateutil.relativedelta import relativedelta

from award_interpreter.core.constants import AwardType, ConditionType, IncentiveStatus, Severity
from award_interpreter.core.logging import get_logger
from award_interpreter.processing.dates import is_iso_date, reformat_date
from award_interpreter.schemas.record import (
    CanonicalRecord,
    EfficientStarFields,
    NationalAreaIncentiveFields,
    ScoreCondition,
    ScoreRule,
    StarPointFields,
    TeamPosition,
)

logger = get_logger(__name__)

TITLE_MIN, TITLE_MAX = 2, 200
DESCRIPTION_MIN, DESCRIPTION_MAX = 10, 2000
GUIDELINES_MAX = 1000
OBJECTIVE_MAX = 10000
DEADLINE_MAX_YEARS = 5
LOW_CONFIDENCE = 0.5

COUNT_FIELDS = ("member_count", "non_member_count", "total_count", "activity_count", "partner_count")
TEXT_FIELDS = ("activity_type", "activity_category", "specific_activity", "partner_type")

VALID_CONDITION_TYPES = frozenset(t.value for t in ConditionType)
VALID_STATUSES = tuple(s.value for s in IncentiveStatus)

# Scheme optional; host, TLD and a plain path.
URL_PATTERN = re.compile(r"^(https?://)?([\da-z.-]+)\.([a-z.]{2,6})([/\w .-]*)/?$", re.IGNORECASE)


# ═══════════════════════════════════════════════════════════
#  Result types
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ValidationIssue:
    severity: Severity
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"severity": self.severity, "code": self.code, "message": self.message}


@dataclass
class ValidationResult:
    """Issues found in one record.  Recomputed on demand, never persisted."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[str]:
        return [i.message for i in self.issues if i.severity == Severity.WARNING]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def codes(self, severity: Severity | None = None) -> list[str]:
        return [i.code for i in self.issues if severity is None or i.severity == severity]

    def error(self, code: str, message: str) -> None:
        self.issues.append(ValidationIssue(Severity.ERROR, code, message))

    def warning(self, code: str, message: str) -> None:
        self.issues.append(ValidationIssue(Severity.WARNING, code, message))

    def to_dict(self) -> dict[str, Any]:
        return {
            "errors": self.errors,
            "warnings": self.warnings,
            "isValid": self.is_valid,
            "issues": [i.to_dict() for i in self.issues],
        }


# ─── Value checks ─────────────────────────────────────────

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_integer(value: Any) -> bool:
    return _is_number(value) and float(value).is_integer()


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


# ═══════════════════════════════════════════════════════════
#  DataValidator
# ═══════════════════════════════════════════════════════════

class DataValidator:
    """Validate canonical records against structural and award-specific rules."""

    def __init__(self, today: date | None = None) -> None:
        # Pinned "today" for deadline checks; None means the real date.
        self.today = today

    def validate(self, record: CanonicalRecord) -> ValidationResult:
        result = ValidationResult()

        self._validate_basic_fields(record, result)
        self._validate_specific_fields(record, result)
        self._validate_score_rules(record.score_rules, result)
        if record.team_management is not None:
            self._validate_team_positions(record.team_management.positions, result)
        self._validate_metadata(record, result)

        logger.info(
            "Record validated",
            award_type=record.award_type,
            errors=len(result.errors),
            warnings=len(result.warnings),
            is_valid=result.is_valid,
        )
        return result

    # ─── 1. Basic fields ───────────────────────────────

    def _validate_basic_fields(self, record: CanonicalRecord, result: ValidationResult) -> None:
        title = _text(record.title)
        if not title:
            result.error("title_required", "Title is required")
        elif len(title) < TITLE_MIN:
            result.warning("title_too_short", "Title is very short, consider a more descriptive title")
        elif len(title) > TITLE_MAX:
            result.warning("title_too_long", f"Title is longer than {TITLE_MAX} characters")

        description = _text(record.description)
        if not description:
            result.error("description_required", "Description is required")
        elif len(description) < DESCRIPTION_MIN:
            result.warning("description_too_short", "Description is very short, consider adding detail")
        elif len(description) > DESCRIPTION_MAX:
            result.warning("description_too_long", f"Description is longer than {DESCRIPTION_MAX} characters")

        self._validate_deadline(record.deadline, result)

        if record.external_link and not URL_PATTERN.match(record.external_link):
            result.warning("external_link_invalid", "External link does not look like a valid URL")

    def _validate_deadline(self, deadline: Any, result: ValidationResult) -> None:
        if not deadline:
            result.error("deadline_required", "Deadline is required")
            return
        if not is_iso_date(deadline):
            result.error("deadline_invalid", "Deadline must be a valid date in YYYY-MM-DD format")
            return

        today = self.today or date.today()
        due = date.fromisoformat(deadline)
        if due < today:
            result.warning("deadline_past", f"Deadline {deadline} has already passed, check the date")
        elif due > today + relativedelta(years=DEADLINE_MAX_YEARS):
            result.warning(
                "deadline_too_far",
                f"Deadline {deadline} is more than {DEADLINE_MAX_YEARS} years away, check the date",
            )

    # ─── 2. Award-type specific fields ─────────────────

    def _validate_specific_fields(self, record: CanonicalRecord, result: ValidationResult) -> None:
        specific = record.specific

        if isinstance(specific, EfficientStarFields):
            if specific.no is not None:
                if not _is_integer(specific.no) or specific.no <= 0:
                    result.error("sequence_invalid", "Sequence number must be a positive integer")
            else:
                result.warning("sequence_missing", "Efficient Star indicators should have a sequence number")
            if len(_text(specific.guidelines)) > GUIDELINES_MAX:
                result.warning("guidelines_too_long", f"Guidelines are longer than {GUIDELINES_MAX} characters")

        elif isinstance(specific, StarPointFields):
            if specific.objective is not None:
                if not _is_number(specific.objective) or specific.objective < 0:
                    result.error("objective_invalid", "Objective must be a non-negative number")
                elif specific.objective > OBJECTIVE_MAX:
                    result.warning("objective_too_large", "Objective is unusually large, check the value")
            else:
                result.warning("objective_missing", "Star Point indicators should have an objective score")
            if not record.category and not record.category_id:
                result.warning("category_missing", "Star Point indicators should have a category")

        elif isinstance(specific, NationalAreaIncentiveFields):
            if not _text(specific.national_allocation):
                result.warning("national_allocation_missing", "National allocation is missing")
            if not _text(specific.area_allocation):
                result.warning("area_allocation_missing", "Area allocation is missing")
            if specific.status:
                if specific.status not in VALID_STATUSES:
                    result.error(
                        "status_invalid",
                        f"Invalid status '{specific.status}', expected one of: {', '.join(VALID_STATUSES)}",
                    )
            else:
                result.warning("status_missing", "National Area Incentive indicators should have a status")

    # ─── 3. Score rules ────────────────────────────────

    def _validate_score_rules(self, rules: list[ScoreRule], result: ValidationResult) -> None:
        if not rules:
            result.warning("score_rules_empty", "Add at least one score rule")
            return

        for index, rule in enumerate(rules, start=1):
            prefix = f"Score rule {index}"
            if not _text(rule.name):
                result.warning("rule_name_missing", f"{prefix}: rule name is missing")
            if rule.base_score is not None and (not _is_number(rule.base_score) or rule.base_score < 0):
                result.error("rule_base_score_invalid", f"{prefix}: base score must be a non-negative number")

            if not rule.conditions:
                result.warning("rule_conditions_empty", f"{prefix}: add at least one condition")
                continue
            for condition_index, condition in enumerate(rule.conditions, start=1):
                self._validate_condition(condition, f"{prefix}, condition {condition_index}", result)

    @staticmethod
    def _validate_condition(condition: ScoreCondition, prefix: str, result: ValidationResult) -> None:
        if condition.type not in VALID_CONDITION_TYPES:
            result.error(
                "condition_type_invalid",
                f"{prefix}: unknown condition type '{condition.type}'",
            )

        if condition.points is not None and (not _is_number(condition.points) or condition.points < 0):
            result.error("condition_points_invalid", f"{prefix}: points must be a non-negative number")

        for name in COUNT_FIELDS:
            value = getattr(condition, name)
            if value is not None and (not _is_integer(value) or value < 0):
                result.error("condition_count_invalid", f"{prefix}: {name} must be a non-negative integer")

        for name in TEXT_FIELDS:
            value = getattr(condition, name)
            if value and not isinstance(value, str):
                result.error("condition_text_invalid", f"{prefix}: {name} must be text")

    # ─── 4. Team management ────────────────────────────

    @staticmethod
    def _validate_team_positions(positions: list[TeamPosition], result: ValidationResult) -> None:
        if not positions:
            result.warning("positions_empty", "Add at least one team position")
            return

        for index, position in enumerate(positions, start=1):
            prefix = f"Position {index}"
            if not _text(position.name):
                result.error("position_name_required", f"{prefix}: position name is required")
            if position.max_members is not None and (
                not _is_integer(position.max_members) or position.max_members <= 0
            ):
                result.error("position_max_members_invalid", f"{prefix}: max members must be a positive integer")
            if not isinstance(position.is_required, bool):
                result.warning("position_required_flag_invalid", f"{prefix}: required flag should be true or false")

    # ─── 5. Metadata ───────────────────────────────────

    @staticmethod
    def _validate_metadata(record: CanonicalRecord, result: ValidationResult) -> None:
        confidence = record.confidence
        if not _is_number(confidence) or not 0 <= confidence <= 1:
            result.warning("confidence_out_of_range", "Confidence should be between 0 and 1")
        elif confidence < LOW_CONFIDENCE:
            result.warning("confidence_low", "Low interpretation confidence, manual review recommended")

        if not record.extracted_keywords:
            result.warning("keywords_empty", "No keywords were extracted, interpretation quality may suffer")

        if not _text(record.source_text):
            result.warning("source_text_empty", "The extracted document text is empty")


# ═══════════════════════════════════════════════════════════
#  Repair pass
# ═══════════════════════════════════════════════════════════

def _floor_at(value: Any, minimum: int) -> Any:
    return max(minimum, math.floor(value)) if _is_number(value) else value


def _clamp_at_zero(value: Any) -> Any:
    return max(0, value) if _is_number(value) else 0


def _fix_condition(condition: ScoreCondition) -> ScoreCondition:
    updates: dict[str, Any] = {"points": _clamp_at_zero(condition.points)}
    for name in COUNT_FIELDS:
        value = getattr(condition, name)
        if value is not None:
            updates[name] = _floor_at(value, 0)
    return condition.model_copy(update=updates)


def _fix_specific(specific):
    if isinstance(specific, EfficientStarFields):
        updates: dict[str, Any] = {}
        if specific.no is not None:
            updates["no"] = _floor_at(specific.no, 1)
        if isinstance(specific.guidelines, str):
            updates["guidelines"] = specific.guidelines.strip()
        return specific.model_copy(update=updates)
    if isinstance(specific, StarPointFields) and _is_number(specific.objective):
        return specific.model_copy(update={"objective": max(0, specific.objective)})
    return specific


def fix_common_issues(record: CanonicalRecord, today: date | None = None) -> CanonicalRecord:
    """
    Best-effort repair of a record; returns a new record.

    Trims text, re-renders a parseable deadline as YYYY-MM-DD and pulls
    numbers back into range.  Missing content stays missing.  Applying
    it twice gives the same result as applying it once.
    """
    updates: dict[str, Any] = {
        "specific": _fix_specific(record.specific),
        "score_rules": [
            rule.model_copy(update={
                "base_score": _clamp_at_zero(rule.base_score),
                "conditions": [_fix_condition(c) for c in rule.conditions],
            })
            for rule in record.score_rules
        ],
    }

    if isinstance(record.title, str):
        updates["title"] = record.title.strip()
    if isinstance(record.description, str):
        updates["description"] = record.description.strip()
    if isinstance(record.deadline, str) and record.deadline:
        updates["deadline"] = reformat_date(record.deadline, today) or record.deadline

    if record.team_management is not None:
        updates["team_management"] = record.team_management.model_copy(update={
            "positions": [
                position.model_copy(update={"max_members": _floor_at(position.max_members, 1)})
                if position.max_members is not None
                else position
                for position in record.team_management.positions
            ],
        })

    return record.model_copy(update=updates)


def default_values(
    award_type: AwardType | str,
) -> EfficientStarFields | StarPointFields | NationalAreaIncentiveFields:
    """Suggested specific-field values for manual entry of a new record."""
    award_type = AwardType(award_type)
    if award_type == AwardType.STAR_POINT:
        return StarPointFields(objective=100)
    if award_type == AwardType.NATIONAL_AREA_INCENTIVE:
        return NationalAreaIncentiveFields(
            national_allocation="-",
            area_allocation="-",
            status=IncentiveStatus.OPEN,
        )
    return EfficientStarFields(no=1, guidelines="")
