"""
Backend response parsing and standardization.

Backends are asked for one JSON object, but what comes back may be
wrapped in a code fence, preceded by chatter, truncated, or shaped
slightly differently from what was asked for.  Nothing the backend
declares is trusted: every field is re-derived here with coercion and
default substitution.

This is the single place where `confidence` is clamped to [0, 1].
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import ValidationError as SchemaValidationError

from award_interpreter.core.constants import AwardType, ConditionType, IncentiveStatus
from award_interpreter.core.logging import get_logger
from award_interpreter.processing.coercion import (
    coerce_bool,
    enum_member,
    non_negative_number,
    optional_number,
    to_number,
)
from award_interpreter.schemas.proposal import (
    BasicFields,
    CategoryFields,
    InterpretationProposal,
    ProposedScoreCondition,
    ProposedScoreRule,
    ProposedTeamManagement,
    ProposedTeamPosition,
    SpecificFields,
)

logger = get_logger(__name__)

PLACEHOLDER_TITLE = "Untitled indicator"
PLACEHOLDER_DESCRIPTION = "No description provided"
PLACEHOLDER_DEADLINE = "2025-12-31"
DEFAULT_CONFIDENCE = 0.5
DEFAULT_NOTES = "Interpretation complete."

_CODE_FENCE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


# ═══════════════════════════════════════════════════════════
#  Raw text → dict
# ═══════════════════════════════════════════════════════════

def strip_code_fence(text: str) -> str:
    """Return the body of the first fenced code block, or the text unchanged."""
    match = _CODE_FENCE.search(text)
    return match.group(1) if match else text


def first_json_object(text: str) -> str | None:
    """
    Return the first balanced `{...}` span in `text`.

    Braces inside string literals are ignored.  Returns None when there
    is no opening brace or the object never closes.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]
    return None


def parse_response(text: Any, default: InterpretationProposal) -> InterpretationProposal:
    """Parse a backend reply into a proposal, or return `default` if it can't be read."""
    if not isinstance(text, str) or not text.strip():
        logger.warning("Empty backend response, using default proposal")
        return default

    candidate = first_json_object(strip_code_fence(text.strip()))
    if candidate is None:
        logger.warning("No JSON object in backend response", preview=text[:200])
        return default

    try:
        raw = json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.warning("Backend JSON parse failed", error=str(exc), preview=candidate[:200])
        return default

    if not isinstance(raw, dict):
        return default

    return standardize_response(raw, default)


# ═══════════════════════════════════════════════════════════
#  dict → InterpretationProposal
# ═══════════════════════════════════════════════════════════

def _section(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str:
    """Strings trimmed, numbers rendered, everything else empty."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _optional_text(value: Any) -> str | None:
    return _text(value) or None


def _clamp_confidence(value: Any) -> float:
    number = to_number(value)
    if number is None:
        return DEFAULT_CONFIDENCE
    return float(min(1.0, max(0.0, number)))


def _standardize_condition(raw: dict[str, Any]) -> ProposedScoreCondition:
    condition_type = _text(raw.get("type")) or ConditionType.MEMBER_COUNT
    return ProposedScoreCondition(
        type=condition_type,
        member_count=optional_number(raw.get("memberCount")),
        non_member_count=optional_number(raw.get("nonMemberCount")),
        total_count=optional_number(raw.get("totalCount")),
        activity_count=optional_number(raw.get("activityCount")),
        activity_type=_optional_text(raw.get("activityType")),
        activity_category=_optional_text(raw.get("activityCategory")),
        specific_activity=_optional_text(raw.get("specificActivity")),
        partner_count=optional_number(raw.get("partnerCount")),
        partner_type=_optional_text(raw.get("partnerType")),
        points=non_negative_number(raw.get("points")),
        description=_text(raw.get("description")),
    )


def _standardize_rule(raw: dict[str, Any]) -> ProposedScoreRule:
    conditions = raw.get("conditions")
    return ProposedScoreRule(
        name=_optional_text(raw.get("name")),
        base_score=non_negative_number(raw.get("baseScore")),
        description=_text(raw.get("description")),
        enabled=coerce_bool(raw.get("enabled")),
        conditions=[
            _standardize_condition(c)
            for c in (conditions if isinstance(conditions, list) else [])
            if isinstance(c, dict)
        ],
    )


def _standardize_team(raw: Any) -> ProposedTeamManagement | None:
    if not isinstance(raw, dict):
        return None
    positions = raw.get("positions")
    return ProposedTeamManagement(
        positions=[
            ProposedTeamPosition(
                name=_optional_text(p.get("name")),
                description=_text(p.get("description")),
                is_required=coerce_bool(p.get("isRequired")),
                max_members=optional_number(p.get("maxMembers")),
            )
            for p in (positions if isinstance(positions, list) else [])
            if isinstance(p, dict)
        ],
    )


def standardize_response(raw: dict[str, Any], default: InterpretationProposal) -> InterpretationProposal:
    """Re-derive every proposal field from an untrusted dict."""
    basic = _section(raw.get("basicFields"))
    category = _section(raw.get("categoryFields"))
    specific = _section(raw.get("specificFields"))
    rules = raw.get("scoreRules")
    keywords = raw.get("extractedKeywords")

    try:
        return InterpretationProposal(
            award_type=enum_member(raw.get("awardType"), AwardType, default.award_type),
            basic_fields=BasicFields(
                title=_text(basic.get("title")) or PLACEHOLDER_TITLE,
                description=_text(basic.get("description")) or PLACEHOLDER_DESCRIPTION,
                deadline=_text(basic.get("deadline")) or PLACEHOLDER_DEADLINE,
                external_link=_optional_text(basic.get("externalLink")),
            ),
            category_fields=CategoryFields(
                category_id=_optional_text(category.get("categoryId")),
                category=_optional_text(category.get("category")),
            ),
            specific_fields=SpecificFields(
                no=optional_number(specific.get("no")),
                guidelines=_optional_text(specific.get("guidelines")),
                objective=optional_number(specific.get("objective")),
                national_allocation=_optional_text(specific.get("nationalAllocation")),
                area_allocation=_optional_text(specific.get("areaAllocation")),
                status=_optional_text(specific.get("status")) or IncentiveStatus.OPEN,
            ),
            score_rules=[
                _standardize_rule(r)
                for r in (rules if isinstance(rules, list) else [])
                if isinstance(r, dict)
            ],
            team_management=_standardize_team(raw.get("teamManagement")),
            confidence=_clamp_confidence(raw.get("confidence")),
            extracted_keywords=[
                k.strip()
                for k in (keywords if isinstance(keywords, list) else [])
                if isinstance(k, str) and k.strip()
            ],
            notes=_text(raw.get("notes")) or DEFAULT_NOTES,
        )
    except SchemaValidationError as exc:
        logger.warning("Response standardization failed, using default proposal", error=str(exc))
        return default
