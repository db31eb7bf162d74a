"""Shared constants and enums used across the application."""

from enum import StrEnum


class AwardType(StrEnum):
    """Award families an indicator document can describe."""

    EFFICIENT_STAR = "efficient_star"
    STAR_POINT = "star_point"
    NATIONAL_AREA_INCENTIVE = "national_area_incentive"


class IncentiveStatus(StrEnum):
    """Lifecycle status of a National & Area Incentive."""

    OPEN = "open"
    CLOSED = "closed"
    COMPLETED = "completed"


class ConditionType(StrEnum):
    """Score condition tags."""

    MEMBER_COUNT = "memberCount"
    NON_MEMBER_COUNT = "nonMemberCount"
    TOTAL_COUNT = "totalCount"
    ACTIVITY_COUNT = "activityCount"
    ACTIVITY_TYPE = "activityType"
    ACTIVITY_CATEGORY = "activityCategory"
    SPECIFIC_ACTIVITY = "specificActivity"
    PARTNER_COUNT = "partnerCount"


class Severity(StrEnum):
    """Validation issue severity."""

    ERROR = "error"
    WARNING = "warning"


class PipelineStatus(StrEnum):
    """Overall status of a pipeline execution."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class StepStatus(StrEnum):
    """Status of an individual pipeline step."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class Collection(StrEnum):
    """Logical collections in the document store."""

    STANDARDS = "standards"
    SCORE_RULES = "score_rules"
    TEAM_MANAGEMENT = "team_management"
    INTERPRETATION_LOGS = "interpretation_logs"


# MIME types accepted as PDF uploads
PDF_MIME_TYPES: frozenset[str] = frozenset({
    "application/pdf",
    "application/x-pdf",
    "application/acrobat",
    "application/vnd.pdf",
    "text/pdf",
    "text/x-pdf",
})

PDF_EXTENSIONS: tuple[str, ...] = (".pdf",)
