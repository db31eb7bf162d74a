"""
Deadline normalization.

Backends return deadlines in whatever shape the source document used.
normalize_date() tries the known layouts strictly and in order, then a
general parse, and finally falls back to one year from today.  It never
raises: a bad date is a validation warning later, not a failure here.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from award_interpreter.core.logging import get_logger

logger = get_logger(__name__)

ISO_FORMAT = "%Y-%m-%d"

# Order matters: day-first wins over month-first for ambiguous slashes.
KNOWN_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%m-%d-%Y",
    "%Y年%m月%d日",
)

_STRICT_ISO = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def default_deadline(today: date | None = None) -> str:
    """One year from `today`."""
    today = today or date.today()
    return (today + relativedelta(years=1)).strftime(ISO_FORMAT)


def parse_known_format(value: str) -> date | None:
    for fmt in KNOWN_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def normalize_date(value: object, today: date | None = None) -> str:
    """Return `value` as YYYY-MM-DD, or one year from today if it can't be read."""
    if isinstance(value, datetime):
        return value.date().strftime(ISO_FORMAT)
    if isinstance(value, date):
        return value.strftime(ISO_FORMAT)
    if not isinstance(value, str) or not value.strip():
        return default_deadline(today)

    normalized = reformat_date(value, today)
    if normalized is None:
        logger.warning("Unparseable deadline, using default", value=value)
        return default_deadline(today)
    return normalized


def is_iso_date(value: object) -> bool:
    """True when `value` is a real calendar date written exactly as YYYY-MM-DD."""
    if not isinstance(value, str) or not _STRICT_ISO.match(value):
        return False
    try:
        datetime.strptime(value, ISO_FORMAT)
    except ValueError:
        return False
    return True


def reformat_date(value: str, today: date | None = None) -> str | None:
    """
    Re-render a parseable date as YYYY-MM-DD; None if it can't be read.

    Parts missing from a partial date ("12", "March 5") come from `today`.
    """
    text = value.strip()
    if not text:
        return None
    parsed = parse_known_format(text)
    if parsed is not None:
        return parsed.strftime(ISO_FORMAT)
    try:
        default = datetime.combine(today or date.today(), time())
        return date_parser.parse(text, default=default).date().strftime(ISO_FORMAT)
    except (ValueError, OverflowError):
        return None
