"""
Coercion helpers for values coming out of untrusted backend JSON.

Every helper is pure and total: it never raises, and it returns either
a value of the promised type or the caller's default.
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any, TypeVar

E = TypeVar("E", bound=Enum)

_WHITESPACE = re.compile(r"\s+")
# Printable ASCII plus the CJK Unified Ideographs block
_DISALLOWED = re.compile(r"[^\x20-\x7E\u4e00-\u9fff]")

_TRUE_STRINGS = {"true", "yes", "y", "1", "on"}
_FALSE_STRINGS = {"false", "no", "n", "0", "off", ""}


def sanitize_string(value: Any) -> str:
    """Trim, fold line breaks and whitespace runs to one space, drop disallowed characters."""
    if not isinstance(value, str) or not value:
        return ""
    text = _WHITESPACE.sub(" ", value.strip())
    text = _DISALLOWED.sub("", text)
    return text.strip()


def optional_string(value: Any) -> str | None:
    """Sanitized text, or None when nothing usable is left."""
    text = sanitize_string(value)
    return text or None


def to_number(value: Any) -> int | float | None:
    """
    Parse a finite number from an int, float or numeric string.

    Integral values come back as int so counts stay counts.
    Booleans are not numbers here.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None

    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer():
            return int(number)
    return number


def optional_number(value: Any) -> int | float | None:
    """A finite number as given (sign untouched), or None."""
    return to_number(value)


def non_negative_number(value: Any, default: int | float = 0) -> int | float:
    """A number clamped at zero; unparseable input becomes `default`."""
    number = to_number(value)
    if number is None:
        return default
    return max(0, number)


def optional_non_negative_number(value: Any) -> int | float | None:
    """Like non_negative_number, but absent or unparseable input stays absent."""
    number = to_number(value)
    if number is None:
        return None
    return max(0, number)


def coerce_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return default


def enum_member(value: Any, enum_cls: type[E], default: E) -> E:
    """Look `value` up in `enum_cls` by value, falling back to `default`."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip())
        except ValueError:
            return default
    return default
