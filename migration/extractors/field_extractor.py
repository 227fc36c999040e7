"""
Best-effort identifier extraction for attribute-store values.

Producers have written location ids into ``FieldValues.value`` in several
shapes over time: a bare integer, an array (``text[]`` or JSON), a braced
set-literal string such as ``"{42}"``, or a plain numeric string. All of
them decode to the same integer id here.
"""

from typing import Any, Optional
import logging
import re

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d+")


def extract_id(value: Any) -> Optional[int]:
    """
    Normalize an attribute-store value into an integer id.

    Rules, first match wins:
    1. Numeric value → returned as-is
    2. Non-empty list/tuple → first element if numeric or a numeric string
    3. String → first run of digits; otherwise the whole string if numeric
    4. Anything else → None (logged, never raised)

    Empty values (None, "", [], 0) resolve to None without a warning.

    Examples:
        >>> extract_id(42)
        42
        >>> extract_id([42])
        42
        >>> extract_id("{42}")
        42
        >>> extract_id("abc") is None
        True
    """
    if not value:
        return None

    # bool is an int subclass but never an id
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return value

    if isinstance(value, (list, tuple)):
        first = value[0]
        if isinstance(first, (int, float)) and not isinstance(first, bool):
            return first
        if isinstance(first, str) and _is_numeric(first):
            return int(first.strip())
        logger.warning(f"Could not extract id from array value: {value!r}")
        return None

    if isinstance(value, str):
        match = _DIGITS.search(value)
        if match:
            return int(match.group(0))
        if _is_numeric(value):
            return int(value.strip())

    logger.warning(f"Could not extract id from value: {value!r}")
    return None


def _is_numeric(value: str) -> bool:
    """Check whether a string holds a plain (optionally signed) integer"""
    try:
        int(value.strip())
        return True
    except ValueError:
        return False
