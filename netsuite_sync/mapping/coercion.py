"""Field coercion helpers applied by normalization descriptors.

Coercions never raise: values that cannot be interpreted become `None`
(or the empty string for text fields).
"""

from __future__ import annotations

import math
import re
from typing import Any

_NUMERIC_NOISE_PATTERN = re.compile(r"[,\s$€£¥]")
_LEADING_INTEGER_PATTERN = re.compile(r"^[+-]?\d+")
_LEADING_DECIMAL_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _mapping_clean_numeric_text(value: Any) -> str | None:
    """Return numeric text stripped of thousands separators, whitespace and currency marks."""

    if value is None or isinstance(value, bool):
        return None
    cleaned_text = _NUMERIC_NOISE_PATTERN.sub("", str(value))
    return cleaned_text or None


def mapping_as_integer(value: Any) -> int | None:
    """Coerce a source value to an integer by parsing its leading integer.

    Args:
        value: Raw source value.

    Returns:
        int | None: Parsed integer, or None for empty and unparseable values.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None

    cleaned_text = _mapping_clean_numeric_text(value)
    if cleaned_text is None:
        return None
    match = _LEADING_INTEGER_PATTERN.match(cleaned_text)
    if match is None:
        return None
    return int(match.group(0))


def mapping_as_float(value: Any) -> float | None:
    """Coerce a source value to a float by parsing its leading decimal.

    Args:
        value: Raw source value.

    Returns:
        float | None: Parsed number, or None for empty and unparseable values.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed_value = float(value)
        return parsed_value if math.isfinite(parsed_value) else None

    cleaned_text = _mapping_clean_numeric_text(value)
    if cleaned_text is None:
        return None
    match = _LEADING_DECIMAL_PATTERN.match(cleaned_text)
    if match is None:
        return None
    parsed_value = float(match.group(0))
    return parsed_value if math.isfinite(parsed_value) else None


def mapping_as_date(value: Any) -> str | None:
    """Pass a date-like source value through unchanged, mapping empty values to None."""

    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def mapping_as_string(value: Any) -> str:
    """Pass a text source value through unchanged, defaulting to the empty string."""

    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
