"""Value parsing utilities for normalizing upstream Google Ads records.

This module provides the coercion helpers used at the normalization boundary
so that evaluators never see raw nullability, formatting artifacts or API
enum codes.
"""

import logging
import math
import re
from enum import Enum
from typing import Any, Mapping, TypeVar

import pandas as pd

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_NULL_TOKENS = ("n/a", "na", "nan", "--", "-", "null", "none", "undefined")
_TRUE_TOKENS = ("true", "yes", "y", "1", "enabled")
_FALSE_TOKENS = ("false", "no", "n", "0", "disabled")


def _is_missing(value: Any) -> bool:
    """Check for None/NaN/empty values, tolerating pandas NA scalars."""
    if value is None:
        return True
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        # Array-likes cannot be evaluated in a boolean context
        return False
    return isinstance(value, str) and value.strip() == ""


def clean_numeric_value(value: Any) -> int | float | None:
    """Clean and parse numeric values from upstream data.

    Handles the formats Google Ads exports and API wrappers produce:
    - Comma-separated numbers: "4,894" → 4894
    - Currency symbols: "$1,234.56" / "€12.30" → 1234.56 / 12.3
    - Percentage values: "12.5%" → 12.5
    - Accounting negatives: "(12.00)" → -12.0
    - Empty/null values: "" → None
    - Invalid formats or non-finite numbers: "N/A", inf → None

    Args:
        value: Raw value that should be numeric

    Returns:
        Cleaned numeric value (int/float) or None if invalid
    """
    if _is_missing(value):
        return None

    # Booleans are ints in Python but never meaningful metrics
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            finite = math.isfinite(value)
        except OverflowError:
            # Ints beyond float range
            logger.debug(f"Numeric value out of range: {type(value).__name__}")
            return None
        return value if finite else None

    if isinstance(value, str):
        cleaned = value.strip()

        if cleaned.lower() in _NULL_TOKENS:
            return None

        cleaned = re.sub(r"[,$€£%\s]", "", cleaned)

        if cleaned.startswith("(") and cleaned.endswith(")"):
            cleaned = "-" + cleaned[1:-1]

        try:
            if "." not in cleaned and "e" not in cleaned.lower():
                return int(float(cleaned))
            parsed = float(cleaned)
            return parsed if math.isfinite(parsed) else None
        except (ValueError, OverflowError):
            logger.debug(f"Unable to parse numeric value: '{value}', returning None")
            return None

    # Decimal, numpy scalars and similar
    try:
        return clean_numeric_value(float(value))
    except (TypeError, ValueError, OverflowError):
        logger.debug(
            f"Unable to convert value to numeric: '{value}' (type: {type(value)})"
        )
        return None


def to_int(value: Any, default: int = 0) -> int:
    """Coerce a metric to int, falling back to ``default``."""
    cleaned = clean_numeric_value(value)
    return int(cleaned) if cleaned is not None else default


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce a metric to float, falling back to ``default``."""
    cleaned = clean_numeric_value(value)
    return float(cleaned) if cleaned is not None else default


def clean_ratio(value: Any) -> float | None:
    """Parse an impression-share style ratio into [0, 1].

    Google Ads reports capped shares as strings like ``"< 10%"`` or
    ``"> 90%"``; the bound itself is used. Percent strings and numbers above 1
    are treated as percentages.

    Returns:
        Ratio clamped to [0, 1], or None when the value is missing/invalid
    """
    if _is_missing(value) or isinstance(value, bool):
        return None

    is_percent = False
    if isinstance(value, str):
        stripped = value.strip().lstrip("<>").strip()
        is_percent = stripped.endswith("%")
        value = stripped

    cleaned = clean_numeric_value(value)
    if cleaned is None:
        return None

    ratio = float(cleaned)
    if is_percent or ratio > 1:
        ratio = ratio / 100
    return min(1.0, max(0.0, ratio))


def clean_bool(value: Any, default: bool = False) -> bool:
    """Parse truthy/falsy flags from API or export values."""
    if isinstance(value, bool):
        return value
    if _is_missing(value):
        return default
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_TOKENS:
        return True
    if text in _FALSE_TOKENS:
        return False
    return default


def clean_text(value: Any, default: str = "") -> str:
    """Return a stripped string, or ``default`` for missing values."""
    if _is_missing(value):
        return default
    return str(value).strip()


def coerce_enum(
    value: Any,
    enum_cls: type[E],
    default: E,
    codes: Mapping[int, E] | None = None,
    aliases: Mapping[str, E] | None = None,
) -> E:
    """Map a raw enum-like value onto ``enum_cls`` or the sentinel ``default``.

    Accepts enum members, member names/values in any case (``_MATCH`` style
    suffixes are tolerated), Google Ads API numeric codes via ``codes`` and
    free-form spellings via ``aliases``.

    Args:
        value: Raw value from upstream data
        enum_cls: Target enum class
        default: Sentinel member returned for unknown/garbled values
        codes: Optional mapping of API numeric codes to members
        aliases: Optional mapping of lowercase spellings to members

    Returns:
        Matching enum member, or ``default``
    """
    if isinstance(value, enum_cls):
        return value
    if _is_missing(value) or isinstance(value, bool):
        return default

    if codes is not None:
        numeric = clean_numeric_value(value) if not isinstance(value, Enum) else None
        if numeric is not None and float(numeric).is_integer():
            return codes.get(int(numeric), default)

    raw = value.value if isinstance(value, Enum) else value
    text = str(raw).strip()
    if aliases is not None and text.lower() in aliases:
        return aliases[text.lower()]

    key = re.sub(r"[\s\-]+", "_", text.upper())
    for candidate in (key, re.sub(r"_MATCH$", "", key)):
        if candidate in enum_cls.__members__:
            return enum_cls[candidate]
        for member in enum_cls:
            if str(member.value).upper() == candidate:
                return member

    logger.debug(
        f"Unrecognized {enum_cls.__name__} value '{value}', using {default.name}"
    )
    return default
