"""
Numeric Coercion Utilities
thesis_app/scoring/utils.py

Payloads reaching the scoring code are loosely typed: Snowflake returns
NUMBER columns as Decimal, clients send numbers as strings, and unscored
criteria arrive as None or "". These helpers turn any of that into floats
without raising.
"""

import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional


def to_number(value: Any, fallback: float = 0.0) -> float:
    """
    Coerce value to a finite float, returning fallback when that is impossible.

    Booleans are rejected even though they are ints in Python.
    """
    if isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return fallback
        return number if math.isfinite(number) else fallback
    if isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return fallback
        return number if math.isfinite(number) else fallback
    return fallback


def to_optional_number(value: Any) -> Optional[float]:
    """Like to_number, but None marks an unparsable value."""
    number = to_number(value, math.nan)
    return number if math.isfinite(number) else None


def clamp01(value: float) -> float:
    """Clamp to [0, 1]; non-finite input maps to 0."""
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(1.0, value))


def to_percentage(weighted_score: float, weighted_max: float) -> Optional[float]:
    """
    Percentage of weighted_max achieved, rounded to 2 places.

    Formula: weighted_score / weighted_max × 100
    Returns None if weighted_max <= 0 or either side is non-finite.
    """
    if not math.isfinite(weighted_score) or not math.isfinite(weighted_max) or weighted_max <= 0:
        return None
    return round((weighted_score / weighted_max) * 100, 2)


def to_datetime(value: Any) -> Optional[datetime]:
    """Parse a datetime or ISO-8601 string into a UTC-aware datetime."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def field(row: Any, *names: str, default: Any = None) -> Any:
    """
    Read the first present field from a mapping or an object.

    Accepts several spellings (e.g. "min_score", "minScore") so API payloads
    and database rows can be passed interchangeably.
    """
    for name in names:
        if isinstance(row, dict):
            if name in row and row[name] is not None:
                return row[name]
        else:
            value = getattr(row, name, None)
            if value is not None:
                return value
    return default


def id_key(value: Any) -> str:
    """Case-insensitive key for UUIDs that may arrive as UUID objects or strings."""
    return str(value).strip().lower() if value is not None else ""
