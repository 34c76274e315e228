"""Input normalization utilities shared by the narrator and presentation engines."""
from __future__ import annotations

import math
from typing import Any


def normalize_identifier(value: str) -> str:
    """
    Normalize string to lowercase identifier format.

    Converts dashes to underscores and strips whitespace.
    Used for board types, tones, rarities and raw event types.

    Args:
        value: The string to normalize

    Returns:
        Normalized identifier string (lowercase, underscores instead of dashes)

    Examples:
        >>> normalize_identifier("Status-Tick")
        'status_tick'
        >>> normalize_identifier("  Town  ")
        'town'
    """
    return str(value).strip().lower().replace("-", "_")


def as_text(value: Any, fallback: str) -> str:
    """Stripped string value, or ``fallback`` for non-strings and blanks."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback


def safe_float(value: Any) -> float | None:
    """Finite float or None (bools, NaN, inf and garbage all map to None)."""
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def safe_int(value: Any, default: int = 0, minimum: int | None = None) -> int:
    """Floor to int, falling back to ``default`` for non-finite input, then clamp to ``minimum``."""
    parsed = safe_float(value)
    out = default if parsed is None else math.floor(parsed)
    if minimum is not None:
        out = max(minimum, out)
    return out


def clamp01(value: Any, fallback: float) -> float:
    parsed = safe_float(value)
    if parsed is None:
        return fallback
    return max(0.0, min(1.0, parsed))
