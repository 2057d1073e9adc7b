"""Numeric rounding and safe conversion helpers.

This module is the single source of truth for how displayed numbers are
rounded. All calculators import from here instead of calling round().

Python's round() is banker's rounding; tune values are shown to users with
half-up rounding on the exact binary value of the float, so 2.125 -> 2.13
and 47.5 -> 48.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward +infinity.

    Examples:
        >>> round_half_up(47.5)
        48
        >>> round_half_up(-0.5)
        0
    """
    return math.floor(value + 0.5)


def to_fixed(value: float, places: int) -> float:
    """Round a float to a fixed number of decimal places, half-up.

    Args:
        value: Value to round
        places: Number of digits after the decimal point

    Returns:
        The rounded value as a float (formatting it with the same number of
        places reproduces the displayed text)

    Examples:
        >>> to_fixed(2.8196, 2)
        2.82
        >>> to_fixed(237.0618, 1)
        237.1
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))


def safe_float(val: Any, default: float = 0.0) -> float:
    """Safely convert a value to float.

    Args:
        val: Value to convert (can be str, int, float, None, etc.)
        default: Value to return if conversion fails

    Returns:
        Converted float or default value

    Examples:
        >>> safe_float("3.14")
        3.14
        >>> safe_float(None)
        0.0
        >>> safe_float("invalid", default=-1.0)
        -1.0
    """
    if val is None or val == "":
        return default
    try:
        return float(val)
    except (ValueError, TypeError):
        return default


def safe_int(val: Any, default: int = 0) -> int:
    """Safely convert a value to int.

    Examples:
        >>> safe_int("42")
        42
        >>> safe_int(3.7)
        3
        >>> safe_int(None)
        0
    """
    if val is None or val == "":
        return default
    try:
        return int(float(val))  # Handle "3.0" -> 3
    except (ValueError, TypeError):
        return default


def parse_settings_text(text: str | None) -> dict[str, Any]:
    """Parse free-form tune settings like ``"front_nf=2.8; arb=6, notes=loose"``.

    Pairs are separated by ``;`` or ``,``. Finite numeric values become floats,
    everything else stays a string. Fragments without ``=`` are ignored.
    """
    settings: dict[str, Any] = {}
    if not text:
        return settings

    for fragment in text.replace(",", ";").split(";"):
        key, sep, raw = fragment.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        raw = raw.strip()
        number = safe_float(raw, default=math.nan)
        # inf and nan are not valid JSON numbers; keep them as typed
        settings[key] = number if math.isfinite(number) else raw
    return settings
