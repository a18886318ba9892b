"""
Project Risk Engine - Number Formatting.

Rounding and short-form money formatting used in factor
labels and alert descriptions. Rounding is half-up, so 72.5%
reads as 73% rather than banker's-rounded 72%.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float]

# Beyond this the default decimal context cannot quantize to whole units
DECIMAL_SAFE_LIMIT = 1e20


def _decimal_safe(value: Number) -> bool:
    return math.isfinite(value) and abs(value) < DECIMAL_SAFE_LIMIT


def round_half_up(value: Number, places: int = 0) -> Union[int, float]:
    """
    Round ties away from zero.

    Returns an int when ``places`` is 0. Non-finite values are
    returned unchanged; huge ones use plain rounding.
    """
    if not math.isfinite(value):
        return value
    if not _decimal_safe(value):
        return round(value) if places == 0 else round(value, places)
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if places == 0:
        return int(rounded)
    return float(rounded)


def format_fixed(value: Number, places: int = 0) -> str:
    """Fixed-point string with half-up rounding."""
    if not _decimal_safe(value):
        return f"{value:.{places}f}"
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_percent(ratio: Number) -> str:
    """Ratio as a whole-number percentage, without the % sign (0.72 -> "72")."""
    return format_fixed(ratio * 100)


def format_compact(amount: Number) -> str:
    """
    Short-form amount for labels.

    1_250_000 -> "1.3M", 45_000 -> "45K", 950 -> "950".
    """
    if amount >= 1_000_000:
        return format_fixed(amount / 1_000_000, 1) + "M"
    if amount >= 1_000:
        return format_fixed(amount / 1_000) + "K"
    return format_fixed(amount)


def format_dollars(amount: Number) -> str:
    """Compact dollar amount: "$45K"."""
    return f"${format_compact(amount)}"


def format_cents(amount_cents: Number) -> str:
    """Compact dollar amount from minor units: 750000 -> "$8K"."""
    return format_dollars(amount_cents / 100)
