"""
Display Formatters and Validators

Pure, stateless functions converting raw numbers into display strings and
checking numeric sanity. Every formatter accepts untrusted input (None,
strings, NaN, ...) and degrades to a neutral placeholder instead of raising.

Usage:
    from core.utils.formatters import format_price, format_badge_price

    format_price(65432.1)          # "$65,432.10"
    format_badge_price(65432.1)    # "65K"
"""

import math
from typing import Any, Optional

from core.utils.time import current_utc_timestamp, to_local_time_string


MISSING_FEE = "—"


def _to_number(value: Any) -> Optional[float]:
    """Coerce value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def validate_price(value: Any) -> bool:
    """True iff value is a real number (not bool), finite and > 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def validate_percent_change(value: Any) -> bool:
    """True iff value is a real number (not bool) and finite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def format_price(value: Any, decimals: int = 2) -> str:
    """
    Format a USD price.

    Examples:
        >>> format_price(65432.1)
        '$65,432.10'
        >>> format_price(float("nan"))
        '$0.00'
    """
    number = _to_number(value)
    if number is None or number <= 0:
        return f"${0:.{decimals}f}"
    return f"${number:,.{decimals}f}"


def format_percent_change(value: Any) -> str:
    """
    Signed percentage with two decimals.

    Examples:
        >>> format_percent_change(1.234)
        '+1.23%'
        >>> format_percent_change(-0.5)
        '-0.50%'
    """
    number = _to_number(value)
    if number is None:
        return "0.00%"
    sign = "+" if number >= 0 else "-"
    return f"{sign}{abs(number):.2f}%"


def format_badge_price(value: Any) -> str:
    """
    Compact magnitude string for the badge.

    Examples:
        >>> format_badge_price(1_500_000)
        '2M'
        >>> format_badge_price(45000)
        '45K'
        >>> format_badge_price(87.4)
        '87'
        >>> format_badge_price(-5)
        ''
    """
    number = _to_number(value)
    if number is None or number <= 0:
        return ""

    if number >= 1_000_000:
        return f"{_round_half_up(number / 1_000_000)}M"
    if number >= 1_000:
        return f"{_round_half_up(number / 1_000)}K"
    return str(_round_half_up(number))


def format_time_ago(timestamp: Any, now: Optional[int] = None) -> str:
    """
    Relative age of a millisecond timestamp.

    Args:
        timestamp: Milliseconds since epoch
        now: Reference time in milliseconds (defaults to the current time)

    Returns:
        "N seconds ago" under a minute, "N min ago" under an hour, the local
        wall-clock time otherwise; "never" for missing or invalid input and
        "just now" for timestamps in the future.
    """
    number = _to_number(timestamp)
    if not number or number < 0:
        return "never"

    if now is None:
        now = current_utc_timestamp(milliseconds=True)

    diff_ms = now - number
    if diff_ms < 0:
        return "just now"

    diff_secs = int(diff_ms // 1000)
    diff_mins = int(diff_ms // 60_000)

    if diff_secs < 60:
        return f"{diff_secs} seconds ago"
    if diff_mins < 60:
        return f"{diff_mins} min ago"

    try:
        return to_local_time_string(number)
    except ValueError:
        return "never"


def format_fee(value: Any) -> str:
    """Fee tier for display; whole numbers lose their trailing '.0'."""
    number = _to_number(value)
    if number is None:
        return MISSING_FEE
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"
