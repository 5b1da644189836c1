"""Utility functions for the EMI calculator.

This module provides the calendar helpers used to date each installment and
the parsers that turn user input into Python values. Month arithmetic relies
on Python's ``datetime`` and ``calendar`` modules.

Two day-of-month rules are supported when a start date falls on a day the
target month does not have (for example the 31st):

``"roll"``
    The surplus days roll into the following month, so 31 January plus one
    month is 3 March (2 March in a leap year). This is the default.
``"clamp"``
    The day is clamped to the last day of the target month, so 31 January
    plus one month is 28 (or 29) February.
"""

from __future__ import annotations

import calendar
import math
from datetime import date, timedelta

ROLL = "roll"
CLAMP = "clamp"
OVERFLOW_RULES = (ROLL, CLAMP)


def _shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    total = year * 12 + (month - 1) + months
    return total // 12, total % 12 + 1


def add_months(dt: date, months: int, overflow: str = ROLL) -> date:
    """Return a new date ``months`` whole months after ``dt``.

    ``months`` may be zero or negative. ``overflow`` selects the day-of-month
    rule described in the module docstring.

    Raises
    ------
    ValueError
        If ``overflow`` is not one of ``"roll"`` or ``"clamp"``.
    """
    year, month = _shift_month(dt.year, dt.month, months)
    if overflow == ROLL:
        return date(year, month, 1) + timedelta(days=dt.day - 1)
    if overflow == CLAMP:
        day = min(dt.day, calendar.monthrange(year, month)[1])
        return date(year, month, day)
    raise ValueError(f"Unknown day overflow rule: {overflow!r}")


def date_for_period(start: date, period_index: int, overflow: str = ROLL) -> date:
    """Return the installment date of the 1-based ``period_index``.

    Period 1 falls exactly on ``start``.
    """
    return add_months(start, period_index - 1, overflow)


def fits_calendar(start: date, periods: int, overflow: str = ROLL) -> bool:
    """Return whether all ``periods`` installment dates fall before year 10000."""
    if overflow not in OVERFLOW_RULES:
        raise ValueError(f"Unknown day overflow rule: {overflow!r}")
    try:
        date_for_period(start, periods, overflow)
    except (ValueError, OverflowError):
        return False
    return True


def parse_iso_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a ``date`` object.

    Raises
    ------
    ValueError
        If the string is not a valid calendar date in that format.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) != 3 or len(parts[0]) != 4:
            raise ValueError
        year, month, day = (int(p) for p in parts)
        return date(year, month, day)
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {value}") from exc


def date_for_period_iso(start_date: str, period_index: int, overflow: str = ROLL) -> str:
    """String form of :func:`date_for_period`: ISO date in, ISO date out."""
    return date_for_period(parse_iso_date(start_date), period_index, overflow).isoformat()


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000"), thousands separators ("5,00,000") and
    shorthand with ``k``/``m`` suffixes (e.g. "500k" meaning 500_000).

    Raises
    ------
    ValueError
        If the string is not a number.
    """
    cleaned = value.strip().lower().replace(",", "").replace("_", "")
    factor = 1.0
    if cleaned.endswith("k"):
        factor = 1_000.0
        cleaned = cleaned[:-1]
    elif cleaned.endswith("m"):
        factor = 1_000_000.0
        cleaned = cleaned[:-1]
    try:
        amount = float(cleaned) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {value}") from exc
    if not math.isfinite(amount):
        raise ValueError(f"Invalid amount: {value}")
    return amount


def years_to_months(years: float) -> int:
    """Convert a tenure in years to whole months (half months round up)."""
    return int(math.floor(years * 12 + 0.5))
