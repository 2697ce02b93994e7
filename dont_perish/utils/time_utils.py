"""
Date utilities for shelf-life arithmetic.

Key concepts:
  - Calendar dates: expiry dates and ``date_added`` are plain ``date`` objects.
  - Reference "today": callers may pass a ``date`` or a ``datetime``.  A
    ``datetime`` keeps its time of day so fractional days can be rounded up,
    the same way a wall-clock dashboard would see them.
  - Forward windows: the analytics timeline walks a fixed number of days
    from today.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Union

DayLike = Union[date, datetime]

_SECONDS_PER_DAY = 86_400


def parse_iso_date(value: str) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` string, returning ``None`` when it is not a date.

    A full ISO datetime string is accepted and truncated to its date part.

    Args:
        value: Raw string from a form field, CSV cell or JSON document.

    Returns:
        The parsed ``date``, or ``None`` if ``value`` cannot be parsed.
    """
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def fractional_days_between(start: DayLike, end: date) -> float:
    """Return the signed number of days from ``start`` to midnight of ``end``.

    When ``start`` is a plain ``date`` the result is a whole number.  When it
    is a ``datetime`` the time of day is honoured, so a product expiring
    tomorrow seen at 10:00 today is ``0.58`` days away.

    Args:
        start: Reference moment ("today").
        end:   Target calendar date.

    Returns:
        ``end - start`` in days (may be negative).
    """
    if isinstance(start, datetime):
        end_dt = datetime.combine(end, time.min, tzinfo=start.tzinfo)
        return (end_dt - start).total_seconds() / _SECONDS_PER_DAY
    return float((end - start).days)


def as_date(day: DayLike) -> date:
    """Return the calendar date of ``day`` (``datetime`` is truncated)."""
    if isinstance(day, datetime):
        return day.date()
    return day


def date_range(start: date, end: date, step_days: int = 1) -> list[date]:
    """Generate a list of dates from ``start`` to ``end`` (inclusive).

    Args:
        start: First date in the range.
        end: Last date in the range (inclusive).
        step_days: Step size in days (default 1).

    Returns:
        List of date objects.

    Raises:
        ValueError: If ``end < start`` or ``step_days < 1``.
    """
    if end < start:
        raise ValueError(f"end ({end}) must be >= start ({start}).")
    if step_days < 1:
        raise ValueError(f"step_days must be >= 1, got {step_days}.")

    result: list[date] = []
    current = start
    while current <= end:
        result.append(current)
        current += timedelta(days=step_days)
    return result


def today() -> date:
    """Return the local calendar date.

    Wrapped so CLI commands and the dashboard share one notion of "today".
    """
    return date.today()
