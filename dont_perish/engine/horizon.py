"""
Day horizons: the two day counts every risk rule is built on.

    days_until_expiry   = ceil(expiry_date - today)          (may be negative)
    days_until_sold_out = ceil(quantity / average_sales_per_day)

Neither count is always a number.  A product that does not sell never runs
out, and a product whose expiry date could not be parsed has no expiry count
at all.  ``DayHorizon`` models all three cases as an explicit tagged value
instead of ``float("inf")`` / ``float("nan")``:

    FINITE(n)   -- an ordinary whole number of days
    UNBOUNDED   -- "never" (sales velocity is zero)
    INVALID     -- the input date was unusable

Comparison rule used by ``will_expire``
---------------------------------------
    FINITE(a)  vs FINITE(b)   ->  a > b
    UNBOUNDED  vs FINITE(b)   ->  True   (any finite expiry comes first)
    anything   vs INVALID     ->  False
    INVALID    vs anything    ->  False
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Optional, Union

from dont_perish.utils.time_utils import DayLike, fractional_days_between


class HorizonKind(StrEnum):
    FINITE = "finite"
    UNBOUNDED = "unbounded"
    INVALID = "invalid"


@dataclass(frozen=True)
class DayHorizon:
    """A day count that may be unbounded or invalid.

    Attributes:
        kind: Which of the three cases this is.
        days: Whole days for ``FINITE``; ``None`` otherwise.
    """

    kind: HorizonKind
    days: Optional[int] = None

    def __post_init__(self) -> None:
        if self.kind is HorizonKind.FINITE and self.days is None:
            raise ValueError("A FINITE horizon needs a day count.")
        if self.kind is not HorizonKind.FINITE and self.days is not None:
            raise ValueError(f"A {self.kind.value} horizon carries no day count.")

    @classmethod
    def finite(cls, days: int) -> "DayHorizon":
        return cls(HorizonKind.FINITE, int(days))

    @property
    def is_finite(self) -> bool:
        return self.kind is HorizonKind.FINITE

    @property
    def is_unbounded(self) -> bool:
        return self.kind is HorizonKind.UNBOUNDED

    @property
    def is_invalid(self) -> bool:
        return self.kind is HorizonKind.INVALID

    def at_most(self, limit: int) -> bool:
        """``True`` only for a finite horizon of ``limit`` days or fewer."""
        return self.is_finite and self.days <= limit  # type: ignore[operator]

    def __str__(self) -> str:
        if self.is_finite:
            return f"{self.days} days"
        if self.is_unbounded:
            return "never"
        return "invalid"


UNBOUNDED = DayHorizon(HorizonKind.UNBOUNDED)
INVALID = DayHorizon(HorizonKind.INVALID)


def days_until_expiry(expiry_date: Union[date, str], today: DayLike) -> DayHorizon:
    """Whole days from ``today`` until ``expiry_date``, rounded up.

    Args:
        expiry_date: The product's expiry date.  Anything that is not a
            ``date`` (an unparsed string) yields ``INVALID``.
        today: Reference date or datetime.

    Returns:
        ``FINITE(n)`` (``n`` may be zero or negative) or ``INVALID``.
    """
    if not isinstance(expiry_date, date):
        return INVALID
    return DayHorizon.finite(math.ceil(fractional_days_between(today, expiry_date)))


def days_until_sold_out(quantity: float, average_sales_per_day: float) -> DayHorizon:
    """Days of stock left at the current sales pace, rounded up.

    A non-positive sales rate means the stock never runs out: ``UNBOUNDED``.
    """
    if average_sales_per_day > 0:
        return DayHorizon.finite(math.ceil(quantity / average_sales_per_day))
    return UNBOUNDED


def will_expire(sold_out: DayHorizon, expiry: DayHorizon) -> bool:
    """``True`` when the stock is projected to outlast its freshness window."""
    if sold_out.is_invalid or expiry.is_invalid:
        return False
    if expiry.is_unbounded:
        return False
    if sold_out.is_unbounded:
        return True
    return sold_out.days > expiry.days  # type: ignore[operator]
