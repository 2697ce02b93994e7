"""
Tests for dont_perish/engine/horizon.py.

What we test
------------
DayHorizon:
  - FINITE requires a day count; UNBOUNDED / INVALID reject one.
  - at_most() is only ever true for finite horizons.
  - str() renders "N days", "never", "invalid".

days_until_expiry():
  - Whole-day difference for a plain date (zero and negative allowed).
  - Fractional days from a datetime are rounded up.
  - Non-date expiry yields INVALID.

days_until_sold_out():
  - ceil(quantity / rate) for a positive rate.
  - Zero quantity sells out immediately (0 days).
  - Zero or negative rate is UNBOUNDED.

will_expire():
  - Strictly greater sell-out than expiry.
  - Unbounded sell-out against a finite expiry is True.
  - Any invalid horizon is False.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from dont_perish.engine.horizon import (
    INVALID,
    UNBOUNDED,
    DayHorizon,
    HorizonKind,
    days_until_expiry,
    days_until_sold_out,
    will_expire,
)

TODAY = date(2024, 1, 12)


# ── DayHorizon ─────────────────────────────────────────────────────────────────

class TestDayHorizon:
    def test_finite_requires_days(self):
        with pytest.raises(ValueError):
            DayHorizon(HorizonKind.FINITE)

    def test_unbounded_rejects_days(self):
        with pytest.raises(ValueError):
            DayHorizon(HorizonKind.UNBOUNDED, 3)

    def test_at_most_finite(self):
        assert DayHorizon.finite(2).at_most(2)
        assert DayHorizon.finite(-1).at_most(0)
        assert not DayHorizon.finite(3).at_most(2)

    def test_at_most_never_true_for_non_finite(self):
        assert not UNBOUNDED.at_most(1_000_000)
        assert not INVALID.at_most(1_000_000)

    def test_str(self):
        assert str(DayHorizon.finite(4)) == "4 days"
        assert str(UNBOUNDED) == "never"
        assert str(INVALID) == "invalid"

    def test_kind_flags(self):
        assert DayHorizon.finite(0).is_finite
        assert UNBOUNDED.is_unbounded
        assert INVALID.is_invalid


# ── days_until_expiry ──────────────────────────────────────────────────────────

class TestDaysUntilExpiry:
    def test_future_date(self):
        assert days_until_expiry(date(2024, 1, 15), TODAY) == DayHorizon.finite(3)

    def test_today_is_zero(self):
        assert days_until_expiry(TODAY, TODAY) == DayHorizon.finite(0)

    def test_past_date_is_negative(self):
        assert days_until_expiry(date(2024, 1, 10), TODAY) == DayHorizon.finite(-2)

    def test_datetime_rounds_up(self):
        noon = datetime(2024, 1, 12, 12, 0)
        assert days_until_expiry(date(2024, 1, 14), noon) == DayHorizon.finite(2)

    def test_datetime_same_day_expiry_rounds_toward_zero(self):
        # -0.5 days rounds up to 0.
        noon = datetime(2024, 1, 12, 12, 0)
        assert days_until_expiry(date(2024, 1, 12), noon).days == 0

    def test_unparsed_string_is_invalid(self):
        assert days_until_expiry("not-a-date", TODAY) is INVALID


# ── days_until_sold_out ────────────────────────────────────────────────────────

class TestDaysUntilSoldOut:
    def test_rounds_up(self):
        assert days_until_sold_out(15, 12) == DayHorizon.finite(2)

    def test_exact_division(self):
        assert days_until_sold_out(24, 8) == DayHorizon.finite(3)

    def test_zero_quantity(self):
        assert days_until_sold_out(0, 5) == DayHorizon.finite(0)

    def test_zero_rate_is_unbounded(self):
        assert days_until_sold_out(10, 0) is UNBOUNDED

    def test_negative_rate_is_unbounded(self):
        assert days_until_sold_out(10, -1) is UNBOUNDED


# ── will_expire ────────────────────────────────────────────────────────────────

class TestWillExpire:
    def test_sold_out_after_expiry(self):
        assert will_expire(DayHorizon.finite(3), DayHorizon.finite(2))

    def test_equal_horizons_do_not_expire(self):
        assert not will_expire(DayHorizon.finite(3), DayHorizon.finite(3))

    def test_unbounded_sold_out_expires(self):
        assert will_expire(UNBOUNDED, DayHorizon.finite(30))

    def test_invalid_expiry_never_expires(self):
        assert not will_expire(DayHorizon.finite(3), INVALID)
        assert not will_expire(UNBOUNDED, INVALID)

    def test_unbounded_expiry_never_expires(self):
        assert not will_expire(UNBOUNDED, UNBOUNDED)
