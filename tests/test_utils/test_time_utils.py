"""
Tests for dont_perish/utils/time_utils.py and dont_perish/utils/logging.py.

What we test
------------
parse_iso_date():
  - Plain dates, datetimes (with Z suffix), blanks and junk.

fractional_days_between():
  - Whole days for dates; fractions for datetimes; negatives allowed.
  - Timezone-aware datetimes compare against midnight in their own zone.

date_range():
  - Inclusive bounds, step, invalid arguments.

configure_logging():
  - JSON formatter emits one object per line with extra fields.
  - File handler created only when log_file is set.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta, timezone

import pytest

from dont_perish.config import LoggingConfig
from dont_perish.utils.logging import _JsonFormatter, configure_logging
from dont_perish.utils.time_utils import (
    as_date,
    date_range,
    fractional_days_between,
    parse_iso_date,
)


# ── parse_iso_date ─────────────────────────────────────────────────────────────

class TestParseIsoDate:
    def test_date(self):
        assert parse_iso_date("2024-01-15") == date(2024, 1, 15)

    def test_datetime_with_z(self):
        assert parse_iso_date("2024-01-15T23:00:00Z") == date(2024, 1, 15)

    def test_whitespace(self):
        assert parse_iso_date("  2024-01-15 ") == date(2024, 1, 15)

    @pytest.mark.parametrize("value", ["", "   ", "15/01/2024", "2024-02-30", "tomorrow"])
    def test_unparseable(self, value):
        assert parse_iso_date(value) is None


# ── fractional_days_between ────────────────────────────────────────────────────

class TestFractionalDays:
    def test_dates(self):
        assert fractional_days_between(date(2024, 1, 12), date(2024, 1, 15)) == 3.0
        assert fractional_days_between(date(2024, 1, 12), date(2024, 1, 10)) == -2.0

    def test_datetime(self):
        start = datetime(2024, 1, 12, 18, 0)
        assert fractional_days_between(start, date(2024, 1, 13)) == pytest.approx(0.25)

    def test_aware_datetime(self):
        start = datetime(2024, 1, 12, 12, 0, tzinfo=timezone(timedelta(hours=5)))
        assert fractional_days_between(start, date(2024, 1, 13)) == pytest.approx(0.5)

    def test_as_date(self):
        assert as_date(datetime(2024, 1, 12, 9, 0)) == date(2024, 1, 12)
        assert as_date(date(2024, 1, 12)) == date(2024, 1, 12)


# ── date_range ─────────────────────────────────────────────────────────────────

class TestDateRange:
    def test_inclusive(self):
        days = date_range(date(2024, 1, 1), date(2024, 1, 3))
        assert days == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]

    def test_step(self):
        assert len(date_range(date(2024, 1, 1), date(2024, 1, 7), step_days=3)) == 3

    def test_single_day(self):
        assert date_range(date(2024, 1, 1), date(2024, 1, 1)) == [date(2024, 1, 1)]

    def test_end_before_start(self):
        with pytest.raises(ValueError):
            date_range(date(2024, 1, 2), date(2024, 1, 1))

    def test_bad_step(self):
        with pytest.raises(ValueError):
            date_range(date(2024, 1, 1), date(2024, 1, 2), step_days=0)


# ── Logging ────────────────────────────────────────────────────────────────────

class TestLogging:
    def test_json_formatter(self):
        record = logging.LogRecord(
            "dont_perish.test", logging.INFO, __file__, 1, "Loaded %d products", (7,), None
        )
        record.catalog = "sample.json"
        payload = json.loads(_JsonFormatter().format(record))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "dont_perish.test"
        assert payload["msg"] == "Loaded 7 products"
        assert payload["catalog"] == "sample.json"

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "app.log"
        configure_logging(LoggingConfig(level="DEBUG", log_file=str(log_file)))
        try:
            logging.getLogger("dont_perish.test").info("hello file")
            for handler in logging.getLogger().handlers:
                handler.flush()
            assert "hello file" in log_file.read_text(encoding="utf-8")
        finally:
            for handler in list(logging.getLogger().handlers):
                handler.close()
            logging.basicConfig(force=True)

    def test_no_file_handler_by_default(self):
        configure_logging(LoggingConfig())
        try:
            assert not any(
                isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers
            )
        finally:
            logging.basicConfig(force=True)
