"""
Tests for dont_perish/cli.py.

What we test
------------
Runs each command through ``typer.testing.CliRunner`` against the seed
catalog on 2024-01-12:
  - validate-config prints the parsed values.
  - risk-report lists the two HIGH products; --all adds the LOW ones.
  - discounts marks admin-only rows for staff, not for admin.
  - procurement lists all seven products.
  - analytics prints totals in the configured currency.
  - export writes four files into --output-dir.
  - Bad --today, unknown --role, missing or invalid catalog, missing
    --config all exit with code 1 and an [ERROR] line.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from dont_perish.cli import app

runner = CliRunner()

_ENV_VARS = (
    "DONT_PERISH_CATALOG",
    "DONT_PERISH_OUTPUT_DIR",
    "DONT_PERISH_ROLE",
    "DONT_PERISH_LOG_LEVEL",
    "DONT_PERISH_DEBUG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def base_args(sample_catalog_path):
    return ["--catalog", str(sample_catalog_path), "--today", "2024-01-12"]


# ── validate-config ────────────────────────────────────────────────────────────

class TestValidateConfig:
    def test_ok(self):
        result = runner.invoke(app, ["validate-config"])
        assert result.exit_code == 0, result.output
        assert "Configuration validated successfully." in result.output
        assert "Staff max discount: 30%" in result.output
        assert "[OK] Config is valid." in result.output

    def test_full(self):
        result = runner.invoke(app, ["validate-config", "--full"])
        assert result.exit_code == 0, result.output
        assert '"staff_max_discount_pct"' in result.output

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "x.toml")])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output


# ── Engine commands ────────────────────────────────────────────────────────────

class TestRiskReport:
    def test_default(self, base_args):
        result = runner.invoke(app, ["risk-report", *base_args])
        assert result.exit_code == 0, result.output
        assert "Fresh Tomatoes (1kg)" in result.output
        assert "Fresh Spinach" in result.output
        assert "Greek Yogurt" not in result.output
        assert "[OK] 7 active product(s) assessed." in result.output

    def test_all(self, base_args):
        result = runner.invoke(app, ["risk-report", *base_args, "--all"])
        assert result.exit_code == 0, result.output
        assert "Greek Yogurt" in result.output


class TestDiscounts:
    def test_staff(self, base_args):
        result = runner.invoke(app, ["discounts", *base_args, "--role", "staff"])
        assert result.exit_code == 0, result.output
        assert "ADMIN ONLY" in result.output
        assert "3 suggestion(s) above 30% need an admin to apply." in result.output
        assert "[OK] 4 discount suggestion(s)." in result.output

    def test_admin(self, base_args):
        result = runner.invoke(app, ["discounts", *base_args, "--role", "ADMIN"])
        assert result.exit_code == 0, result.output
        assert "ADMIN ONLY" not in result.output

    def test_unknown_role(self, base_args):
        result = runner.invoke(app, ["discounts", *base_args, "--role", "manager"])
        assert result.exit_code == 1
        assert "Unknown role" in result.output


class TestProcurement:
    def test_all_seed_products_reordered(self, base_args):
        result = runner.invoke(app, ["procurement", *base_args])
        assert result.exit_code == 0, result.output
        assert "Chicken Breast (1kg)" in result.output
        assert "[OK] 7 reorder recommendation(s)." in result.output


class TestAnalytics:
    def test_totals(self, base_args):
        result = runner.invoke(app, ["analytics", *base_args])
        assert result.exit_code == 0, result.output
        assert "Total value:         ₹7,595.00" in result.output
        assert "At-risk value:       ₹1,290.00" in result.output
        assert "High-risk products:  2" in result.output


class TestExport:
    def test_writes_files(self, base_args, tmp_path):
        out_dir = tmp_path / "exports"
        result = runner.invoke(app, ["export", *base_args, "--output-dir", str(out_dir)])
        assert result.exit_code == 0, result.output
        assert (out_dir / "inventory-report-2024-01-12.csv").exists()
        assert (out_dir / "discounts_2024-01-12.csv").exists()
        assert (out_dir / "procurement_2024-01-12.csv").exists()
        report = json.loads((out_dir / "report_2024-01-12.json").read_text(encoding="utf-8"))
        assert report["analytics"]["high_risk_count"] == 2
        assert "[OK] 4 file(s) written." in result.output


# ── Input errors ───────────────────────────────────────────────────────────────

class TestInputErrors:
    def test_bad_today(self, sample_catalog_path):
        result = runner.invoke(
            app, ["risk-report", "--catalog", str(sample_catalog_path), "--today", "12/01/2024"]
        )
        assert result.exit_code == 1
        assert "Invalid --today" in result.output

    def test_missing_catalog(self, tmp_path):
        result = runner.invoke(
            app, ["analytics", "--catalog", str(tmp_path / "none.json"), "--today", "2024-01-12"]
        )
        assert result.exit_code == 1
        assert "Catalog file not found" in result.output

    def test_invalid_catalog(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"name": "Milk"}]), encoding="utf-8")
        result = runner.invoke(app, ["procurement", "--catalog", str(path), "--today", "2024-01-12"])
        assert result.exit_code == 1
        assert "[ERROR] Invalid catalog" in result.output
