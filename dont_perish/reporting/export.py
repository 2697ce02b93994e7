"""
Export helpers for spreadsheets and manual analysis.

``export_to_csv`` / ``export_to_json`` write generic ``list[dict]`` / ``dict``
data and return the written ``Path``.  The ``*_rows`` adapters flatten engine
outputs into one dict per product so the CSVs open directly in Excel or
pandas without any unpivoting.

Day horizons are written as a number of days, ``never`` (stock never runs
out) or ``invalid`` (expiry date could not be parsed).
"""

from __future__ import annotations

import csv
import json
from collections.abc import Iterable
from datetime import date
from pathlib import Path
from typing import Union

from dont_perish.access import DEFAULT_STAFF_MAX_DISCOUNT_PCT, requires_admin_approval
from dont_perish.engine.analytics import AnalyticsSummary
from dont_perish.engine.discounts import DiscountSuggestion, total_carbon_savings
from dont_perish.engine.horizon import DayHorizon
from dont_perish.engine.procurement import ProcurementRecommendation
from dont_perish.engine.risk import RiskAnalysis
from dont_perish.models.product import Product

# Column titles of the inventory report, in order.
INVENTORY_EXPORT_COLUMNS: list[str] = [
    "Name", "Category", "Quantity", "Expiry Date", "Sales Per Day",
    "Cost Price", "Selling Price", "Date Added",
]


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.
                    When given, a header row is written even for no records.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records and fieldnames is None:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(data: Union[dict, list], path: Path) -> Path:
    """Write ``data`` to a pretty-printed UTF-8 JSON file.

    Dates and other non-JSON values are written with ``str()``.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(data, indent=2, default=str, ensure_ascii=False), encoding="utf-8"
    )
    return path


def horizon_cell(horizon: DayHorizon) -> Union[int, str]:
    """Flat representation of a ``DayHorizon``: ``3``, ``"never"`` or ``"invalid"``."""
    if horizon.is_finite:
        return horizon.days  # type: ignore[return-value]
    return "never" if horizon.is_unbounded else "invalid"


# ── Row adapters ──────────────────────────────────────────────────────────────


def inventory_rows(products: Iterable[Product]) -> list[dict]:
    """Rows for the inventory report: every product, including inactive ones."""
    return [
        {
            "Name":          p.name,
            "Category":      p.category,
            "Quantity":      p.quantity,
            "Expiry Date":   str(p.expiry_date),
            "Sales Per Day": p.average_sales_per_day,
            "Cost Price":    p.cost_price,
            "Selling Price": p.selling_price,
            "Date Added":    p.date_added.isoformat(),
        }
        for p in products
    ]


def risk_rows(analyses: Iterable[RiskAnalysis]) -> list[dict]:
    """One row per risk analysis, in the given order."""
    return [
        {
            "product_id":          a.product.product_id,
            "name":                a.product.name,
            "category":            a.product.category,
            "quantity":            a.product.quantity,
            "days_until_expiry":   horizon_cell(a.days_until_expiry),
            "days_until_sold_out": horizon_cell(a.days_until_sold_out),
            "risk_level":          a.risk_level.value,
            "will_expire":         a.will_expire,
            "potential_loss":      round(a.potential_loss, 2),
        }
        for a in analyses
    ]


def discount_rows(
    suggestions: Iterable[DiscountSuggestion],
    staff_max_discount_pct: float = DEFAULT_STAFF_MAX_DISCOUNT_PCT,
) -> list[dict]:
    """One row per discount suggestion, with the admin-approval flag."""
    return [
        {
            "product_id":              s.product.product_id,
            "name":                    s.product.name,
            "category":                s.product.category,
            "urgency":                 s.urgency.value,
            "discount_pct":            s.discount_pct,
            "selling_price":           s.product.selling_price,
            "new_price":               round(s.new_price, 2),
            "estimated_boost":         s.estimated_boost,
            "potential_savings":       round(s.potential_savings, 2),
            "food_waste_prevented_kg": round(s.carbon.food_waste_prevented_kg, 2),
            "co2_saved_kg":            round(s.carbon.co2_saved_kg, 2),
            "requires_admin":          requires_admin_approval(
                s.discount_pct, staff_max_discount_pct
            ),
            "reason":                  s.reason,
        }
        for s in suggestions
    ]


def procurement_rows(recommendations: Iterable[ProcurementRecommendation]) -> list[dict]:
    """One row per reorder recommendation."""
    return [
        {
            "product_id":           r.product.product_id,
            "name":                 r.product.name,
            "category":             r.product.category,
            "urgency":              r.urgency.value,
            "days_until_sold_out":  horizon_cell(r.days_until_sold_out),
            "recommended_quantity": r.recommended_quantity,
            "estimated_revenue":    round(r.estimated_revenue, 2),
            "reason":               r.reason,
        }
        for r in recommendations
    ]


def analytics_to_dict(summary: AnalyticsSummary) -> dict:
    """Nested, JSON-ready view of an ``AnalyticsSummary``."""
    return {
        "total_value":     round(summary.total_value, 2),
        "at_risk_value":   round(summary.at_risk_value, 2),
        "potential_waste": round(summary.potential_waste, 2),
        "high_risk_count": summary.high_risk_count,
        "risk_distribution": {
            level.value: count for level, count in summary.risk_distribution.items()
        },
        "category_risk": [
            {
                "category": c.category,
                "high":     c.high,
                "medium":   c.medium,
                "low":      c.low,
                "total":    c.total,
            }
            for c in summary.category_risk
        ],
        "timeline": [
            {
                "label":    t.label,
                "date":     t.day.isoformat(),
                "expiring": t.expiring,
                "at_risk":  t.at_risk,
            }
            for t in summary.timeline
        ],
    }


def build_report(
    today: date,
    analyses: list[RiskAnalysis],
    suggestions: list[DiscountSuggestion],
    recommendations: list[ProcurementRecommendation],
    summary: AnalyticsSummary,
    staff_max_discount_pct: float = DEFAULT_STAFF_MAX_DISCOUNT_PCT,
) -> dict:
    """Assemble the full JSON report for one engine run."""
    carbon = total_carbon_savings(suggestions)
    return {
        "as_of":          today.isoformat(),
        "risk_alerts":    risk_rows(analyses),
        "discounts":      discount_rows(suggestions, staff_max_discount_pct),
        "carbon_savings": {
            "food_waste_prevented_kg": round(carbon.food_waste_prevented_kg, 2),
            "co2_saved_kg":            round(carbon.co2_saved_kg, 2),
        },
        "procurement":    procurement_rows(recommendations),
        "analytics":      analytics_to_dict(summary),
    }
