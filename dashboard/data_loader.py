"""
Dashboard data loader.

Builds the pandas DataFrames each dashboard tab renders.  Every frame is
derived from a fresh engine call over the current session snapshot, so a
mark-sold, ignore, edit or delete action shows up on the next rerun with
nothing to invalidate.

Nothing here imports Streamlit; the frames can be built and checked in tests.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from pathlib import Path
from typing import Any

import pandas as pd

from dont_perish.access import can_apply_discount
from dont_perish.catalog import InventorySession, load_catalog
from dont_perish.engine import (
    AnalyticsSummary,
    DiscountSuggestion,
    ProcurementRecommendation,
    RiskAnalysis,
)
from dont_perish.models.product import Product, ProductUpdate
from dont_perish.reporting.export import (
    INVENTORY_EXPORT_COLUMNS,
    horizon_cell,
    inventory_rows,
)
from dont_perish.taxonomy.risk_taxonomy import RiskLevel, UserRole


def load_session(catalog_path: Path, today: date) -> InventorySession:
    """Seed a new session from a catalog file."""
    return InventorySession(load_catalog(catalog_path, added_on=today))


# ── Edits ────────────────────────────────────────────────────────────────────

EDITABLE_FIELDS = (
    "name",
    "category",
    "quantity",
    "expiry_date",
    "average_sales_per_day",
    "cost_price",
    "selling_price",
)


def edit_update(product: Product, values: Mapping[str, Any]) -> ProductUpdate:
    """Build a ``ProductUpdate`` holding only the edit-form fields that changed.

    Raises:
        pydantic.ValidationError: If a changed value is out of range.
    """
    changes = {
        field: value
        for field, value in values.items()
        if field in EDITABLE_FIELDS and value != getattr(product, field)
    }
    return ProductUpdate(**changes)


def apply_edit(
    session: InventorySession,
    product_id: str,
    values: Mapping[str, Any],
) -> Product:
    """Apply the edit form to one product and return the stored result.

    Raises:
        ProductNotFoundError: If the product was deleted meanwhile.
        pydantic.ValidationError: If the edited record is invalid; the session
            keeps the previous version.
    """
    updates = edit_update(session.get(product_id), values)
    if not updates.model_fields_set:
        return session.get(product_id)
    return session.update_product(product_id, updates)


# ── Frames ───────────────────────────────────────────────────────────────────


def alerts_frame(analyses: Sequence[RiskAnalysis]) -> pd.DataFrame:
    """HIGH and MEDIUM analyses, in engine order."""
    rows = [
        {
            "ID":             a.product.product_id,
            "Product":        a.product.name,
            "Category":       a.product.category,
            "Quantity":       a.product.quantity,
            "Expires in":     horizon_cell(a.days_until_expiry),
            "Sold out in":    horizon_cell(a.days_until_sold_out),
            "Risk":           a.risk_level.value,
            "Potential loss": round(a.potential_loss, 2),
        }
        for a in analyses
        if a.risk_level is not RiskLevel.LOW
    ]
    return pd.DataFrame(rows)


def discount_frame(
    suggestions: Sequence[DiscountSuggestion],
    role: UserRole,
    staff_max_discount_pct: float,
) -> pd.DataFrame:
    rows = [
        {
            "Product":        s.product.name,
            "Urgency":        s.urgency.value,
            "Discount %":     s.discount_pct,
            "Price":          s.product.selling_price,
            "New price":      round(s.new_price, 2),
            "Sales boost":    f"{s.estimated_boost:.1f}x",
            "Savings":        round(s.potential_savings, 2),
            "CO2 saved (kg)": round(s.carbon.co2_saved_kg, 2),
            "Can apply":      can_apply_discount(role, s.discount_pct, staff_max_discount_pct),
            "Reason":         s.reason,
        }
        for s in suggestions
    ]
    return pd.DataFrame(rows)


def procurement_frame(recommendations: Sequence[ProcurementRecommendation]) -> pd.DataFrame:
    rows = [
        {
            "Product":           r.product.name,
            "Urgency":           r.urgency.value,
            "Sold out in":       horizon_cell(r.days_until_sold_out),
            "Order quantity":    r.recommended_quantity,
            "Estimated revenue": round(r.estimated_revenue, 2),
            "Reason":            r.reason,
        }
        for r in recommendations
    ]
    return pd.DataFrame(rows)


def category_frame(summary: AnalyticsSummary) -> pd.DataFrame:
    """Category x risk-level counts, indexed by category (stacked bar chart input)."""
    rows = [
        {"Category": c.category, "HIGH": c.high, "MEDIUM": c.medium, "LOW": c.low}
        for c in summary.category_risk
    ]
    if not rows:
        return pd.DataFrame(columns=["HIGH", "MEDIUM", "LOW"])
    return pd.DataFrame(rows).set_index("Category")


def timeline_frame(summary: AnalyticsSummary, days: int | None = None) -> pd.DataFrame:
    """Expiring / at-risk counts per day, indexed by day label.

    Args:
        days: Show only the first ``days`` entries (default: all).
    """
    entries = summary.timeline if days is None else summary.timeline[:days]
    rows = [
        {"Day": t.label, "Expiring": t.expiring, "At risk": t.at_risk}
        for t in entries
    ]
    return pd.DataFrame(rows, columns=["Day", "Expiring", "At risk"]).set_index("Day")


def distribution_frame(summary: AnalyticsSummary) -> pd.DataFrame:
    rows = [
        {"Risk": level.value, "Products": count}
        for level, count in summary.risk_distribution.items()
    ]
    return pd.DataFrame(rows, columns=["Risk", "Products"])


def inventory_frame(products: Sequence[Product]) -> pd.DataFrame:
    """Full catalog in export column order (used for the CSV download too)."""
    return pd.DataFrame(inventory_rows(products), columns=INVENTORY_EXPORT_COLUMNS)
