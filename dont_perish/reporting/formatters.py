"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept engine outputs and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Role markers
------------
The discount table is role-aware.  Suggestions whose percentage exceeds the
staff limit are tagged ``ADMIN ONLY`` when viewed as staff, and a footer
tells the reader how many rows need an admin to apply them.  Admin views
show no markers.
"""

from __future__ import annotations

from collections.abc import Sequence

from dont_perish.access import (
    DEFAULT_STAFF_MAX_DISCOUNT_PCT,
    can_apply_discount,
)
from dont_perish.engine.analytics import AnalyticsSummary
from dont_perish.engine.discounts import DiscountSuggestion, total_carbon_savings
from dont_perish.engine.procurement import ProcurementRecommendation
from dont_perish.engine.risk import RiskAnalysis
from dont_perish.reporting.export import horizon_cell
from dont_perish.taxonomy.risk_taxonomy import RiskLevel, UserRole

ADMIN_ONLY_MARKER = "ADMIN ONLY"


def _money(value: float, currency: str) -> str:
    return f"{currency}{value:,.2f}"


def _days(horizon) -> str:
    cell = horizon_cell(horizon)
    return f"{cell}d" if isinstance(cell, int) else cell


def _header_block(title: str, as_of: str) -> list[str]:
    return ["", f"=== {title} ===", f"  As of: {as_of}"]


# ── Risk alerts ───────────────────────────────────────────────────────────────


def format_risk_table(
    analyses: Sequence[RiskAnalysis],
    as_of: str,
    currency: str = "₹",
    include_low: bool = False,
) -> str:
    """Format risk analyses as an alert table, highest risk first.

    Args:
        analyses:    Output of ``assess_inventory`` (already ordered).
        as_of:       Reference date shown in the header.
        currency:    Currency symbol for the loss column.
        include_low: Show LOW-risk rows too (default: HIGH and MEDIUM only).

    Returns:
        Multi-line string.
    """
    lines = _header_block("Expiry Risk Alerts", as_of)
    shown = [
        a for a in analyses
        if include_low or a.risk_level is not RiskLevel.LOW
    ]
    if not shown:
        lines.append("")
        lines.append("  (no products at risk)")
        return "\n".join(lines)

    lines.append("")
    header = (
        f"  {'Product':<28}  {'Category':<12}  {'Qty':>5}  {'Expires':>8}  "
        f"{'Sold out':>8}  {'Risk':>6}  {'Potential loss':>15}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for a in shown:
        p = a.product
        lines.append(
            f"  {p.name[:28]:<28}  {p.category[:12]:<12}  {p.quantity:>5}  "
            f"{_days(a.days_until_expiry):>8}  {_days(a.days_until_sold_out):>8}  "
            f"{a.risk_level.value:>6}  {_money(a.potential_loss, currency):>15}"
        )

    total_loss = sum(a.potential_loss for a in shown)
    lines.append("")
    lines.append(f"  Total potential loss: {_money(total_loss, currency)}")
    return "\n".join(lines)


# ── Discounts ─────────────────────────────────────────────────────────────────


def format_discount_table(
    suggestions: Sequence[DiscountSuggestion],
    as_of: str,
    role: UserRole = UserRole.ADMIN,
    staff_max_discount_pct: float = DEFAULT_STAFF_MAX_DISCOUNT_PCT,
    currency: str = "₹",
) -> str:
    """Format discount suggestions with role markers and carbon totals.

    Args:
        suggestions:            Output of ``suggest_discounts``.
        as_of:                  Reference date shown in the header.
        role:                   Viewer role; staff see ``ADMIN ONLY`` tags.
        staff_max_discount_pct: Largest discount staff may apply.
        currency:               Currency symbol for price columns.

    Returns:
        Multi-line string.
    """
    lines = _header_block("Smart Discount Suggestions", as_of)
    lines.append(f"  Role:  {role.value}")
    if not suggestions:
        lines.append("")
        lines.append("  (no discounts suggested)")
        return "\n".join(lines)

    lines.append("")
    header = (
        f"  {'Product':<28}  {'Urgency':>7}  {'Disc':>5}  {'Price':>10}  "
        f"{'New price':>10}  {'Boost':>6}  {'Savings':>12}  {'Note':<10}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    blocked = 0
    for s in suggestions:
        note = ""
        if not can_apply_discount(role, s.discount_pct, staff_max_discount_pct):
            note = ADMIN_ONLY_MARKER
            blocked += 1
        lines.append(
            f"  {s.product.name[:28]:<28}  {s.urgency.value:>7}  "
            f"{s.discount_pct:>4.0f}%  {_money(s.product.selling_price, currency):>10}  "
            f"{_money(s.new_price, currency):>10}  {s.estimated_boost:>5.1f}x  "
            f"{_money(s.potential_savings, currency):>12}  {note:<10}"
        )
        lines.append(f"      {s.reason}")

    carbon = total_carbon_savings(suggestions)
    lines.append("")
    lines.append(
        f"  Food waste prevented: {carbon.food_waste_prevented_kg:.1f} kg  "
        f"CO2 saved: {carbon.co2_saved_kg:.1f} kg"
    )
    if blocked:
        lines.append(
            f"  {blocked} suggestion(s) above {staff_max_discount_pct:.0f}% "
            "need an admin to apply."
        )
    return "\n".join(lines)


# ── Procurement ───────────────────────────────────────────────────────────────


def format_procurement_table(
    recommendations: Sequence[ProcurementRecommendation],
    as_of: str,
    currency: str = "₹",
) -> str:
    """Format reorder recommendations, most urgent first."""
    lines = _header_block("Procurement Recommendations", as_of)
    if not recommendations:
        lines.append("")
        lines.append("  (nothing to reorder in the next 7 days)")
        return "\n".join(lines)

    lines.append("")
    header = (
        f"  {'Product':<28}  {'Urgency':>7}  {'Sold out':>8}  "
        f"{'Order qty':>9}  {'Est. revenue':>14}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for r in recommendations:
        lines.append(
            f"  {r.product.name[:28]:<28}  {r.urgency.value:>7}  "
            f"{_days(r.days_until_sold_out):>8}  {r.recommended_quantity:>9}  "
            f"{_money(r.estimated_revenue, currency):>14}"
        )
        lines.append(f"      {r.reason}")

    total = sum(r.estimated_revenue for r in recommendations)
    lines.append("")
    lines.append(f"  Total estimated revenue: {_money(total, currency)}")
    return "\n".join(lines)


# ── Analytics ─────────────────────────────────────────────────────────────────


def format_analytics(summary: AnalyticsSummary, as_of: str, currency: str = "₹") -> str:
    """Format the analytics summary: headline values, categories, timeline."""
    lines = _header_block("Inventory Analytics", as_of)
    lines.append("")
    lines.append(f"  Active products:     {summary.product_count}")
    lines.append(f"  High-risk products:  {summary.high_risk_count}")
    lines.append(f"  Total value:         {_money(summary.total_value, currency)}")
    lines.append(f"  At-risk value:       {_money(summary.at_risk_value, currency)}")
    lines.append(f"  Potential waste:     {summary.potential_waste:,.0f} units")

    if summary.risk_distribution:
        dist = ", ".join(
            f"{level.value}={count}" for level, count in summary.risk_distribution.items()
        )
        lines.append(f"  Risk distribution:   {dist}")

    if summary.category_risk:
        lines.append("")
        lines.append("  [BY CATEGORY]")
        header = f"    {'Category':<14}  {'HIGH':>5}  {'MEDIUM':>6}  {'LOW':>5}  {'Total':>5}"
        lines.append(header)
        lines.append("    " + "-" * (len(header) - 4))
        for c in summary.category_risk:
            lines.append(
                f"    {c.category[:14]:<14}  {c.high:>5}  {c.medium:>6}  "
                f"{c.low:>5}  {c.total:>5}"
            )

    lines.append("")
    lines.append("  [EXPIRY TIMELINE]")
    header = f"    {'Day':<8}  {'Date':<10}  {'Expiring':>8}  {'At risk':>7}"
    lines.append(header)
    lines.append("    " + "-" * (len(header) - 4))
    for t in summary.timeline:
        lines.append(
            f"    {t.label:<8}  {t.day.isoformat():<10}  {t.expiring:>8}  {t.at_risk:>7}"
        )
    return "\n".join(lines)
