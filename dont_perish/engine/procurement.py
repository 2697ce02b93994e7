"""
Procurement advisor: reorder suggestions for fast-moving stock.

Only the sell-out horizon matters here.  Products that never sell out, or
that have more than a week of stock left, are skipped.

    days_until_sold_out   Urgency   Reorder quantity
    -------------------   -------   --------------------------
    <= 2                  high      ceil(rate * 14)   2 weeks
    <= 4                  medium    ceil(rate * 10)   10 days
    <= 7                  low       ceil(rate * 7)    1 week

estimated_revenue = recommended_quantity * (selling_price - cost_price).  It
is not clamped: a mispriced product shows a negative margin.

Products with an unparseable expiry date are left out, like in the discount
advisor, until the record is fixed.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from dont_perish.engine.horizon import DayHorizon, days_until_expiry, days_until_sold_out
from dont_perish.engine.risk import active_products
from dont_perish.models.product import Product
from dont_perish.taxonomy.risk_taxonomy import URGENCY_RANK, Urgency
from dont_perish.utils.time_utils import DayLike

logger = logging.getLogger(__name__)

REORDER_WINDOW_DAYS = 7


@dataclass(frozen=True)
class ReorderRule:
    """One row of the reorder table."""

    max_days_left: int
    urgency:       Urgency
    supply_days:   int
    reason:        str


_REORDER_RULES: tuple[ReorderRule, ...] = (
    ReorderRule(2, Urgency.HIGH,   14, "Will sell out within 2 days - urgent reorder needed"),
    ReorderRule(4, Urgency.MEDIUM, 10, "Will sell out within 4 days - reorder recommended"),
    ReorderRule(REORDER_WINDOW_DAYS, Urgency.LOW, 7, "Will sell out within a week - plan reorder"),
)


@dataclass(frozen=True)
class ProcurementRecommendation:
    """A reorder suggestion for one product.

    Attributes:
        product:              The product to reorder.
        days_until_sold_out:  Finite sell-out horizon (<= 7 days).
        recommended_quantity: Units to order.
        urgency:              HIGH / MEDIUM / LOW.
        reason:               Fixed human-readable explanation of the rule.
        estimated_revenue:    Margin on the reordered units (may be negative).
    """

    product:              Product
    days_until_sold_out:  DayHorizon
    recommended_quantity: int
    urgency:              Urgency
    reason:               str
    estimated_revenue:    float


def select_reorder_rule(sold_out: DayHorizon) -> Optional[ReorderRule]:
    """Return the reorder rule for a sell-out horizon, or ``None``."""
    if not sold_out.is_finite:
        return None
    for rule in _REORDER_RULES:
        if sold_out.at_most(rule.max_days_left):
            return rule
    return None


def recommend_procurement(
    products: Iterable[Product],
    today: DayLike,
) -> list[ProcurementRecommendation]:
    """Build reorder recommendations for active products that will run out soon.

    Args:
        products: Catalog snapshot (ignored / sold products are skipped).
        today:    Reference date; only used to screen out invalid expiry dates.

    Returns:
        Recommendations ordered by urgency (high, medium, low).  Ties keep
        their catalog order.
    """
    recommendations: list[ProcurementRecommendation] = []

    for product in active_products(products):
        if days_until_expiry(product.expiry_date, today).is_invalid:
            logger.debug(
                "Skipping reorder for %s: invalid expiry %r",
                product.product_id, product.expiry_date,
            )
            continue

        sold_out = days_until_sold_out(product.quantity, product.average_sales_per_day)
        rule = select_reorder_rule(sold_out)
        if rule is None:
            continue

        quantity = math.ceil(product.average_sales_per_day * rule.supply_days)
        recommendations.append(
            ProcurementRecommendation(
                product=product,
                days_until_sold_out=sold_out,
                recommended_quantity=quantity,
                urgency=rule.urgency,
                reason=rule.reason,
                estimated_revenue=quantity * (product.selling_price - product.cost_price),
            )
        )

    return sorted(recommendations, key=lambda r: -URGENCY_RANK[r.urgency])
