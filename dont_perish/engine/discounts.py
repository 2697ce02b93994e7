"""
Discount advisor: markdowns for stock that will not sell through in time.

A product is considered when it is active, has a valid expiry date, and is
either projected to outlast its freshness (``will_expire``) or expires within
three days.  The first matching rule sets the discount:

    Condition                              Discount  Urgency  Boost
    -------------------------------------  --------  -------  -----
    days_until_expiry <= 1                     50%    high     3.0x
    days_until_expiry <= 2                     35%    high     2.5x
    days_until_expiry <= 3                     25%    medium   2.0x
    will_expire and gap > 5                    30%    high     2.2x
    will_expire and gap > 2                    20%    medium   1.8x
    will_expire                                15%    low      1.5x

where ``gap = days_until_sold_out - days_until_expiry`` (an unbounded sell-out
has an unbounded gap).  ``boost`` is the expected sales-velocity multiplier
shown next to the suggestion.

Carbon model
------------
    waste_prevented_kg = (quantity - rate * days_until_expiry) * 0.5   if will_expire
                       = quantity * 0.3                                 otherwise
    co2_saved_kg       = waste_prevented_kg * 2.75   (kg CO2e per kg food waste)

Both are floored at zero.

The advisor only sizes the discount.  Whether the current user may apply it
(staff are capped at 30%) is decided by the caller; see ``dont_perish.access``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from dont_perish.engine.horizon import DayHorizon
from dont_perish.engine.risk import (
    RiskAnalysis,
    active_products,
    classify_risk,
    unsold_at_expiry,
)
from dont_perish.models.product import Product
from dont_perish.taxonomy.risk_taxonomy import URGENCY_RANK, Urgency
from dont_perish.utils.time_utils import DayLike

logger = logging.getLogger(__name__)

WASTE_KG_PER_UNSOLD_UNIT = 0.5
WASTE_KG_PER_UNIT_AVOIDED = 0.3
CO2E_KG_PER_WASTE_KG = 2.75


@dataclass(frozen=True)
class DiscountRule:
    """One row of the discount table."""

    discount_pct: int
    urgency:      Urgency
    boost:        float
    reason:       str


# Expiry-driven rules, keyed by the maximum days_until_expiry they cover.
_EXPIRY_RULES: tuple[tuple[int, DiscountRule], ...] = (
    (1, DiscountRule(50, Urgency.HIGH,   3.0, "Expires tomorrow - urgent clearance needed")),
    (2, DiscountRule(35, Urgency.HIGH,   2.5, "Expires within 2 days - significant discount needed")),
    (3, DiscountRule(25, Urgency.MEDIUM, 2.0, "Expires within 3 days - moderate discount recommended")),
)

# Overstock rules, keyed by the minimum gap (exclusive) they require.
_GAP_RULES: tuple[tuple[int, DiscountRule], ...] = (
    (5, DiscountRule(30, Urgency.HIGH,   2.2, "High risk of expiry - boost sales velocity")),
    (2, DiscountRule(20, Urgency.MEDIUM, 1.8, "Medium risk of expiry - increase sales pace")),
)

_FALLBACK_RULE = DiscountRule(15, Urgency.LOW, 1.5, "Low risk of expiry - slight discount to boost sales")


@dataclass(frozen=True)
class CarbonSavings:
    """Estimated environmental benefit of discounting instead of binning."""

    food_waste_prevented_kg: float
    co2_saved_kg:            float


@dataclass(frozen=True)
class DiscountSuggestion:
    """A suggested markdown for one product.

    Attributes:
        product:           The product to discount.
        analysis:          RiskAnalysis the suggestion was derived from.
        discount_pct:      Suggested discount in percent.
        new_price:         selling_price * (1 - discount_pct / 100).
        reason:            Fixed human-readable explanation of the rule.
        urgency:           HIGH / MEDIUM / LOW.
        estimated_boost:   Expected sales-velocity multiplier.
        potential_savings: Cost value saved if the stock sells (= potential loss).
        carbon:            Waste and CO2e estimates.
    """

    product:           Product
    analysis:          RiskAnalysis
    discount_pct:      int
    new_price:         float
    reason:            str
    urgency:           Urgency
    estimated_boost:   float
    potential_savings: float
    carbon:            CarbonSavings


def select_rule(analysis: RiskAnalysis) -> Optional[DiscountRule]:
    """Return the discount rule for ``analysis``, or ``None`` if none applies.

    Products with an invalid expiry never match.
    """
    expiry = analysis.days_until_expiry
    if not expiry.is_finite:
        return None
    if not (analysis.will_expire or expiry.at_most(3)):
        return None

    for max_days, rule in _EXPIRY_RULES:
        if expiry.at_most(max_days):
            return rule

    if not analysis.will_expire:
        return None
    for min_gap, rule in _GAP_RULES:
        if _gap_exceeds(analysis.days_until_sold_out, expiry, min_gap):
            return rule
    return _FALLBACK_RULE


def estimate_carbon_savings(analysis: RiskAnalysis) -> CarbonSavings:
    """Waste and CO2e avoided by selling the product instead of discarding it."""
    product = analysis.product
    if analysis.will_expire:
        waste_kg = unsold_at_expiry(product, analysis.days_until_expiry) * WASTE_KG_PER_UNSOLD_UNIT
    else:
        waste_kg = product.quantity * WASTE_KG_PER_UNIT_AVOIDED
    waste_kg = max(0.0, waste_kg)
    return CarbonSavings(
        food_waste_prevented_kg=waste_kg,
        co2_saved_kg=max(0.0, waste_kg * CO2E_KG_PER_WASTE_KG),
    )


def suggest_discounts(products: Iterable[Product], today: DayLike) -> list[DiscountSuggestion]:
    """Build discount suggestions for every eligible active product.

    Args:
        products: Catalog snapshot (ignored / sold products are skipped).
        today:    Reference date (or datetime).

    Returns:
        Suggestions ordered by urgency (high, medium, low).  Ties keep their
        catalog order.
    """
    suggestions: list[DiscountSuggestion] = []

    for product in active_products(products):
        analysis = classify_risk(product, today)
        if analysis.days_until_expiry.is_invalid:
            logger.debug(
                "Skipping discount for %s: invalid expiry %r",
                product.product_id, product.expiry_date,
            )
            continue

        rule = select_rule(analysis)
        if rule is None:
            continue

        suggestions.append(
            DiscountSuggestion(
                product=product,
                analysis=analysis,
                discount_pct=rule.discount_pct,
                new_price=product.selling_price * (1 - rule.discount_pct / 100),
                reason=rule.reason,
                urgency=rule.urgency,
                estimated_boost=rule.boost,
                potential_savings=analysis.potential_loss,
                carbon=estimate_carbon_savings(analysis),
            )
        )

    return sorted(suggestions, key=lambda s: -URGENCY_RANK[s.urgency])


def total_carbon_savings(suggestions: Iterable[DiscountSuggestion]) -> CarbonSavings:
    """Sum the carbon estimates of a list of suggestions."""
    waste = 0.0
    co2 = 0.0
    for s in suggestions:
        waste += s.carbon.food_waste_prevented_kg
        co2 += s.carbon.co2_saved_kg
    return CarbonSavings(food_waste_prevented_kg=waste, co2_saved_kg=co2)


def _gap_exceeds(sold_out: DayHorizon, expiry: DayHorizon, min_gap: int) -> bool:
    """``sold_out - expiry > min_gap``; an unbounded sell-out always exceeds."""
    if sold_out.is_unbounded:
        return True
    if not sold_out.is_finite or not expiry.is_finite:
        return False
    return sold_out.days - expiry.days > min_gap  # type: ignore[operator]
