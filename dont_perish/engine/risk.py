"""
Risk classifier: turns one Product + today's date into a RiskAnalysis.

Steps
-----
1. days_until_expiry   = ceil(expiry_date - today)            (DayHorizon)
2. days_until_sold_out = ceil(quantity / average_sales_per_day)  or UNBOUNDED
3. will_expire         = days_until_sold_out > days_until_expiry
4. risk_level (first match wins):
       HIGH    will_expire and days_until_expiry <= 2
       MEDIUM  will_expire and days_until_expiry <= 5
       HIGH    days_until_expiry <= 1
       LOW     everything else (including an INVALID expiry)
5. potential_loss = max(0, (quantity - rate * days_until_expiry) * cost_price)
   when will_expire, else 0.

Rule 3 only fires for products that are NOT projected to outlast their
freshness: it catches slow-moving stock that is expiring today or tomorrow
even though the sell-out projection looks fine.

All functions here are pure: no I/O, no state, never raise on bad data.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from dont_perish.engine.horizon import (
    DayHorizon,
    days_until_expiry,
    days_until_sold_out,
    will_expire,
)
from dont_perish.models.product import Product
from dont_perish.taxonomy.risk_taxonomy import RISK_RANK, RiskLevel
from dont_perish.utils.time_utils import DayLike


@dataclass(frozen=True)
class RiskAnalysis:
    """Risk assessment for one product.

    Attributes:
        product:             The analysed product.
        days_until_expiry:   FINITE (may be negative) or INVALID.
        days_until_sold_out: FINITE or UNBOUNDED.
        risk_level:          HIGH / MEDIUM / LOW.
        will_expire:         Stock projected to outlast freshness.
        potential_loss:      Cost value of units still unsold at expiry.
    """

    product:             Product
    days_until_expiry:   DayHorizon
    days_until_sold_out: DayHorizon
    risk_level:          RiskLevel
    will_expire:         bool
    potential_loss:      float

    @property
    def unsold_units_at_expiry(self) -> float:
        """Units left on the shelf when the product expires (0 if none)."""
        if not self.will_expire:
            return 0.0
        return max(0.0, unsold_at_expiry(self.product, self.days_until_expiry))


def classify_risk(product: Product, today: DayLike) -> RiskAnalysis:
    """Classify the spoilage risk of ``product`` as of ``today``.

    Args:
        product: Catalog record.  Its active/ignored state is not checked
                 here; use ``active_products`` to filter first.
        today:   Reference date (or datetime).

    Returns:
        A fully populated ``RiskAnalysis``.
    """
    expiry   = days_until_expiry(product.expiry_date, today)
    sold_out = days_until_sold_out(product.quantity, product.average_sales_per_day)
    expires  = will_expire(sold_out, expiry)

    return RiskAnalysis(
        product=product,
        days_until_expiry=expiry,
        days_until_sold_out=sold_out,
        risk_level=determine_risk_level(expiry, expires),
        will_expire=expires,
        potential_loss=potential_loss(product, expiry, expires),
    )


def determine_risk_level(expiry: DayHorizon, expires: bool) -> RiskLevel:
    """Apply the risk precedence rules.

    Rules (evaluated in order, first match wins):
        1. HIGH   : will_expire and days_until_expiry <= 2
        2. MEDIUM : will_expire and days_until_expiry <= 5
        3. HIGH   : days_until_expiry <= 1
        4. LOW    : everything else
    """
    if expires and expiry.at_most(2):
        return RiskLevel.HIGH
    if expires and expiry.at_most(5):
        return RiskLevel.MEDIUM
    if expiry.at_most(1):
        return RiskLevel.HIGH
    return RiskLevel.LOW


def unsold_at_expiry(product: Product, expiry: DayHorizon) -> float:
    """Raw (unclamped) units left at expiry: ``quantity - rate * days``.

    Only meaningful for a finite expiry; returns 0 otherwise.
    """
    if not expiry.is_finite:
        return 0.0
    return product.quantity - product.average_sales_per_day * expiry.days  # type: ignore[operator]


def potential_loss(product: Product, expiry: DayHorizon, expires: bool) -> float:
    """Cost value of the stock projected to spoil, floored at zero."""
    if not expires:
        return 0.0
    return max(0.0, unsold_at_expiry(product, expiry) * product.cost_price)


def active_products(products: Iterable[Product]) -> list[Product]:
    """Products that are neither ignored nor marked as sold, in input order."""
    return [p for p in products if p.is_active]


def assess_inventory(products: Iterable[Product], today: DayLike) -> list[RiskAnalysis]:
    """Classify every active product and order the alerts by risk.

    Ordering is HIGH, then MEDIUM, then LOW.  Python's sort is stable, so
    products with the same risk level keep their catalog order.
    """
    analyses = [classify_risk(p, today) for p in active_products(products)]
    return sorted(analyses, key=lambda a: -RISK_RANK[a.risk_level])
