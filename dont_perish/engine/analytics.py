"""
Aggregate analytics over the active catalog.

Everything is derived from ``classify_risk``; nothing is stored between calls.

Outputs
-------
category_risk     : per category, counts of HIGH / MEDIUM / LOW products
                    (categories in first-seen catalog order).
timeline          : 14 days starting today.  For each day, how many products
                    carry that literal expiry date, and how many of those are
                    projected to expire with stock left (days_until_expiry ==
                    offset and will_expire).
risk_distribution : HIGH / MEDIUM / LOW counts, zero buckets omitted.
total_value       : sum(quantity * selling_price)
at_risk_value     : sum(quantity * cost_price)            over will_expire
potential_waste   : sum(max(0, quantity - rate * days))   over will_expire  (units)

The category table and the distribution are two views of the same counts, so
their totals always agree.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from dont_perish.engine.risk import RiskAnalysis, active_products, classify_risk
from dont_perish.models.product import Product
from dont_perish.taxonomy.risk_taxonomy import RiskLevel
from dont_perish.utils.time_utils import DayLike, as_date, date_range

TIMELINE_DAYS = 14


@dataclass
class CategoryRiskCounts:
    """Risk-level counts for one product category."""

    category: str
    high:     int = 0
    medium:   int = 0
    low:      int = 0

    @property
    def total(self) -> int:
        return self.high + self.medium + self.low

    def add(self, level: RiskLevel) -> None:
        if level is RiskLevel.HIGH:
            self.high += 1
        elif level is RiskLevel.MEDIUM:
            self.medium += 1
        else:
            self.low += 1


@dataclass(frozen=True)
class TimelineDay:
    """One day of the forward expiry timeline.

    Attributes:
        offset:   Days from today (0 = today).
        day:      Calendar date.
        expiring: Products whose expiry date is ``day``.
        at_risk:  Products expiring on ``day`` with unsold stock projected.
    """

    offset:   int
    day:      date
    expiring: int
    at_risk:  int

    @property
    def label(self) -> str:
        return f"Day {self.offset + 1}"


@dataclass
class AnalyticsSummary:
    """Dashboard-level analytics for one catalog snapshot."""

    category_risk:     list[CategoryRiskCounts]
    timeline:          list[TimelineDay]
    risk_distribution: dict[RiskLevel, int]
    total_value:       float
    at_risk_value:     float
    potential_waste:   float
    analyses:          list[RiskAnalysis] = field(default_factory=list)

    @property
    def high_risk_count(self) -> int:
        return self.risk_distribution.get(RiskLevel.HIGH, 0)

    @property
    def product_count(self) -> int:
        return len(self.analyses)


def compute_analytics(products: Iterable[Product], today: DayLike) -> AnalyticsSummary:
    """Aggregate risk, value and timeline figures over active products.

    Args:
        products: Catalog snapshot (ignored / sold products are skipped).
        today:    Reference date (or datetime).

    Returns:
        A freshly built ``AnalyticsSummary``.
    """
    analyses = [classify_risk(p, today) for p in active_products(products)]

    return AnalyticsSummary(
        category_risk=_category_risk(analyses),
        timeline=_timeline(analyses, as_date(today)),
        risk_distribution=_risk_distribution(analyses),
        total_value=sum(a.product.quantity * a.product.selling_price for a in analyses),
        at_risk_value=sum(
            a.product.quantity * a.product.cost_price for a in analyses if a.will_expire
        ),
        potential_waste=sum(a.unsold_units_at_expiry for a in analyses if a.will_expire),
        analyses=analyses,
    )


def _category_risk(analyses: list[RiskAnalysis]) -> list[CategoryRiskCounts]:
    by_cat: dict[str, CategoryRiskCounts] = {}
    for a in analyses:
        cat = a.product.category
        if cat not in by_cat:
            by_cat[cat] = CategoryRiskCounts(category=cat)
        by_cat[cat].add(a.risk_level)
    return list(by_cat.values())


def _timeline(analyses: list[RiskAnalysis], start: date) -> list[TimelineDay]:
    days = date_range(start, start + timedelta(days=TIMELINE_DAYS - 1))
    timeline: list[TimelineDay] = []
    for offset, day in enumerate(days):
        expiring = sum(1 for a in analyses if a.product.expiry_date == day)
        at_risk = sum(
            1 for a in analyses
            if a.will_expire
            and a.days_until_expiry.is_finite
            and a.days_until_expiry.days == offset
        )
        timeline.append(TimelineDay(offset=offset, day=day, expiring=expiring, at_risk=at_risk))
    return timeline


def _risk_distribution(analyses: list[RiskAnalysis]) -> dict[RiskLevel, int]:
    counts = {level: 0 for level in (RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW)}
    for a in analyses:
        counts[a.risk_level] += 1
    return {level: n for level, n in counts.items() if n > 0}
