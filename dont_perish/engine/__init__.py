"""
Risk & recommendation engine: pure functions over a catalog snapshot.

Modules
-------
horizon     : DayHorizon tagged value (FINITE / UNBOUNDED / INVALID) +
              days_until_expiry() + days_until_sold_out() + will_expire().
risk        : RiskAnalysis + classify_risk() + assess_inventory().
discounts   : DiscountSuggestion + suggest_discounts() + carbon estimates.
procurement : ProcurementRecommendation + recommend_procurement().
analytics   : AnalyticsSummary + compute_analytics().

No module here performs I/O or keeps state between calls.
"""

from dont_perish.engine.analytics import AnalyticsSummary, compute_analytics
from dont_perish.engine.discounts import DiscountSuggestion, suggest_discounts
from dont_perish.engine.procurement import ProcurementRecommendation, recommend_procurement
from dont_perish.engine.risk import RiskAnalysis, assess_inventory, classify_risk

__all__ = [
    "AnalyticsSummary",
    "DiscountSuggestion",
    "ProcurementRecommendation",
    "RiskAnalysis",
    "assess_inventory",
    "classify_risk",
    "compute_analytics",
    "recommend_procurement",
    "suggest_discounts",
]
