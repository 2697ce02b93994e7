"""
Risk taxonomy for perishable inventory.

Two ordinal scales drive every ranking in the engine:
  - ``RiskLevel`` - how likely a product is to spoil before it sells.
  - ``Urgency``   - how soon a discount or reorder should be acted on.

Both share the same ordering (high > medium > low); ``URGENCY_RANK`` and
``RISK_RANK`` give the sort weights used by the advisors.

``UserRole`` is a cosmetic presentation flag only.  It never changes what the
engine computes; see ``dont_perish.access`` for the caller-side checks.

This module has NO imports from any other ``dont_perish`` package.
"""

from enum import StrEnum


class RiskLevel(StrEnum):
    """Spoilage risk classification for one product."""

    HIGH = "high"
    """Stock outlives freshness within two days, or expiry is imminent."""

    MEDIUM = "medium"
    """Stock outlives freshness within five days."""

    LOW = "low"
    """Projected to sell through before expiry (or expiry is unknown)."""


class Urgency(StrEnum):
    """Action priority for discount and procurement suggestions."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class UserRole(StrEnum):
    """Dashboard role selector value."""

    ADMIN = "admin"
    STAFF = "staff"


RISK_RANK: dict[RiskLevel, int] = {
    RiskLevel.HIGH:   3,
    RiskLevel.MEDIUM: 2,
    RiskLevel.LOW:    1,
}

URGENCY_RANK: dict[Urgency, int] = {
    Urgency.HIGH:   3,
    Urgency.MEDIUM: 2,
    Urgency.LOW:    1,
}

# Categories offered by the product entry form.  Catalog imports may use
# other strings; these are suggestions, not a closed set.
PRODUCT_CATEGORIES: tuple[str, ...] = (
    "Dairy",
    "Bakery",
    "Vegetables",
    "Fruits",
    "Meat",
    "Frozen",
    "Beverages",
    "Snacks",
)

# Canned answers for the "ignore alert" prompt.
IGNORE_REASONS: tuple[str, ...] = (
    "Already handled manually",
    "False positive",
    "Will be restocked soon",
    "Customer pre-ordered",
    "Other",
)

DEFAULT_IGNORE_REASON = "No reason provided"
