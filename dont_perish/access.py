"""
Presentation-layer permission checks.

The role selector in the dashboard is cosmetic: nothing is authenticated and
the engine computes the same numbers for every role.  These helpers only
decide which buttons a role gets to see.

    admin : may apply any discount; may edit and delete products.
    staff : may apply discounts up to ``staff_max_discount_pct`` (30% by
            default); deeper markdowns need an admin.  May mark products as
            sold or ignore alerts, but not edit or delete them.
"""

from __future__ import annotations

from dont_perish.taxonomy.risk_taxonomy import UserRole

DEFAULT_STAFF_MAX_DISCOUNT_PCT = 30


def requires_admin_approval(
    discount_pct: float,
    staff_max_discount_pct: float = DEFAULT_STAFF_MAX_DISCOUNT_PCT,
) -> bool:
    """``True`` when a discount is deeper than staff may apply on their own."""
    return discount_pct > staff_max_discount_pct


def can_apply_discount(
    role: UserRole,
    discount_pct: float,
    staff_max_discount_pct: float = DEFAULT_STAFF_MAX_DISCOUNT_PCT,
) -> bool:
    """Whether ``role`` may apply a ``discount_pct`` markdown."""
    if role == UserRole.ADMIN:
        return True
    return not requires_admin_approval(discount_pct, staff_max_discount_pct)


def can_edit_products(role: UserRole) -> bool:
    """Editing and deleting catalog records is reserved for admins."""
    return role == UserRole.ADMIN
