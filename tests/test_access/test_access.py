"""
Tests for dont_perish/access.py.

What we test
------------
  - Discounts above the staff limit need an admin; the limit itself does not.
  - Admins may apply any discount; staff only up to the limit.
  - A custom limit is honoured.
  - Plain role strings compare equal to the enum.
  - Only admins may edit or delete products.
"""

from __future__ import annotations

import pytest

from dont_perish.access import (
    DEFAULT_STAFF_MAX_DISCOUNT_PCT,
    can_apply_discount,
    can_edit_products,
    requires_admin_approval,
)
from dont_perish.taxonomy.risk_taxonomy import UserRole


class TestRequiresAdminApproval:
    @pytest.mark.parametrize(
        ("pct", "expected"),
        [(15, False), (25, False), (30, False), (35, True), (50, True)],
    )
    def test_default_limit(self, pct, expected):
        assert DEFAULT_STAFF_MAX_DISCOUNT_PCT == 30
        assert requires_admin_approval(pct) is expected

    def test_custom_limit(self):
        assert requires_admin_approval(25, staff_max_discount_pct=20)
        assert not requires_admin_approval(35, staff_max_discount_pct=40)


class TestCanApplyDiscount:
    def test_admin_unrestricted(self):
        assert can_apply_discount(UserRole.ADMIN, 50)

    def test_staff_capped(self):
        assert can_apply_discount(UserRole.STAFF, 30)
        assert not can_apply_discount(UserRole.STAFF, 35)

    def test_plain_string_role(self):
        assert can_apply_discount("admin", 50)  # type: ignore[arg-type]
        assert not can_apply_discount("staff", 50)  # type: ignore[arg-type]


class TestCanEditProducts:
    def test_roles(self):
        assert can_edit_products(UserRole.ADMIN)
        assert not can_edit_products(UserRole.STAFF)
