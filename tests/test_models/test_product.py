"""
Tests for dont_perish/models/product.py.

What we test
------------
ProductDraft:
  - Valid construction; name / category stripped.
  - Blank name or category rejected.
  - Negative quantity, sales rate or prices rejected.
  - ISO expiry strings parsed to date; datetime strings truncated.
  - Unparseable expiry kept verbatim (not a validation error).
  - to_product() assigns id and date_added; generated ids are unique.

Product:
  - Frozen.
  - ignored_reason without is_ignored is rejected.
  - is_active / has_valid_expiry.
  - with_updates(): partial merge, re-validation, un-ignoring clears reason.

ProductUpdate:
  - Unknown fields rejected.
"""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from dont_perish.models.product import Product, ProductDraft, ProductUpdate, new_product_id

TODAY = date(2024, 1, 12)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _draft(**overrides) -> ProductDraft:
    fields = {
        "name":                  "Fresh Milk (1L)",
        "category":              "Dairy",
        "quantity":              24,
        "expiry_date":           "2024-01-15",
        "average_sales_per_day": 8,
        "cost_price":            45,
        "selling_price":         65,
    }
    fields.update(overrides)
    return ProductDraft(**fields)


# ── ProductDraft ───────────────────────────────────────────────────────────────

class TestProductDraft:
    def test_valid(self):
        d = _draft(name="  Milk  ", category=" Dairy ")
        assert d.name == "Milk"
        assert d.category == "Dairy"
        assert d.expiry_date == date(2024, 1, 15)

    @pytest.mark.parametrize("field", ["name", "category"])
    def test_blank_text_rejected(self, field):
        with pytest.raises(ValidationError):
            _draft(**{field: "   "})

    @pytest.mark.parametrize(
        "field", ["quantity", "average_sales_per_day", "cost_price", "selling_price"]
    )
    def test_negative_rejected(self, field):
        with pytest.raises(ValidationError):
            _draft(**{field: -1})

    def test_zero_values_allowed(self):
        d = _draft(quantity=0, average_sales_per_day=0, cost_price=0, selling_price=0)
        assert d.quantity == 0

    def test_datetime_string_truncated(self):
        assert _draft(expiry_date="2024-01-15T09:30:00Z").expiry_date == date(2024, 1, 15)

    def test_unparseable_expiry_kept(self):
        d = _draft(expiry_date="next tuesday")
        assert d.expiry_date == "next tuesday"

    def test_to_product(self):
        p = _draft().to_product(added_on=TODAY)
        assert p.date_added == TODAY
        assert p.product_id.startswith("product_")
        assert p.name == "Fresh Milk (1L)"
        assert p.is_active

    def test_to_product_explicit_id(self):
        assert _draft().to_product(added_on=TODAY, product_id="sku-1").product_id == "sku-1"

    def test_generated_ids_unique(self):
        assert len({new_product_id() for _ in range(50)}) == 50


# ── Product ────────────────────────────────────────────────────────────────────

class TestProduct:
    def test_frozen(self, make_product):
        p = make_product()
        with pytest.raises(ValidationError):
            p.quantity = 5  # type: ignore[misc]

    def test_reason_requires_ignored(self, make_product):
        with pytest.raises(ValidationError):
            make_product(ignored_reason="False positive")

    def test_blank_id_rejected(self, make_product):
        with pytest.raises(ValidationError):
            make_product(product_id="  ")

    def test_is_active(self, make_product):
        assert make_product().is_active
        assert not make_product(is_ignored=True).is_active
        assert not make_product(marked_as_sold=True).is_active

    def test_has_valid_expiry(self, make_product):
        assert make_product().has_valid_expiry
        assert not make_product(expiry_date="??").has_valid_expiry


# ── with_updates ───────────────────────────────────────────────────────────────

class TestWithUpdates:
    def test_partial_update(self, make_product):
        p = make_product(quantity=10)
        updated = p.with_updates(ProductUpdate(quantity=3, selling_price=9.5))
        assert updated.quantity == 3
        assert updated.selling_price == 9.5
        assert updated.name == p.name
        assert updated.product_id == p.product_id
        assert p.quantity == 10

    def test_expiry_string_parsed(self, make_product):
        updated = make_product().with_updates(ProductUpdate(expiry_date="2024-02-01"))
        assert updated.expiry_date == date(2024, 2, 1)

    def test_unignore_clears_reason(self, make_product):
        p = make_product(is_ignored=True, ignored_reason="Other")
        updated = p.with_updates(ProductUpdate(is_ignored=False))
        assert updated.is_ignored is False
        assert updated.ignored_reason is None

    def test_revalidates(self, make_product):
        with pytest.raises(ValidationError):
            make_product().with_updates(ProductUpdate(ignored_reason="no flag"))

    def test_negative_update_rejected(self):
        with pytest.raises(ValidationError):
            ProductUpdate(quantity=-2)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            ProductUpdate(product_id="x")  # type: ignore[call-arg]
