"""
Tests for dashboard/data_loader.py.

What we test
------------
  - load_session() seeds an InventorySession from the sample catalog.
  - alerts_frame() keeps HIGH / MEDIUM rows only.
  - discount_frame() "Can apply" follows the viewer role.
  - category_frame() / timeline_frame() / distribution_frame() shapes.
  - inventory_frame() uses the export column order.
  - edit_update() / apply_edit(): only changed fields are replaced; invalid
    edits raise ValidationError and leave the session unchanged.

Skipped when pandas (dashboard extra) is not installed.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

pytest.importorskip("pandas")

from dashboard.data_loader import (  # noqa: E402
    alerts_frame,
    apply_edit,
    category_frame,
    discount_frame,
    distribution_frame,
    edit_update,
    inventory_frame,
    load_session,
    procurement_frame,
    timeline_frame,
)
from dont_perish.catalog import InventorySession, ProductNotFoundError  # noqa: E402
from dont_perish.engine import (  # noqa: E402
    assess_inventory,
    compute_analytics,
    recommend_procurement,
    suggest_discounts,
)
from dont_perish.reporting.export import INVENTORY_EXPORT_COLUMNS  # noqa: E402
from dont_perish.taxonomy.risk_taxonomy import UserRole  # noqa: E402

TODAY = date(2024, 1, 12)


@pytest.fixture
def products(sample_catalog_path):
    return load_session(sample_catalog_path, TODAY).snapshot()


class TestFrames:
    def test_load_session(self, products):
        assert len(products) == 7

    def test_alerts_frame(self, products):
        df = alerts_frame(assess_inventory(products, TODAY))
        assert list(df["Product"]) == ["Fresh Tomatoes (1kg)", "Fresh Spinach"]
        assert set(df["Risk"]) == {"high"}

    def test_discount_frame_roles(self, products):
        suggestions = suggest_discounts(products, TODAY)
        staff = discount_frame(suggestions, UserRole.STAFF, 30)
        admin = discount_frame(suggestions, UserRole.ADMIN, 30)
        assert list(staff["Can apply"]) == [False, False, False, True]
        assert admin["Can apply"].all()

    def test_procurement_frame(self, products):
        df = procurement_frame(recommend_procurement(products, TODAY))
        assert len(df) == 7
        assert df["Order quantity"].iloc[0] == 168

    def test_analytics_frames(self, products):
        summary = compute_analytics(products, TODAY)
        cats = category_frame(summary)
        assert list(cats.index) == ["Dairy", "Bakery", "Vegetables", "Fruits", "Meat"]
        assert cats.loc["Vegetables", "HIGH"] == 2
        assert len(timeline_frame(summary)) == 14
        assert len(timeline_frame(summary, days=7)) == 7
        dist = distribution_frame(summary)
        assert dict(zip(dist["Risk"], dist["Products"])) == {"high": 2, "low": 5}

    def test_inventory_frame(self, products):
        df = inventory_frame(products)
        assert list(df.columns) == INVENTORY_EXPORT_COLUMNS
        assert len(df) == 7

    def test_empty_frames(self):
        summary = compute_analytics([], TODAY)
        assert alerts_frame([]).empty
        assert category_frame(summary).empty
        assert timeline_frame(summary)["Expiring"].sum() == 0


# ── Edit form ──────────────────────────────────────────────────────────────────

def _form_values(product, **changes):
    values = {
        "name":                  product.name,
        "category":              product.category,
        "quantity":              product.quantity,
        "expiry_date":           product.expiry_date,
        "average_sales_per_day": product.average_sales_per_day,
        "cost_price":            product.cost_price,
        "selling_price":         product.selling_price,
    }
    values.update(changes)
    return values


@pytest.fixture
def edit_session(make_product):
    return InventorySession([
        make_product(product_id="milk", name="Milk", expires_in=1, quantity=20),
    ])


class TestEditForm:
    def test_only_changed_fields_set(self, make_product):
        product = make_product(name="Milk")
        update = edit_update(product, _form_values(product, quantity=5, cost_price=12.0))
        assert update.model_fields_set == {"quantity", "cost_price"}

    def test_unchanged_form_is_empty_update(self, make_product):
        product = make_product()
        assert edit_update(product, _form_values(product)).model_fields_set == set()

    def test_apply_edit_replaces_fields(self, edit_session):
        original = edit_session.get("milk")
        new_expiry = TODAY + timedelta(days=9)
        updated = apply_edit(
            edit_session, "milk",
            _form_values(original, name="Whole Milk", expiry_date=new_expiry),
        )
        assert updated.name == "Whole Milk"
        assert updated.expiry_date == new_expiry
        assert updated.quantity == original.quantity
        assert updated.date_added == original.date_added
        assert edit_session.get("milk") == updated

    def test_edit_changes_risk(self, edit_session):
        assert assess_inventory(edit_session.snapshot(), TODAY)[0].risk_level.value == "high"
        original = edit_session.get("milk")
        apply_edit(
            edit_session, "milk",
            _form_values(original, expiry_date=TODAY + timedelta(days=30)),
        )
        assert assess_inventory(edit_session.snapshot(), TODAY)[0].risk_level.value == "low"

    def test_negative_quantity_rejected(self, edit_session):
        original = edit_session.get("milk")
        with pytest.raises(ValidationError):
            apply_edit(edit_session, "milk", _form_values(original, quantity=-1))
        assert edit_session.get("milk") == original

    def test_blank_name_rejected(self, edit_session):
        original = edit_session.get("milk")
        with pytest.raises(ValidationError):
            apply_edit(edit_session, "milk", _form_values(original, name="   "))
        assert edit_session.get("milk") == original

    def test_unknown_product(self, edit_session):
        with pytest.raises(ProductNotFoundError):
            apply_edit(edit_session, "nope", {"name": "X"})
