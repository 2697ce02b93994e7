"""
Shared pytest fixtures for the Don't Perish test suite.

Provides:
  - ``TODAY``: the reference date ``make_product`` offsets expiry from.
  - ``make_product``: factory fixture for ``Product`` records with sensible
    defaults, so each test only spells out the fields it cares about.
  - ``sample_catalog_path``: the seed catalog shipped in ``config/``.
"""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
from typing import Any, Callable

import pytest

from dont_perish.models.product import Product

TODAY = date(2024, 1, 12)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Return a ``Product`` factory.

    ``expires_in`` (days from ``TODAY``) is a shortcut for ``expiry_date``.
    Ids default to ``p1``, ``p2``, ... in creation order.
    """
    counter = {"n": 0}

    def _make(
        expires_in: int = 10,
        **overrides: Any,
    ) -> Product:
        counter["n"] += 1
        fields: dict[str, Any] = {
            "product_id":            f"p{counter['n']}",
            "name":                  f"Product {counter['n']}",
            "category":              "Dairy",
            "quantity":              10,
            "expiry_date":           TODAY + timedelta(days=expires_in),
            "average_sales_per_day": 1.0,
            "cost_price":            10.0,
            "selling_price":         15.0,
            "date_added":            TODAY - timedelta(days=2),
        }
        fields.update(overrides)
        return Product(**fields)

    return _make


@pytest.fixture
def sample_catalog_path() -> Path:
    """Path to ``config/sample_catalog.json`` (seven seed products, January 2024)."""
    return _PROJECT_ROOT / "config" / "sample_catalog.json"
