"""
In-memory inventory session: the caller-owned product collection.

The dashboard (and any other front end) keeps one ``InventorySession`` per
user session.  It owns the list of products and performs the record
lifecycle:

    add_product     -- draft -> Product with a fresh id and today's date
    update_product  -- full or partial field replacement (re-validated)
    ignore_alert    -- flag is_ignored + reason
    mark_as_sold    -- flag marked_as_sold
    delete_product  -- remove from the collection

Nothing is persisted.  The engine never touches the session directly; callers
hand it ``session.snapshot()``, an immutable tuple that later edits cannot
tear.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from datetime import date
from typing import Optional

from dont_perish.models.product import Product, ProductDraft, ProductUpdate
from dont_perish.taxonomy.risk_taxonomy import DEFAULT_IGNORE_REASON
from dont_perish.utils.time_utils import today as local_today

logger = logging.getLogger(__name__)


class ProductNotFoundError(KeyError):
    """Raised when a product id is not in the session."""


class InventorySession:
    """Ordered, in-memory product collection for one dashboard session.

    Args:
        products: Initial records (e.g. from ``load_catalog``).  Ids must be
                  unique.
    """

    def __init__(self, products: Optional[Iterable[Product]] = None) -> None:
        self._products: list[Product] = []
        for p in products or ():
            self._insert(p)

    # ── Read access ───────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self.snapshot())

    def __contains__(self, product_id: object) -> bool:
        return any(p.product_id == product_id for p in self._products)

    def snapshot(self) -> tuple[Product, ...]:
        """Immutable copy of the current collection, in insertion order."""
        return tuple(self._products)

    def get(self, product_id: str) -> Product:
        """Return the product with ``product_id``.

        Raises:
            ProductNotFoundError: If no such product exists.
        """
        return self._products[self._index_of(product_id)]

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def add_product(self, draft: ProductDraft, today: Optional[date] = None) -> Product:
        """Create a product from form input and append it.

        Args:
            draft: Validated form fields.
            today: ``date_added`` for the new record (default: today).

        Returns:
            The stored ``Product`` (with its generated id).
        """
        product = draft.to_product(added_on=today or local_today())
        self._insert(product)
        logger.info("Added product %s (%s)", product.product_id, product.name)
        return product

    def update_product(self, product_id: str, updates: ProductUpdate) -> Product:
        """Replace the set fields of ``updates`` on an existing product.

        Raises:
            ProductNotFoundError: If no such product exists.
            pydantic.ValidationError: If the merged record is invalid.
        """
        idx = self._index_of(product_id)
        updated = self._products[idx].with_updates(updates)
        self._products[idx] = updated
        logger.info(
            "Updated product %s: %s",
            product_id, sorted(updates.model_dump(exclude_unset=True)),
        )
        return updated

    def ignore_alert(self, product_id: str, reason: Optional[str] = None) -> Product:
        """Dismiss the alert for a product; it drops out of every suggestion."""
        reason = (reason or "").strip() or DEFAULT_IGNORE_REASON
        return self.update_product(
            product_id, ProductUpdate(is_ignored=True, ignored_reason=reason)
        )

    def mark_as_sold(self, product_id: str) -> Product:
        """Flag a product as sold out; it drops out of every suggestion."""
        return self.update_product(product_id, ProductUpdate(marked_as_sold=True))

    def delete_product(self, product_id: str) -> Product:
        """Remove a product and return it.

        Raises:
            ProductNotFoundError: If no such product exists.
        """
        removed = self._products.pop(self._index_of(product_id))
        logger.info("Deleted product %s (%s)", removed.product_id, removed.name)
        return removed

    # ── Internals ─────────────────────────────────────────────────────────────

    def _insert(self, product: Product) -> None:
        if product.product_id in self:
            raise ValueError(f"Duplicate product_id: {product.product_id}")
        self._products.append(product)

    def _index_of(self, product_id: str) -> int:
        for i, p in enumerate(self._products):
            if p.product_id == product_id:
                return i
        raise ProductNotFoundError(product_id)
