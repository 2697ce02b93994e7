"""
Product models.

``Product`` is one catalog record of a perishable good.  Records are frozen:
editing a product means building a replacement record (see
``Product.with_updates``), which keeps every engine call working on a stable
snapshot.

``ProductDraft`` holds the fields a user types into the entry form.  The id
and ``date_added`` are assigned by the caller when the draft becomes a
``Product`` (``ProductDraft.to_product``).

``ProductUpdate`` is a partial replacement: every field optional.

Validation here is the form-level enforcement point for the non-negative
quantity/price/velocity invariants.  The risk engine never re-validates.

Expiry dates
------------
``expiry_date`` accepts a ``date`` or an ISO ``YYYY-MM-DD`` string.  A string
that cannot be parsed is kept verbatim instead of being rejected, so the
record can still be listed, exported and fixed; the engine treats it as an
invalid expiry and leaves the product out of discount and reorder
suggestions.
"""

from __future__ import annotations

import time
import uuid
from datetime import date
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dont_perish.utils.time_utils import parse_iso_date


def new_product_id() -> str:
    """Return a fresh product identifier: ``product_<epoch-ms>_<9 hex chars>``."""
    return f"product_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class ProductDraft(BaseModel):
    """Fields captured by the "Add New Product" form.

    Attributes:
        name: Display name, e.g. ``"Fresh Milk (1L)"``.
        category: Category label, normally one of ``PRODUCT_CATEGORIES``.
        quantity: Units on hand.
        expiry_date: Best-before date (``date`` or ISO string).
        average_sales_per_day: Recent sales velocity in units per day.
        cost_price: Unit purchase cost.
        selling_price: Unit shelf price.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    quantity: int = Field(ge=0)
    expiry_date: Union[date, str]
    average_sales_per_day: float = Field(ge=0)
    cost_price: float = Field(ge=0)
    selling_price: float = Field(ge=0)

    @field_validator("name", "category")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty.")
        return v.strip()

    @field_validator("expiry_date", mode="before")
    @classmethod
    def parse_expiry(cls, v: Any) -> Any:
        return _coerce_expiry(v)

    def to_product(
        self,
        added_on: date,
        product_id: Optional[str] = None,
    ) -> "Product":
        """Promote this draft to a catalog ``Product``.

        Args:
            added_on:   Value for ``date_added`` (normally today).
            product_id: Explicit id; a fresh one is generated when omitted.
        """
        return Product(
            product_id=product_id or new_product_id(),
            date_added=added_on,
            **self.model_dump(),
        )


class Product(ProductDraft):
    """A perishable product in the caller-owned catalog.

    Attributes:
        product_id: Unique identifier.
        date_added: Day the product entered the catalog.
        is_ignored: ``True`` once a user dismissed its alert.
        ignored_reason: Why the alert was dismissed; only set when ignored.
        marked_as_sold: ``True`` once the stock is gone.
    """

    product_id: str
    date_added: date
    is_ignored: bool = False
    ignored_reason: Optional[str] = None
    marked_as_sold: bool = False

    @field_validator("product_id")
    @classmethod
    def validate_product_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("product_id must not be empty.")
        return v.strip()

    @model_validator(mode="after")
    def validate_ignore_state(self) -> "Product":
        if self.ignored_reason is not None and not self.is_ignored:
            raise ValueError("ignored_reason may only be set when is_ignored is true.")
        return self

    @property
    def is_active(self) -> bool:
        """``True`` unless the product was ignored or marked as sold."""
        return not self.is_ignored and not self.marked_as_sold

    @property
    def has_valid_expiry(self) -> bool:
        return isinstance(self.expiry_date, date)

    def with_updates(self, updates: "ProductUpdate") -> "Product":
        """Return a re-validated copy with the set fields of ``updates`` applied.

        Clearing ``is_ignored`` also clears ``ignored_reason``.
        """
        changes = updates.model_dump(exclude_unset=True)
        merged = {**self.model_dump(), **changes}
        if changes.get("is_ignored") is False and "ignored_reason" not in changes:
            merged["ignored_reason"] = None
        return Product.model_validate(merged)


class ProductUpdate(BaseModel):
    """Partial replacement for a ``Product``.

    Only fields that were explicitly set are applied; ``product_id`` and
    ``date_added`` cannot be changed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: Optional[str] = None
    category: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    expiry_date: Optional[Union[date, str]] = None
    average_sales_per_day: Optional[float] = Field(default=None, ge=0)
    cost_price: Optional[float] = Field(default=None, ge=0)
    selling_price: Optional[float] = Field(default=None, ge=0)
    is_ignored: Optional[bool] = None
    ignored_reason: Optional[str] = None
    marked_as_sold: Optional[bool] = None

    @field_validator("expiry_date", mode="before")
    @classmethod
    def parse_expiry(cls, v: Any) -> Any:
        if v is None:
            return v
        return _coerce_expiry(v)


def _coerce_expiry(value: Any) -> Any:
    """Parse ISO strings to ``date``; keep unparseable strings verbatim."""
    if isinstance(value, str):
        parsed = parse_iso_date(value)
        return parsed if parsed is not None else value
    return value
