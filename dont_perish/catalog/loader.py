"""
Catalog loader: read product records from a JSON or CSV file.

Formats (detected by extension)
-------------------------------
.json - an array of product objects.  Keys may be snake_case
        (``expiry_date``) or camelCase (``expiryDate``), so catalogs saved by
        the browser dashboard load unchanged.

.csv  - comma delimited with a header row.  Required columns:
          name, category, quantity, expiry_date,
          average_sales_per_day, cost_price, selling_price
        Optional: product_id, date_added, is_ignored, ignored_reason,
        marked_as_sold.  The column titles written by the inventory export
        ("Name", "Expiry Date", "Sales Per Day", ...) are accepted too, so an
        exported report can be loaded back.

Records without an id get a generated one; records without ``date_added``
get ``added_on`` (today by default).

All records are validated before any are returned.  If **any** record fails,
a single ``ValueError`` listing the first 10 failures is raised.

An unparseable expiry date is NOT a validation failure: the record loads
with the raw string and the engine reports it as invalid.
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from dont_perish.models.product import Product, new_product_id
from dont_perish.utils.time_utils import today as local_today

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = frozenset({
    "name", "category", "quantity", "expiry_date",
    "average_sales_per_day", "cost_price", "selling_price",
})

# Alternate spellings -> canonical field name.
FIELD_ALIASES: dict[str, str] = {
    "id":                 "product_id",
    "expiryDate":         "expiry_date",
    "averageSalesPerDay": "average_sales_per_day",
    "costPrice":          "cost_price",
    "sellingPrice":       "selling_price",
    "dateAdded":          "date_added",
    "isIgnored":          "is_ignored",
    "ignoredReason":      "ignored_reason",
    "markedAsSold":       "marked_as_sold",
    "Name":               "name",
    "Category":           "category",
    "Quantity":           "quantity",
    "Expiry Date":        "expiry_date",
    "Sales Per Day":      "average_sales_per_day",
    "Cost Price":         "cost_price",
    "Selling Price":      "selling_price",
    "Date Added":         "date_added",
}

_BOOL_FIELDS = ("is_ignored", "marked_as_sold")
_MAX_ERRORS_SHOWN = 10


def load_catalog(path: Path, added_on: Optional[date] = None) -> list[Product]:
    """Load and validate a product catalog file.

    Args:
        path:     ``.json`` or ``.csv`` file.
        added_on: ``date_added`` for records that lack one (default: today).

    Returns:
        Products in file order.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: On an unsupported extension, malformed file, missing CSV
            columns, duplicate ids, or any record failing validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    fmt = path.suffix.lower()
    if fmt == ".json":
        raw_records = _read_json(path)
    elif fmt == ".csv":
        raw_records = _read_csv(path)
    else:
        raise ValueError(f"Unsupported catalog format '{fmt}'. Use .json or .csv.")

    added = added_on or local_today()
    products: list[Product] = []
    errors: list[tuple[int, str]] = []

    for i, raw in enumerate(raw_records, start=1):
        try:
            products.append(record_to_product(raw, added))
        except (ValueError, ValidationError) as exc:
            errors.append((i, str(exc)))

    if errors:
        detail = "\n".join(f"  Record {n}: {msg}" for n, msg in errors[:_MAX_ERRORS_SHOWN])
        extra = len(errors) - _MAX_ERRORS_SHOWN
        suffix = f"\n  ... and {extra} more" if extra > 0 else ""
        raise ValueError(
            f"{len(errors)} record(s) failed validation in {path.name}:\n{detail}{suffix}"
        )

    _check_unique_ids(products, path)
    logger.info("Loaded %d products from %s", len(products), path.name)
    return products


def record_to_product(raw: dict[str, Any], added_on: date) -> Product:
    """Normalise one raw record and validate it as a ``Product``.

    Raises:
        ValueError: If a required field is missing or empty.
        pydantic.ValidationError: On model-level validation failure.
    """
    record = normalise_keys(raw)

    missing = sorted(k for k in REQUIRED_FIELDS if record.get(k) in (None, ""))
    if missing:
        raise ValueError(f"Missing required field(s): {missing}")

    for key in _BOOL_FIELDS:
        if isinstance(record.get(key), str):
            record[key] = _parse_bool(record[key])

    for key in ("product_id", "date_added", "ignored_reason"):
        if record.get(key) == "":
            record[key] = None

    if not record.get("product_id"):
        record["product_id"] = new_product_id()
    elif not isinstance(record["product_id"], str):
        record["product_id"] = str(record["product_id"])
    if not record.get("date_added"):
        record["date_added"] = added_on

    return Product.model_validate(record)


def normalise_keys(raw: dict[str, Any]) -> dict[str, Any]:
    """Map aliased keys to canonical field names; strip string values."""
    record: dict[str, Any] = {}
    for key, val in raw.items():
        if key is None:
            continue
        name = FIELD_ALIASES.get(key.strip(), key.strip())
        record[name] = val.strip() if isinstance(val, str) else val
    return record


# ── Private helpers ────────────────────────────────────────────────────────────

def _read_json(path: Path) -> list[dict[str, Any]]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"JSON parse error in {path.name}: {exc}") from exc

    if not isinstance(data, list):
        raise ValueError(f"JSON catalog {path.name} must contain an array of products.")
    if not all(isinstance(item, dict) for item in data):
        raise ValueError(f"Every entry in {path.name} must be a JSON object.")
    return data


def _read_csv(path: Path) -> list[dict[str, Any]]:
    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        columns = {FIELD_ALIASES.get(c.strip(), c.strip()) for c in reader.fieldnames}
        missing = REQUIRED_FIELDS - columns
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(columns)}"
            )
        rows = list(reader)

    if not rows:
        logger.warning("Catalog CSV is empty (header only): %s", path)
    return rows


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "t", "y")


def _check_unique_ids(products: list[Product], path: Path) -> None:
    seen: set[str] = set()
    dupes: list[str] = []
    for p in products:
        if p.product_id in seen:
            dupes.append(p.product_id)
        seen.add(p.product_id)
    if dupes:
        raise ValueError(f"Duplicate product_id(s) in {path.name}: {sorted(set(dupes))}")
