"""
Report writer: CSV and JSON files for one engine run.

Output files (written by the ``export`` CLI command)
----------------------------------------------------
  <output_dir>/
    inventory-report-{date}.csv   -- every catalog record, spreadsheet columns
    discounts_{date}.csv          -- one row per discount suggestion
    procurement_{date}.csv        -- one row per reorder recommendation
    report_{date}.json            -- risk alerts, discounts, carbon savings,
                                     procurement and analytics in one document
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from dont_perish.access import DEFAULT_STAFF_MAX_DISCOUNT_PCT
from dont_perish.engine import (
    assess_inventory,
    compute_analytics,
    recommend_procurement,
    suggest_discounts,
)
from dont_perish.models.product import Product
from dont_perish.reporting.export import (
    INVENTORY_EXPORT_COLUMNS,
    build_report,
    discount_rows,
    export_to_csv,
    export_to_json,
    inventory_rows,
    procurement_rows,
)

logger = logging.getLogger(__name__)

DISCOUNT_COLUMNS: list[str] = [
    "product_id", "name", "category", "urgency", "discount_pct",
    "selling_price", "new_price", "estimated_boost", "potential_savings",
    "food_waste_prevented_kg", "co2_saved_kg", "requires_admin", "reason",
]

PROCUREMENT_COLUMNS: list[str] = [
    "product_id", "name", "category", "urgency", "days_until_sold_out",
    "recommended_quantity", "estimated_revenue", "reason",
]


def write_inventory_csv(
    products: Sequence[Product],
    output_dir: Path,
    run_date: date | None = None,
) -> Path:
    """Write the spreadsheet export of the full catalog.

    Args:
        products:   All catalog records, including ignored and sold ones.
        output_dir: Directory to write the file (created if missing).
        run_date:   Date label for the filename.  Defaults to today.

    Returns:
        Path to ``inventory-report-{date}.csv``.
    """
    if run_date is None:
        run_date = date.today()
    csv_path = output_dir / f"inventory-report-{run_date.isoformat()}.csv"
    export_to_csv(inventory_rows(products), csv_path, fieldnames=INVENTORY_EXPORT_COLUMNS)
    logger.info("Inventory CSV written: %s (%d rows)", csv_path, len(products))
    return csv_path


def write_run_reports(
    products: Sequence[Product],
    output_dir: Path,
    today: date,
    staff_max_discount_pct: float = DEFAULT_STAFF_MAX_DISCOUNT_PCT,
) -> dict[str, Path]:
    """Run the engine once and write every report for ``today``.

    Returns:
        Mapping of report name (``inventory``, ``discounts``, ``procurement``,
        ``report``) to the written path.
    """
    analyses = assess_inventory(products, today)
    suggestions = suggest_discounts(products, today)
    recommendations = recommend_procurement(products, today)
    summary = compute_analytics(products, today)

    stamp = today.isoformat()
    paths: dict[str, Path] = {
        "inventory": write_inventory_csv(products, output_dir, today),
    }

    paths["discounts"] = export_to_csv(
        discount_rows(suggestions, staff_max_discount_pct),
        output_dir / f"discounts_{stamp}.csv",
        fieldnames=DISCOUNT_COLUMNS,
    )
    logger.info("Discount CSV written: %s (%d rows)", paths["discounts"], len(suggestions))

    paths["procurement"] = export_to_csv(
        procurement_rows(recommendations),
        output_dir / f"procurement_{stamp}.csv",
        fieldnames=PROCUREMENT_COLUMNS,
    )
    logger.info(
        "Procurement CSV written: %s (%d rows)", paths["procurement"], len(recommendations)
    )

    report = build_report(
        today, analyses, suggestions, recommendations, summary, staff_max_discount_pct
    )
    paths["report"] = export_to_json(report, output_dir / f"report_{stamp}.json")
    logger.info("Report JSON written: %s", paths["report"])
    return paths
