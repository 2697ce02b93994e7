"""
Don't Perish: CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs (catalog path, ``--today``, ``--role``).
  4. Run the engine over the loaded catalog.
  5. Report result to stdout.

Install and run::

    pip install -e .
    dont-perish --help
    dont-perish validate-config
    dont-perish risk-report --today 2024-01-12
    dont-perish discounts --role staff
    dont-perish procurement
    dont-perish analytics
    dont-perish export --output-dir data/outputs
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="dont-perish",
    help="Don't Perish - expiry risk, markdowns and reorders for perishable stock.",
    add_completion=False,
)

_CATALOG_HELP = "Catalog file (.json or .csv). Default: data.catalog_file from config."
_TODAY_HELP = "Reference date (YYYY-MM-DD). Default: today's local date."
_CONFIG_HELP = "Path to TOML config file (default: config/default.toml)."


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from dont_perish.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from dont_perish.utils.logging import configure_logging
    configure_logging(config.logging)


def _parse_today_or_exit(value: Optional[str]) -> date:
    if value is None:
        from dont_perish.utils.time_utils import today
        return today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        typer.echo(f"[ERROR] Invalid --today: '{value}'. Use YYYY-MM-DD.", err=True)
        raise typer.Exit(code=1)


def _parse_role_or_exit(value: Optional[str], config):
    from dont_perish.taxonomy.risk_taxonomy import UserRole

    if value is None:
        return config.access.default_role
    try:
        return UserRole(value.strip().lower())
    except ValueError:
        valid = ", ".join(r.value for r in UserRole)
        typer.echo(f"[ERROR] Unknown role '{value}'. Valid roles: {valid}", err=True)
        raise typer.Exit(code=1)


def _resolve_catalog_path(catalog: Optional[str], config) -> Path:
    """Catalog path from the option or config; relative config paths fall
    back to the project root when they do not exist under the cwd."""
    if catalog:
        return Path(catalog)
    path = Path(config.data.catalog_file)
    if not path.is_absolute() and not path.exists():
        from dont_perish.config import _find_project_root
        rooted = _find_project_root() / path
        if rooted.exists():
            return rooted
    return path


def _load_products_or_exit(catalog: Optional[str], config, today: date):
    """Load and validate the catalog, exiting with code 1 on any input error."""
    from dont_perish.catalog.loader import load_catalog

    path = _resolve_catalog_path(catalog, config)
    try:
        return load_catalog(path, added_on=today)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:
        typer.echo(f"[ERROR] Invalid catalog {path}: {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Catalog file:       {config.data.catalog_file}")
    typer.echo(f"  Output dir:         {config.data.output_dir}")
    typer.echo(f"  Default role:       {config.access.default_role.value}")
    typer.echo(f"  Staff max discount: {config.access.staff_max_discount_pct:.0f}%")
    typer.echo(f"  Currency symbol:    {config.dashboard.currency_symbol}")
    typer.echo(f"  Log level:          {config.logging.level}")
    typer.echo(f"  Debug mode:         {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str, ensure_ascii=False))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("risk-report")
def risk_report(
    catalog: Optional[str] = typer.Option(None, "--catalog", help=_CATALOG_HELP),
    today_str: Optional[str] = typer.Option(None, "--today", help=_TODAY_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
    include_low: bool = typer.Option(
        False,
        "--all",
        help="Include LOW-risk products (default: HIGH and MEDIUM only).",
    ),
) -> None:
    """Show expiry-risk alerts for active products, highest risk first."""
    from dont_perish.engine import assess_inventory
    from dont_perish.reporting.formatters import format_risk_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    today = _parse_today_or_exit(today_str)
    products = _load_products_or_exit(catalog, config, today)

    analyses = assess_inventory(products, today)
    typer.echo(format_risk_table(
        analyses,
        as_of=today.isoformat(),
        currency=config.dashboard.currency_symbol,
        include_low=include_low,
    ))
    typer.echo("")
    typer.echo(f"[OK] {len(analyses)} active product(s) assessed.")


@app.command("discounts")
def discounts(
    catalog: Optional[str] = typer.Option(None, "--catalog", help=_CATALOG_HELP),
    today_str: Optional[str] = typer.Option(None, "--today", help=_TODAY_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
    role_str: Optional[str] = typer.Option(
        None,
        "--role",
        help="Viewer role: admin or staff. Default: access.default_role from config.",
    ),
) -> None:
    """Suggest markdowns for stock at risk of expiring unsold."""
    from dont_perish.engine import suggest_discounts
    from dont_perish.reporting.formatters import format_discount_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    today = _parse_today_or_exit(today_str)
    role = _parse_role_or_exit(role_str, config)
    products = _load_products_or_exit(catalog, config, today)

    suggestions = suggest_discounts(products, today)
    typer.echo(format_discount_table(
        suggestions,
        as_of=today.isoformat(),
        role=role,
        staff_max_discount_pct=config.access.staff_max_discount_pct,
        currency=config.dashboard.currency_symbol,
    ))
    typer.echo("")
    typer.echo(f"[OK] {len(suggestions)} discount suggestion(s).")


@app.command("procurement")
def procurement(
    catalog: Optional[str] = typer.Option(None, "--catalog", help=_CATALOG_HELP),
    today_str: Optional[str] = typer.Option(None, "--today", help=_TODAY_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Recommend reorders for fast-selling stock that will run out within a week."""
    from dont_perish.engine import recommend_procurement
    from dont_perish.reporting.formatters import format_procurement_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    today = _parse_today_or_exit(today_str)
    products = _load_products_or_exit(catalog, config, today)

    recommendations = recommend_procurement(products, today)
    typer.echo(format_procurement_table(
        recommendations,
        as_of=today.isoformat(),
        currency=config.dashboard.currency_symbol,
    ))
    typer.echo("")
    typer.echo(f"[OK] {len(recommendations)} reorder recommendation(s).")


@app.command("analytics")
def analytics(
    catalog: Optional[str] = typer.Option(None, "--catalog", help=_CATALOG_HELP),
    today_str: Optional[str] = typer.Option(None, "--today", help=_TODAY_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """Show inventory value, risk distribution and the 14-day expiry timeline."""
    from dont_perish.engine import compute_analytics
    from dont_perish.reporting.formatters import format_analytics

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    today = _parse_today_or_exit(today_str)
    products = _load_products_or_exit(catalog, config, today)

    summary = compute_analytics(products, today)
    typer.echo(format_analytics(
        summary,
        as_of=today.isoformat(),
        currency=config.dashboard.currency_symbol,
    ))
    typer.echo("")
    typer.echo("[OK] Analytics computed.")


@app.command("export")
def export(
    catalog: Optional[str] = typer.Option(None, "--catalog", help=_CATALOG_HELP),
    today_str: Optional[str] = typer.Option(None, "--today", help=_TODAY_HELP),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_HELP),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        help="Directory for the exported files. Default: data.output_dir from config.",
    ),
) -> None:
    """Write the inventory CSV plus discount, procurement and JSON reports."""
    from dont_perish.reporting.reporter import write_run_reports

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    today = _parse_today_or_exit(today_str)
    products = _load_products_or_exit(catalog, config, today)

    out_dir = Path(output_dir or config.data.output_dir)
    try:
        paths = write_run_reports(
            products,
            out_dir,
            today,
            staff_max_discount_pct=config.access.staff_max_discount_pct,
        )
    except OSError as exc:
        typer.echo(f"[ERROR] Could not write reports to {out_dir}: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Exported {len(products)} product(s) as of {today.isoformat()}:")
    for name, path in paths.items():
        typer.echo(f"  {name:<12} {path}")
    typer.echo("")
    typer.echo(f"[OK] {len(paths)} file(s) written.")


if __name__ == "__main__":
    app()
