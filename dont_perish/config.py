"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      - committed static defaults
  2. ``config/local.toml``        - optional local overrides (gitignored)
  3. ``.env``                     - local env overrides (gitignored)
  4. Environment variables        - ``DONT_PERISH_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

CLI commands and the dashboard receive an ``AppConfig`` instance.  The engine
itself takes no configuration: its thresholds are fixed business rules.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from dont_perish.access import DEFAULT_STAFF_MAX_DISCOUNT_PCT
from dont_perish.taxonomy.risk_taxonomy import UserRole

# ── Sub-config models ─────────────────────────────────────────────────────────


class DataConfig(BaseModel):
    """Filesystem paths for the input catalog and exported reports."""

    model_config = ConfigDict(frozen=True)

    catalog_file: str = "config/sample_catalog.json"
    output_dir: str = "data/outputs"


class AccessConfig(BaseModel):
    """Cosmetic role settings for the dashboard and CLI."""

    model_config = ConfigDict(frozen=True)

    default_role: UserRole = UserRole.ADMIN
    staff_max_discount_pct: float = DEFAULT_STAFF_MAX_DISCOUNT_PCT

    @field_validator("staff_max_discount_pct")
    @classmethod
    def validate_pct(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"staff_max_discount_pct must be in [0, 100], got {v}.")
        return v


class DashboardConfig(BaseModel):
    """Display settings for the Streamlit dashboard and terminal reports."""

    model_config = ConfigDict(frozen=True)

    page_title: str = "Don't Perish"
    currency_symbol: str = "₹"
    timeline_days: int = 14

    @field_validator("timeline_days")
    @classmethod
    def validate_timeline_days(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"timeline_days must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    data: DataConfig = DataConfig()
    access: AccessConfig = AccessConfig()
    dashboard: DashboardConfig = DashboardConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply DONT_PERISH_* env vars to the raw config dict.

    Supported overrides:
      DONT_PERISH_CATALOG     → raw["data"]["catalog_file"]
      DONT_PERISH_OUTPUT_DIR  → raw["data"]["output_dir"]
      DONT_PERISH_ROLE        → raw["access"]["default_role"]
      DONT_PERISH_LOG_LEVEL   → raw["logging"]["level"]
      DONT_PERISH_DEBUG       → raw["debug"]
    """
    if catalog := os.environ.get("DONT_PERISH_CATALOG"):
        raw.setdefault("data", {})["catalog_file"] = catalog

    if output_dir := os.environ.get("DONT_PERISH_OUTPUT_DIR"):
        raw.setdefault("data", {})["output_dir"] = output_dir

    if role := os.environ.get("DONT_PERISH_ROLE"):
        raw.setdefault("access", {})["default_role"] = role.lower()

    if log_level := os.environ.get("DONT_PERISH_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("DONT_PERISH_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        data=DataConfig(**raw.get("data", {})),
        access=AccessConfig(**raw.get("access", {})),
        dashboard=DashboardConfig(**raw.get("dashboard", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
