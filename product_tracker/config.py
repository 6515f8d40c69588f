"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``     : committed static defaults
  2. ``config/local.toml``       : optional local overrides (gitignored)
  3. ``.env``                    : local secrets and env overrides (gitignored)
  4. Environment variables       : ``PRODUCT_TRACKER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The service context, stores, and CLI commands receive an ``AppConfig``
instance, never raw dicts or individual env var lookups scattered through
the codebase.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database settings for the local backend."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/product_tracker.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class BackendConfig(BaseModel):
    """Which persistence backend to use and how to reach it.

    ``kind = "sqlite"`` uses the local database from ``[database]``;
    ``kind = "rest"`` talks to a hosted backend at ``url`` using ``api_key``
    as the anonymous/public key.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["sqlite", "rest"] = "sqlite"
    url: str = ""
    api_key: str = ""
    timeout_seconds: float = 10.0

    @model_validator(mode="after")
    def validate_rest_settings(self) -> "BackendConfig":
        if self.kind == "rest" and not (self.url and self.api_key):
            raise ValueError("backend.kind = 'rest' requires both backend.url and backend.api_key.")
        return self


class ScoringConfig(BaseModel):
    """Recommendation scoring parameters."""

    model_config = ConfigDict(frozen=True)

    strategy: str = "randomized"
    seed: Optional[int] = None
    similarity_scale: float = 10.0      # similarity scores land in [0.5, 1.0] * scale
    price_min: int = 20                 # stand-in price draw, inclusive
    price_max: int = 200                # exclusive
    aligned_probability: float = 0.7
    worth_buying_min_alignment: float = 6.0   # strictly greater than
    max_similar_products: int = 2             # strictly fewer than

    @field_validator("aligned_probability")
    @classmethod
    def validate_probability(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"aligned_probability must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("similarity_scale")
    @classmethod
    def validate_scale(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"similarity_scale must be positive, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_price_range(self) -> "ScoringConfig":
        if not 0 <= self.price_min < self.price_max:
            raise ValueError(
                f"Need 0 <= price_min < price_max, got [{self.price_min}, {self.price_max})."
            )
        return self


class DashboardConfig(BaseModel):
    """How many rows the dashboard summary shows."""

    model_config = ConfigDict(frozen=True)

    recent_products: int = 5
    recent_recommendations: int = 3


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
    """Complete application configuration, the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    backend: BackendConfig = BackendConfig()
    scoring: ScoringConfig = ScoringConfig()
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

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
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

    # 3. Apply PRODUCT_TRACKER_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
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
    """Apply PRODUCT_TRACKER_* env vars to the raw config dict.

    Supported overrides:
      PRODUCT_TRACKER_DB_PATH       → raw["database"]["db_path"]
      PRODUCT_TRACKER_BACKEND       → raw["backend"]["kind"]
      PRODUCT_TRACKER_SUPABASE_URL  → raw["backend"]["url"]
      PRODUCT_TRACKER_SUPABASE_KEY  → raw["backend"]["api_key"]
      PRODUCT_TRACKER_LOG_LEVEL     → raw["logging"]["level"]
      PRODUCT_TRACKER_SCORING_SEED  → raw["scoring"]["seed"]
      PRODUCT_TRACKER_DEBUG         → raw["debug"]
    """
    if db_path := os.environ.get("PRODUCT_TRACKER_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if backend := os.environ.get("PRODUCT_TRACKER_BACKEND"):
        raw.setdefault("backend", {})["kind"] = backend.lower()

    if url := os.environ.get("PRODUCT_TRACKER_SUPABASE_URL"):
        raw.setdefault("backend", {})["url"] = url

    if api_key := os.environ.get("PRODUCT_TRACKER_SUPABASE_KEY"):
        raw.setdefault("backend", {})["api_key"] = api_key

    if log_level := os.environ.get("PRODUCT_TRACKER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if seed := os.environ.get("PRODUCT_TRACKER_SCORING_SEED"):
        raw.setdefault("scoring", {})["seed"] = int(seed)

    if debug := os.environ.get("PRODUCT_TRACKER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        backend=BackendConfig(**raw.get("backend", {})),
        scoring=ScoringConfig(**raw.get("scoring", {})),
        dashboard=DashboardConfig(**raw.get("dashboard", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
