"""Runtime settings, read from ``FAIRBAG_*`` environment variables or ``.env``."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Repo root when installed in editable mode.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    # --- Storage ---
    data_dir: Path = _DEFAULT_DATA_DIR

    # --- Pricing and pickup rules ---
    tax_rate: Decimal = Decimal("0.08")
    pickup_radius_miles: float = 75.0

    # --- Logging ---
    log_level: str = "INFO"
    log_json: bool = False

    # --- Identity of the CLI session (unset = signed out) ---
    user_id: str | None = None
    user_email: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="FAIRBAG_",
        env_file=".env",
        extra="ignore",
    )
