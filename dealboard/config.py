"""Dealboard configuration via pydantic-settings."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic_settings import BaseSettings


class DealboardSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///dealboard.db"
    echo_sql: bool = False
    app_title: str = "Deal Pipeline"
    log_level: str = "INFO"

    # Document-store collection names
    deals_collection: str = "deals"
    customers_collection: str = "customers"

    # No auth layer here; the caller identifies itself by header.
    user_header: str = "X-User-Id"
    default_user_id: str = ""

    # Pointer travel (px) before a press becomes a drag
    drag_activation_distance: float = 5.0
    temp_customer_prefix: str = "temp-customer-"

    model_config = {"env_prefix": "DEALBOARD_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def is_sqlite(self) -> bool:
        return "sqlite" in self.database_url

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


def configure_logging(level: str | None = None) -> None:
    """Install a basic root handler once; later calls only adjust the level."""
    resolved = (level or settings.log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=resolved,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    root.setLevel(resolved)


settings = DealboardSettings()
