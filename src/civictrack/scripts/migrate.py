# src/civictrack/scripts/migrate.py
"""Apply Alembic migrations up to the latest revision."""
from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from civictrack.core.logging import configure_logging
from civictrack.core.settings import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def build_config(database_url: str | None = None) -> Config:
    """Return an Alembic config pointing at the project's migrations folder."""
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", database_url or settings.database_url)
    cfg.attributes["configure_logger"] = False
    return cfg


def run_upgrade_head(database_url: str | None = None) -> None:
    cfg = build_config(database_url)
    command.upgrade(cfg, "head")
    logger.info("Database upgraded to head")


def main() -> None:
    configure_logging(settings.log_level)
    run_upgrade_head()


if __name__ == "__main__":
    main()
