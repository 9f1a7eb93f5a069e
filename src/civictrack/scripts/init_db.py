# src/civictrack/scripts/init_db.py
"""Create the relational schema without running migrations."""
from __future__ import annotations

import argparse
import logging

from civictrack.core.logging import configure_logging
from civictrack.core.settings import settings
from civictrack.db.session import create_tables, drop_tables, make_engine

logger = logging.getLogger(__name__)


def init_db(database_url: str, *, reset: bool = False) -> None:
    """Create all tables at ``database_url``, optionally dropping them first."""
    engine = make_engine(database_url)
    try:
        if reset:
            drop_tables(engine)
            logger.info("Dropped existing tables")
        create_tables(engine)
        logger.info("Database initialized at %s", engine.url.render_as_string(hide_password=True))
    finally:
        engine.dispose()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create the CivicTrack database schema")
    parser.add_argument("--database-url", default=settings.database_url)
    parser.add_argument("--reset", action="store_true", help="Drop all tables before creating them")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    init_db(args.database_url, reset=args.reset)


if __name__ == "__main__":
    main()
