# src/civictrack/storage/__init__.py
"""Storage backends and the factory selecting one from settings."""

from __future__ import annotations

import logging

from civictrack.core.settings import Settings
from civictrack.db.session import create_tables, make_engine, make_session_factory

from .base import Clock, Storage
from .memory import MemStorage
from .sql import SqlStorage

logger = logging.getLogger(__name__)

__all__ = ["MemStorage", "SqlStorage", "Storage", "build_storage"]


def build_storage(settings: Settings, clock: Clock | None = None) -> Storage:
    """Return the storage backend configured by ``settings.storage_backend``."""
    if settings.storage_backend == "sql":
        engine = make_engine(settings.database_url, echo=settings.sql_debug)
        if settings.auto_create_tables:
            create_tables(engine)
        logger.info("Using SQL storage at %s", engine.url.render_as_string(hide_password=True))
        return SqlStorage(make_session_factory(engine), clock=clock)
    logger.info("Using in-memory storage; data is lost on restart")
    return MemStorage(clock=clock)
