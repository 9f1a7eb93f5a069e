# src/civictrack/db/__init__.py
"""Database configuration and utilities."""

from .session import Base, create_tables, drop_tables, make_engine, make_session_factory

__all__ = ["Base", "create_tables", "drop_tables", "make_engine", "make_session_factory"]
