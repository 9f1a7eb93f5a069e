# src/civictrack/api/__init__.py
"""HTTP API endpoints."""

from .endpoints import (
    admin_router,
    comments_router,
    issues_router,
    users_router,
)

__all__ = [
    "admin_router",
    "comments_router",
    "issues_router",
    "users_router",
]
