# src/civictrack/api/endpoints/__init__.py
"""API endpoint modules."""

from .admin import router as admin_router
from .comments import router as comments_router
from .issues import router as issues_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "comments_router",
    "issues_router",
    "users_router",
]
