# src/civictrack/models/__init__.py
"""SQLAlchemy models backing the relational storage backend."""

from .comment import Comment
from .follow import Follow
from .issue import Issue
from .status_history import StatusHistory
from .user import User
from .vote import Vote

__all__ = [
    "Comment",
    "Follow",
    "Issue",
    "StatusHistory",
    "User",
    "Vote",
]
