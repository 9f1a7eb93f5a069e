# src/civictrack/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentResponse
from .common import (
    FLAG_HIDE_THRESHOLD,
    ISSUE_CATEGORIES,
    ISSUE_STATUSES,
    VOTE_TYPES,
    IssueCategory,
    IssueStatus,
    VoteType,
)
from .follow import FollowCreate, FollowResponse, FollowState
from .issue import IssueCreate, IssueFilter, IssueResponse, StatusUpdate
from .status_history import StatusHistoryCreate, StatusHistoryResponse
from .user import UserCreate, UserResponse
from .validation import validate_payload
from .vote import VoteCreate, VoteResponse

__all__ = [
    "FLAG_HIDE_THRESHOLD", "ISSUE_CATEGORIES", "ISSUE_STATUSES", "VOTE_TYPES",
    "IssueCategory", "IssueStatus", "VoteType",
    "CommentCreate", "CommentResponse",
    "FollowCreate", "FollowResponse", "FollowState",
    "IssueCreate", "IssueFilter", "IssueResponse", "StatusUpdate",
    "StatusHistoryCreate", "StatusHistoryResponse",
    "UserCreate", "UserResponse",
    "VoteCreate", "VoteResponse",
    "validate_payload",
]
