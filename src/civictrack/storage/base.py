"""Storage interface shared by the in-memory and relational backends.

Lookups by identifier signal absence by returning ``None``; they never raise
for a missing record. Every returned record is a fresh copy, so callers cannot
change stored state through it.
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime

from civictrack.db.time import utcnow
from civictrack.schemas import (
    CommentCreate,
    CommentResponse,
    FollowCreate,
    FollowResponse,
    IssueCreate,
    IssueFilter,
    IssueResponse,
    IssueStatus,
    StatusHistoryCreate,
    StatusHistoryResponse,
    UserCreate,
    UserResponse,
    VoteCreate,
    VoteResponse,
)
from civictrack.services.geo import within_radius

__all__ = ["Clock", "Storage", "apply_area_filter", "new_id"]

Clock = Callable[[], datetime]

ISSUE_REPORTED_DESCRIPTION = "Issue reported"


def new_id() -> str:
    """Return a new opaque record identifier."""
    return str(uuid.uuid4())


def status_changed_description(status: str) -> str:
    return f"Status changed to {status}"


def apply_area_filter(issues: Iterable[IssueResponse], criteria: IssueFilter) -> list[IssueResponse]:
    """Keep only issues inside the criteria's circle, when one is given."""
    if not criteria.has_area:
        return list(issues)
    return [
        issue
        for issue in issues
        if within_radius(
            issue.latitude,
            issue.longitude,
            center_latitude=criteria.latitude,
            center_longitude=criteria.longitude,
            radius_km=criteria.radius,
        )
    ]


class Storage(ABC):
    """CRUD and query operations for every CivicTrack entity."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or utcnow

    def now(self) -> datetime:
        return self._clock()

    # Users

    @abstractmethod
    def create_user(self, data: UserCreate) -> UserResponse:
        """Store a new user; raises ``ConflictError`` on a taken username or email."""

    @abstractmethod
    def get_user(self, user_id: str) -> UserResponse | None: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> UserResponse | None: ...

    @abstractmethod
    def list_users(self) -> list[UserResponse]: ...

    @abstractmethod
    def set_user_banned(self, user_id: str, banned: bool) -> UserResponse | None: ...

    # Issues

    @abstractmethod
    def create_issue(self, data: IssueCreate) -> IssueResponse:
        """Store a new issue and its initial "Issue reported" history entry."""

    @abstractmethod
    def get_issue(self, issue_id: str) -> IssueResponse | None: ...

    @abstractmethod
    def list_issues(self) -> list[IssueResponse]:
        """Return every issue that is not hidden."""

    @abstractmethod
    def filter_issues(self, criteria: IssueFilter) -> list[IssueResponse]:
        """Return non-hidden issues matching all supplied criteria."""

    @abstractmethod
    def list_issues_by_reporter(self, reporter_id: str) -> list[IssueResponse]: ...

    @abstractmethod
    def update_issue_status(self, issue_id: str, status: IssueStatus) -> IssueResponse | None:
        """Set the status, bump ``updated_at`` and append a history entry."""

    @abstractmethod
    def increment_upvotes(self, issue_id: str) -> IssueResponse | None: ...

    @abstractmethod
    def increment_flag_count(self, issue_id: str) -> IssueResponse | None:
        """Add one flag; hides the issue once the count reaches the threshold."""

    @abstractmethod
    def list_flagged_issues(self) -> list[IssueResponse]:
        """Return flagged or hidden issues, most flagged first."""

    @abstractmethod
    def set_issue_hidden(self, issue_id: str, hidden: bool) -> IssueResponse | None:
        """Hide or restore an issue; restoring clears its flag count."""

    # Comments

    @abstractmethod
    def create_comment(self, data: CommentCreate) -> CommentResponse: ...

    @abstractmethod
    def get_comment(self, comment_id: str) -> CommentResponse | None: ...

    @abstractmethod
    def list_comments_by_issue(self, issue_id: str) -> list[CommentResponse]:
        """Return the non-hidden comments of an issue, oldest first."""

    @abstractmethod
    def like_comment(self, comment_id: str) -> CommentResponse | None: ...

    @abstractmethod
    def flag_comment(self, comment_id: str) -> CommentResponse | None:
        """Add one flag; hides the comment once the count reaches the threshold."""

    @abstractmethod
    def list_flagged_comments(self) -> list[CommentResponse]: ...

    @abstractmethod
    def set_comment_hidden(self, comment_id: str, hidden: bool) -> CommentResponse | None: ...

    # Votes

    @abstractmethod
    def get_vote_by_user_and_issue(self, user_id: str, issue_id: str) -> VoteResponse | None: ...

    @abstractmethod
    def create_vote(self, data: VoteCreate) -> VoteResponse:
        """Record a vote, replacing the user's previous vote on the issue.

        The issue's ``upvotes`` is recomputed as the number of upvote-type
        votes it holds afterwards.
        """

    @abstractmethod
    def delete_vote(self, user_id: str, issue_id: str) -> bool:
        """Remove the user's vote; returns False when there was none."""

    # Status history

    @abstractmethod
    def create_status_history(self, data: StatusHistoryCreate) -> StatusHistoryResponse: ...

    @abstractmethod
    def list_status_history(self, issue_id: str) -> list[StatusHistoryResponse]:
        """Return the issue's timeline in ascending creation order."""

    # Follows

    @abstractmethod
    def get_follow_by_user_and_issue(self, user_id: str, issue_id: str) -> FollowResponse | None: ...

    @abstractmethod
    def create_follow(self, data: FollowCreate) -> FollowResponse:
        """Follow an issue; returns the existing follow if there is one."""

    @abstractmethod
    def delete_follow(self, user_id: str, issue_id: str) -> bool: ...

    @abstractmethod
    def toggle_follow(self, user_id: str, issue_id: str) -> bool:
        """Follow if not following, otherwise unfollow; returns the new state."""
