"""Process-local storage backed by dictionaries.

State lives for the lifetime of the ``MemStorage`` instance and is lost on
restart. A re-entrant lock serializes every operation so compound steps
(vote replacement, follow toggling, flag-then-hide) are atomic even when the
instance is shared between worker threads.
"""
from __future__ import annotations

import logging
import threading

from civictrack.core.errors import ConflictError
from civictrack.schemas import (
    FLAG_HIDE_THRESHOLD,
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

from .base import (
    ISSUE_REPORTED_DESCRIPTION,
    Clock,
    Storage,
    apply_area_filter,
    new_id,
    status_changed_description,
)

logger = logging.getLogger(__name__)

__all__ = ["MemStorage"]

PairKey = tuple[str, str]


class MemStorage(Storage):
    """In-memory implementation of :class:`Storage`."""

    def __init__(self, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self._lock = threading.RLock()
        self._users: dict[str, UserResponse] = {}
        self._issues: dict[str, IssueResponse] = {}
        self._comments: dict[str, CommentResponse] = {}
        self._votes: dict[str, VoteResponse] = {}
        self._status_history: dict[str, StatusHistoryResponse] = {}
        self._follows: dict[str, FollowResponse] = {}
        # (user_id, issue_id) -> record id; at most one vote and one follow per pair.
        self._vote_index: dict[PairKey, str] = {}
        self._follow_index: dict[PairKey, str] = {}

    # Users

    def create_user(self, data: UserCreate) -> UserResponse:
        with self._lock:
            for user in self._users.values():
                if user.username == data.username:
                    raise ConflictError("Username is already taken")
                if user.email == data.email:
                    raise ConflictError("Email is already registered")
            user = UserResponse(
                id=new_id(),
                username=data.username,
                email=data.email,
                is_verified=False,
                is_banned=False,
                created_at=self.now(),
            )
            self._users[user.id] = user
            return user.model_copy(deep=True)

    def get_user(self, user_id: str) -> UserResponse | None:
        with self._lock:
            return _copy(self._users.get(user_id))

    def get_user_by_username(self, username: str) -> UserResponse | None:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user.model_copy(deep=True)
            return None

    def list_users(self) -> list[UserResponse]:
        with self._lock:
            users = sorted(self._users.values(), key=lambda user: user.created_at)
            return [user.model_copy(deep=True) for user in users]

    def set_user_banned(self, user_id: str, banned: bool) -> UserResponse | None:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            user = user.model_copy(update={"is_banned": banned})
            self._users[user_id] = user
            return user.model_copy(deep=True)

    # Issues

    def create_issue(self, data: IssueCreate) -> IssueResponse:
        with self._lock:
            now = self.now()
            issue = IssueResponse(
                id=new_id(),
                **data.model_dump(),
                upvotes=0,
                flag_count=0,
                is_hidden=False,
                created_at=now,
                updated_at=now,
            )
            self._issues[issue.id] = issue
            self.create_status_history(
                StatusHistoryCreate(
                    issue_id=issue.id,
                    status=issue.status,
                    description=ISSUE_REPORTED_DESCRIPTION,
                )
            )
            logger.info("Issue %s reported in category %s", issue.id, issue.category)
            return issue.model_copy(deep=True)

    def get_issue(self, issue_id: str) -> IssueResponse | None:
        with self._lock:
            return _copy(self._issues.get(issue_id))

    def list_issues(self) -> list[IssueResponse]:
        return self.filter_issues(IssueFilter())

    def filter_issues(self, criteria: IssueFilter) -> list[IssueResponse]:
        with self._lock:
            issues = [
                issue
                for issue in self._issues.values()
                if not issue.is_hidden
                and (criteria.category is None or issue.category == criteria.category)
                and (criteria.status is None or issue.status == criteria.status)
            ]
            issues = apply_area_filter(issues, criteria)
            return [issue.model_copy(deep=True) for issue in issues]

    def list_issues_by_reporter(self, reporter_id: str) -> list[IssueResponse]:
        with self._lock:
            return [
                issue.model_copy(deep=True)
                for issue in self._issues.values()
                if issue.reporter_id == reporter_id and not issue.is_hidden
            ]

    def update_issue_status(self, issue_id: str, status: IssueStatus) -> IssueResponse | None:
        with self._lock:
            issue = self._issues.get(issue_id)
            if issue is None:
                return None
            issue = issue.model_copy(update={"status": status, "updated_at": self.now()})
            self._issues[issue_id] = issue
            self.create_status_history(
                StatusHistoryCreate(
                    issue_id=issue_id,
                    status=status,
                    description=status_changed_description(status),
                )
            )
            logger.info("Issue %s moved to status %s", issue_id, status)
            return issue.model_copy(deep=True)

    def increment_upvotes(self, issue_id: str) -> IssueResponse | None:
        with self._lock:
            issue = self._issues.get(issue_id)
            if issue is None:
                return None
            issue = issue.model_copy(update={"upvotes": issue.upvotes + 1})
            self._issues[issue_id] = issue
            return issue.model_copy(deep=True)

    def increment_flag_count(self, issue_id: str) -> IssueResponse | None:
        with self._lock:
            issue = self._issues.get(issue_id)
            if issue is None:
                return None
            flag_count = issue.flag_count + 1
            hide = issue.is_hidden or flag_count >= FLAG_HIDE_THRESHOLD
            if hide and not issue.is_hidden:
                logger.warning("Issue %s hidden after %d flags", issue_id, flag_count)
            issue = issue.model_copy(update={"flag_count": flag_count, "is_hidden": hide})
            self._issues[issue_id] = issue
            return issue.model_copy(deep=True)

    def list_flagged_issues(self) -> list[IssueResponse]:
        with self._lock:
            flagged = [
                issue for issue in self._issues.values() if issue.flag_count > 0 or issue.is_hidden
            ]
            flagged.sort(key=lambda issue: issue.flag_count, reverse=True)
            return [issue.model_copy(deep=True) for issue in flagged]

    def set_issue_hidden(self, issue_id: str, hidden: bool) -> IssueResponse | None:
        with self._lock:
            issue = self._issues.get(issue_id)
            if issue is None:
                return None
            update: dict[str, object] = {"is_hidden": hidden}
            if not hidden:
                update["flag_count"] = 0
            issue = issue.model_copy(update=update)
            self._issues[issue_id] = issue
            return issue.model_copy(deep=True)

    # Comments

    def create_comment(self, data: CommentCreate) -> CommentResponse:
        with self._lock:
            comment = CommentResponse(
                id=new_id(),
                **data.model_dump(),
                likes=0,
                flag_count=0,
                is_hidden=False,
                created_at=self.now(),
            )
            self._comments[comment.id] = comment
            return comment.model_copy(deep=True)

    def get_comment(self, comment_id: str) -> CommentResponse | None:
        with self._lock:
            return _copy(self._comments.get(comment_id))

    def list_comments_by_issue(self, issue_id: str) -> list[CommentResponse]:
        with self._lock:
            comments = [
                comment
                for comment in self._comments.values()
                if comment.issue_id == issue_id and not comment.is_hidden
            ]
            comments.sort(key=lambda comment: comment.created_at)
            return [comment.model_copy(deep=True) for comment in comments]

    def like_comment(self, comment_id: str) -> CommentResponse | None:
        with self._lock:
            comment = self._comments.get(comment_id)
            if comment is None:
                return None
            comment = comment.model_copy(update={"likes": comment.likes + 1})
            self._comments[comment_id] = comment
            return comment.model_copy(deep=True)

    def flag_comment(self, comment_id: str) -> CommentResponse | None:
        with self._lock:
            comment = self._comments.get(comment_id)
            if comment is None:
                return None
            flag_count = comment.flag_count + 1
            hide = comment.is_hidden or flag_count >= FLAG_HIDE_THRESHOLD
            if hide and not comment.is_hidden:
                logger.warning("Comment %s hidden after %d flags", comment_id, flag_count)
            comment = comment.model_copy(update={"flag_count": flag_count, "is_hidden": hide})
            self._comments[comment_id] = comment
            return comment.model_copy(deep=True)

    def list_flagged_comments(self) -> list[CommentResponse]:
        with self._lock:
            flagged = [
                comment
                for comment in self._comments.values()
                if comment.flag_count > 0 or comment.is_hidden
            ]
            flagged.sort(key=lambda comment: comment.flag_count, reverse=True)
            return [comment.model_copy(deep=True) for comment in flagged]

    def set_comment_hidden(self, comment_id: str, hidden: bool) -> CommentResponse | None:
        with self._lock:
            comment = self._comments.get(comment_id)
            if comment is None:
                return None
            update: dict[str, object] = {"is_hidden": hidden}
            if not hidden:
                update["flag_count"] = 0
            comment = comment.model_copy(update=update)
            self._comments[comment_id] = comment
            return comment.model_copy(deep=True)

    # Votes

    def get_vote_by_user_and_issue(self, user_id: str, issue_id: str) -> VoteResponse | None:
        with self._lock:
            vote_id = self._vote_index.get((user_id, issue_id))
            return _copy(self._votes.get(vote_id)) if vote_id else None

    def create_vote(self, data: VoteCreate) -> VoteResponse:
        with self._lock:
            key = (data.user_id, data.issue_id)
            previous_id = self._vote_index.pop(key, None)
            if previous_id is not None:
                del self._votes[previous_id]
            vote = VoteResponse(
                id=new_id(),
                issue_id=data.issue_id,
                user_id=data.user_id,
                type=data.type,
                created_at=self.now(),
            )
            self._votes[vote.id] = vote
            self._vote_index[key] = vote.id
            self._recount_upvotes(data.issue_id)
            return vote.model_copy(deep=True)

    def delete_vote(self, user_id: str, issue_id: str) -> bool:
        with self._lock:
            vote_id = self._vote_index.pop((user_id, issue_id), None)
            if vote_id is None:
                return False
            del self._votes[vote_id]
            self._recount_upvotes(issue_id)
            return True

    def _recount_upvotes(self, issue_id: str) -> None:
        issue = self._issues.get(issue_id)
        if issue is None:
            return
        upvotes = sum(
            1
            for vote in self._votes.values()
            if vote.issue_id == issue_id and vote.type == "upvote"
        )
        self._issues[issue_id] = issue.model_copy(update={"upvotes": upvotes})

    # Status history

    def create_status_history(self, data: StatusHistoryCreate) -> StatusHistoryResponse:
        with self._lock:
            entry = StatusHistoryResponse(
                id=new_id(),
                issue_id=data.issue_id,
                status=data.status,
                description=data.description,
                created_at=self.now(),
            )
            self._status_history[entry.id] = entry
            return entry.model_copy(deep=True)

    def list_status_history(self, issue_id: str) -> list[StatusHistoryResponse]:
        with self._lock:
            # sorted() is stable, so insertion order breaks timestamp ties.
            entries = sorted(
                (entry for entry in self._status_history.values() if entry.issue_id == issue_id),
                key=lambda entry: entry.created_at,
            )
            return [entry.model_copy(deep=True) for entry in entries]

    # Follows

    def get_follow_by_user_and_issue(self, user_id: str, issue_id: str) -> FollowResponse | None:
        with self._lock:
            follow_id = self._follow_index.get((user_id, issue_id))
            return _copy(self._follows.get(follow_id)) if follow_id else None

    def create_follow(self, data: FollowCreate) -> FollowResponse:
        with self._lock:
            key = (data.user_id, data.issue_id)
            existing_id = self._follow_index.get(key)
            if existing_id is not None:
                return self._follows[existing_id].model_copy(deep=True)
            follow = FollowResponse(
                id=new_id(),
                issue_id=data.issue_id,
                user_id=data.user_id,
                created_at=self.now(),
            )
            self._follows[follow.id] = follow
            self._follow_index[key] = follow.id
            return follow.model_copy(deep=True)

    def delete_follow(self, user_id: str, issue_id: str) -> bool:
        with self._lock:
            follow_id = self._follow_index.pop((user_id, issue_id), None)
            if follow_id is None:
                return False
            del self._follows[follow_id]
            return True

    def toggle_follow(self, user_id: str, issue_id: str) -> bool:
        with self._lock:
            if self.delete_follow(user_id, issue_id):
                return False
            self.create_follow(FollowCreate(issue_id=issue_id, user_id=user_id))
            return True


def _copy(record):
    return record.model_copy(deep=True) if record is not None else None
