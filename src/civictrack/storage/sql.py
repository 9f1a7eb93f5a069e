"""Relational storage built on SQLAlchemy sessions.

Each public operation runs in its own transaction. Compound operations
(issue creation with its first history entry, vote replacement with the
upvote recount, follow toggling) run in one transaction, and the unique
constraints on ``(issue_id, user_id)`` make concurrent writers for the same
pair fail instead of duplicating rows. Such a failure is retried once
against the state the winning writer left behind.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from civictrack.core.errors import ConflictError
from civictrack.models import Comment, Follow, Issue, StatusHistory, User, Vote
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

__all__ = ["SqlStorage"]

T = TypeVar("T")


class SqlStorage(Storage):
    """:class:`Storage` implementation over a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker[Session], clock: Clock | None = None) -> None:
        super().__init__(clock)
        self._session_factory = session_factory

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        with self._session_factory.begin() as session:
            yield session

    def _retry_on_conflict(self, operation: Callable[[], T]) -> T:
        try:
            return operation()
        except IntegrityError:
            logger.info("Concurrent write on a unique pair; retrying once")
            return operation()

    # Users

    def create_user(self, data: UserCreate) -> UserResponse:
        try:
            with self._transaction() as session:
                taken = session.scalars(
                    select(User).where(or_(User.username == data.username, User.email == data.email))
                ).first()
                if taken is not None:
                    if taken.username == data.username:
                        raise ConflictError("Username is already taken")
                    raise ConflictError("Email is already registered")
                user = User(
                    id=new_id(),
                    username=data.username,
                    email=data.email,
                    is_verified=False,
                    is_banned=False,
                    created_at=self.now(),
                )
                session.add(user)
                session.flush()
                return UserResponse.model_validate(user)
        except IntegrityError as exc:
            raise ConflictError("Username or email is already registered") from exc

    def get_user(self, user_id: str) -> UserResponse | None:
        with self._transaction() as session:
            user = session.get(User, user_id)
            return UserResponse.model_validate(user) if user is not None else None

    def get_user_by_username(self, username: str) -> UserResponse | None:
        with self._transaction() as session:
            user = session.scalars(select(User).where(User.username == username)).first()
            return UserResponse.model_validate(user) if user is not None else None

    def list_users(self) -> list[UserResponse]:
        with self._transaction() as session:
            users = session.scalars(select(User).order_by(User.created_at))
            return [UserResponse.model_validate(user) for user in users]

    def set_user_banned(self, user_id: str, banned: bool) -> UserResponse | None:
        with self._transaction() as session:
            user = session.get(User, user_id)
            if user is None:
                return None
            user.is_banned = banned
            session.flush()
            return UserResponse.model_validate(user)

    # Issues

    def create_issue(self, data: IssueCreate) -> IssueResponse:
        with self._transaction() as session:
            now = self.now()
            issue = Issue(
                id=new_id(),
                **data.model_dump(),
                upvotes=0,
                flag_count=0,
                is_hidden=False,
                created_at=now,
                updated_at=now,
            )
            session.add(issue)
            session.flush()
            self._append_history(
                session,
                StatusHistoryCreate(
                    issue_id=issue.id,
                    status=issue.status,
                    description=ISSUE_REPORTED_DESCRIPTION,
                ),
            )
            logger.info("Issue %s reported in category %s", issue.id, issue.category)
            return IssueResponse.model_validate(issue)

    def get_issue(self, issue_id: str) -> IssueResponse | None:
        with self._transaction() as session:
            issue = session.get(Issue, issue_id)
            return IssueResponse.model_validate(issue) if issue is not None else None

    def list_issues(self) -> list[IssueResponse]:
        return self.filter_issues(IssueFilter())

    def filter_issues(self, criteria: IssueFilter) -> list[IssueResponse]:
        stmt = select(Issue).where(Issue.is_hidden.is_(False))
        if criteria.category is not None:
            stmt = stmt.where(Issue.category == criteria.category)
        if criteria.status is not None:
            stmt = stmt.where(Issue.status == criteria.status)
        stmt = stmt.order_by(Issue.created_at)
        with self._transaction() as session:
            issues = [IssueResponse.model_validate(issue) for issue in session.scalars(stmt)]
        return apply_area_filter(issues, criteria)

    def list_issues_by_reporter(self, reporter_id: str) -> list[IssueResponse]:
        stmt = (
            select(Issue)
            .where(Issue.reporter_id == reporter_id, Issue.is_hidden.is_(False))
            .order_by(Issue.created_at)
        )
        with self._transaction() as session:
            return [IssueResponse.model_validate(issue) for issue in session.scalars(stmt)]

    def update_issue_status(self, issue_id: str, status: IssueStatus) -> IssueResponse | None:
        with self._transaction() as session:
            issue = session.get(Issue, issue_id)
            if issue is None:
                return None
            issue.status = status
            issue.updated_at = self.now()
            session.flush()
            self._append_history(
                session,
                StatusHistoryCreate(
                    issue_id=issue_id,
                    status=status,
                    description=status_changed_description(status),
                ),
            )
            logger.info("Issue %s moved to status %s", issue_id, status)
            return IssueResponse.model_validate(issue)

    def increment_upvotes(self, issue_id: str) -> IssueResponse | None:
        with self._transaction() as session:
            result = session.execute(
                update(Issue).where(Issue.id == issue_id).values(upvotes=Issue.upvotes + 1)
            )
            if result.rowcount == 0:
                return None
            return self._load_issue(session, issue_id)

    def increment_flag_count(self, issue_id: str) -> IssueResponse | None:
        with self._transaction() as session:
            # Single UPDATE so concurrent flags cannot lose an increment.
            result = session.execute(
                update(Issue).where(Issue.id == issue_id).values(flag_count=Issue.flag_count + 1)
            )
            if result.rowcount == 0:
                return None
            hidden = session.execute(
                update(Issue)
                .where(
                    Issue.id == issue_id,
                    Issue.is_hidden.is_(False),
                    Issue.flag_count >= FLAG_HIDE_THRESHOLD,
                )
                .values(is_hidden=True)
            )
            if hidden.rowcount:
                logger.warning("Issue %s hidden after reaching %d flags", issue_id, FLAG_HIDE_THRESHOLD)
            return self._load_issue(session, issue_id)

    def list_flagged_issues(self) -> list[IssueResponse]:
        stmt = (
            select(Issue)
            .where(or_(Issue.flag_count > 0, Issue.is_hidden.is_(True)))
            .order_by(Issue.flag_count.desc(), Issue.created_at)
        )
        with self._transaction() as session:
            return [IssueResponse.model_validate(issue) for issue in session.scalars(stmt)]

    def set_issue_hidden(self, issue_id: str, hidden: bool) -> IssueResponse | None:
        with self._transaction() as session:
            issue = session.get(Issue, issue_id)
            if issue is None:
                return None
            issue.is_hidden = hidden
            if not hidden:
                issue.flag_count = 0
            session.flush()
            return IssueResponse.model_validate(issue)

    def _load_issue(self, session: Session, issue_id: str) -> IssueResponse:
        issue = session.get(Issue, issue_id, populate_existing=True)
        return IssueResponse.model_validate(issue)

    # Comments

    def create_comment(self, data: CommentCreate) -> CommentResponse:
        with self._transaction() as session:
            comment = Comment(
                id=new_id(),
                **data.model_dump(),
                likes=0,
                flag_count=0,
                is_hidden=False,
                created_at=self.now(),
            )
            session.add(comment)
            session.flush()
            return CommentResponse.model_validate(comment)

    def get_comment(self, comment_id: str) -> CommentResponse | None:
        with self._transaction() as session:
            comment = session.get(Comment, comment_id)
            return CommentResponse.model_validate(comment) if comment is not None else None

    def list_comments_by_issue(self, issue_id: str) -> list[CommentResponse]:
        stmt = (
            select(Comment)
            .where(Comment.issue_id == issue_id, Comment.is_hidden.is_(False))
            .order_by(Comment.created_at)
        )
        with self._transaction() as session:
            return [CommentResponse.model_validate(comment) for comment in session.scalars(stmt)]

    def like_comment(self, comment_id: str) -> CommentResponse | None:
        with self._transaction() as session:
            result = session.execute(
                update(Comment).where(Comment.id == comment_id).values(likes=Comment.likes + 1)
            )
            if result.rowcount == 0:
                return None
            return self._load_comment(session, comment_id)

    def flag_comment(self, comment_id: str) -> CommentResponse | None:
        with self._transaction() as session:
            result = session.execute(
                update(Comment)
                .where(Comment.id == comment_id)
                .values(flag_count=Comment.flag_count + 1)
            )
            if result.rowcount == 0:
                return None
            hidden = session.execute(
                update(Comment)
                .where(
                    Comment.id == comment_id,
                    Comment.is_hidden.is_(False),
                    Comment.flag_count >= FLAG_HIDE_THRESHOLD,
                )
                .values(is_hidden=True)
            )
            if hidden.rowcount:
                logger.warning(
                    "Comment %s hidden after reaching %d flags", comment_id, FLAG_HIDE_THRESHOLD
                )
            return self._load_comment(session, comment_id)

    def list_flagged_comments(self) -> list[CommentResponse]:
        stmt = (
            select(Comment)
            .where(or_(Comment.flag_count > 0, Comment.is_hidden.is_(True)))
            .order_by(Comment.flag_count.desc(), Comment.created_at)
        )
        with self._transaction() as session:
            return [CommentResponse.model_validate(comment) for comment in session.scalars(stmt)]

    def set_comment_hidden(self, comment_id: str, hidden: bool) -> CommentResponse | None:
        with self._transaction() as session:
            comment = session.get(Comment, comment_id)
            if comment is None:
                return None
            comment.is_hidden = hidden
            if not hidden:
                comment.flag_count = 0
            session.flush()
            return CommentResponse.model_validate(comment)

    def _load_comment(self, session: Session, comment_id: str) -> CommentResponse:
        comment = session.get(Comment, comment_id, populate_existing=True)
        return CommentResponse.model_validate(comment)

    # Votes

    def get_vote_by_user_and_issue(self, user_id: str, issue_id: str) -> VoteResponse | None:
        with self._transaction() as session:
            vote = session.scalars(
                select(Vote).where(Vote.user_id == user_id, Vote.issue_id == issue_id)
            ).first()
            return VoteResponse.model_validate(vote) if vote is not None else None

    def create_vote(self, data: VoteCreate) -> VoteResponse:
        def _replace() -> VoteResponse:
            with self._transaction() as session:
                session.execute(
                    delete(Vote).where(Vote.user_id == data.user_id, Vote.issue_id == data.issue_id)
                )
                vote = Vote(
                    id=new_id(),
                    issue_id=data.issue_id,
                    user_id=data.user_id,
                    type=data.type,
                    created_at=self.now(),
                )
                session.add(vote)
                session.flush()
                self._recount_upvotes(session, data.issue_id)
                return VoteResponse.model_validate(vote)

        return self._retry_on_conflict(_replace)

    def delete_vote(self, user_id: str, issue_id: str) -> bool:
        with self._transaction() as session:
            result = session.execute(
                delete(Vote).where(Vote.user_id == user_id, Vote.issue_id == issue_id)
            )
            if result.rowcount == 0:
                return False
            self._recount_upvotes(session, issue_id)
            return True

    def _recount_upvotes(self, session: Session, issue_id: str) -> None:
        upvotes = (
            select(func.count(Vote.id))
            .where(Vote.issue_id == issue_id, Vote.type == "upvote")
            .scalar_subquery()
        )
        session.execute(update(Issue).where(Issue.id == issue_id).values(upvotes=upvotes))

    # Status history

    def create_status_history(self, data: StatusHistoryCreate) -> StatusHistoryResponse:
        with self._transaction() as session:
            return self._append_history(session, data)

    def _append_history(self, session: Session, data: StatusHistoryCreate) -> StatusHistoryResponse:
        seq = session.scalar(
            select(func.coalesce(func.max(StatusHistory.seq), 0)).where(
                StatusHistory.issue_id == data.issue_id
            )
        )
        entry = StatusHistory(
            id=new_id(),
            issue_id=data.issue_id,
            seq=(seq or 0) + 1,
            status=data.status,
            description=data.description,
            created_at=self.now(),
        )
        session.add(entry)
        session.flush()
        return StatusHistoryResponse.model_validate(entry)

    def list_status_history(self, issue_id: str) -> list[StatusHistoryResponse]:
        stmt = (
            select(StatusHistory)
            .where(StatusHistory.issue_id == issue_id)
            .order_by(StatusHistory.created_at, StatusHistory.seq)
        )
        with self._transaction() as session:
            return [StatusHistoryResponse.model_validate(entry) for entry in session.scalars(stmt)]

    # Follows

    def get_follow_by_user_and_issue(self, user_id: str, issue_id: str) -> FollowResponse | None:
        with self._transaction() as session:
            follow = self._find_follow(session, user_id, issue_id)
            return FollowResponse.model_validate(follow) if follow is not None else None

    def create_follow(self, data: FollowCreate) -> FollowResponse:
        def _create() -> FollowResponse:
            with self._transaction() as session:
                follow = self._find_follow(session, data.user_id, data.issue_id)
                if follow is None:
                    follow = Follow(
                        id=new_id(),
                        issue_id=data.issue_id,
                        user_id=data.user_id,
                        created_at=self.now(),
                    )
                    session.add(follow)
                    session.flush()
                return FollowResponse.model_validate(follow)

        return self._retry_on_conflict(_create)

    def delete_follow(self, user_id: str, issue_id: str) -> bool:
        with self._transaction() as session:
            result = session.execute(
                delete(Follow).where(Follow.user_id == user_id, Follow.issue_id == issue_id)
            )
            return result.rowcount > 0

    def toggle_follow(self, user_id: str, issue_id: str) -> bool:
        def _toggle() -> bool:
            with self._transaction() as session:
                result = session.execute(
                    delete(Follow).where(Follow.user_id == user_id, Follow.issue_id == issue_id)
                )
                if result.rowcount > 0:
                    return False
                session.add(
                    Follow(id=new_id(), issue_id=issue_id, user_id=user_id, created_at=self.now())
                )
                session.flush()
                return True

        return self._retry_on_conflict(_toggle)

    @staticmethod
    def _find_follow(session: Session, user_id: str, issue_id: str) -> Follow | None:
        return session.scalars(
            select(Follow).where(Follow.user_id == user_id, Follow.issue_id == issue_id)
        ).first()
