# src/civictrack/api/endpoints/admin.py
"""Administrative moderation and user management endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from civictrack.api.dependencies import StorageDep, require_admin
from civictrack.core.errors import NotFoundError
from civictrack.schemas import CommentResponse, IssueResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/issues/flagged", response_model=list[IssueResponse])
async def list_flagged_issues(storage: StorageDep) -> list[IssueResponse]:
    """List flagged or hidden issues, most flagged first."""
    return storage.list_flagged_issues()


@router.post("/issues/{issue_id}/hide", response_model=IssueResponse)
async def hide_issue(issue_id: str, storage: StorageDep) -> IssueResponse:
    """Hide an issue from public listings."""
    issue = storage.set_issue_hidden(issue_id, True)
    if issue is None:
        raise NotFoundError("Issue not found")
    logger.info("Admin hid issue %s", issue_id)
    return issue


@router.post("/issues/{issue_id}/show", response_model=IssueResponse)
async def show_issue(issue_id: str, storage: StorageDep) -> IssueResponse:
    """Restore a hidden issue and clear its flags."""
    issue = storage.set_issue_hidden(issue_id, False)
    if issue is None:
        raise NotFoundError("Issue not found")
    logger.info("Admin restored issue %s", issue_id)
    return issue


@router.get("/comments/flagged", response_model=list[CommentResponse])
async def list_flagged_comments(storage: StorageDep) -> list[CommentResponse]:
    """List flagged or hidden comments, most flagged first."""
    return storage.list_flagged_comments()


@router.post("/comments/{comment_id}/hide", response_model=CommentResponse)
async def hide_comment(comment_id: str, storage: StorageDep) -> CommentResponse:
    """Hide a comment from its issue's thread."""
    comment = storage.set_comment_hidden(comment_id, True)
    if comment is None:
        raise NotFoundError("Comment not found")
    logger.info("Admin hid comment %s", comment_id)
    return comment


@router.post("/comments/{comment_id}/show", response_model=CommentResponse)
async def show_comment(comment_id: str, storage: StorageDep) -> CommentResponse:
    """Restore a hidden comment and clear its flags."""
    comment = storage.set_comment_hidden(comment_id, False)
    if comment is None:
        raise NotFoundError("Comment not found")
    logger.info("Admin restored comment %s", comment_id)
    return comment


@router.get("/users", response_model=list[UserResponse])
async def list_users(storage: StorageDep) -> list[UserResponse]:
    """List all registered users."""
    return storage.list_users()


@router.post("/users/{user_id}/ban", response_model=UserResponse)
async def ban_user(user_id: str, storage: StorageDep) -> UserResponse:
    """Ban a user from reporting, commenting, voting and following."""
    user = storage.set_user_banned(user_id, True)
    if user is None:
        raise NotFoundError("User not found")
    logger.info("Admin banned user %s", user_id)
    return user


@router.post("/users/{user_id}/unban", response_model=UserResponse)
async def unban_user(user_id: str, storage: StorageDep) -> UserResponse:
    """Lift a ban."""
    user = storage.set_user_banned(user_id, False)
    if user is None:
        raise NotFoundError("User not found")
    logger.info("Admin unbanned user %s", user_id)
    return user
