# src/civictrack/api/endpoints/issues.py
"""Issue-related endpoints for the CivicTrack API."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, status

from civictrack.api.dependencies import (
    StorageDep,
    ensure_not_banned,
    get_issue_or_404,
)
from civictrack.core.errors import NotFoundError, ValidationError
from civictrack.schemas import (
    CommentCreate,
    CommentResponse,
    FollowCreate,
    FollowState,
    IssueCreate,
    IssueFilter,
    IssueResponse,
    StatusHistoryResponse,
    StatusUpdate,
    VoteCreate,
    validate_payload,
)
from civictrack.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/issues", tags=["issues"])

PayloadBody = Annotated[Any, Body()]


def _with_issue_id(payload: Any, issue_id: str) -> Any:
    """Merge the path's issue id into a JSON object body."""
    if payload is None:
        return {"issueId": issue_id}
    if isinstance(payload, dict):
        return {**payload, "issueId": issue_id}
    return payload


def _check_parent(storage: Storage, data: CommentCreate) -> None:
    """Replies must target an existing top-level comment of the same issue."""
    if data.parent_id is None:
        return
    parent = storage.get_comment(data.parent_id)
    problem: str | None = None
    if parent is None or parent.issue_id != data.issue_id:
        problem = "Parent comment does not exist on this issue"
    elif parent.parent_id is not None:
        problem = "Replies can only be made to top-level comments"
    if problem is not None:
        raise ValidationError(
            "Invalid comment data",
            [{"field": "parentId", "message": problem, "type": "value_error"}],
        )


@router.get("", response_model=list[IssueResponse])
async def list_issues(
    storage: StorageDep,
    category: str | None = Query(None, description="Category, or 'all'"),
    status_: str | None = Query(None, alias="status", description="Status, or 'all'"),
    latitude: str | None = Query(None, description="Centre latitude for area search"),
    longitude: str | None = Query(None, description="Centre longitude for area search"),
    radius: str | None = Query(None, description="Area search radius in kilometres"),
) -> list[IssueResponse]:
    """List visible issues, optionally filtered by category, status and area.

    Hidden issues are never returned. The area filter only applies when
    latitude, longitude and radius are all supplied.
    """
    criteria = validate_payload(
        IssueFilter,
        {
            "category": category,
            "status": status_,
            "latitude": latitude,
            "longitude": longitude,
            "radius": radius,
        },
        "Invalid filter parameters",
    )
    return storage.filter_issues(criteria)


@router.get("/{issue_id}", response_model=IssueResponse)
async def get_issue(issue_id: str, storage: StorageDep) -> IssueResponse:
    """Get a specific issue by ID.

    Raises:
        NotFoundError: If the issue does not exist
    """
    return get_issue_or_404(storage, issue_id)


@router.post("", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
async def create_issue(storage: StorageDep, payload: PayloadBody = None) -> IssueResponse:
    """Report a new issue.

    The issue starts with no upvotes or flags and gets its first status
    history entry ("Issue reported").

    Raises:
        ValidationError: If the payload violates the issue schema
        ForbiddenError: If the reporter is banned
    """
    data = validate_payload(IssueCreate, payload, "Invalid issue data")
    ensure_not_banned(storage, data.reporter_id)
    return storage.create_issue(data)


@router.patch("/{issue_id}/status", response_model=IssueResponse)
async def update_issue_status(
    issue_id: str,
    storage: StorageDep,
    payload: PayloadBody = None,
) -> IssueResponse:
    """Move an issue to a new status and record the transition."""
    has_status = isinstance(payload, dict) and payload.get("status") not in (None, "")
    data = validate_payload(
        StatusUpdate,
        payload,
        "Invalid status data" if has_status else "Status is required",
    )
    issue = storage.update_issue_status(issue_id, data.status)
    if issue is None:
        raise NotFoundError("Issue not found")
    return issue


@router.post("/{issue_id}/vote", response_model=IssueResponse)
async def vote_on_issue(
    issue_id: str,
    storage: StorageDep,
    payload: PayloadBody = None,
) -> IssueResponse:
    """Cast or replace the caller's vote on an issue.

    A user holds at most one vote per issue; voting again replaces the
    previous vote. ``upvotes`` always equals the number of upvote-type votes.
    """
    data = validate_payload(VoteCreate, _with_issue_id(payload, issue_id), "Invalid vote data")
    get_issue_or_404(storage, issue_id)
    ensure_not_banned(storage, data.user_id)
    storage.create_vote(data)
    logger.debug("User %s cast %s on issue %s", data.user_id, data.type, issue_id)
    return get_issue_or_404(storage, issue_id)


@router.delete("/{issue_id}/vote", response_model=IssueResponse)
async def remove_vote(
    issue_id: str,
    storage: StorageDep,
    user_id: Annotated[str, Query(alias="userId", min_length=1)],
) -> IssueResponse:
    """Withdraw the caller's vote on an issue, if any."""
    get_issue_or_404(storage, issue_id)
    storage.delete_vote(user_id, issue_id)
    return get_issue_or_404(storage, issue_id)


@router.post("/{issue_id}/flag", response_model=IssueResponse)
async def flag_issue(issue_id: str, storage: StorageDep) -> IssueResponse:
    """Flag an issue as inappropriate; three flags hide it from listings."""
    issue = storage.increment_flag_count(issue_id)
    if issue is None:
        raise NotFoundError("Issue not found")
    return issue


@router.get("/{issue_id}/comments", response_model=list[CommentResponse])
async def list_comments(issue_id: str, storage: StorageDep) -> list[CommentResponse]:
    """List the visible comments of an issue, oldest first."""
    return storage.list_comments_by_issue(issue_id)


@router.post(
    "/{issue_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    issue_id: str,
    storage: StorageDep,
    payload: PayloadBody = None,
) -> CommentResponse:
    """Post a comment, or a reply to a top-level comment, on an issue."""
    data = validate_payload(
        CommentCreate,
        _with_issue_id(payload, issue_id),
        "Invalid comment data",
    )
    get_issue_or_404(storage, issue_id)
    _check_parent(storage, data)
    ensure_not_banned(storage, data.author_id)
    return storage.create_comment(data)


@router.get("/{issue_id}/status-history", response_model=list[StatusHistoryResponse])
async def get_status_history(issue_id: str, storage: StorageDep) -> list[StatusHistoryResponse]:
    """Return the issue's status timeline in chronological order."""
    return storage.list_status_history(issue_id)


@router.post("/{issue_id}/follow", response_model=FollowState)
async def toggle_follow(
    issue_id: str,
    storage: StorageDep,
    payload: PayloadBody = None,
) -> FollowState:
    """Follow the issue, or unfollow it when already following."""
    data = validate_payload(FollowCreate, _with_issue_id(payload, issue_id), "Invalid follow data")
    get_issue_or_404(storage, issue_id)
    ensure_not_banned(storage, data.user_id)
    return FollowState(following=storage.toggle_follow(data.user_id, issue_id))


@router.get("/{issue_id}/follow", response_model=FollowState)
async def get_follow_state(
    issue_id: str,
    storage: StorageDep,
    user_id: Annotated[str, Query(alias="userId", min_length=1)],
) -> FollowState:
    """Report whether the user currently follows the issue."""
    get_issue_or_404(storage, issue_id)
    return FollowState(following=storage.get_follow_by_user_and_issue(user_id, issue_id) is not None)
