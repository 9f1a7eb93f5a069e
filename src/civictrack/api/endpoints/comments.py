# src/civictrack/api/endpoints/comments.py
"""Comment action endpoints for the CivicTrack API."""

from fastapi import APIRouter

from civictrack.api.dependencies import StorageDep, get_comment_or_404
from civictrack.core.errors import NotFoundError
from civictrack.schemas import CommentResponse

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/{comment_id}", response_model=CommentResponse)
async def get_comment(comment_id: str, storage: StorageDep) -> CommentResponse:
    """Get a specific comment by ID."""
    return get_comment_or_404(storage, comment_id)


@router.post("/{comment_id}/like", response_model=CommentResponse)
async def like_comment(comment_id: str, storage: StorageDep) -> CommentResponse:
    """Add one like to a comment."""
    comment = storage.like_comment(comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


@router.post("/{comment_id}/flag", response_model=CommentResponse)
async def flag_comment(comment_id: str, storage: StorageDep) -> CommentResponse:
    """Flag a comment; three flags hide it from the issue's thread."""
    comment = storage.flag_comment(comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment
