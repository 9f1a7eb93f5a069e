"""Comment-related Pydantic schemas."""

from pydantic import Field

from .common import CamelInput, CamelModel, UTCDateTime


class CommentCreate(CamelInput):
    """Fields a client may supply when commenting on an issue."""

    issue_id: str
    content: str = Field(..., min_length=1, max_length=2000)
    author_id: str | None = None
    parent_id: str | None = Field(None, description="Top-level comment this one replies to")


class CommentResponse(CamelModel):
    """Schema for comment information returned by the API."""

    id: str
    issue_id: str
    author_id: str | None = None
    content: str
    parent_id: str | None = None
    likes: int = 0
    flag_count: int = 0
    is_hidden: bool = False
    created_at: UTCDateTime
