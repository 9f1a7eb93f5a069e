"""Follow-related Pydantic schemas."""

from pydantic import BaseModel, Field

from .common import CamelInput, CamelModel, UTCDateTime


class FollowCreate(CamelInput):
    """Schema for following (or unfollowing) an issue."""

    issue_id: str
    user_id: str = Field(..., min_length=1)


class FollowResponse(CamelModel):
    """Schema for a stored follow."""

    id: str
    issue_id: str
    user_id: str
    created_at: UTCDateTime


class FollowState(BaseModel):
    """Result of a follow toggle."""

    following: bool
