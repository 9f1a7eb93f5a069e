"""Vote-related Pydantic schemas."""

from pydantic import Field

from .common import CamelInput, CamelModel, UTCDateTime, VoteType


class VoteCreate(CamelInput):
    """Schema for casting a vote on an issue."""

    issue_id: str
    user_id: str = Field(..., min_length=1)
    type: VoteType = Field(..., description="upvote or downvote")


class VoteResponse(CamelModel):
    """Schema for a stored vote."""

    id: str
    issue_id: str
    user_id: str
    type: VoteType
    created_at: UTCDateTime
