"""Status history Pydantic schemas."""

from .common import CamelModel, IssueStatus, UTCDateTime


class StatusHistoryCreate(CamelModel):
    """Internal payload for appending a timeline entry."""

    issue_id: str
    status: IssueStatus
    description: str | None = None


class StatusHistoryResponse(CamelModel):
    """Schema for a timeline entry returned by the API."""

    id: str
    issue_id: str
    status: IssueStatus
    description: str | None = None
    created_at: UTCDateTime
