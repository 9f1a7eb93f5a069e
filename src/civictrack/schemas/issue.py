"""Issue-related Pydantic schemas."""

from pydantic import Field, field_serializer, field_validator

from .common import CamelInput, CamelModel, IssueCategory, IssueStatus, UTCDateTime


class IssueCreate(CamelInput):
    """Fields a citizen may supply when reporting an issue."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    category: IssueCategory
    status: IssueStatus = "reported"
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str | None = None
    images: list[str] = Field(default_factory=list, description="Image references")
    reporter_id: str | None = Field(None, description="Reporting user; omitted for anonymous reports")
    is_anonymous: bool = False


class IssueResponse(CamelModel):
    """Schema for issue information returned by the API."""

    id: str
    title: str
    description: str
    category: IssueCategory
    status: IssueStatus
    latitude: float
    longitude: float
    address: str | None = None
    images: list[str] = Field(default_factory=list)
    upvotes: int = 0
    reporter_id: str | None = None
    is_anonymous: bool = False
    flag_count: int = 0
    is_hidden: bool = False
    created_at: UTCDateTime
    updated_at: UTCDateTime

    @field_serializer("reporter_id")
    def _mask_anonymous_reporter(self, reporter_id: str | None) -> str | None:
        # Anonymous reports keep the reporter for moderation but never publish it.
        return None if self.is_anonymous else reporter_id


class StatusUpdate(CamelInput):
    """Body of a status transition request."""

    status: IssueStatus


class IssueFilter(CamelModel):
    """Listing criteria; every axis is optional.

    ``category``/``status`` accept the literal ``"all"`` (or an empty value) to
    mean "no filter". The geographic axis only applies when latitude,
    longitude and radius (kilometres) are all present.
    """

    category: IssueCategory | None = None
    status: IssueStatus | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    radius: float | None = Field(None, gt=0, description="Search radius in kilometres")

    @field_validator("category", "status", mode="before")
    @classmethod
    def _blank_means_any(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() in {"", "all"}:
            return None
        return value

    @field_validator("latitude", "longitude", "radius", mode="before")
    @classmethod
    def _blank_number(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def has_area(self) -> bool:
        return None not in (self.latitude, self.longitude, self.radius)
