"""Shared Pydantic building blocks for API schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, get_args

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from civictrack.db.time import ensure_utc

IssueCategory = Literal["garbage", "water", "roads", "traffic", "lighting", "parks", "other"]
IssueStatus = Literal["reported", "in-progress", "resolved", "flagged"]
VoteType = Literal["upvote", "downvote"]

ISSUE_CATEGORIES: tuple[str, ...] = get_args(IssueCategory)
ISSUE_STATUSES: tuple[str, ...] = get_args(IssueStatus)
VOTE_TYPES: tuple[str, ...] = get_args(VoteType)

# Flags at which an issue or comment drops out of public listings.
FLAG_HIDE_THRESHOLD = 3

UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class CamelModel(BaseModel):
    """Base schema exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CamelInput(CamelModel):
    """Base schema for client payloads; values are not coerced between types."""

    model_config = ConfigDict(strict=True)
