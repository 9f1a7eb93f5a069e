"""User-related Pydantic schemas."""

from pydantic import EmailStr, Field, field_validator

from .common import CamelInput, CamelModel, UTCDateTime


class UserCreate(CamelInput):
    """Schema for registering a new user."""

    username: str = Field(..., min_length=1, max_length=64, description="Unique public handle")
    email: EmailStr = Field(..., description="Unique contact address")

    @field_validator("username")
    @classmethod
    def _strip_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.lower()


class UserResponse(CamelModel):
    """Schema for user information returned by the API."""

    id: str
    username: str
    email: str
    is_verified: bool = False
    is_banned: bool = False
    created_at: UTCDateTime
