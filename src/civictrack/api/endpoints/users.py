# src/civictrack/api/endpoints/users.py
"""User registration and profile endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, status

from civictrack.api.dependencies import StorageDep
from civictrack.core.errors import NotFoundError
from civictrack.schemas import IssueResponse, UserCreate, UserResponse, validate_payload
from civictrack.storage import Storage

router = APIRouter(prefix="/users", tags=["users"])


def _get_user_or_404(storage: Storage, user_id: str) -> UserResponse:
    user = storage.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    storage: StorageDep,
    payload: Annotated[Any, Body()] = None,
) -> UserResponse:
    """Register a new user.

    Raises:
        ValidationError: If username or email is missing or malformed
        ConflictError: If the username or email is already in use
    """
    data = validate_payload(UserCreate, payload, "Invalid user data")
    return storage.create_user(data)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, storage: StorageDep) -> UserResponse:
    """Get a user profile by ID."""
    return _get_user_or_404(storage, user_id)


@router.get("/{user_id}/issues", response_model=list[IssueResponse])
async def list_user_issues(user_id: str, storage: StorageDep) -> list[IssueResponse]:
    """List the visible issues a user has reported."""
    _get_user_or_404(storage, user_id)
    return storage.list_issues_by_reporter(user_id)
