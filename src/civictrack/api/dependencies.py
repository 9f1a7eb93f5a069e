"""Shared API dependencies for storage access and administration."""

import secrets
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from civictrack.core.errors import ForbiddenError, NotFoundError
from civictrack.core.settings import Settings
from civictrack.schemas import CommentResponse, IssueResponse
from civictrack.storage import Storage

admin_token_header = APIKeyHeader(name="X-Admin-Token", auto_error=False)


def get_storage(request: Request) -> Storage:
    """Return the storage instance the application was created with."""
    return request.app.state.storage


def get_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""
    return request.app.state.settings


# Type aliases for dependency injection
StorageDep = Annotated[Storage, Depends(get_storage)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def require_admin(
    settings: SettingsDep,
    token: Annotated[str | None, Depends(admin_token_header)],
) -> None:
    """Reject the request unless it carries the configured admin token.

    When no token is configured the admin routes are open, which is only
    meant for local development.

    Raises:
        ForbiddenError: If the token is missing or wrong
    """
    expected = settings.admin_token
    if expected is None:
        return
    if token is None or not secrets.compare_digest(token, expected):
        raise ForbiddenError("Admin token required")


def ensure_not_banned(storage: Storage, user_id: str | None) -> None:
    """Raise ``ForbiddenError`` if ``user_id`` belongs to a banned user.

    Unknown identifiers are accepted; user references are opaque.
    """
    if user_id is None:
        return
    user = storage.get_user(user_id)
    if user is not None and user.is_banned:
        raise ForbiddenError("User is banned")


def get_issue_or_404(storage: Storage, issue_id: str) -> IssueResponse:
    issue = storage.get_issue(issue_id)
    if issue is None:
        raise NotFoundError("Issue not found")
    return issue


def get_comment_or_404(storage: Storage, comment_id: str) -> CommentResponse:
    comment = storage.get_comment(comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment
