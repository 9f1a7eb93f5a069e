"""Error taxonomy and the FastAPI handlers that render it.

Every failure leaves the API as a JSON body with a human-readable
``message``; validation failures add an ``errors`` list with one entry per
offending field.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

__all__ = [
    "CivicTrackError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "ValidationError",
    "format_error_locations",
    "register_exception_handlers",
]


class CivicTrackError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(CivicTrackError):
    """Client-supplied data violates a schema."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request data"

    def __init__(self, message: str | None = None, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class NotFoundError(CivicTrackError):
    """A referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(CivicTrackError):
    """A uniqueness rule would be broken."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class ForbiddenError(CivicTrackError):
    """The caller is not allowed to perform the action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


def format_error_locations(raw_errors: list[dict[str, Any]], *, skip_prefix: bool = False) -> list[dict[str, Any]]:
    """Flatten pydantic error dictionaries into ``{field, message, type}`` entries.

    Args:
        raw_errors: Output of ``pydantic.ValidationError.errors()`` or of a
            FastAPI ``RequestValidationError``.
        skip_prefix: Drop the leading location component (``body``/``query``)
            that FastAPI prepends.
    """
    formatted: list[dict[str, Any]] = []
    for error in raw_errors:
        loc = list(error.get("loc", ()))
        if skip_prefix and loc and loc[0] in {"body", "query", "path"}:
            loc = loc[1:]
        formatted.append(
            {
                "field": ".".join(str(part) for part in loc) or None,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "value_error"),
            }
        )
    return formatted


async def _civictrack_error_handler(request: Request, exc: CivicTrackError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_body()))


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = {
        "message": "Invalid request data",
        "errors": format_error_locations(list(exc.errors()), skip_prefix=True),
    }
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=jsonable_encoder(body))


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": CivicTrackError.default_message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on ``app``."""
    app.add_exception_handler(CivicTrackError, _civictrack_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
