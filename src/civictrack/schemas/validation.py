"""Explicit payload validation used by request handlers."""
from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from civictrack.core.errors import ValidationError, format_error_locations

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_payload(schema: type[SchemaT], raw: Any, message: str = "Invalid request data") -> SchemaT:
    """Validate ``raw`` against ``schema`` as a whole.

    Returns the normalized model, or raises ``ValidationError`` listing every
    field that failed; nothing is partially accepted.
    """
    if raw is None:
        raw = {}
    try:
        return schema.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(message, format_error_locations(exc.errors(include_url=False))) from exc
