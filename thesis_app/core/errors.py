"""
Error Handling - Thesis Defense Platform
thesis_app/core/errors.py

HTTP error helpers shared by every router:
    - raise_error(): HTTPException carrying an ErrorResponse body
    - validation_exception_handler(): friendly 400/422 for bad input
    - http_exception_handler(): unwraps ErrorResponse bodies
    - repository_exception_handler(): maps RepositoryException subclasses
    - get_actor_id(): optional X-Actor-Id header used for audit entries
"""

import logging
from datetime import datetime, timezone
from typing import NoReturn, Optional
from uuid import UUID

from fastapi import Header, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from thesis_app.core.exceptions import RepositoryException
from thesis_app.models.common import ErrorResponse

logger = logging.getLogger(__name__)


FIELD_MESSAGES = {
    "email": {
        "missing": "Email is required",
        "value_error": "Email must be a valid email address",
    },
    "name": {
        "missing": "Name is required",
        "string_too_short": "Name cannot be empty",
        "string_too_long": "Name must not exceed 255 characters",
    },
    "title": {
        "missing": "Thesis title is required",
        "string_too_short": "Thesis title cannot be empty",
    },
    "schedule_id": {
        "missing": "Schedule ID is required",
        "uuid_parsing": "Schedule ID must be a valid UUID format",
    },
    "scheduled_at": {
        "missing": "Defense date/time is required",
        "datetime_parsing": "Defense date/time must be an ISO-8601 timestamp",
    },
    "weight": {
        "greater_than_equal": "Weight must be zero or greater",
        "float_parsing": "Weight must be a valid number",
    },
    "items": {
        "missing": "At least one score item is required",
        "too_short": "At least one score item is required",
    },
}

DEFAULT_MESSAGES = {
    "missing": "Field '{field}' is required",
    "string_too_short": "Field '{field}' is too short",
    "string_too_long": "Field '{field}' is too long",
    "string_pattern_mismatch": "Field '{field}' has invalid format",
    "less_than_equal": "Field '{field}' exceeds maximum allowed value",
    "greater_than_equal": "Field '{field}' is below minimum allowed value",
    "uuid_parsing": "Field '{field}' must be a valid UUID",
    "uuid_type": "Field '{field}' must be a valid UUID",
    "string_type": "Field '{field}' must be a string",
    "float_type": "Field '{field}' must be a number",
    "float_parsing": "Field '{field}' must be a valid number",
    "finite_number": "Field '{field}' must be a finite number",
    "int_type": "Field '{field}' must be an integer",
    "int_parsing": "Field '{field}' must be a valid integer",
    "enum": "Field '{field}' has an unsupported value",
    "datetime": "Field '{field}' must be a valid timestamp",
    "date": "Field '{field}' must be a valid date (YYYY-MM-DD)",
    "extra_forbidden": "Unknown field '{field}' is not allowed",
}


def _error_body(error_code: str, message: str, details: Optional[dict] = None) -> dict:
    return ErrorResponse(error_code=error_code, message=message, details=details).model_dump(mode="json")


def raise_error(status_code: int, error_code: str, message: str) -> NoReturn:
    raise HTTPException(status_code=status_code, detail=_error_body(error_code, message))


def raise_not_found(entity: str) -> NoReturn:
    raise_error(
        status.HTTP_404_NOT_FOUND,
        f"{entity.upper().replace(' ', '_')}_NOT_FOUND",
        f"{entity.capitalize()} not found",
    )


def get_validation_message(field: str, error_type: str) -> str:
    leaf = field.split(".")[-1] if field else field
    if leaf in FIELD_MESSAGES:
        for key in FIELD_MESSAGES[leaf]:
            if key in error_type:
                return FIELD_MESSAGES[leaf][key]
    for key, template in DEFAULT_MESSAGES.items():
        if key in error_type:
            return template.format(field=field)
    return f"Invalid value for field '{field}'"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body("VALIDATION_ERROR", "Request validation failed"),
        )
    err = errors[0]
    error_type = err.get("type", "")
    loc = err.get("loc", [])
    if "json_invalid" in error_type:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("INVALID_REQUEST", "Malformed JSON request body"),
        )
    field = ".".join(str(l) for l in loc if l not in ("body", "query", "path"))
    message = get_validation_message(field, error_type)
    if error_type == "value_error" and err.get("msg"):
        # model validators carry their own message
        message = str(err["msg"]).removeprefix("Value error, ")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(
            "VALIDATION_ERROR",
            message,
            {"field": field, "type": error_type} if field else None,
        ),
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Return raise_error() bodies as-is instead of nesting them under 'detail'."""
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = _error_body(f"HTTP_{exc.status_code}", str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def repository_exception_handler(request: Request, exc: RepositoryException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.error_code, exc.message),
    )


def get_actor_id(x_actor_id: Optional[str] = Header(None)) -> Optional[UUID]:
    """Actor recorded on audit entries. Malformed values are ignored."""
    if not x_actor_id:
        return None
    try:
        return UUID(x_actor_id.strip())
    except ValueError:
        logger.warning(f"Ignoring malformed X-Actor-Id header: {x_actor_id!r}")
        return None
