import logging
from typing import Any, cast

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from workhub.errors import (
    AuthenticationError,
    ConflictError,
    FieldError,
    NotFoundError,
    RetryableConflictError,
    StatisticsUpdateError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Request locations FastAPI prefixes to error paths
_LOCATION_PARTS = {"body", "query", "path", "header"}


def create_json_error_response(
    status_code: int, message: str, code: str, fields: list[FieldError] | None = None
) -> JSONResponse:
    """Create the failure envelope with a machine-readable code."""
    error: dict[str, Any] = {"code": code, "message": message}
    if fields:
        error["fields"] = [f.model_dump() for f in fields]
    return JSONResponse(status_code=status_code, content={"success": False, "data": None, "error": error})


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    fields = None
    if isinstance(exc, AuthenticationError):
        status_code = 401
        code = "authentication_error"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        code = "not_found"
    elif isinstance(exc, ConflictError):
        status_code = 409
        code = "conflict"
    elif isinstance(exc, ValidationError):
        status_code = 400
        code = "validation_error"
        fields = exc.field_errors
    else:
        # Default for any other UserError subclass
        status_code = 400
        code = "bad_request"

    return create_json_error_response(status_code, str(exc), code, fields)


async def request_validation_error_handler(_: Request, exc: Exception) -> Response:
    """Report malformed request bodies and parameters as validation errors."""
    fields = []
    for error in cast(RequestValidationError, exc).errors():
        path = ".".join(str(part) for part in error.get("loc", ()) if part not in _LOCATION_PARTS)
        fields.append(FieldError(field=path or "body", message=error.get("msg", "Invalid value")))
    message = "; ".join(f"{f.field}: {f.message}" for f in fields)
    return create_json_error_response(400, f"Validation failed: {message}", "validation_error", fields)


async def retryable_conflict_handler(_: Request, exc: Exception) -> Response:
    """Contention that outlasted the retries is an internal error; the message asks the client to retry."""
    logger.warning("Retryable conflict: %s", exc)
    return create_json_error_response(500, str(exc), "internal_error")


async def statistics_update_error_handler(_: Request, exc: Exception) -> Response:
    """The entity itself was written; the message names its id."""
    logger.error("Statistics update failed for %s: %s", cast(StatisticsUpdateError, exc).entity_id, exc)
    return create_json_error_response(500, str(exc), "statistics_update_failed")


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(500, "An unexpected error occurred.", "internal_error")
