import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from folio.errors import (
    AccessDeniedError,
    AuthenticationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    # Most specific classes first
    if isinstance(exc, InvalidCredentialsError):
        status_code = 401
        error_type = "invalid_credentials"
    elif isinstance(exc, UnauthorizedError):
        status_code = 401
        error_type = "unauthorized"
    elif isinstance(exc, AuthenticationError):
        status_code = 401
        error_type = "authentication_error"
    elif isinstance(exc, AccessDeniedError):
        status_code = 403
        error_type = "access_denied"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, DuplicateEmailError):
        status_code = 400
        error_type = "duplicate_email"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        # Default for any other UserError subclass
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def request_validation_error_handler(_: Request, exc: Exception) -> Response:
    """Handle unparseable request bodies as a plain 400."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    logger.debug("request_validation_failed", errors=errors)
    return create_json_error_response(status_code=400, message="Invalid request body", error_type="validation_error")


async def timeout_error_handler(_: Request, exc: Exception) -> Response:
    """Handle database timeouts (503, safe to retry)."""
    logger.warning("request_timed_out", error=str(exc))
    return create_json_error_response(
        status_code=503, message="Service temporarily unavailable, please retry.", error_type="timeout"
    )


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("unexpected_error", error_class=type(exc).__name__)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
