import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from todoapp.errors import AuthenticationError, NotFoundError, UserError, ValidationError

logger = logging.getLogger(__name__)

# Checked in order; any other UserError is a plain bad request
USER_ERROR_RESPONSES: tuple[tuple[type[UserError], int, str], ...] = (
    (AuthenticationError, 401, "authentication_error"),
    (NotFoundError, 404, "not_found"),
    (ValidationError, 400, "validation_error"),
)


def create_json_error_response(status_code: int, message: str, error_type: str) -> JSONResponse:
    """Create the `{"message", "type"}` error body used by every handler."""
    return JSONResponse(status_code=status_code, content={"message": message, "type": error_type})


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    for error_class, status_code, error_type in USER_ERROR_RESPONSES:
        if isinstance(exc, error_class):
            return create_json_error_response(status_code, str(exc), error_type)
    return create_json_error_response(400, str(exc), "bad_request")


async def auth_provider_error_handler(_: Request, exc: Exception) -> Response:
    """Relay auth provider errors (bad credentials, duplicate account) with the provider's message.

    The provider's status is kept when it is a client error; anything else becomes 400.
    """
    status_code = getattr(exc, "status", None)
    if not isinstance(status_code, int) or not 400 <= status_code < 500:
        status_code = 400
    return create_json_error_response(status_code, str(exc), "auth_error")


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500), including backend failures. Details stay in the log."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(500, "An unexpected error occurred.", "internal_server_error")
