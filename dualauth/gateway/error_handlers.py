"""
DualAuth - Error Envelope

Maps AuthError subclasses, request validation errors and anything
unexpected onto {"success": false, "message": ..., "code": ...}.
Server-side failures are logged in full; production clients only see a
generic message.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from dualauth.auth.errors import AuthError, Internal, ValidationFailure
from dualauth.auth.schemas import ErrorResponse
from dualauth.config import settings


logger = logging.getLogger(__name__)

GENERIC_SERVER_MESSAGE = "Internal server error"


def error_response(exc: AuthError) -> JSONResponse:
    """Build the JSON error envelope for an AuthError."""
    message = exc.message
    if exc.status_code >= 500 and settings.is_production:
        message = GENERIC_SERVER_MESSAGE
    body = ErrorResponse(message=message, code=exc.error_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=exc.headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers on the application."""

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed: %s",
                request.method, request.url.path, exc.message,
                exc_info=exc,
            )
        else:
            logger.info(
                "%s %s rejected: %s",
                request.method, request.url.path, exc.error_code,
            )
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        messages = [err.get("msg", "Invalid value") for err in exc.errors()]
        return error_response(ValidationFailure("; ".join(messages) or None))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error(
            "Unhandled error on %s %s",
            request.method, request.url.path,
            exc_info=exc,
        )
        detail = str(exc) or Internal.default_message
        return error_response(Internal(detail))
