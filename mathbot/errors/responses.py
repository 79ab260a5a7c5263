"""
Error Response System for MathBot

Global FastAPI exception handlers. Every non-streaming failure leaves the
service as a JSON body of the form {"error": ..., "type": ...} so the
browser client can read one field regardless of where the failure happened.
"""

import logging
import uuid

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mathbot.config import get_settings
from mathbot.errors.handler import ErrorHandler
from mathbot.errors.types import ErrorType, MathBotError

logger = logging.getLogger(__name__)


async def mathbot_exception_handler(request: Request, exc: MathBotError) -> JSONResponse:
    """
    Global exception handler for MathBotError

    This ensures consistent error response format across all endpoints
    """
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(log_level, f"{request.method} {request.url.path} -> {exc.error_type.value}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorHandler.to_response_body(exc)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render pydantic request validation failures in the shared error shape"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or None

    error = ErrorHandler.handle_validation_error(
        ValueError(first.get("msg", "invalid request body")),
        field=field
    )
    logger.warning(f"{request.method} {request.url.path} -> {error.message}")

    return JSONResponse(
        status_code=error.status_code,
        content=ErrorHandler.to_response_body(error)
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all exception handler for unexpected errors

    Converts unhandled exceptions to standardized error responses
    """
    error_id = str(uuid.uuid4())[:8]

    # Log the unexpected error
    logger.exception(f"[{error_id}] Unhandled exception: {str(exc)}")

    content = {
        "error": "Something went wrong",
        "type": ErrorType.INTERNAL_ERROR.value,
        "error_id": error_id,
    }

    # Include technical details in dev mode
    if get_settings().debug:
        content["technical"] = str(exc)
        content["exception"] = type(exc).__name__

    return JSONResponse(
        status_code=500,
        content=content
    )
