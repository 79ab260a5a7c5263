"""
Errors Package

Provides standardized error handling for MathBot:
- ErrorType enum for error categories
- Exception classes (MathBotError and subclasses)
- ErrorHandler for classifying upstream failures
- FastAPI exception handlers
"""

from mathbot.errors.types import (
    STREAM_INTERRUPTED_MESSAGE,
    ErrorType,
    MathBotError,
    UpstreamUnavailable,
    UpstreamProtocolError,
    StreamInterrupted,
    MalformedFrame,
    ValidationError,
)

from mathbot.errors.handler import (
    ErrorHandler,
    OLLAMA_OFFLINE_MESSAGE,
    is_connectivity_failure,
)

from mathbot.errors.responses import (
    mathbot_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)

__all__ = [
    "STREAM_INTERRUPTED_MESSAGE",
    # Error types
    "ErrorType",
    "MathBotError",
    "UpstreamUnavailable",
    "UpstreamProtocolError",
    "StreamInterrupted",
    "MalformedFrame",
    "ValidationError",
    # Handler
    "ErrorHandler",
    "OLLAMA_OFFLINE_MESSAGE",
    "is_connectivity_failure",
    # HTTP responses
    "mathbot_exception_handler",
    "validation_exception_handler",
    "generic_exception_handler",
]
