"""
Error Types - Enums and exception classes for error handling

Contains:
- ErrorType enum (standardized error types)
- Exception classes (MathBotError and subclasses)
"""

from typing import Optional, Dict, Any
from enum import Enum


STREAM_INTERRUPTED_MESSAGE = "Stream interrupted"


class ErrorType(Enum):
    """Standard error types"""
    # Ollama errors
    OLLAMA_OFFLINE = "ollama_offline"
    OLLAMA_PROTOCOL_ERROR = "ollama_protocol_error"
    STREAM_INTERRUPTED = "stream_interrupted"
    MALFORMED_FRAME = "malformed_frame"

    # Validation errors
    INVALID_INPUT = "invalid_input"
    VALIDATION_FAILED = "validation_failed"

    # Generic
    INTERNAL_ERROR = "internal_error"


class MathBotError(Exception):
    """Base exception for MathBot"""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class UpstreamUnavailable(MathBotError):
    """The model server could not be reached (connection refused, DNS, network)"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_type=ErrorType.OLLAMA_OFFLINE,
            status_code=503,  # Service Unavailable
            details=details
        )


class UpstreamProtocolError(MathBotError):
    """The model server answered with a non-success status"""

    def __init__(
        self,
        message: str,
        upstream_status: int,
        details: Optional[Dict[str, Any]] = None
    ):
        self.upstream_status = upstream_status
        super().__init__(
            message=message,
            error_type=ErrorType.OLLAMA_PROTOCOL_ERROR,
            status_code=502,  # Bad Gateway
            details=details
        )


class StreamInterrupted(MathBotError):
    """The upstream stream dropped after fragments were already relayed"""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=STREAM_INTERRUPTED_MESSAGE,
            error_type=ErrorType.STREAM_INTERRUPTED,
            status_code=502,
            details=details
        )


class MalformedFrame(MathBotError):
    """A stream line that is not valid JSON. Skipped by the relay, never surfaced."""

    def __init__(self, line: str):
        super().__init__(
            message="Malformed stream frame",
            error_type=ErrorType.MALFORMED_FRAME,
            status_code=502,
            details={"line": line[:200]}
        )


class ValidationError(MathBotError):
    """Validation errors"""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.INVALID_INPUT,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_type=error_type,
            status_code=400,  # Bad Request
            details=details
        )


__all__ = [
    "STREAM_INTERRUPTED_MESSAGE",
    # Enum
    "ErrorType",
    # Exception classes
    "MathBotError",
    "UpstreamUnavailable",
    "UpstreamProtocolError",
    "StreamInterrupted",
    "MalformedFrame",
    "ValidationError",
]
