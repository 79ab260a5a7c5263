"""
Unified Error Handler for MathBot
Provides consistent error classification for the chat relay and practice endpoints
"""

import logging
from typing import Any, Dict, Optional

import httpx

from mathbot.errors.types import (
    ErrorType,
    MathBotError,
    UpstreamUnavailable,
    ValidationError,
)

logger = logging.getLogger(__name__)

OLLAMA_OFFLINE_MESSAGE = (
    "Can't connect to Ollama. Make sure Ollama is running "
    "(open the Ollama app or run 'ollama serve')."
)
OLLAMA_SETUP_HELP = "Install Ollama from https://ollama.com, then run: ollama pull qwen2.5:7b && ollama pull llava"

# Lower-cased substrings that identify a refused / unreachable model server
CONNECTIVITY_PATTERNS = (
    "can't connect to ollama",
    "econnrefused",
    "connection refused",
    "all connection attempts failed",
    "name or service not known",
)


def is_connectivity_failure(text: str) -> bool:
    """True when an error text matches a known connection-refusal pattern"""
    lowered = text.lower()
    return any(pattern in lowered for pattern in CONNECTIVITY_PATTERNS)


class ErrorHandler:
    """Centralized error handling"""

    @staticmethod
    def handle_ollama_error(error: Exception) -> MathBotError:
        """Convert a failure talking to Ollama into a typed error"""
        if isinstance(error, MathBotError):
            return error

        # Connection refused, DNS failure, connect timeout
        if isinstance(error, (httpx.ConnectError, httpx.ConnectTimeout)) or is_connectivity_failure(str(error)):
            return UpstreamUnavailable(
                message=OLLAMA_OFFLINE_MESSAGE,
                details={
                    "help": OLLAMA_SETUP_HELP,
                    "original_error": str(error)
                }
            )

        # Generic Ollama error
        return MathBotError(
            message=str(error) or "Something went wrong",
            error_type=ErrorType.INTERNAL_ERROR,
            details={"original_error": str(error)}
        )

    @staticmethod
    def to_response_body(error: MathBotError, include_details: bool = True) -> Dict[str, Any]:
        """Render a MathBotError as the JSON body returned to clients"""
        body: Dict[str, Any] = {
            "error": error.message,
            "type": error.error_type.value,
        }
        if include_details and error.details:
            body["details"] = error.details
        return body

    @staticmethod
    async def check_ollama_health(
        base_url: str,
        timeout: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> Dict[str, Any]:
        """Check if Ollama is running and healthy"""
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                response = await client.get(f"{base_url}/api/tags")
                response.raise_for_status()

                return {
                    "status": "healthy",
                    "message": "Ollama is running",
                    "models": [m.get("name") for m in response.json().get("models", [])]
                }

        except Exception as e:
            logger.warning(f"Ollama health check failed: {e}")
            return {
                "status": "unhealthy",
                "message": "Ollama is not running",
                "error": str(e),
                "help": OLLAMA_SETUP_HELP
            }

    @staticmethod
    def handle_validation_error(error: Exception, field: Optional[str] = None) -> ValidationError:
        """Convert request validation errors to standardized format"""
        return ValidationError(
            message=f"Validation failed: {error}",
            error_type=ErrorType.VALIDATION_FAILED,
            details={
                "field": field,
                "original_error": str(error)
            }
        )
