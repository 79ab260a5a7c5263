"""
Logging configuration for MathBot.

Suppresses verbose DEBUG and INFO logs from the HTTP client stack to reduce terminal noise.
"""

import logging


def configure_logging(level: str = "INFO"):
    """
    Configure logging levels for all services.

    Sets the root level from settings and suppresses DEBUG logs from
    httpcore and httpx, which otherwise log every streamed chunk.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
