"""
MathBot Web API

Main entry point: configures logging, creates the FastAPI app and runs it
under uvicorn.

    uvicorn mathbot.main:app --port 3000
    python -m mathbot
"""

import uvicorn

from mathbot.app_factory import create_app
from mathbot.config import get_settings
from mathbot.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level)

app = create_app(settings)


def main():
    """Console entry point"""
    uvicorn.run(
        "mathbot.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
