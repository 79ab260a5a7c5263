"""
FastAPI application factory for MathBot.

Creates and configures the FastAPI application with middleware,
routers, exception handlers and startup/shutdown logging.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from mathbot import __version__
from mathbot.config import MathBotSettings, get_settings
from mathbot.errors import (
    MathBotError,
    generic_exception_handler,
    mathbot_exception_handler,
    validation_exception_handler,
)
from mathbot.routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Only logs: requests share no state, so there is nothing to open or drain.
    """
    settings = get_settings()
    logger.info(
        f"Starting MathBot API (ollama={settings.ollama_base_url}, "
        f"model={settings.ollama_model}, vision_model={settings.ollama_vision_model})"
    )
    yield
    logger.info("MathBot API stopped")


def create_app(settings: Optional[MathBotSettings] = None) -> FastAPI:
    """Build the FastAPI app"""
    settings = settings or get_settings()

    app = FastAPI(
        title="MathBot",
        description="Local math tutor relay for Ollama",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MathBotError, mathbot_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(router)

    return app
