"""
Health Routes - is the local model server reachable?

The browser calls this on load to decide whether to show Ollama setup
instructions before the first message is sent.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from mathbot.config import MathBotSettings, get_settings
from mathbot.errors import ErrorHandler

router = APIRouter(
    prefix="/api",
    tags=["health"]
)


@router.get("/health", name="health")
async def health(settings: MathBotSettings = Depends(get_settings)) -> Dict[str, Any]:
    """Report Ollama status and configured models"""
    status = await ErrorHandler.check_ollama_health(settings.ollama_base_url, timeout=settings.health_timeout)
    status["model"] = settings.ollama_model
    status["vision_model"] = settings.ollama_vision_model
    return status
