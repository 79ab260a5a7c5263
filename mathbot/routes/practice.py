"""
Practice Routes - problem generation and answer checking
"""

import logging
from typing import Union

from fastapi import APIRouter, Depends

from mathbot.config import MathBotSettings, get_settings
from mathbot.schemas.practice_models import GradeResult, PracticeProblem, PracticeRequest
from mathbot.services.ollama_client import OllamaClient, get_ollama_client
from mathbot.services.practice import handle_practice

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["practice"]
)


@router.post(
    "/practice",
    name="practice",
    summary="Generate or check a practice problem",
)
async def practice(
    body: PracticeRequest,
    client: OllamaClient = Depends(get_ollama_client),
    settings: MathBotSettings = Depends(get_settings),
) -> Union[PracticeProblem, GradeResult]:
    """Single-shot practice exchange: action is 'generate' or 'check'"""
    logger.info(f"Practice request: action={body.action}")
    return await handle_practice(client, settings.ollama_model, body)
