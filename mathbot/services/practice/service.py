"""
Practice Service - single-shot problem generation and grading

Both actions send one non-streaming request to Ollama and parse the reply.
Connection failures surface as UpstreamUnavailable, the same as the chat relay.
"""

import logging
from typing import Optional

from mathbot.errors import ValidationError
from mathbot.schemas.chat_models import ModelRequest, OllamaMessage
from mathbot.schemas.practice_models import (
    Difficulty,
    GradeResult,
    PracticeProblem,
    PracticeRequest,
    Topic,
)
from mathbot.services.ollama_client import OllamaClient
from .parsing import parse_generated_problem, parse_grade
from .prompts import (
    CHECK_TEMPERATURE,
    GENERATE_TEMPERATURE,
    PRACTICE_MAX_TOKENS,
    check_prompt,
    generate_prompt,
)

logger = logging.getLogger(__name__)

ACTION_GENERATE = "generate"
ACTION_CHECK = "check"


async def _ask(client: OllamaClient, model: str, prompt: str, temperature: float) -> str:
    request = ModelRequest(
        model=model,
        messages=[OllamaMessage(role="user", content=prompt)],
        stream=False,
        options={"temperature": temperature, "num_predict": PRACTICE_MAX_TOKENS},
    )
    data = await client.chat(request)
    message = data.get("message") or {}
    return message.get("content") or ""


async def generate_problem(
    client: OllamaClient,
    model: str,
    topic: Optional[Topic] = None,
    difficulty: Optional[Difficulty] = None,
) -> PracticeProblem:
    """Ask the model for one practice problem"""
    topic = topic or Topic.ALGEBRA
    difficulty = difficulty or Difficulty.MEDIUM

    content = await _ask(client, model, generate_prompt(topic, difficulty), GENERATE_TEMPERATURE)
    logger.info(f"Generated {difficulty.value} {topic.value} problem")
    return parse_generated_problem(content)


async def check_answer(
    client: OllamaClient,
    model: str,
    problem: str,
    user_answer: str,
    correct_answer: str,
) -> GradeResult:
    """Ask the model to grade a student's answer"""
    content = await _ask(client, model, check_prompt(problem, user_answer, correct_answer), CHECK_TEMPERATURE)
    result = parse_grade(content)
    logger.info(f"Graded practice answer: correct={result.correct}")
    return result


async def handle_practice(client: OllamaClient, model: str, body: PracticeRequest):
    """
    Dispatch a practice request by action

    Raises:
        ValidationError: unknown action, or check without its three fields
    """
    if body.action == ACTION_GENERATE:
        return await generate_problem(client, model, body.topic, body.difficulty)

    if body.action == ACTION_CHECK:
        missing = [
            name for name, value in (
                ("problem", body.problem),
                ("userAnswer", body.user_answer),
                ("correctAnswer", body.correct_answer),
            )
            if value is None
        ]
        if missing:
            raise ValidationError(
                message=f"Missing fields for check: {', '.join(missing)}",
                details={"missing": missing}
            )
        return await check_answer(client, model, body.problem, body.user_answer, body.correct_answer)

    raise ValidationError(message="Invalid action", details={"action": body.action})
