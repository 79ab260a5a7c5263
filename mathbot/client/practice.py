"""
Practice client - drives POST /api/practice and keeps the stats tally
"""

import logging
from typing import Any, Dict, Optional, Union

import httpx

from mathbot.client.consumer import error_from_exception, error_from_response
from mathbot.client.storage import (
    JsonStore,
    PracticeStats,
    load_practice_stats,
    save_practice_stats,
)
from mathbot.schemas.practice_models import Difficulty, GradeResult, PracticeProblem, Topic

logger = logging.getLogger(__name__)


class PracticeClient:
    """Single-shot practice exchanges with persisted statistics"""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:3000",
        store: Optional[JsonStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 120.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.store = store
        self._transport = transport
        self._timeout = timeout
        self.stats = load_practice_stats(store) if store is not None else PracticeStats()

    async def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST one practice action

        Raises:
            RelayError: error body from the relay, or the relay was unreachable
                (setup_required is set for connection refusals)
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(f"{self.base_url}/api/practice", json=body)
        except httpx.HTTPError as e:
            logger.warning(f"Practice request failed: {e}")
            raise error_from_exception(e) from e
        if not response.is_success:
            raise error_from_response(response)
        return response.json()

    async def generate(
        self,
        topic: Union[Topic, str] = Topic.ALGEBRA,
        difficulty: Union[Difficulty, str] = Difficulty.MEDIUM,
    ) -> PracticeProblem:
        data = await self._post({
            "action": "generate",
            "topic": Topic(topic).value,
            "difficulty": Difficulty(difficulty).value,
        })
        return PracticeProblem.model_validate(data)

    async def check(self, problem: str, user_answer: str, correct_answer: str) -> GradeResult:
        """
        Grade an answer and record the outcome

        Raises:
            RelayError: the relay answered with an error body
        """
        data = await self._post({
            "action": "check",
            "problem": problem,
            "userAnswer": user_answer,
            "correctAnswer": correct_answer,
        })
        result = GradeResult.model_validate(data)

        self.stats.record(result.correct)
        if self.store is not None:
            save_practice_stats(self.store, self.stats)
        logger.debug(f"Graded answer: correct={result.correct} streak={self.stats.streak}")
        return result
