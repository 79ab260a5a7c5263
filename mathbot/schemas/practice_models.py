"""
Practice-mode Pydantic models for MathBot API.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Topic(str, Enum):
    ALGEBRA = "algebra"
    CALCULUS = "calculus"
    TRIGONOMETRY = "trigonometry"
    GEOMETRY = "geometry"
    STATISTICS = "statistics"
    LINEAR_ALGEBRA = "linear-algebra"
    NUMBER_THEORY = "number-theory"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class PracticeRequest(BaseModel):
    """Request body for POST /api/practice"""
    model_config = ConfigDict(populate_by_name=True)

    action: str
    topic: Optional[Topic] = None
    difficulty: Optional[Difficulty] = None
    problem: Optional[str] = None
    user_answer: Optional[str] = Field(default=None, alias="userAnswer")
    correct_answer: Optional[str] = Field(default=None, alias="correctAnswer")


class PracticeProblem(BaseModel):
    """A generated practice problem"""
    problem: str
    answer: str = ""
    hint: str = ""


class GradeResult(BaseModel):
    """Verdict on a student's answer"""
    correct: bool
    explanation: str = ""
