"""
Practice Service Package
"""

from .parsing import parse_generated_problem, parse_grade
from .service import check_answer, generate_problem, handle_practice

__all__ = [
    "parse_generated_problem",
    "parse_grade",
    "check_answer",
    "generate_problem",
    "handle_practice",
]
