"""
Practice Response Parsing

Extracts structured fields from the model's free-text replies.
"""

import re

from mathbot.schemas.practice_models import GradeResult, PracticeProblem

_PROBLEM_RE = re.compile(r"PROBLEM:\s*(.*?)(?=ANSWER:)", re.IGNORECASE | re.DOTALL)
_ANSWER_RE = re.compile(r"ANSWER:\s*(.*?)(?=HINT:)", re.IGNORECASE | re.DOTALL)
_HINT_RE = re.compile(r"HINT:\s*(.*)$", re.IGNORECASE | re.DOTALL)
_VERDICT_RE = re.compile(r"^(CORRECT|INCORRECT)\s*", re.IGNORECASE)


def parse_generated_problem(content: str) -> PracticeProblem:
    """
    Split a PROBLEM/ANSWER/HINT reply into fields

    A missing PROBLEM falls back to the whole reply; missing ANSWER or
    HINT become empty strings.
    """
    problem = _PROBLEM_RE.search(content)
    answer = _ANSWER_RE.search(content)
    hint = _HINT_RE.search(content)

    return PracticeProblem(
        problem=(problem.group(1).strip() if problem else "") or content,
        answer=answer.group(1).strip() if answer else "",
        hint=hint.group(1).strip() if hint else "",
    )


def parse_grade(content: str) -> GradeResult:
    """Read the CORRECT/INCORRECT verdict and strip it from the explanation"""
    content = content.strip()
    correct = content.upper().startswith("CORRECT")
    explanation = _VERDICT_RE.sub("", content, count=1).strip()
    return GradeResult(correct=correct, explanation=explanation)
