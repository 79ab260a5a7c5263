"""
Practice Mode Prompts
"""

from mathbot.schemas.practice_models import Difficulty, Topic

TOPIC_DESCRIPTIONS = {
    Topic.ALGEBRA: "algebra (equations, inequalities, polynomials, factoring)",
    Topic.CALCULUS: "calculus (derivatives, integrals, limits)",
    Topic.TRIGONOMETRY: "trigonometry (identities, equations, unit circle)",
    Topic.GEOMETRY: "geometry (areas, volumes, angles, proofs)",
    Topic.STATISTICS: "statistics and probability",
    Topic.LINEAR_ALGEBRA: "linear algebra (matrices, vectors, eigenvalues)",
    Topic.NUMBER_THEORY: "number theory (primes, divisibility, modular arithmetic)",
}

GENERATE_TEMPERATURE = 0.8
CHECK_TEMPERATURE = 0.3
PRACTICE_MAX_TOKENS = 2048


def generate_prompt(topic: Topic, difficulty: Difficulty) -> str:
    return f"""Generate exactly ONE {difficulty.value} {TOPIC_DESCRIPTIONS[topic]} problem for a student to practice.

Format your response EXACTLY like this (no other text):
PROBLEM: [the problem statement]
ANSWER: [the correct final answer, concise]
HINT: [a helpful hint without giving away the answer]

Rules:
- The problem should be appropriate for the {difficulty.value} difficulty level.
- Easy = straightforward single-step. Medium = multi-step. Hard = challenging/competition-level.
- The ANSWER should be a specific value or expression, not a full solution.
- Keep the problem statement clear and unambiguous.
- Use LaTeX notation wrapped in $ signs for math expressions."""


def check_prompt(problem: str, user_answer: str, correct_answer: str) -> str:
    return f"""A student was given this math problem:
{problem}

The correct answer is: {correct_answer}

The student answered: {user_answer}

Evaluate the student's answer. Respond in this format:
1. Start with either "CORRECT" or "INCORRECT" on the first line.
2. Then provide a brief explanation.
3. If incorrect, show the correct step-by-step solution using LaTeX ($ for inline, $$ for display math).
4. If correct, give a brief note on the approach or an interesting related fact.

Be encouraging regardless of whether they got it right."""
