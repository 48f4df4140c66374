"""
Exact-match grader.

Compares normalized text only; it does not judge free-text meaning. Used for
multiple-choice and true/false questions and as an offline fallback.
"""

import logging

from swipestudy.domain.interfaces import AnswerGrader
from swipestudy.domain.models import GradeResult
from swipestudy.infrastructure.utils.text import normalize_answer

logger = logging.getLogger(__name__)

_TRUE_WORDS = {"true", "t", "yes", "y"}
_FALSE_WORDS = {"false", "f", "no", "n"}


def _canonical(text: str) -> str:
    norm = normalize_answer(text)
    if norm in _TRUE_WORDS:
        return "true"
    if norm in _FALSE_WORDS:
        return "false"
    return norm


class ExactMatchGrader(AnswerGrader):
    async def evaluate(
        self, question: str, reference_answer: str, user_answer: str
    ) -> GradeResult:
        is_correct = _canonical(user_answer) == _canonical(reference_answer)
        logger.debug(f"[grade] exact match={is_correct} for '{question[:40]}'")
        if is_correct:
            return GradeResult(is_correct=True, feedback="Correct!")
        return GradeResult(is_correct=False, feedback=f"Expected: {reference_answer}")
