"""Terminal grader: the learner judges their own written answer."""

import logging

import typer

from swipestudy.domain.interfaces import AnswerGrader
from swipestudy.domain.models import GradeResult
from swipestudy.infrastructure.utils.text import normalize_answer

logger = logging.getLogger(__name__)


class SelfAssessedGrader(AnswerGrader):
    """
    Accepts exact matches outright; otherwise shows the reference answer
    and asks the learner whether they got it right.
    """

    async def evaluate(
        self, question: str, reference_answer: str, user_answer: str
    ) -> GradeResult:
        if normalize_answer(user_answer) == normalize_answer(reference_answer):
            return GradeResult(is_correct=True, feedback="Exact match!")

        typer.echo(f"Reference: {reference_answer}")
        try:
            ok = typer.confirm("Did you get it right?", default=False)
        except typer.Abort as e:
            raise EOFError("No verdict given") from e

        if ok:
            return GradeResult(is_correct=True, feedback="Marked correct.")
        return GradeResult(is_correct=False, feedback="Marked for another try.")
