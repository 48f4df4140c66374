"""
Mastery model: per-card score and the status derived from it.

A card needs `threshold` net correct answers to be mastered. Every wrong
answer takes one point back, so a lapsing learner can cycle indefinitely.
"""

from swipestudy.domain.constants import MASTERY_THRESHOLD, MIN_MASTERY_SCORE
from swipestudy.domain.models import Card, CardStatus


def clamp_score(score: int, threshold: int = MASTERY_THRESHOLD) -> int:
    return max(MIN_MASTERY_SCORE, min(threshold, score))


def derive_status(
    mastery_score: int, attempted: bool, threshold: int = MASTERY_THRESHOLD
) -> CardStatus:
    """
    Compute the status for a score.

    Score 0 is `new` only for cards that were never attempted; a card demoted
    back to 0 stays `learning`.
    """
    if mastery_score >= threshold:
        return CardStatus.MASTERED
    if mastery_score > MIN_MASTERY_SCORE or attempted:
        return CardStatus.LEARNING
    return CardStatus.NEW


def is_mastered(card: Card, threshold: int = MASTERY_THRESHOLD) -> bool:
    return card.mastery_score >= threshold


def apply_graded_outcome(
    card: Card,
    is_correct: bool,
    *,
    threshold: int = MASTERY_THRESHOLD,
    now: int | None = None,
) -> Card:
    """
    Promote or demote `card` by one point.

    Returns a new Card; the input is left untouched.
    """
    delta = 1 if is_correct else -1
    score = clamp_score(card.mastery_score + delta, threshold)
    return card.evolve(
        mastery_score=score,
        last_attempt_correct=is_correct,
        last_reviewed_at=now if now is not None else card.last_reviewed_at,
        status=derive_status(score, attempted=True, threshold=threshold),
    )
