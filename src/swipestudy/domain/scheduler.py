"""
Scheduler: due-ness, session selection and interval growth.

Pure functions; the only inputs are the cards and the `now` timestamp
(epoch ms) supplied by the caller. This is a doubling backoff, not SM-2:
there is no ease factor and no lapse counter.
"""

import random
from collections.abc import Iterable, Sequence

from swipestudy.domain.constants import (
    FIRST_INTERVAL_DAYS,
    INTERVAL_GROWTH_FACTOR,
    MASTERY_THRESHOLD,
    MS_PER_DAY,
    RELEARN_INTERVAL_DAYS,
)
from swipestudy.domain.models import Card, CardStatus, SpacedOutcome, StudyMode


def is_due(card: Card, now: int) -> bool:
    return card.next_review <= now


def select_focused(cards: Iterable[Card], now: int) -> list[Card]:
    """
    Keep cards that are not mastered or are due, earliest due first.

    `sorted` is stable, so ties keep their original order.
    """
    pending = [c for c in cards if c.status != CardStatus.MASTERED or is_due(c, now)]
    return sorted(pending, key=lambda c: c.next_review)


def select_random(cards: Iterable[Card], rng: random.Random | None = None) -> list[Card]:
    """Return a shuffled copy (Fisher-Yates via Random.shuffle)."""
    shuffled = list(cards)
    (rng or random).shuffle(shuffled)
    return shuffled


def select_for_mode(
    cards: Sequence[Card],
    mode: StudyMode,
    now: int,
    rng: random.Random | None = None,
) -> list[Card]:
    """Build the one-pass queue for a swipe session."""
    if mode == StudyMode.RANDOM:
        return select_random(cards, rng)
    if mode == StudyMode.FOCUSED:
        return select_focused(cards, now)
    return list(cards)


def next_interval(current: int) -> int:
    if current <= 0:
        return FIRST_INTERVAL_DAYS
    return current * INTERVAL_GROWTH_FACTOR


def apply_spaced_outcome(
    card: Card,
    outcome: SpacedOutcome,
    now: int,
    *,
    threshold: int = MASTERY_THRESHOLD,
) -> Card:
    """
    Reschedule `card` after a swipe.

    MASTERED doubles the interval (0 -> 1 day on the first success).
    NEEDS_REVIEW resets it to one day. The mastery score is moved with the
    status so that `mastered` keeps meaning `mastery_score >= threshold`.
    """
    if outcome == SpacedOutcome.MASTERED:
        interval = next_interval(card.interval)
        return card.evolve(
            status=CardStatus.MASTERED,
            mastery_score=threshold,
            interval=interval,
            next_review=now + interval * MS_PER_DAY,
            last_reviewed_at=now,
        )

    return card.evolve(
        status=CardStatus.LEARNING,
        mastery_score=min(card.mastery_score, threshold - 1),
        interval=RELEARN_INTERVAL_DAYS,
        next_review=now + RELEARN_INTERVAL_DAYS * MS_PER_DAY,
        last_reviewed_at=now,
    )
