"""Tests for the mastery score model."""

import pytest

from swipestudy.domain.mastery import apply_graded_outcome, derive_status, is_mastered
from swipestudy.domain.models import CardStatus


def test_repeated_incorrect_never_goes_negative(make_card):
    card = make_card()
    for _ in range(10):
        card = apply_graded_outcome(card, False)
        assert card.mastery_score == 0
    assert card.status == CardStatus.LEARNING
    assert card.last_attempt_correct is False


def test_repeated_correct_caps_at_three(make_card):
    card = make_card()
    scores = []
    for _ in range(6):
        card = apply_graded_outcome(card, True)
        scores.append(card.mastery_score)
    assert scores == [1, 2, 3, 3, 3, 3]
    assert card.status == CardStatus.MASTERED
    assert is_mastered(card)


@pytest.mark.parametrize(
    "outcomes",
    [
        [True, False, True, True, False, False, False, True],
        [False] * 3 + [True] * 7,
        [True, True, True, False, True],
    ],
)
def test_score_stays_in_bounds(outcomes, make_card):
    card = make_card()
    for ok in outcomes:
        card = apply_graded_outcome(card, ok)
        assert 0 <= card.mastery_score <= 3
        assert (card.status == CardStatus.MASTERED) == (card.mastery_score >= 3)


def test_mastery_needs_three_net_correct(make_card):
    card = make_card()
    card = apply_graded_outcome(card, True)
    card = apply_graded_outcome(card, False)
    card = apply_graded_outcome(card, True)
    card = apply_graded_outcome(card, True)
    assert card.mastery_score == 2
    assert not is_mastered(card)


def test_demotion_to_zero_stays_learning(make_card):
    card = make_card(mastery_score=1, status=CardStatus.LEARNING)
    card = apply_graded_outcome(card, False)
    assert card.mastery_score == 0
    assert card.status == CardStatus.LEARNING


def test_custom_threshold(make_card):
    card = apply_graded_outcome(make_card(), True, threshold=1)
    assert card.mastery_score == 1
    assert card.status == CardStatus.MASTERED


def test_derive_status():
    assert derive_status(0, attempted=False) == CardStatus.NEW
    assert derive_status(0, attempted=True) == CardStatus.LEARNING
    assert derive_status(2, attempted=False) == CardStatus.LEARNING
    assert derive_status(3, attempted=True) == CardStatus.MASTERED


def test_now_is_recorded(make_card):
    card = apply_graded_outcome(make_card(), True, now=42)
    assert card.last_reviewed_at == 42
