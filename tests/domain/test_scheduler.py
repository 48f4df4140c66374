"""Tests for due-ness, selection and doubling interval growth."""

import random

import pytest

from swipestudy.domain.constants import MS_PER_DAY
from swipestudy.domain.models import CardStatus, SpacedOutcome, StudyMode
from swipestudy.domain.scheduler import (
    apply_spaced_outcome,
    is_due,
    next_interval,
    select_focused,
    select_for_mode,
    select_random,
)


def test_is_due_boundary(make_card, now):
    card = make_card(next_review=now)
    assert is_due(card, now)
    assert not is_due(card, now - 1)


def test_select_focused_filters_and_sorts(make_card, now):
    mastered = {"status": CardStatus.MASTERED, "mastery_score": 3}
    mastered_later = make_card("m1", next_review=now + 5, **mastered)
    mastered_due = make_card("m2", next_review=now - 10, **mastered)
    learning_later = make_card(
        "l1", status=CardStatus.LEARNING, mastery_score=1, next_review=now + 100
    )
    fresh = make_card("n1", next_review=now - 50)

    result = select_focused([mastered_later, mastered_due, learning_later, fresh], now)

    assert [c.id for c in result] == ["n1", "m2", "l1"]


def test_select_focused_is_stable_on_ties(make_card, now):
    cards = [make_card(f"c{i}", next_review=now) for i in range(5)]
    assert [c.id for c in select_focused(cards, now)] == ["c0", "c1", "c2", "c3", "c4"]


def test_select_random_is_a_permutation(make_card):
    cards = [make_card(f"c{i}") for i in range(20)]
    shuffled = select_random(cards, random.Random(7))

    assert sorted(c.id for c in shuffled) == sorted(c.id for c in cards)
    assert [c.id for c in shuffled] != [c.id for c in cards]
    # Input order untouched
    assert cards[0].id == "c0"


def test_select_random_reaches_every_permutation_of_three(make_card):
    cards = [make_card(x) for x in "abc"]
    rng = random.Random(0)
    seen = {tuple(c.id for c in select_random(cards, rng)) for _ in range(300)}
    assert len(seen) == 6


def test_select_for_mode_scheduled_keeps_order(make_card, now):
    cards = [make_card("b"), make_card("a")]
    assert [c.id for c in select_for_mode(cards, StudyMode.SCHEDULED, now)] == ["b", "a"]


def test_empty_folder_selects_nothing(now):
    assert select_focused([], now) == []
    assert select_random([]) == []


@pytest.mark.parametrize("current, expected", [(0, 1), (1, 2), (4, 8), (16, 32)])
def test_next_interval_doubles(current, expected):
    assert next_interval(current) == expected


def test_first_success_sets_one_day(make_card, now):
    card = make_card(interval=0)
    updated = apply_spaced_outcome(card, SpacedOutcome.MASTERED, now)

    assert updated.interval == 1
    assert updated.status == CardStatus.MASTERED
    assert updated.next_review == now + MS_PER_DAY
    assert updated.mastery_score == 3
    assert updated.last_reviewed_at == now


def test_success_from_four_days_doubles_to_eight(make_card, now):
    card = make_card(interval=4, status=CardStatus.MASTERED, mastery_score=3)
    updated = apply_spaced_outcome(card, SpacedOutcome.MASTERED, now)

    assert updated.interval == 8
    assert updated.next_review == now + 8 * MS_PER_DAY


def test_success_strictly_increases_positive_interval(make_card, now):
    card = make_card(interval=1)
    for _ in range(6):
        before = card.interval
        card = apply_spaced_outcome(card, SpacedOutcome.MASTERED, now)
        assert card.interval > before


def test_needs_review_resets_interval(make_card, now):
    card = make_card(interval=16, status=CardStatus.MASTERED, mastery_score=3)
    updated = apply_spaced_outcome(card, SpacedOutcome.NEEDS_REVIEW, now)

    assert updated.interval == 1
    assert updated.status == CardStatus.LEARNING
    assert updated.next_review == now + MS_PER_DAY
    assert updated.mastery_score == 2
    assert updated.next_review >= updated.last_reviewed_at


def test_spaced_outcome_does_not_mutate_input(make_card, now):
    card = make_card(interval=2)
    apply_spaced_outcome(card, SpacedOutcome.MASTERED, now)
    assert card.interval == 2


def test_swipe_direction_mapping():
    assert SpacedOutcome.from_swipe("left") == SpacedOutcome.MASTERED
    assert SpacedOutcome.from_swipe("RIGHT") == SpacedOutcome.NEEDS_REVIEW
    with pytest.raises(ValueError):
        SpacedOutcome.from_swipe("up")
