import copy
import random

import pytest

from swipestudy.application.card_store import CardStore
from swipestudy.application.sessions import SessionState, SwipeSession
from swipestudy.domain.constants import MS_PER_DAY
from swipestudy.domain.errors import SessionStateError
from swipestudy.domain.models import CardStatus, SpacedOutcome, StudyMode


@pytest.fixture
def seeded(store, make_card):
    store.add_many(
        [
            make_card("a", interval=0),
            make_card("b", interval=4, status=CardStatus.MASTERED, mastery_score=3),
            make_card("c", interval=2, status=CardStatus.LEARNING, mastery_score=1),
        ]
    )
    return store


@pytest.mark.parametrize("mode", list(StudyMode))
def test_empty_folder_finishes_without_writes(store, backend, clock, mode):
    session = SwipeSession.for_folder(store, "f1", mode, clock=clock)

    assert session.start() == SessionState.FINISHED
    assert session.current is None
    summary = session.summary()
    assert summary.nothing_to_review
    assert summary.written_back == 0
    assert backend.writes == 0


def test_first_mastered_swipe_schedules_one_day(store, clock, make_card, now):
    store.add_many([make_card("a", interval=0)])
    session = SwipeSession.for_folder(store, "f1", StudyMode.SCHEDULED, clock=clock)
    session.start()

    session.swipe(SpacedOutcome.MASTERED)

    assert session.state == SessionState.FINISHED
    card = store.get("a")
    assert card.interval == 1
    assert card.status == CardStatus.MASTERED
    assert card.next_review == now + MS_PER_DAY


def test_mastered_swipe_doubles_interval(store, clock, make_card):
    store.add_many([make_card("a", interval=4)])
    session = SwipeSession.for_folder(store, "f1", clock=clock)
    session.start()
    session.swipe("mastered")

    assert store.get("a").interval == 8


def test_every_card_answered_once(seeded, clock):
    session = SwipeSession.for_folder(seeded, "f1", clock=clock)
    session.start()
    seen = []
    while session.state == SessionState.IN_ROUND:
        seen.append(session.current.id)
        session.swipe(SpacedOutcome.NEEDS_REVIEW)

    assert seen == ["a", "b", "c"]
    for card in seeded.all():
        assert card.interval == 1
        assert card.status == CardStatus.LEARNING
    assert session.summary().written_back == 3


def test_store_untouched_until_finished(seeded, backend, clock):
    session = SwipeSession.for_folder(seeded, "f1", clock=clock)
    session.start()
    writes = backend.writes

    session.swipe(SpacedOutcome.MASTERED)
    session.swipe(SpacedOutcome.MASTERED)
    assert backend.writes == writes
    assert seeded.get("a").interval == 0

    session.swipe(SpacedOutcome.MASTERED)
    assert backend.writes > writes


def test_abandon_leaves_store_identical(seeded, backend, clock):
    before = copy.deepcopy(backend.data)
    writes = backend.writes
    session = SwipeSession.for_folder(seeded, "f1", clock=clock)
    session.start()
    session.swipe(SpacedOutcome.MASTERED)
    session.swipe(SpacedOutcome.NEEDS_REVIEW)

    session.abandon()

    assert session.state == SessionState.ABANDONED
    assert backend.data == before
    assert backend.writes == writes
    assert session.summary().cards == []
    with pytest.raises(SessionStateError):
        session.swipe(SpacedOutcome.MASTERED)
    with pytest.raises(SessionStateError):
        session.abandon()


def test_focused_mode_skips_mastered_not_due(store, clock, make_card, now):
    store.add_many(
        [
            make_card("later", status=CardStatus.MASTERED, mastery_score=3, next_review=now + 10),
            make_card("due", status=CardStatus.LEARNING, mastery_score=1, next_review=now - 10),
            make_card("fresh", next_review=now - 20),
        ]
    )
    session = SwipeSession.for_folder(store, "f1", StudyMode.FOCUSED, clock=clock)
    session.start()

    assert [c.id for c in session.queue] == ["fresh", "due"]


def test_random_mode_uses_rng(seeded, clock):
    first = SwipeSession.for_folder(
        seeded, "f1", StudyMode.RANDOM, clock=clock, rng=random.Random(3)
    )
    second = SwipeSession.for_folder(
        seeded, "f1", StudyMode.RANDOM, clock=clock, rng=random.Random(3)
    )
    first.start()
    second.start()

    assert [c.id for c in first.queue] == [c.id for c in second.queue]
    assert sorted(c.id for c in first.queue) == ["a", "b", "c"]


def test_cannot_start_twice(seeded, clock):
    session = SwipeSession.for_folder(seeded, "f1", clock=clock)
    session.start()
    with pytest.raises(SessionStateError):
        session.start()


def test_other_folders_untouched(clock, make_card):
    store = CardStore()
    other = store.add_folder("Other")
    store.add_many([make_card("a"), make_card("x", folder_id=other.id)])
    session = SwipeSession.for_folder(store, "f1", clock=clock)
    session.start()
    session.swipe(SpacedOutcome.MASTERED)

    assert store.get("x") == make_card("x", folder_id=other.id)


def test_position_reports_progress(seeded, clock):
    session = SwipeSession.for_folder(seeded, "f1", clock=clock)
    session.start()
    assert session.position == (1, 3)
    session.swipe(SpacedOutcome.MASTERED)
    assert session.position == (2, 3)


def test_failed_save_keeps_last_swipe_retryable(flaky_backend, clock, make_card):
    store = CardStore(flaky_backend)
    store.add_many([make_card("a"), make_card("b")])
    session = SwipeSession.for_folder(store, "f1", clock=clock)
    session.start()
    session.swipe(SpacedOutcome.MASTERED)
    flaky_backend.failing = True

    with pytest.raises(OSError):
        session.swipe(SpacedOutcome.NEEDS_REVIEW)

    assert session.state == SessionState.IN_ROUND
    assert session.current.id == "b"
    assert store.get("a") == make_card("a")

    flaky_backend.failing = False
    session.swipe(SpacedOutcome.NEEDS_REVIEW)

    assert session.state == SessionState.FINISHED
    assert store.get("a").status == CardStatus.MASTERED
    assert store.get("b").interval == 1


def test_abandon_after_failed_save_writes_nothing(flaky_backend, clock, make_card):
    store = CardStore(flaky_backend)
    store.add_many([make_card("a")])
    session = SwipeSession.for_folder(store, "f1", clock=clock)
    session.start()
    flaky_backend.failing = True
    with pytest.raises(OSError):
        session.swipe(SpacedOutcome.MASTERED)

    session.abandon()
    flaky_backend.failing = False
    store.add_folder("Later")

    assert flaky_backend.data["cards"][0]["status"] == "new"
