"""
One-pass swipe sessions (scheduled, random and focused modes).

Every card in the queue is answered exactly once with a SpacedOutcome.
There is no requeueing; the session finishes when the index runs past the
end of the queue and then merges all touched cards into the store at once.
"""

import logging
import random
from collections.abc import Sequence

from swipestudy.application.card_store import CardStore
from swipestudy.domain.constants import MASTERY_THRESHOLD
from swipestudy.domain.errors import SessionStateError
from swipestudy.domain.models import Card, SpacedOutcome, StudyMode, now_ms
from swipestudy.domain.scheduler import apply_spaced_outcome, select_for_mode

from .base import TERMINAL_STATES, Clock, SessionState, SessionSummary

logger = logging.getLogger(__name__)


class SwipeSession:
    def __init__(
        self,
        cards: Sequence[Card],
        store: CardStore,
        mode: StudyMode = StudyMode.SCHEDULED,
        *,
        clock: Clock = now_ms,
        rng: random.Random | None = None,
        threshold: int = MASTERY_THRESHOLD,
    ):
        self.store = store
        self.mode = StudyMode(mode)
        self.threshold = threshold
        self._clock = clock
        self._rng = rng
        self._source = list(cards)
        self._queue: list[Card] = []
        self._index = 0
        self._touched: dict[str, Card] = {}
        self._written_back = 0
        self.state = SessionState.SETUP

    @classmethod
    def for_folder(
        cls, store: CardStore, folder_id: str, mode: StudyMode = StudyMode.SCHEDULED, **kwargs
    ) -> "SwipeSession":
        return cls(store.get_by_folder(folder_id), store, mode, **kwargs)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current(self) -> Card | None:
        if self.state != SessionState.IN_ROUND:
            return None
        return self._queue[self._index]

    @property
    def position(self) -> tuple[int, int]:
        """(1-based index of the current card, queue length)."""
        return min(self._index + 1, len(self._queue)), len(self._queue)

    @property
    def queue(self) -> list[Card]:
        return list(self._queue)

    def summary(self) -> SessionSummary:
        touched = list(self._touched.values())
        return SessionSummary(
            state=self.state,
            rounds=1 if self._queue else 0,
            attempts=len(touched),
            correct=sum(1 for c in touched if c.mastery_score >= self.threshold),
            cards=touched,
            mastered_ids=[c.id for c in touched if c.mastery_score >= self.threshold],
            written_back=self._written_back,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> SessionState:
        if self.state != SessionState.SETUP:
            raise SessionStateError(f"Cannot start a session in state '{self.state.value}'")

        self._queue = select_for_mode(self._source, self.mode, self._clock(), self._rng)
        self._index = 0

        if not self._queue:
            logger.info(f"[{self.mode.value}] Nothing to review")
            self.state = SessionState.FINISHED
        else:
            logger.debug(f"[{self.mode.value}] Session started with {len(self._queue)} cards")
            self.state = SessionState.IN_ROUND
        return self.state

    def swipe(self, outcome: SpacedOutcome | str) -> Card:
        """
        Apply `outcome` to the current card and move on.

        The last swipe merges every touched card into the store. If that
        save fails the session stays on the last card and the swipe can be
        retried.
        """
        if self.state != SessionState.IN_ROUND:
            raise SessionStateError(f"Cannot answer in state '{self.state.value}'")

        outcome = SpacedOutcome(outcome)
        card = self._queue[self._index]
        updated = apply_spaced_outcome(card, outcome, self._clock(), threshold=self.threshold)
        touched = {**self._touched, updated.id: updated}

        if self._index + 1 >= len(self._queue):
            self._finish(touched)

        self._queue[self._index] = updated
        self._touched = touched
        self._index += 1
        return updated

    def abandon(self) -> None:
        """Stop without writing anything back."""
        if self.state in TERMINAL_STATES:
            raise SessionStateError(f"Session already {self.state.value}")
        logger.info(f"[{self.mode.value}] Session abandoned; {len(self._touched)} answers dropped")
        self._touched.clear()
        self.state = SessionState.ABANDONED

    def _finish(self, touched: dict[str, Card]) -> None:
        self._written_back = self.store.upsert_many(touched.values())
        self.state = SessionState.FINISHED
        logger.info(
            f"[{self.mode.value}] Session finished: {len(touched)} reviewed, "
            f"{self._written_back} updated"
        )
