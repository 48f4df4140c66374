"""
Learn/test sessions: graded rounds that retry until every item is mastered.

Each round is an explicit FIFO of card ids. A wrong answer pushes the id
back onto the end of the same FIFO, so it is retried before the round
closes. The round boundary is the moment that FIFO runs dry. At the
boundary every item still below the mastery threshold starts the next
round; when none is left the session is FINISHED and all touched cards are
merged into the store in one call.

Grading is asynchronous and single-in-flight: the session refuses a second
submission or an advance until the outstanding verdict has arrived.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from swipestudy.application.card_store import CardStore
from swipestudy.domain.constants import DEFAULT_ITEM_COUNT, MASTERY_THRESHOLD
from swipestudy.domain.errors import GradingError, SessionStateError
from swipestudy.domain.interfaces import AnswerGrader
from swipestudy.domain.mastery import apply_graded_outcome, is_mastered
from swipestudy.domain.models import Card, GradeResult, Question, now_ms

from .base import TERMINAL_STATES, Clock, SessionState, SessionSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionItem:
    """One entry of a learn session; a generated question replaces the card's own prompt."""

    card_id: str
    prompt: str
    reference_answer: str
    question: Question | None = None


class LearnSession:
    def __init__(
        self,
        cards: Sequence[Card],
        grader: AnswerGrader,
        store: CardStore,
        *,
        item_count: int = DEFAULT_ITEM_COUNT,
        questions: Sequence[Question] | None = None,
        threshold: int = MASTERY_THRESHOLD,
        clock: Clock = now_ms,
        grading_timeout: float | None = None,
    ):
        self.grader = grader
        self.store = store
        self.item_count = max(item_count, 0)
        self.threshold = threshold
        self.grading_timeout = grading_timeout
        self._clock = clock
        self._source = list(cards)
        self._questions = {q.card_id: q for q in (questions or [])}

        self._items: dict[str, SessionItem] = {}
        self._cards: dict[str, Card] = {}  # Working copies, by id
        self._order: list[str] = []  # Session item order, stable across rounds
        self._round_queue: deque[str] = deque()
        self._remaining: list[str] = []
        self._mastered: dict[str, Card] = {}

        self._feedback: GradeResult | None = None
        self._grading = False
        self._written_back = 0

        self.state = SessionState.SETUP
        self.round = 0
        self.attempts = 0
        self.correct = 0

    @classmethod
    def for_folder(
        cls, store: CardStore, folder_id: str, grader: AnswerGrader, **kwargs
    ) -> "LearnSession":
        return cls(store.get_by_folder(folder_id), grader, store, **kwargs)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current_item(self) -> SessionItem | None:
        if self.state != SessionState.IN_ROUND or not self._round_queue:
            return None
        return self._items[self._round_queue[0]]

    @property
    def current_card(self) -> Card | None:
        item = self.current_item
        return self._cards[item.card_id] if item else None

    @property
    def feedback(self) -> GradeResult | None:
        """Verdict for the current item, set between submit() and advance()."""
        return self._feedback

    @property
    def grading(self) -> bool:
        return self._grading

    @property
    def remaining(self) -> list[Card]:
        """Cards carried into the next round (ROUND_COMPLETE only)."""
        return [self._cards[cid] for cid in self._remaining]

    @property
    def items(self) -> list[SessionItem]:
        return [self._items[cid] for cid in self._order]

    @property
    def queue_length(self) -> int:
        return len(self._round_queue)

    def card(self, card_id: str) -> Card:
        return self._cards[card_id]

    def summary(self) -> SessionSummary:
        return SessionSummary(
            state=self.state,
            rounds=self.round,
            attempts=self.attempts,
            correct=self.correct,
            cards=[self._cards[cid] for cid in self._order]
            if self.state != SessionState.ABANDONED
            else [],
            mastered_ids=list(self._mastered),
            written_back=self._written_back,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> SessionState:
        """Pick the candidates (below threshold, capped at item_count) and open round 1."""
        if self.state != SessionState.SETUP:
            raise SessionStateError(f"Cannot start a session in state '{self.state.value}'")

        candidates = [c for c in self._source if c.mastery_score < self.threshold]
        candidates = candidates[: self.item_count]

        for card in candidates:
            question = self._questions.get(card.id)
            self._items[card.id] = SessionItem(
                card_id=card.id,
                prompt=question.prompt if question else card.front,
                reference_answer=question.answer if question else card.back,
                question=question,
            )
            self._cards[card.id] = card
            self._order.append(card.id)

        if not self._order:
            logger.info("[learn] Nothing to learn")
            self.state = SessionState.FINISHED
            return self.state

        self._open_round(self._order)
        return self.state

    async def submit(self, answer: str) -> GradeResult:
        """
        Grade `answer` for the current item and apply the outcome.

        Raises:
            GradingError: The grader failed or timed out. Nothing changed;
                the same item can be resubmitted.
            SessionStateError: Not in a round, a verdict is already pending,
                or another grading call is in flight.
        """
        if self.state != SessionState.IN_ROUND:
            raise SessionStateError(f"Cannot answer in state '{self.state.value}'")
        if self._grading:
            raise SessionStateError("A grading call is already in flight")
        if self._feedback is not None:
            raise SessionStateError("Current item already graded; advance first")
        if not answer.strip():
            raise ValueError("Answer must not be empty")

        item = self.current_item
        if item is None:
            raise SessionStateError("No item to answer in the current round")

        self._grading = True
        try:
            result = await self._evaluate(item, answer)
        finally:
            self._grading = False

        if self.state != SessionState.IN_ROUND:
            raise SessionStateError(f"Session {self.state.value} while grading")

        updated = apply_graded_outcome(
            self._cards[item.card_id],
            result.is_correct,
            threshold=self.threshold,
            now=self._clock(),
        )
        self._cards[item.card_id] = updated
        self.attempts += 1
        if result.is_correct:
            self.correct += 1
            if is_mastered(updated, self.threshold):
                self._mastered[item.card_id] = updated
        self._feedback = result
        return result

    def advance(self) -> SessionState:
        """
        Move past the graded item.

        A wrong answer requeues the item at the end of the current round.
        When the round FIFO is empty the round closes.
        """
        if self.state != SessionState.IN_ROUND:
            raise SessionStateError(f"Cannot advance in state '{self.state.value}'")
        if self._feedback is None:
            raise SessionStateError("Submit an answer before advancing")

        card_id = self._round_queue.popleft()
        if not self._feedback.is_correct:
            self._round_queue.append(card_id)

        if not self._round_queue:
            try:
                self._close_round()
            except Exception:
                # Merge not saved: stay on the graded item so advance() can be retried
                self._round_queue.appendleft(card_id)
                raise
        self._feedback = None
        return self.state

    def next_round(self) -> SessionState:
        if self.state != SessionState.ROUND_COMPLETE:
            raise SessionStateError(f"No round to start in state '{self.state.value}'")
        self._open_round(self._remaining)
        return self.state

    def abandon(self) -> None:
        """Stop without writing anything back."""
        if self.state in TERMINAL_STATES:
            raise SessionStateError(f"Session already {self.state.value}")
        logger.info(
            f"[learn] Session abandoned in round {self.round} after {self.attempts} answers"
        )
        self._round_queue.clear()
        self._feedback = None
        self.state = SessionState.ABANDONED

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _open_round(self, card_ids: list[str]) -> None:
        self._round_queue = deque(card_ids)
        self._remaining = []
        self.round += 1
        self.state = SessionState.IN_ROUND
        logger.debug(f"[learn] Round {self.round} started with {len(card_ids)} items")

    def _close_round(self) -> None:
        remaining = [cid for cid in self._order if self._cards[cid].mastery_score < self.threshold]
        if remaining:
            self._remaining = remaining
            self.state = SessionState.ROUND_COMPLETE
            logger.debug(f"[learn] Round {self.round} complete, {len(remaining)} items remain")
            return

        self._written_back = self.store.upsert_many(self._cards[cid] for cid in self._order)
        self.state = SessionState.FINISHED
        logger.info(
            f"[learn] Session finished after {self.round} rounds: "
            f"{len(self._mastered)} mastered, {self.correct}/{self.attempts} correct"
        )

    async def _evaluate(self, item: SessionItem, answer: str) -> GradeResult:
        try:
            call = self.grader.evaluate(item.prompt, item.reference_answer, answer)
            if self.grading_timeout is not None:
                return await asyncio.wait_for(call, timeout=self.grading_timeout)
            return await call
        except GradingError:
            raise
        except asyncio.TimeoutError as e:
            logger.warning(f"[learn] Grading timed out for {item.card_id}")
            raise GradingError(f"Grading timed out after {self.grading_timeout}s") from e
        except Exception as e:
            logger.error(f"[learn] Grading failed for {item.card_id}: {e}")
            raise GradingError(str(e)) from e


AnswerSource = Callable[[SessionItem, Card], Awaitable[str]]


async def run_learn_session(session: LearnSession, answer_source: AnswerSource) -> SessionSummary:
    """
    Drive `session` to a terminal state, asking `answer_source` for every answer.

    GradingError propagates with the session intact, so calling this again
    resubmits the same item.
    """
    if session.state == SessionState.SETUP:
        session.start()

    while session.state not in TERMINAL_STATES:
        if session.state == SessionState.ROUND_COMPLETE:
            session.next_round()
            continue

        if session.feedback is None:
            item = session.current_item
            if item is None:
                raise SessionStateError("No item to answer in the current round")
            answer = await answer_source(item, session.card(item.card_id))
            await session.submit(answer)
        session.advance()

    return session.summary()
