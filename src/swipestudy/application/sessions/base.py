"""Shared session state machine pieces."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from swipestudy.domain.models import Card

Clock = Callable[[], int]


class SessionState(str, Enum):
    SETUP = "setup"
    IN_ROUND = "in_round"
    ROUND_COMPLETE = "round_complete"
    FINISHED = "finished"
    ABANDONED = "abandoned"


TERMINAL_STATES = {SessionState.FINISHED, SessionState.ABANDONED}


@dataclass
class SessionSummary:
    """What a session did, reported once it stops."""

    state: SessionState
    rounds: int = 0
    attempts: int = 0
    correct: int = 0
    cards: list[Card] = field(default_factory=list)  # Final state of every touched card
    mastered_ids: list[str] = field(default_factory=list)
    written_back: int = 0  # Cards that changed in the store

    @property
    def nothing_to_review(self) -> bool:
        return self.state == SessionState.FINISHED and self.attempts == 0
