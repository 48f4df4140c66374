"""
Domain models for cards, folders and study questions.

These are pure data structures with no I/O or external dependencies.
Timestamps are epoch milliseconds throughout.
"""

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from swipestudy.domain.constants import DEFAULT_FOLDER_COLOR


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


class CardStatus(str, Enum):
    """Learning status of a card. Derived from the mastery score, never trusted on its own."""

    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"


class SpacedOutcome(str, Enum):
    """Binary outcome of a swipe review."""

    MASTERED = "mastered"
    NEEDS_REVIEW = "needs_review"

    @classmethod
    def from_swipe(cls, direction: str) -> "SpacedOutcome":
        """Map a swipe direction (left = known, right = struggle) to an outcome."""
        d = direction.strip().lower()
        if d == "left":
            return cls.MASTERED
        if d == "right":
            return cls.NEEDS_REVIEW
        raise ValueError(f"Unknown swipe direction: {direction!r}")


class StudyMode(str, Enum):
    """Ordering policy for a one-pass swipe session."""

    SCHEDULED = "scheduled"  # Cards as stored
    RANDOM = "random"  # Full shuffle
    FOCUSED = "focused"  # Due / non-mastered only, earliest first


class QuestionType(str, Enum):
    WRITTEN = "written"
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"


@dataclass(frozen=True)
class Card:
    """
    A unit of knowledge.

    Attributes:
        id: Unique, immutable identity.
        folder_id: Owning folder (weak reference).
        front: Prompt side, opaque text.
        back: Answer side, opaque text.
        status: Derived from mastery_score (see domain.mastery.derive_status).
        mastery_score: 0..3, where 3 means mastered.
        interval: Current spacing in days (swipe modes only).
        next_review: Due time (epoch ms).
        last_attempt_correct: Outcome of the latest graded attempt.
        last_reviewed_at: Epoch ms of the latest outcome, None if never reviewed.
        created_at: Epoch ms when the card was generated.
    """

    id: str
    folder_id: str
    front: str
    back: str
    status: CardStatus = CardStatus.NEW
    mastery_score: int = 0
    interval: int = 0
    next_review: int = 0
    last_attempt_correct: bool | None = None
    last_reviewed_at: int | None = None
    created_at: int = 0

    @property
    def attempted(self) -> bool:
        return self.last_reviewed_at is not None or self.last_attempt_correct is not None

    def evolve(self, **changes: Any) -> "Card":
        """Return a copy with *changes* applied."""
        return replace(self, **changes)

    def to_record(self) -> dict[str, Any]:
        """Serialise into the camelCase record used by persistence."""
        return {
            "id": self.id,
            "folderId": self.folder_id,
            "front": self.front,
            "back": self.back,
            "status": self.status.value,
            "masteryScore": self.mastery_score,
            "interval": self.interval,
            "nextReview": self.next_review,
            "lastAttemptCorrect": self.last_attempt_correct,
            "lastReviewedAt": self.last_reviewed_at,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class Folder:
    """Pure grouping of cards. Only its id matters to scheduling."""

    id: str
    name: str
    color: str = DEFAULT_FOLDER_COLOR
    created_at: int = 0

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Folder":
        return cls(
            id=str(record["id"]),
            name=str(record.get("name") or record["id"]),
            color=str(record.get("color") or DEFAULT_FOLDER_COLOR),
            created_at=int(record.get("createdAt") or 0),
        )


@dataclass(frozen=True)
class Question:
    """
    A generated quiz question bound 1:1 to a card.

    For multiple-choice questions `options` holds the choices and `answer`
    is one of them. True/false questions use "true"/"false" as the answer.
    """

    id: str
    card_id: str
    type: QuestionType
    prompt: str
    answer: str
    options: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GradeResult:
    """Verdict returned by a grader."""

    is_correct: bool
    feedback: str = ""
