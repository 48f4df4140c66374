"""
Ports (interfaces) for the collaborators the study core consumes.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Any

from .models import Card, GradeResult, Question, QuestionType


class CardGenerator(ABC):
    """
    Port for creating cards and questions from user material.

    Implementations:
        - NotesCardGenerator: Parses markdown notes offline.
        - Any AI-backed generator living outside this package.
    """

    @abstractmethod
    async def generate_from_image(self, image: bytes, folder_id: str) -> list[Card]:
        """
        Extract cards from a photo of notes.

        Raises:
            GenerationError: If nothing could be produced.
        """
        pass

    @abstractmethod
    async def generate_from_text(self, text: str, folder_id: str) -> list[Card]:
        """
        Extract cards from plain text or markdown.

        Raises:
            GenerationError: If nothing could be produced.
        """
        pass

    @abstractmethod
    async def generate_questions(
        self, cards: list[Card], allowed_types: list[QuestionType], count: int
    ) -> list[Question]:
        """
        Build at most `count` questions, each bound to exactly one card via `card_id`.

        Raises:
            GenerationError: If questions could not be generated.
        """
        pass


class AnswerGrader(ABC):
    """Port for judging a learner's answer."""

    @abstractmethod
    async def evaluate(
        self, question: str, reference_answer: str, user_answer: str
    ) -> GradeResult:
        """
        Judge `user_answer` against `reference_answer`.

        Raises:
            GradingError: On transport or model failure. No partial results.
        """
        pass


class KeyValueStore(ABC):
    """
    Port for opaque persistence of whole collections.

    Last write wins; no other atomicity is assumed.
    """

    @abstractmethod
    def read(self, key: str) -> Any | None:
        pass

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        pass
