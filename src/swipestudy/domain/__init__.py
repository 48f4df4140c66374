# Domain Package
from .errors import (
    CardStoreError,
    GenerationError,
    GradingError,
    SessionStateError,
    SwipeStudyError,
)
from .models import (
    Card,
    CardStatus,
    Folder,
    GradeResult,
    Question,
    QuestionType,
    SpacedOutcome,
    StudyMode,
)

__all__ = [
    "Card",
    "CardStatus",
    "Folder",
    "GradeResult",
    "Question",
    "QuestionType",
    "SpacedOutcome",
    "StudyMode",
    "SwipeStudyError",
    "GenerationError",
    "GradingError",
    "SessionStateError",
    "CardStoreError",
]
