"""
Folder statistics for the dashboard.

This is a pure computation module with no I/O.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from swipestudy.domain.constants import MASTERY_THRESHOLD
from swipestudy.domain.models import Card, Folder
from swipestudy.domain.scheduler import is_due


@dataclass
class FolderStats:
    folder_id: str
    name: str
    total: int
    due: int
    mastered: int
    learning: int
    new: int

    @property
    def progress_percent(self) -> int:
        """Share of mastered cards, rounded to a whole percent (0 for an empty folder)."""
        if not self.total:
            return 0
        return round(self.mastered / self.total * 100)


class FolderStatsCalculator:
    """
    Counts cards per folder.

    Stateless and side-effect free.
    """

    def __init__(self, threshold: int = MASTERY_THRESHOLD):
        self.threshold = threshold

    def for_folder(self, folder: Folder, cards: Iterable[Card], now: int) -> FolderStats:
        folder_cards = [c for c in cards if c.folder_id == folder.id]
        mastered = sum(1 for c in folder_cards if c.mastery_score >= self.threshold)
        new = sum(1 for c in folder_cards if c.mastery_score == 0 and not c.attempted)
        return FolderStats(
            folder_id=folder.id,
            name=folder.name,
            total=len(folder_cards),
            due=sum(1 for c in folder_cards if is_due(c, now)),
            mastered=mastered,
            learning=len(folder_cards) - mastered - new,
            new=new,
        )

    def overall(self, cards: Iterable[Card]) -> tuple[int, int, int]:
        """
        Returns:
            (mastered, total, progress_percent) across every folder.
        """
        cards = list(cards)
        mastered = sum(1 for c in cards if c.mastery_score >= self.threshold)
        percent = round(mastered / len(cards) * 100) if cards else 0
        return mastered, len(cards), percent
