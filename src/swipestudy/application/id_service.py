"""Service for minting stable ids for cards, folders and questions."""

import logging
from collections.abc import Iterable

from ulid import ULID

from swipestudy.domain.models import Card, now_ms

logger = logging.getLogger(__name__)


def generate_card_id() -> str:
    """Generate a stable card ID using ULID."""
    return f"card_{ULID()}"


def generate_folder_id() -> str:
    return f"folder_{ULID()}"


def generate_question_id() -> str:
    return f"q_{ULID()}"


def stamp_new_cards(cards: Iterable[Card], folder_id: str, now: int | None = None) -> list[Card]:
    """
    Give generated cards fresh ids and scheduling defaults.

    Every card lands in `folder_id` as `new`, score 0, interval 0 and due now,
    whatever the generator put in those fields.
    """
    created = now if now is not None else now_ms()
    stamped = [
        Card(
            id=generate_card_id(),
            folder_id=folder_id,
            front=card.front.strip(),
            back=card.back.strip(),
            next_review=created,
            created_at=created,
        )
        for card in cards
    ]
    logger.debug(f"Stamped {len(stamped)} new cards for folder {folder_id}")
    return stamped
