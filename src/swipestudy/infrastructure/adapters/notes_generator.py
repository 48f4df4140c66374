"""
Offline card generator for markdown notes.

Cards come from a `cards:` list in the YAML frontmatter and from `Q:/A:`
or `term :: definition` lines in the body. Questions are built locally:
written questions reuse the card, multiple-choice and true/false questions
borrow distractors from the other cards in the batch.
"""

import logging
import random

from swipestudy.application.id_service import generate_question_id
from swipestudy.domain.errors import GenerationError
from swipestudy.domain.interfaces import CardGenerator
from swipestudy.domain.models import Card, Question, QuestionType
from swipestudy.infrastructure.utils.text import (
    extract_body_pairs,
    parse_frontmatter,
    scrub_internal_keys,
)

logger = logging.getLogger(__name__)

MAX_CHOICES = 4


class NotesCardGenerator(CardGenerator):
    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    async def generate_from_image(self, image: bytes, folder_id: str) -> list[Card]:
        raise GenerationError("Image import needs an AI generator; use a text or markdown file")

    async def generate_from_text(self, text: str, folder_id: str) -> list[Card]:
        meta, body = parse_frontmatter(text)
        if "__yaml_error__" in meta:
            raise GenerationError(f"Bad frontmatter: {meta['__yaml_error__']}")

        pairs: list[tuple[str, str]] = []
        raw_cards = scrub_internal_keys(meta).get("cards", [])
        if not isinstance(raw_cards, list):
            raise GenerationError("Frontmatter 'cards' must be a list")

        for i, entry in enumerate(raw_cards, start=1):
            if not isinstance(entry, dict):
                logger.warning(f"Skipping frontmatter card #{i}: not a mapping")
                continue
            front = str(entry.get("front") or "").strip()
            back = str(entry.get("back") or "").strip()
            if not front or not back:
                logger.warning(f"Skipping frontmatter card #{i}: missing front or back")
                continue
            pairs.append((front, back))

        pairs.extend(extract_body_pairs(body))

        if not pairs:
            raise GenerationError("No cards found in the text")

        logger.debug(f"Parsed {len(pairs)} cards for folder {folder_id}")
        return [
            Card(id=f"draft-{i}", folder_id=folder_id, front=front, back=back)
            for i, (front, back) in enumerate(pairs)
        ]

    async def generate_questions(
        self, cards: list[Card], allowed_types: list[QuestionType], count: int
    ) -> list[Question]:
        if not allowed_types:
            raise GenerationError("No question types allowed")

        questions: list[Question] = []
        for card in cards[: max(count, 0)]:
            qtype = QuestionType(self._rng.choice(list(allowed_types)))
            others = [c.back for c in cards if c.id != card.id and c.back != card.back]

            if qtype == QuestionType.MULTIPLE_CHOICE and others:
                distractors = self._rng.sample(others, min(len(others), MAX_CHOICES - 1))
                options = distractors + [card.back]
                self._rng.shuffle(options)
                questions.append(
                    Question(
                        id=generate_question_id(),
                        card_id=card.id,
                        type=qtype,
                        prompt=card.front,
                        answer=card.back,
                        options=options,
                    )
                )
            elif qtype == QuestionType.TRUE_FALSE and others:
                truthful = self._rng.random() < 0.5
                shown = card.back if truthful else self._rng.choice(others)
                questions.append(
                    Question(
                        id=generate_question_id(),
                        card_id=card.id,
                        type=qtype,
                        prompt=f"{card.front}\n→ {shown}",
                        answer="true" if truthful else "false",
                        options=["true", "false"],
                    )
                )
            else:
                # Not enough cards for distractors: fall back to a written question
                questions.append(
                    Question(
                        id=generate_question_id(),
                        card_id=card.id,
                        type=QuestionType.WRITTEN,
                        prompt=card.front,
                        answer=card.back,
                    )
                )
        return questions
