"""
Import service: turns user material into stored cards.

Runs the generator, stamps ids and scheduling defaults, and inserts the
batch into the store. Nothing is stored if generation fails.
"""

import logging
from dataclasses import replace

from swipestudy.application.card_store import CardStore
from swipestudy.application.id_service import generate_question_id, stamp_new_cards
from swipestudy.domain.errors import GenerationError
from swipestudy.domain.interfaces import CardGenerator
from swipestudy.domain.models import Card, Question, QuestionType

logger = logging.getLogger(__name__)


class ImportService:
    def __init__(self, store: CardStore, generator: CardGenerator):
        self._store = store
        self._generator = generator

    async def import_text(self, text: str, folder_id: str) -> list[Card]:
        self._require_folder(folder_id)
        if not text.strip():
            raise GenerationError("Nothing to import: text is empty")
        generated = await self._generate(self._generator.generate_from_text(text, folder_id))
        return self._store_batch(generated, folder_id)

    async def import_image(self, image: bytes, folder_id: str) -> list[Card]:
        self._require_folder(folder_id)
        if not image:
            raise GenerationError("Nothing to import: image is empty")
        generated = await self._generate(self._generator.generate_from_image(image, folder_id))
        return self._store_batch(generated, folder_id)

    async def build_questions(
        self, cards: list[Card], allowed_types: list[QuestionType], count: int
    ) -> list[Question]:
        """
        Ask the generator for questions and keep only those bound to one of `cards`.

        Raises:
            GenerationError: If no allowed type is given or generation fails.
        """
        if not allowed_types:
            raise GenerationError("Select at least one question type")
        questions = await self._generate(
            self._generator.generate_questions(cards, allowed_types, count)
        )

        known = {c.id for c in cards}
        bound: dict[str, Question] = {}
        for q in questions:
            if q.card_id not in known:
                logger.warning(f"Dropping question bound to unknown card {q.card_id}")
                continue
            if q.card_id in bound:
                logger.warning(f"Dropping extra question for card {q.card_id}")
                continue
            if not q.id:
                q = replace(q, id=generate_question_id())
            bound[q.card_id] = q
        return list(bound.values())[:count]

    async def _generate(self, call):
        try:
            result = await call
        except GenerationError:
            raise
        except Exception as e:
            logger.error(f"Generation failed: {e}", exc_info=True)
            raise GenerationError(str(e)) from e
        if not result:
            raise GenerationError("The generator returned nothing")
        return result

    def _store_batch(self, generated: list[Card], folder_id: str) -> list[Card]:
        cards = stamp_new_cards(generated, folder_id)
        self._store.add_many(cards)
        logger.info(f"Imported {len(cards)} cards into {folder_id}")
        return cards

    def _require_folder(self, folder_id: str) -> None:
        if self._store.get_folder(folder_id) is None:
            raise GenerationError(f"Unknown folder: {folder_id}")
