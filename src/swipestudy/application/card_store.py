"""
Card Store: the in-memory collection of cards and folders.

The store is created at app start, loaded once from a KeyValueStore and
saved after every committed mutation. Sessions receive it explicitly and
only touch it once, when they reach FINISHED.
"""

import logging
from collections.abc import Iterable

from swipestudy.application.id_service import generate_folder_id
from swipestudy.domain.constants import (
    CARDS_KEY,
    DEFAULT_FOLDER_COLOR,
    DEFAULT_FOLDER_ID,
    DEFAULT_FOLDER_NAME,
    FOLDERS_KEY,
    MASTERY_THRESHOLD,
)
from swipestudy.domain.errors import CardStoreError
from swipestudy.domain.interfaces import KeyValueStore
from swipestudy.domain.migration import migrate_card_records
from swipestudy.domain.models import Card, Folder, now_ms

logger = logging.getLogger(__name__)


class CardStore:
    def __init__(
        self,
        backend: KeyValueStore | None = None,
        *,
        autosave: bool = True,
        threshold: int = MASTERY_THRESHOLD,
    ):
        self.backend = backend
        self.autosave = autosave
        self.threshold = threshold
        self._cards: dict[str, Card] = {}
        self._folders: dict[str, Folder] = {}
        self._ensure_default_folder()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> int:
        """
        Replace the in-memory state with what the backend holds.

        Legacy card records are migrated on the way in.
        Returns the number of migrated legacy records.
        """
        if self.backend is None:
            return 0

        raw_folders = self.backend.read(FOLDERS_KEY) or []
        raw_cards = self.backend.read(CARDS_KEY) or []

        folders: dict[str, Folder] = {}
        for record in raw_folders:
            try:
                folder = Folder.from_record(record)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping bad folder record {record!r}: {e}")
                continue
            folders[folder.id] = folder

        cards, migrated = migrate_card_records(list(raw_cards), self.threshold)

        self._folders = folders
        self._cards = {c.id: c for c in cards}
        self._ensure_default_folder()

        logger.debug(
            f"Loaded {len(self._cards)} cards in {len(self._folders)} folders "
            f"({migrated} migrated)"
        )
        return migrated

    def save(self) -> None:
        if self.backend is None:
            return
        self.backend.write(CARDS_KEY, [c.to_record() for c in self._cards.values()])
        self.backend.write(FOLDERS_KEY, [f.to_record() for f in self._folders.values()])

    def _commit(self) -> None:
        if self.autosave:
            self.save()

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def all(self) -> list[Card]:
        return list(self._cards.values())

    def get(self, card_id: str) -> Card | None:
        return self._cards.get(card_id)

    def get_by_folder(self, folder_id: str) -> list[Card]:
        return [c for c in self._cards.values() if c.folder_id == folder_id]

    def add_many(self, cards: Iterable[Card]) -> list[Card]:
        """
        Insert freshly generated cards.

        Raises:
            CardStoreError: On duplicate ids or an unknown folder. Nothing is inserted.
        """
        batch = list(cards)
        seen: set[str] = set()
        for card in batch:
            if card.id in self._cards or card.id in seen:
                raise CardStoreError(f"Duplicate card id: {card.id}")
            if card.folder_id not in self._folders:
                raise CardStoreError(f"Unknown folder: {card.folder_id}")
            seen.add(card.id)

        for card in batch:
            self._cards[card.id] = card
        if batch:
            try:
                self._commit()
            except Exception:
                for card in batch:
                    del self._cards[card.id]
                raise
        logger.info(f"Added {len(batch)} cards")
        return batch

    def upsert_many(self, cards: Iterable[Card]) -> int:
        """
        Merge `cards` into the store by id.

        Only ids already in the store are replaced; others are ignored so
        unrelated cards are unaffected. The batch is applied all at once; if
        saving fails it is rolled back and the error propagates.
        Returns the number of cards that actually changed.
        """
        updates = {c.id: c for c in cards}
        changed = {
            cid: card
            for cid, card in updates.items()
            if cid in self._cards and self._cards[cid] != card
        }
        unknown = [cid for cid in updates if cid not in self._cards]
        if unknown:
            logger.warning(f"Ignoring {len(unknown)} unknown card ids on merge: {unknown}")

        if not changed:
            return 0

        previous = {cid: self._cards[cid] for cid in changed}
        self._cards.update(changed)
        try:
            self._commit()
        except Exception:
            self._cards.update(previous)
            logger.error(f"Merge of {len(changed)} cards not saved; rolled back")
            raise
        logger.debug(f"Merged {len(changed)} updated cards")
        return len(changed)

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    def folders(self) -> list[Folder]:
        return sorted(self._folders.values(), key=lambda f: f.created_at)

    def get_folder(self, folder_id: str) -> Folder | None:
        return self._folders.get(folder_id)

    def add_folder(self, name: str, color: str = DEFAULT_FOLDER_COLOR) -> Folder:
        name = name.strip()
        if not name:
            raise CardStoreError("Folder name must not be empty")
        folder = Folder(id=generate_folder_id(), name=name, color=color, created_at=now_ms())
        self._folders[folder.id] = folder
        try:
            self._commit()
        except Exception:
            del self._folders[folder.id]
            raise
        logger.info(f"Created folder '{name}' ({folder.id})")
        return folder

    def _ensure_default_folder(self) -> None:
        if not self._folders:
            self._folders[DEFAULT_FOLDER_ID] = Folder(
                id=DEFAULT_FOLDER_ID,
                name=DEFAULT_FOLDER_NAME,
                color=DEFAULT_FOLDER_COLOR,
                created_at=0,
            )
