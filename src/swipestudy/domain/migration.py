"""
Load-time migration of persisted card records.

Older records used the status vocabulary `new / known / review` and had no
mastery score; "mastered" meant `status == "known"`. The canonical predicate
is now `masteryScore >= 3`, so legacy records are converted once here and
`status` is recomputed from the score for every record.

Legacy mapping:
    known  -> masteryScore = threshold (mastered)
    review -> masteryScore kept (default 0), treated as attempted (learning)
    new    -> masteryScore kept (default 0)
"""

import logging
from typing import Any

from swipestudy.domain.constants import MASTERY_THRESHOLD
from swipestudy.domain.mastery import clamp_score, derive_status
from swipestudy.domain.models import Card

logger = logging.getLogger(__name__)

LEGACY_STATUS_MASTERED = "known"
LEGACY_STATUS_REVIEW = "review"
LEGACY_STATUSES = {LEGACY_STATUS_MASTERED, LEGACY_STATUS_REVIEW}


def _to_int(value: Any, default: int = 0) -> int:
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_optional_int(value: Any) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def is_legacy_record(record: dict[str, Any]) -> bool:
    return record.get("status") in LEGACY_STATUSES or "masteryScore" not in record


def migrate_card_record(
    record: dict[str, Any], threshold: int = MASTERY_THRESHOLD
) -> Card:
    """
    Build a Card from a persisted record, converting the legacy vocabulary.

    Raises:
        KeyError: If the record has no id or folderId.
    """
    raw_status = str(record.get("status") or "new").lower()
    has_score = record.get("masteryScore") not in (None, "")
    score = _to_int(record.get("masteryScore"))

    last_attempt = record.get("lastAttemptCorrect")
    if last_attempt is not None:
        last_attempt = bool(last_attempt)
    last_reviewed_at = _to_optional_int(record.get("lastReviewedAt"))
    interval = _to_int(record.get("interval"))

    attempted = last_attempt is not None or last_reviewed_at is not None or interval > 0

    if not has_score:
        if raw_status in (LEGACY_STATUS_MASTERED, "mastered"):
            score = threshold
        elif raw_status in (LEGACY_STATUS_REVIEW, "learning"):
            attempted = True
    elif raw_status in (LEGACY_STATUS_REVIEW, "learning"):
        attempted = True

    score = clamp_score(score, threshold)
    status = derive_status(score, attempted=attempted, threshold=threshold)

    if raw_status in LEGACY_STATUSES:
        logger.debug(f"[migrate] {record.get('id')}: '{raw_status}' -> '{status.value}'")

    return Card(
        id=str(record["id"]),
        folder_id=str(record["folderId"]),
        front=str(record.get("front") or ""),
        back=str(record.get("back") or ""),
        status=status,
        mastery_score=score,
        interval=interval,
        next_review=_to_int(record.get("nextReview")),
        last_attempt_correct=last_attempt,
        last_reviewed_at=last_reviewed_at,
        created_at=_to_int(record.get("createdAt")),
    )


def migrate_card_records(
    records: list[dict[str, Any]], threshold: int = MASTERY_THRESHOLD
) -> tuple[list[Card], int]:
    """
    Migrate a whole collection.

    Returns:
        (cards, migrated_count) where migrated_count counts legacy records.
        Records without an id or folder are skipped and logged.
    """
    cards: list[Card] = []
    migrated = 0
    for record in records:
        if not isinstance(record, dict):
            logger.warning(f"[migrate] Skipping non-object card record: {record!r}")
            continue
        try:
            card = migrate_card_record(record, threshold)
        except KeyError as e:
            logger.warning(f"[migrate] Skipping card record missing {e}: {record!r}")
            continue
        if is_legacy_record(record):
            migrated += 1
        cards.append(card)
    return cards, migrated
