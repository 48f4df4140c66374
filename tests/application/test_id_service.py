from swipestudy.application.id_service import (
    generate_card_id,
    generate_folder_id,
    stamp_new_cards,
)
from swipestudy.domain.models import CardStatus


def test_ids_are_unique_and_prefixed():
    ids = {generate_card_id() for _ in range(100)}
    assert len(ids) == 100
    assert all(i.startswith("card_") for i in ids)
    assert generate_folder_id().startswith("folder_")


def test_stamp_resets_scheduling_fields(make_card):
    drafts = [
        make_card("draft-0", folder_id="elsewhere", front=" Front ", mastery_score=3, interval=9)
    ]

    (card,) = stamp_new_cards(drafts, "f1", now=123)

    assert card.id.startswith("card_")
    assert card.folder_id == "f1"
    assert card.front == "Front"
    assert card.status == CardStatus.NEW
    assert card.mastery_score == 0
    assert card.interval == 0
    assert card.next_review == card.created_at == 123
    assert card.last_reviewed_at is None
