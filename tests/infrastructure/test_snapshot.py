import pytest

from srs_engine.domain.models import CardQueue, CardType, FsrsMemoryState, LeechAction
from srs_engine.infrastructure.snapshot import (
    SnapshotError,
    card_from_dict,
    card_to_dict,
    dump_snapshot,
    load_snapshot,
    parse_snapshot,
    save_snapshot,
)

SNAPSHOT = """
deck:
  id: 3
  name: Spanish
  config:
    learn_steps: [1, 10]
    bury_new: true
    leech_action: suspend
cards:
  - {id: 1, note_id: 1}
  - id: 2
    note_id: 1
    ctype: review
    queue: review
    due: 19675
    interval: 12
    memory_state: {stability: 12.5, difficulty: 4.2}
  - {id: 3, note_id: 2, ctype: learn, queue: day-learn, due: 19676}
"""


def test_parse_snapshot():
    deck = parse_snapshot(SNAPSHOT)

    assert deck.id == 3
    assert deck.name == "Spanish"
    assert deck.config.learn_steps == (1, 10)
    assert deck.config.bury_new is True
    assert deck.config.leech_action == LeechAction.SUSPEND
    assert [c.id for c in deck.cards] == [1, 2, 3]

    review = deck.get_card(2)
    assert review.ctype == CardType.REVIEW
    assert review.memory_state == FsrsMemoryState(stability=12.5, difficulty=4.2)
    assert deck.get_card(3).queue == CardQueue.DAY_LEARN
    assert deck.get_card(1).queue == CardQueue.NEW


def test_enum_fields_accept_integers():
    card = card_from_dict({"id": 1, "note_id": 1, "ctype": 2, "queue": -2})
    assert card.ctype == CardType.REVIEW
    assert card.queue == CardQueue.SCHED_BURIED


def test_card_to_dict_uses_names():
    card = card_from_dict({"id": 1, "note_id": 1, "queue": "sched_buried"})
    data = card_to_dict(card)
    assert data["queue"] == "sched-buried"
    assert data["ctype"] == "new"


def test_empty_document_is_default_deck():
    deck = parse_snapshot("")
    assert deck.name == "Default"
    assert deck.cards == []


@pytest.mark.parametrize(
    "text,message",
    [
        ("- just\n- a list\n", "mapping"),
        ("cards: {id: 1}\n", "list"),
        ("cards:\n  - {id: 1}\n", "id/note_id"),
        ("cards:\n  - {id: 1, note_id: 1, colour: red}\n", "Unknown card fields"),
        ("cards:\n  - {id: 1, note_id: 1, queue: nowhere}\n", "CardQueue"),
        ("cards:\n  - 12\n", "mapping"),
        ("deck: [unclosed\n", "Invalid YAML"),
    ],
)
def test_malformed_snapshots(text, message):
    with pytest.raises(SnapshotError, match=message):
        parse_snapshot(text)


def test_save_and_load(tmp_path):
    deck = parse_snapshot(SNAPSHOT)
    path = tmp_path / "deck.yaml"

    save_snapshot(deck, path)
    reloaded = load_snapshot(path)

    assert reloaded.cards == deck.cards
    assert reloaded.config == deck.config
    assert "sched-buried" not in dump_snapshot(deck)
