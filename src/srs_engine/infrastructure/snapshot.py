"""
YAML deck snapshots.

A snapshot is a plain YAML document used by the CLI to inspect the engine:

    deck:
      id: 1
      name: Spanish
      config:
        learn_steps: [1, 10]
        bury_new: true
    cards:
      - {id: 1, note_id: 1, ctype: new, queue: new, due: 0}

Field names match the domain models. Enum fields accept names
("day-learn", "DAY_LEARN") or integer values.
"""

import logging
from dataclasses import asdict, fields
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from srs_engine.domain.deck_config import create_default_config
from srs_engine.domain.models import Card, CardQueue, CardType, Deck, DeckConfig, FsrsMemoryState

logger = logging.getLogger(__name__)

_CARD_FIELDS = {f.name for f in fields(Card)}


class SnapshotError(Exception):
    """A snapshot file could not be parsed into a deck."""


def _enum_value(enum_cls: type[Enum], value: Any) -> Enum:
    if isinstance(value, str):
        name = value.replace("-", "_").upper()
        if name in enum_cls.__members__:
            return enum_cls[name]
    try:
        return enum_cls(value)
    except ValueError as e:
        raise SnapshotError(f"Unknown {enum_cls.__name__} value: {value!r}") from e


def _enum_name(member: Enum) -> str:
    return member.name.lower().replace("_", "-")


def card_from_dict(data: dict[str, Any]) -> Card:
    if not isinstance(data, dict):
        raise SnapshotError(f"Card entry must be a mapping, got {data!r}")
    unknown = set(data) - _CARD_FIELDS
    if unknown:
        raise SnapshotError(f"Unknown card fields: {sorted(unknown)}")
    if "id" not in data or "note_id" not in data:
        raise SnapshotError(f"Card is missing id/note_id: {data}")

    values = dict(data)
    if "ctype" in values:
        values["ctype"] = _enum_value(CardType, values["ctype"])
    if "queue" in values:
        values["queue"] = _enum_value(CardQueue, values["queue"])
    memory_state = values.get("memory_state")
    if isinstance(memory_state, dict):
        values["memory_state"] = FsrsMemoryState(
            stability=float(memory_state["stability"]),
            difficulty=float(memory_state["difficulty"]),
        )
    return Card(**values)


def card_to_dict(card: Card) -> dict[str, Any]:
    data = asdict(card)
    data["ctype"] = _enum_name(CardType(card.ctype))
    data["queue"] = _enum_name(CardQueue(card.queue))
    return data


def _config_to_dict(config: DeckConfig) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for key, value in asdict(config).items():
        if isinstance(value, tuple):
            value = list(value)
        elif isinstance(value, Enum):
            value = value.value if isinstance(value.value, str) else _enum_name(value)
        data[key] = value
    return data


def parse_snapshot(text: str) -> Deck:
    """Parse snapshot YAML into a Deck."""
    try:
        doc = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise SnapshotError(f"Invalid YAML: {e}") from e

    if not isinstance(doc, dict):
        raise SnapshotError("Snapshot must be a mapping with 'deck' and 'cards'")

    deck_meta = doc.get("deck") or {}
    cards_data = doc.get("cards") or []
    if not isinstance(deck_meta, dict) or not isinstance(cards_data, list):
        raise SnapshotError("'deck' must be a mapping and 'cards' a list")

    config = create_default_config(**(deck_meta.get("config") or {}))
    cards = [card_from_dict(c) for c in cards_data]
    return Deck(
        id=int(deck_meta.get("id", 1)),
        name=str(deck_meta.get("name", "Default")),
        config=config,
        cards=cards,
        description=str(deck_meta.get("description", "")),
    )


def load_snapshot(path: Path) -> Deck:
    deck = parse_snapshot(path.read_text(encoding="utf-8"))
    logger.debug(f"Loaded {len(deck.cards)} cards from {path}")
    return deck


def dump_snapshot(deck: Deck) -> str:
    doc = {
        "deck": {
            "id": deck.id,
            "name": deck.name,
            "description": deck.description,
            "config": _config_to_dict(deck.config),
        },
        "cards": [card_to_dict(c) for c in deck.cards],
    }
    return yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)


def save_snapshot(deck: Deck, path: Path) -> None:
    path.write_text(dump_snapshot(deck), encoding="utf-8")
    logger.info(f"Wrote {len(deck.cards)} cards to {path}")
