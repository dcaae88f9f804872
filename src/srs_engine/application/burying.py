"""
Sibling burying.

Cards that share a note are siblings. Once one of them has been seen in a
session, the others are hidden (moved to the SCHED_BURIED queue) when the
deck config enables burying for their queue category. Buried cards come
back on day rollover through `unbury_cards()`.
"""

import logging
from dataclasses import dataclass, replace

from srs_engine.domain.constants import SECS_PER_DAY
from srs_engine.domain.models import Card, CardQueue, CardType, DeckConfig

logger = logging.getLogger(__name__)

_INACTIVE_QUEUES = (CardQueue.SUSPENDED, CardQueue.SCHED_BURIED, CardQueue.USER_BURIED)
_NOT_GATHERED = 999


@dataclass(frozen=True)
class BuryMode:
    """Which queue categories may be buried."""

    bury_new: bool = False
    bury_reviews: bool = False
    bury_interday_learning: bool = False

    @classmethod
    def from_config(cls, config: DeckConfig) -> "BuryMode":
        return cls(
            bury_new=config.bury_new,
            bury_reviews=config.bury_reviews,
            bury_interday_learning=config.bury_interday_learning,
        )

    def any(self) -> bool:
        return self.bury_new or self.bury_reviews or self.bury_interday_learning

    def merge(self, other: "BuryMode") -> "BuryMode":
        return BuryMode(
            bury_new=self.bury_new or other.bury_new,
            bury_reviews=self.bury_reviews or other.bury_reviews,
            bury_interday_learning=self.bury_interday_learning or other.bury_interday_learning,
        )

    def buries(self, queue: CardQueue) -> bool:
        """Whether a card sitting in `queue` falls under this mode."""
        if queue == CardQueue.NEW:
            return self.bury_new
        if queue == CardQueue.REVIEW:
            return self.bury_reviews
        if queue == CardQueue.DAY_LEARN:
            return self.bury_interday_learning
        return False


class SiblingTracker:
    """
    Per-session record of notes already seen and their bury modes.

    The first card of a note records the mode and is never buried. Each
    later sibling is buried if the recorded mode covers its queue, and its
    own mode is OR-ed into the record so a stricter sibling still affects
    any sibling seen after it.

    Cards that were let through are remembered by id, so checking the same
    cards again (a queue rebuild within the session) gives the same answers.
    """

    def __init__(self):
        self.seen_notes: dict[int, BuryMode] = {}
        self.shown_cards: set[int] = set()

    def should_bury(self, card: Card, mode: BuryMode) -> bool:
        if card.id in self.shown_cards:
            return False

        previous = self.seen_notes.get(card.note_id)
        if previous is None:
            self.seen_notes[card.note_id] = mode
            self.shown_cards.add(card.id)
            return False

        bury = previous.buries(card.queue)
        self.seen_notes[card.note_id] = previous.merge(mode)
        if not bury:
            self.shown_cards.add(card.id)
        return bury

    def reset(self) -> None:
        self.seen_notes.clear()
        self.shown_cards.clear()


def gather_order(queue: CardQueue) -> int:
    """Position of a queue in the gather pass; later queues are gathered after."""
    if queue in (CardQueue.LEARN, CardQueue.PREVIEW_REPEAT):
        return 0
    if queue == CardQueue.DAY_LEARN:
        return 1
    if queue == CardQueue.REVIEW:
        return 2
    if queue == CardQueue.NEW:
        return 3
    return _NOT_GATHERED


def exclude_earlier_gathered_queues(mode: BuryMode, answered_queue: CardQueue) -> BuryMode:
    """
    Drop categories that were gathered before the answered card's queue.

    A sibling can only be buried if its category is gathered no earlier
    than the queue the answered card came from.
    """
    answered = gather_order(answered_queue)
    return BuryMode(
        bury_new=mode.bury_new and answered <= gather_order(CardQueue.NEW),
        bury_reviews=mode.bury_reviews and answered <= gather_order(CardQueue.REVIEW),
        bury_interday_learning=(
            mode.bury_interday_learning and answered <= gather_order(CardQueue.DAY_LEARN)
        ),
    )


def bury_siblings(cards: list[Card], answered_card: Card, config: DeckConfig) -> list[Card]:
    """
    Bury the siblings of a just-answered card.

    Args:
        cards: Cards of the deck.
        answered_card: The card as it was before the answer; its queue
            decides which categories remain buryable.
        config: Deck config providing the bury flags.

    Returns:
        A new list where buried siblings have moved to SCHED_BURIED. Other
        cards are returned unchanged.
    """
    mode = BuryMode.from_config(config)
    if not mode.any():
        return list(cards)

    effective = exclude_earlier_gathered_queues(mode, answered_card.queue)
    result: list[Card] = []
    buried = 0

    for card in cards:
        if (
            card.id != answered_card.id
            and card.note_id == answered_card.note_id
            and card.queue not in _INACTIVE_QUEUES
            and effective.buries(card.queue)
        ):
            result.append(replace(card, queue=CardQueue.SCHED_BURIED))
            buried += 1
        else:
            result.append(card)

    if buried:
        logger.debug(f"Buried {buried} sibling(s) of card {answered_card.id}")
    return result


def restore_queue_from_type(card: Card) -> CardQueue:
    """
    Queue implied by a card's type.

    Learning cards go back to LEARN when `due` is a unix timestamp and to
    DAY_LEARN when it is a day number.
    """
    if card.ctype == CardType.NEW:
        return CardQueue.NEW
    if card.ctype in (CardType.LEARN, CardType.RELEARN):
        return CardQueue.DAY_LEARN if card.due < SECS_PER_DAY else CardQueue.LEARN
    if card.ctype == CardType.REVIEW:
        return CardQueue.REVIEW
    return CardQueue.NEW


def unbury_cards(cards: list[Card]) -> list[Card]:
    """Restore every SCHED_BURIED card to the queue implied by its type."""
    return [
        replace(card, queue=restore_queue_from_type(card))
        if card.queue == CardQueue.SCHED_BURIED
        else card
        for card in cards
    ]
