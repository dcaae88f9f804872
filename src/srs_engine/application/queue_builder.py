"""
Queue builder for study sessions.

Builds ordered study queues in three phases:
1. Gather eligible cards into new / intraday learning / day learning / review
2. Sort each category deterministically
3. Interleave day learning into reviews, then new cards into that stream

Intraday learning cards are kept out of the main queue: their due time is
time-of-day sensitive, so they are exposed through `intraday_now()` and
`intraday_ahead()`, which are re-evaluated as the caller advances the
session's learning clock.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from srs_engine.domain.constants import DEFAULT_LEARN_AHEAD_SECS, INTRADAY_LEARNING_WINDOW_SECS
from srs_engine.domain.cards import day_number
from srs_engine.domain.models import Card, CardQueue, Deck, ReviewMix

from .burying import BuryMode, SiblingTracker
from .sorting import sort_new_cards, sort_review_cards

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Intersperser(Generic[T]):
    """
    Evenly mixes two sequences according to their length ratio.

    The ratio `(len(one) + 1) / (len(two) + 1)` is fixed up front; at each
    step an item of `two` is taken when `(two_idx + 1) * ratio < one_idx + 1`,
    otherwise an item of `one`. Once either side runs out the rest of the
    other follows in order.
    """

    def __init__(self, one: list[T], two: list[T]):
        self.one = one
        self.two = two
        self.ratio = (len(one) + 1) / (len(two) + 1)

    def __iter__(self) -> Iterator[T]:
        one_idx = two_idx = 0
        while one_idx < len(self.one) or two_idx < len(self.two):
            if two_idx >= len(self.two):
                take_two = False
            elif one_idx >= len(self.one):
                take_two = True
            else:
                take_two = (two_idx + 1) * self.ratio < one_idx + 1

            if take_two:
                yield self.two[two_idx]
                two_idx += 1
            else:
                yield self.one[one_idx]
                one_idx += 1

    def to_list(self) -> list[T]:
        return list(self)


class QueueEntryKind(str, Enum):
    NEW = "new"
    REVIEW = "review"
    LEARNING = "learning"
    DAY_LEARNING = "day-learning"


@dataclass(frozen=True)
class QueueEntry:
    card: Card
    kind: QueueEntryKind


@dataclass(frozen=True)
class LearningQueueEntry:
    card: Card
    due: int  # unix timestamp


@dataclass(frozen=True)
class QueueCounts:
    new: int
    learning: int
    review: int


@dataclass
class QueueBuildResult:
    """Result of queue building operation."""

    main_queue: list[QueueEntry]  # Reviews, day learning and new cards, interleaved
    intraday_learning: list[LearningQueueEntry]  # Sorted by due, not interleaved
    counts: QueueCounts
    buried_card_ids: list[int] = field(default_factory=list)  # Hidden by sibling burying


@dataclass
class LearningClock:
    """
    Session-scoped learning cutoff.

    The engine never reads the wall clock; the caller advances the cutoff
    with `update()` as the session goes on.
    """

    learning_cutoff: int
    learn_ahead_secs: int = DEFAULT_LEARN_AHEAD_SECS

    @property
    def learn_ahead_cutoff(self) -> int:
        return self.learning_cutoff + self.learn_ahead_secs

    def update(self, now: int) -> None:
        self.learning_cutoff = now


def _merge(primary: list[T], secondary: list[T], mix: ReviewMix) -> list[T]:
    """Merge a secondary group into the primary stream according to `mix`."""
    if mix == ReviewMix.REVIEWS_FIRST:
        return primary + secondary
    if mix == ReviewMix.NEW_FIRST:
        return secondary + primary
    if mix == ReviewMix.REVIEWS_ONLY:
        return list(primary)
    return Intersperser(primary, secondary).to_list()


class CardQueueBuilder:
    """
    Builds the study queue for one deck at a given moment.

    Args:
        deck: Deck whose cards and config are scheduled.
        now: Unix timestamp (seconds) of the build; also the initial
            learning cutoff.
        learn_ahead_secs: Look-ahead window for intraday learning cards.
        days_elapsed: Day number used as "today" and as the sort salt.
            Defaults to the day containing `now`.
        tracker: Optional session sibling tracker. When given, siblings of
            cards already gathered this session are left out of the queue
            if the deck config buries their category.
    """

    def __init__(
        self,
        deck: Deck,
        now: int,
        learn_ahead_secs: int = DEFAULT_LEARN_AHEAD_SECS,
        days_elapsed: int | None = None,
        tracker: SiblingTracker | None = None,
    ):
        self.deck = deck
        self.now = now
        self.today = day_number(now) if days_elapsed is None else days_elapsed
        self.clock = LearningClock(learning_cutoff=now, learn_ahead_secs=learn_ahead_secs)
        self.tracker = tracker

        self.new_cards: list[Card] = []
        self.review_cards: list[Card] = []
        self.day_learning_cards: list[Card] = []
        self.intraday_learning: list[LearningQueueEntry] = []
        self.buried_card_ids: list[int] = []

    def build(self) -> QueueBuildResult:
        """
        Gather, sort and interleave the deck's cards.

        Returns:
            QueueBuildResult with the main queue, the intraday learning side
            queue and the due counts.
        """
        self._gather()
        self._sort()
        if self.tracker is not None:
            self._apply_sibling_burying(self.tracker)
        self._apply_limits()

        main_queue = self._build_main_queue()
        counts = QueueCounts(
            new=sum(1 for e in main_queue if e.kind == QueueEntryKind.NEW),
            learning=len(self.intraday_now()),
            review=sum(1 for e in main_queue if e.kind != QueueEntryKind.NEW),
        )
        logger.debug(
            f"Built queue for deck {self.deck.id}: {counts.new} new, "
            f"{counts.learning} learning, {counts.review} review"
        )

        return QueueBuildResult(
            main_queue=main_queue,
            intraday_learning=list(self.intraday_learning),
            counts=counts,
            buried_card_ids=list(self.buried_card_ids),
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _gather(self) -> None:
        self.new_cards = []
        self.review_cards = []
        self.day_learning_cards = []
        self.intraday_learning = []
        self.buried_card_ids = []

        intraday_cutoff = self.now + INTRADAY_LEARNING_WINDOW_SECS

        for card in self.deck.cards:
            try:
                queue = CardQueue(card.queue)
            except ValueError:
                logger.debug(f"Skipping card {card.id}: unknown queue {card.queue!r}")
                continue
            if isinstance(card.due, bool) or not isinstance(card.due, int):
                logger.debug(f"Skipping card {card.id}: malformed due {card.due!r}")
                continue
            if card.memory_state is not None and not card.memory_state.stability > 0:
                logger.debug(
                    f"Skipping card {card.id}: invalid stability {card.memory_state.stability!r}"
                )
                continue

            if queue == CardQueue.NEW:
                self.new_cards.append(card)
            elif queue in (CardQueue.LEARN, CardQueue.PREVIEW_REPEAT):
                if card.due < intraday_cutoff:
                    self.intraday_learning.append(LearningQueueEntry(card=card, due=card.due))
            elif queue == CardQueue.DAY_LEARN:
                if card.due <= self.today:
                    self.day_learning_cards.append(card)
            elif queue == CardQueue.REVIEW:
                if card.due <= self.today:
                    self.review_cards.append(card)
            # Suspended and buried cards are not gathered

        self.intraday_learning.sort(key=lambda e: (e.due, e.card.id))
        logger.debug(
            f"Gathered {len(self.new_cards)} new, {len(self.intraday_learning)} intraday, "
            f"{len(self.day_learning_cards)} day learning, {len(self.review_cards)} review"
        )

    def _sort(self) -> None:
        config = self.deck.config
        self.new_cards = sort_new_cards(self.new_cards, config.new_card_sort_order, self.today)
        self.review_cards = sort_review_cards(self.review_cards, config.review_order, self.today)
        self.day_learning_cards.sort(key=lambda c: (c.due, c.id))

    def _apply_sibling_burying(self, tracker: SiblingTracker) -> None:
        """Walk categories in gather order, dropping siblings the tracker buries."""
        mode = BuryMode.from_config(self.deck.config)

        def keep(card: Card) -> bool:
            if tracker.should_bury(card, mode):
                self.buried_card_ids.append(card.id)
                return False
            return True

        self.intraday_learning = [e for e in self.intraday_learning if keep(e.card)]
        self.day_learning_cards = [c for c in self.day_learning_cards if keep(c)]
        self.review_cards = [c for c in self.review_cards if keep(c)]
        self.new_cards = [c for c in self.new_cards if keep(c)]

    def _apply_limits(self) -> None:
        config = self.deck.config
        self.new_cards = self.new_cards[: max(config.new_per_day, 0)]
        self.review_cards = self.review_cards[: max(config.reviews_per_day, 0)]

    def _build_main_queue(self) -> list[QueueEntry]:
        config = self.deck.config
        reviews = [QueueEntry(c, QueueEntryKind.REVIEW) for c in self.review_cards]
        day_learning = [QueueEntry(c, QueueEntryKind.DAY_LEARNING) for c in self.day_learning_cards]
        new = [QueueEntry(c, QueueEntryKind.NEW) for c in self.new_cards]

        with_learning = _merge(reviews, day_learning, config.interday_learning_mix)
        return _merge(with_learning, new, config.new_mix)

    # ------------------------------------------------------------------
    # Intraday learning
    # ------------------------------------------------------------------

    def intraday_now(self) -> list[LearningQueueEntry]:
        """Learning cards due at or before the learning cutoff."""
        cutoff = self.clock.learning_cutoff
        return [e for e in self.intraday_learning if e.due <= cutoff]

    def intraday_ahead(self) -> list[LearningQueueEntry]:
        """Learning cards due after the cutoff but within the learn-ahead window."""
        cutoff = self.clock.learning_cutoff
        ahead = self.clock.learn_ahead_cutoff
        return [e for e in self.intraday_learning if cutoff < e.due <= ahead]

    def update_learning_cutoff(self, now: int) -> None:
        self.clock.update(now)

    def requeue_learning_card(self, card: Card) -> LearningQueueEntry:
        """
        Put an answered learning card back into the intraday queue.

        If it would be due again within the learn-ahead window while another
        learning card is waiting, it is placed one second after that card so
        the same card is not shown twice in a row.
        """
        due = card.due
        learn_ahead_cutoff = self.clock.learn_ahead_cutoff
        if due <= learn_ahead_cutoff and self.intraday_learning:
            head = self.intraday_learning[0]
            if head.due >= due and head.due + 1 < learn_ahead_cutoff:
                due = head.due + 1

        entry = LearningQueueEntry(card=card, due=due)
        idx = next(
            (i for i, e in enumerate(self.intraday_learning) if e.due > entry.due),
            len(self.intraday_learning),
        )
        self.intraday_learning.insert(idx, entry)
        return entry

    def remove_intraday_learning_card(self, card_id: int) -> LearningQueueEntry | None:
        for idx, entry in enumerate(self.intraday_learning):
            if entry.card.id == card_id:
                return self.intraday_learning.pop(idx)
        return None
