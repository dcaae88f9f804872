"""
Domain models for the scheduling engine.

These are pure data structures with no I/O or external dependencies.
Cards are immutable: the scheduler hands back patches and updated copies,
storage stays with the caller.
"""

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any


class CardType(IntEnum):
    """Lifecycle type of a card."""

    NEW = 0
    LEARN = 1
    REVIEW = 2
    RELEARN = 3


class CardQueue(IntEnum):
    """
    Queue membership of a card.

    The unit of `Card.due` depends on the queue:
        NEW: ordering position.
        LEARN, PREVIEW_REPEAT: unix timestamp in seconds.
        REVIEW, DAY_LEARN: days since the unix epoch.
    """

    NEW = 0
    LEARN = 1
    REVIEW = 2
    DAY_LEARN = 3
    PREVIEW_REPEAT = 4
    SUSPENDED = -1
    SCHED_BURIED = -2
    USER_BURIED = -3


class Rating(IntEnum):
    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


class ReviewKind(IntEnum):
    LEARNING = 0
    REVIEW = 1
    RELEARN = 2
    FILTERED = 3
    MANUAL = 4


class LeechAction(IntEnum):
    SUSPEND = 0
    TAG_ONLY = 1


class NewCardSortOrder(str, Enum):
    ORDER_ADDED = "order-added"
    RANDOM = "random"
    RANDOM_NOTE = "random-note"


class ReviewCardOrder(str, Enum):
    DAY = "day"
    DAY_THEN_DECK = "day-then-deck"
    DECK_THEN_DAY = "deck-then-day"
    INTERVALS_ASCENDING = "intervals-ascending"
    INTERVALS_DESCENDING = "intervals-descending"
    EASE_ASCENDING = "ease-ascending"
    EASE_DESCENDING = "ease-descending"
    RELATIVE_OVERDUENESS = "relative-overdueness"
    RANDOM = "random"
    ADDED = "added"
    REVERSE_ADDED = "reverse-added"


class ReviewMix(str, Enum):
    """How a secondary card group is merged into the review stream."""

    MIX_WITH_REVIEWS = "mix-with-reviews"
    REVIEWS_FIRST = "reviews-first"
    NEW_FIRST = "new-first"
    REVIEWS_ONLY = "reviews-only"


@dataclass(frozen=True)
class FsrsMemoryState:
    """
    FSRS memory state for a card.

    Attributes:
        stability: Days until recall probability drops to 90%.
        difficulty: Card difficulty on FSRS's 1.0-10.0 scale.
    """

    stability: float
    difficulty: float


@dataclass(frozen=True)
class Card:
    """
    Scheduling state of a single flashcard.

    Identity (`id`, `note_id`) is assigned by the caller. Cards that share a
    `note_id` are siblings for burying purposes.
    """

    id: int
    note_id: int
    deck_id: int = 1

    ctype: CardType = CardType.NEW
    queue: CardQueue = CardQueue.NEW
    due: int = 0
    interval: int = 0  # days
    ease_factor: int = 2500  # 250% stored as 2500
    reps: int = 0
    lapses: int = 0
    remaining_steps: int = 0

    # None until the memory model has scheduled the card
    memory_state: FsrsMemoryState | None = None
    desired_retention: float | None = None

    mtime: int = 0
    last_review: int | None = None
    flags: int = 0

    def merge(self, patch: dict[str, Any]) -> "Card":
        """Return a copy with `patch` applied."""
        return replace(self, **patch)


@dataclass(frozen=True)
class DeckConfig:
    """
    Per-deck scheduling options.

    Steps are in minutes, graduating intervals in days, `initial_ease` as a
    ratio (2.5 = 250%). Build with `create_default_config()` and validate
    with `validate_config()`.
    """

    # Learning
    learn_steps: tuple[float, ...]
    relearn_steps: tuple[float, ...]

    # Daily limits
    new_per_day: int
    reviews_per_day: int

    # Graduating intervals
    graduating_interval_good: int
    graduating_interval_easy: int

    # Ease factors
    initial_ease: float
    easy_multiplier: float
    hard_multiplier: float
    lapse_multiplier: float
    interval_multiplier: float

    # Review settings
    maximum_review_interval: int
    minimum_lapse_interval: int

    # FSRS
    fsrs_params: tuple[float, ...]
    desired_retention: float

    # Card ordering
    new_card_sort_order: NewCardSortOrder
    review_order: ReviewCardOrder
    new_mix: ReviewMix
    interday_learning_mix: ReviewMix

    # Leech handling
    leech_action: LeechAction
    leech_threshold: int

    # Sibling burying
    bury_new: bool
    bury_reviews: bool
    bury_interday_learning: bool


@dataclass
class Deck:
    """A named collection of cards scheduled under one config."""

    id: int
    name: str
    config: DeckConfig
    cards: list[Card] = field(default_factory=list)
    description: str = ""

    def get_card(self, card_id: int) -> Card | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def replace_cards(self, updated: list[Card]) -> None:
        """Swap in updated copies of cards, matched by id."""
        by_id = {card.id: card for card in updated}
        self.cards = [by_id.get(card.id, card) for card in self.cards]


@dataclass(frozen=True)
class ReviewLog:
    """
    A single review log entry, created once per answer and never mutated.

    Attributes:
        card_id: The card that was reviewed.
        review_time: Epoch timestamp (seconds) of the answer.
        button_chosen: Rating pressed (1=Again, 2=Hard, 3=Good, 4=Easy).
        last_interval: Interval before this answer (days).
        interval: Interval assigned by this answer (days).
        ease_factor: Ease factor after the answer (x1000).
        review_kind: Learning, Review, Relearn, Filtered or Manual.
        memory_state: FSRS state produced by the answer.
        time_taken_ms: Answer time reported by the caller.
    """

    card_id: int
    review_time: int
    button_chosen: int
    last_interval: int
    interval: int
    ease_factor: int
    review_kind: ReviewKind
    memory_state: FsrsMemoryState | None
    time_taken_ms: int = 0


@dataclass(frozen=True)
class ScheduleResult:
    """
    Outcome of answering a card.

    `card_patch` holds only the scheduling fields to merge into the stored
    card; `card` is the input card with the patch already applied.
    """

    card: Card
    card_patch: dict[str, Any]
    review_log: ReviewLog
    leech: bool = False
