"""Small helpers over Card values."""

from .constants import DEFAULT_EASE_FACTOR, FSRS_DIFFICULTY_MAX, FSRS_DIFFICULTY_MIN, SECS_PER_DAY
from .models import Card, CardQueue, CardType, FsrsMemoryState


def create_new_card(
    card_id: int,
    note_id: int,
    deck_id: int = 1,
    position: int = 0,
    now: int = 0,
    ease_factor: int = DEFAULT_EASE_FACTOR,
) -> Card:
    """
    Create a card in the New queue.

    Identity is supplied by the caller; the engine never mints ids.
    `position` becomes `due`, the card's place in the new-card order.
    """
    return Card(
        id=card_id,
        note_id=note_id,
        deck_id=deck_id,
        ctype=CardType.NEW,
        queue=CardQueue.NEW,
        due=position,
        interval=0,
        ease_factor=ease_factor,
        reps=0,
        lapses=0,
        remaining_steps=0,
        memory_state=None,
        mtime=now,
        last_review=None,
    )


def day_number(now: int) -> int:
    """Days elapsed since the unix epoch."""
    return now // SECS_PER_DAY


def is_card_due(card: Card, now: int) -> bool:
    if card.queue == CardQueue.NEW:
        return True
    if card.queue in (CardQueue.LEARN, CardQueue.PREVIEW_REPEAT):
        return card.due <= now
    if card.queue in (CardQueue.REVIEW, CardQueue.DAY_LEARN):
        return card.due <= day_number(now)
    # Suspended and buried cards are never due
    return False


def days_until_due(card: Card, now: int) -> int:
    """Days until a Review-queue card is due (negative when overdue)."""
    if card.queue == CardQueue.REVIEW:
        return card.due - day_number(now)
    return 0


def normalized_difficulty(memory_state: FsrsMemoryState) -> float:
    """Map FSRS difficulty from 1-10 onto 0.0-1.0."""
    span = FSRS_DIFFICULTY_MAX - FSRS_DIFFICULTY_MIN
    return (memory_state.difficulty - FSRS_DIFFICULTY_MIN) / span


def ease_factor_to_percentage(ease_factor: int) -> float:
    """2500 -> 2.5"""
    return ease_factor / 1000


def percentage_to_ease_factor(percentage: float) -> int:
    """2.5 -> 2500"""
    return round(percentage * 1000)


def format_interval_days(interval: float) -> str:
    """Short label for an interval in days, e.g. "10m", "3d", "2mo", "1.2y"."""
    if interval == 0:
        return "New"
    if interval < 1:
        return f"{round(interval * 1440)}m"
    if interval < 30:
        return f"{round(interval)}d"
    if interval < 365:
        return f"{round(interval / 30)}mo"
    return f"{interval / 365:.1f}y"
