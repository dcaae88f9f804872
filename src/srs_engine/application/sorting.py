"""
Deterministic card ordering for the queue builder.

Every order uses a per-day FNV-1a hash as its final tie-breaker, so sorting
is total and reproducible: identical cards and day give identical output,
while "random" orders reshuffle when the day changes.

This is a pure computation module with no I/O.
"""

from collections.abc import Callable

from srs_engine.domain.constants import (
    FNV_OFFSET_BASIS,
    FNV_PRIME,
    FSRS_DEFAULT_DIFFICULTY,
    RETRIEVABILITY_BASE,
    U64_MASK,
)
from srs_engine.domain.models import Card, NewCardSortOrder, ReviewCardOrder


def fnv1a_64(data: bytes) -> int:
    """64-bit FNV-1a over raw bytes."""
    h = FNV_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV_PRIME) & U64_MASK
    return h


def fnv_hash(value: int, salt: int) -> int:
    """
    64-bit FNV-1a over the little-endian int64 bytes of `value` then `salt`.
    """
    return fnv1a_64(
        value.to_bytes(8, "little", signed=True) + salt.to_bytes(8, "little", signed=True)
    )


def sort_new_cards(
    cards: list[Card], sort_order: NewCardSortOrder | str, days_elapsed: int
) -> list[Card]:
    """
    Order new cards.

    order-added sorts by card id; random hashes the card id and random-note
    the note id, salted with the day so the shuffle changes daily but stays
    stable within a day.
    """
    order = NewCardSortOrder(sort_order)

    if order == NewCardSortOrder.ORDER_ADDED:
        return sorted(cards, key=lambda c: c.id)
    if order == NewCardSortOrder.RANDOM_NOTE:
        return sorted(cards, key=lambda c: (fnv_hash(c.note_id, days_elapsed), c.id))
    return sorted(cards, key=lambda c: (fnv_hash(c.id, days_elapsed), c.id))


def sm2_relative_overdueness(card: Card, today: int) -> float:
    """
    -(1 + (days overdue + 0.001) / interval).

    Lower values are relatively more overdue.
    """
    overdue = today - card.due
    return -(1 + (overdue + 0.001) / max(card.interval, 1))


def approximate_retrievability(card: Card, today: int) -> float:
    """
    R = 0.9^(t/S), where t is days since the last review.

    Falls back to the SM-2 overdueness when the card has no usable memory
    state.
    """
    if card.memory_state is None or not card.memory_state.stability > 0:
        return sm2_relative_overdueness(card, today)

    elapsed = (today - card.due) + card.interval
    return RETRIEVABILITY_BASE ** (elapsed / card.memory_state.stability)


def _difficulty(card: Card) -> float:
    if card.memory_state is None:
        return FSRS_DEFAULT_DIFFICULTY
    return card.memory_state.difficulty


def _review_key(
    order: ReviewCardOrder, today: int, use_fsrs: bool
) -> Callable[[Card], tuple]:
    """Primary sort key per order; the day hash is appended by the caller."""
    if order == ReviewCardOrder.DAY:
        return lambda c: (c.due,)
    if order == ReviewCardOrder.DAY_THEN_DECK:
        return lambda c: (c.due, c.deck_id)
    if order == ReviewCardOrder.DECK_THEN_DAY:
        return lambda c: (c.deck_id, c.due)
    if order == ReviewCardOrder.INTERVALS_ASCENDING:
        return lambda c: (c.interval,)
    if order == ReviewCardOrder.INTERVALS_DESCENDING:
        return lambda c: (-c.interval,)
    if order == ReviewCardOrder.EASE_ASCENDING:
        # Lower difficulty means more ease, so ascending ease is descending difficulty
        if use_fsrs:
            return lambda c: (-_difficulty(c),)
        return lambda c: (c.ease_factor,)
    if order == ReviewCardOrder.EASE_DESCENDING:
        if use_fsrs:
            return lambda c: (_difficulty(c),)
        return lambda c: (-c.ease_factor,)
    if order == ReviewCardOrder.RELATIVE_OVERDUENESS:
        if use_fsrs:
            return lambda c: (approximate_retrievability(c, today),)
        return lambda c: (sm2_relative_overdueness(c, today),)
    if order == ReviewCardOrder.ADDED:
        return lambda c: (c.note_id, c.id)
    if order == ReviewCardOrder.REVERSE_ADDED:
        return lambda c: (-c.note_id, c.id)
    # RANDOM
    return lambda c: ()


def sort_review_cards(
    cards: list[Card],
    sort_order: ReviewCardOrder | str,
    days_elapsed: int,
    use_fsrs: bool | None = None,
) -> list[Card]:
    """
    Order review cards by one of the eleven review orders.

    Args:
        cards: Review cards to sort.
        sort_order: A ReviewCardOrder or its string value.
        days_elapsed: Today's day number; salts the tie-break hash and
            serves as "today" for overdueness.
        use_fsrs: Sort ease orders by FSRS difficulty and overdueness by
            retrievability. Defaults to whether any card carries memory state.

    Returns:
        A new, totally ordered list.
    """
    order = ReviewCardOrder(sort_order)
    if use_fsrs is None:
        use_fsrs = any(card.memory_state is not None for card in cards)

    primary = _review_key(order, days_elapsed, use_fsrs)
    return sorted(cards, key=lambda c: (*primary(c), fnv_hash(c.id, days_elapsed), c.id))
