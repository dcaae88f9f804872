"""
Ease-factor and leech policy.

The SM-2 style ease factor is tracked alongside the FSRS difficulty for
interval-multiplier display, ease-based review ordering and leech handling.
"""

import math

from srs_engine.domain.constants import (
    EASE_FACTOR_AGAIN_DELTA,
    EASE_FACTOR_EASY_DELTA,
    EASE_FACTOR_HARD_DELTA,
    MINIMUM_EASE_FACTOR,
)
from srs_engine.domain.models import Rating

_EASE_DELTAS = {
    Rating.AGAIN: EASE_FACTOR_AGAIN_DELTA,
    Rating.HARD: EASE_FACTOR_HARD_DELTA,
    Rating.GOOD: 0.0,
    Rating.EASY: EASE_FACTOR_EASY_DELTA,
}


def adjust_ease_factor(ease_factor: int, rating: Rating) -> int:
    """
    Apply the rating's ease delta to a stored (x1000) ease factor.

    Again -0.20, Hard -0.15, Good unchanged, Easy +0.15. Decreases are
    floored at 1.30; increases have no upper bound.
    """
    current = ease_factor / 1000
    delta = _EASE_DELTAS[Rating(rating)]
    if delta < 0:
        updated = max(current + delta, MINIMUM_EASE_FACTOR)
    else:
        updated = current + delta
    return round(updated * 1000)


def seed_ease_factor(initial_ease: float, rating: Rating) -> int:
    """Ease for a card graduating from its first learning ladder."""
    seeded = round(initial_ease * 1000)
    if rating == Rating.EASY:
        return adjust_ease_factor(seeded, Rating.EASY)
    return seeded


def leech_interval(threshold: int) -> int:
    """Lapses between repeat leech alerts once the threshold is crossed."""
    return max(1, math.ceil(threshold / 2))


def _at_leech_boundary(lapses: int, threshold: int) -> bool:
    return lapses >= threshold and (lapses - threshold) % leech_interval(threshold) == 0


def is_leech(old_lapses: int, new_lapses: int, threshold: int) -> bool:
    """
    True when this answer newly turns the card into a leech.

    Fires at `threshold` lapses, then every `ceil(threshold / 2)` lapses.
    A threshold of 0 disables leech detection. Only the lapse that reaches
    a boundary fires; answers that leave the lapse count on a boundary
    do not fire again.
    """
    if threshold <= 0 or new_lapses < threshold:
        return False
    return _at_leech_boundary(new_lapses, threshold) and not _at_leech_boundary(
        old_lapses, threshold
    )
