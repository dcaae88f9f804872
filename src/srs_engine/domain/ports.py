"""
Ports (interfaces) for the memory model.

The scheduler depends on this abstraction, not on a concrete FSRS library,
so the curve-fitting formulas can be swapped without touching step, ease,
leech or bury logic.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum

from .models import Card, FsrsMemoryState, Rating


class ProjectedState(IntEnum):
    """Phase the memory model places a card in after an answer."""

    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


@dataclass(frozen=True)
class Projection:
    """
    Post-answer outcome predicted by the memory model for one rating.

    Attributes:
        stability: Post-answer stability in days (> 0).
        difficulty: Post-answer difficulty (1.0-10.0).
        scheduled_days: Interval the model suggests, in days (>= 0).
        due: Unix timestamp the model would schedule the card for.
        reps: Review count after the answer.
        lapses: Lapse count after the answer.
        state: Phase after the answer.
    """

    stability: float
    difficulty: float
    scheduled_days: int
    due: int
    reps: int
    lapses: int
    state: ProjectedState

    @property
    def memory_state(self) -> FsrsMemoryState:
        return FsrsMemoryState(stability=self.stability, difficulty=self.difficulty)


class MemoryModel(ABC):
    """
    Port for projecting a card's memory state forward.

    Implementations:
        - FsrsMemoryModel: Backed by the `fsrs` library.

    Contract: deterministic for identical (card state, now, parameters,
    desired retention); `scheduled_days >= 0`; `stability > 0`;
    `difficulty` within [1, 10].
    """

    @abstractmethod
    def project(self, card: Card | None, now: int) -> dict[Rating, Projection]:
        """
        Project the outcome of each of the four ratings.

        Args:
            card: The card being answered. New cards, or None, are projected
                from an empty memory state.
            now: Unix timestamp (seconds) of the answer.

        Returns:
            A mapping with one Projection per Rating.
        """
        pass
