# Application Package
from .burying import BuryMode, SiblingTracker, bury_siblings, unbury_cards
from .queue_builder import (
    CardQueueBuilder,
    Intersperser,
    LearningClock,
    LearningQueueEntry,
    QueueBuildResult,
    QueueCounts,
    QueueEntry,
    QueueEntryKind,
)
from .scheduler import Scheduler, format_duration
from .sorting import fnv1a_64, fnv_hash, sort_new_cards, sort_review_cards
from .steps import LearningSteps

__all__ = [
    "BuryMode",
    "CardQueueBuilder",
    "Intersperser",
    "LearningClock",
    "LearningQueueEntry",
    "LearningSteps",
    "QueueBuildResult",
    "QueueCounts",
    "QueueEntry",
    "QueueEntryKind",
    "Scheduler",
    "SiblingTracker",
    "bury_siblings",
    "fnv1a_64",
    "fnv_hash",
    "format_duration",
    "sort_new_cards",
    "sort_review_cards",
    "unbury_cards",
]
