"""srs-engine: spaced-repetition scheduling with learning steps and FSRS."""

from srs_engine.application import (
    CardQueueBuilder,
    Intersperser,
    LearningSteps,
    QueueBuildResult,
    Scheduler,
    SiblingTracker,
    bury_siblings,
    unbury_cards,
)
from srs_engine.domain import (
    Card,
    CardQueue,
    CardType,
    ConfigError,
    Deck,
    DeckConfig,
    FsrsMemoryState,
    InvalidCardStateError,
    InvalidRatingError,
    MemoryModel,
    Rating,
    ReviewLog,
    create_default_config,
)

__version__ = "0.1.0"

__all__ = [
    "Card",
    "CardQueue",
    "CardQueueBuilder",
    "CardType",
    "ConfigError",
    "Deck",
    "DeckConfig",
    "FsrsMemoryState",
    "Intersperser",
    "InvalidCardStateError",
    "InvalidRatingError",
    "LearningSteps",
    "MemoryModel",
    "QueueBuildResult",
    "Rating",
    "ReviewLog",
    "Scheduler",
    "SiblingTracker",
    "bury_siblings",
    "create_default_config",
    "unbury_cards",
]
