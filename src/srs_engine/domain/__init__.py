# Domain Package
from .deck_config import (
    DEFAULT_FSRS_PARAMS,
    create_default_config,
    validate_config,
    validate_desired_retention,
    validate_fsrs_params,
)
from .errors import ConfigError, InvalidCardStateError, InvalidRatingError, SchedulingError
from .models import (
    Card,
    CardQueue,
    CardType,
    Deck,
    DeckConfig,
    FsrsMemoryState,
    LeechAction,
    NewCardSortOrder,
    Rating,
    ReviewCardOrder,
    ReviewKind,
    ReviewLog,
    ReviewMix,
    ScheduleResult,
)
from .ports import MemoryModel, ProjectedState, Projection

__all__ = [
    "Card",
    "CardQueue",
    "CardType",
    "ConfigError",
    "DEFAULT_FSRS_PARAMS",
    "Deck",
    "DeckConfig",
    "FsrsMemoryState",
    "InvalidCardStateError",
    "InvalidRatingError",
    "LeechAction",
    "MemoryModel",
    "NewCardSortOrder",
    "ProjectedState",
    "Projection",
    "Rating",
    "ReviewCardOrder",
    "ReviewKind",
    "ReviewLog",
    "ReviewMix",
    "ScheduleResult",
    "SchedulingError",
    "create_default_config",
    "validate_config",
    "validate_desired_retention",
    "validate_fsrs_params",
]
