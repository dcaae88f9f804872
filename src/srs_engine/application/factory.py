"""
Scheduler Factory
Centralizes the logic for selecting the memory model backing a scheduler.
"""

from srs_engine.application.config import EngineSettings
from srs_engine.application.scheduler import Scheduler
from srs_engine.domain.deck_config import validate_config
from srs_engine.domain.models import DeckConfig
from srs_engine.domain.ports import MemoryModel
from srs_engine.infrastructure.adapters.fsrs_memory import FsrsMemoryModel


def get_memory_model(config: DeckConfig, settings: EngineSettings | None = None) -> MemoryModel:
    """
    Returns the MemoryModel implementation selected by settings.
    """
    settings = settings or EngineSettings()

    if settings.memory_model == "fsrs":
        return FsrsMemoryModel.from_config(config, enable_fuzzing=settings.enable_fuzzing)

    raise ValueError(f"Unknown memory model: {settings.memory_model}")


def create_scheduler(config: DeckConfig, settings: EngineSettings | None = None) -> Scheduler:
    """
    Validate the deck config and wire a Scheduler to its memory model.

    Raises ConfigError before any backend is constructed.
    """
    validate_config(config)
    return Scheduler(config, get_memory_model(config, settings))
