from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from srs_engine.domain.constants import DEFAULT_LEARN_AHEAD_SECS


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/srs-engine/config.toml",
        Path.home() / ".srs-engine.toml",
    ]


class EngineSettings(BaseSettings):
    """
    Engine-wide settings.
    Supports loading from:
    1. Environment variables (SRS_*)
    2. Config file (~/.config/srs-engine/config.toml)
    3. Manual overrides (CLI)

    Per-deck scheduling options live in DeckConfig, not here.
    """

    model_config = SettingsConfigDict(
        env_prefix="SRS_",
        extra="ignore",
    )

    # Queue building
    learn_ahead_secs: int = Field(default=DEFAULT_LEARN_AHEAD_SECS, ge=0)

    # Memory model
    memory_model: Literal["fsrs"] = "fsrs"
    enable_fuzzing: bool = False

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )


def resolve_settings(overrides: dict[str, Any] | None = None) -> EngineSettings:
    """
    Multi-layered settings resolution.
    1. Defaults in EngineSettings
    2. ~/.config/srs-engine/config.toml (if exists)
    3. Environment variables (SRS_*)
    4. overrides (passed from Typer)
    """
    # Typer passes None for options the user did not set
    clean = {k: v for k, v in (overrides or {}).items() if v is not None}
    return EngineSettings(**clean)
