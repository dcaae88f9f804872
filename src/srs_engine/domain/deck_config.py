"""Default deck configuration and its validators."""

import math
from dataclasses import replace
from typing import Any

from .constants import FSRS_PARAM_COUNT
from .errors import ConfigError
from .models import DeckConfig, LeechAction, NewCardSortOrder, ReviewCardOrder, ReviewMix

# FSRS-5 default weights, 19 parameters
DEFAULT_FSRS_PARAMS: tuple[float, ...] = (
    0.4072, 1.1829, 3.1262, 15.4722, 7.2102,
    0.5316, 1.0651, 0.0234, 1.616, 0.1544,
    1.0824, 1.9813, 0.0953, 0.2975, 2.2042,
    0.2407, 2.9466, 0.5034, 0.6567,
)  # fmt: skip

_ENUM_FIELDS = {
    "new_card_sort_order": NewCardSortOrder,
    "review_order": ReviewCardOrder,
    "new_mix": ReviewMix,
    "interday_learning_mix": ReviewMix,
    "leech_action": LeechAction,
}
_SEQUENCE_FIELDS = ("learn_steps", "relearn_steps", "fsrs_params")


def create_default_config(**overrides: Any) -> DeckConfig:
    """
    Build a DeckConfig with Anki-compatible defaults.

    Keyword overrides replace individual fields. Lists are stored as tuples
    and enum fields accept their string (or integer) values. The result is
    not validated; pass it to `validate_config()` or a `Scheduler`.
    """
    config = DeckConfig(
        learn_steps=(1.0, 5.0),
        relearn_steps=(5.0,),
        new_per_day=20,
        reviews_per_day=200,
        graduating_interval_good=1,
        graduating_interval_easy=4,
        initial_ease=2.5,
        easy_multiplier=1.3,
        hard_multiplier=1.2,
        lapse_multiplier=0.0,
        interval_multiplier=1.0,
        maximum_review_interval=36500,
        minimum_lapse_interval=1,
        fsrs_params=DEFAULT_FSRS_PARAMS,
        desired_retention=0.99,
        new_card_sort_order=NewCardSortOrder.RANDOM,
        review_order=ReviewCardOrder.DAY,
        new_mix=ReviewMix.MIX_WITH_REVIEWS,
        interday_learning_mix=ReviewMix.MIX_WITH_REVIEWS,
        leech_action=LeechAction.TAG_ONLY,
        leech_threshold=8,
        bury_new=False,
        bury_reviews=False,
        bury_interday_learning=False,
    )
    if not overrides:
        return config

    normalized: dict[str, Any] = {}
    for key, value in overrides.items():
        if key in _SEQUENCE_FIELDS and value is not None:
            value = tuple(value)
        elif key in _ENUM_FIELDS and value is not None:
            value = _coerce_enum(key, value)
        normalized[key] = value

    try:
        return replace(config, **normalized)
    except TypeError as e:
        raise ConfigError("config", str(e)) from e


def _coerce_enum(key: str, value: Any) -> Any:
    enum_cls = _ENUM_FIELDS[key]
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        pass
    # Also accept member names such as "tag-only" or "TAG_ONLY"
    if isinstance(value, str):
        name = value.replace("-", "_").upper()
        if name in enum_cls.__members__:
            return enum_cls[name]
    raise ConfigError(key, f"unknown value {value!r}")


def validate_fsrs_params(params: tuple[float, ...] | list[float]) -> bool:
    """FSRS weights must be exactly 19 finite, positive numbers."""
    if len(params) != FSRS_PARAM_COUNT:
        return False
    return all(
        isinstance(p, int | float) and math.isfinite(p) and p > 0 for p in params
    )


def validate_desired_retention(retention: float) -> bool:
    """Desired retention must lie strictly inside (0, 1)."""
    return isinstance(retention, int | float) and 0 < retention < 1


def validate_config(config: DeckConfig) -> DeckConfig:
    """
    Check a DeckConfig, raising ConfigError on the first problem found.

    Returns the config unchanged so it can be used inline.
    """
    if not validate_fsrs_params(config.fsrs_params):
        raise ConfigError(
            "fsrs_params",
            f"expected {FSRS_PARAM_COUNT} finite positive floats, "
            f"got {len(config.fsrs_params)} values",
        )
    if not validate_desired_retention(config.desired_retention):
        raise ConfigError(
            "desired_retention",
            f"must be strictly between 0 and 1, got {config.desired_retention}",
        )

    for name in ("learn_steps", "relearn_steps"):
        steps = getattr(config, name)
        if any(not math.isfinite(s) or s <= 0 for s in steps):
            raise ConfigError(name, f"steps must be positive minutes, got {list(steps)}")

    for name in (
        "new_per_day",
        "reviews_per_day",
        "leech_threshold",
        "graduating_interval_good",
        "graduating_interval_easy",
    ):
        if getattr(config, name) < 0:
            raise ConfigError(name, "must not be negative")

    if config.maximum_review_interval < 1:
        raise ConfigError("maximum_review_interval", "must be at least 1 day")
    if config.initial_ease < 1.3:
        raise ConfigError("initial_ease", f"must be at least 1.3, got {config.initial_ease}")

    return config
