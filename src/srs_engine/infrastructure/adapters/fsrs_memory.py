"""
FSRS Memory Model: infrastructure adapter for the `fsrs` library.

Implements MemoryModel by running py-fsrs's scheduler once per rating.
Learning steps are handled by the engine, so the library is configured
without any and only contributes memory state and review intervals.
"""

import logging
from datetime import datetime, timezone

from fsrs import Card as FsrsCard
from fsrs import Rating as FsrsRating
from fsrs import Scheduler as FsrsScheduler
from fsrs import State

from srs_engine.domain.constants import SECS_PER_DAY
from srs_engine.domain.errors import ConfigError
from srs_engine.domain.models import Card, CardType, DeckConfig, Rating
from srs_engine.domain.ports import MemoryModel, ProjectedState, Projection

logger = logging.getLogger(__name__)

_STATE_FOR_TYPE = {
    CardType.LEARN: State.Learning,
    CardType.RELEARN: State.Relearning,
    CardType.REVIEW: State.Review,
}

_PROJECTED_STATE = {
    State.Learning: ProjectedState.LEARNING,
    State.Review: ProjectedState.REVIEW,
    State.Relearning: ProjectedState.RELEARNING,
}


def _utc(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


class FsrsMemoryModel(MemoryModel):
    """
    Projects FSRS memory states with py-fsrs.

    Fuzzing stays off by default: projections must be reproducible for
    identical inputs.
    """

    def __init__(
        self,
        parameters: tuple[float, ...] | list[float],
        desired_retention: float,
        maximum_interval: int = 36500,
        enable_fuzzing: bool = False,
    ):
        try:
            self._scheduler = FsrsScheduler(
                parameters=tuple(parameters),
                desired_retention=desired_retention,
                learning_steps=(),
                relearning_steps=(),
                maximum_interval=maximum_interval,
                enable_fuzzing=enable_fuzzing,
            )
        except ValueError as e:
            raise ConfigError("fsrs_params", str(e)) from e

    @classmethod
    def from_config(cls, config: DeckConfig, enable_fuzzing: bool = False) -> "FsrsMemoryModel":
        return cls(
            parameters=config.fsrs_params,
            desired_retention=config.desired_retention,
            maximum_interval=config.maximum_review_interval,
            enable_fuzzing=enable_fuzzing,
        )

    def project(self, card: Card | None, now: int) -> dict[Rating, Projection]:
        review_time = _utc(now)
        fsrs_card = self._to_fsrs_card(card, review_time)
        reps = card.reps if card else 0
        lapses = card.lapses if card else 0
        in_review = card is not None and card.ctype == CardType.REVIEW

        projections: dict[Rating, Projection] = {}
        for rating in Rating:
            updated, _ = self._scheduler.review_card(
                fsrs_card, FsrsRating(int(rating)), review_datetime=review_time
            )
            due = int(updated.due.timestamp())
            projections[rating] = Projection(
                stability=updated.stability,
                difficulty=updated.difficulty,
                scheduled_days=max(0, (due - now) // SECS_PER_DAY),
                due=due,
                reps=reps + 1,
                lapses=lapses + 1 if in_review and rating == Rating.AGAIN else lapses,
                state=_PROJECTED_STATE[updated.state],
            )
        return projections

    def _to_fsrs_card(self, card: Card | None, review_time: datetime) -> FsrsCard:
        """Convert to the library's card; cards without memory state start empty."""
        card_id = card.id if card else 0
        if card is None or card.memory_state is None or card.ctype == CardType.NEW:
            return FsrsCard(card_id=card_id, state=State.Learning, step=0, due=review_time)

        state = _STATE_FOR_TYPE[CardType(card.ctype)]
        return FsrsCard(
            card_id=card_id,
            state=state,
            step=None if state == State.Review else 0,
            stability=card.memory_state.stability,
            difficulty=card.memory_state.difficulty,
            due=review_time,
            last_review=_utc(card.last_review) if card.last_review is not None else None,
        )
