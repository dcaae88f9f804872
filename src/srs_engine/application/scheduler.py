"""
Card scheduler.

Combines discrete learning/relearning steps with a pluggable memory model:

- New cards walk the learn steps.
- Learning cards advance step by step until they graduate.
- Graduated cards are scheduled by the memory model.
- Failed reviews drop into the relearn steps.

The scheduler holds no card storage. `schedule_card()` returns a patch for
the caller to merge and persist, plus a review log entry.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

from srs_engine.domain.constants import (
    FAILED_REVIEW_DEFAULT_DELAY_SECS,
    SECS_PER_DAY,
    SECS_PER_HOUR,
    SECS_PER_MINUTE,
)
from srs_engine.domain.deck_config import validate_config
from srs_engine.domain.errors import InvalidCardStateError, InvalidRatingError
from srs_engine.domain.models import (
    Card,
    CardQueue,
    CardType,
    DeckConfig,
    LeechAction,
    Rating,
    ReviewKind,
    ReviewLog,
    ScheduleResult,
)
from srs_engine.domain.ports import MemoryModel, ProjectedState, Projection

from .burying import BuryMode, SiblingTracker, bury_siblings
from .ease import adjust_ease_factor, is_leech, seed_ease_factor
from .steps import LearningSteps

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Plan:
    """What an answer would do, before anything is written back."""

    patch: dict[str, Any]
    delay_secs: int
    review_kind: ReviewKind
    branch: str


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_duration(secs: float) -> str:
    """
    Human-readable delay for answer buttons.

    <60s seconds, <1h minutes, <1d hours, <30d days, <365d months,
    otherwise years with one decimal.
    """
    if secs < SECS_PER_MINUTE:
        return f"{_round_half_up(secs)}s"
    if secs < SECS_PER_HOUR:
        return f"{_round_half_up(secs / SECS_PER_MINUTE)}m"
    if secs < SECS_PER_DAY:
        return f"{_round_half_up(secs / SECS_PER_HOUR)}h"

    days = secs / SECS_PER_DAY
    if days < 30:
        return f"{_round_half_up(days)}d"
    if days < 365:
        return f"{_round_half_up(days / 30)}mo"
    return f"{days / 365:.1f}y"


def validate_rating(rating: Any) -> Rating:
    """Coerce a 1-4 rating, raising InvalidRatingError for anything else."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError(rating)
    try:
        return Rating(rating)
    except ValueError as e:
        raise InvalidRatingError(rating) from e


class Scheduler:
    """
    Per-answer state machine for one deck config.

    Depends on the MemoryModel port for stability, difficulty and the
    interval of graduated cards; step, ease, leech and bury logic live here.

    Sibling tracking is session state. The tracker passed in (or a fresh one)
    lives as long as the scheduler; call `reset_sibling_tracking()` when a new
    session starts. Pass the same tracker to `CardQueueBuilder` to share one
    session between queue building and answering.
    """

    def __init__(
        self,
        config: DeckConfig,
        memory_model: MemoryModel,
        sibling_tracker: SiblingTracker | None = None,
    ):
        """
        Args:
            config: Deck config; validated here, raising ConfigError.
            memory_model: Projection backend (see `application.factory`).
            sibling_tracker: Session tracker for sibling burying.
        """
        self.config = validate_config(config)
        self.memory_model = memory_model
        self.learn_steps = LearningSteps(config.learn_steps)
        self.relearn_steps = LearningSteps(config.relearn_steps)
        self.sibling_tracker = sibling_tracker if sibling_tracker is not None else SiblingTracker()

    # ------------------------------------------------------------------
    # Answering
    # ------------------------------------------------------------------

    def schedule_card(
        self, card: Card, rating: int, now: int, time_taken_ms: int = 0
    ) -> ScheduleResult:
        """
        Apply a rating to a card.

        Args:
            card: The card being answered. It is never mutated.
            rating: 1 (Again) to 4 (Easy).
            now: Unix timestamp (seconds) of the answer.
            time_taken_ms: Answer time, copied into the review log.

        Returns:
            ScheduleResult with the card patch, the updated card, the review
            log entry and whether the answer turned the card into a leech.

        Raises:
            InvalidRatingError: rating outside 1-4.
            InvalidCardStateError: a review card without memory state.
        """
        rating = validate_rating(rating)
        plan = self._plan(card, rating, now)
        patch = plan.patch
        logger.debug(f"Card {card.id} answered {rating.name} via {plan.branch}")

        leech = is_leech(card.lapses, patch["lapses"], self.config.leech_threshold)
        if leech:
            logger.info(f"Card {card.id} became a leech at {patch['lapses']} lapses")
            if self.config.leech_action == LeechAction.SUSPEND:
                patch["queue"] = CardQueue.SUSPENDED

        review_log = ReviewLog(
            card_id=card.id,
            review_time=now,
            button_chosen=int(rating),
            last_interval=card.interval,
            interval=patch["interval"],
            ease_factor=patch["ease_factor"],
            review_kind=plan.review_kind,
            memory_state=patch["memory_state"],
            time_taken_ms=time_taken_ms,
        )
        return ScheduleResult(
            card=card.merge(patch),
            card_patch=patch,
            review_log=review_log,
            leech=leech,
        )

    def get_button_intervals(self, card: Card, now: int) -> dict[str, str]:
        """
        Preview the delay each rating would produce, for answer-button labels.

        Runs the same branch logic as `schedule_card()` without writing
        anything back.
        """
        projections = self.memory_model.project(card, now)
        return {
            rating.name.lower(): format_duration(
                self._plan(card, rating, now, projections).delay_secs
            )
            for rating in Rating
        }

    # ------------------------------------------------------------------
    # Sibling burying
    # ------------------------------------------------------------------

    def should_bury_sibling(self, card: Card, tracker: SiblingTracker | None = None) -> bool:
        """
        Check `card` against siblings already recorded this session.

        Uses the scheduler's own tracker unless one is passed in.
        """
        tracker = self.sibling_tracker if tracker is None else tracker
        return tracker.should_bury(card, BuryMode.from_config(self.config))

    def bury_siblings(self, cards: list[Card], answered_card: Card) -> list[Card]:
        return bury_siblings(cards, answered_card, self.config)

    def reset_sibling_tracking(self) -> None:
        """Forget the notes seen so far, e.g. when a new session starts."""
        self.sibling_tracker.reset()

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def _steps_for(self, card: Card) -> LearningSteps:
        if card.ctype == CardType.RELEARN or card.lapses > 0:
            return self.relearn_steps
        return self.learn_steps

    def _plan(
        self,
        card: Card,
        rating: Rating,
        now: int,
        projections: dict[Rating, Projection] | None = None,
    ) -> _Plan:
        if projections is None:
            projections = self.memory_model.project(card, now)

        in_learning = card.ctype in (CardType.NEW, CardType.LEARN, CardType.RELEARN)
        steps = self._steps_for(card)

        if in_learning and not steps.is_empty():
            return self._schedule_with_steps(card, rating, steps, projections, now)
        failed_review = card.ctype == CardType.REVIEW and rating == Rating.AGAIN
        if failed_review and not self.relearn_steps.is_empty():
            return self._schedule_failed_review(card, projections, now)
        return self._schedule_with_memory_model(card, rating, projections, now)

    def _common(self, now: int) -> dict[str, Any]:
        return {
            "desired_retention": self.config.desired_retention,
            "last_review": now,
            "mtime": now,
        }

    def _learning_placement(self, delay_secs: int, now: int) -> tuple[CardQueue, int]:
        """Queue and due for a card coming back after `delay_secs`."""
        due_at = now + delay_secs
        if delay_secs < SECS_PER_DAY:
            return CardQueue.LEARN, due_at
        return CardQueue.DAY_LEARN, due_at // SECS_PER_DAY

    def _review_kind(self, card: Card, rating: Rating) -> ReviewKind:
        if card.ctype == CardType.NEW:
            return ReviewKind.LEARNING
        if rating == Rating.AGAIN:
            return ReviewKind.RELEARN
        if card.ctype in (CardType.LEARN, CardType.RELEARN):
            return ReviewKind.LEARNING
        return ReviewKind.REVIEW

    def _schedule_with_steps(
        self,
        card: Card,
        rating: Rating,
        steps: LearningSteps,
        projections: dict[Rating, Projection],
        now: int,
    ) -> _Plan:
        if card.ctype == CardType.NEW:
            remaining = steps.remaining_for_failed()
        else:
            remaining = card.remaining_steps

        # Failing a learning step is not a lapse; only review failures count
        if rating == Rating.AGAIN:
            delay = steps.again_delay_secs()
            new_remaining = steps.remaining_for_failed()
        elif rating == Rating.HARD:
            delay = steps.hard_delay_secs(remaining)
            new_remaining = remaining
        elif rating == Rating.GOOD:
            delay = steps.good_delay_secs(remaining)
            new_remaining = steps.remaining_for_good(remaining)
            if delay is None:
                return self._graduate(card, Rating.GOOD, projections, now)
        else:
            return self._graduate(card, Rating.EASY, projections, now)

        queue, due = self._learning_placement(delay, now)
        patch = {
            "ctype": CardType.RELEARN if card.lapses > 0 else CardType.LEARN,
            "queue": queue,
            "due": due,
            "interval": delay // SECS_PER_DAY,
            "ease_factor": card.ease_factor,
            "reps": card.reps + 1,
            "lapses": card.lapses,
            "remaining_steps": new_remaining,
            "memory_state": projections[rating].memory_state,
            **self._common(now),
        }
        return _Plan(patch, delay, self._review_kind(card, rating), "learning steps")

    def _graduate(
        self,
        card: Card,
        rating: Rating,
        projections: dict[Rating, Projection],
        now: int,
    ) -> _Plan:
        projection = projections[rating]
        graduating = (
            self.config.graduating_interval_easy
            if rating == Rating.EASY
            else self.config.graduating_interval_good
        )
        interval = max(round(projection.scheduled_days), graduating)
        interval = min(interval, self.config.maximum_review_interval)

        if card.ctype == CardType.RELEARN:
            # Relearning keeps the ease it lapsed with
            ease_factor = (
                adjust_ease_factor(card.ease_factor, Rating.EASY)
                if rating == Rating.EASY
                else card.ease_factor
            )
        else:
            ease_factor = seed_ease_factor(self.config.initial_ease, rating)

        patch = {
            "ctype": CardType.REVIEW,
            "queue": CardQueue.REVIEW,
            "due": now // SECS_PER_DAY + interval,
            "interval": interval,
            "ease_factor": ease_factor,
            "reps": card.reps + 1,
            "lapses": card.lapses,
            "remaining_steps": 0,
            "memory_state": projection.memory_state,
            **self._common(now),
        }
        return _Plan(patch, interval * SECS_PER_DAY, self._review_kind(card, rating), "graduation")

    def _schedule_failed_review(
        self, card: Card, projections: dict[Rating, Projection], now: int
    ) -> _Plan:
        delay = self.relearn_steps.again_delay_secs() or FAILED_REVIEW_DEFAULT_DELAY_SECS
        queue, due = self._learning_placement(delay, now)
        patch = {
            "ctype": CardType.RELEARN,
            "queue": queue,
            "due": due,
            "interval": delay // SECS_PER_DAY,
            "ease_factor": adjust_ease_factor(card.ease_factor, Rating.AGAIN),
            "reps": card.reps + 1,
            "lapses": card.lapses + 1,
            "remaining_steps": self.relearn_steps.remaining_for_failed(),
            "memory_state": projections[Rating.AGAIN].memory_state,
            **self._common(now),
        }
        return _Plan(patch, delay, ReviewKind.RELEARN, "failed review")

    def _schedule_with_memory_model(
        self,
        card: Card,
        rating: Rating,
        projections: dict[Rating, Projection],
        now: int,
    ) -> _Plan:
        if card.ctype == CardType.REVIEW and card.memory_state is None:
            raise InvalidCardStateError(card.id, "review card has no memory state")

        projection = projections[rating]
        interval = min(round(projection.scheduled_days), self.config.maximum_review_interval)

        ease_factor = card.ease_factor
        lapses = card.lapses
        if card.ctype == CardType.REVIEW:
            ease_factor = adjust_ease_factor(card.ease_factor, rating)
            if rating == Rating.AGAIN:
                lapses += 1

        if projection.state == ProjectedState.NEW:
            ctype, queue, due = CardType.NEW, CardQueue.NEW, card.due
            delay = 0
        elif projection.state in (ProjectedState.LEARNING, ProjectedState.RELEARNING):
            ctype = CardType.RELEARN if lapses > 0 else CardType.LEARN
            delay = max(0, projection.due - now)
            if projection.scheduled_days < 1:
                queue, due = CardQueue.LEARN, projection.due
            else:
                queue, due = CardQueue.DAY_LEARN, projection.due // SECS_PER_DAY
        else:
            ctype, queue = CardType.REVIEW, CardQueue.REVIEW
            due = now // SECS_PER_DAY + interval
            delay = interval * SECS_PER_DAY

        patch = {
            "ctype": ctype,
            "queue": queue,
            "due": due,
            "interval": interval,
            "ease_factor": ease_factor,
            "reps": card.reps + 1,
            "lapses": lapses,
            "remaining_steps": 0,
            "memory_state": projection.memory_state,
            **self._common(now),
        }
        return _Plan(patch, delay, self._review_kind(card, rating), "memory model")
