import pytest

from srs_engine.application.scheduler import Scheduler
from srs_engine.domain.constants import SECS_PER_DAY
from srs_engine.domain.deck_config import create_default_config
from srs_engine.domain.models import Card, CardQueue, CardType, Deck, FsrsMemoryState, Rating
from srs_engine.domain.ports import MemoryModel, ProjectedState, Projection

# 2023-11-14T22:13:20Z, day 19675
NOW = 1_700_000_000
TODAY = NOW // SECS_PER_DAY


class FakeMemoryModel(MemoryModel):
    """
    Deterministic stand-in for the FSRS backend.

    Intervals come from a fixed table per rating; stability scales with the
    rating so tests can tell which projection was used.
    """

    def __init__(self, scheduled_days=None, state=ProjectedState.REVIEW):
        self.scheduled_days = scheduled_days or {
            Rating.AGAIN: 1,
            Rating.HARD: 3,
            Rating.GOOD: 7,
            Rating.EASY: 15,
        }
        self.state = state
        self.calls: list[tuple[Card | None, int]] = []

    def project(self, card, now):
        self.calls.append((card, now))
        base = card.memory_state.stability if card and card.memory_state else 1.0
        reps = card.reps if card else 0
        lapses = card.lapses if card else 0
        return {
            rating: Projection(
                stability=base * int(rating),
                difficulty=float(8 - int(rating)),
                scheduled_days=self.scheduled_days[rating],
                due=now + self.scheduled_days[rating] * SECS_PER_DAY,
                reps=reps + 1,
                lapses=lapses,
                state=self.state,
            )
            for rating in Rating
        }


@pytest.fixture
def fake_model():
    return FakeMemoryModel()


@pytest.fixture
def make_scheduler(fake_model):
    """Build a Scheduler over the fake model with config overrides."""

    def _make(**overrides):
        return Scheduler(create_default_config(**overrides), fake_model)

    return _make


@pytest.fixture
def review_card():
    """A graduated card due today with an FSRS memory state."""
    return Card(
        id=100,
        note_id=10,
        ctype=CardType.REVIEW,
        queue=CardQueue.REVIEW,
        due=TODAY,
        interval=10,
        ease_factor=2500,
        reps=5,
        lapses=0,
        memory_state=FsrsMemoryState(stability=10.0, difficulty=5.0),
        last_review=NOW - 10 * SECS_PER_DAY,
    )


@pytest.fixture
def make_deck():
    def _make(cards, **overrides):
        return Deck(id=1, name="Test", config=create_default_config(**overrides), cards=cards)

    return _make
