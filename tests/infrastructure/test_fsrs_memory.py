"""Contract tests for the py-fsrs backed memory model."""

import pytest

from srs_engine.domain.cards import create_new_card
from srs_engine.domain.deck_config import create_default_config
from srs_engine.domain.models import Card, CardQueue, CardType, FsrsMemoryState, Rating
from srs_engine.domain.ports import ProjectedState
from srs_engine.infrastructure.adapters.fsrs_memory import FsrsMemoryModel

NOW = 1_700_000_000
DAY = 86400


@pytest.fixture
def model():
    return FsrsMemoryModel.from_config(create_default_config(desired_retention=0.9))


@pytest.fixture
def review_card():
    return Card(
        id=7,
        note_id=7,
        ctype=CardType.REVIEW,
        queue=CardQueue.REVIEW,
        due=NOW // DAY,
        interval=10,
        reps=4,
        lapses=1,
        memory_state=FsrsMemoryState(stability=10.0, difficulty=5.0),
        last_review=NOW - 10 * DAY,
    )


def _check_contract(projections, now):
    assert set(projections) == set(Rating)
    for projection in projections.values():
        assert projection.stability > 0
        assert 1.0 <= projection.difficulty <= 10.0
        assert projection.scheduled_days >= 0
        assert projection.scheduled_days == max(0, (projection.due - now) // DAY)


def test_new_card_projection(model):
    projections = model.project(create_new_card(card_id=1, note_id=1), NOW)

    _check_contract(projections, NOW)
    stabilities = [projections[r].stability for r in Rating]
    assert stabilities == sorted(stabilities)
    assert all(p.reps == 1 for p in projections.values())
    assert all(p.lapses == 0 for p in projections.values())


def test_missing_card_projects_from_empty_state(model):
    projections = model.project(None, NOW)
    _check_contract(projections, NOW)


def test_review_card_projection(model, review_card):
    projections = model.project(review_card, NOW)

    _check_contract(projections, NOW)
    assert projections[Rating.AGAIN].lapses == 2
    assert projections[Rating.GOOD].lapses == 1
    assert projections[Rating.GOOD].reps == 5
    assert projections[Rating.GOOD].state == ProjectedState.REVIEW
    assert projections[Rating.AGAIN].stability < review_card.memory_state.stability
    assert projections[Rating.EASY].scheduled_days >= projections[Rating.GOOD].scheduled_days
    assert projections[Rating.GOOD].scheduled_days >= projections[Rating.HARD].scheduled_days


def test_projection_is_deterministic(model, review_card):
    assert model.project(review_card, NOW) == model.project(review_card, NOW)


def test_maximum_interval_respected(review_card):
    capped = FsrsMemoryModel.from_config(
        create_default_config(desired_retention=0.9, maximum_review_interval=3)
    )
    projections = capped.project(review_card, NOW)
    assert all(p.scheduled_days <= 3 for p in projections.values())


def test_memory_state_property(model):
    projection = model.project(None, NOW)[Rating.GOOD]
    assert projection.memory_state == FsrsMemoryState(
        stability=projection.stability, difficulty=projection.difficulty
    )
