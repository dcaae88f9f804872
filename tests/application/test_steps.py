import pytest

from srs_engine.application.steps import LearningSteps


@pytest.fixture
def steps():
    return LearningSteps([1, 10])


def test_again_restarts_at_first_step(steps):
    assert steps.again_delay_secs() == 60
    assert steps.remaining_for_failed() == 2


def test_hard_on_first_step_averages_first_two(steps):
    # (1 + 10) / 2 minutes
    assert steps.hard_delay_secs(remaining_steps=2) == 330


def test_hard_on_single_step_is_one_and_a_half_times():
    assert LearningSteps([10]).hard_delay_secs(remaining_steps=1) == 900


def test_hard_on_later_step_repeats_current(steps):
    assert steps.hard_delay_secs(remaining_steps=1) == 600


def test_hard_with_out_of_range_remaining_falls_back_to_first(steps):
    assert steps.hard_delay_secs(remaining_steps=5) == 60
    assert steps.hard_delay_secs(remaining_steps=0) == 60


def test_good_advances_one_step(steps):
    assert steps.good_delay_secs(remaining_steps=2) == 600
    assert steps.remaining_for_good(2) == 1


def test_good_on_last_step_graduates(steps):
    assert steps.good_delay_secs(remaining_steps=1) is None
    assert steps.remaining_for_good(0) == 0


def test_fractional_minutes_round_to_seconds():
    assert LearningSteps([0.5, 2.25]).good_delay_secs(remaining_steps=2) == 135


def test_empty_steps_return_none():
    empty = LearningSteps([])
    assert empty.is_empty()
    assert len(empty) == 0
    assert empty.again_delay_secs() is None
    assert empty.hard_delay_secs(0) is None
    assert empty.good_delay_secs(0) is None
