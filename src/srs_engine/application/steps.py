"""
Learning-step table.

Maps an answer on a stepped (learning or relearning) card to the delay
before it is shown again. Steps are configured in minutes; every delay
returned here is in seconds. `None` means the card leaves the table and
graduates to review scheduling.
"""

import math

from srs_engine.domain.constants import HARD_SINGLE_STEP_MULTIPLIER, SECS_PER_MINUTE


def _to_secs(minutes: float) -> int:
    return round(minutes * SECS_PER_MINUTE)


class LearningSteps:
    """Delay lookups for one ladder of learning or relearning steps."""

    def __init__(self, steps: tuple[float, ...] | list[float]):
        self.steps = tuple(steps)

    def __len__(self) -> int:
        return len(self.steps)

    def is_empty(self) -> bool:
        return not self.steps

    def _current_index(self, remaining_steps: int) -> int:
        return len(self.steps) - remaining_steps

    def again_delay_secs(self) -> int | None:
        """Again always restarts at the first step."""
        if self.is_empty():
            return None
        return _to_secs(self.steps[0])

    def hard_delay_secs(self, remaining_steps: int) -> int | None:
        """
        Hard repeats the current step.

        On the first step the delay is the average of the first two steps,
        or 1.5x the first step when there is only one.
        """
        if self.is_empty():
            return None

        idx = self._current_index(remaining_steps)
        if not 0 <= idx < len(self.steps):
            return _to_secs(self.steps[0])

        if idx == 0:
            if len(self.steps) > 1:
                return _to_secs((self.steps[0] + self.steps[1]) / 2)
            return math.floor(self.steps[0] * SECS_PER_MINUTE * HARD_SINGLE_STEP_MULTIPLIER)

        return _to_secs(self.steps[idx])

    def good_delay_secs(self, remaining_steps: int) -> int | None:
        """Good advances one step; None when there is no next step."""
        if self.is_empty():
            return None

        next_idx = self._current_index(remaining_steps) + 1
        if 0 <= next_idx < len(self.steps):
            return _to_secs(self.steps[next_idx])
        return None

    def remaining_for_good(self, remaining_steps: int) -> int:
        return max(0, remaining_steps - 1)

    def remaining_for_failed(self) -> int:
        """Again resets the ladder."""
        return len(self.steps)
