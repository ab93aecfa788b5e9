"""
Stochastic ticket resolution times and ticket difficulty draws.
"""

import numpy as np

from desksim.config import BoundaryConditions
from desksim.models import SupportLevel

MIN_DURATION = 1


class ServiceTimeModel:
    """Normal resolution times per support level, scaled by efficiency.

    All draws come from the single generator handed in, so a fixed seed
    reproduces a run exactly.
    """

    def __init__(self, conditions: BoundaryConditions, rng: np.random.Generator):
        """Initialize service time model.

        Args:
            conditions: Boundary conditions with the per-level mean/stddev
            rng: Shared random generator of the run
        """
        self.rng = rng
        self.parameters = {
            SupportLevel.FIRST: (
                conditions.resolve_time_1st_mean,
                conditions.resolve_time_1st_stddev,
            ),
            SupportLevel.SECOND: (
                conditions.resolve_time_2nd_mean,
                conditions.resolve_time_2nd_stddev,
            ),
        }
        factor = conditions.level_distribution_factor
        self.first_level_probability = factor / (factor + 1.0)

    def base_duration(self, level: SupportLevel) -> float:
        """Draw a base duration, clamped to MIN_DURATION ticks."""
        mean, stdev = self.parameters[level]
        return max(float(MIN_DURATION), self.rng.normal(mean, stdev))

    def duration(self, level: SupportLevel, efficiency: float) -> int:
        """Resolution duration in ticks for an employee at `efficiency`.

        Args:
            level: Ticket difficulty
            efficiency: Multiplier in (0, 1]; lower means slower

        Returns:
            Duration in whole ticks, at least MIN_DURATION
        """
        scaled = self.base_duration(level) / efficiency
        return max(MIN_DURATION, int(round(scaled)))

    def draw_level(self) -> SupportLevel:
        """Difficulty for a ticket the plan did not pin."""
        if self.rng.random() < self.first_level_probability:
            return SupportLevel.FIRST
        return SupportLevel.SECOND
