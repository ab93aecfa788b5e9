"""
Employee fatigue: efficiency decays during long unbroken service runs.
"""

import math
from typing import Optional

from desksim.config import BoundaryConditions
from desksim.models import Employee


class FatigueModel:
    """Tracks continuous-work ticks and derives an efficiency multiplier.

    efficiency = 1.0 while elapsed < decay_start_ticks, afterwards
    max(floor, 1 - start_value * factor ** whole_intervals_past_start).
    """

    def __init__(self, conditions: BoundaryConditions):
        self.start_ticks = conditions.decay_start_ticks
        self.interval = conditions.decay_interval
        self.start_value = conditions.decay_start_value
        self.factor = conditions.decay_factor
        self.floor = conditions.efficiency_floor
        self.saturation = self._saturation()

    def _saturation(self) -> Optional[int]:
        """Interval count after which efficiency is pinned at the floor."""
        headroom = 1.0 - self.floor
        if headroom <= 0 or self.start_value >= headroom:
            return 0
        if self.start_value == 0 or self.factor <= 1:
            return None
        return math.ceil(math.log(headroom / self.start_value, self.factor))

    def efficiency(self, elapsed: int) -> float:
        """Efficiency multiplier after `elapsed` ticks of unbroken work."""
        if elapsed < self.start_ticks or self.start_value == 0:
            return 1.0

        intervals = (elapsed - self.start_ticks) // self.interval
        if self.saturation is not None and intervals > self.saturation:
            return self.floor
        decay = self.start_value * self.factor ** intervals
        return max(self.floor, 1.0 - decay)

    def employee_efficiency(self, employee: Employee) -> float:
        return self.efficiency(employee.fatigue)

    def record_tick(self, employee: Employee):
        """Update the run counter after dispatch for one tick.

        Serving employees accumulate a tick; an employee who got no work
        this tick has broken the run.
        """
        if employee.is_idle:
            employee.fatigue = 0
        else:
            employee.fatigue += 1

    @staticmethod
    def rest(employee: Employee):
        employee.fatigue = 0
