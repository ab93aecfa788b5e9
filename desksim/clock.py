"""
Simulation clock: one tick is one simulated minute.
"""

from typing import Optional
import simpy


class Clock:
    """Counts ticks from 0 to days * day_length on a SimPy environment."""

    def __init__(self, days: int, day_length: int, env: Optional[simpy.Environment] = None):
        """Initialize clock.

        Args:
            days: Number of simulated days
            day_length: Ticks per day
            env: SimPy environment (a new one if not given)
        """
        self.env = env if env is not None else simpy.Environment()
        self.day_length = day_length
        self.total_ticks = days * day_length

    @property
    def tick(self) -> int:
        """Current tick."""
        return int(self.env.now)

    @property
    def day(self) -> int:
        return self.tick // self.day_length

    @property
    def tick_of_day(self) -> int:
        return self.tick % self.day_length

    @property
    def exhausted(self) -> bool:
        return self.tick >= self.total_ticks

    def is_day_boundary(self) -> bool:
        return self.tick > 0 and self.tick_of_day == 0

    def advance(self) -> simpy.events.Timeout:
        """SimPy event for the next tick; yield it from the driving process."""
        return self.env.timeout(1)

    def run(self, process):
        """Drive a tick process until the horizon.

        Args:
            process: Generator that yields advance() once per tick
        """
        self.env.process(process)
        self.env.run(until=self.total_ticks)
