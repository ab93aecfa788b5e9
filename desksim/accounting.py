"""
Running cost and working-hour totals of a run.
"""

from desksim.models import Ticket

MINUTES_PER_HOUR = 60.0


class Accounting:
    """Ledger updated once per solved ticket. Totals never decrease."""

    def __init__(self):
        self.total_expenses = 0.0
        self.total_working_hours = 0.0

    def book(self, ticket: Ticket) -> float:
        """Book the cost of a solved ticket.

        Args:
            ticket: Solved ticket with duration and solving employee

        Returns:
            Cost of this ticket
        """
        hours = ticket.duration / MINUTES_PER_HOUR
        cost = hours * ticket.solved_by.employee_type.hourly_rate
        self.total_expenses += cost
        self.total_working_hours += hours
        return cost

    @property
    def average_hourly_wage(self) -> float:
        if self.total_working_hours == 0:
            return 0.0
        return self.total_expenses / self.total_working_hours
