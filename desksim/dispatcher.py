"""
Ticket backlog and dispatch of queued tickets to idle employees.
"""

from collections import deque
from typing import Callable, Deque, Dict, Iterable, List, Optional

from desksim.fatigue import FatigueModel
from desksim.models import (
    LEVEL_ORDER,
    Employee,
    EmployeeState,
    SupportLevel,
    Ticket,
    TicketState,
)
from desksim.service_time import ServiceTimeModel


class TicketQueue:
    """FIFO backlog per support level."""

    def __init__(self):
        self.backlogs: Dict[SupportLevel, Deque[Ticket]] = {
            level: deque() for level in SupportLevel
        }

    def admit(self, ticket: Ticket):
        ticket.state = TicketState.QUEUED
        self.backlogs[ticket.difficulty].append(ticket)

    def pop_for(self, employee: Employee) -> Optional[Ticket]:
        """Oldest ticket for the employee: native level first, then any qualified level."""
        employee_type = employee.employee_type
        levels = [employee_type.native_level] + [
            level for level in LEVEL_ORDER
            if level is not employee_type.native_level
        ]
        for level in levels:
            if employee_type.qualified_for(level) and self.backlogs[level]:
                return self.backlogs[level].popleft()
        return None

    def depth(self, level: SupportLevel) -> int:
        return len(self.backlogs[level])

    def __len__(self):
        return sum(len(backlog) for backlog in self.backlogs.values())


class Dispatcher:
    """Assigns idle employees to queued tickets and resolves finished ones."""

    def __init__(
        self,
        queue: TicketQueue,
        service_time: ServiceTimeModel,
        fatigue: FatigueModel,
        log: Optional[Callable[[str], None]] = None,
    ):
        self.queue = queue
        self.service_time = service_time
        self.fatigue = fatigue
        self.log = log
        self.in_service: List[Ticket] = []

    def assign(self, tick: int, employees: Iterable[Employee]) -> List[Ticket]:
        """Start service for each available employee that has a qualifying ticket.

        Args:
            tick: Current tick
            employees: ACTIVE idle employees in tie-break order

        Returns:
            Tickets started this tick
        """
        started = []
        for employee in employees:
            if not employee.is_idle or employee.state is not EmployeeState.ACTIVE:
                continue
            ticket = self.queue.pop_for(employee)
            if ticket is None:
                continue

            efficiency = self.fatigue.employee_efficiency(employee)
            ticket.duration = self.service_time.duration(ticket.difficulty, efficiency)
            ticket.state = TicketState.IN_SERVICE
            ticket.start_tick = tick
            ticket.employee = employee
            employee.ticket = ticket
            self.in_service.append(ticket)
            started.append(ticket)

            if self.log is not None:
                self.log(
                    f"[{tick}] {employee.label} takes ticket {ticket.id} "
                    f"({ticket.difficulty.value}, {ticket.duration} ticks, "
                    f"efficiency {efficiency:.3f})"
                )
        return started

    def complete(self, tick: int) -> List[Ticket]:
        """Solve in-service tickets whose duration has elapsed.

        Returns:
            Tickets solved this tick
        """
        solved = []
        remaining = []
        for ticket in self.in_service:
            if ticket.start_tick + ticket.duration == tick:
                ticket.state = TicketState.SOLVED
                ticket.solved_tick = tick
                ticket.solved_by = ticket.employee
                ticket.employee.ticket = None
                ticket.employee = None
                solved.append(ticket)
                if self.log is not None:
                    self.log(f"[{tick}] {ticket.solved_by.label} solved ticket {ticket.id}")
            else:
                remaining.append(ticket)
        self.in_service = remaining
        return solved
