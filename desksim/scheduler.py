"""
Shift scheduler: moves employees through their daily shift phases.
"""

from typing import Callable, Iterable, List, Optional

from desksim.config import BoundaryConditions
from desksim.fatigue import FatigueModel
from desksim.models import Employee, EmployeeState


class ShiftScheduler:
    """Sets each employee's activity state for the current tick.

    Within a shift window of length L, offset o since shift start:
    o < warm_up is WARMING_UP, o >= L - clean_up is CLEANING_UP for an
    idle employee, otherwise ACTIVE. Off shift is INACTIVE. An employee
    still serving a ticket stays ACTIVE until it is solved, even past
    the shift end.
    """

    def __init__(
        self,
        employees: Iterable[Employee],
        conditions: BoundaryConditions,
        log: Optional[Callable[[str], None]] = None,
    ):
        self.employees: List[Employee] = sorted(employees, key=lambda e: e.id)
        self.day_length = conditions.day_length
        self.warm_up = conditions.warm_up_duration
        self.clean_up = conditions.clean_up_duration
        self.log = log

    def phase(self, employee: Employee, tick: int) -> EmployeeState:
        """Shift phase of an idle employee at `tick`."""
        phases = []
        for shift in employee.shifts:
            offset = shift.offset(tick, self.day_length)
            if offset is None:
                continue
            length = shift.length(self.day_length)
            if offset < self.warm_up:
                phases.append(EmployeeState.WARMING_UP)
            elif offset >= length - self.clean_up:
                phases.append(EmployeeState.CLEANING_UP)
            else:
                phases.append(EmployeeState.ACTIVE)

        # Overlapping shifts of one employee: the most productive phase wins
        for state in (EmployeeState.ACTIVE, EmployeeState.WARMING_UP, EmployeeState.CLEANING_UP):
            if state in phases:
                return state
        return EmployeeState.INACTIVE

    def update(self, tick: int):
        """Apply shift transitions for `tick`."""
        for employee in self.employees:
            if employee.is_idle:
                new_state = self.phase(employee, tick)
            else:
                new_state = EmployeeState.ACTIVE

            if new_state is employee.state:
                continue

            if new_state is EmployeeState.INACTIVE:
                FatigueModel.rest(employee)
            if self.log is not None:
                self.log(
                    f"[{tick}] {employee.label} {employee.state.value} -> {new_state.value}"
                )
            employee.state = new_state

    def available(self) -> List[Employee]:
        """ACTIVE idle employees in tie-break order."""
        return [
            e for e in self.employees
            if e.state is EmployeeState.ACTIVE and e.is_idle
        ]

    def count(self, state: EmployeeState) -> int:
        return sum(1 for e in self.employees if e.state is state)
