"""
Entities of the support desk: employee types, employees, shifts and tickets.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional


class ConfigurationError(ValueError):
    """Invalid simulation input, raised before any tick is processed."""


class SupportLevel(Enum):
    FIRST = "1st"
    SECOND = "2nd"

    @classmethod
    def parse(cls, value: str) -> "SupportLevel":
        """Parse "1st"/"2nd" (also "first"/"second", 1/2)."""
        aliases = {
            "1st": cls.FIRST, "first": cls.FIRST, "1": cls.FIRST,
            "2nd": cls.SECOND, "second": cls.SECOND, "2": cls.SECOND,
        }
        try:
            return aliases[str(value).strip().lower()]
        except KeyError:
            raise ConfigurationError(f"Unknown support level: {value!r}") from None


# Dispatch order when an employee has no ticket of its native level
LEVEL_ORDER = (SupportLevel.SECOND, SupportLevel.FIRST)


class EmployeeState(Enum):
    INACTIVE = "inactive"
    WARMING_UP = "warming_up"
    ACTIVE = "active"
    CLEANING_UP = "cleaning_up"


class TicketState(Enum):
    QUEUED = "queued"
    IN_SERVICE = "in_service"
    SOLVED = "solved"
    DEPLOYED = "deployed"


@dataclass(frozen=True)
class EmployeeType:
    """Qualification and hourly cost of a group of employees."""
    name: str
    levels: FrozenSet[SupportLevel]
    hourly_rate: float

    @property
    def native_level(self) -> SupportLevel:
        """Highest level this type is qualified for."""
        for level in LEVEL_ORDER:
            if level in self.levels:
                return level
        raise ConfigurationError(f"Employee type {self.name!r} has no levels")

    def qualified_for(self, level: SupportLevel) -> bool:
        return level in self.levels


@dataclass
class Workshift:
    """Daily recurring window [start, end) in minutes of day.

    A window with end < start wraps past midnight.
    """
    name: str
    start: int
    end: int
    employees: List["Employee"] = field(default_factory=list)

    def length(self, day_length: int) -> int:
        return (self.end - self.start) % day_length

    def offset(self, tick: int, day_length: int) -> Optional[int]:
        """Ticks since this shift's most recent start, or None when off shift."""
        since_start = (tick % day_length - self.start) % day_length
        if since_start < self.length(day_length):
            return since_start
        return None


@dataclass(eq=False)
class Employee:
    id: int
    employee_type: EmployeeType
    name: Optional[str] = None
    shifts: List[Workshift] = field(default_factory=list)
    state: EmployeeState = EmployeeState.INACTIVE
    fatigue: int = 0  # ticks of the current unbroken service run
    ticket: Optional["Ticket"] = None

    @property
    def is_idle(self) -> bool:
        return self.ticket is None

    @property
    def label(self) -> str:
        return self.name or f"employee-{self.id}"

    def __repr__(self):
        return (
            f"Employee(id={self.id}, type={self.employee_type.name!r}, "
            f"state={self.state.value}, fatigue={self.fatigue})"
        )


@dataclass(eq=False)
class Ticket:
    id: int
    arrival_tick: int
    difficulty: SupportLevel
    state: TicketState = TicketState.QUEUED
    employee: Optional[Employee] = None
    start_tick: Optional[int] = None
    duration: Optional[int] = None
    solved_tick: Optional[int] = None
    solved_by: Optional[Employee] = None

    @property
    def started(self) -> bool:
        return self.start_tick is not None

    @property
    def solved(self) -> bool:
        return self.state in (TicketState.SOLVED, TicketState.DEPLOYED)

    @property
    def deployed(self) -> bool:
        return self.state is TicketState.DEPLOYED

    @property
    def wait_time(self) -> Optional[int]:
        if self.start_tick is None:
            return None
        return self.start_tick - self.arrival_tick


@dataclass(frozen=True)
class TicketSpec:
    """A planned arrival; difficulty None is drawn when the ticket arrives."""
    tick: int
    difficulty: Optional[SupportLevel] = None
