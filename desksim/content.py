"""
Loaders for the simulation inputs: employee types, workshifts and the
ticket generation plan (JSON files).
"""

import json
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

import numpy as np

from desksim.config import DAY_LENGTH
from desksim.models import (
    ConfigurationError,
    Employee,
    EmployeeType,
    SupportLevel,
    TicketSpec,
    Workshift,
)


def _read_json(path):
    path = Path(path)
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"File not found: {path}") from None
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from None


def _require(entry: Dict, key: str, source: str):
    if key not in entry:
        raise ConfigurationError(f"{source}: missing field {key!r} in {entry}")
    return entry[key]


class EmployeeTypeCatalog:
    """Employee types by name.

    File format::

        [{"name": "agent", "levels": ["1st"], "hourly_rate": 35.0}, ...]
    """

    def __init__(self, types: Sequence[EmployeeType] = ()):
        self.types: Dict[str, EmployeeType] = {}
        for employee_type in types:
            self.add(employee_type)

    def add(self, employee_type: EmployeeType):
        if employee_type.name in self.types:
            raise ConfigurationError(f"Duplicate employee type {employee_type.name!r}")
        if not employee_type.levels:
            raise ConfigurationError(f"Employee type {employee_type.name!r} has no levels")
        if employee_type.hourly_rate < 0:
            raise ConfigurationError(f"Employee type {employee_type.name!r} has a negative rate")
        self.types[employee_type.name] = employee_type

    def load(self, path) -> "EmployeeTypeCatalog":
        for entry in _read_json(path):
            levels = frozenset(
                SupportLevel.parse(level)
                for level in _require(entry, "levels", "employee types")
            )
            self.add(EmployeeType(
                name=_require(entry, "name", "employee types"),
                levels=levels,
                hourly_rate=float(_require(entry, "hourly_rate", "employee types")),
            ))
        return self

    def __getitem__(self, name: str) -> EmployeeType:
        try:
            return self.types[name]
        except KeyError:
            raise ConfigurationError(f"Unknown employee type {name!r}") from None

    def __len__(self):
        return len(self.types)


class WorkshiftRoster:
    """Workshifts and the employees assigned to them.

    File format (start/end in minutes of day)::

        [{"name": "early", "start": 360, "end": 840,
          "employees": [{"type": "agent", "count": 3},
                        {"type": "expert", "id": "dana"}]}]

    Employees get sequential ids in roster order. A named employee that
    appears in several shifts is one employee.
    """

    def __init__(self, catalog: EmployeeTypeCatalog, day_length: int = DAY_LENGTH):
        self.catalog = catalog
        self.day_length = day_length
        self.workshifts: List[Workshift] = []
        self.employees: List[Employee] = []
        self._named: Dict[str, Employee] = {}

    def _new_employee(self, employee_type: EmployeeType, name: Optional[str] = None) -> Employee:
        employee = Employee(id=len(self.employees), employee_type=employee_type, name=name)
        self.employees.append(employee)
        return employee

    def add_shift(self, name: str, start: int, end: int) -> Workshift:
        for value in (start, end):
            if not 0 <= value < self.day_length:
                raise ConfigurationError(
                    f"Shift {name!r}: {value} is not a minute of the day"
                )
        if start == end:
            raise ConfigurationError(f"Shift {name!r} starts and ends at {start}")
        shift = Workshift(name=name, start=start, end=end)
        self.workshifts.append(shift)
        return shift

    def assign(self, shift: Workshift, type_name: str, count: int = 1, name: Optional[str] = None):
        """Assign employees of a type to a shift.

        Args:
            shift: Target shift
            type_name: Employee type name from the catalog
            count: Number of anonymous employees
            name: Named employee (shared across shifts); count is ignored
        """
        employee_type = self.catalog[type_name]
        if name is not None:
            employee = self._named.get(name)
            if employee is None:
                employee = self._new_employee(employee_type, name)
                self._named[name] = employee
            elif employee.employee_type is not employee_type:
                raise ConfigurationError(f"Employee {name!r} listed with two types")
            employees = [employee]
        else:
            if count < 0:
                raise ConfigurationError(f"Shift {shift.name!r}: negative employee count")
            employees = [self._new_employee(employee_type) for _ in range(count)]

        for employee in employees:
            shift.employees.append(employee)
            employee.shifts.append(shift)

    def load(self, path) -> "WorkshiftRoster":
        for entry in _read_json(path):
            shift = self.add_shift(
                name=entry.get("name", f"shift-{len(self.workshifts)}"),
                start=int(_require(entry, "start", "workshifts")),
                end=int(_require(entry, "end", "workshifts")),
            )
            for assignment in entry.get("employees", []):
                self.assign(
                    shift,
                    _require(assignment, "type", "workshifts"),
                    count=int(assignment.get("count", 1)),
                    name=assignment.get("id"),
                )
        return self

    def __iter__(self) -> Iterator[Workshift]:
        return iter(self.workshifts)

    def __len__(self):
        return len(self.workshifts)


class TicketGenerationPlan:
    """Planned ticket arrivals.

    File format (tick counted from the start of the run, level optional)::

        {"days": 7, "tickets": [{"tick": 5, "level": "1st"}, {"tick": 9}]}
    """

    def __init__(self, tickets: Sequence[TicketSpec] = (), days: Optional[int] = None):
        self.tickets: List[TicketSpec] = sorted(tickets, key=lambda spec: spec.tick)
        self._days = days

    @property
    def total_tickets(self) -> int:
        return len(self.tickets)

    @property
    def number_of_days(self) -> int:
        """Declared day count, else the days spanned by the arrivals."""
        if self._days is not None:
            return self._days
        if not self.tickets:
            return 0
        return self.tickets[-1].tick // DAY_LENGTH + 1

    def tickets_at(self, tick: int) -> List[TicketSpec]:
        return [spec for spec in self.tickets if spec.tick == tick]

    def load(self, path) -> "TicketGenerationPlan":
        data = _read_json(path)
        specs = []
        for entry in _require(data, "tickets", "ticket plan"):
            tick = int(_require(entry, "tick", "ticket plan"))
            if tick < 0:
                raise ConfigurationError(f"ticket plan: negative tick {tick}")
            level = entry.get("level")
            specs.append(TicketSpec(
                tick=tick,
                difficulty=SupportLevel.parse(level) if level is not None else None,
            ))
        self.tickets = sorted(specs, key=lambda spec: spec.tick)
        if data.get("days") is not None:
            self._days = int(data["days"])
        return self

    def save(self, path) -> str:
        """Write the plan as JSON.

        Returns:
            Path to saved file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "days": self.number_of_days,
            "tickets": [
                {"tick": spec.tick, "level": spec.difficulty.value if spec.difficulty else None}
                for spec in self.tickets
            ],
        }
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        return str(path)

    @classmethod
    def from_hourly_rates(
        cls,
        hourly_rates: Sequence[float],
        days: int,
        random_seed: Optional[int] = None,
        day_length: int = DAY_LENGTH,
    ) -> "TicketGenerationPlan":
        """Draw Poisson arrivals from a tickets-per-hour profile.

        Args:
            hourly_rates: Expected tickets per hour, one entry per hour of day
            days: Number of days to generate
            random_seed: Random seed for reproducibility
            day_length: Ticks per day

        Returns:
            Plan with unpinned difficulty
        """
        hours_per_day = day_length // 60
        if len(hourly_rates) != hours_per_day:
            raise ConfigurationError(
                f"Expected {hours_per_day} hourly rates, got {len(hourly_rates)}"
            )
        rng = np.random.default_rng(random_seed)
        specs = []
        for day in range(days):
            for hour, rate in enumerate(hourly_rates):
                if rate <= 0:
                    continue
                start = day * day_length + hour * 60
                # Exponential interarrival times within the hour
                t = rng.exponential(60.0 / rate)
                while t < 60:
                    specs.append(TicketSpec(tick=start + int(t)))
                    t += rng.exponential(60.0 / rate)
        return cls(specs, days=days)
