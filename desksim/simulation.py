"""
Simulation manager: drives the tick pipeline of the support desk.

Per tick: shift transitions -> ticket arrivals -> dispatch -> completion
-> accounting -> datapoint emission.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from itertools import groupby
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from desksim.accounting import Accounting
from desksim.clock import Clock
from desksim.config import RANDOM_SEED, BoundaryConditions
from desksim.dispatcher import Dispatcher, TicketQueue
from desksim.fatigue import FatigueModel
from desksim.models import (
    ConfigurationError,
    Employee,
    EmployeeState,
    SupportLevel,
    Ticket,
    TicketSpec,
    TicketState,
    Workshift,
)
from desksim.scheduler import ShiftScheduler
from desksim.service_time import ServiceTimeModel


class RunPhase(Enum):
    INIT = "init"
    RUNNING = "running"
    FINALIZING = "finalizing"
    DONE = "done"


@dataclass(frozen=True)
class SimulationDatapoint:
    """Operational snapshot of one tick."""
    marker: str
    run: int
    tick: int
    day: int
    queued_1st_level: int
    queued_2nd_level: int
    in_service: int
    warming_up: int
    active: int
    cleaning_up: int
    idle: int
    solved: int
    deployed: int
    total_expenses: float
    total_working_hours: float

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class SimulationSummary:
    """End-of-run aggregate of ticket outcomes and costs.

    Ticket counts cover the tickets that arrived within the simulated
    days. Planned tickets due after the last tick are counted only in
    unarrived_tickets; planned_tickets is the size of the whole plan.
    """
    marker: str
    run: int
    solved_tickets: int
    deployed_tickets: int
    started_tickets: int
    total_tickets: int
    open_1st_level_tickets: int
    open_2nd_level_tickets: int
    average_ticket_solve_duration: float
    total_costs: float
    total_working_hours: float
    average_hourly_wage: float
    unsolved_tickets: int
    unarrived_tickets: int = 0

    @property
    def planned_tickets(self) -> int:
        return self.total_tickets + self.unarrived_tickets

    @classmethod
    def from_run(
        cls,
        marker: str,
        run: int,
        tickets: Sequence[Ticket],
        accounting: Accounting,
        unarrived_tickets: int = 0,
    ) -> "SimulationSummary":
        solved = [t for t in tickets if t.solved]
        open_tickets = [t for t in tickets if not t.solved]
        return cls(
            marker=marker,
            run=run,
            solved_tickets=len(solved),
            deployed_tickets=sum(1 for t in tickets if t.deployed),
            started_tickets=sum(1 for t in tickets if t.started),
            total_tickets=len(tickets),
            open_1st_level_tickets=sum(
                1 for t in open_tickets if t.difficulty is SupportLevel.FIRST
            ),
            open_2nd_level_tickets=sum(
                1 for t in open_tickets if t.difficulty is SupportLevel.SECOND
            ),
            average_ticket_solve_duration=(
                float(np.mean([t.duration for t in solved])) if solved else 0.0
            ),
            total_costs=accounting.total_expenses,
            total_working_hours=accounting.total_working_hours,
            average_hourly_wage=accounting.average_hourly_wage,
            unsolved_tickets=len(open_tickets),
            unarrived_tickets=unarrived_tickets,
        )

    def to_dict(self) -> Dict:
        return asdict(self)


class SimulationManager:
    """Runs one support desk simulation.

    Inputs are read-only: the employees (reached through the workshift
    roster) and the ticket arrival plan. Datapoints and debug lines leave
    the engine only through subscribed listeners.
    """

    def __init__(
        self,
        marker: str,
        run: int,
        workshifts: Sequence[Workshift],
        ticket_plan: Sequence[TicketSpec],
        days: int,
        conditions: Optional[BoundaryConditions] = None,
        random_seed: Optional[int] = RANDOM_SEED,
    ):
        """Initialize simulation manager.

        Args:
            marker: Tag of this run
            run: Run number within the tag
            workshifts: Shift roster; employees are collected from it
            ticket_plan: Planned arrivals
            days: Days to simulate
            conditions: Boundary conditions (defaults from config)
            random_seed: Seed of the shared random stream
        """
        self.marker = marker
        self.run_number = run
        self.workshifts = list(workshifts) if workshifts is not None else []
        self.ticket_plan = list(ticket_plan) if ticket_plan is not None else []
        self.days = days
        self.conditions = conditions if conditions is not None else BoundaryConditions()
        self.random_seed = random_seed

        self.phase = RunPhase.INIT
        self.tickets: List[Ticket] = []
        self.employees: List[Employee] = []
        self.accounting = Accounting()
        self.summary: Optional[SimulationSummary] = None
        self.unarrived_tickets = 0

        self._datapoint_listeners: List[Callable[[SimulationDatapoint], None]] = []
        self._log_listeners: List[Callable[[str], None]] = []
        self._cancelled = False

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def subscribe_datapoint(self, listener: Callable[[SimulationDatapoint], None]):
        self._datapoint_listeners.append(listener)

    def subscribe_log(self, listener: Callable[[str], None]):
        self._log_listeners.append(listener)

    def cancel(self):
        """Stop at the next tick boundary; the run still finalizes."""
        self._cancelled = True

    def _log(self, message: str):
        for listener in self._log_listeners:
            listener(message)

    @property
    def _log_hook(self) -> Optional[Callable[[str], None]]:
        return self._log if self._log_listeners else None

    # ------------------------------------------------------------------
    # Init
    # ------------------------------------------------------------------

    def _collect_employees(self) -> List[Employee]:
        employees: Dict[int, Employee] = {}
        for shift in self.workshifts:
            for employee in shift.employees:
                employees.setdefault(employee.id, employee)
        return sorted(employees.values(), key=lambda e: e.id)

    def _validate(self):
        self.conditions.validate()

        if self.days is None or self.days <= 0:
            raise ConfigurationError(f"Number of days must be positive, got {self.days}")
        if not self.workshifts:
            raise ConfigurationError("Workshift roster is empty")

        day_length = self.conditions.day_length
        productive = self.conditions.warm_up_duration + self.conditions.clean_up_duration
        for shift in self.workshifts:
            if not (0 <= shift.start < day_length and 0 <= shift.end < day_length):
                raise ConfigurationError(f"Shift {shift.name!r} lies outside the day")
            length = shift.length(day_length)
            if length == 0:
                raise ConfigurationError(f"Shift {shift.name!r} has no duration")
            if length <= productive:
                raise ConfigurationError(
                    f"Shift {shift.name!r} ({length} ticks) is too short for "
                    f"warm-up and clean-up ({productive} ticks)"
                )

        for spec in self.ticket_plan:
            if spec.tick < 0:
                raise ConfigurationError(f"Ticket arrival tick must not be negative: {spec}")

    def _init(self):
        self._validate()

        rng = np.random.default_rng(self.random_seed)
        self.employees = self._collect_employees()
        if not self.employees:
            raise ConfigurationError("Workshift roster has no employees")
        for employee in self.employees:
            employee.state = EmployeeState.INACTIVE
            employee.fatigue = 0
            employee.ticket = None

        self.clock = Clock(self.days, self.conditions.day_length)
        self.fatigue = FatigueModel(self.conditions)
        self.service_time = ServiceTimeModel(self.conditions, rng)
        self.scheduler = ShiftScheduler(self.employees, self.conditions, log=self._log_hook)
        self.queue = TicketQueue()
        self.dispatcher = Dispatcher(
            self.queue, self.service_time, self.fatigue, log=self._log_hook
        )

        horizon = self.clock.total_ticks
        plan = sorted(self.ticket_plan, key=lambda spec: spec.tick)
        in_horizon = [spec for spec in plan if spec.tick < horizon]
        self.unarrived_tickets = len(plan) - len(in_horizon)
        self._arrivals: Dict[int, List[TicketSpec]] = {
            tick: list(specs) for tick, specs in groupby(in_horizon, key=lambda s: s.tick)
        }
        if self.unarrived_tickets:
            self._log(f"{self.unarrived_tickets} planned tickets arrive after the horizon")

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def _admit(self, tick: int):
        for spec in self._arrivals.get(tick, ()):
            difficulty = spec.difficulty
            if difficulty is None:
                difficulty = self.service_time.draw_level()
            ticket = Ticket(id=len(self.tickets), arrival_tick=tick, difficulty=difficulty)
            self.tickets.append(ticket)
            self.queue.admit(ticket)

    def _deploy(self, tick: int):
        deployed = 0
        for ticket in self.tickets:
            if ticket.state is TicketState.SOLVED:
                ticket.state = TicketState.DEPLOYED
                deployed += 1
        if deployed:
            self._log(f"[{tick}] deployed {deployed} tickets")

    def step(self, tick: int):
        """Run the pipeline of one tick."""
        if self.clock.is_day_boundary():
            self._deploy(tick)

        self.scheduler.update(tick)
        self._admit(tick)
        self.dispatcher.assign(tick, self.scheduler.available())

        for employee in self.employees:
            if employee.state is not EmployeeState.INACTIVE:
                self.fatigue.record_tick(employee)

        for ticket in self.dispatcher.complete(tick):
            self.accounting.book(ticket)

    def datapoint(self, tick: int) -> SimulationDatapoint:
        solved = deployed = 0
        for ticket in self.tickets:
            if ticket.solved:
                solved += 1
            if ticket.deployed:
                deployed += 1

        idle = sum(
            1 for e in self.employees
            if e.state is EmployeeState.ACTIVE and e.is_idle
        )
        return SimulationDatapoint(
            marker=self.marker,
            run=self.run_number,
            tick=tick,
            day=self.clock.day,
            queued_1st_level=self.queue.depth(SupportLevel.FIRST),
            queued_2nd_level=self.queue.depth(SupportLevel.SECOND),
            in_service=len(self.dispatcher.in_service),
            warming_up=self.scheduler.count(EmployeeState.WARMING_UP),
            active=self.scheduler.count(EmployeeState.ACTIVE),
            cleaning_up=self.scheduler.count(EmployeeState.CLEANING_UP),
            idle=idle,
            solved=solved,
            deployed=deployed,
            total_expenses=self.accounting.total_expenses,
            total_working_hours=self.accounting.total_working_hours,
        )

    def _emit(self, tick: int):
        if not self._datapoint_listeners:
            return
        if tick % self.conditions.datapoint_interval != 0:
            return
        point = self.datapoint(tick)
        for listener in self._datapoint_listeners:
            listener(point)

    def _tick_process(self):
        """SimPy process: one pipeline pass per tick."""
        while not self.clock.exhausted:
            if self._cancelled:
                self._log(f"[{self.clock.tick}] run cancelled")
                return
            tick = self.clock.tick
            self.step(tick)
            self._emit(tick)
            yield self.clock.advance()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self) -> SimulationSummary:
        """Run all ticks and compute the summary.

        Returns:
            SimulationSummary of the run

        Raises:
            ConfigurationError: on invalid inputs, before any tick
        """
        if self.phase is not RunPhase.INIT:
            raise RuntimeError("A SimulationManager runs only once")

        self._init()
        self._log(
            f"Run {self.marker}#{self.run_number}: {self.days} days, "
            f"{len(self.employees)} employees, {len(self.ticket_plan)} planned tickets"
        )

        self.phase = RunPhase.RUNNING
        self.clock.run(self._tick_process())

        self.phase = RunPhase.FINALIZING
        self.summary = SimulationSummary.from_run(
            self.marker,
            self.run_number,
            self.tickets,
            self.accounting,
            unarrived_tickets=self.unarrived_tickets,
        )
        self.phase = RunPhase.DONE
        return self.summary
