"""
Tests for the ticket backlog and dispatching.
"""

import numpy as np

from desksim.accounting import Accounting
from desksim.config import BoundaryConditions
from desksim.dispatcher import Dispatcher, TicketQueue
from desksim.fatigue import FatigueModel
from desksim.models import Employee, EmployeeState, SupportLevel, Ticket, TicketState
from desksim.service_time import ServiceTimeModel


def make_dispatcher(queue, seed=0):
    conditions = BoundaryConditions()
    return Dispatcher(
        queue,
        ServiceTimeModel(conditions, np.random.default_rng(seed)),
        FatigueModel(conditions),
    )


def active_employee(employee_id, employee_type):
    return Employee(id=employee_id, employee_type=employee_type, state=EmployeeState.ACTIVE)


def test_queue_is_fifo_per_level(agent_type):
    queue = TicketQueue()
    for i in range(3):
        queue.admit(Ticket(id=i, arrival_tick=i, difficulty=SupportLevel.FIRST))

    employee = active_employee(0, agent_type)

    assert [queue.pop_for(employee).id for _ in range(3)] == [0, 1, 2]
    assert queue.pop_for(employee) is None


def test_native_level_preferred(engineer_type):
    queue = TicketQueue()
    queue.admit(Ticket(id=0, arrival_tick=0, difficulty=SupportLevel.FIRST))
    queue.admit(Ticket(id=1, arrival_tick=5, difficulty=SupportLevel.SECOND))
    engineer = active_employee(0, engineer_type)

    assert engineer_type.native_level is SupportLevel.SECOND
    assert queue.pop_for(engineer).id == 1
    assert queue.pop_for(engineer).id == 0


def test_unqualified_employee_gets_nothing(agent_type):
    queue = TicketQueue()
    queue.admit(Ticket(id=0, arrival_tick=0, difficulty=SupportLevel.SECOND))

    assert queue.pop_for(active_employee(0, agent_type)) is None
    assert queue.depth(SupportLevel.SECOND) == 1


def test_lowest_id_wins_tie(agent_type):
    queue = TicketQueue()
    ticket = Ticket(id=0, arrival_tick=0, difficulty=SupportLevel.FIRST)
    queue.admit(ticket)
    dispatcher = make_dispatcher(queue)
    employees = [active_employee(0, agent_type), active_employee(1, agent_type)]

    started = dispatcher.assign(3, employees)

    assert started == [ticket]
    assert ticket.employee is employees[0]
    assert ticket.state is TicketState.IN_SERVICE
    assert ticket.start_tick == 3
    assert ticket.duration >= 1
    assert employees[0].ticket is ticket
    assert employees[1].is_idle


def test_employee_serves_one_ticket_at_a_time(agent_type):
    queue = TicketQueue()
    for i in range(2):
        queue.admit(Ticket(id=i, arrival_tick=0, difficulty=SupportLevel.FIRST))
    dispatcher = make_dispatcher(queue)
    employee = active_employee(0, agent_type)

    dispatcher.assign(0, [employee])
    dispatcher.assign(1, [employee])

    assert len(dispatcher.in_service) == 1
    assert len(queue) == 1


def test_complete_solves_on_due_tick(agent_type):
    queue = TicketQueue()
    ticket = Ticket(id=0, arrival_tick=0, difficulty=SupportLevel.FIRST)
    queue.admit(ticket)
    dispatcher = make_dispatcher(queue)
    employee = active_employee(0, agent_type)
    dispatcher.assign(0, [employee])
    due = ticket.start_tick + ticket.duration

    assert dispatcher.complete(due - 1) == []
    assert dispatcher.complete(due) == [ticket]
    assert ticket.state is TicketState.SOLVED
    assert ticket.solved_tick == due
    assert ticket.solved_by is employee
    assert ticket.employee is None
    assert employee.is_idle
    assert dispatcher.in_service == []


def test_accounting_books_solved_ticket(agent_type):
    employee = active_employee(0, agent_type)
    ticket = Ticket(id=0, arrival_tick=0, difficulty=SupportLevel.FIRST, duration=30)
    ticket.solved_by = employee
    accounting = Accounting()

    cost = accounting.book(ticket)

    assert cost == 15.0
    assert accounting.total_expenses == 15.0
    assert accounting.total_working_hours == 0.5
    assert accounting.average_hourly_wage == 30.0


def test_wait_time_runs_from_arrival_to_start(agent_type):
    queue = TicketQueue()
    ticket = Ticket(id=0, arrival_tick=0, difficulty=SupportLevel.FIRST)
    queue.admit(ticket)
    dispatcher = make_dispatcher(queue)

    assert ticket.wait_time is None

    dispatcher.assign(3, [active_employee(0, agent_type)])

    assert ticket.start_tick == 3
    assert ticket.wait_time == 3
