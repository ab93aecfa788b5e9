"""
Tests for shift phases and employee state transitions.
"""

from desksim.config import BoundaryConditions
from desksim.models import EmployeeState, SupportLevel, Ticket
from desksim.scheduler import ShiftScheduler


def test_shift_phases(make_shift, agent_type):
    shift = make_shift(100, 200, agent_type)
    employee = shift.employees[0]
    scheduler = ShiftScheduler([employee], BoundaryConditions())

    expected = {
        99: EmployeeState.INACTIVE,
        100: EmployeeState.WARMING_UP,
        114: EmployeeState.WARMING_UP,
        115: EmployeeState.ACTIVE,
        184: EmployeeState.ACTIVE,
        185: EmployeeState.CLEANING_UP,
        199: EmployeeState.CLEANING_UP,
        200: EmployeeState.INACTIVE,
        1440 + 120: EmployeeState.ACTIVE,
    }
    for tick, state in expected.items():
        assert scheduler.phase(employee, tick) is state, tick


def test_shift_wrapping_midnight(make_shift, engineer_type):
    shift = make_shift(1320, 360, engineer_type)
    employee = shift.employees[0]
    scheduler = ShiftScheduler([employee], BoundaryConditions())

    assert shift.length(1440) == 480
    assert scheduler.phase(employee, 1330) is EmployeeState.WARMING_UP
    assert scheduler.phase(employee, 10) is EmployeeState.ACTIVE
    assert scheduler.phase(employee, 350) is EmployeeState.CLEANING_UP
    assert scheduler.phase(employee, 360) is EmployeeState.INACTIVE
    assert scheduler.phase(employee, 1440 + 1330) is EmployeeState.WARMING_UP


def test_update_and_available(make_shift, agent_type):
    shift = make_shift(0, 100, agent_type, agent_type)
    scheduler = ShiftScheduler(shift.employees, BoundaryConditions(warm_up_duration=0))

    scheduler.update(0)

    assert scheduler.count(EmployeeState.ACTIVE) == 2
    assert [e.id for e in scheduler.available()] == [0, 1]


def test_busy_employee_keeps_working_past_shift_end(make_shift, agent_type):
    shift = make_shift(0, 100, agent_type)
    employee = shift.employees[0]
    scheduler = ShiftScheduler([employee], BoundaryConditions(warm_up_duration=0))
    scheduler.update(50)
    employee.ticket = Ticket(id=0, arrival_tick=40, difficulty=SupportLevel.FIRST)

    scheduler.update(90)
    assert employee.state is EmployeeState.ACTIVE
    scheduler.update(120)
    assert employee.state is EmployeeState.ACTIVE
    assert scheduler.available() == []

    employee.ticket = None
    scheduler.update(121)
    assert employee.state is EmployeeState.INACTIVE


def test_fatigue_resets_at_shift_end(make_shift, agent_type):
    shift = make_shift(0, 100, agent_type)
    employee = shift.employees[0]
    scheduler = ShiftScheduler([employee], BoundaryConditions(warm_up_duration=0))
    scheduler.update(50)
    employee.fatigue = 42

    scheduler.update(95)
    assert employee.state is EmployeeState.CLEANING_UP
    assert employee.fatigue == 42

    scheduler.update(100)
    assert employee.state is EmployeeState.INACTIVE
    assert employee.fatigue == 0


def test_transitions_are_logged(make_shift, agent_type):
    shift = make_shift(0, 100, agent_type)
    lines = []
    scheduler = ShiftScheduler(shift.employees, BoundaryConditions(), log=lines.append)

    scheduler.update(0)
    scheduler.update(1)

    assert lines == ["[0] employee-0 inactive -> warming_up"]
