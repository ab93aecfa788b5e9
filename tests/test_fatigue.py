"""
Tests for the fatigue model.
"""

from desksim.config import BoundaryConditions
from desksim.fatigue import FatigueModel
from desksim.models import Employee, Ticket, SupportLevel


def test_full_efficiency_before_decay_start():
    model = FatigueModel(BoundaryConditions())

    assert model.efficiency(0) == 1.0
    assert model.efficiency(model.start_ticks - 1) == 1.0


def test_decay_compounds_per_interval():
    conditions = BoundaryConditions()
    model = FatigueModel(conditions)
    start = conditions.decay_start_ticks
    interval = conditions.decay_interval

    assert abs(model.efficiency(start) - 0.99) < 1e-12
    assert abs(model.efficiency(start + interval - 1) - 0.99) < 1e-12
    assert abs(model.efficiency(start + interval) - (1 - 0.01 * 1.2)) < 1e-12
    assert abs(model.efficiency(start + 2 * interval) - (1 - 0.01 * 1.2 ** 2)) < 1e-12


def test_efficiency_lower_after_three_intervals():
    conditions = BoundaryConditions()
    model = FatigueModel(conditions)
    start = conditions.decay_start_ticks

    fresh = model.efficiency(start - 1)
    tired = model.efficiency(start + 3 * conditions.decay_interval)

    assert tired < fresh


def test_efficiency_non_increasing_and_floored():
    conditions = BoundaryConditions()
    model = FatigueModel(conditions)

    values = [model.efficiency(t) for t in range(0, 5000)]

    assert all(b <= a for a, b in zip(values, values[1:]))
    assert min(values) >= conditions.efficiency_floor
    assert model.efficiency(10 ** 7) == conditions.efficiency_floor


def test_no_decay_without_start_value():
    model = FatigueModel(BoundaryConditions(decay_start_value=0.0))

    assert model.efficiency(10 ** 6) == 1.0


def test_record_tick_counts_service_and_resets_when_idle(agent_type):
    model = FatigueModel(BoundaryConditions())
    employee = Employee(id=0, employee_type=agent_type)
    employee.ticket = Ticket(id=0, arrival_tick=0, difficulty=SupportLevel.FIRST)

    for _ in range(5):
        model.record_tick(employee)
    assert employee.fatigue == 5

    employee.ticket = None
    model.record_tick(employee)
    assert employee.fatigue == 0
