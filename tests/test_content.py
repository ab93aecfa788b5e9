"""
Tests for loading employee types, workshifts and ticket plans.
"""

import json

import pytest

from desksim.content import EmployeeTypeCatalog, TicketGenerationPlan, WorkshiftRoster
from desksim.models import ConfigurationError, SupportLevel, TicketSpec


def write_json(path, data):
    path.write_text(json.dumps(data))
    return str(path)


@pytest.fixture
def catalog(tmp_path):
    path = write_json(tmp_path / "types.json", [
        {"name": "agent", "levels": ["1st"], "hourly_rate": 30},
        {"name": "engineer", "levels": ["1st", "2nd"], "hourly_rate": 60.5},
    ])
    return EmployeeTypeCatalog().load(path)


def test_load_employee_types(catalog):
    assert len(catalog) == 2
    assert catalog["agent"].levels == frozenset({SupportLevel.FIRST})
    assert catalog["engineer"].native_level is SupportLevel.SECOND
    assert catalog["engineer"].hourly_rate == 60.5


def test_duplicate_employee_type_rejected(tmp_path):
    path = write_json(tmp_path / "types.json", [
        {"name": "agent", "levels": ["1st"], "hourly_rate": 30},
        {"name": "agent", "levels": ["2nd"], "hourly_rate": 30},
    ])

    with pytest.raises(ConfigurationError):
        EmployeeTypeCatalog().load(path)


def test_unknown_level_rejected(tmp_path):
    path = write_json(tmp_path / "types.json", [
        {"name": "agent", "levels": ["3rd"], "hourly_rate": 30},
    ])

    with pytest.raises(ConfigurationError):
        EmployeeTypeCatalog().load(path)


def test_missing_file_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        EmployeeTypeCatalog().load(tmp_path / "missing.json")


def test_load_workshifts(tmp_path, catalog):
    path = write_json(tmp_path / "shifts.json", [
        {"name": "early", "start": 360, "end": 840, "employees": [
            {"type": "agent", "count": 2},
            {"type": "engineer", "id": "dana"},
        ]},
        {"name": "night", "start": 1320, "end": 360, "employees": [
            {"type": "engineer", "id": "dana"},
        ]},
    ])

    roster = WorkshiftRoster(catalog).load(path)

    assert len(roster) == 2
    assert [e.id for e in roster.employees] == [0, 1, 2]
    dana = roster.employees[2]
    assert dana.name == "dana"
    assert [s.name for s in dana.shifts] == ["early", "night"]
    assert roster.workshifts[1].employees == [dana]


def test_unknown_employee_type_in_shift(tmp_path, catalog):
    path = write_json(tmp_path / "shifts.json", [
        {"name": "early", "start": 360, "end": 840, "employees": [{"type": "manager"}]},
    ])

    with pytest.raises(ConfigurationError):
        WorkshiftRoster(catalog).load(path)


@pytest.mark.parametrize("start,end", [(100, 100), (-5, 100), (0, 1440)])
def test_invalid_shift_window(catalog, start, end):
    with pytest.raises(ConfigurationError):
        WorkshiftRoster(catalog).add_shift("bad", start, end)


def test_load_ticket_plan(tmp_path):
    path = write_json(tmp_path / "plan.json", {
        "days": 3,
        "tickets": [
            {"tick": 50, "level": "2nd"},
            {"tick": 5, "level": "1st"},
            {"tick": 50},
        ],
    })

    plan = TicketGenerationPlan().load(path)

    assert plan.total_tickets == 3
    assert plan.number_of_days == 3
    assert plan.tickets[0] == TicketSpec(5, SupportLevel.FIRST)
    assert plan.tickets_at(50) == [
        TicketSpec(50, SupportLevel.SECOND),
        TicketSpec(50, None),
    ]


def test_plan_days_inferred_from_arrivals():
    plan = TicketGenerationPlan([TicketSpec(10), TicketSpec(1440 * 2 + 3)])

    assert plan.number_of_days == 3
    assert TicketGenerationPlan().number_of_days == 0


def test_plan_save_and_load(tmp_path):
    plan = TicketGenerationPlan([TicketSpec(1, SupportLevel.FIRST), TicketSpec(7)], days=1)

    loaded = TicketGenerationPlan().load(plan.save(tmp_path / "plan.json"))

    assert loaded.tickets == plan.tickets
    assert loaded.number_of_days == 1


def test_plan_from_hourly_rates():
    rates = [0] * 8 + [12] * 10 + [0] * 6

    plan = TicketGenerationPlan.from_hourly_rates(rates, days=2, random_seed=4)
    again = TicketGenerationPlan.from_hourly_rates(rates, days=2, random_seed=4)

    assert plan.tickets == again.tickets
    assert plan.number_of_days == 2
    assert plan.total_tickets > 100
    for spec in plan.tickets:
        minute = spec.tick % 1440
        assert 8 * 60 <= minute < 18 * 60
        assert spec.difficulty is None


def test_plan_from_hourly_rates_needs_full_day():
    with pytest.raises(ConfigurationError):
        TicketGenerationPlan.from_hourly_rates([1.0] * 12, days=1)
