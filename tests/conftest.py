"""
Shared fixtures for the support desk tests.
"""

from pathlib import Path
import sys

import pytest

# Ensure root directory is in path for package import
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from desksim.config import BoundaryConditions  # noqa: E402
from desksim.models import Employee, EmployeeType, SupportLevel, Workshift  # noqa: E402

FIRST_ONLY = frozenset({SupportLevel.FIRST})
BOTH_LEVELS = frozenset({SupportLevel.FIRST, SupportLevel.SECOND})


@pytest.fixture
def agent_type():
    return EmployeeType(name="agent", levels=FIRST_ONLY, hourly_rate=30.0)


@pytest.fixture
def engineer_type():
    return EmployeeType(name="engineer", levels=BOTH_LEVELS, hourly_rate=60.0)


@pytest.fixture
def make_shift():
    """Factory: shift with one employee per given type, ids continuing across calls."""
    counter = {"next_id": 0}

    def _make_shift(start, end, *employee_types, name="shift"):
        shift = Workshift(name=name, start=start, end=end)
        for employee_type in employee_types:
            employee = Employee(id=counter["next_id"], employee_type=employee_type)
            counter["next_id"] += 1
            employee.shifts.append(shift)
            shift.employees.append(employee)
        return shift

    return _make_shift


@pytest.fixture
def no_warm_up():
    return BoundaryConditions(warm_up_duration=0, datapoint_interval=1)
