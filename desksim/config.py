"""
Configuration for the support desk simulation.

The module-level constants are defaults only. The engine receives an
immutable BoundaryConditions value at construction.
"""

from dataclasses import dataclass

from desksim.models import ConfigurationError

# ============================================================================
# CLOCK
# ============================================================================

# All durations in ticks (1 tick = 1 minute)
DAY_LENGTH = 1440

# ============================================================================
# SHIFTS
# ============================================================================

EMPLOYEE_WARM_UP_DURATION = 15  # not yet productive at shift start
EMPLOYEE_CLEAN_UP_DURATION = 15  # no new work before shift end

# ============================================================================
# TICKET RESOLUTION TIME (normal distribution per support level)
# ============================================================================

TICKET_RESOLVE_TIME_1ST_LEVEL_MEAN = 10
TICKET_RESOLVE_TIME_1ST_LEVEL_STDDEV = 20

TICKET_RESOLVE_TIME_2ND_LEVEL_MEAN = 60
TICKET_RESOLVE_TIME_2ND_LEVEL_STDDEV = 45

# Odds of 1st:2nd level for unpinned tickets, P(1st) = F / (F + 1)
LEVEL_DISTRIBUTION_FACTOR = 1.5

# ============================================================================
# EMPLOYEE FATIGUE
# ============================================================================

# decay = START_VALUE * FACTOR ** (whole intervals past START_TICKS)
# efficiency = max(FLOOR, 1 - decay)
EMPLOYEE_EFFICIENCY_DECAY_START_TICKS = 360
EMPLOYEE_EFFICIENCY_DECAY_INTERVAL = 15
EMPLOYEE_EFFICIENCY_DECAY_START_VALUE = 0.01
EMPLOYEE_EFFICIENCY_DECAY_FACTOR = 1.2
EMPLOYEE_EFFICIENCY_FLOOR = 0.1

# ============================================================================
# SIMULATION
# ============================================================================

DATAPOINT_INTERVAL = 15  # ticks between datapoints
RANDOM_SEED = 42

# ============================================================================
# OUTPUT
# ============================================================================

OUTPUT_DIR = "outputs"
DATAPOINT_DIR = f"{OUTPUT_DIR}/datapoints"
PLOT_DIR = f"{OUTPUT_DIR}/plots"
REPORT_DIR = f"{OUTPUT_DIR}/reports"

# CSV datapoint columns
DATAPOINT_COLUMNS = [
    "marker",
    "run",
    "tick",
    "day",
    "queued_1st_level",
    "queued_2nd_level",
    "in_service",
    "warming_up",
    "active",
    "cleaning_up",
    "idle",
    "solved",
    "deployed",
    "total_expenses",
    "total_working_hours",
]


@dataclass(frozen=True)
class BoundaryConditions:
    """Tunable constants of one simulation run."""

    day_length: int = DAY_LENGTH
    warm_up_duration: int = EMPLOYEE_WARM_UP_DURATION
    clean_up_duration: int = EMPLOYEE_CLEAN_UP_DURATION
    resolve_time_1st_mean: float = TICKET_RESOLVE_TIME_1ST_LEVEL_MEAN
    resolve_time_1st_stddev: float = TICKET_RESOLVE_TIME_1ST_LEVEL_STDDEV
    resolve_time_2nd_mean: float = TICKET_RESOLVE_TIME_2ND_LEVEL_MEAN
    resolve_time_2nd_stddev: float = TICKET_RESOLVE_TIME_2ND_LEVEL_STDDEV
    level_distribution_factor: float = LEVEL_DISTRIBUTION_FACTOR
    decay_start_ticks: int = EMPLOYEE_EFFICIENCY_DECAY_START_TICKS
    decay_interval: int = EMPLOYEE_EFFICIENCY_DECAY_INTERVAL
    decay_start_value: float = EMPLOYEE_EFFICIENCY_DECAY_START_VALUE
    decay_factor: float = EMPLOYEE_EFFICIENCY_DECAY_FACTOR
    efficiency_floor: float = EMPLOYEE_EFFICIENCY_FLOOR
    datapoint_interval: int = DATAPOINT_INTERVAL

    def validate(self):
        """Check value ranges.

        Raises:
            ConfigurationError: if any value is out of range
        """
        positive = {
            "day_length": self.day_length,
            "decay_interval": self.decay_interval,
            "datapoint_interval": self.datapoint_interval,
            "resolve_time_1st_stddev": self.resolve_time_1st_stddev,
            "resolve_time_2nd_stddev": self.resolve_time_2nd_stddev,
            "level_distribution_factor": self.level_distribution_factor,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")

        non_negative = {
            "warm_up_duration": self.warm_up_duration,
            "clean_up_duration": self.clean_up_duration,
            "decay_start_ticks": self.decay_start_ticks,
            "decay_start_value": self.decay_start_value,
        }
        for name, value in non_negative.items():
            if value < 0:
                raise ConfigurationError(f"{name} must not be negative, got {value}")

        if self.warm_up_duration + self.clean_up_duration >= self.day_length:
            raise ConfigurationError("warm-up and clean-up do not fit into a day")
        if not 0 < self.efficiency_floor <= 1:
            raise ConfigurationError(
                f"efficiency_floor must be in (0, 1], got {self.efficiency_floor}"
            )
        if self.decay_factor < 1:
            raise ConfigurationError(
                f"decay_factor must be at least 1, got {self.decay_factor}"
            )
        return self
