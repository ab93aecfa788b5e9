"""
Metrics computation and reporting for support desk runs.
Summarizes ticket outcomes and plots queue and staffing over time.
"""

import json
import re
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

from desksim import config  # noqa: E402
from desksim.models import SupportLevel, Ticket  # noqa: E402
from desksim.simulation import SimulationSummary  # noqa: E402

TICKET_COLUMNS = [
    "id",
    "arrival_tick",
    "level",
    "state",
    "start_tick",
    "wait_time",
    "duration",
    "solved_tick",
    "employee_id",
    "employee_type",
    "hourly_rate",
]


def ticket_dataframe(tickets: Sequence[Ticket]) -> pd.DataFrame:
    """One row per ticket."""
    if not tickets:
        return pd.DataFrame(columns=TICKET_COLUMNS)

    rows = []
    for t in tickets:
        employee = t.employee or t.solved_by
        rows.append({
            "id": t.id,
            "arrival_tick": t.arrival_tick,
            "level": t.difficulty.value,
            "state": t.state.value,
            "start_tick": t.start_tick,
            "wait_time": t.wait_time,
            "duration": t.duration,
            "solved_tick": t.solved_tick,
            "employee_id": employee.id if employee else None,
            "employee_type": employee.employee_type.name if employee else None,
            "hourly_rate": employee.employee_type.hourly_rate if employee else None,
        })
    return pd.DataFrame(rows, columns=TICKET_COLUMNS)


class ReportWriter:
    """Compute run metrics and write reports and plots."""

    def __init__(
        self,
        tickets: Sequence[Ticket],
        summary: SimulationSummary,
        datapoints: pd.DataFrame,
        output_dir: str = config.REPORT_DIR,
        plot_dir: str = config.PLOT_DIR,
    ):
        """Initialize report writer.

        Args:
            tickets: All tickets of the run
            summary: Summary of the run
            datapoints: DataFrame from DatapointLog
            output_dir: Output directory for reports
            plot_dir: Output directory for plots
        """
        self.tickets = ticket_dataframe(tickets)
        self.summary = summary
        self.datapoints = datapoints
        self.output_dir = Path(output_dir)
        self.plot_dir = Path(plot_dir)
        self.run_id = f"{summary.marker}_run{summary.run}"

    def compute_wait_times(self) -> Dict[str, Dict[str, float]]:
        """Wait from arrival to service start, per level.

        Returns:
            Dict level -> {mean_wait, stdev_wait, max_wait, samples}
        """
        result = {}
        for level in SupportLevel:
            waits = self.tickets.loc[
                (self.tickets["level"] == level.value) & self.tickets["wait_time"].notna(),
                "wait_time",
            ].to_numpy(dtype=float)
            if len(waits) == 0:
                result[level.value] = {
                    "mean_wait": 0.0, "stdev_wait": 0.0, "max_wait": 0.0, "samples": 0,
                }
                continue
            result[level.value] = {
                "mean_wait": float(np.mean(waits)),
                "stdev_wait": float(np.std(waits)),
                "max_wait": float(np.max(waits)),
                "samples": int(len(waits)),
            }
        return result

    def compute_durations(self) -> Dict[str, float]:
        """Mean resolution duration of solved tickets per level."""
        solved = self.tickets[self.tickets["solved_tick"].notna()]
        result = {}
        for level in SupportLevel:
            durations = solved.loc[solved["level"] == level.value, "duration"]
            result[level.value] = float(durations.mean()) if len(durations) else 0.0
        return result

    def compute_hours_by_type(self) -> Dict[str, float]:
        """Working hours per employee type."""
        solved = self.tickets[self.tickets["solved_tick"].notna()]
        if solved.empty:
            return {}
        hours = solved.groupby("employee_type")["duration"].sum() / 60.0
        return {name: float(value) for name, value in hours.items()}

    def compute_costs_by_type(self) -> Dict[str, float]:
        """Expenses per employee type, booked like Accounting."""
        solved = self.tickets[self.tickets["solved_tick"].notna()]
        if solved.empty:
            return {}
        costs = solved["duration"] / 60.0 * solved["hourly_rate"]
        costs = costs.groupby(solved["employee_type"]).sum()
        return {name: float(value) for name, value in costs.items()}

    def compute_queue_peaks(self) -> Tuple[int, int]:
        """Largest 1st and 2nd level backlog seen in the datapoints."""
        if self.datapoints.empty:
            return 0, 0
        return (
            int(self.datapoints["queued_1st_level"].max()),
            int(self.datapoints["queued_2nd_level"].max()),
        )

    def generate_report(self) -> Dict:
        """Generate the run report.

        Returns:
            Report dictionary
        """
        peak_1st, peak_2nd = self.compute_queue_peaks()
        return {
            "run_id": self.run_id,
            "summary": self.summary.to_dict(),
            "wait_times": self.compute_wait_times(),
            "durations": self.compute_durations(),
            "working_hours_by_type": self.compute_hours_by_type(),
            "costs_by_type": self.compute_costs_by_type(),
            "queue": {
                "peak_1st_level": peak_1st,
                "peak_2nd_level": peak_2nd,
            },
        }

    def save_report_json(self, report: Dict) -> str:
        """Save report as JSON file.

        Returns:
            Path to saved file
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"report_{self.run_id}.json"

        # Handle non-serializable values
        def default_serializer(obj):
            if isinstance(obj, np.ndarray):
                return obj.tolist()
            if isinstance(obj, (np.integer, np.floating)):
                return float(obj)
            return str(obj)

        with open(path, "w") as f:
            json.dump(report, f, indent=2, default=default_serializer)

        return str(path)

    def _save_figure(self, name: str) -> str:
        path = self.plot_dir / f"{name}_{self.run_id}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        plt.tight_layout()
        plt.savefig(path, dpi=150)
        plt.close()
        return str(path)

    def plot_queue_depth(self) -> str:
        """Plot backlog per level and tickets in service over time.

        Returns:
            Path to saved figure, "" without datapoints
        """
        if self.datapoints.empty:
            return ""

        df = self.datapoints
        fig, ax = plt.subplots(figsize=(12, 6))
        ax.plot(df["tick"], df["queued_1st_level"], label="Queued 1st level", linewidth=2)
        ax.plot(df["tick"], df["queued_2nd_level"], label="Queued 2nd level", linewidth=2)
        ax.plot(df["tick"], df["in_service"], label="In service", linewidth=1, alpha=0.7)
        ax.set_xlabel("Simulation Time (min)")
        ax.set_ylabel("Tickets")
        ax.set_title("Backlog Over Time")
        ax.legend()
        ax.grid(True, alpha=0.3)

        return self._save_figure("queue")

    def plot_staffing(self) -> str:
        """Plot employee activity states over time.

        Returns:
            Path to saved figure, "" without datapoints
        """
        if self.datapoints.empty:
            return ""

        df = self.datapoints
        fig, axes = plt.subplots(2, 1, figsize=(12, 10))

        axes[0].stackplot(
            df["tick"],
            df["warming_up"],
            df["active"],
            df["cleaning_up"],
            labels=["Warming up", "Active", "Cleaning up"],
            alpha=0.8,
        )
        axes[0].plot(df["tick"], df["idle"], color="k", linestyle="--", label="Idle")
        axes[0].set_ylabel("Employees")
        axes[0].set_title("Staffing")
        axes[0].legend(loc="upper right")
        axes[0].grid(True, alpha=0.3)

        axes[1].plot(df["tick"], df["total_expenses"], linewidth=2)
        axes[1].set_ylabel("Total Expenses")
        axes[1].set_xlabel("Simulation Time (min)")
        axes[1].set_title("Accumulated Costs")
        axes[1].grid(True, alpha=0.3)

        return self._save_figure("staffing")


def summaries_dataframe(summaries: List[SimulationSummary]) -> pd.DataFrame:
    """Summaries of several runs as one DataFrame."""
    return pd.DataFrame([s.to_dict() for s in summaries])


def clear_reports(output_dir: str, plot_dir: str, marker: str) -> int:
    """Delete report JSON files and plots of a marker.

    Returns:
        Number of deleted files
    """
    tag = re.escape(marker)
    patterns = [
        (Path(output_dir), re.compile(rf"^report_{tag}_run\d+\.json$")),
        (Path(plot_dir), re.compile(rf"^(queue|staffing)_{tag}_run\d+\.png$")),
    ]
    deleted = 0
    for directory, pattern in patterns:
        if not directory.is_dir():
            continue
        for path in directory.iterdir():
            if pattern.match(path.name):
                path.unlink()
                deleted += 1
    return deleted
