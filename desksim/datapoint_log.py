"""
Datapoint recording for simulation runs.
Stores datapoints to CSV and maintains an in-memory log.
"""

import csv
import re
from pathlib import Path
from typing import List

import pandas as pd

from desksim import config
from desksim.simulation import SimulationDatapoint


class DatapointLog:
    """Collects datapoints of one run in memory and in a CSV file."""

    def __init__(
        self,
        output_dir: str = config.DATAPOINT_DIR,
        marker: str = "default",
        run: int = 0,
        write_csv: bool = True,
    ):
        """Initialize datapoint log.

        Args:
            output_dir: Directory to store CSV files
            marker: Tag of the run (used in filename)
            run: Run number (used in filename)
            write_csv: Also append datapoints to CSV
        """
        self.output_dir = Path(output_dir)
        self.marker = marker
        self.run = run
        self.write_csv = write_csv
        self.datapoints: List[SimulationDatapoint] = []

        self.csv_path = self.output_dir / csv_filename(marker, run)
        if self.write_csv:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self._init_csv()

    def _init_csv(self):
        """Initialize CSV file with header."""
        with open(self.csv_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=config.DATAPOINT_COLUMNS)
            writer.writeheader()

    def record(self, point: SimulationDatapoint):
        """Log a single datapoint to memory and CSV.

        Usable directly as a SimulationManager datapoint listener.
        """
        self.datapoints.append(point)

        if self.write_csv:
            with open(self.csv_path, "a", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=config.DATAPOINT_COLUMNS)
                writer.writerow(point.to_dict())

    def get_dataframe(self) -> pd.DataFrame:
        """Return in-memory datapoints as pandas DataFrame."""
        if not self.datapoints:
            return pd.DataFrame(columns=config.DATAPOINT_COLUMNS)

        return pd.DataFrame([p.to_dict() for p in self.datapoints])

    def save_csv(self) -> str:
        """Return path to CSV file."""
        return str(self.csv_path)


def csv_filename(marker: str, run: int) -> str:
    return f"datapoints_{marker}_run{run}.csv"


def next_run_number(output_dir: str, marker: str) -> int:
    """Highest recorded run number for a marker plus one."""
    pattern = re.compile(rf"^datapoints_{re.escape(marker)}_run(\d+)\.csv$")
    runs = [
        int(match.group(1))
        for path in Path(output_dir).glob("datapoints_*.csv")
        for match in [pattern.match(path.name)]
        if match
    ]
    return max(runs, default=0) + 1


def clear_marker(output_dir: str, marker: str) -> int:
    """Delete all recorded datapoint files of a marker.

    Returns:
        Number of deleted files
    """
    pattern = re.compile(rf"^datapoints_{re.escape(marker)}_run\d+\.csv$")
    deleted = 0
    for path in Path(output_dir).glob("datapoints_*.csv"):
        if pattern.match(path.name):
            path.unlink()
            deleted += 1
    return deleted
