"""
Main orchestration script for the support desk simulation.
Loads the input files, runs the simulation and reports the outcome.
"""

from pathlib import Path
import argparse
import sys

# Ensure root directory is in path for package import
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

import numpy as np  # noqa: E402

from desksim import config  # noqa: E402
from desksim.config import BoundaryConditions  # noqa: E402
from desksim.content import (  # noqa: E402
    EmployeeTypeCatalog,
    TicketGenerationPlan,
    WorkshiftRoster,
)
from desksim.datapoint_log import DatapointLog, clear_marker, next_run_number  # noqa: E402
from desksim.metrics import ReportWriter, clear_reports, summaries_dataframe  # noqa: E402
from desksim.models import ConfigurationError  # noqa: E402
from desksim.simulation import SimulationManager, SimulationSummary  # noqa: E402


def print_summary(summary: SimulationSummary):
    """Console report of one run."""
    print(f"Solved tickets: {summary.solved_tickets}/{summary.total_tickets}")
    print(f"Deployed tickets: {summary.deployed_tickets}")
    print(f"Started tickets: {summary.started_tickets}")
    print(f"Open 1st level tickets: {summary.open_1st_level_tickets}")
    print(f"Open 2nd level tickets: {summary.open_2nd_level_tickets}")
    if summary.unarrived_tickets:
        print(f"Tickets after horizon: {summary.unarrived_tickets} "
              f"(planned: {summary.planned_tickets})")
    print(f"Average Duration: {summary.average_ticket_solve_duration:.2f} min")
    print(f"Total Costs: {summary.total_costs:,.2f}")
    print(f"Total Working Hours: {summary.total_working_hours:,.0f} h")
    print(f"Average hourly wage: {summary.average_hourly_wage:,.2f}")


def run_single_simulation(args: argparse.Namespace, run: int, seed: int) -> SimulationSummary:
    """Run one simulation with freshly loaded inputs.

    Args:
        args: Parsed command line
        run: Run number within the tag
        seed: Random seed of this run

    Returns:
        Summary of the run
    """
    conditions = BoundaryConditions()

    catalog = EmployeeTypeCatalog().load(args.employeetypes)
    roster = WorkshiftRoster(catalog, day_length=conditions.day_length).load(args.workshifts)
    plan = TicketGenerationPlan().load(args.tickets)

    days = args.days if args.days is not None else plan.number_of_days
    print(f"[Run {run}] {len(catalog)} employee types, {len(roster)} workshifts, "
          f"{plan.total_tickets} tickets, {days} days")

    sm = SimulationManager(
        args.name,
        run,
        roster.workshifts,
        plan.tickets,
        days,
        conditions=conditions,
        random_seed=seed,
    )

    datapoint_log = DatapointLog(
        output_dir=str(Path(args.output_dir) / "datapoints"),
        marker=args.name,
        run=run,
        write_csv=args.save,
    )
    sm.subscribe_datapoint(datapoint_log.record)
    if args.debug:
        sm.subscribe_log(print)

    print(f"[Run {run}] Starting simulation...")
    summary = sm.run()
    print(f"[Run {run}] Simulation complete.")

    if args.save:
        print(f"[Run {run}] {len(datapoint_log.datapoints)} datapoints saved to "
              f"{datapoint_log.save_csv()}")
        writer = ReportWriter(
            sm.tickets,
            summary,
            datapoint_log.get_dataframe(),
            output_dir=str(Path(args.output_dir) / "reports"),
            plot_dir=str(Path(args.output_dir) / "plots"),
        )
        writer.save_report_json(writer.generate_report())
        writer.plot_queue_depth()
        writer.plot_staffing()
        print(f"[Run {run}] Report saved.")

    print_summary(summary)
    return summary


def run_batch_simulation(args: argparse.Namespace):
    """Run the requested number of simulations with consecutive seeds."""
    datapoint_dir = str(Path(args.output_dir) / "datapoints")

    if args.clear:
        print(f"Deleted old datapoints (if exists) ({clear_marker(datapoint_dir, args.name)})")
        deleted = clear_reports(
            str(Path(args.output_dir) / "reports"),
            str(Path(args.output_dir) / "plots"),
            args.name,
        )
        print(f"Deleted old reports and plots (if exists) ({deleted})")

    first_run = next_run_number(datapoint_dir, args.name) if args.save else 1

    print(f"Support Desk Simulation")
    print(f"=" * 50)
    print(f"  Tag: {args.name}")
    print(f"  Employee types: {args.employeetypes}")
    print(f"  Workshifts: {args.workshifts}")
    print(f"  Ticket plan: {args.tickets}")
    print(f"  Number of runs: {args.runs}")
    print(f"=" * 50)

    summaries = []
    for i in range(args.runs):
        print(f"\n--- Run {i + 1}/{args.runs} ---")
        summaries.append(run_single_simulation(args, first_run + i, args.seed + i))

    if len(summaries) < 2:
        return summaries

    df = summaries_dataframe(summaries)
    print(f"\n{'=' * 50}")
    print(f"SUMMARY")
    print(f"{'=' * 50}")
    for column, label in [
        ("solved_tickets", "Solved tickets"),
        ("unsolved_tickets", "Unsolved tickets"),
        ("average_ticket_solve_duration", "Average duration (min)"),
        ("total_costs", "Total costs"),
    ]:
        values = df[column].to_numpy(dtype=float)
        print(f"\n{label}:")
        print(f"  Mean: {np.mean(values):.2f}")
        print(f"  Std:  {np.std(values):.2f}")
        print(f"  Min:  {np.min(values):.2f}")
        print(f"  Max:  {np.max(values):.2f}")
    return summaries


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run support desk simulation")
    parser.add_argument("-e", "--employeetypes", required=True,
                        help="path to employee types json file")
    parser.add_argument("-w", "--workshifts", required=True,
                        help="path to workshifts json file")
    parser.add_argument("-t", "--tickets", required=True,
                        help="path to ticket generation plan file")
    parser.add_argument("-d", "--days", type=int, default=None,
                        help="days to simulate (default: days in ticket plan)")
    parser.add_argument("-n", "--name", required=True,
                        help="Name (tag) for the current run")
    parser.add_argument("--seed", type=int, default=config.RANDOM_SEED,
                        help=f"random seed (default: {config.RANDOM_SEED})")
    parser.add_argument("--runs", type=int, default=1,
                        help="number of runs with consecutive seeds (default: 1)")
    parser.add_argument("--output-dir", default=config.OUTPUT_DIR,
                        help=f"output directory (default: {config.OUTPUT_DIR})")
    parser.add_argument("--save", action="store_true",
                        help="store datapoints, report and plots")
    parser.add_argument("--clear", action="store_true",
                        help="delete stored datapoints, reports and plots for the tag first")
    parser.add_argument("--debug", action="store_true",
                        help="show debug output")
    return parser


def main(argv=None) -> int:
    """Entry point for the simulation."""
    args = build_parser().parse_args(argv)

    if args.clear and not args.save:
        print("You cannot clear stored data without --save")
        return 1

    try:
        run_batch_simulation(args)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
