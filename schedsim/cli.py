from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from .algorithms import ALGORITHMS, DEFAULT_QUANTUM, run_all
from .gantt import build_rich_gantt, render_gantt
from .metrics import summarize_rows, total_busy_time
from .models import ScheduleResult
from .workload_io import load_workload

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, SJF with priority, Round Robin).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Simulate a workload and print a report per algorithm.")
    run_parser.add_argument("workload", help="Path to CSV (id,burst,arrival[,priority]) or JSON workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        nargs="+",
        choices=list(ALGORITHMS),
        default=list(ALGORITHMS),
        help="Algorithms to run, in order (default: fcfs sjf priority rr).",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum for round-robin (default: {DEFAULT_QUANTUM}).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Print the Gantt chart as plain text instead of a colored panel.",
    )
    run_parser.add_argument(
        "--parallel",
        action="store_true",
        help="Run the algorithms on a thread pool.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run every algorithm on the same workload and compare average metrics.",
    )
    compare_parser.add_argument("workload", help="Path to CSV or JSON workload file.")
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum for round-robin (default: {DEFAULT_QUANTUM}).",
    )

    return parser


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    console.print(Rule(result.algorithm))
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    stats = result.stats
    footers = {
        "Wait": f"Average\n{stats.avg_wait:.2f}" if stats else "",
        "Turnaround": f"Average\n{stats.avg_turnaround:.2f}" if stats else "",
        "Exit": f"Throughput\n{stats.throughput:.2f}/t" if stats else "",
    }

    table = Table(title="Schedule table", box=box.SIMPLE_HEAVY, show_footer=stats is not None)
    for h in ["ID", "Priority", "Burst", "Arrival", "Wait", "Turnaround", "Exit"]:
        justify = "center" if h in {"ID", "Priority"} else "right"
        table.add_column(h, justify=justify, footer=footers.get(h, ""))

    for row in result.rows:
        table.add_row(
            str(row.pid),
            str(row.priority),
            str(row.burst),
            str(row.arrival),
            str(row.waiting),
            str(row.turnaround),
            str(row.exit),
        )

    console.print(table)
    console.print()


def _print_comparison(results: List[ScheduleResult], console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Throughput", justify="right")
    summary_table.add_column("CPU busy", justify="right")

    for result in results:
        summary = summarize_rows(result.rows)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            f"{result.stats.throughput:.3f}" if result.stats else "",
            str(total_busy_time(result.timeline)),
        )

    console.print(summary_table)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    console = Console()

    try:
        processes = load_workload(Path(args.workload))
        if args.command == "run":
            results = run_all(processes, quantum=args.quantum, algorithms=args.algorithm, parallel=args.parallel)
            for result in results:
                _print_result(result, console, plain=args.plain)
            return 0

        if args.command == "compare":
            _print_comparison(run_all(processes, quantum=args.quantum), console)
            return 0
    except (ValueError, OSError) as exc:
        # WorkloadError and InvalidWorkloadError are ValueErrors.
        logger.debug("run on %s failed", args.workload, exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
