from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import config
from .cpu import run_algorithm
from .disk import schedule_disk
from .metrics import summarize_paging
from .models import (
    CpuAlgorithm,
    DiskPolicy,
    DiskScheduleResult,
    PagePolicy,
    ScanDirection,
    SchedulingResult,
    SimulationStep,
)
from .paging import simulate_page_replacement
from .render import build_frame_table, build_rich_gantt, build_seek_table, render_seek_path
from .workload_io import load_workload, parse_int_sequence

logger = logging.getLogger(__name__)

CPU_CHOICES = [a.value for a in CpuAlgorithm]
PAGE_CHOICES = [p.value for p in PagePolicy]
DISK_CHOICES = [p.value for p in DiskPolicy]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ossim",
        description="Operating-system scheduling simulator: CPU scheduling, page replacement, disk scheduling.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # cpu
    cpu_parser = subparsers.add_parser("cpu", help="CPU scheduling (FCFS, SJF, SRTF, Priority, RR).")
    cpu_sub = cpu_parser.add_subparsers(dest="cpu_command", required=True)

    run_parser = cpu_sub.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        choices=CPU_CHOICES,
        help="Algorithm to use.",
    )
    run_parser.add_argument("--workload", "-w", required=True, help="Path to JSON or CSV workload file.")
    _add_cpu_options(run_parser)
    _add_step_options(run_parser)

    compare_parser = cpu_sub.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument("--workload", "-w", required=True, help="Path to JSON or CSV workload file.")
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        choices=CPU_CHOICES,
        default=CPU_CHOICES,
        help="Algorithms to compare (default: all).",
    )
    _add_cpu_options(compare_parser)

    # paging
    paging_parser = subparsers.add_parser("paging", help="Page replacement (FIFO, LRU, LFU, Optimal).")
    paging_parser.add_argument(
        "--policy",
        "-p",
        default=PagePolicy.FIFO.value,
        choices=PAGE_CHOICES,
        help="Replacement policy (default: fifo).",
    )
    paging_parser.add_argument(
        "--references",
        "-r",
        default=config.DEFAULT_PAGE_REFERENCES,
        help=f"Comma-separated page reference string (default: {config.DEFAULT_PAGE_REFERENCES}).",
    )
    paging_parser.add_argument(
        "--frames",
        "-f",
        type=int,
        default=config.DEFAULT_FRAME_COUNT,
        help=f"Number of memory frames (default: {config.DEFAULT_FRAME_COUNT}).",
    )
    paging_parser.add_argument("--compare", action="store_true", help="Compare fault counts of every policy.")
    _add_step_options(paging_parser)

    # disk
    disk_parser = subparsers.add_parser("disk", help="Disk scheduling (FCFS, SSTF, SCAN, C-SCAN).")
    disk_parser.add_argument(
        "--policy",
        "-p",
        default=DiskPolicy.FCFS.value,
        choices=DISK_CHOICES,
        help="Disk scheduling policy (default: fcfs).",
    )
    disk_parser.add_argument(
        "--requests",
        "-r",
        default=config.DEFAULT_DISK_REQUESTS,
        help=f"Comma-separated track requests (default: {config.DEFAULT_DISK_REQUESTS}).",
    )
    disk_parser.add_argument(
        "--head",
        type=int,
        default=config.DEFAULT_HEAD,
        help=f"Initial head position (default: {config.DEFAULT_HEAD}).",
    )
    disk_parser.add_argument(
        "--disk-size",
        type=int,
        default=config.DEFAULT_DISK_SIZE,
        help=f"Number of tracks (default: {config.DEFAULT_DISK_SIZE}).",
    )
    disk_parser.add_argument(
        "--direction",
        default=config.DEFAULT_SCAN_DIRECTION.value,
        choices=[d.value for d in ScanDirection],
        help="Initial sweep direction for scan / c-scan (default: right).",
    )
    disk_parser.add_argument("--compare", action="store_true", help="Compare total seek of every policy.")
    _add_step_options(disk_parser)

    return parser


def _add_cpu_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=config.DEFAULT_QUANTUM,
        help=f"Time quantum for round-robin (default: {config.DEFAULT_QUANTUM}).",
    )
    parser.add_argument(
        "--reverse-priority",
        action="store_true",
        help="Treat higher priority numbers as more important.",
    )


def _add_step_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--step",
        action="store_true",
        help="Replay the computed trace step by step in the terminal.",
    )
    parser.add_argument(
        "--step-delay",
        type=float,
        default=config.DEFAULT_STEP_DELAY,
        help=f"Seconds to wait between steps when --step is used (default: {config.DEFAULT_STEP_DELAY}).",
    )


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )


def _print_result(result: SchedulingResult) -> None:
    console = Console()

    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    headers = ["PID", "Arrive", "Burst", "Start", "Complete", "Wait", "Turnaround", "Response", "Priority"]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            p.pid,
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
            "" if p.priority is None else str(p.priority),
        )

    console.print(proc_table)
    console.print()

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{result.average_waiting_time:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.average_turnaround_time:.2f}")
    sys_table.add_row("Avg response", f"{result.average_response_time:.2f}")
    sys_table.add_row("Throughput (proc/time)", f"{result.system.throughput:.3f}")
    sys_table.add_row("CPU utilization", f"{result.system.cpu_utilization*100:.1f}%")

    console.print(sys_table)


def _animate_result(result: SchedulingResult, delay: float) -> None:
    """
    Simple time-stepped textual simulation using the computed schedule.
    """
    console = Console()
    timeline = sorted(result.timeline, key=lambda b: (b.start_time, b.end_time))
    if not timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = timeline[-1].end_time
    console.print(f"[bold]Simulating {result.algorithm}[/bold] (duration {makespan} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(makespan):
        running = next((b for b in timeline if b.start_time <= t < b.end_time), None)
        if running is None:
            console.print(f"t={t:2d}: [dim]idle[/dim]")
        else:
            bar = "█" * (t - running.start_time + 1)
            console.print(f"t={t:2d}: {running.pid} [green]{bar}[/green]")
        time.sleep(delay)


def _run_cpu(args: argparse.Namespace, console: Console) -> int:
    processes = load_workload(Path(args.workload))

    if args.cpu_command == "run":
        result = run_algorithm(
            args.algorithm, processes, quantum=args.quantum, reverse_priority=args.reverse_priority
        )
        if args.step:
            try:
                _animate_result(result, delay=args.step_delay)
            except KeyboardInterrupt:
                console.print("[yellow]Animation skipped.[/yellow]")
        _print_result(result)
        return 0

    summary_table = Table(title=f"Algorithm comparison: {args.workload}", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for alg in args.algorithms:
        result = run_algorithm(alg, processes, quantum=args.quantum, reverse_priority=args.reverse_priority)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{result.average_waiting_time:.2f}",
            f"{result.average_turnaround_time:.2f}",
            f"{result.average_response_time:.2f}",
        )

    console.print(summary_table)
    return 0


def _replay_paging(steps: Sequence[SimulationStep], delay: float, console: Console) -> None:
    for index, step in enumerate(steps, start=1):
        frames = " ".join("-" if f.is_empty else str(f.page) for f in step.frames)
        if step.page_fault:
            outcome = "[red]fault[/red]"
            if step.replaced_page is not None:
                outcome += f" (evicted {step.replaced_page})"
        else:
            outcome = "[green]hit[/green]"
        console.print(f"{index:>3}. page {step.page_request:<4} {escape('[' + frames + ']')} {outcome}")
        time.sleep(delay)


def _run_paging(args: argparse.Namespace, console: Console) -> int:
    references = parse_int_sequence(args.references)

    if args.compare:
        table = Table(title=f"Page replacement with {args.frames} frames", box=box.SIMPLE_HEAVY)
        table.add_column("Policy")
        table.add_column("Faults", justify="right")
        table.add_column("Hits", justify="right")
        table.add_column("Fault rate", justify="right")
        for policy in PagePolicy:
            summary = summarize_paging(simulate_page_replacement(references, args.frames, policy))
            table.add_row(
                policy.value.upper(), str(summary.faults), str(summary.hits), f"{summary.fault_rate*100:.1f}%"
            )
        console.print(table)
        return 0

    steps = simulate_page_replacement(references, args.frames, args.policy)
    if args.step:
        try:
            _replay_paging(steps, args.step_delay, console)
        except KeyboardInterrupt:
            console.print("[yellow]Replay skipped.[/yellow]")

    summary = summarize_paging(steps)
    console.print(build_frame_table(steps, title=f"{args.policy.upper()} with {args.frames} frames"))
    console.print(
        f"[bold]Faults:[/bold] {summary.faults}  [bold]Hits:[/bold] {summary.hits}  "
        f"[bold]Fault rate:[/bold] {summary.fault_rate*100:.1f}%"
    )
    return 0


def _replay_disk(result: DiskScheduleResult, delay: float, console: Console) -> None:
    previous = result.head
    console.print(f"head starts at {previous}")
    for track in result.sequence[1:]:
        console.print(f"  {previous:>5} -> {track:<5} (+{abs(track - previous)})")
        previous = track
        time.sleep(delay)


def _run_disk(args: argparse.Namespace, console: Console) -> int:
    requests = parse_int_sequence(args.requests)

    if args.compare:
        table = Table(title=f"Disk scheduling from head {args.head}", box=box.SIMPLE_HEAVY)
        table.add_column("Policy")
        table.add_column("Total seek", justify="right")
        table.add_column("Sequence")
        for policy in DiskPolicy:
            result = schedule_disk(args.head, requests, args.disk_size, policy, args.direction)
            table.add_row(result.algorithm, str(result.total_seek_time), " → ".join(map(str, result.sequence)))
        console.print(table)
        return 0

    result = schedule_disk(args.head, requests, args.disk_size, args.policy, args.direction)
    if args.step:
        try:
            _replay_disk(result, args.step_delay, console)
        except KeyboardInterrupt:
            console.print("[yellow]Replay skipped.[/yellow]")

    console.print(build_seek_table(result))
    console.print(render_seek_path(result, args.disk_size), highlight=False)
    console.print(f"[bold]Total seek time:[/bold] {result.total_seek_time}")
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    console = Console()

    handlers = {"cpu": _run_cpu, "paging": _run_paging, "disk": _run_disk}
    try:
        return handlers[args.command](args, console)
    except (ValueError, OSError) as exc:
        logger.debug("Command failed", exc_info=True)
        console.print(f"Error: {exc}", style="red", markup=False)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
