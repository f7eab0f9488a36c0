from __future__ import annotations

from typing import Dict, Sequence

from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import DiskScheduleResult, ExecutionBlock, SimulationStep

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def build_rich_gantt(blocks: Sequence[ExecutionBlock]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not blocks:
        return Panel("No execution", title="Gantt Chart"), ""

    blocks = sorted(blocks, key=lambda b: (b.start_time, b.end_time))
    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            pid_to_color[pid] = COLORS[len(pid_to_color) % len(COLORS)]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = "0"
    last_time = 0

    for block in blocks:
        idle_gap = block.start_time - last_time
        if idle_gap > 0:
            timeline.append(" " * idle_gap)
            labels.append(" " * idle_gap)
            last_time = block.start_time
            time_marks += f"{last_time:>3}"

        width = max(1, block.duration)
        timeline.append(" " * width, style=f"on {pid_color(block.pid)}")
        labels.append(block.pid[:width].ljust(width), style="bold")

        last_time = block.end_time
        time_marks += f"{last_time:>3}"

    grid = Table.grid(padding=(0, 0))
    grid.add_row(timeline)
    grid.add_row(labels)

    return Panel.fit(grid, title="Gantt Chart"), time_marks


def build_frame_table(steps: Sequence[SimulationStep], title: str = "Memory frames") -> Table:
    """
    One column per reference, one row per frame, plus a hit/fault row.
    Newly loaded pages are highlighted.
    """
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("", style="bold")
    for step in steps:
        table.add_column(str(step.page_request), justify="center")

    frame_count = len(steps[0].frames) if steps else 0
    for index in range(frame_count):
        cells = []
        for step in steps:
            frame = step.frames[index]
            if frame.is_empty:
                cells.append(Text("-", style="dim"))
            elif step.page_fault and frame.page == step.page_request:
                cells.append(Text(str(frame.page), style="bold red"))
            else:
                cells.append(Text(str(frame.page)))
        table.add_row(f"F{index}", *cells)

    table.add_row(
        "",
        *[Text("F", style="red") if s.page_fault else Text("H", style="green") for s in steps],
    )
    return table


def build_seek_table(result: DiskScheduleResult) -> Table:
    table = Table(title=f"{result.algorithm} head movement", box=box.SIMPLE_HEAVY)
    table.add_column("Step", justify="right")
    table.add_column("Track", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Cumulative", justify="right")

    cumulative = 0
    previous = result.head
    for index, track in enumerate(result.sequence):
        distance = abs(track - previous)
        cumulative += distance
        table.add_row(str(index), str(track), str(distance), str(cumulative))
        previous = track
    return table


def render_seek_path(result: DiskScheduleResult, disk_size: int, width: int = 50) -> str:
    """
    Text sketch of the head path, one row per visited track scaled to ``width``.
    """
    if disk_size <= 1:
        return "\n".join(f"{t:>5} *" for t in result.sequence)

    rows = []
    for track in result.sequence:
        column = round(track * (width - 1) / (disk_size - 1))
        rows.append(f"{track:>5} |" + " " * column + "*")
    return "\n".join(rows)
