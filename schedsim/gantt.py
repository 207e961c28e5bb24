from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import TimeSlice

CELL_WIDTH = 8


def render_gantt(slices: List[TimeSlice]) -> str:
    """
    Plain-text Gantt chart: one ``|  pid  |`` cell per slice, then the start
    time of every slice followed by the stop time of the last one.
    """
    if not slices:
        return "Gantt schedule\n(no execution)"

    cells = "|"
    for sl in slices:
        pid = str(sl.pid)
        padding = " " * ((CELL_WIDTH - len(pid)) // 2)
        cells += f"{padding}{pid}{padding}|"

    marks = "\t".join(str(sl.start) for sl in slices) + f"\t{slices[-1].stop}"

    return "\n".join(["Gantt schedule", cells, marks])


def build_rich_gantt(slices: List[TimeSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.

    Slices are drawn in the order given, one column per time unit; gaps
    between slices are left blank.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            pid_to_color[pid] = colors[len(pid_to_color) % len(colors)]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = str(slices[0].start)
    last_time = slices[0].start

    for sl in slices:
        idle_gap = sl.start - last_time
        if idle_gap > 0:
            timeline.append(" " * idle_gap)
            labels.append(" " * idle_gap)
            time_marks += f"{sl.start:>3}"

        width = max(1, sl.duration)
        label = f"P{sl.pid}"

        timeline.append(" " * width, style=f"on {pid_color(sl.pid)}")
        labels.append(label[:width].ljust(width), style="bold")

        last_time = sl.stop
        time_marks += f"{last_time:>3}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
