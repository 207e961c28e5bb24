from __future__ import annotations

from typing import List

from .models import ProcessRow, ScheduleStats, TimeSlice


def compute_stats(rows: List[ProcessRow], horizon: int) -> ScheduleStats:
    """
    Average waiting and turnaround over ``rows`` plus throughput.

    ``horizon`` is the time the algorithm divides the process count by; each
    discipline picks its own (last completion, final clock, ...).
    """
    if not rows:
        raise ValueError("cannot compute statistics for an empty schedule")
    if horizon <= 0:
        raise ValueError(f"throughput horizon must be positive, got {horizon}")

    n = len(rows)
    return ScheduleStats(
        avg_wait=sum(r.waiting for r in rows) / n,
        avg_turnaround=sum(r.turnaround for r in rows) / n,
        throughput=n / horizon,
    )


def summarize_rows(rows: List[ProcessRow]) -> dict:
    """
    Return averages of the per-process timings for quick comparison.
    """
    if not rows:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0}

    n = len(rows)
    return {
        "avg_waiting": sum(r.waiting for r in rows) / n,
        "avg_turnaround": sum(r.turnaround for r in rows) / n,
    }


def total_busy_time(timeline: List[TimeSlice]) -> int:
    return sum(sl.duration for sl in timeline)
