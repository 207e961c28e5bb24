from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class InvalidWorkloadError(ValueError):
    """Raised when a process list cannot be simulated (empty, or a burst <= 0)."""


@dataclass(frozen=True)
class Process:
    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 0


@dataclass
class SimulationState:
    """
    Per-process bookkeeping filled in while one algorithm runs.

    ``exit_time`` stays 0 until the process finishes; bursts are always
    positive so no process can legitimately finish at time 0.
    """

    waiting_time: int = 0
    turnaround_time: int = 0
    exit_time: int = 0

    @property
    def finished(self) -> bool:
        return self.exit_time != 0


@dataclass
class TimeSlice:
    """
    One uninterrupted stretch of execution for a process in the Gantt chart.
    """

    pid: int
    start: int
    stop: int

    @property
    def duration(self) -> int:
        return self.stop - self.start


@dataclass
class ProcessRow:
    pid: int
    priority: int
    burst: int
    arrival: int
    waiting: int
    turnaround: int
    exit: int


@dataclass
class ScheduleStats:
    avg_wait: float
    avg_turnaround: float
    throughput: float


@dataclass
class ScheduleResult:
    algorithm: str
    timeline: List[TimeSlice] = field(default_factory=list)
    rows: List[ProcessRow] = field(default_factory=list)
    stats: Optional[ScheduleStats] = None
    quantum: Optional[int] = None
