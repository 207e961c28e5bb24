from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from .metrics import compute_stats
from .models import (
    InvalidWorkloadError,
    Process,
    ProcessRow,
    ScheduleResult,
    SimulationState,
    TimeSlice,
)

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 2


@dataclass
class _Job:
    """
    A process together with the mutable state one run keeps for it.

    ``remaining`` counts down from the burst; ``process.burst_time`` keeps the
    total burst for reporting.
    """

    process: Process
    remaining: int
    state: SimulationState = field(default_factory=SimulationState)

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def finished(self) -> bool:
        return self.state.finished


def validate_processes(processes: Sequence[Process]) -> None:
    if not processes:
        raise InvalidWorkloadError("at least one process is required")
    for p in processes:
        if p.burst_time <= 0:
            raise InvalidWorkloadError(f"process {p.pid} has non-positive burst {p.burst_time}")
        if p.arrival_time < 0:
            raise InvalidWorkloadError(f"process {p.pid} has negative arrival {p.arrival_time}")


def _row(p: Process, waiting: int, turnaround: int, exit_time: int) -> ProcessRow:
    return ProcessRow(
        pid=p.pid,
        priority=p.priority,
        burst=p.burst_time,
        arrival=p.arrival_time,
        waiting=waiting,
        turnaround=turnaround,
        exit=exit_time,
    )


def schedule_fcfs(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive), in the order given.

    The list is not re-sorted: callers wanting arrival order must pass it in
    arrival order. Waiting time is only recomputed for processes arriving
    after time 0; a zero-arrival process keeps the previous process's wait.
    """
    validate_processes(processes)

    service_time = 0
    waiting_time = 0
    last_completion = 0
    timeline: List[TimeSlice] = []
    rows: List[ProcessRow] = []

    for p in processes:
        if p.arrival_time > 0:
            waiting_time = max(0, service_time - p.arrival_time)

        start = waiting_time + p.arrival_time
        turnaround = p.burst_time + waiting_time
        completion = p.burst_time + p.arrival_time + waiting_time
        last_completion = completion

        service_time += p.burst_time
        timeline.append(TimeSlice(pid=p.pid, start=start, stop=completion))
        rows.append(_row(p, waiting_time, turnaround, completion))

    result = ScheduleResult(
        algorithm="First-come, first-serve",
        timeline=timeline,
        rows=rows,
        stats=compute_stats(rows, last_completion),
    )
    logger.info("FCFS finished %d processes at t=%d", len(rows), last_completion)
    return result


def _pick_candidate(
    jobs: List[_Job],
    current: Optional[_Job],
    time: int,
    prefer_priority_on_tie: bool,
) -> Optional[_Job]:
    ready = [j for j in jobs if j is not current and not j.finished and j.process.arrival_time <= time]
    if not ready:
        return None

    # Shortest remaining burst; first in input order on ties (min is stable).
    if prefer_priority_on_tie:
        best = min(ready, key=lambda j: (j.remaining, -j.process.priority))
    else:
        best = min(ready, key=lambda j: j.remaining)

    if current is None or current.finished:
        return best
    if best.remaining < current.remaining:
        return best
    if (
        prefer_priority_on_tie
        and best.remaining == current.remaining
        and best.process.priority > current.process.priority
    ):
        return best
    return None


def _shortest_remaining(
    processes: Sequence[Process],
    algorithm: str,
    prefer_priority_on_tie: bool,
) -> ScheduleResult:
    """
    Step the clock one unit at a time, preempting whenever a ready process has
    a shorter remaining burst than the running one.

    Each tick first charges the previous unit: the running process loses one
    unit of remaining burst, every other arrived, unfinished process gains one
    unit of waiting. Then the next process is chosen.
    """
    validate_processes(processes)

    jobs = [_Job(process=p, remaining=p.burst_time) for p in processes]
    timeline: List[TimeSlice] = []
    current: Optional[_Job] = None
    time = 0
    start = 0

    while not all(j.finished for j in jobs):
        switch = False

        for job in jobs:
            if job.finished or job.process.arrival_time >= time:
                continue
            if job is current:
                job.remaining -= 1
                if job.remaining == 0:
                    job.state.exit_time = time
                    switch = True
            else:
                job.state.waiting_time += 1

        candidate = _pick_candidate(jobs, current, time, prefer_priority_on_tie)
        if candidate is not None:
            switch = True

        if switch:
            if current is not None and time > start:
                timeline.append(TimeSlice(pid=current.pid, start=start, stop=time))
            if candidate is not None:
                logger.debug("t=%d: dispatch %s (remaining %d)", time, candidate.pid, candidate.remaining)
            current = candidate
            start = time

        time += 1

    rows: List[ProcessRow] = []
    for job in jobs:
        job.state.turnaround_time = job.state.waiting_time + job.process.burst_time
        rows.append(_row(job.process, job.state.waiting_time, job.state.turnaround_time, job.state.exit_time))

    # The loop leaves the clock one tick past the last completion.
    result = ScheduleResult(
        algorithm=algorithm,
        timeline=timeline,
        rows=rows,
        stats=compute_stats(rows, time - 1),
    )
    logger.info("%s finished %d processes at t=%d", algorithm, len(rows), time - 1)
    return result


def schedule_sjf(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Job First, preemptive (shortest remaining time first).

    Equal remaining bursts never preempt: the running process keeps the CPU.
    """
    return _shortest_remaining(processes, "Shortest-job-first", prefer_priority_on_tie=False)


def schedule_sjf_priority(processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Preemptive SJF where a tie on remaining burst goes to the larger priority.
    """
    return _shortest_remaining(processes, "Priority", prefer_priority_on_tie=True)


def schedule_rr(
    processes: Sequence[Process],
    quantum: Optional[int] = DEFAULT_QUANTUM,
    idle_until_arrival: bool = True,
) -> ScheduleResult:
    """
    Round Robin as a repeated sweep over the processes in arrival order.

    Every pass visits each unfinished process once and runs it for at most
    one quantum. There is no ready queue: with ``idle_until_arrival`` the
    clock jumps forward to a process's arrival before it runs, without it a
    process may be run before it has arrived.

    Rows come back in arrival order; the caller's list is left untouched.
    """
    if quantum is None:
        quantum = DEFAULT_QUANTUM
    if quantum <= 0:
        raise ValueError("Round Robin requires a positive quantum")
    validate_processes(processes)

    ordered = sorted(processes, key=lambda p: p.arrival_time)
    jobs = [_Job(process=p, remaining=p.burst_time) for p in ordered]

    current_time = 0
    timeline: List[TimeSlice] = []

    while any(j.remaining > 0 for j in jobs):
        for job in jobs:
            if job.remaining == 0:
                continue
            if idle_until_arrival and current_time < job.process.arrival_time:
                current_time = job.process.arrival_time

            run_time = min(quantum, job.remaining)
            timeline.append(TimeSlice(pid=job.pid, start=current_time, stop=current_time + run_time))
            current_time += run_time
            job.remaining -= run_time

            if job.remaining == 0:
                job.state.exit_time = current_time
                job.state.turnaround_time = current_time - job.process.arrival_time

    rows: List[ProcessRow] = []
    for job in jobs:
        job.state.waiting_time = job.state.turnaround_time - job.process.burst_time
        rows.append(_row(job.process, job.state.waiting_time, job.state.turnaround_time, job.state.exit_time))

    result = ScheduleResult(
        algorithm="Round-robin",
        timeline=timeline,
        rows=rows,
        stats=compute_stats(rows, current_time),
        quantum=quantum,
    )
    logger.info("Round-robin (q=%d) finished %d processes at t=%d", quantum, len(rows), current_time)
    return result


ALGORITHMS: Dict[str, Callable[..., ScheduleResult]] = {
    "fcfs": schedule_fcfs,
    "sjf": schedule_sjf,
    "priority": schedule_sjf_priority,
    "rr": schedule_rr,
}


def run_algorithm(name: str, processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested algorithm on a private copy of ``processes``.
    Quantum is only used by round-robin.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    logger.debug("running %s on %d processes", name, len(processes))
    func = ALGORITHMS[name]
    if name == "rr":
        return func(list(processes), quantum=quantum)
    return func(list(processes))


def run_all(
    processes: Sequence[Process],
    quantum: Optional[int] = DEFAULT_QUANTUM,
    algorithms: Optional[Sequence[str]] = None,
    parallel: bool = False,
) -> List[ScheduleResult]:
    """
    Run several algorithms on the same workload, each on its own copy.

    Results come back in the order the algorithms were named, also when
    they run on a thread pool.
    """
    names = list(algorithms) if algorithms else list(ALGORITHMS)
    validate_processes(processes)

    if not parallel:
        return [run_algorithm(name, processes, quantum=quantum) for name in names]

    with ThreadPoolExecutor(max_workers=len(names), thread_name_prefix="schedsim") as executor:
        futures = [executor.submit(run_algorithm, name, processes, quantum) for name in names]
        return [f.result() for f in futures]
