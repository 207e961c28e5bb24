"""
CPU scheduling simulator.

Runs a fixed process list through FCFS, preemptive SJF, SJF with a priority
tie-break and Round Robin, producing a Gantt timeline, per-process timings
and average statistics for each.
"""

__all__ = ["algorithms", "cli", "models"]
