from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .models import Process

logger = logging.getLogger(__name__)

# Accepted header names per field, first match wins.
_COLUMN_ALIASES = {
    "pid": ("pid", "id"),
    "burst_time": ("burst_time", "burst"),
    "arrival_time": ("arrival_time", "arrival"),
    "priority": ("priority",),
}


class WorkloadError(ValueError):
    """Raised when a workload file cannot be turned into processes."""


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a CSV or JSON file into a list of Process objects.

    CSV rows are ``id,burst,arrival[,priority]``; an optional header row may
    name the columns instead. JSON is a list of objects with ``pid``,
    ``arrival_time``, ``burst_time`` and optionally ``priority``.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    else:
        raise WorkloadError(f"Unsupported workload format: {suffix} (use .csv or .json)")

    logger.info("loaded %d processes from %s", len(processes), path)
    return processes


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise WorkloadError(f"{path}: invalid JSON") from exc

    if not isinstance(raw, list):
        raise WorkloadError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8", newline="") as f:
        rows = [
            (lineno, [cell.strip() for cell in row])
            for lineno, row in enumerate(csv.reader(f), start=1)
            if any(cell.strip() for cell in row)
        ]

    if not rows:
        return []

    header = _header_fields(rows[0][1])
    if header is not None:
        return [_process_from_mapping(dict(zip(header, cells)), lineno) for lineno, cells in rows[1:]]

    return [_process_from_row(cells, lineno) for lineno, cells in rows]


def _header_fields(cells: Sequence[str]) -> Optional[List[str]]:
    """
    Map a header row onto field names, or return None for a data row.
    """
    if not cells or _is_int(cells[0]):
        return None

    fields = []
    for cell in cells:
        name = cell.lower()
        for field_name, aliases in _COLUMN_ALIASES.items():
            if name in aliases:
                fields.append(field_name)
                break
        else:
            raise WorkloadError(f"Unknown workload column: {cell!r}")
    return fields


def _process_from_row(cells: Sequence[str], lineno: int) -> Process:
    if len(cells) < 3:
        raise WorkloadError(f"line {lineno}: expected id,burst,arrival[,priority], got {list(cells)!r}")

    try:
        pid, burst_time, arrival_time = (int(c) for c in cells[:3])
        priority = int(cells[3]) if len(cells) > 3 and cells[3] != "" else 0
    except ValueError as exc:
        raise WorkloadError(f"line {lineno}: non-integer field in {list(cells)!r}") from exc

    return Process(pid=pid, arrival_time=arrival_time, burst_time=burst_time, priority=priority)


def _process_from_mapping(mapping: Mapping, lineno: Optional[int] = None) -> Process:
    where = f"line {lineno}: " if lineno is not None else ""
    try:
        pid = int(mapping["pid"])
        arrival_time = int(mapping["arrival_time"])
        burst_time = int(mapping["burst_time"])
    except (KeyError, TypeError, ValueError) as exc:
        raise WorkloadError(f"{where}Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    try:
        priority = int(priority_val) if priority_val not in (None, "") else 0
    except (TypeError, ValueError) as exc:
        raise WorkloadError(f"{where}Invalid priority in {mapping!r}") from exc

    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )


def _is_int(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True

