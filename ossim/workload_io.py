from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import List

from .models import Process

logger = logging.getLogger(__name__)


class WorkloadError(ValueError):
    """Raised when a workload file cannot be turned into processes."""


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise WorkloadError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise WorkloadError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(raw, list):
        raise WorkloadError("JSON workload must be a list of process objects")

    processes = [_process_from_mapping(entry) for entry in raw]
    logger.info("Loaded %d processes from %s", len(processes), path)
    return processes


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    logger.info("Loaded %d processes from %s", len(processes), path)
    return processes


def _process_from_mapping(mapping) -> Process:
    try:
        pid = str(mapping["pid"])
        arrival_time = int(mapping["arrival_time"])
        burst_time = int(mapping["burst_time"])
    except (KeyError, TypeError, ValueError) as exc:
        raise WorkloadError(f"Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    try:
        priority = int(priority_val) if priority_val not in (None, "") else None
    except (TypeError, ValueError) as exc:
        raise WorkloadError(f"Invalid priority in process entry: {mapping!r}") from exc

    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )


def parse_int_sequence(text: str) -> List[int]:
    """
    Parse a comma-separated list such as ``"98, 183, 37"``.

    Tokens that are not integers are skipped with a warning.
    """
    values: List[int] = []
    for token in text.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            values.append(int(token))
        except ValueError:
            logger.warning("Skipping non-integer entry %r", token)
    return values
