"""
Disk head scheduling.

Every policy returns the full head path, starting at the initial head
position. SCAN and C-SCAN insert the disk boundaries they travel to, so the
total seek time is always the sum of the distances between consecutive
entries of the path.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Union

from .models import DiskPolicy, DiskScheduleResult, ScanDirection
from .trace import TraceRecorder

logger = logging.getLogger(__name__)


def filter_requests(requests: Iterable[int], disk_size: int) -> List[int]:
    """
    Keep only the requests that fall on the disk, in input order.
    """
    valid: List[int] = []
    for track in requests:
        if 0 <= track < disk_size:
            valid.append(track)
        else:
            logger.warning("Discarding track %s outside [0, %s)", track, disk_size)
    return valid


def seek_distance(sequence: Iterable[int]) -> int:
    sequence = list(sequence)
    return sum(abs(b - a) for a, b in zip(sequence, sequence[1:]))


class _HeadPath:
    """
    The head's path across the disk, recorded as it moves.
    """

    def __init__(self, head: int) -> None:
        self.trace: TraceRecorder[int] = TraceRecorder()
        self.trace.append(head)

    @property
    def position(self) -> int:
        return self.trace.last

    def visit(self, track: int) -> None:
        self.trace.append(track)

    def visit_all(self, tracks: Iterable[int]) -> None:
        self.trace.extend(tracks)

    def travel_to(self, boundary: int) -> None:
        # A boundary the head already sits on is not recorded twice.
        if self.position != boundary:
            self.trace.append(boundary)


def _fcfs(head: int, requests: List[int], disk_size: int, direction: ScanDirection) -> _HeadPath:
    path = _HeadPath(head)
    path.visit_all(requests)
    return path


def _sstf(head: int, requests: List[int], disk_size: int, direction: ScanDirection) -> _HeadPath:
    path = _HeadPath(head)
    remaining = list(requests)
    while remaining:
        # Equal distances go to the request listed first.
        nearest = min(range(len(remaining)), key=lambda i: abs(remaining[i] - path.position))
        path.visit(remaining.pop(nearest))
    return path


def _scan(head: int, requests: List[int], disk_size: int, direction: ScanDirection) -> _HeadPath:
    path = _HeadPath(head)
    ordered = sorted(requests)

    if direction is ScanDirection.RIGHT:
        first = [t for t in ordered if t >= head]
        second = [t for t in reversed(ordered) if t < head]
        boundary = disk_size - 1
    else:
        first = [t for t in reversed(ordered) if t <= head]
        second = [t for t in ordered if t > head]
        boundary = 0

    path.visit_all(first)
    if second:
        # The sweep only runs on to the boundary when it serviced something on the way.
        if first:
            path.travel_to(boundary)
        path.visit_all(second)
    return path


def _cscan(head: int, requests: List[int], disk_size: int, direction: ScanDirection) -> _HeadPath:
    path = _HeadPath(head)
    ordered = sorted(requests)

    if direction is ScanDirection.RIGHT:
        first = [t for t in ordered if t >= head]
        second = [t for t in ordered if t < head]
        far, wrap = disk_size - 1, 0
    else:
        first = [t for t in reversed(ordered) if t <= head]
        second = [t for t in reversed(ordered) if t > head]
        far, wrap = 0, disk_size - 1

    path.visit_all(first)
    if second:
        path.travel_to(far)
        # The return sweep costs disk_size - 1 and is charged once.
        path.visit(wrap)
        if second[0] == wrap:
            second = second[1:]
        path.visit_all(second)
    return path


POLICIES = {
    DiskPolicy.FCFS: _fcfs,
    DiskPolicy.SSTF: _sstf,
    DiskPolicy.SCAN: _scan,
    DiskPolicy.CSCAN: _cscan,
}

LABELS = {
    DiskPolicy.FCFS: "FCFS",
    DiskPolicy.SSTF: "SSTF",
    DiskPolicy.SCAN: "SCAN",
    DiskPolicy.CSCAN: "C-SCAN",
}


def schedule_disk(
    head: int,
    requests: Iterable[int],
    disk_size: int,
    policy: Union[str, DiskPolicy],
    direction: Union[str, ScanDirection] = ScanDirection.RIGHT,
) -> DiskScheduleResult:
    """
    Order ``requests`` for a head starting at ``head`` and measure the seek.

    Requests outside ``[0, disk_size)`` are discarded first. A head outside
    that range is clamped onto the disk. ``direction`` only matters for SCAN
    and C-SCAN.
    """
    try:
        policy = DiskPolicy(policy.lower() if isinstance(policy, str) else policy)
    except ValueError:
        raise ValueError(f"Unknown disk scheduling policy '{policy}'") from None
    try:
        direction = ScanDirection(direction.lower() if isinstance(direction, str) else direction)
    except ValueError:
        raise ValueError(f"Unknown scan direction '{direction}'") from None

    valid = filter_requests(requests, disk_size)

    if disk_size > 0 and not 0 <= head < disk_size:
        clamped = min(max(head, 0), disk_size - 1)
        logger.warning("Head %s is off the disk, starting at %s", head, clamped)
        head = clamped

    path = POLICIES[policy](head, valid, disk_size, direction)
    sequence = path.trace.freeze()
    total = seek_distance(sequence)

    logger.debug("%s: %d requests, total seek %d", LABELS[policy], len(valid), total)
    return DiskScheduleResult(algorithm=LABELS[policy], sequence=sequence, total_seek_time=total)


def schedule_fcfs(head: int, requests: Iterable[int], disk_size: int) -> DiskScheduleResult:
    return schedule_disk(head, requests, disk_size, DiskPolicy.FCFS)


def schedule_sstf(head: int, requests: Iterable[int], disk_size: int) -> DiskScheduleResult:
    return schedule_disk(head, requests, disk_size, DiskPolicy.SSTF)


def schedule_scan(
    head: int,
    requests: Iterable[int],
    disk_size: int,
    direction: Union[str, ScanDirection] = ScanDirection.RIGHT,
) -> DiskScheduleResult:
    return schedule_disk(head, requests, disk_size, DiskPolicy.SCAN, direction)


def schedule_cscan(
    head: int,
    requests: Iterable[int],
    disk_size: int,
    direction: Union[str, ScanDirection] = ScanDirection.RIGHT,
) -> DiskScheduleResult:
    return schedule_disk(head, requests, disk_size, DiskPolicy.CSCAN, direction)
