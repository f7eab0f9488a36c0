from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import replace
from typing import Callable, Deque, Dict, Iterable, List, Optional, Union

from .config import DEFAULT_QUANTUM, MIN_QUANTUM
from .metrics import build_result
from .models import CpuAlgorithm, ExecutionBlock, Process, ProcessMetrics, SchedulingResult
from .trace import TraceRecorder

logger = logging.getLogger(__name__)

Rank = Callable[[Process], float]


def normalize_processes(processes: Iterable[Process]) -> List[Process]:
    """
    Return private working copies of the schedulable processes.

    Entries with a non-positive burst, a negative arrival or a repeated pid are
    dropped. Each copy starts with ``remaining_time`` equal to its burst; the
    caller's objects are never touched.
    """
    working: List[Process] = []
    seen: set[str] = set()

    for p in processes:
        if p.burst_time <= 0 or p.arrival_time < 0:
            logger.warning(
                "Dropping process %s (arrival=%s, burst=%s)", p.pid, p.arrival_time, p.burst_time
            )
            continue
        if p.pid in seen:
            logger.warning("Dropping duplicate process id %s", p.pid)
            continue
        seen.add(p.pid)
        working.append(replace(p, remaining_time=p.burst_time))

    return working


def normalize_quantum(quantum: Optional[int]) -> int:
    if quantum is None:
        return DEFAULT_QUANTUM
    if quantum < MIN_QUANTUM:
        logger.warning("Time quantum %s is not positive, using %s", quantum, MIN_QUANTUM)
        return MIN_QUANTUM
    return quantum


def _finished(p: Process, start_time: int, completion_time: int) -> ProcessMetrics:
    turnaround_time = completion_time - p.arrival_time
    return ProcessMetrics(
        pid=p.pid,
        arrival_time=p.arrival_time,
        burst_time=p.burst_time,
        start_time=start_time,
        completion_time=completion_time,
        waiting_time=turnaround_time - p.burst_time,
        turnaround_time=turnaround_time,
        response_time=start_time - p.arrival_time,
        priority=p.priority,
    )


def _tiebreak(jobs: List[Process], rank: Rank) -> Callable[[Process], tuple]:
    # Equal rank: earlier arrival wins, then earlier position in the input.
    position = {p.pid: i for i, p in enumerate(jobs)}
    return lambda p: (rank(p), p.arrival_time, position[p.pid])


def priority_rank(reverse_priority: bool = False) -> Rank:
    """
    Rank by priority, smaller rank runs first.

    Lower numbers win unless ``reverse_priority`` is set. A process without a
    priority always ranks last.
    """

    def rank(p: Process) -> float:
        if p.priority is None:
            return math.inf
        return -p.priority if reverse_priority else p.priority

    return rank


def _schedule_non_preemptive(processes: Iterable[Process], algorithm: str, rank: Rank) -> SchedulingResult:
    """
    At each decision point, among processes that have arrived and are not yet
    completed, run the best-ranked one to completion.
    """
    jobs = normalize_processes(processes)
    key = _tiebreak(jobs, rank)
    pending = list(jobs)

    time = 0
    timeline: TraceRecorder[ExecutionBlock] = TraceRecorder()
    metrics: List[ProcessMetrics] = []

    while pending:
        ready = [p for p in pending if p.arrival_time <= time]

        if not ready:
            # CPU idle: jump to the next arrival without emitting a block.
            time = min(p.arrival_time for p in pending)
            continue

        p = min(ready, key=key)

        start_time = time
        end_time = start_time + p.burst_time
        timeline.append(ExecutionBlock(pid=p.pid, start_time=start_time, end_time=end_time))
        metrics.append(_finished(p, start_time, end_time))

        pending.remove(p)
        time = end_time

    result = build_result(algorithm, timeline.freeze(), metrics)
    logger.debug("%s scheduled %d processes in %d blocks", algorithm, len(metrics), len(result.timeline))
    return result


def _schedule_preemptive(processes: Iterable[Process], algorithm: str, rank: Rank) -> SchedulingResult:
    """
    Re-select the best-ranked ready process at every time unit.

    Consecutive units given to the same process are coalesced into a single
    execution block.
    """
    jobs = normalize_processes(processes)
    key = _tiebreak(jobs, rank)
    pending = list(jobs)

    time = 0
    timeline: TraceRecorder[ExecutionBlock] = TraceRecorder()
    metrics: List[ProcessMetrics] = []
    first_start: Dict[str, int] = {}

    running: Optional[str] = None
    running_since = 0

    def flush() -> None:
        nonlocal running
        if running is not None and time > running_since:
            timeline.append(ExecutionBlock(pid=running, start_time=running_since, end_time=time))
        running = None

    while pending:
        ready = [p for p in pending if p.arrival_time <= time]

        if not ready:
            flush()
            time = min(p.arrival_time for p in pending)
            continue

        current = min(ready, key=key)
        if current.pid != running:
            flush()
            running, running_since = current.pid, time

        first_start.setdefault(current.pid, time)
        current.remaining_time -= 1
        time += 1

        if current.remaining_time == 0:
            pending.remove(current)
            metrics.append(_finished(current, first_start[current.pid], time))

    flush()

    result = build_result(algorithm, timeline.freeze(), metrics)
    logger.debug("%s scheduled %d processes in %d blocks", algorithm, len(metrics), len(result.timeline))
    return result


def schedule_fcfs(
    processes: Iterable[Process], quantum: Optional[int] = None, reverse_priority: bool = False
) -> SchedulingResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.

    Processes run to completion in arrival order; equal arrivals keep their
    input order.
    """
    jobs = sorted(normalize_processes(processes), key=lambda p: p.arrival_time)

    time = 0
    timeline: TraceRecorder[ExecutionBlock] = TraceRecorder()
    metrics: List[ProcessMetrics] = []

    for p in jobs:
        start_time = max(time, p.arrival_time)
        end_time = start_time + p.burst_time

        timeline.append(ExecutionBlock(pid=p.pid, start_time=start_time, end_time=end_time))
        metrics.append(_finished(p, start_time, end_time))

        time = end_time

    result = build_result("FCFS", timeline.freeze(), metrics)
    logger.debug("FCFS scheduled %d processes in %d blocks", len(metrics), len(result.timeline))
    return result


def schedule_sjf(
    processes: Iterable[Process], quantum: Optional[int] = None, reverse_priority: bool = False
) -> SchedulingResult:
    """
    Shortest Job First (non-preemptive): pick the smallest burst time.
    """
    return _schedule_non_preemptive(processes, "SJF", lambda p: p.burst_time)


def schedule_srtf(
    processes: Iterable[Process], quantum: Optional[int] = None, reverse_priority: bool = False
) -> SchedulingResult:
    """
    Shortest Remaining Time First (preemptive SJF).
    """
    return _schedule_preemptive(processes, "SRTF", lambda p: p.remaining_time)


def schedule_priority(
    processes: Iterable[Process], quantum: Optional[int] = None, reverse_priority: bool = False
) -> SchedulingResult:
    """
    Static Priority scheduling (non-preemptive).
    """
    return _schedule_non_preemptive(processes, "Priority", priority_rank(reverse_priority))


def schedule_priority_preemptive(
    processes: Iterable[Process], quantum: Optional[int] = None, reverse_priority: bool = False
) -> SchedulingResult:
    """
    Preemptive Priority scheduling: a newly arrived process with a better
    priority takes the CPU at the next time unit.
    """
    return _schedule_preemptive(processes, "Priority (preemptive)", priority_rank(reverse_priority))


def schedule_rr(
    processes: Iterable[Process], quantum: Optional[int] = None, reverse_priority: bool = False
) -> SchedulingResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that arrive while a slice is running join the ready queue before
    the preempted process is put back at its tail.
    """
    quantum = normalize_quantum(quantum)

    incoming: Deque[Process] = deque(sorted(normalize_processes(processes), key=lambda p: p.arrival_time))
    ready: Deque[Process] = deque()

    time = 0
    timeline: TraceRecorder[ExecutionBlock] = TraceRecorder()
    metrics: List[ProcessMetrics] = []
    first_start: Dict[str, int] = {}

    def enqueue_new_arrivals(current_time: int) -> None:
        while incoming and incoming[0].arrival_time <= current_time:
            ready.append(incoming.popleft())

    while incoming or ready:
        enqueue_new_arrivals(time)

        if not ready:
            time = incoming[0].arrival_time
            continue

        p = ready.popleft()
        first_start.setdefault(p.pid, time)

        run_time = min(quantum, p.remaining_time)
        timeline.append(ExecutionBlock(pid=p.pid, start_time=time, end_time=time + run_time))

        time += run_time
        p.remaining_time -= run_time

        enqueue_new_arrivals(time)

        if p.remaining_time > 0:
            ready.append(p)
        else:
            metrics.append(_finished(p, first_start[p.pid], time))

    result = build_result("Round Robin", timeline.freeze(), metrics, quantum=quantum)
    logger.debug(
        "Round Robin (quantum %d) scheduled %d processes in %d blocks", quantum, len(metrics), len(result.timeline)
    )
    return result


ALGORITHMS = {
    CpuAlgorithm.FCFS: schedule_fcfs,
    CpuAlgorithm.SJF: schedule_sjf,
    CpuAlgorithm.SRTF: schedule_srtf,
    CpuAlgorithm.PRIORITY: schedule_priority,
    CpuAlgorithm.PRIORITY_PREEMPTIVE: schedule_priority_preemptive,
    CpuAlgorithm.ROUND_ROBIN: schedule_rr,
}


def run_algorithm(
    name: Union[str, CpuAlgorithm],
    processes: Iterable[Process],
    quantum: Optional[int] = None,
    reverse_priority: bool = False,
) -> SchedulingResult:
    """
    Dispatch to the requested algorithm. ``quantum`` only affects Round Robin
    and ``reverse_priority`` only the two priority schedulers.
    """
    try:
        algorithm = CpuAlgorithm(name.lower() if isinstance(name, str) else name)
    except ValueError:
        raise ValueError(f"Unknown CPU scheduling algorithm '{name}'") from None

    func = ALGORITHMS[algorithm]
    return func(processes, quantum=quantum, reverse_priority=reverse_priority)
