from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .models import (
    ExecutionBlock,
    PagingSummary,
    ProcessMetrics,
    SchedulingResult,
    SimulationStep,
    SystemMetrics,
)


def mean(values: Iterable[float]) -> float:
    """
    Unweighted arithmetic mean, 0.0 for an empty input (never NaN).
    """
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def compute_system_metrics(
    timeline: Sequence[ExecutionBlock], processes: Sequence[ProcessMetrics]
) -> SystemMetrics:
    """
    Compute throughput and CPU utilization from completed processes and the
    execution blocks that produced them.
    """
    if not processes:
        return SystemMetrics()

    makespan = max(p.completion_time for p in processes)
    cpu_busy_time = sum(block.duration for block in timeline)

    throughput = len(processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    return SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
    )


def build_result(
    algorithm: str,
    timeline: Sequence[ExecutionBlock],
    processes: Sequence[ProcessMetrics],
    quantum: Optional[int] = None,
) -> SchedulingResult:
    """
    Assemble a SchedulingResult, averaging only over completed processes.
    """
    return SchedulingResult(
        algorithm=algorithm,
        quantum=quantum,
        timeline=tuple(timeline),
        processes=tuple(processes),
        average_waiting_time=mean(p.waiting_time for p in processes),
        average_turnaround_time=mean(p.turnaround_time for p in processes),
        average_response_time=mean(p.response_time for p in processes),
        system=compute_system_metrics(timeline, processes),
    )


def summarize_paging(steps: Sequence[SimulationStep]) -> PagingSummary:
    references = len(steps)
    faults = sum(1 for s in steps if s.page_fault)
    hits = references - faults
    if references == 0:
        return PagingSummary(references=0, faults=0, hits=0, fault_rate=0.0, hit_rate=0.0)
    return PagingSummary(
        references=references,
        faults=faults,
        hits=hits,
        fault_rate=faults / references,
        hit_rate=hits / references,
    )
