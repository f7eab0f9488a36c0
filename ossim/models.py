from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class CpuAlgorithm(str, Enum):
    FCFS = "fcfs"
    SJF = "sjf"
    SRTF = "srtf"
    PRIORITY = "priority"
    PRIORITY_PREEMPTIVE = "priority-p"
    ROUND_ROBIN = "rr"


class PagePolicy(str, Enum):
    FIFO = "fifo"
    LRU = "lru"
    LFU = "lfu"
    OPTIMAL = "optimal"


class DiskPolicy(str, Enum):
    FCFS = "fcfs"
    SSTF = "sstf"
    SCAN = "scan"
    CSCAN = "c-scan"


class ScanDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass
class Process:
    pid: str
    arrival_time: int
    burst_time: int
    priority: Optional[int] = None
    # Only set on the engine's private working copies.
    remaining_time: Optional[int] = None


@dataclass(frozen=True)
class ExecutionBlock:
    """
    One contiguous block of CPU time given to a process in the Gantt chart.
    """

    pid: str
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class ProcessMetrics:
    pid: str
    arrival_time: int
    burst_time: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int
    priority: Optional[int] = None


@dataclass(frozen=True)
class SystemMetrics:
    cpu_busy_time: int = 0
    makespan: int = 0
    throughput: float = 0.0
    cpu_utilization: float = 0.0


@dataclass(frozen=True)
class SchedulingResult:
    algorithm: str
    quantum: Optional[int] = None
    timeline: Tuple[ExecutionBlock, ...] = ()
    processes: Tuple[ProcessMetrics, ...] = ()
    average_waiting_time: float = 0.0
    average_turnaround_time: float = 0.0
    average_response_time: float = 0.0
    system: SystemMetrics = field(default_factory=SystemMetrics)

    def metrics_for(self, pid: str) -> ProcessMetrics:
        for m in self.processes:
            if m.pid == pid:
                return m
        raise KeyError(pid)


@dataclass(frozen=True)
class PageFrame:
    """
    State of a single memory frame.

    ``last_used`` is the logical time of the most recent access and
    ``loaded_at`` the logical time the resident page was brought in.
    Both are ``None`` and ``frequency`` is 0 while the frame is empty.
    """

    page: Optional[int] = None
    last_used: Optional[int] = None
    frequency: int = 0
    loaded_at: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.page is None


@dataclass(frozen=True)
class SimulationStep:
    page_request: int
    frames: Tuple[PageFrame, ...]
    page_fault: bool
    replaced_page: Optional[int] = None
    policy: Optional[str] = None


@dataclass(frozen=True)
class PagingSummary:
    references: int
    faults: int
    hits: int
    fault_rate: float
    hit_rate: float


@dataclass(frozen=True)
class DiskScheduleResult:
    algorithm: str
    sequence: Tuple[int, ...]
    total_seek_time: int

    @property
    def head(self) -> int:
        return self.sequence[0]
