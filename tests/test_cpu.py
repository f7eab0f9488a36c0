import logging

import pytest

from ossim.cpu import (
    run_algorithm,
    schedule_fcfs,
    schedule_priority,
    schedule_priority_preemptive,
    schedule_rr,
    schedule_sjf,
    schedule_srtf,
)
from ossim.models import CpuAlgorithm, Process


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=4),
        Process("P2", arrival_time=1, burst_time=3),
        Process("P3", arrival_time=2, burst_time=1),
    ]


def _prio_procs():
    return [
        Process("P1", arrival_time=0, burst_time=4, priority=3),
        Process("P2", arrival_time=1, burst_time=3, priority=1),
        Process("P3", arrival_time=2, burst_time=1, priority=2),
    ]


def _blocks(result):
    return [(b.pid, b.start_time, b.end_time) for b in result.timeline]


def test_fcfs_order():
    res = schedule_fcfs(_procs())
    assert _blocks(res) == [("P1", 0, 4), ("P2", 4, 7), ("P3", 7, 8)]
    assert [res.metrics_for(pid).waiting_time for pid in ("P1", "P2", "P3")] == [0, 3, 5]
    assert res.average_waiting_time == pytest.approx(8 / 3)
    assert res.average_turnaround_time == pytest.approx((4 + 6 + 6) / 3)


def test_fcfs_equal_arrivals_keep_input_order():
    procs = [Process("B", 0, 2), Process("A", 0, 1)]
    assert [b.pid for b in schedule_fcfs(procs).timeline] == ["B", "A"]


def test_fcfs_idle_gap_emits_no_block():
    res = schedule_fcfs([Process("A", 3, 2)])
    assert _blocks(res) == [("A", 3, 5)]
    assert res.metrics_for("A").waiting_time == 0


def test_sjf_order():
    res = schedule_sjf(_procs())
    # Only P1 is ready at 0; at 4 P3 (1) beats P2 (3).
    assert _blocks(res) == [("P1", 0, 4), ("P3", 4, 5), ("P2", 5, 8)]
    assert res.metrics_for("P3").waiting_time == 2
    assert res.metrics_for("P2").waiting_time == 4


def test_sjf_tie_prefers_input_order_over_pid():
    procs = [Process("B", 0, 2), Process("A", 0, 2)]
    assert [b.pid for b in schedule_sjf(procs).timeline] == ["B", "A"]


def test_sjf_tie_prefers_earlier_arrival():
    procs = [Process("X", 0, 5), Process("late", 3, 2), Process("early", 1, 2)]
    assert [b.pid for b in schedule_sjf(procs).timeline] == ["X", "early", "late"]


def test_srtf_preempts_and_coalesces():
    res = schedule_srtf(_procs())
    assert _blocks(res) == [("P1", 0, 2), ("P3", 2, 3), ("P1", 3, 5), ("P2", 5, 8)]
    assert res.metrics_for("P1").waiting_time == 1
    assert res.metrics_for("P1").response_time == 0
    assert res.metrics_for("P2").start_time == 5


def test_srtf_single_process_is_one_block():
    assert _blocks(schedule_srtf([Process("A", 0, 3)])) == [("A", 0, 3)]


def test_srtf_idle_between_arrivals():
    res = schedule_srtf([Process("A", 0, 1), Process("B", 5, 2)])
    assert _blocks(res) == [("A", 0, 1), ("B", 5, 7)]


def test_rr_quantum_2_new_arrivals_before_requeue():
    res = schedule_rr(_procs(), quantum=2)
    assert _blocks(res) == [("P1", 0, 2), ("P2", 2, 4), ("P3", 4, 5), ("P1", 5, 7), ("P2", 7, 8)]
    assert res.quantum == 2
    assert res.metrics_for("P2").completion_time == 8


def test_rr_default_and_clamped_quantum():
    assert schedule_rr(_procs()).quantum == 2
    res = schedule_rr(_procs(), quantum=0)
    assert res.quantum == 1
    assert all(b.duration == 1 for b in res.timeline)


def test_rr_idle_until_next_arrival():
    res = schedule_rr([Process("A", 0, 1), Process("B", 4, 3)], quantum=2)
    assert _blocks(res) == [("A", 0, 1), ("B", 4, 6), ("B", 6, 7)]


def test_priority_static():
    res = schedule_priority(_prio_procs())
    assert _blocks(res) == [("P1", 0, 4), ("P2", 4, 7), ("P3", 7, 8)]


def test_priority_reversed():
    res = schedule_priority(_prio_procs(), reverse_priority=True)
    assert _blocks(res) == [("P1", 0, 4), ("P3", 4, 5), ("P2", 5, 8)]


def test_priority_preemptive():
    res = schedule_priority_preemptive(_prio_procs())
    assert _blocks(res) == [("P1", 0, 1), ("P2", 1, 4), ("P3", 4, 5), ("P1", 5, 8)]


def test_priority_preemptive_reversed():
    res = schedule_priority_preemptive(_prio_procs(), reverse_priority=True)
    assert _blocks(res) == [("P1", 0, 4), ("P3", 4, 5), ("P2", 5, 8)]


@pytest.mark.parametrize("reverse", [False, True])
def test_missing_priority_ranks_last(reverse):
    procs = [Process("none", 0, 2), Process("some", 0, 2, priority=5)]
    res = schedule_priority(procs, reverse_priority=reverse)
    assert [b.pid for b in res.timeline] == ["some", "none"]


@pytest.mark.parametrize("algorithm", list(CpuAlgorithm))
def test_empty_workload_has_zero_averages(algorithm):
    res = run_algorithm(algorithm, [])
    assert res.timeline == ()
    assert res.processes == ()
    assert res.average_waiting_time == 0.0
    assert res.average_turnaround_time == 0.0
    assert res.system.makespan == 0


@pytest.mark.parametrize("algorithm", list(CpuAlgorithm))
def test_invalid_entries_are_dropped(algorithm):
    procs = [
        Process("ok", 0, 2),
        Process("zero", 0, 0),
        Process("negative", -1, 3),
        Process("ok", 1, 5),
    ]
    res = run_algorithm(algorithm, procs, quantum=2)
    assert [m.pid for m in res.processes] == ["ok"]
    assert res.system.cpu_busy_time == 2


@pytest.mark.parametrize("algorithm", list(CpuAlgorithm))
def test_schedule_invariants(algorithm):
    procs = [
        Process("A", 0, 7, priority=2),
        Process("B", 2, 4, priority=1),
        Process("C", 4, 1, priority=3),
        Process("D", 5, 4, priority=1),
        Process("E", 20, 3),
    ]
    res = run_algorithm(algorithm, procs, quantum=3)

    assert sum(b.duration for b in res.timeline) == sum(p.burst_time for p in procs)
    assert {m.pid for m in res.processes} == {p.pid for p in procs}
    for m in res.processes:
        assert m.waiting_time >= 0
        assert m.turnaround_time == m.waiting_time + m.burst_time
        assert m.response_time <= m.waiting_time

    for earlier, later in zip(res.timeline, res.timeline[1:]):
        assert earlier.start_time < earlier.end_time <= later.start_time


@pytest.mark.parametrize("algorithm", list(CpuAlgorithm))
def test_caller_processes_not_mutated(algorithm):
    procs = _prio_procs()
    run_algorithm(algorithm, procs, quantum=1)
    assert procs == _prio_procs()
    assert all(p.remaining_time is None for p in procs)


def test_run_algorithm_dispatch():
    assert run_algorithm("RR", _procs(), quantum=2).algorithm == "Round Robin"
    assert run_algorithm("priority-p", _prio_procs()).algorithm == "Priority (preemptive)"
    with pytest.raises(ValueError):
        run_algorithm("mlfq", _procs())


def test_system_metrics():
    res = schedule_fcfs(_procs())
    assert res.system.makespan == 8
    assert res.system.cpu_busy_time == 8
    assert res.system.cpu_utilization == pytest.approx(1.0)
    assert res.system.throughput == pytest.approx(3 / 8)


@pytest.mark.parametrize("algorithm", list(CpuAlgorithm))
def test_every_algorithm_logs_run_summary(algorithm, caplog):
    with caplog.at_level(logging.DEBUG, logger="ossim.cpu"):
        result = run_algorithm(algorithm, _procs(), quantum=2)
    messages = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
    assert any(m.startswith(result.algorithm) and "scheduled 3 processes" in m for m in messages)
