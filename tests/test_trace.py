import pytest

from ossim.metrics import build_result, mean
from ossim.trace import TraceRecorder


def test_recorder_freezes_to_tuple():
    trace = TraceRecorder()
    trace.append(1)
    trace.extend([2, 3])
    assert trace.last == 3
    assert len(trace) == 3

    frozen = trace.freeze()
    assert frozen == (1, 2, 3)
    assert trace.frozen
    assert trace.freeze() is frozen


def test_recorder_rejects_appends_after_freeze():
    trace = TraceRecorder()
    trace.freeze()
    with pytest.raises(RuntimeError):
        trace.append(1)


def test_empty_recorder():
    trace = TraceRecorder()
    assert trace.last is None
    assert trace.freeze() == ()


def test_mean_of_nothing_is_zero():
    assert mean([]) == 0.0
    assert mean([1, 2]) == 1.5


def test_empty_result_has_no_nan():
    result = build_result("FCFS", [], [])
    assert result.average_waiting_time == 0.0
    assert result.average_turnaround_time == 0.0
    assert result.average_response_time == 0.0
    assert result.system.throughput == 0.0
