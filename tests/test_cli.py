import json
from pathlib import Path

import pytest

from ossim.cli import main


def _workload(tmp_path: Path) -> Path:
    p = tmp_path / "w.json"
    p.write_text(json.dumps([
        {"pid": "P1", "arrival_time": 0, "burst_time": 4, "priority": 2},
        {"pid": "P2", "arrival_time": 1, "burst_time": 3, "priority": 1},
        {"pid": "P3", "arrival_time": 2, "burst_time": 1},
    ]))
    return p


def test_cpu_run(tmp_path, capsys):
    assert main(["cpu", "run", "-a", "rr", "-w", str(_workload(tmp_path)), "-q", "2"]) == 0
    out = capsys.readouterr().out
    assert "Round Robin" in out
    assert "Per-process metrics" in out
    assert "Gantt Chart" in out


def test_cpu_run_with_step(tmp_path, capsys):
    argv = ["cpu", "run", "-a", "srtf", "-w", str(_workload(tmp_path)), "--step", "--step-delay", "0"]
    assert main(argv) == 0
    assert "t= 0: P1" in capsys.readouterr().out


def test_cpu_compare(tmp_path, capsys):
    assert main(["cpu", "compare", "-w", str(_workload(tmp_path)), "-a", "fcfs", "sjf"]) == 0
    out = capsys.readouterr().out
    assert "FCFS" in out
    assert "SJF" in out
    # FCFS averages for the workload: waits 0, 3, 5
    assert "2.67" in out


def test_cpu_bad_workload(tmp_path, capsys):
    p = tmp_path / "w.yaml"
    p.write_text("")
    assert main(["cpu", "run", "-a", "fcfs", "-w", str(p)]) == 2
    assert "Unsupported workload format" in capsys.readouterr().out


def test_cpu_unknown_algorithm(tmp_path):
    with pytest.raises(SystemExit):
        main(["cpu", "run", "-a", "mlfq", "-w", str(_workload(tmp_path))])


def test_paging(capsys):
    assert main(["paging", "-p", "optimal", "--step", "--step-delay", "0"]) == 0
    out = capsys.readouterr().out
    assert "Faults: 7" in out
    assert "evicted" in out


def test_paging_compare(capsys):
    assert main(["paging", "--compare", "-f", "4"]) == 0
    assert "FIFO" in capsys.readouterr().out


def test_disk(capsys):
    assert main(["disk", "-p", "sstf", "--step", "--step-delay", "0"]) == 0
    assert "Total seek time: 205" in capsys.readouterr().out


def test_disk_compare(capsys):
    assert main(["disk", "--compare", "--direction", "left"]) == 0
    assert "C-SCAN" in capsys.readouterr().out
