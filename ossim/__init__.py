"""
OS simulator package.

Deterministic simulation engines for CPU scheduling, page replacement and
disk scheduling, plus a command-line interface to run and compare them.
"""

from .cpu import run_algorithm
from .disk import schedule_disk
from .paging import simulate_page_replacement

__all__ = ["cli", "run_algorithm", "schedule_disk", "simulate_page_replacement"]
