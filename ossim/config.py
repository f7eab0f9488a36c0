"""
Default parameters for the simulators.

The CLI exposes every value here as a flag; these are only what a run uses
when the flag is left out.
"""

from __future__ import annotations

from .models import ScanDirection

# CPU scheduling
DEFAULT_QUANTUM = 2
MIN_QUANTUM = 1

# Page replacement
DEFAULT_FRAME_COUNT = 3
DEFAULT_PAGE_REFERENCES = "1,2,3,4,1,2,5,1,2,3,4,5"

# Disk scheduling
DEFAULT_DISK_SIZE = 200
DEFAULT_HEAD = 50
DEFAULT_DISK_REQUESTS = "98,183,37,122,14,124,65,67"
DEFAULT_SCAN_DIRECTION = ScanDirection.RIGHT

# Terminal replay
DEFAULT_STEP_DELAY = 0.3
