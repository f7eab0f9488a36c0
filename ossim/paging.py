"""
Page replacement simulation.

Each reference advances a logical clock by one (the first reference happens
at time 1). A hit refreshes the frame's ``last_used`` and bumps its
``frequency``; a fault fills the first empty frame or, when memory is full,
evicts a victim chosen by the policy:

- FIFO: the page loaded earliest (``loaded_at``); hits do not move it.
- LRU: the page with the oldest ``last_used``.
- LFU: the page with the lowest ``frequency``.
- Optimal: the page whose next use lies farthest ahead, or never comes.

Ties always go to the lowest frame index.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .models import PageFrame, PagePolicy, SimulationStep
from .trace import TraceRecorder

logger = logging.getLogger(__name__)

VictimSelector = Callable[[List[PageFrame], Sequence[int], int], int]


def _first_min(frames: List[PageFrame], key: Callable[[PageFrame], float]) -> int:
    # min() keeps the first of equal keys, giving the lowest frame index.
    return min(range(len(frames)), key=lambda i: key(frames[i]))


def _victim_fifo(frames: List[PageFrame], references: Sequence[int], position: int) -> int:
    return _first_min(frames, lambda f: f.loaded_at)


def _victim_lru(frames: List[PageFrame], references: Sequence[int], position: int) -> int:
    return _first_min(frames, lambda f: f.last_used)


def _victim_lfu(frames: List[PageFrame], references: Sequence[int], position: int) -> int:
    return _first_min(frames, lambda f: f.frequency)


def next_use(references: Sequence[int], page: int, position: int) -> float:
    """
    Index of the next reference to ``page`` strictly after ``position``, or
    infinity when the page is never referenced again.
    """
    for index in range(position + 1, len(references)):
        if references[index] == page:
            return index
    return math.inf


def _victim_optimal(frames: List[PageFrame], references: Sequence[int], position: int) -> int:
    distances = [next_use(references, f.page, position) for f in frames]
    # max() keeps the first of equal distances.
    return max(range(len(frames)), key=lambda i: distances[i])


VICTIM_SELECTORS: Dict[PagePolicy, VictimSelector] = {
    PagePolicy.FIFO: _victim_fifo,
    PagePolicy.LRU: _victim_lru,
    PagePolicy.LFU: _victim_lfu,
    PagePolicy.OPTIMAL: _victim_optimal,
}


def simulate_page_replacement(
    references: Sequence[int],
    frame_count: int,
    policy: Union[str, PagePolicy],
) -> Tuple[SimulationStep, ...]:
    """
    Replay ``references`` against ``frame_count`` frames and return one
    SimulationStep per reference.

    A frame count below 1 yields an empty trace.
    """
    try:
        policy = PagePolicy(policy.lower() if isinstance(policy, str) else policy)
    except ValueError:
        raise ValueError(f"Unknown page replacement policy '{policy}'") from None

    select_victim = VICTIM_SELECTORS[policy]
    references = list(references)
    steps: TraceRecorder[SimulationStep] = TraceRecorder()

    if frame_count < 1:
        logger.warning("Frame count %s is not positive, nothing to simulate", frame_count)
        return steps.freeze()

    frames: List[PageFrame] = [PageFrame() for _ in range(frame_count)]

    for position, page in enumerate(references):
        time = position + 1
        resident = _find(frames, page)
        replaced: Optional[int] = None

        if resident is not None:
            frame = frames[resident]
            frames[resident] = replace(frame, last_used=time, frequency=frame.frequency + 1)
            fault = False
        else:
            fault = True
            slot = _find(frames, None)
            if slot is None:
                slot = select_victim(frames, references, position)
                replaced = frames[slot].page
            frames[slot] = PageFrame(page=page, last_used=time, frequency=1, loaded_at=time)

        steps.append(
            SimulationStep(
                page_request=page,
                frames=tuple(frames),
                page_fault=fault,
                replaced_page=replaced,
                policy=policy.value,
            )
        )

    trace = steps.freeze()
    logger.debug(
        "%s: %d references, %d faults with %d frames",
        policy.value,
        len(trace),
        sum(1 for s in trace if s.page_fault),
        frame_count,
    )
    return trace


def _find(frames: List[PageFrame], page: Optional[int]) -> Optional[int]:
    for index, frame in enumerate(frames):
        if frame.page == page:
            return index
    return None
