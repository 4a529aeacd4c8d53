"""Simulation-time scheduler for delayed graph continuations.

Tasks are due at a point on the simulation clock, not the wall clock, so a
headless run that advances 1000 ticks instantly still fires every delay in
order. Pending tasks can be cancelled one by one, by key, or all at once on
teardown.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, List

from idlekit_core.utils.logging import get_logger

logger = get_logger("engine.scheduler")


@dataclass(order=True)
class ScheduledTask:
    due: float
    seq: int
    key: str = field(compare=False)
    callback: Callable[[], None] = field(compare=False, repr=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """Min-heap of tasks ordered by (due time, insertion order)."""

    def __init__(self):
        self._queue: List[ScheduledTask] = []
        self._seq = itertools.count()
        self.now = 0.0

    @property
    def pending(self) -> int:
        return sum(1 for task in self._queue if not task.cancelled)

    def schedule(self, delay: float, callback: Callable[[], None], key: str = "") -> ScheduledTask:
        """Run ``callback`` once the clock reaches ``now + delay`` seconds."""
        task = ScheduledTask(due=self.now + max(0.0, delay), seq=next(self._seq), key=key, callback=callback)
        heapq.heappush(self._queue, task)
        logger.debug(f"Scheduled {key or 'task'} at t={task.due:.3f}s")
        return task

    def cancel_key(self, key: str) -> int:
        count = 0
        for task in self._queue:
            if task.key == key and not task.cancelled:
                task.cancel()
                count += 1
        return count

    def cancel_all(self) -> int:
        count = self.pending
        for task in self._queue:
            task.cancel()
        self._queue.clear()
        if count:
            logger.debug(f"Cancelled {count} pending task(s)")
        return count

    def advance_to(self, now: float) -> int:
        """Move the clock to ``now`` and run every task that has come due.

        Returns:
            Number of tasks run
        """
        self.now = max(self.now, now)
        ran = 0
        while self._queue and self._queue[0].due <= self.now:
            task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            task.callback()
            ran += 1
        return ran

    def reset(self) -> None:
        """Cancel everything and rewind the clock to zero."""
        self.cancel_all()
        self.now = 0.0
