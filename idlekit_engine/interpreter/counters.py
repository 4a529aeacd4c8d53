"""Latches that keep threshold events from firing more than once per node."""

from __future__ import annotations

from typing import Dict, Tuple


class EventCounters:
    """Boolean latches keyed by (event type, event node id), created lazily."""

    def __init__(self):
        self._latched: Dict[Tuple[str, str], bool] = {}

    def is_latched(self, event_type: str, node_id: str) -> bool:
        return self._latched.get((event_type, node_id), False)

    def latch(self, event_type: str, node_id: str) -> None:
        self._latched[(event_type, node_id)] = True

    def clear(self) -> None:
        self._latched.clear()

    def __len__(self) -> int:
        return len(self._latched)

    def snapshot(self) -> Dict[str, bool]:
        return {f"{event_type}_{node_id}": value for (event_type, node_id), value in self._latched.items()}
