"""Queue of messages raised by showNotification actions.

The engine only enqueues; a presentation layer drains and expires them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from idlekit_core.state import Notification

if TYPE_CHECKING:
    from idlekit_engine.engine import GameEngine


class NotificationQueue:
    def __init__(self, engine: "GameEngine"):
        self.engine = engine
        self._items: List[Notification] = []
    
    def __len__(self) -> int:
        return len(self._items)
    
    def push(self, message: str, duration: float = 3.0) -> Notification:
        notification = Notification(
            message=message,
            timestamp=self.engine.elapsed_seconds,
            duration=duration,
        )
        self._items.append(notification)
        return notification
    
    @property
    def pending(self) -> List[Notification]:
        return list(self._items)
    
    def drain(self) -> List[Notification]:
        """Return every queued notification and empty the queue."""
        items, self._items = self._items, []
        return items
    
    def expire(self, now: Optional[float] = None) -> int:
        """Drop notifications whose duration has passed; returns how many."""
        now = self.engine.elapsed_seconds if now is None else now
        before = len(self._items)
        self._items = [n for n in self._items if not n.expired(now)]
        return before - len(self._items)
    
    def clear(self) -> None:
        self._items.clear()
