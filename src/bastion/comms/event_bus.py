"""EventBus — thread-safe pub/sub for engine events.

The simulation publishes machine-readable events (wave starts, kills,
breaches, purchases, game over) here.  The human-readable combat feed is
a separate, bounded log kept on the simulation state; the bus is for
programmatic consumers such as the HTTP driver or a balancing script.

Every message is a dict ``{"type": <event_type>, "data": <payload>}``.
Subscribers receive messages through their own bounded queue.  When a
queue is full the oldest message is dropped so that late events (game
over, wave complete) are never lost behind stale ones.
"""

from __future__ import annotations

import queue
import threading

# Default per-subscriber queue size
DEFAULT_QUEUE_SIZE = 1000


class EventBus:
    """Simple thread-safe pub/sub for pushing events to subscribers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[tuple[queue.Queue, frozenset[str] | None]] = []

    def subscribe(
        self,
        event_types: str | list[str] | None = None,
        maxsize: int = DEFAULT_QUEUE_SIZE,
    ) -> queue.Queue:
        """Subscribe to events. Returns a Queue that receives messages.

        *event_types* restricts delivery to the named types; None receives
        everything.
        """
        if isinstance(event_types, str):
            wanted: frozenset[str] | None = frozenset((event_types,))
        elif event_types is not None:
            wanted = frozenset(event_types)
        else:
            wanted = None
        q: queue.Queue = queue.Queue(maxsize=maxsize)
        with self._lock:
            self._subscribers.append((q, wanted))
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            self._subscribers = [
                (sub, wanted) for sub, wanted in self._subscribers if sub is not q
            ]

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event_type: str, data: dict | None = None) -> None:
        msg = {"type": event_type}
        if data is not None:
            msg["data"] = data
        with self._lock:
            for q, wanted in self._subscribers:
                if wanted is not None and event_type not in wanted:
                    continue
                try:
                    q.put_nowait(msg)
                except queue.Full:
                    # Drop oldest message to make room
                    try:
                        q.get_nowait()
                    except queue.Empty:
                        pass
                    try:
                        q.put_nowait(msg)
                    except queue.Full:
                        pass


def drain(q: queue.Queue) -> list[dict]:
    """Pull every pending message off *q* without blocking."""
    messages: list[dict] = []
    while True:
        try:
            messages.append(q.get_nowait())
        except queue.Empty:
            return messages
