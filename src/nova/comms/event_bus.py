"""EventBus: thread-safe pub/sub for simulation events.

The SimulationEngine and GameMode publish here; renderers, the CLI
runner, and tests subscribe.  Each subscriber gets its own bounded
queue of ``{"type": ..., "data": ...}`` messages.
"""

from __future__ import annotations

import queue
import threading

# Per-subscriber queue depth.  A full queue drops its oldest message.
QUEUE_MAXSIZE = 1000


class EventBus:
    """Simple thread-safe pub/sub for pushing events to subscribers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[tuple[queue.Queue, str | None]] = []

    def subscribe(self, event_type: str | None = None) -> queue.Queue:
        """Subscribe to events.  Returns a Queue that receives them.

        When *event_type* is given only messages of that type are
        delivered; otherwise the queue receives every event.
        """
        q: queue.Queue = queue.Queue(maxsize=QUEUE_MAXSIZE)
        with self._lock:
            self._subscribers.append((q, event_type))
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            self._subscribers = [
                (sub, flt) for sub, flt in self._subscribers if sub is not q
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
            for q, flt in self._subscribers:
                if flt is not None and flt != event_type:
                    continue
                try:
                    q.put_nowait(msg)
                except queue.Full:
                    # Full: drop the oldest, the newest is always delivered
                    try:
                        q.get_nowait()
                    except queue.Empty:
                        pass
                    try:
                        q.put_nowait(msg)
                    except queue.Full:
                        pass


def drain(q: queue.Queue) -> list[dict]:
    """Pop every message currently waiting on *q*."""
    messages: list[dict] = []
    while True:
        try:
            messages.append(q.get_nowait())
        except queue.Empty:
            return messages
