"""
Minimal in-process change notification. Publishers signal a change and every subscribed queue is marked as having
one pending; a subscriber that isn't reading holds at most one entry, however many changes it missed.
"""
import asyncio
import contextlib
from typing import Any, Optional


class Broadcaster:
    def __init__(self):
        self._queues: set[asyncio.Queue] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._queues)

    @contextlib.contextmanager
    def subscribe(self, queue: Optional[asyncio.Queue] = None):
        """
        Registers *queue* (or a new single-slot one) for the duration of the with-block and yields it.
        Several broadcasters may feed the same queue.
        """
        if queue is None:
            queue = asyncio.Queue(maxsize=1)
        self._queues.add(queue)
        try:
            yield queue
        finally:
            self._queues.discard(queue)

    def publish(self, value: Any = None):
        for queue in tuple(self._queues):
            try:
                queue.put_nowait(value)
            except asyncio.QueueFull:
                # the subscriber already has a change waiting
                pass


def drain(queue: asyncio.Queue):
    """Discards everything currently waiting in *queue*."""
    while True:
        try:
            queue.get_nowait()
        except asyncio.QueueEmpty:
            return
