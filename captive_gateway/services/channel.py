"""Closeable one-way message channel between threads.

A Channel carries messages from request handlers to the network
controller and back. Closing either end makes every later send fail
and wakes blocked receivers once already-queued messages are drained.
"""

import queue
import threading
from typing import Generic, TypeVar

T = TypeVar("T")

_CLOSED = object()


class ChannelClosed(Exception):
    """The far end of the channel has gone away."""


class Channel(Generic[T]):
    """Unbounded FIFO queue with an explicit closed state."""

    def __init__(self, name: str = "channel") -> None:
        self.name = name
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: T) -> None:
        """Queue an item. Raises ChannelClosed if the channel is closed."""
        with self._lock:
            if self._closed:
                raise ChannelClosed(f"{self.name} channel is closed")
            self._queue.put_nowait(item)

    def recv(self) -> T:
        """Block until an item arrives. Raises ChannelClosed once drained and closed."""
        item = self._queue.get()
        if item is _CLOSED:
            # Leave the marker in place for any other blocked receiver
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed(f"{self.name} channel is closed")
        return item

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    def pending(self) -> int:
        """Number of undelivered items."""
        size = self._queue.qsize()
        return size - 1 if self._closed and size else size
