"""
Closable FIFO queue shared by the pipeline stages.

queue.Queue has no notion of "closed", which is what lets consumers tell
"nothing yet" apart from "nothing ever again". After close(), put() fails but
everything already queued can still be taken.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Generic, Iterator, TypeVar

T = TypeVar("T")


class QueueClosed(Exception):
    """put() on a closed queue, or get() on a closed and drained one."""


class ClosableQueue(Generic[T]):
    def __init__(self, maxsize: int = 0) -> None:
        self.maxsize = maxsize
        self._items: Deque[T] = deque()
        self._closed = False
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def qsize(self) -> int:
        with self._lock:
            return len(self._items)

    def _full(self) -> bool:
        return 0 < self.maxsize <= len(self._items)

    def put(self, item: T) -> None:
        """Append item, blocking while a bounded queue is full."""
        with self._not_full:
            while not self._closed and self._full():
                self._not_full.wait()
            if self._closed:
                raise QueueClosed("queue is closed")
            self._items.append(item)
            self._not_empty.notify()

    def get(self) -> T:
        """Take the oldest item, blocking while the queue is empty and open."""
        with self._not_empty:
            while not self._items:
                if self._closed:
                    raise QueueClosed("queue is closed and drained")
                self._not_empty.wait()
            item = self._items.popleft()
            self._not_full.notify()
            return item

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except QueueClosed:
                return
