# Fixed-size group of named threads draining one ClosableQueue.

from __future__ import annotations

import threading
from typing import List, Optional


class ThreadGroup:
    name = "member"

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"{type(self).__name__} needs at least one thread, got {size}")
        self.size = size
        self._threads: List[threading.Thread] = []

    def _run(self, member_id: int) -> None:
        raise NotImplementedError

    def start(self) -> None:
        if self._threads:
            raise RuntimeError(f"{type(self).__name__} already started")
        for member_id in range(1, self.size + 1):
            t = threading.Thread(
                target=self._run,
                args=(member_id,),
                name=f"{self.name}-{member_id}",
                daemon=True,
            )
            self._threads.append(t)
            t.start()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for every thread to exit. Returns False if some are still alive after timeout."""
        for t in self._threads:
            t.join(timeout)
        return not self.alive()

    def alive(self) -> int:
        return sum(1 for t in self._threads if t.is_alive())
