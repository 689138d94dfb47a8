# Thread-safe counters reported by /healthz and logged on shutdown.

from __future__ import annotations
import threading
from typing import Dict

COUNTERS = (
    "requests_submitted",
    "notices_sent",
    "responses_generated",
    "generation_failures",
    "replies_delivered",
    "apologies_delivered",
    "delivery_failures",
)


class PipelineStats:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: Dict[str, int] = {name: 0 for name in COUNTERS}

    def incr(self, name: str, amount: int = 1) -> None:
        if name not in self._counts:
            raise KeyError(f"unknown counter: {name}")
        with self._lock:
            self._counts[name] += amount

    def get(self, name: str) -> int:
        with self._lock:
            return self._counts[name]

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counts)
