"""
Per-client request quota.

Generic cell rate algorithm: every client gets ``requests_per_minute``
requests as an initial burst, replenished one at a time every
``60 / requests_per_minute`` seconds.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Hashable, Optional


class RateLimiter:
    def __init__(
        self,
        requests_per_minute: int,
        clock: Callable[[], float] = time.monotonic,
        prune_every: int = 1024,
    ):
        if requests_per_minute < 1:
            raise ValueError(f"requests_per_minute must be >= 1, got {requests_per_minute}")
        self.requests_per_minute = requests_per_minute
        self.emission_interval = 60.0 / requests_per_minute
        self.burst_window = 60.0
        self._clock = clock
        self._tat: Dict[Hashable, float] = {}
        self._lock = threading.Lock()
        self._prune_every = prune_every
        self._checks = 0

    def check(self, key: Optional[Hashable]) -> bool:
        """Consume one request for ``key``; False when over quota. Unknown clients pass."""
        if key is None:
            return True
        with self._lock:
            now = self._clock()
            self._checks += 1
            if self._checks % self._prune_every == 0:
                self._prune(now)

            tat = max(self._tat.get(key, now), now)
            if tat - now + self.emission_interval > self.burst_window:
                return False
            self._tat[key] = tat + self.emission_interval
            return True

    def _prune(self, now: float) -> None:
        # A client whose TAT has passed is back to a full burst; forgetting it is lossless.
        stale = [key for key, tat in self._tat.items() if tat <= now]
        for key in stale:
            del self._tat[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._tat)
