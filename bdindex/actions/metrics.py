"""Counters and response time histograms of executed actions."""

from __future__ import annotations

import math
import threading
import time
from collections import Counter
from typing import Callable, Iterable

RESPONSE_TIME_METRIC = "bdindex_action_response_time"
ACTION_COUNT_METRIC = "bdindex_actions_total_count"
ACTION_ERROR_METRIC = "bdindex_actions_error_count"
RESPONSE_TIME_BUCKETS = (0.5, 1.0, 2.0, 3.0, 4.0, 5.0)

STATUS_OK = "200"
STATUS_INTERNAL_SERVER_ERROR = "500"


class ActionMetrics:
    """Per-path counts of successes and errors, and response time histograms."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        buckets: Iterable[float] = RESPONSE_TIME_BUCKETS,
    ) -> None:
        self.clock = clock
        self.buckets = tuple(sorted(buckets))
        self._lock = threading.Lock()
        self._actions: Counter = Counter()
        self._errors: Counter = Counter()
        self._histograms: dict[str, list[int]] = {}
        self._sums: Counter = Counter()

    def record_success(self, path: str) -> None:
        with self._lock:
            self._actions[(path, STATUS_OK)] += 1

    def record_error(self, path: str) -> None:
        with self._lock:
            self._errors[(path, STATUS_INTERNAL_SERVER_ERROR)] += 1

    def record_response_time(self, path: str, start: float) -> None:
        """Observe the time elapsed since start, as read from the clock."""
        elapsed = self.clock() - start
        with self._lock:
            counts = self._histograms.setdefault(path, [0] * (len(self.buckets) + 1))
            for index, bound in enumerate(self.buckets):
                if elapsed <= bound:
                    counts[index] += 1
                    break
            else:
                counts[-1] += 1
            self._sums[path] += elapsed

    def success_count(self, path: str) -> int:
        with self._lock:
            return self._actions[(path, STATUS_OK)]

    def error_count(self, path: str) -> int:
        with self._lock:
            return self._errors[(path, STATUS_INTERNAL_SERVER_ERROR)]

    def response_time_buckets(self, path: str) -> dict[float, int]:
        """Cumulative observation counts per upper bound, ending with infinity."""
        with self._lock:
            counts = list(self._histograms.get(path, [0] * (len(self.buckets) + 1)))
        result: dict[float, int] = {}
        total = 0
        for bound, count in zip(self.buckets + (math.inf,), counts):
            total += count
            result[bound] = total
        return result