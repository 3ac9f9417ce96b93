"""Thumbnail pipeline counters.

Counts cache hits, misses, generations and degraded WebP conversions.
Thread-safe; one collector is shared by every request a pipeline serves.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class PipelineStats:
    """Immutable snapshot of pipeline counters."""

    hits: int = 0
    misses: int = 0
    generated: int = 0
    transcode_failures: int = 0

    @property
    def requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Hit rate as a float in [0.0, 1.0]; 0.0 when nothing was served."""
        if self.requests == 0:
            return 0.0
        return self.hits / self.requests


class PipelineStatsCollector:
    """Thread-safe collector behind :attr:`ThumbnailPipeline.stats`.

    Usage::

        stats = PipelineStatsCollector()
        stats.record_hit()
        print(stats.snapshot().hit_rate)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts = {"hits": 0, "misses": 0, "generated": 0, "transcode_failures": 0}

    def _bump(self, name: str) -> None:
        with self._lock:
            self._counts[name] += 1

    def record_hit(self) -> None:
        self._bump("hits")

    def record_miss(self) -> None:
        self._bump("misses")

    def record_generated(self) -> None:
        self._bump("generated")

    def record_transcode_failure(self) -> None:
        self._bump("transcode_failures")

    def snapshot(self) -> PipelineStats:
        """Return a :class:`PipelineStats` copy of the current counters."""
        with self._lock:
            return PipelineStats(**self._counts)

    def reset(self) -> None:
        with self._lock:
            for name in self._counts:
                self._counts[name] = 0
