"""Bounded per-replica sample history."""

from __future__ import annotations

import itertools
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Deque, Dict, Iterator, Tuple

from replica_dashboard.domain.models import MetricSample

MAX_SAMPLES = 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoryStore:
    """Ring buffer of recent MetricSamples for each replica id.

    Appending beyond ``max_samples`` evicts the oldest sample first. Samples
    are ordered by ``seq``, a store-wide counter, so a wall clock stepping
    backwards cannot reorder them.
    """

    def __init__(
        self,
        max_samples: int = MAX_SAMPLES,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if max_samples <= 0:
            raise ValueError("max_samples must be positive")
        self.max_samples = max_samples
        self._clock = clock
        self._seq = itertools.count()
        self._samples: Dict[int, Deque[MetricSample]] = {}

    def append(
        self, replica_id: int, latency: float, error_rate: float, alive: bool
    ) -> MetricSample:
        sample = MetricSample(
            seq=next(self._seq),
            timestamp=self._clock(),
            latency=latency,
            error_rate=error_rate,
            alive=alive,
        )
        buf = self._samples.get(replica_id)
        if buf is None:
            buf = self._samples[replica_id] = deque(maxlen=self.max_samples)
        buf.append(sample)
        return sample

    def query(self, replica_id: int) -> Tuple[MetricSample, ...]:
        return tuple(self._samples.get(replica_id, ()))

    def clear(self, replica_id: int | None = None) -> None:
        if replica_id is None:
            self._samples.clear()
        else:
            self._samples.pop(replica_id, None)

    def ids(self) -> Tuple[int, ...]:
        return tuple(self._samples)

    def total_samples(self) -> int:
        return sum(len(buf) for buf in self._samples.values())

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[int]:
        return iter(self.ids())
