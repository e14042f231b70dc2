#!/usr/bin/env python3
"""
Bounded positional history for bodies that draw a trail.

A TrailBuffer is owned by its Body and holds plain position tuples, oldest first.
It is fed once per tick with the body's new position but only keeps every
`sample_interval`-th one; when full, the oldest sample is evicted (FIFO).
Renderers read it through the body snapshot and fade older samples themselves.
"""
from collections import deque
from typing import Deque, Iterator, List

from .constants import TRAIL_CAPACITY, TRAIL_SAMPLE_INTERVAL
from .errors import InvalidParameter
from .vector_utils import Vec3, as_vec3


class TrailBuffer:
    def __init__(self, capacity: int = TRAIL_CAPACITY, sample_interval: int = TRAIL_SAMPLE_INTERVAL):
        if int(capacity) < 1:
            raise InvalidParameter(f"trail capacity must be >= 1, got {capacity!r}")
        if int(sample_interval) < 1:
            raise InvalidParameter(f"trail sample interval must be >= 1, got {sample_interval!r}")
        self.sample_interval = int(sample_interval)
        self._samples: Deque[Vec3] = deque(maxlen=int(capacity))
        self._ticks = 0

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    @property
    def ticks_seen(self) -> int:
        return self._ticks

    def record(self, position) -> bool:
        """
        Count one tick and sample `position` if this is a sampling tick.

        Returns True when a sample was appended.
        """
        self._ticks += 1
        if self._ticks % self.sample_interval != 0:
            return False
        self.append(position)
        return True

    def append(self, position) -> None:
        # deque(maxlen) drops the head as part of the append
        self._samples.append(as_vec3(position))

    def clear(self) -> None:
        self._samples.clear()
        self._ticks = 0

    def samples(self) -> List[Vec3]:
        """Samples in chronological order, oldest first."""
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Vec3]:
        return iter(self._samples)

    def __repr__(self) -> str:
        return f"<TrailBuffer {len(self)}/{self.capacity} every {self.sample_interval} ticks>"
