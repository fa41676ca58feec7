"""Time-ordered 64-bit identifiers built from a clock, a region and a worker."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from typing import NamedTuple

from flakegen.stats import AppStats

# Milliseconds since the Unix epoch at midnight, January 1, 2025.
EPOCH = 1735689600000

TIME_BITS = 41
REGION_ID_BITS = 4
WORKER_ID_BITS = 10
SEQUENCE_BITS = 8

MAX_REGION_ID = (1 << REGION_ID_BITS) - 1
MAX_WORKER_ID = (1 << WORKER_ID_BITS) - 1
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1

TIME_SHIFT = REGION_ID_BITS + WORKER_ID_BITS + SEQUENCE_BITS
REGION_SHIFT = WORKER_ID_BITS + SEQUENCE_BITS
WORKER_SHIFT = SEQUENCE_BITS

Clock = Callable[[], int]


class SnowflakeError(ValueError):
    """Raised when a generator is configured with invalid parameters."""


class SnowflakeParts(NamedTuple):
    """The fields packed into an identifier."""

    millis: int
    region_id: int
    worker_id: int
    sequence: int

    @property
    def unix_millis(self) -> int:
        """Milliseconds since the Unix epoch."""
        return self.millis + EPOCH


def current_millis(clock: Clock | None = None) -> int:
    """Milliseconds elapsed since the custom epoch, read from a nanosecond clock."""
    nanos = (clock or time.time_ns)()
    return nanos // 1_000_000 - EPOCH


def decompose(snowflake_id: int) -> SnowflakeParts:
    """Split an identifier back into its timestamp, region, worker and sequence."""
    if snowflake_id < 0:
        raise SnowflakeError(f"identifier must not be negative: {snowflake_id}")
    return SnowflakeParts(
        millis=snowflake_id >> TIME_SHIFT,
        region_id=(snowflake_id >> REGION_SHIFT) & MAX_REGION_ID,
        worker_id=(snowflake_id >> WORKER_SHIFT) & MAX_WORKER_ID,
        sequence=snowflake_id & MAX_SEQUENCE,
    )


class SnowflakeGenerator:
    """Produces unique, roughly time-ordered identifiers for one region and worker."""

    def __init__(self, region_id: int, worker_id: int, clock: Clock | None = None) -> None:
        if not 0 <= region_id <= MAX_REGION_ID:
            raise SnowflakeError(f"Region ID must be in the range: 0-{MAX_REGION_ID}")
        if not 0 <= worker_id <= MAX_WORKER_ID:
            raise SnowflakeError(f"Worker ID must be in the range: 0-{MAX_WORKER_ID}")
        self.region_id = region_id
        self.worker_id = worker_id
        self.seq_max = MAX_SEQUENCE
        self._clock = clock or time.time_ns
        self._time = 0
        self._seq = 0
        self._lock = threading.Lock()
        self.stats = AppStats()
        self.stats.reset(region_id, worker_id, self.seq_max)

    def next_id(self) -> int:
        """Return the next identifier, waiting for the clock when necessary."""
        with self._lock:
            millis = current_millis(self._clock)
            # The clock went backwards or this millisecond's sequence is used up.
            if self._seq > self.seq_max or self._time > millis:
                self.stats.waits += 1
                while self._time >= millis:
                    millis = current_millis(self._clock)

            if self._time < millis:
                self._time = millis
                self._seq = 0

            snowflake_id = (
                (millis << TIME_SHIFT)
                | (self.region_id << REGION_SHIFT)
                | (self.worker_id << WORKER_SHIFT)
                | self._seq
            )
            self._seq += 1
            if self.stats.seq_max < self._seq:
                self.stats.seq_max = self._seq
            self.stats.ids += 1
            return snowflake_id

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        return self.next_id()