"""Clock source shared by both roles.

Timestamps are integers counting ``RESOLUTION`` units per second since the
Unix epoch. Both ends of a session must agree on the resolution for the
offset arithmetic to mean anything.
"""

from __future__ import annotations

import time
from typing import Protocol

# nanoseconds, same unit as clock_gettime(CLOCK_REALTIME)
RESOLUTION = 1_000_000_000

Timestamp = int


class ClockSource(Protocol):
    def now(self) -> Timestamp:
        ...


class SystemClock:
    """Realtime wall clock with nanosecond resolution."""

    resolution = RESOLUTION

    def now(self) -> Timestamp:
        return time.time_ns()


system_clock = SystemClock()


def now() -> Timestamp:
    """Return the current wall-clock time in clock units."""
    return system_clock.now()


def to_seconds(ts: Timestamp) -> float:
    return ts / RESOLUTION
