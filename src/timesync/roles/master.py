"""Master role: drive ping-pong rounds and keep the minimum-delay sample.

Each round the master stamps ``t0``, sends it, waits for the slave's
timestamp and stamps ``t1``. The slave is assumed to have read its clock at
the midpoint of ``[t0, t1]``, an assumption that is most accurate for the
round with the shortest round trip, so only that round is kept.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog

from timesync.clock.source import ClockSource, Timestamp, system_clock
from timesync.protocol import wire
from timesync.transport.tcp import local_hostname

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Sample:
    local: Timestamp
    remote: Timestamp
    delta: Timestamp


@dataclass(frozen=True)
class SyncResult:
    """Best simultaneous reading of the local and remote clocks."""

    local_host: str
    local_time: Timestamp
    remote_host: str
    remote_time: Timestamp

    @property
    def offset(self) -> Timestamp:
        """Remote clock minus local clock, in clock units."""
        return self.remote_time - self.local_time

    def format_line(self) -> str:
        return f"{self.local_host} {self.local_time} {self.remote_host} {self.remote_time}"


def select_best(best: Optional[Sample], candidate: Sample) -> Sample:
    """Keep the smaller round trip; on a tie the newer sample wins."""
    if best is None or candidate.delta <= best.delta:
        return candidate
    return best


class MasterEngine:
    """Runs one sampling session over an accepted slave connection."""

    def __init__(self, sock, sample_size: int, clock: Optional[ClockSource] = None,
                 local_host: Optional[str] = None) -> None:
        if sample_size < 1:
            raise ValueError(f"sample_size must be at least 1, got {sample_size}")
        self.sock = sock
        self.sample_size = sample_size
        self.clock = clock or system_clock
        self.local_host = local_host if local_host is not None else local_hostname()
        self.remote_host: Optional[str] = None
        self.best: Optional[Sample] = None

    def handshake(self) -> str:
        self.remote_host = wire.recv_hello(self.sock)
        logger.debug("Slave announced itself", remote_host=self.remote_host)
        return self.remote_host

    def ping(self) -> Sample:
        """Run a single round and return its sample."""
        t0 = self.clock.now()
        wire.send_timestamp(self.sock, t0)
        t_remote = wire.recv_timestamp(self.sock)
        t1 = self.clock.now()
        delta = t1 - t0
        return Sample(local=t0 + delta // 2, remote=t_remote, delta=delta)

    def run(self) -> SyncResult:
        if self.remote_host is None:
            self.handshake()
        for _ in range(self.sample_size):
            sample = self.ping()
            best = select_best(self.best, sample)
            if best is sample:
                logger.debug("New best sample", delta=sample.delta)
            self.best = best
        wire.send_terminate(self.sock)

        logger.info(
            "Sampling complete",
            remote_host=self.remote_host,
            rounds=self.sample_size,
            best_delta=self.best.delta,
        )
        return SyncResult(
            local_host=self.local_host,
            local_time=self.best.local,
            remote_host=self.remote_host,
            remote_time=self.best.remote,
        )
