"""Slave role: announce identity, then echo timestamps until told to stop.

States:
- ANNOUNCING: send hello header and hostname to the master
- SERVING: for each ping, sample the clock and reply at once
- DONE: a terminate frame (value 0) arrived
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

import structlog

from timesync.clock.source import ClockSource, system_clock
from timesync.config.settings import Settings
from timesync.protocol import wire
from timesync.transport.tcp import connect, local_hostname

logger = structlog.get_logger(__name__)


class SlaveState(Enum):
    ANNOUNCING = "announcing"
    SERVING = "serving"
    DONE = "done"


class SlaveEngine:
    """Serves ping-pong rounds over an established connection."""

    def __init__(self, sock, clock: Optional[ClockSource] = None,
                 hostname: Optional[str] = None) -> None:
        self.sock = sock
        self.clock = clock or system_clock
        self.hostname = hostname if hostname is not None else local_hostname()
        self.state = SlaveState.ANNOUNCING
        self.rounds = 0

    def step(self) -> SlaveState:
        """Advance the state machine by one transition."""
        if self.state is SlaveState.ANNOUNCING:
            wire.send_hello(self.sock, self.hostname)
            self.state = SlaveState.SERVING
        elif self.state is SlaveState.SERVING:
            t_remote = wire.recv_timestamp(self.sock)
            if t_remote == wire.TERMINATE:
                self.state = SlaveState.DONE
            else:
                # sample and reply with nothing in between
                wire.send_timestamp(self.sock, self.clock.now())
                self.rounds += 1
        return self.state

    def run(self) -> int:
        """Serve until terminated; return the number of rounds answered."""
        while self.step() is not SlaveState.DONE:
            pass
        logger.info("Slave finished", hostname=self.hostname, rounds=self.rounds)
        return self.rounds


def run_slave(master_host: str, master_port: int, settings: Optional[Settings] = None,
              clock: Optional[ClockSource] = None, hostname: Optional[str] = None) -> int:
    """Connect back to the master and serve until the terminate frame."""
    settings = settings or Settings()
    sock = connect(
        master_host,
        master_port,
        timeout=settings.CONNECT_TIMEOUT,
        retry_interval=settings.CONNECT_RETRY_INTERVAL,
        io_timeout=settings.IO_TIMEOUT,
    )
    logger.info("Connected to master", master_host=master_host, master_port=master_port)
    try:
        return SlaveEngine(sock, clock=clock, hostname=hostname).run()
    finally:
        sock.close()
