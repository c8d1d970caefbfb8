"""Session orchestration: one master session per target, strictly in order.

For each target the orchestrator opens a listener, launches the slave on the
target, waits (bounded) for it to connect back, runs the master engine and
tears everything down. A failure is confined to its own target.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional

import structlog

from timesync.clock.source import ClockSource
from timesync.config.settings import Settings
from timesync.protocol.errors import (
    AcceptTimeoutError,
    LaunchError,
    SlaveConnectTimeoutError,
    TimeSyncError,
)
from timesync.roles.master import MasterEngine, SyncResult
from timesync.session.launcher import Launcher, LaunchHandle, RemoteLauncher
from timesync.transport import tcp

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SessionOutcome:
    target: str
    result: Optional[SyncResult] = None
    error: Optional[TimeSyncError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SessionOrchestrator:
    def __init__(
        self,
        settings: Settings,
        launcher: Optional[Launcher] = None,
        clock: Optional[ClockSource] = None,
        hostname_resolver: Callable[[], str] = tcp.local_hostname,
    ) -> None:
        self.settings = settings
        self.launcher = launcher or RemoteLauncher(
            settings.REMOTE_LAUNCHER, settings.PROGRAM or "rastro-timesync"
        )
        self.clock = clock
        self.hostname_resolver = hostname_resolver

    def _await_slave(self, listener, handle: LaunchHandle, target: str):
        """Accept the slave's connection while watching the launcher."""
        timeout = self.settings.ACCEPT_TIMEOUT
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise SlaveConnectTimeoutError(target, timeout)
            try:
                return tcp.accept(
                    listener,
                    timeout=min(self.settings.ACCEPT_POLL_INTERVAL, remaining),
                    io_timeout=self.settings.IO_TIMEOUT,
                )
            except AcceptTimeoutError:
                status = handle.poll()
                if status is not None and status != 0:
                    raise LaunchError(
                        f"launcher exited with status {status} before the slave connected\n"
                        + handle.describe()
                    )

    def run_master_session(self, target: str, sample_size: Optional[int] = None) -> SyncResult:
        """Synchronize against one target and return the best reading."""
        if sample_size is None:
            sample_size = self.settings.SAMPLE_SIZE
        local_host = self.hostname_resolver()
        log = logger.bind(target=target)

        listener, port = tcp.listen(
            self.settings.BIND_HOST, self.settings.PORT_BASE, self.settings.PORT_ATTEMPTS
        )
        handle = None
        try:
            handle = self.launcher.launch(target, master_host=local_host, master_port=port)
            conn = self._await_slave(listener, handle, target)
            try:
                engine = MasterEngine(conn, sample_size, clock=self.clock, local_host=local_host)
                result = engine.run()
            finally:
                conn.close()
        finally:
            listener.close()
            if handle is not None:
                status = handle.reap(self.settings.REAP_TIMEOUT)
                log.debug("Launcher reaped", status=status)

        log.info("Session complete", remote_host=result.remote_host, offset=result.offset)
        return result

    def run(self, targets: Iterable[str]) -> Iterator[SessionOutcome]:
        """Run one session per target in order, yielding each outcome."""
        for target in targets:
            try:
                result = self.run_master_session(target)
            except TimeSyncError as e:
                logger.error("Session failed", target=target,
                             error_type=type(e).__name__, error=str(e))
                yield SessionOutcome(target=target, error=e)
            else:
                yield SessionOutcome(target=target, result=result)
