"""Supervised launch of the slave process on a remote host.

The slave is started through a remote-execution program (``ssh`` by
default) as ``<launcher> <target> <program> --slave --master-host H
--master-port P``. The returned handle lets the orchestrator notice a
launcher that died before the slave ever connected.
"""

from __future__ import annotations

import subprocess
from typing import List, Optional, Protocol

import structlog

from timesync.protocol.errors import LaunchError

logger = structlog.get_logger(__name__)


class LaunchHandle(Protocol):
    def poll(self) -> Optional[int]:
        ...

    def describe(self) -> str:
        ...

    def reap(self, timeout: float) -> Optional[int]:
        ...


class Launcher(Protocol):
    def launch(self, target: str, master_host: str, master_port: int) -> LaunchHandle:
        ...


class ProcessHandle:
    """Wraps the local launcher process (e.g. the ssh client)."""

    def __init__(self, process: subprocess.Popen, command: List[str], target: str,
                 remote_launcher: str) -> None:
        self.process = process
        self.command = command
        self.target = target
        self.remote_launcher = remote_launcher

    def poll(self) -> Optional[int]:
        return self.process.poll()

    def describe(self) -> str:
        """Diagnostic text for a launch that never produced a slave."""
        lines = [
            f"tried to launch slave on ({self.target}) with:",
            *(f"\t{arg}" for arg in self.command),
            f"check if {self.remote_launcher} is capable of executing something "
            f"on ({self.target}) with this command:",
            f"$ {self.remote_launcher} {self.target} ls",
        ]
        return "\n".join(lines)

    def reap(self, timeout: float) -> Optional[int]:
        """Wait for the launcher to exit, terminating it after ``timeout``."""
        try:
            return self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Launcher still running after session, terminating",
                           target=self.target, pid=self.process.pid)
            self.process.terminate()
            try:
                return self.process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                self.process.kill()
                return self.process.wait()


class RemoteLauncher:
    """Starts ``program`` in slave mode on a target via ``remote_launcher``."""

    def __init__(self, remote_launcher: str = "ssh", program: str = "rastro-timesync") -> None:
        self.remote_launcher = remote_launcher
        self.program = program

    def command(self, target: str, master_host: str, master_port: int) -> List[str]:
        return [
            self.remote_launcher, target,
            self.program,
            "--slave",
            "--master-host", master_host,
            "--master-port", str(master_port),
        ]

    def launch(self, target: str, master_host: str, master_port: int) -> ProcessHandle:
        command = self.command(target, master_host, master_port)
        try:
            process = subprocess.Popen(command, stdin=subprocess.DEVNULL)
        except OSError as e:
            raise LaunchError(f"cannot execute {self.remote_launcher!r}: {e}") from e
        logger.info("Launched slave", target=target, pid=process.pid,
                    master_host=master_host, master_port=master_port)
        return ProcessHandle(process, command, target, self.remote_launcher)
