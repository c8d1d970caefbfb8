"""Error taxonomy for clock synchronization sessions.

Every failure a session can hit derives from ``TimeSyncError`` so the
orchestrator can isolate it to one target and carry on with the rest.
"""

from __future__ import annotations


class TimeSyncError(RuntimeError):
    """Base class for all session failures."""


class TransportError(TimeSyncError):
    """Socket setup or I/O failed."""


class PortExhaustedError(TransportError):
    """No listening port could be bound within the probe range."""


class AcceptTimeoutError(TransportError):
    """No peer connected within a single accept window."""


class ResolutionError(TransportError):
    """The peer hostname could not be resolved."""


class ConnectTimeoutError(TransportError):
    """The peer never accepted a connection within the retry budget."""


class ConnectionClosedError(TransportError):
    """The peer closed the connection before a frame was complete."""

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(
            f"connection closed after {received} of {expected} bytes"
        )
        self.expected = expected
        self.received = received


class SlaveConnectTimeoutError(TransportError):
    """The launched slave failed to connect back in time."""

    def __init__(self, target: str, timeout: float) -> None:
        super().__init__(f"slave on {target} failed to connect within {timeout:.1f}s")
        self.target = target
        self.timeout = timeout


class LaunchError(TimeSyncError):
    """The remote slave process could not be started."""


class ProtocolError(TimeSyncError):
    """The peer sent a frame that does not fit the protocol."""
