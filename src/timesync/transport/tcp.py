"""Blocking TCP transport for master/slave sessions.

The master listens and accepts exactly one slave per session; the slave
connects back to the port it was handed on its command line. All calls
block the caller; bounded waits are expressed as explicit timeouts.
"""

from __future__ import annotations

import socket
import time
from typing import Optional, Tuple

import structlog

from timesync.protocol.errors import (
    AcceptTimeoutError,
    ConnectionClosedError,
    ConnectTimeoutError,
    PortExhaustedError,
    ResolutionError,
    TransportError,
)

logger = structlog.get_logger(__name__)


def local_hostname() -> str:
    """Return the name this host reports for itself."""
    return socket.gethostname()


def _configure(conn: socket.socket, io_timeout: Optional[float]) -> socket.socket:
    conn.settimeout(io_timeout)
    # one small frame per round; don't let Nagle hold it back
    conn.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    return conn


def listen(host: str = "", first_port: int = 0, attempts: int = 64) -> Tuple[socket.socket, int]:
    """Bind a listening socket and return it with the chosen port.

    ``first_port == 0`` lets the OS pick a free port. Otherwise ports
    ``first_port .. first_port + attempts - 1`` are probed in order.
    """
    candidates = [0] if first_port == 0 else range(first_port, min(first_port + attempts, 65536))
    last_error: Optional[OSError] = None
    for port in candidates:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.bind((host, port))
        except OSError as e:
            sock.close()
            last_error = e
            logger.debug("Port unavailable, probing next", port=port, error=str(e))
            continue
        sock.listen(1)
        chosen = sock.getsockname()[1]
        logger.debug("Listening", host=host, port=chosen)
        return sock, chosen
    raise PortExhaustedError(
        f"no free port in {first_port}..{first_port + attempts - 1}: {last_error}"
    )


def accept(listener: socket.socket, timeout: Optional[float] = None,
           io_timeout: Optional[float] = None) -> socket.socket:
    """Accept one peer, waiting at most ``timeout`` seconds."""
    listener.settimeout(timeout)
    try:
        conn, addr = listener.accept()
    except socket.timeout as e:
        raise AcceptTimeoutError(f"no connection within {timeout}s") from e
    except OSError as e:
        raise TransportError(f"accept failed: {e}") from e
    logger.debug("Accepted connection", peer=f"{addr[0]}:{addr[1]}")
    return _configure(conn, io_timeout)


def connect(host: str, port: int, timeout: float = 60.0, retry_interval: float = 0.1,
            io_timeout: Optional[float] = None) -> socket.socket:
    """Connect to ``host:port``, retrying until ``timeout`` elapses.

    Name resolution happens once; a host that does not resolve is fatal.
    """
    try:
        addrinfo = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ResolutionError(f"cannot resolve {host}: {e}") from e
    family, socktype, proto, _, address = addrinfo[0]

    deadline = time.monotonic() + timeout
    attempts = 0
    while True:
        attempts += 1
        sock = socket.socket(family, socktype, proto)
        remaining = deadline - time.monotonic()
        sock.settimeout(max(remaining, 0.001))
        try:
            sock.connect(address)
        except OSError as e:
            sock.close()
            if time.monotonic() + retry_interval >= deadline:
                raise ConnectTimeoutError(
                    f"could not connect to {host}:{port} after {attempts} attempts: {e}"
                ) from e
            time.sleep(retry_interval)
            continue
        logger.debug("Connected", host=host, port=port, attempts=attempts)
        return _configure(sock, io_timeout)


def send_exact(sock, data: bytes) -> None:
    try:
        sock.sendall(data)
    except OSError as e:
        raise TransportError(f"send failed: {e}") from e


def recv_exact(sock, length: int) -> bytes:
    """Read exactly ``length`` bytes, accumulating short reads."""
    buf = bytearray()
    while len(buf) < length:
        try:
            chunk = sock.recv(length - len(buf))
        except OSError as e:
            raise TransportError(f"receive failed: {e}") from e
        if not chunk:
            raise ConnectionClosedError(length, len(buf))
        buf += chunk
        if len(buf) < length:
            logger.debug("Short read, continuing", received=len(buf), expected=length)
    return bytes(buf)
