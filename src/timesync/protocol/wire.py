"""Binary framing for the ping-pong protocol.

Frames (all integers little-endian):

- Hello (slave -> master): 4-byte magic ``RSTS`` + uint16 version
- Hostname (slave -> master): int32 length + raw UTF-8 bytes, no terminator
- Ping / Pong / Terminate: one int64 timestamp; terminate carries ``0``

The hello header lets a master reject a slave built with a different
protocol revision or byte order before any sampling happens.
"""

from __future__ import annotations

import struct

from timesync.protocol.errors import ProtocolError
from timesync.transport.tcp import recv_exact, send_exact

MAGIC = b"RSTS"
VERSION = 1
TERMINATE = 0
MAX_STRING_LENGTH = 1024

HELLO_STRUCT = struct.Struct("<4sH")
LENGTH_STRUCT = struct.Struct("<i")
TIMESTAMP_STRUCT = struct.Struct("<q")


def encode_timestamp(value: int) -> bytes:
    try:
        return TIMESTAMP_STRUCT.pack(value)
    except struct.error as e:
        raise ProtocolError(f"timestamp {value!r} does not fit in 64 bits") from e


def decode_timestamp(data: bytes) -> int:
    (value,) = TIMESTAMP_STRUCT.unpack(data)
    return value


def encode_string(text: str) -> bytes:
    raw = text.encode("utf-8")
    if len(raw) > MAX_STRING_LENGTH:
        raise ProtocolError(f"string frame of {len(raw)} bytes exceeds {MAX_STRING_LENGTH}")
    return LENGTH_STRUCT.pack(len(raw)) + raw


def encode_hello(version: int = VERSION) -> bytes:
    return HELLO_STRUCT.pack(MAGIC, version)


def send_timestamp(sock, value: int) -> None:
    send_exact(sock, encode_timestamp(value))


def recv_timestamp(sock) -> int:
    return decode_timestamp(recv_exact(sock, TIMESTAMP_STRUCT.size))


def send_terminate(sock) -> None:
    send_timestamp(sock, TERMINATE)


def send_string(sock, text: str) -> None:
    send_exact(sock, encode_string(text))


def recv_string(sock) -> str:
    (length,) = LENGTH_STRUCT.unpack(recv_exact(sock, LENGTH_STRUCT.size))
    if length < 0 or length > MAX_STRING_LENGTH:
        raise ProtocolError(f"implausible string frame length {length}")
    if length == 0:
        return ""
    raw = recv_exact(sock, length)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ProtocolError("string frame is not valid UTF-8") from e


def send_hello(sock, hostname: str) -> None:
    """Announce protocol revision and hostname in one write."""
    send_exact(sock, encode_hello() + encode_string(hostname))


def recv_hello(sock) -> str:
    """Validate the peer's hello header and return its announced hostname."""
    magic, version = HELLO_STRUCT.unpack(recv_exact(sock, HELLO_STRUCT.size))
    if magic != MAGIC:
        raise ProtocolError(
            f"bad magic {magic!r}; peer is not a timesync slave or uses another byte order"
        )
    if version != VERSION:
        raise ProtocolError(f"unsupported protocol version {version} (expected {VERSION})")
    return recv_string(sock)
