"""Tests for the binary frame codec."""

import socket
import sys
from pathlib import Path


# Ensure src is importable
ROOT = Path(__file__).parent.parent
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))


import pytest  # noqa: E402

from timesync.protocol import wire  # noqa: E402
from timesync.protocol.errors import ConnectionClosedError, ProtocolError  # noqa: E402


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


class TestTimestampFrames:
    def test_little_endian_layout(self):
        assert wire.encode_timestamp(1) == b"\x01" + b"\x00" * 7
        assert wire.encode_timestamp(-1) == b"\xff" * 8

    def test_terminate_is_zero_frame(self, pair):
        a, b = pair
        wire.send_terminate(a)
        assert b.recv(16) == b"\x00" * 8

    def test_roundtrip_large_value(self, pair):
        a, b = pair
        value = 1_700_000_000_123_456_789
        wire.send_timestamp(a, value)
        assert wire.recv_timestamp(b) == value

    def test_out_of_range_rejected(self):
        with pytest.raises(ProtocolError):
            wire.encode_timestamp(2 ** 63)


class TestHostnameFrames:
    @pytest.mark.parametrize("hostname", ["", "a", "node-01.cluster.local", "x" * 255, "hôte"])
    def test_hello_preserves_hostname(self, pair, hostname):
        """Hostname arrives byte- and length-identical, including empty."""
        a, b = pair
        wire.send_hello(a, hostname)
        received = wire.recv_hello(b)
        assert received == hostname
        assert len(received.encode("utf-8")) == len(hostname.encode("utf-8"))

    def test_string_frame_has_no_terminator(self):
        assert wire.encode_string("abc") == b"\x03\x00\x00\x00abc"

    def test_bad_magic_rejected(self, pair):
        a, b = pair
        a.sendall(b"XXXX\x01\x00" + wire.encode_string("host"))
        with pytest.raises(ProtocolError, match="bad magic"):
            wire.recv_hello(b)

    def test_big_endian_peer_rejected(self, pair):
        """A peer packing the header big-endian shows up as a version mismatch."""
        a, b = pair
        a.sendall(wire.MAGIC + b"\x00\x01" + wire.encode_string("host"))
        with pytest.raises(ProtocolError, match="version"):
            wire.recv_hello(b)

    def test_unknown_version_rejected(self, pair):
        a, b = pair
        a.sendall(wire.encode_hello(version=2) + wire.encode_string("host"))
        with pytest.raises(ProtocolError, match="version 2"):
            wire.recv_hello(b)

    def test_negative_length_rejected(self, pair):
        a, b = pair
        a.sendall(wire.encode_hello() + b"\xff\xff\xff\xff")
        with pytest.raises(ProtocolError):
            wire.recv_hello(b)

    def test_oversized_hostname_rejected(self):
        with pytest.raises(ProtocolError):
            wire.encode_string("h" * (wire.MAX_STRING_LENGTH + 1))

    def test_truncated_frame(self, pair):
        a, b = pair
        a.sendall(wire.encode_hello() + b"\x0a\x00\x00\x00abc")
        a.close()
        with pytest.raises(ConnectionClosedError) as exc:
            wire.recv_hello(b)
        assert exc.value.expected == 10
        assert exc.value.received == 3
