"""
Pytest configuration and shared fixtures for ntp-probe tests.
"""

import struct

import pytest

from ntp_probe.fixedpoint import NTP_UNIX_DELTA_SECONDS, encode_unsigned_fixed64

# Local clock used by the exchange tests: Unix 1_700_000_000 s
LOCAL_UNIX = 1_700_000_000.0
LOCAL_NTP_MS = (LOCAL_UNIX + NTP_UNIX_DELTA_SECONDS) * 1000


def build_packet(leap=0, version=3, mode=4, stratum=2, poll=6, precision=-20,
                 root_delay=0x00000100, root_dispersion=0x00000050,
                 ref_id=b"\xc0\x00\x02\x01", ref_ms=0.0, orig_ms=0.0,
                 recv_ms=0.0, tx_ms=0.0) -> bytes:
    """Pack a 48-byte NTP response. root_delay/root_dispersion are raw 16.16 words."""
    header = struct.pack("!BBBb", (leap << 6) | (version << 3) | mode, stratum, poll, precision)
    words = struct.pack("!iI", root_delay, root_dispersion)
    stamps = b"".join(encode_unsigned_fixed64(ms) for ms in (ref_ms, orig_ms, recv_ms, tx_ms))
    return header + words + ref_id + stamps


class FakeTransport:
    """In-memory transport that records what the exchange did."""

    def __init__(self, response=b"", error_on=None, error=None):
        self.response = response
        self.error_on = error_on
        self.error = error
        self.sent = []
        self.calls = []
        self.closed = False

    def _step(self, name):
        self.calls.append(name)
        if self.error_on == name:
            raise self.error

    def connect(self):
        self._step("connect")

    def send(self, data):
        self._step("send")
        self.sent.append(data)

    def receive(self):
        self._step("receive")
        return self.response

    def close(self):
        self.calls.append("close")
        self.closed = True


@pytest.fixture
def packet_builder():
    """Factory for raw NTP response packets."""
    return build_packet


@pytest.fixture
def server_response():
    """Response from a stratum 2 NTPv3 server 10ms ahead of the local clock.

    With t1 = LOCAL_NTP_MS and t4 = LOCAL_NTP_MS + 25 this gives
    t2 = t1 + 10 and t3 = t1 + 12, so offset = -1.5ms and delay = 23ms.
    """
    return build_packet(
        ref_ms=LOCAL_NTP_MS - 60_000,
        recv_ms=LOCAL_NTP_MS + 10,
        tx_ms=LOCAL_NTP_MS + 12,
    )


@pytest.fixture
def local_clock():
    """time.time() values returned for t1 and t4 (25ms round trip)."""
    return [LOCAL_UNIX, LOCAL_UNIX + 0.025]


@pytest.fixture
def fake_transport_factory():
    """Build a transport factory returning a single FakeTransport."""
    def factory(transport):
        def make(host, port, timeout):
            transport.endpoint = (host, port, timeout)
            return transport
        return make
    return factory
