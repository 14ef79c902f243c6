#!/usr/bin/env python3
"""
NTP packet codec

Builds the 48-byte SNTP client request and decodes the 48-byte server
response (rfc-2030 base header, no extension fields).

Byte layout of the response:
    0       LI (bits 7-6) | VN (bits 5-3) | Mode (bits 2-0)
    1       Stratum
    2       Poll interval (log2 seconds)
    3       Precision (signed log2 seconds)
    4-7     Root delay (signed 16.16 seconds)
    8-11    Root dispersion (unsigned 16.16 seconds)
    12-15   Reference identifier
    16-23   Reference timestamp
    24-31   Originate timestamp
    32-39   Receive timestamp (t2)
    40-47   Transmit timestamp (t3)
"""

import logging
from typing import NamedTuple

from .errors import MalformedPacket
from .fixedpoint import (
    decode_signed_fixed32_16_16,
    decode_signed_pow2_byte,
    decode_unsigned_fixed32_16_16,
    decode_unsigned_fixed64,
    pow2_seconds,
)

logger = logging.getLogger(__name__)

NTP_PACKET_SIZE = 48
NTP_PORT = 123

# 00 011 011: LI=0, VN=3, Mode=3 (client)
CLIENT_REQUEST_FLAGS = 0x1B


class ResponsePacket(NamedTuple):
    """Decoded NTP response. Timestamps are milliseconds since the NTP epoch."""
    leap: int
    version: int
    mode: int
    stratum: int
    poll: int                 # raw log2 exponent
    precision: int            # sign-extended log2 exponent
    root_delay: float         # seconds, may be negative
    root_dispersion: float    # seconds
    ref_id: bytes             # raw 4 bytes, meaning depends on stratum/version
    ref_timestamp: float
    orig_timestamp: float
    recv_timestamp: float     # t2
    tx_timestamp: float       # t3
    raw: bytes

    @property
    def poll_seconds(self) -> float:
        return pow2_seconds(self.poll)

    @property
    def precision_seconds(self) -> float:
        return pow2_seconds(self.precision)


def build_request() -> bytes:
    """Create the 48-byte client request packet."""
    packet = bytearray(NTP_PACKET_SIZE)
    packet[0] = CLIENT_REQUEST_FLAGS
    return bytes(packet)


def parse_response(data: bytes) -> ResponsePacket:
    """Decode a server response.

    Raises:
        MalformedPacket: if ``data`` is not exactly 48 bytes long
    """
    if len(data) != NTP_PACKET_SIZE:
        raise MalformedPacket(
            f"Expected {NTP_PACKET_SIZE}-byte NTP packet, received {len(data)} bytes"
        )
    data = bytes(data)

    flags = data[0]
    packet = ResponsePacket(
        leap=(flags >> 6) & 0b11,
        version=(flags >> 3) & 0b111,
        mode=flags & 0b111,
        stratum=data[1],
        poll=data[2],
        precision=decode_signed_pow2_byte(data[3]),
        root_delay=decode_signed_fixed32_16_16(data[4:8]),
        root_dispersion=decode_unsigned_fixed32_16_16(data[8:12]),
        ref_id=data[12:16],
        ref_timestamp=decode_unsigned_fixed64(data[16:24]),
        orig_timestamp=decode_unsigned_fixed64(data[24:32]),
        recv_timestamp=decode_unsigned_fixed64(data[32:40]),
        tx_timestamp=decode_unsigned_fixed64(data[40:48]),
        raw=data,
    )

    logger.debug(f"Parsed NTP response: leap={packet.leap}, version={packet.version}, "
                 f"mode={packet.mode}, stratum={packet.stratum}, poll={packet.poll}, "
                 f"precision={packet.precision}")
    return packet
