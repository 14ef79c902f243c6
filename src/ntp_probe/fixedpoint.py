#!/usr/bin/env python3
"""
NTP fixed-point codec

Conversions between the wire's fixed-point encodings and plain numbers:

- 64-bit timestamps: 32-bit unsigned seconds since 1900-01-01 UTC plus a
  32-bit unsigned fraction (fraction / 2^32 seconds)
- 32-bit 16.16 values used for root delay (signed) and root dispersion (unsigned)
- 8-bit signed log2 exponents used for poll and precision

All wire values are big-endian. Every function here is pure.
"""

import struct
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

NTP_EPOCH = datetime(1900, 1, 1, tzinfo=timezone.utc)
NTP_UNIX_DELTA_SECONDS = 2208988800  # Seconds between 1900 and 1970

FRACTION_SCALE = 2 ** 32
SHORT_SCALE = 2 ** 16


def decode_unsigned_fixed64(data: bytes) -> float:
    """Decode an 8-byte NTP timestamp to milliseconds since the NTP epoch."""
    seconds, fraction = struct.unpack("!II", data)
    return seconds * 1000 + fraction * 1000 / FRACTION_SCALE


def encode_unsigned_fixed64(milliseconds: float) -> bytes:
    """Encode milliseconds since the NTP epoch as an 8-byte NTP timestamp.

    The fraction is rounded to the nearest 1/2^32 s and carries into the
    seconds field when it rounds up to a full second.
    """
    seconds = int(milliseconds // 1000)
    fraction = round((milliseconds - seconds * 1000) * FRACTION_SCALE / 1000)
    if fraction >= FRACTION_SCALE:
        seconds += 1
        fraction -= FRACTION_SCALE
    return struct.pack("!II", seconds & 0xFFFFFFFF, fraction)


def decode_signed_fixed32_16_16(data: bytes) -> float:
    """Decode a signed 16.16 value (root delay) to seconds."""
    return struct.unpack("!i", data)[0] / SHORT_SCALE


def decode_unsigned_fixed32_16_16(data: bytes) -> float:
    """Decode an unsigned 16.16 value (root dispersion) to seconds."""
    return struct.unpack("!I", data)[0] / SHORT_SCALE


def decode_signed_pow2_byte(value: int) -> int:
    """Sign-extend a single byte holding a log2 exponent (two's complement)."""
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


def pow2_seconds(exponent: int) -> float:
    return 2.0 ** exponent


def unix_to_ntp_ms(unix_seconds: float) -> float:
    """Convert a Unix timestamp (seconds) to milliseconds since the NTP epoch."""
    return (unix_seconds + NTP_UNIX_DELTA_SECONDS) * 1000


def ntp_ms_to_unix(milliseconds: float) -> float:
    """Convert milliseconds since the NTP epoch to a Unix timestamp (seconds)."""
    return milliseconds / 1000 - NTP_UNIX_DELTA_SECONDS


def ntp_ms_to_datetime(milliseconds: float, tz: Optional[tzinfo] = None) -> datetime:
    """Convert milliseconds since the NTP epoch to an aware datetime.

    With ``tz`` left as None the result is in the host's local time zone.
    """
    utc = NTP_EPOCH + timedelta(milliseconds=milliseconds)
    return utc.astimezone(tz)
