#!/usr/bin/env python3
"""
NTP field interpreter

Maps protocol enumerations to descriptive text, decodes the reference
identifier according to stratum and version, and assembles the result record.
"""

import ipaddress
import logging
from typing import Callable, Optional

from .calculator import ExchangeMeasurement, corrected_time
from .fixedpoint import decode_unsigned_fixed64, ntp_ms_to_datetime
from .models import (
    CodedValue,
    NtpResult,
    Pow2Value,
    RefIdKind,
    ReferenceIdentifier,
    TimestampValue,
)
from .packet import ResponsePacket
from .transport import reverse_lookup

logger = logging.getLogger(__name__)

ReverseLookup = Callable[[str, float], Optional[str]]

LEAP_TEXT = {
    0: "no warning",
    1: "last minute has 61 seconds",
    2: "last minute has 59 seconds",
    3: "alarm condition (clock not synchronized)",
}

MODE_TEXT = {
    0: "reserved",
    1: "symmetric active",
    2: "symmetric passive",
    3: "client",
    4: "server",
    5: "broadcast",
    6: "reserved for NTP control message",
    7: "reserved for private use",
}


def leap_to_text(leap: int) -> str:
    return LEAP_TEXT[leap & 0b11]


def mode_to_text(mode: int) -> str:
    return MODE_TEXT[mode & 0b111]


def stratum_to_text(stratum: int) -> str:
    if stratum == 0:
        return "unspecified or unavailable"
    if stratum == 1:
        return "primary reference"
    if stratum <= 15:
        return "secondary reference (via NTP or SNTP)"
    return "reserved"


def classify_reference(stratum: int, version: int) -> RefIdKind:
    """Pick the reference identifier interpretation once, from stratum and version."""
    if stratum <= 1:
        return RefIdKind.PRIMARY
    if version == 3:
        return RefIdKind.SECONDARY_V3
    if version == 4:
        return RefIdKind.SECONDARY_V4
    return RefIdKind.UNKNOWN


def decode_reference_id(packet: ResponsePacket, resolve_dns: bool = True,
                        dns_timeout: float = 1.0,
                        lookup: ReverseLookup = reverse_lookup) -> ReferenceIdentifier:
    """
    Decode the reference identifier of a response.

    Args:
        packet: decoded response
        resolve_dns: annotate an IPv4 identifier with its reverse DNS name
        dns_timeout: seconds to wait for the reverse lookup
        lookup: reverse DNS function, returns None on failure

    Returns:
        ReferenceIdentifier; kind UNKNOWN (text None) for unsupported versions
    """
    raw = packet.ref_id
    kind = classify_reference(packet.stratum, packet.version)

    if kind is RefIdKind.PRIMARY:
        try:
            text = raw.rstrip(b"\0").decode("ascii")
        except UnicodeDecodeError:
            text = raw.hex()
        return ReferenceIdentifier(kind=kind, raw=raw.hex(), text=text)

    if kind is RefIdKind.SECONDARY_V3:
        address = str(ipaddress.IPv4Address(raw))
        host = lookup(address, dns_timeout) if resolve_dns else None
        return ReferenceIdentifier(kind=kind, raw=raw.hex(), text=address, host=host)

    if kind is RefIdKind.SECONDARY_V4:
        # Same big-endian order as the fraction half of every other timestamp
        fraction_ms = decode_unsigned_fixed64(bytes(4) + raw)
        return ReferenceIdentifier(kind=kind, raw=raw.hex(), text=f"{fraction_ms:.6f}ms",
                                   fraction_ms=fraction_ms)

    logger.debug(f"No reference identifier interpretation for version {packet.version}")
    return ReferenceIdentifier(kind=kind, raw=raw.hex())


def _timestamp(ms: float) -> TimestampValue:
    return TimestampValue(ms=ms, local_time=ntp_ms_to_datetime(ms))


def build_result(server: str, packet: ResponsePacket, measurement: ExchangeMeasurement,
                 reference_id: ReferenceIdentifier) -> NtpResult:
    """Assemble the result record for an accepted measurement."""
    return NtpResult(
        server=server,
        corrected_time=corrected_time(measurement),
        offset_ms=measurement.offset,
        offset_seconds=measurement.offset / 1000,
        delay_ms=measurement.delay,
        reference_id=reference_id,
        leap=CodedValue(code=packet.leap, text=leap_to_text(packet.leap)),
        version=packet.version,
        mode=CodedValue(code=packet.mode, text=mode_to_text(packet.mode)),
        stratum=CodedValue(code=packet.stratum, text=stratum_to_text(packet.stratum)),
        t1=_timestamp(measurement.t1),
        t2=_timestamp(measurement.t2),
        t3=_timestamp(measurement.t3),
        t4=_timestamp(measurement.t4),
        poll=Pow2Value(raw=packet.poll, seconds=packet.poll_seconds),
        precision=Pow2Value(raw=packet.precision, seconds=packet.precision_seconds),
        root_delay=packet.root_delay,
        root_dispersion=packet.root_dispersion,
        raw_response=packet.raw.hex(),
    )
