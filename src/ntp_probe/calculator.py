#!/usr/bin/env python3
"""
Offset/delay calculator

Standard NTP formulas on the four exchange timestamps (milliseconds):

    offset = ((t2 - t1) + (t3 - t4)) / 2
    delay  = (t4 - t1) - (t3 - t2)

Validation returns a tagged result instead of raising, so callers can tell a
rejected measurement apart from transport or packet-format failures.
"""

import logging
from datetime import datetime, tzinfo
from typing import NamedTuple, Optional, Union

from .errors import ErrorKind
from .fixedpoint import ntp_ms_to_datetime
from .packet import ResponsePacket

logger = logging.getLogger(__name__)

LEAP_ALARM = 3
DEFAULT_MAX_OFFSET_MS = 10000


class ExchangeMeasurement(NamedTuple):
    """Timestamps and derived offset/delay of one exchange, all in milliseconds"""
    t1: float   # local send time
    t2: float   # server receive time
    t3: float   # server transmit time
    t4: float   # local receive time
    offset: float
    delay: float


class Accepted(NamedTuple):
    measurement: ExchangeMeasurement


class Rejected(NamedTuple):
    kind: ErrorKind
    message: str
    measurement: Optional[ExchangeMeasurement] = None


Evaluation = Union[Accepted, Rejected]


def compute_offset(t1: float, t2: float, t3: float, t4: float) -> float:
    return ((t2 - t1) + (t3 - t4)) / 2.0


def compute_delay(t1: float, t2: float, t3: float, t4: float) -> float:
    return (t4 - t1) - (t3 - t2)


def measure(t1: float, t2: float, t3: float, t4: float) -> ExchangeMeasurement:
    return ExchangeMeasurement(
        t1=t1, t2=t2, t3=t3, t4=t4,
        offset=compute_offset(t1, t2, t3, t4),
        delay=compute_delay(t1, t2, t3, t4),
    )


def evaluate(packet: ResponsePacket, t1: float, t4: float,
             max_offset_ms: float = DEFAULT_MAX_OFFSET_MS) -> Evaluation:
    """
    Compute offset and delay for a decoded response and validate them.

    A server in alarm state (leap indicator 3) is rejected before any
    arithmetic. An offset whose magnitude is strictly greater than
    ``max_offset_ms`` is rejected; exactly ``max_offset_ms`` is accepted.
    """
    if packet.leap == LEAP_ALARM:
        return Rejected(ErrorKind.SERVER_UNSYNCHRONIZED,
                        "Server clock is not synchronized (leap indicator 3)")

    measurement = measure(t1, packet.recv_timestamp, packet.tx_timestamp, t4)

    if abs(measurement.offset) > max_offset_ms:
        logger.warning(f"Rejecting NTP offset {measurement.offset:.3f}ms "
                       f"(limit {max_offset_ms}ms)")
        return Rejected(ErrorKind.OFFSET_TOO_LARGE,
                        f"Offset {measurement.offset:.3f}ms exceeds maximum of {max_offset_ms}ms",
                        measurement)

    return Accepted(measurement)


def corrected_time(measurement: ExchangeMeasurement, tz: Optional[tzinfo] = None) -> datetime:
    """Local wall-clock time at t4 corrected by the measured offset."""
    return ntp_ms_to_datetime(measurement.t4 + measurement.offset, tz)
