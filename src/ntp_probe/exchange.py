#!/usr/bin/env python3
"""
NTP exchange coordinator

Runs the single request/response round trip and captures the two local
timestamps: t1 immediately before send, t4 immediately after receive.
"""

import logging
import time
from typing import Tuple

from .fixedpoint import unix_to_ntp_ms
from .transport import Transport

logger = logging.getLogger(__name__)


def perform_exchange(transport: Transport, request: bytes) -> Tuple[bytes, float, float]:
    """
    Send one request over an already connected transport and wait for one reply.

    Transport errors propagate unchanged; nothing is retried.

    Returns:
        (response bytes, t1, t4) with t1/t4 in milliseconds since the NTP epoch
    """
    t1 = unix_to_ntp_ms(time.time())
    transport.send(request)
    response = transport.receive()
    t4 = unix_to_ntp_ms(time.time())

    logger.debug(f"NTP exchange: sent {len(request)} bytes, received {len(response)} bytes, "
                 f"round trip {t4 - t1:.3f}ms")
    return response, t1, t4
