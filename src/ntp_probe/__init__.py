"""
ntp-probe: single-shot SNTP client

Sends one request to an NTP server and reports the corrected local time,
clock offset, and round-trip delay.
"""

from .client import NtpClient, get_ntp_time
from .config import ClientConfig, ConfigError, load_config
from .errors import (
    ConnectError,
    ErrorKind,
    MalformedPacket,
    NtpError,
    OffsetTooLarge,
    ServerUnsynchronized,
    TransportError,
)
from .models import NtpResult, RefIdKind, ReferenceIdentifier

__version__ = "0.1.0"

__all__ = [
    "NtpClient",
    "get_ntp_time",
    "ClientConfig",
    "ConfigError",
    "load_config",
    "ErrorKind",
    "NtpError",
    "ConnectError",
    "TransportError",
    "MalformedPacket",
    "ServerUnsynchronized",
    "OffsetTooLarge",
    "NtpResult",
    "RefIdKind",
    "ReferenceIdentifier",
]
