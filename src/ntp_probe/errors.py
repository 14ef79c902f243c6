"""Error kinds raised by the NTP probe."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Failure categories a caller can branch on."""
    CONNECT = "connect"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    MALFORMED_PACKET = "malformed_packet"
    SERVER_UNSYNCHRONIZED = "server_unsynchronized"
    OFFSET_TOO_LARGE = "offset_too_large"


class NtpError(Exception):
    """Base error for a failed measurement. Inspect ``kind`` to tell failures apart."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class ConnectError(NtpError):
    """Server name could not be resolved or the socket could not be connected."""
    kind = ErrorKind.CONNECT


class TransportError(NtpError):
    """Send or receive failed, including timeouts (kind TIMEOUT)."""
    kind = ErrorKind.TRANSPORT


class MalformedPacket(NtpError):
    """Response is not a 48-byte NTP packet."""
    kind = ErrorKind.MALFORMED_PACKET


class ServerUnsynchronized(NtpError):
    """Server reported leap indicator 3 (alarm)."""
    kind = ErrorKind.SERVER_UNSYNCHRONIZED


class OffsetTooLarge(NtpError):
    """Computed offset exceeds the configured maximum."""
    kind = ErrorKind.OFFSET_TOO_LARGE


_ERRORS_BY_KIND = {
    ErrorKind.CONNECT: ConnectError,
    ErrorKind.TRANSPORT: TransportError,
    ErrorKind.TIMEOUT: TransportError,
    ErrorKind.MALFORMED_PACKET: MalformedPacket,
    ErrorKind.SERVER_UNSYNCHRONIZED: ServerUnsynchronized,
    ErrorKind.OFFSET_TOO_LARGE: OffsetTooLarge,
}


def error_for(kind: ErrorKind, message: str) -> NtpError:
    """Build the exception matching an error kind."""
    return _ERRORS_BY_KIND[kind](message, kind)
