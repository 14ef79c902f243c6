#!/usr/bin/env python3
"""
UDP transport and reverse DNS for the NTP probe

The transport owns exactly one IPv4 UDP socket for the lifetime of one
exchange. Socket errors are translated into ConnectError / TransportError
here so nothing above this module sees raw OSError.
"""

import logging
import socket
import threading
from typing import Optional, Protocol, Tuple

from .errors import ConnectError, ErrorKind, TransportError
from .packet import NTP_PORT

logger = logging.getLogger(__name__)

RECEIVE_BUFFER_SIZE = 1024


class Transport(Protocol):
    """Collaborator interface used by the exchange coordinator."""

    def connect(self) -> None: ...

    def send(self, data: bytes) -> None: ...

    def receive(self) -> bytes: ...

    def close(self) -> None: ...


def parse_server(server: str, default_port: int = NTP_PORT) -> Tuple[str, int]:
    """Split ``host`` or ``host:port`` into its parts.

    Only host names and IPv4 addresses are accepted; an IPv6 literal is
    rejected with ConnectError.
    """
    if server.count(':') > 1:
        raise ConnectError(f"IPv6 server addresses are not supported: {server}")
    if ':' in server:
        host, port_str = server.rsplit(':', 1)
        if port_str.isdigit():
            return host, int(port_str)
    return server, default_port


class UdpTransport:
    """IPv4 UDP socket bound to one NTP server with a per-operation timeout."""

    def __init__(self, host: str, port: int = NTP_PORT, timeout: float = 2.0):
        self.host = host
        self.port = port
        self.timeout = timeout
        self._sock: Optional[socket.socket] = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def connect(self) -> None:
        try:
            infos = socket.getaddrinfo(self.host, self.port, socket.AF_INET, socket.SOCK_DGRAM)
        except (socket.gaierror, UnicodeError) as e:
            raise ConnectError(f"Cannot resolve NTP server {self.host}: {e}") from e
        if not infos:
            raise ConnectError(f"No IPv4 address for NTP server {self.host}")

        family, sock_type, proto, _, address = infos[0]
        sock = socket.socket(family, sock_type, proto)
        sock.settimeout(self.timeout)
        try:
            sock.connect(address)
        except OSError as e:
            sock.close()
            raise ConnectError(f"Cannot connect to {self.host}:{self.port}: {e}") from e

        self._sock = sock
        logger.debug(f"Connected UDP socket to {self.host} ({address[0]}:{address[1]})")

    def send(self, data: bytes) -> None:
        sock = self._require_socket()
        try:
            sock.send(data)
        except socket.timeout as e:
            raise TransportError(f"Timed out sending to {self.host}", ErrorKind.TIMEOUT) from e
        except OSError as e:
            raise TransportError(f"Send to {self.host} failed: {e}") from e

    def receive(self) -> bytes:
        sock = self._require_socket()
        try:
            return sock.recv(RECEIVE_BUFFER_SIZE)
        except socket.timeout as e:
            raise TransportError(
                f"No response from {self.host} within {self.timeout}s", ErrorKind.TIMEOUT
            ) from e
        except OSError as e:
            raise TransportError(f"Receive from {self.host} failed: {e}") from e

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise TransportError(f"Transport for {self.host} is not connected")
        return self._sock


def reverse_lookup(address: str, timeout: float = 1.0) -> Optional[str]:
    """
    Best-effort reverse DNS lookup. Returns None on any failure.

    gethostbyaddr cannot be cancelled, so it runs on a daemon thread that is
    abandoned after ``timeout``; a stalled resolver never delays process exit.
    """
    resolve = socket.gethostbyaddr
    outcome = {}

    def worker():
        try:
            outcome['host'] = resolve(address)[0]
        except (OSError, UnicodeError) as e:
            outcome['error'] = e

    thread = threading.Thread(target=worker, name=f"reverse-dns-{address}", daemon=True)
    thread.start()
    thread.join(timeout)

    if thread.is_alive():
        logger.debug(f"Reverse DNS for {address} timed out after {timeout}s")
        return None
    if 'error' in outcome:
        logger.debug(f"Reverse DNS for {address} failed: {outcome['error']}")
        return None
    return outcome.get('host')
