#!/usr/bin/env python3
"""
NTP probe client

Single-shot SNTP measurement: one request, one response, one result.
No polling, no history, no sample filtering.
"""

import logging
from typing import Callable, Optional

from .calculator import Rejected, evaluate
from .config import DEFAULT_SERVER, ClientConfig
from .errors import error_for
from .exchange import perform_exchange
from .interpreter import ReverseLookup, build_result, decode_reference_id
from .models import NtpResult
from .packet import NTP_PORT, build_request, parse_response
from .transport import Transport, UdpTransport, parse_server, reverse_lookup

logger = logging.getLogger(__name__)

TransportFactory = Callable[[str, int, float], Transport]


class NtpClient:
    """
    SNTP client bound to a configuration.

    Each query opens its own transport and closes it before returning, so one
    client may be shared between threads querying different servers.
    """

    def __init__(self, config: Optional[ClientConfig] = None,
                 transport_factory: TransportFactory = UdpTransport,
                 lookup: ReverseLookup = reverse_lookup):
        self.config = config or ClientConfig()
        self.transport_factory = transport_factory
        self.lookup = lookup

    def query(self, server: Optional[str] = None) -> NtpResult:
        """
        Measure the local clock against one NTP server.

        Supports both "hostname" and "hostname:port" formats; the configured
        port is used when none is given.

        Raises:
            ConnectError, TransportError: the exchange failed
            MalformedPacket: the response is not a 48-byte packet
            ServerUnsynchronized: the server reported leap indicator 3
            OffsetTooLarge: |offset| exceeds max_offset_ms
        """
        server = server or self.config.server
        host, port = parse_server(server, self.config.port)

        transport = self.transport_factory(host, port, self.config.timeout_seconds)
        try:
            transport.connect()
            response, t1, t4 = perform_exchange(transport, build_request())
        finally:
            transport.close()

        packet = parse_response(response)

        evaluation = evaluate(packet, t1, t4, self.config.max_offset_ms)
        if isinstance(evaluation, Rejected):
            logger.warning(f"NTP measurement from {server} rejected: {evaluation.message}")
            raise error_for(evaluation.kind, evaluation.message)

        measurement = evaluation.measurement
        reference_id = decode_reference_id(
            packet,
            resolve_dns=self.config.resolve_reference_dns,
            dns_timeout=self.config.dns_timeout_seconds,
            lookup=self.lookup,
        )

        logger.info(f"NTP measurement from {server}: offset={measurement.offset:.3f}ms, "
                    f"delay={measurement.delay:.3f}ms, stratum={packet.stratum}")
        return build_result(server, packet, measurement, reference_id)


def get_ntp_time(server: str = DEFAULT_SERVER, max_offset_ms: float = 10000,
                 resolve_reference_dns: bool = True, *, port: int = NTP_PORT,
                 timeout: float = 2.0,
                 transport_factory: TransportFactory = UdpTransport) -> NtpResult:
    """Query ``server`` once and return the decoded, validated measurement."""
    config = ClientConfig(
        server=server,
        port=port,
        timeout_seconds=timeout,
        max_offset_ms=max_offset_ms,
        resolve_reference_dns=resolve_reference_dns,
    )
    return NtpClient(config, transport_factory=transport_factory).query()
