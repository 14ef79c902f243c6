#!/usr/bin/env python3
"""
ntp-probe command line

Queries one NTP server once and prints the decoded response, the clock
offset, and the round-trip delay.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .client import NtpClient
from .config import ClientConfig, ConfigError, load_config
from .errors import NtpError
from .models import NtpResult

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NTP_ERROR = 1
EXIT_USAGE = 2


def format_raw(raw: bytes, style: str) -> str:
    """Render the response bytes as hex, an escaped byte string, or decimals."""
    if style == "escaped":
        return repr(raw)
    if style == "decimal":
        return str(tuple(raw))
    return raw.hex()


def _time(ts) -> str:
    return ts.isoformat(timespec="microseconds")


def format_text(result: NtpResult, raw_style: Optional[str] = None) -> str:
    lines = [
        f"Server:           {result.server}",
        f"Corrected time:   {_time(result.corrected_time)}",
        f"Offset:           {result.offset_ms:.3f} ms ({result.offset_seconds:+.6f} s)",
        f"Delay:            {result.delay_ms:.3f} ms",
        "",
        f"Leap indicator:   {result.leap.code} ({result.leap.text})",
        f"Version:          {result.version}",
        f"Mode:             {result.mode.code} ({result.mode.text})",
        f"Stratum:          {result.stratum.code} ({result.stratum.text})",
        f"Reference ID:     {result.reference_id}",
        f"Poll interval:    {result.poll.raw} ({result.poll.seconds:g} s)",
        f"Precision:        {result.precision.raw} ({result.precision.seconds:.3e} s)",
        f"Root delay:       {result.root_delay:.6f} s",
        f"Root dispersion:  {result.root_dispersion:.6f} s",
        "",
    ]
    for name, ts in (("t1 (sent)", result.t1), ("t2 (server rx)", result.t2),
                     ("t3 (server tx)", result.t3), ("t4 (received)", result.t4)):
        lines.append(f"{name + ':':<18}{ts.ms:.3f} ms  {_time(ts.local_time)}")

    if raw_style:
        lines.append("")
        lines.append(f"Response:         {format_raw(bytes.fromhex(result.raw_response), raw_style)}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ntp-probe",
        description="Query an NTP server once and report clock offset and delay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Query the default pool
  ntp-probe

  # Query a server on a non-standard port, JSON output
  ntp-probe time.example.com:1123 --format json

  # Skip reverse DNS of the reference identifier and show the raw packet
  ntp-probe time.google.com --no-dns --raw hex
        """
    )
    parser.add_argument(
        "server",
        nargs="?",
        help="NTP server host name or IPv4 address, optionally host:port"
    )
    parser.add_argument("--config", type=str, help="Path to YAML configuration file")
    parser.add_argument("--port", type=int, help="UDP port (default: 123)")
    parser.add_argument("--timeout", type=float, help="Send/receive timeout in seconds (default: 2.0)")
    parser.add_argument(
        "--max-offset-ms",
        type=float,
        help="Reject offsets larger than this many milliseconds (default: 10000)"
    )
    parser.add_argument(
        "--no-dns",
        action="store_true",
        help="Do not reverse-resolve an IPv4 reference identifier"
    )
    parser.add_argument(
        "--format",
        default="text",
        choices=["text", "json"],
        help="Output format (default: text)"
    )
    parser.add_argument(
        "--raw",
        choices=["hex", "escaped", "decimal"],
        help="Also print the raw response bytes (text format only)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)"
    )
    return parser


def resolve_config(args: argparse.Namespace) -> ClientConfig:
    config = load_config(args.config) if args.config else ClientConfig()
    return config.override(
        server=args.server,
        port=args.port,
        timeout_seconds=args.timeout,
        max_offset_ms=args.max_offset_ms,
        resolve_reference_dns=False if args.no_dns else None,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = resolve_config(args)
    except ConfigError as e:
        logger.error(str(e))
        return EXIT_USAGE

    try:
        result = NtpClient(config).query()
    except NtpError as e:
        print(f"ntp-probe: {e.kind.value}: {e}", file=sys.stderr)
        return EXIT_NTP_ERROR

    if args.format == "json":
        print(result.model_dump_json(indent=2))
    else:
        print(format_text(result, args.raw))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
