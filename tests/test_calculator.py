"""Tests for offset/delay calculation and validation."""

from datetime import timezone

import pytest

from ntp_probe.calculator import (
    Accepted,
    ExchangeMeasurement,
    Rejected,
    compute_delay,
    compute_offset,
    corrected_time,
    evaluate,
    measure,
)
from ntp_probe.errors import ErrorKind
from ntp_probe.fixedpoint import ntp_ms_to_datetime
from ntp_probe.packet import parse_response


@pytest.fixture
def packet(packet_builder):
    """Response whose t2/t3 are 1010 and 1012 ms"""
    return parse_response(packet_builder(recv_ms=1010, tx_ms=1012))


class TestFormulas:
    """NTP offset and delay formulas"""

    def test_sample_values(self):
        assert compute_offset(1000, 1010, 1012, 1025) == -1.5
        assert compute_delay(1000, 1010, 1012, 1025) == 23

    def test_measure(self):
        m = measure(1000, 1010, 1012, 1025)
        assert m == ExchangeMeasurement(t1=1000, t2=1010, t3=1012, t4=1025, offset=-1.5, delay=23)

    def test_symmetric_path_gives_exact_offset(self):
        """Server 500ms ahead, 20ms each way, 2ms processing"""
        assert compute_offset(0, 520, 522, 42) == 500
        assert compute_delay(0, 520, 522, 42) == 40


class TestEvaluate:
    """Validation of a decoded response"""

    def test_accepted(self, packet):
        result = evaluate(packet, 1000, 1025)
        assert isinstance(result, Accepted)
        assert result.measurement.offset == pytest.approx(-1.5, abs=1e-6)
        assert result.measurement.delay == pytest.approx(23, abs=1e-6)

    def test_alarm_rejected_before_offset(self, packet_builder):
        """Leap indicator 3 wins even when the offset would be fine"""
        alarm = parse_response(packet_builder(leap=3, recv_ms=1010, tx_ms=1012))
        result = evaluate(alarm, 1000, 1025)
        assert isinstance(result, Rejected)
        assert result.kind == ErrorKind.SERVER_UNSYNCHRONIZED
        assert result.measurement is None

    def test_alarm_rejected_with_huge_offset(self, packet_builder):
        alarm = parse_response(packet_builder(leap=3, recv_ms=9e9, tx_ms=9e9))
        assert evaluate(alarm, 1000, 1025, max_offset_ms=1).kind == ErrorKind.SERVER_UNSYNCHRONIZED

    def test_offset_over_limit(self, packet_builder):
        far = parse_response(packet_builder(recv_ms=11000.5, tx_ms=11000.5))
        result = evaluate(far, 1000, 1000, max_offset_ms=10000)
        assert isinstance(result, Rejected)
        assert result.kind == ErrorKind.OFFSET_TOO_LARGE
        assert result.measurement.offset == pytest.approx(10000.5, abs=1e-3)

    def test_negative_offset_over_limit(self, packet_builder):
        behind = parse_response(packet_builder(recv_ms=1000, tx_ms=1000))
        result = evaluate(behind, 20000, 20000, max_offset_ms=10000)
        assert result.kind == ErrorKind.OFFSET_TOO_LARGE

    def test_offset_at_limit_is_accepted(self, packet_builder):
        edge = parse_response(packet_builder(recv_ms=11000, tx_ms=11000))
        result = evaluate(edge, 1000, 1000, max_offset_ms=10000)
        assert isinstance(result, Accepted)
        assert result.measurement.offset == 10000


class TestCorrectedTime:
    """Corrected local wall-clock time"""

    def test_corrected_time_adds_offset_to_t4(self):
        m = measure(3_800_000_000_000, 3_800_000_001_010, 3_800_000_001_012, 3_800_000_000_025)
        expected = ntp_ms_to_datetime(3_800_000_000_025 + m.offset, timezone.utc)
        assert corrected_time(m, timezone.utc) == expected
        assert corrected_time(m) == expected
