"""Result models for a single NTP measurement."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RefIdKind(str, Enum):
    """How the 32-bit reference identifier was interpreted."""
    PRIMARY = "primary"            # stratum 0/1: ASCII source code such as "GPS"
    SECONDARY_V3 = "secondary_v3"  # stratum >= 2, NTPv3: IPv4 address of the upstream server
    SECONDARY_V4 = "secondary_v4"  # stratum >= 2, NTPv4: low 32 bits of upstream transmit timestamp
    UNKNOWN = "unknown"


class ReferenceIdentifier(BaseModel):
    """Decoded reference identifier."""
    model_config = ConfigDict(frozen=True)

    kind: RefIdKind = Field(description="Interpretation selected from stratum and version")
    raw: str = Field(description="Raw identifier bytes as hex")
    text: Optional[str] = Field(None, description="Human readable identifier, None when unknown")
    host: Optional[str] = Field(None, description="Reverse DNS name for an IPv4 identifier")
    fraction_ms: Optional[float] = Field(
        None, description="Timestamp fraction in milliseconds for an NTPv4 identifier"
    )

    def __str__(self) -> str:
        if self.text is None:
            return "unknown"
        if self.host:
            return f"{self.text} ({self.host})"
        return self.text


class CodedValue(BaseModel):
    """Protocol enumeration value with its description."""
    model_config = ConfigDict(frozen=True)

    code: int
    text: str


class Pow2Value(BaseModel):
    """Log2 exponent as sent on the wire and the seconds it stands for."""
    model_config = ConfigDict(frozen=True)

    raw: int
    seconds: float


class TimestampValue(BaseModel):
    """Timestamp in milliseconds since 1900-01-01 UTC and as local time."""
    model_config = ConfigDict(frozen=True)

    ms: float = Field(description="Milliseconds since the NTP epoch")
    local_time: datetime = Field(description="Local wall-clock time")


class NtpResult(BaseModel):
    """Outcome of one SNTP request/response exchange."""
    model_config = ConfigDict(frozen=True)

    server: str = Field(description="Server that was queried")
    corrected_time: datetime = Field(description="Local time at receipt corrected by the offset")
    offset_ms: float = Field(description="Server clock minus local clock in milliseconds")
    offset_seconds: float
    delay_ms: float = Field(description="Round-trip network delay in milliseconds")
    reference_id: ReferenceIdentifier
    leap: CodedValue
    version: int
    mode: CodedValue
    stratum: CodedValue
    t1: TimestampValue = Field(description="Local send time")
    t2: TimestampValue = Field(description="Server receive time")
    t3: TimestampValue = Field(description="Server transmit time")
    t4: TimestampValue = Field(description="Local receive time")
    poll: Pow2Value
    precision: Pow2Value
    root_delay: float = Field(description="Root delay in seconds")
    root_dispersion: float = Field(description="Root dispersion in seconds")
    raw_response: str = Field(description="The 48 response bytes as hex")
