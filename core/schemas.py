"""
Normalized Data Schemas

This module defines the Pydantic models shared by both venue connectors,
the aggregator, the storage adapters and the HTTP layer.

Key Principle:
    Whatever shape WOO X or Paradex return, trades are normalized into
    ``Trade`` and every volume figure leaves a connector as a ``VolumeResult``
    carrying a ``SourceTier`` that explains how trustworthy it is.

Models:
    - ApiKeyCredential / TokenCredential: venue key material (read-only)
    - VolumeQuery: Immutable time range of one fetch
    - Trade: A single executed trade or fill
    - VolumeResult: Outcome of one connector call
    - VolumeSnapshot: Persisted per-venue volume record
    - PlatformVolume: Per-venue entry of the aggregated response

Volumes are ``Decimal`` so that summing ``price × size`` is exact; they are
rendered as JSON numbers for the UI.
"""

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_serializer, field_validator, model_validator

Platform = Literal["woox", "paradex"]

DEFAULT_HISTORY_DAYS = 730
SECONDS_PER_DAY = 86_400


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ============================================
# Credentials
# ============================================

class ApiKeyCredential(BaseModel):
    """
    API key / secret pair (WOO X).

    The secret is a SecretStr so it never shows up in repr() or logs.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., description="Public key identifier")
    api_secret: SecretStr = Field(..., description="HMAC shared secret")


class TokenCredential(BaseModel):
    """Bearer token (Paradex JWT)."""

    model_config = ConfigDict(frozen=True)

    token: SecretStr = Field(..., description="JWT, with or without a 'Bearer ' prefix")


Credential = Union[ApiKeyCredential, TokenCredential]


# ============================================
# Source Tier
# ============================================

class SourceTier(str, Enum):
    """Provenance of a volume figure."""

    AUTHENTICATED = "authenticated"
    PUBLIC = "public"
    ERROR = "error"


# ============================================
# Query
# ============================================

class VolumeQuery(BaseModel):
    """
    Immutable time range for one volume fetch.

    Omitted bounds default to the trailing 730 days ending now.

    Example:
        >>> q = VolumeQuery.last_days(5)
        >>> q.days_spanned
        5
    """

    model_config = ConfigDict(frozen=True)

    start_time: datetime = Field(..., description="Range start (UTC)")
    end_time: datetime = Field(..., description="Range end (UTC)")

    @model_validator(mode="before")
    @classmethod
    def fill_default_range(cls, data):
        if isinstance(data, dict):
            data = dict(data)
            now = datetime.now(timezone.utc)
            if data.get("end_time") is None:
                data["end_time"] = now
            if data.get("start_time") is None:
                end = data["end_time"]
                if isinstance(end, datetime):
                    data["start_time"] = _ensure_utc(end) - timedelta(days=DEFAULT_HISTORY_DAYS)
                else:
                    data["start_time"] = now - timedelta(days=DEFAULT_HISTORY_DAYS)
        return data

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        """Treat naive datetimes as UTC"""
        return _ensure_utc(v)

    @model_validator(mode="after")
    def check_order(self):
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be earlier than start_time")
        return self

    @classmethod
    def last_days(cls, days: int, now: Optional[datetime] = None) -> "VolumeQuery":
        """Build the trailing window ``[now - days, now]``."""
        end = _ensure_utc(now) if now else datetime.now(timezone.utc)
        return cls(start_time=end - timedelta(days=days), end_time=end)

    @property
    def days_spanned(self) -> int:
        """Whole days covered by the range, rounded up, never below 1."""
        seconds = (self.end_time - self.start_time).total_seconds()
        return max(1, math.ceil(seconds / SECONDS_PER_DAY))


# ============================================
# Trade
# ============================================

class Trade(BaseModel):
    """
    A single executed trade or fill, normalized across venues.

    Only ``price`` and ``size`` matter for volume; the rest is carried for
    display.
    """

    price: Decimal = Field(..., ge=0, description="Execution price in USD")
    size: Decimal = Field(..., ge=0, description="Executed quantity in base asset")
    executed_at: Optional[datetime] = Field(default=None, description="Execution time (UTC)")
    symbol: Optional[str] = Field(default=None, description="Venue market identifier")
    side: Optional[str] = Field(default=None, description="BUY / SELL as reported")

    @property
    def notional(self) -> Decimal:
        """USD value of the trade (price × size)."""
        return self.price * self.size

    @field_serializer("price", "size", when_used="json")
    def _decimal_to_number(self, value: Decimal) -> float:
        return float(value)


# ============================================
# Volume Result
# ============================================

class VolumeResult(BaseModel):
    """
    Result of one ``get_historical_volume`` call.

    Attributes:
        exchange: Venue that produced the result
        total_volume_usd: Finite, non-negative USD volume
        sample_trades: Display sample (possibly empty or truncated)
        source_tier: Which tier produced the figure
        range_start / range_end: The queried range
        estimated_days: Day multiplier used by the public estimate
        error: Diagnostic message, set when source_tier is ERROR
    """

    model_config = ConfigDict(frozen=True)

    exchange: str
    total_volume_usd: Decimal = Field(..., ge=0)
    sample_trades: List[Trade] = Field(default_factory=list)
    source_tier: SourceTier
    range_start: datetime
    range_end: datetime
    estimated_days: Optional[int] = None
    error: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        return self.source_tier is SourceTier.ERROR

    @field_serializer("total_volume_usd", when_used="json")
    def _volume_to_number(self, value: Decimal) -> float:
        return float(value)


# ============================================
# Snapshots & Aggregated View
# ============================================

class VolumeSnapshot(BaseModel):
    """
    Persisted per-venue volume record.

    Appended once per venue per aggregation run; never updated.
    """

    model_config = ConfigDict(frozen=True)

    platform: Platform
    volume_usd: Decimal = Field(..., ge=0)
    captured_at: datetime

    @field_validator("captured_at")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return _ensure_utc(v)

    @field_serializer("volume_usd", when_used="json")
    def _volume_to_number(self, value: Decimal) -> float:
        return float(value)


class PlatformVolume(BaseModel):
    """One venue's entry in the aggregated volume response."""

    total_volume_usd: Decimal = Field(..., ge=0)
    source_tier: SourceTier
    history: List[VolumeSnapshot] = Field(default_factory=list)
    error: Optional[str] = None

    @field_serializer("total_volume_usd", when_used="json")
    def _volume_to_number(self, value: Decimal) -> float:
        return float(value)
