"""
Time Utilities

The two venues disagree on time formats:
- WOO X: trade timestamps in seconds with a fractional part
  (e.g. "1704110400.123"), request ``timestamp`` in milliseconds and
  ``start_time``/``end_time`` in whole seconds
- Paradex: fill ``created_at`` in milliseconds, list-fills bounds as
  ISO-8601 strings

Everything inside the pipeline is a timezone-aware UTC datetime; these
helpers convert at the edges.
"""

from datetime import datetime, timezone
from typing import Union


def to_utc_datetime(timestamp: Union[int, float, str]) -> datetime:
    """
    Convert a timestamp (seconds or milliseconds) to a UTC datetime.

    Values above 1e12 are treated as milliseconds. Numeric strings are
    accepted since both venues return numbers as strings.

    Examples:
        >>> to_utc_datetime(1704110400000)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)

        >>> to_utc_datetime("1704110400.5")
        datetime.datetime(2024, 1, 1, 12, 0, 0, 500000, tzinfo=datetime.timezone.utc)

    Raises:
        ValueError: If the timestamp is negative or not a number
    """
    if isinstance(timestamp, str):
        timestamp = float(timestamp)

    if timestamp < 0:
        raise ValueError(f"Timestamp cannot be negative: {timestamp}")

    if timestamp > 1e12:
        timestamp = timestamp / 1000.0

    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OSError, OverflowError, ValueError) as e:
        raise ValueError(f"Invalid timestamp: {timestamp}. Error: {e}")


def datetime_to_timestamp(dt: datetime, milliseconds: bool = False) -> int:
    """
    Convert a datetime to a Unix timestamp (naive datetimes are UTC).

    Examples:
        >>> dt = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        >>> datetime_to_timestamp(dt)
        1704110400
        >>> datetime_to_timestamp(dt, milliseconds=True)
        1704110400000
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    if milliseconds:
        return int(dt.timestamp() * 1000)
    return int(dt.timestamp())


def to_iso8601(dt: datetime) -> str:
    """
    Render a datetime as ISO-8601 in UTC with millisecond precision.

    Example:
        >>> to_iso8601(datetime(2024, 1, 1, tzinfo=timezone.utc))
        '2024-01-01T00:00:00.000Z'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def current_utc_timestamp(milliseconds: bool = False) -> int:
    """Current Unix timestamp in seconds (or milliseconds)."""
    return datetime_to_timestamp(datetime.now(timezone.utc), milliseconds)


def current_utc_datetime() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)
