"""
Core Utilities Package

Modules:
    - time: Timestamp conversion between venue formats and UTC datetimes
    - numbers: Exact Decimal parsing of venue numbers
"""

from core.utils.numbers import to_decimal
from core.utils.time import to_utc_datetime, to_iso8601, datetime_to_timestamp

__all__ = ["to_decimal", "to_utc_datetime", "to_iso8601", "datetime_to_timestamp"]
