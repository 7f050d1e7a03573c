"""
Numeric parsing helpers.

Venue payloads carry prices and sizes as strings, numbers or nulls.
``to_decimal`` turns all of them into ``Decimal`` so volume sums stay exact.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from core.exceptions import MalformedResponse


def to_decimal(value: Any, default: str = "0") -> Decimal:
    """
    Parse a venue number into a finite Decimal.

    ``None`` and empty strings become ``default``. Floats go through ``str``
    so ``0.1`` stays ``Decimal("0.1")``.

    Raises:
        MalformedResponse: If the value is not a finite number
    """
    if value is None or value == "":
        return Decimal(default)

    if isinstance(value, bool):
        raise MalformedResponse(f"Expected a number, got boolean {value!r}")

    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise MalformedResponse(f"Expected a number, got {value!r}") from e

    if not result.is_finite():
        raise MalformedResponse(f"Expected a finite number, got {value!r}")

    return result
