"""Conversions from driver cell values to text and numbers."""

from decimal import Decimal

__all__ = ["as_text", "parse_count", "parse_number"]


def as_text(value: object) -> str:
    """Return a cell as text; drivers may hand back bytes or None."""
    if value is None:
        return ""
    if isinstance(value, bytes | bytearray):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def parse_number(value: object) -> float | None:
    """Parse a cell as a 64-bit float.

    Returns:
        The value, or None if it is not numeric.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float | Decimal):
        return float(value)
    try:
        return float(as_text(value).strip())
    except ValueError:
        return None


def parse_count(value: object) -> int | None:
    """Parse a cell as a non-negative integer count.

    Returns:
        The count, or None if it is not a whole non-negative number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    text = as_text(value).strip()
    try:
        count = int(text)
    except ValueError:
        number = parse_number(value)
        if number is None or not number.is_integer():
            return None
        count = int(number)
    return count if count >= 0 else None
