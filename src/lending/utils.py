"""Utility functions for calendar dates."""

import re
from datetime import date

from .exceptions import DateParseError

ISO_DATE_PATTERN = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})$")


def parse_date(text: str) -> date:
    """
    Parse a calendar date in ``YYYY-MM-DD`` form.

    Args:
        text: The date literal

    Returns:
        The parsed date

    Raises:
        DateParseError: If the literal is not a well-formed, real calendar date

    Example:
        >>> parse_date("2024-09-01")
        datetime.date(2024, 9, 1)
    """
    if not isinstance(text, str):
        raise DateParseError(text, "expected a string")

    match = ISO_DATE_PATTERN.match(text)
    if not match:
        raise DateParseError(text)

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise DateParseError(text, str(e)) from e


def format_date(value: date) -> str:
    """
    Format a date as ``YYYY-MM-DD``.

    Example:
        >>> format_date(date(2024, 9, 1))
        '2024-09-01'
    """
    return value.isoformat()
