"""Umrechnung von "HH:MM"-Uhrzeiten in Minuten seit Mitternacht."""

import re

from booking.errors import InvalidTimeFormatError

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"([0-9]{2}):([0-9]{2})")


def parse_time_to_minutes(text: str) -> int:
    """Wandelt "HH:MM" in Minuten seit Mitternacht um.

    Stunden und Minuten müssen zweistellig sein ("09:00", nicht "9:00").

    >>> parse_time_to_minutes("09:00")
    540
    """
    if not isinstance(text, str):
        raise InvalidTimeFormatError(text, "kein Text")
    m = _TIME_RE.fullmatch(text)
    if m is None:
        raise InvalidTimeFormatError(text)
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23:
        raise InvalidTimeFormatError(text, "Stunde außerhalb 00-23")
    if minutes > 59:
        raise InvalidTimeFormatError(text, "Minute außerhalb 00-59")
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Gegenstück zu parse_time_to_minutes: 540 → "09:00"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
