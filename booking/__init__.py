"""Raumbuchung: Zeitparsing und Konfliktprüfung (ohne I/O)."""

from booking.errors import (
    BookingConflictError,
    BookingError,
    InvalidIntervalError,
    InvalidTimeFormatError,
    OutsideOpeningHoursError,
)
from booking.timeparse import format_minutes, parse_time_to_minutes
from booking.conflicts import Booking, TimeInterval, find_conflicts, intervals_overlap

__all__ = [
    "BookingConflictError",
    "BookingError",
    "InvalidIntervalError",
    "InvalidTimeFormatError",
    "OutsideOpeningHoursError",
    "format_minutes",
    "parse_time_to_minutes",
    "Booking",
    "TimeInterval",
    "find_conflicts",
    "intervals_overlap",
]
