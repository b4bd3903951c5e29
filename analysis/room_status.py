"""Tagesstatus der Räume und freie Zeitfenster."""

import datetime as dt
from typing import Literal, Sequence

from pydantic import BaseModel

from booking.conflicts import Booking, TimeInterval
from models.campus_data import CampusData


class ClassroomStatus(BaseModel):
    """Belegungsstatus eines Raums an einem Tag."""

    classroom_id: str
    room_number: str
    status: Literal["available", "occupied", "inactive"]
    message: str
    booking_count: int
    free_minutes: int


def free_intervals(bookings: Sequence[Booking], opening_hours: TimeInterval,
                   min_minutes: int = 1) -> list[TimeInterval]:
    """Lücken zwischen den Buchungen innerhalb der Öffnungszeiten.

    Überlappende Buchungen werden zusammengefasst; Lücken kürzer als
    `min_minutes` fallen weg.
    """
    gaps: list[TimeInterval] = []
    cursor = opening_hours.start_minutes
    for b in sorted(bookings, key=lambda x: x.interval.start_minutes):
        start = min(max(b.interval.start_minutes, opening_hours.start_minutes),
                    opening_hours.end_minutes)
        if start - cursor >= min_minutes:
            gaps.append(TimeInterval(cursor, start))
        cursor = max(cursor, min(b.interval.end_minutes, opening_hours.end_minutes))
    if opening_hours.end_minutes - cursor >= min_minutes:
        gaps.append(TimeInterval(cursor, opening_hours.end_minutes))
    return gaps


def classroom_status(data: CampusData, classroom_id: str, day: dt.date,
                     opening_hours: TimeInterval) -> ClassroomStatus:
    room = data.find_classroom(classroom_id)
    if room is None:
        raise KeyError(f"Raum nicht gefunden: {classroom_id}")
    bookings = data.bookings_for_room(room.id, day)
    free = sum(g.duration for g in free_intervals(bookings, opening_hours))

    if not room.is_active:
        status, message = "inactive", "Nicht buchbar"
    elif not bookings:
        status, message = "available", "Heute keine Veranstaltungen"
    else:
        n = len(bookings)
        status = "occupied"
        message = f"{n} Veranstaltung{'en' if n > 1 else ''}"

    return ClassroomStatus(
        classroom_id=room.id,
        room_number=room.room_number,
        status=status,
        message=message,
        booking_count=len(bookings),
        free_minutes=free,
    )


def campus_status(data: CampusData, day: dt.date,
                  opening_hours: TimeInterval) -> list[ClassroomStatus]:
    """Status aller Räume, sortiert nach Raumnummer."""
    return [
        classroom_status(data, c.id, day, opening_hours)
        for c in sorted(data.classrooms, key=lambda c: c.room_number)
    ]
