"""Konfliktprüfung für Raumbuchungen.

Intervalle sind halboffen [Beginn, Ende): eine Veranstaltung 09:00–10:30
kollidiert NICHT mit einer anschließenden 10:30–12:00 im selben Raum.

Die Prüfung ist rein beratend: sie kennt nur den übergebenen Schnappschuss.
Raum- und Datumsfilter sind Sache des Aufrufers.
"""

from dataclasses import dataclass
from typing import Sequence

from booking.errors import InvalidIntervalError
from booking.timeparse import MINUTES_PER_DAY, format_minutes, parse_time_to_minutes


@dataclass(frozen=True)
class TimeInterval:
    """Zeitraum innerhalb eines Tages in Minuten seit Mitternacht."""

    start_minutes: int
    end_minutes: int

    @classmethod
    def from_strings(cls, start: str, end: str) -> "TimeInterval":
        """Erzeugt ein geprüftes Intervall aus zwei "HH:MM"-Texten."""
        interval = cls(parse_time_to_minutes(start), parse_time_to_minutes(end))
        interval.validate()
        return interval

    def validate(self) -> None:
        """Wirft InvalidIntervalError bei leerem/invertiertem Zeitraum."""
        for value in (self.start_minutes, self.end_minutes):
            if not 0 <= value < MINUTES_PER_DAY:
                raise InvalidIntervalError(
                    self.start_minutes, self.end_minutes,
                    f"Zeitpunkt {value} liegt außerhalb des Tages (0-{MINUTES_PER_DAY - 1})",
                )
        if self.start_minutes >= self.end_minutes:
            raise InvalidIntervalError(self.start_minutes, self.end_minutes)

    @property
    def duration(self) -> int:
        return self.end_minutes - self.start_minutes

    def overlaps(self, other: "TimeInterval") -> bool:
        return intervals_overlap(self, other)

    def __str__(self) -> str:
        return f"{format_minutes(self.start_minutes)}–{format_minutes(self.end_minutes)}"


@dataclass(frozen=True)
class Booking:
    """Bestehende Raumbelegung, wie sie der Prüfung übergeben wird."""

    id: str
    room_id: str
    interval: TimeInterval
    label: str   # Kurs-/Veranstaltungsname für die Konfliktmeldung

    def __post_init__(self) -> None:
        self.interval.validate()


def intervals_overlap(a: TimeInterval, b: TimeInterval) -> bool:
    """True wenn sich zwei halboffene Intervalle schneiden."""
    return a.start_minutes < b.end_minutes and a.end_minutes > b.start_minutes


def find_conflicts(candidate: TimeInterval, existing: Sequence[Booking]) -> list[Booking]:
    """Alle bestehenden Buchungen, die den Kandidaten überlappen.

    `existing` muss bereits auf denselben Raum und Tag gefiltert sein.
    Die Reihenfolge der Eingabe bleibt erhalten; leere Liste = kein Konflikt.
    """
    candidate.validate()
    return [b for b in existing if intervals_overlap(candidate, b.interval)]
