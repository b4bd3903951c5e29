"""Prüfung eines Buchungswunsches aus dem Formular ("HH:MM"-Texte).

Reihenfolge: Uhrzeiten parsen → Zeitraum prüfen → Öffnungszeiten →
Konflikte. Jede Stufe bricht mit einem eigenen Fehler ab, bevor die
nächste läuft.
"""

import logging
from typing import Optional, Sequence

from booking.conflicts import Booking, TimeInterval, find_conflicts
from booking.errors import OutsideOpeningHoursError

logger = logging.getLogger(__name__)


def parse_request_interval(
    start_time: str,
    end_time: str,
    opening_hours: Optional[TimeInterval] = None,
) -> TimeInterval:
    """Parst Beginn/Ende und prüft optional gegen die Öffnungszeiten."""
    interval = TimeInterval.from_strings(start_time, end_time)
    if opening_hours is not None and not (
        opening_hours.start_minutes <= interval.start_minutes
        and interval.end_minutes <= opening_hours.end_minutes
    ):
        raise OutsideOpeningHoursError(
            f"Zeitraum {interval} liegt außerhalb der Öffnungszeiten {opening_hours}"
        )
    return interval


def check_request(
    start_time: str,
    end_time: str,
    existing: Sequence[Booking],
    opening_hours: Optional[TimeInterval] = None,
) -> list[Booking]:
    """Kompletter Formular-Check; gibt die kollidierenden Buchungen zurück."""
    interval = parse_request_interval(start_time, end_time, opening_hours)
    conflicts = find_conflicts(interval, existing)
    if conflicts:
        logger.info(
            f"Konflikt für {interval}: {len(conflicts)} bestehende Buchung(en) "
            f"({', '.join(b.id for b in conflicts)})"
        )
    return conflicts


def conflict_message(conflicts: Sequence[Booking]) -> str:
    """Meldungstext für den Nutzer; leerer Text wenn kein Konflikt."""
    if not conflicts:
        return ""
    return "Zeitkonflikt! Raum bereits belegt für: " + ", ".join(
        f"{b.label} ({b.interval})" for b in conflicts
    )
