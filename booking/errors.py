"""Fehlerklassen der Raumbuchung.

Alle Validierungsfehler sind deterministisch und nicht wiederholbar: der
Aufrufer zeigt eine Meldung an und bricht die Buchung ab.
"""


class BookingError(Exception):
    """Basisklasse aller Buchungsfehler."""


class InvalidTimeFormatError(BookingError, ValueError):
    """Uhrzeit ist kein gültiger "HH:MM"-Text (z.B. "9:00", "25:00", "09:60")."""

    def __init__(self, text: object, reason: str = "") -> None:
        self.text = text
        msg = f"Ungültige Uhrzeit: {text!r} (erwartet HH:MM)"
        if reason:
            msg += f" – {reason}"
        super().__init__(msg)


class InvalidIntervalError(BookingError, ValueError):
    """Zeitraum ist leer, invertiert oder liegt außerhalb eines Tages."""

    def __init__(self, start_minutes: int, end_minutes: int, reason: str = "") -> None:
        self.start_minutes = start_minutes
        self.end_minutes = end_minutes
        super().__init__(
            reason or f"Ungültiger Zeitraum: Beginn ({start_minutes}) muss vor Ende ({end_minutes}) liegen"
        )


class OutsideOpeningHoursError(BookingError, ValueError):
    """Buchung liegt (teilweise) außerhalb der Öffnungszeiten."""


class BookingConflictError(BookingError):
    """Raum ist im gewünschten Zeitraum bereits belegt.

    `conflicts` enthält die kollidierenden Buchungen in Eingabereihenfolge.
    """

    def __init__(self, conflicts: list, message: str = "") -> None:
        self.conflicts = list(conflicts)
        labels = ", ".join(b.label for b in self.conflicts)
        super().__init__(message or f"Zeitkonflikt! Raum bereits belegt für: {labels}")
