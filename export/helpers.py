"""Gemeinsame Hilfsfunktionen für den Excel-Export."""

from datetime import date

from booking.conflicts import TimeInterval, intervals_overlap
from config.schema import BookingRulesConfig
from models.schedule import ScheduleEntry, ScheduleStatus

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    ScheduleStatus.SCHEDULED.value:   "B3D4FF",
    ScheduleStatus.RESCHEDULED.value: "FFF2B3",
    ScheduleStatus.COMPLETED.value:   "D9D9D9",
    ScheduleStatus.CANCELLED.value:   "FFB3B3",
    "conflict": "FF9999",
    "free":     "F5F5F5",
    "header":   "4472C4",
}


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


# ─── Zeitraster ───────────────────────────────────────────────────────────────

def build_time_grid_rows(rules: BookingRulesConfig) -> list[TimeInterval]:
    """Zerlegt die Öffnungszeiten in gleich lange Rasterzeilen.

    Die letzte Zeile endet an der Schließzeit, auch wenn sie kürzer ist.
    """
    oh = rules.opening_hours
    rows: list[TimeInterval] = []
    start = oh.start_minutes
    while start < oh.end_minutes:
        end = min(start + rules.grid_minutes, oh.end_minutes)
        rows.append(TimeInterval(start, end))
        start = end
    return rows


def entries_in_row(entries: list[ScheduleEntry], row: TimeInterval) -> list[ScheduleEntry]:
    """Belegungen, die eine Rasterzeile (teilweise) abdecken."""
    return [e for e in entries if intervals_overlap(row, e.interval)]


def cell_color(entries: list[ScheduleEntry]) -> str:
    """Mehr als eine aktive Belegung in einer Zelle = Konflikt-Farbe."""
    active = [e for e in entries if e.blocks_room]
    if len(active) > 1:
        return COLORS["conflict"]
    if not entries:
        return COLORS["free"]
    shown = active[0] if active else entries[0]
    return COLORS[shown.status.value]
