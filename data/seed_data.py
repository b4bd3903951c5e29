"""Seed-Daten für den Campus-Raumplaner.

Erzeugt die Stammdaten des Campus (Räume, Dozenten) und einen zufälligen,
konfliktfreien Belegungstag. Jede erzeugte Veranstaltung wird mit
find_conflicts gegen Raum UND Dozent geprüft, bevor sie übernommen wird.

Optional (inject_conflict=True) wird absichtlich eine Doppelbelegung
eingebaut, damit `audit` etwas zu melden hat.
"""

import datetime as dt
import random
from typing import Optional

from booking.conflicts import Booking, TimeInterval, find_conflicts
from booking.timeparse import format_minutes
from config.defaults import DEFAULT_CLASSROOMS, DEFAULT_COURSES, DEFAULT_FACULTY
from config.schema import CampusConfig
from models.campus_data import CampusData
from models.classroom import Classroom
from models.faculty import Faculty, FacultyStatus
from models.schedule import ScheduleEntry

# Veranstaltungslängen in Minuten (gewichtet: 90 min ist der Normalfall)
_DURATIONS: list[tuple[int, int]] = [(60, 2), (90, 5), (120, 1)]


class SeedDataGenerator:
    """Generiert einen Campus-Datensatz auf Basis der CampusConfig."""

    def __init__(self, config: CampusConfig, seed: Optional[int] = None) -> None:
        self.config = config
        self.rng = random.Random(seed)

    # ─── Stammdaten ───────────────────────────────────────────────────────────

    def _generate_classrooms(self) -> list[Classroom]:
        return [
            Classroom(id=f"CR{i:02d}", is_active=True, **row)
            for i, row in enumerate(DEFAULT_CLASSROOMS, 1)
        ]

    def _generate_faculty(self) -> list[Faculty]:
        return [
            Faculty(id=f"F{i:02d}", **row)
            for i, row in enumerate(DEFAULT_FACULTY, 1)
        ]

    # ─── Belegungen ───────────────────────────────────────────────────────────

    def _random_interval(self) -> TimeInterval:
        """Zufälliger Zeitraum im Raster innerhalb der Öffnungszeiten.

        Ist die Öffnungszeit kürzer als jede Veranstaltungslänge, wird sie
        komplett belegt.
        """
        rules = self.config.booking
        oh = rules.opening_hours
        fitting = [(d, w) for d, w in _DURATIONS if d <= oh.duration]
        if not fitting:
            return oh
        duration = self.rng.choices(
            [d for d, _ in fitting], weights=[w for _, w in fitting]
        )[0]
        latest_start = oh.end_minutes - duration
        steps = (latest_start - oh.start_minutes) // rules.grid_minutes
        start = oh.start_minutes + self.rng.randint(0, steps) * rules.grid_minutes
        return TimeInterval(start, start + duration)

    def _generate_schedules(
        self,
        day: dt.date,
        classrooms: list[Classroom],
        faculty: list[Faculty],
        per_room: int,
    ) -> list[ScheduleEntry]:
        """Verteilt bis zu `per_room` Veranstaltungen je Raum ohne Konflikte."""
        teaching = [f for f in faculty if f.status == FacultyStatus.PRESENT]
        if not teaching:
            return []

        entries: list[ScheduleEntry] = []
        room_bookings: dict[str, list[Booking]] = {c.id: [] for c in classrooms}
        faculty_bookings: dict[str, list[Booking]] = {f.id: [] for f in teaching}
        counter = 0

        for room in classrooms:
            placed = 0
            attempts = 0
            while placed < per_room and attempts < per_room * 20:
                attempts += 1
                interval = self._random_interval()
                lecturer = self.rng.choice(teaching)
                if find_conflicts(interval, room_bookings[room.id]):
                    continue
                if find_conflicts(interval, faculty_bookings[lecturer.id]):
                    continue

                course_id, course_name, typical = self.rng.choice(
                    DEFAULT_COURSES.get(lecturer.department, [("GEN100", "General Studies", 30)])
                )
                counter += 1
                entry = ScheduleEntry(
                    id=f"S{counter:03d}",
                    classroom_id=room.id,
                    course_name=course_name,
                    course_id=course_id,
                    faculty_id=lecturer.id,
                    date=day,
                    start_time=format_minutes(interval.start_minutes),
                    end_time=format_minutes(interval.end_minutes),
                    enrolled_students=min(room.capacity, typical + self.rng.randint(-5, 5)),
                )
                booking = entry.to_booking()
                room_bookings[room.id].append(booking)
                faculty_bookings[lecturer.id].append(booking)
                entries.append(entry)
                placed += 1

        return entries

    def _inject_conflict(self, entries: list[ScheduleEntry]) -> list[ScheduleEntry]:
        """Doppelbelegung: zweite Veranstaltung 30 min nach Beginn der ersten.

        Reicht die verschobene Veranstaltung über die Schließzeit, rückt sie
        nach vorne; sie überlappt die erste trotzdem.
        """
        if not entries:
            return entries
        first = entries[0]
        iv = first.interval
        oh = self.config.booking.opening_hours
        start = iv.start_minutes + min(30, iv.duration - 1)
        start = max(min(start, oh.end_minutes - iv.duration), oh.start_minutes)
        clash = ScheduleEntry.model_validate({
            **first.model_dump(),
            "id": f"S{len(entries) + 1:03d}",
            "course_name": f"{first.course_name} (Zusatztermin)",
            "start_time": format_minutes(start),
            "end_time": format_minutes(start + iv.duration),
        })
        return entries + [clash]

    # ─── Gesamt ───────────────────────────────────────────────────────────────

    def generate(
        self,
        day: Optional[dt.date] = None,
        per_room: int = 3,
        inject_conflict: bool = False,
    ) -> CampusData:
        """Erzeugt den vollständigen Datensatz als CampusData-Objekt."""
        day = day or dt.date.today()
        classrooms = self._generate_classrooms()
        faculty = self._generate_faculty()
        schedules = self._generate_schedules(day, classrooms, faculty, per_room)
        if inject_conflict:
            schedules = self._inject_conflict(schedules)
        return CampusData(classrooms=classrooms, faculty=faculty, schedules=schedules)

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: CampusData) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Seed-Daten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        present = sum(1 for f in data.faculty if f.is_available)
        total_seats = sum(c.capacity for c in data.classrooms)
        table.add_row("Räume", str(len(data.classrooms)), f"{total_seats} Plätze gesamt")
        table.add_row("Dozenten", str(len(data.faculty)), f"{present} anwesend")
        table.add_row("Belegungen", str(len(data.schedules)),
                      ", ".join(sorted({s.date.isoformat() for s in data.schedules})))
        console.print(table)
