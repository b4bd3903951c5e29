"""Nachträgliche Prüfung gespeicherter Belegungen.

Die Konfliktprüfung beim Buchen sieht nur den jeweiligen Schnappschuss;
dieser Audit läuft über den kompletten Datensatz und findet
Doppelbelegungen, die trotzdem entstanden sind (z.B. durch Import oder
parallele Schreiber).
"""

import datetime as dt
from collections import defaultdict
from typing import Literal, Optional

from pydantic import BaseModel

from booking.conflicts import find_conflicts
from models.campus_data import CampusData
from models.schedule import ScheduleEntry


class ScheduleConflict(BaseModel):
    """Ein einzelner gefundener Konflikt."""

    conflict_type: Literal["classroom", "faculty", "room_capacity"]
    schedule_id: str
    other_id: Optional[str] = None    # Gegenstück bei Doppelbelegung
    date: dt.date
    details: str


class AuditReport(BaseModel):
    """Ergebnis des Audits."""

    conflicts: list[ScheduleConflict]
    checked_schedules: int

    @property
    def is_clean(self) -> bool:
        return not self.conflicts

    def by_type(self, conflict_type: str) -> list[ScheduleConflict]:
        return [c for c in self.conflicts if c.conflict_type == conflict_type]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ KEINE KONFLIKTE[/bold green]"
            if self.is_clean
            else "[bold red]✗ KONFLIKTE GEFUNDEN[/bold red]"
        )
        lines = [
            status,
            f"Geprüft: {self.checked_schedules} | "
            f"Raum: {len(self.by_type('classroom'))} | "
            f"Dozent: {len(self.by_type('faculty'))} | "
            f"Kapazität: {len(self.by_type('room_capacity'))}",
        ]
        console.print(Panel("\n".join(lines), title="Belegungs-Audit", border_style="cyan"))

        if self.is_clean:
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=14)
        table.add_column("Datum", width=11)
        table.add_column("Belegung", width=12)
        table.add_column("Beschreibung")
        for c in self.conflicts:
            color = "yellow" if c.conflict_type == "room_capacity" else "red"
            table.add_row(
                f"[{color}]{c.conflict_type}[/{color}]",
                c.date.isoformat(),
                c.schedule_id,
                c.details,
            )
        console.print(table)


class ConflictAuditor:
    """Prüft einen CampusData-Datensatz auf Doppelbelegungen und Überbuchung."""

    def audit(self, data: CampusData, day: Optional[dt.date] = None) -> AuditReport:
        schedules = [
            s for s in data.schedules
            if s.blocks_room and (day is None or s.date == day)
        ]
        conflicts: list[ScheduleConflict] = []
        conflicts += self._pairwise(schedules, "classroom", lambda s: s.classroom_id, data)
        conflicts += self._pairwise(schedules, "faculty", lambda s: s.faculty_id, data)
        conflicts += self._capacity(schedules, data)
        return AuditReport(conflicts=conflicts, checked_schedules=len(schedules))

    def _pairwise(self, schedules: list[ScheduleEntry], conflict_type: str,
                  key, data: CampusData) -> list[ScheduleConflict]:
        """Jedes überlappende Paar (gleicher Schlüssel, gleicher Tag) genau einmal."""
        groups: dict[tuple[str, dt.date], list[ScheduleEntry]] = defaultdict(list)
        for s in schedules:
            groups[(key(s), s.date)].append(s)

        found: list[ScheduleConflict] = []
        for (group_key, day), entries in groups.items():
            entries.sort(key=lambda s: (s.interval.start_minutes, s.id))
            for i, entry in enumerate(entries):
                earlier = [e.to_booking() for e in entries[:i]]
                for other in find_conflicts(entry.interval, earlier):
                    found.append(ScheduleConflict(
                        conflict_type=conflict_type,
                        schedule_id=entry.id,
                        other_id=other.id,
                        date=day,
                        details=self._describe(conflict_type, group_key, entry, other.label,
                                               str(other.interval), data),
                    ))
        return found

    def _capacity(self, schedules: list[ScheduleEntry], data: CampusData) -> list[ScheduleConflict]:
        found: list[ScheduleConflict] = []
        for s in schedules:
            room = data.find_classroom(s.classroom_id)
            if room is not None and s.enrolled_students > room.capacity:
                found.append(ScheduleConflict(
                    conflict_type="room_capacity",
                    schedule_id=s.id,
                    date=s.date,
                    details=(
                        f"{s.course_name}: {s.enrolled_students} Teilnehmer, "
                        f"Raum {room.room_number} hat nur {room.capacity} Plätze"
                    ),
                ))
        return found

    @staticmethod
    def _describe(conflict_type: str, group_key: str, entry: ScheduleEntry,
                  other_label: str, other_interval: str, data: CampusData) -> str:
        if conflict_type == "classroom":
            room = data.find_classroom(group_key)
            where = room.room_number if room else group_key
            return (f"Raum {where}: {entry.course_name} ({entry.interval}) "
                    f"überschneidet {other_label} ({other_interval})")
        member = data.find_faculty(group_key)
        who = member.name if member else group_key
        return (f"{who}: {entry.course_name} ({entry.interval}) "
                f"zeitgleich mit {other_label} ({other_interval})")
