"""CampusData: Räume, Dozenten und Belegungen als ein Datensatz (Pydantic v2)."""

import datetime as dt
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from booking.conflicts import Booking
from models.classroom import Classroom
from models.faculty import Faculty
from models.schedule import ScheduleEntry


class CampusData(BaseModel):
    """Vollständiger Campus-Datensatz."""

    classrooms: list[Classroom] = []
    faculty: list[Faculty] = []
    schedules: list[ScheduleEntry] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    # Wird bei jedem Schreibvorgang des Stores erhöht
    revision: int = 0
    data_version: str = "1.0"

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        active = sum(1 for c in self.classrooms if c.is_active)
        present = sum(1 for f in self.faculty if f.is_available)
        blocking = sum(1 for s in self.schedules if s.blocks_room)
        days = {s.date for s in self.schedules}
        lines = [
            f"Räume: {len(self.classrooms)} ({active} aktiv)",
            f"Dozenten: {len(self.faculty)} ({present} anwesend)",
            f"Belegungen: {len(self.schedules)} "
            f"({blocking} aktiv, {len(self.schedules) - blocking} abgesagt)",
            f"Tage mit Belegungen: {len(days)}" if days else "",
            f"Revision: {self.revision}",
        ]
        return "\n".join(l for l in lines if l)

    # ─── Suche ───

    def find_classroom(self, key: str) -> Optional[Classroom]:
        """Sucht einen Raum über ID oder Raumnummer (Groß-/Kleinschreibung egal).

        Eine passende ID hat Vorrang vor einer gleichlautenden Raumnummer.
        """
        k = key.strip().upper()
        by_id = next((c for c in self.classrooms if c.id.upper() == k), None)
        if by_id is not None:
            return by_id
        return next((c for c in self.classrooms if c.room_number == k), None)

    def find_faculty(self, key: str) -> Optional[Faculty]:
        """Sucht einen Dozenten über ID oder exakten Namen."""
        for f in self.faculty:
            if f.id.upper() == key.strip().upper() or f.name == key:
                return f
        return None

    def find_schedule(self, schedule_id: str) -> Optional[ScheduleEntry]:
        return next((s for s in self.schedules if s.id == schedule_id), None)

    # ─── Vorfilter für die Konfliktprüfung ───

    def schedules_for_room(self, classroom_id: str, day: dt.date,
                           include_cancelled: bool = False) -> list[ScheduleEntry]:
        """Alle Belegungen eines Raums an einem Tag, nach Beginn sortiert."""
        result = [
            s for s in self.schedules
            if s.classroom_id == classroom_id and s.date == day
            and (include_cancelled or s.blocks_room)
        ]
        return sorted(result, key=lambda s: s.interval.start_minutes)

    def schedules_for_faculty(self, faculty_id: str, day: dt.date) -> list[ScheduleEntry]:
        """Alle aktiven Veranstaltungen eines Dozenten an einem Tag."""
        result = [
            s for s in self.schedules
            if s.faculty_id == faculty_id and s.date == day and s.blocks_room
        ]
        return sorted(result, key=lambda s: s.interval.start_minutes)

    def bookings_for_room(self, classroom_id: str, day: dt.date,
                          exclude_id: Optional[str] = None) -> list[Booking]:
        """Bestehende Buchungen für find_conflicts (gleicher Raum, gleicher Tag)."""
        return [
            s.to_booking() for s in self.schedules_for_room(classroom_id, day)
            if s.id != exclude_id
        ]

    def bookings_for_faculty(self, faculty_id: str, day: dt.date,
                             exclude_id: Optional[str] = None) -> list[Booking]:
        return [
            s.to_booking() for s in self.schedules_for_faculty(faculty_id, day)
            if s.id != exclude_id
        ]

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "CampusData":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
