"""ScheduleStore: JSON-Datei als Ablage für den Campus-Datensatz.

Ein Store wird pro Prozess genau einmal geöffnet und an alle Aufrufer
weitergereicht, die lesen oder schreiben müssen.

Neue Belegungen werden per Compare-and-Write angelegt: unter dem Lock wird
der zuletzt geschriebene Stand neu geladen, die Konfliktprüfung erneut
ausgeführt und erst dann geschrieben. Damit kann ein veralteter Schnappschuss
des Aufrufers keine Doppelbelegung mehr erzeugen. Schreibende Prozesse
untereinander sind NICHT gegeneinander gesperrt (kein Datei-Lock).
"""

import datetime as dt
import logging
import os
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from booking.conflicts import Booking, TimeInterval, find_conflicts
from booking.errors import BookingConflictError, OutsideOpeningHoursError
from models.campus_data import CampusData
from models.classroom import Classroom
from models.faculty import FacultyStatus
from models.schedule import ScheduleEntry, ScheduleStatus

logger = logging.getLogger(__name__)


def new_schedule_id() -> str:
    """Zufällige, kurze Dokument-ID."""
    return uuid.uuid4().hex[:12]


class ScheduleStore:
    """Dateibasierte Ablage mit Compare-and-Write für Buchungen."""

    def __init__(self, path: Path, opening_hours: Optional[TimeInterval] = None) -> None:
        self.path = Path(path)
        self.opening_hours = opening_hours
        self._lock = threading.Lock()
        self._data = self._read()

    @classmethod
    def from_data(cls, path: Path, data: CampusData,
                  opening_hours: Optional[TimeInterval] = None) -> "ScheduleStore":
        """Legt einen neuen Store mit vorhandenem Datensatz an (z.B. Seed-Daten)."""
        path = Path(path)
        cls._write_atomic(path, data)
        return cls(path, opening_hours=opening_hours)

    # ─── Lesen ───

    @property
    def data(self) -> CampusData:
        """Zuletzt geladener Stand (Schnappschuss)."""
        return self._data

    def refresh(self) -> CampusData:
        with self._lock:
            self._data = self._read()
            return self._data

    def get(self, schedule_id: str) -> ScheduleEntry:
        entry = self._data.find_schedule(schedule_id)
        if entry is None:
            raise KeyError(f"Belegung nicht gefunden: {schedule_id}")
        return entry

    def get_by_classroom_and_date(self, classroom_id: str, day: dt.date) -> list[ScheduleEntry]:
        return self._data.schedules_for_room(classroom_id, day)

    def get_by_faculty_and_date(self, faculty_id: str, day: dt.date) -> list[ScheduleEntry]:
        return self._data.schedules_for_faculty(faculty_id, day)

    def active_classrooms(self) -> list[Classroom]:
        return [c for c in self._data.classrooms if c.is_active]

    # ─── Prüfen ───

    def check(self, entry: ScheduleEntry, data: Optional[CampusData] = None) -> list[Booking]:
        """Raumkonflikte einer (noch nicht gespeicherten) Belegung."""
        data = data or self._data
        existing = data.bookings_for_room(entry.classroom_id, entry.date, exclude_id=entry.id)
        return find_conflicts(entry.interval, existing)

    def check_faculty(self, entry: ScheduleEntry, data: Optional[CampusData] = None) -> list[Booking]:
        """Veranstaltungen desselben Dozenten, die zeitgleich liegen."""
        data = data or self._data
        existing = data.bookings_for_faculty(entry.faculty_id, entry.date, exclude_id=entry.id)
        return find_conflicts(entry.interval, existing)

    # ─── Schreiben ───

    def create(self, entry: ScheduleEntry) -> ScheduleEntry:
        """Legt eine Belegung an, wenn sie gegen den aktuellen Stand konfliktfrei ist.

        Wirft BookingConflictError (nichts wird geschrieben), KeyError bei
        unbekanntem/inaktivem Raum und OutsideOpeningHoursError.
        """
        self._check_opening_hours(entry)
        with self._lock:
            latest = self._read()
            room = next((c for c in latest.classrooms if c.id == entry.classroom_id), None)
            if room is None or not room.is_active:
                raise KeyError(f"Raum nicht buchbar: {entry.classroom_id}")
            if latest.find_schedule(entry.id) is not None:
                raise KeyError(f"Belegung existiert bereits: {entry.id}")

            conflicts = self.check(entry, latest)
            if conflicts:
                logger.warning(
                    f"Buchung abgelehnt: {room.room_number} {entry.date} "
                    f"{entry.interval} kollidiert mit {[b.id for b in conflicts]}"
                )
                raise BookingConflictError(conflicts)

            stored = entry.model_copy(update={
                "created_at": entry.created_at or datetime.now(timezone.utc),
            })
            self._commit(latest.model_copy(update={
                "schedules": latest.schedules + [stored],
            }))
            logger.info(f"Belegung {stored.id} angelegt: {room.room_number} {stored.date} {stored.interval}")
            return stored

    def update_status(self, schedule_id: str, status: ScheduleStatus) -> ScheduleEntry:
        """Setzt den Status einer Belegung (z.B. Absage)."""
        with self._lock:
            latest = self._read()
            entry = latest.find_schedule(schedule_id)
            if entry is None:
                raise KeyError(f"Belegung nicht gefunden: {schedule_id}")
            updated = entry.model_copy(update={"status": status})
            if entry.status == ScheduleStatus.CANCELLED and updated.blocks_room:
                # Reaktivierung belegt den Raum wieder → erneut prüfen
                conflicts = self.check(updated, latest)
                if conflicts:
                    raise BookingConflictError(conflicts)
            self._commit(latest.model_copy(update={
                "schedules": [updated if s.id == schedule_id else s for s in latest.schedules],
            }))
            logger.info(f"Belegung {schedule_id}: Status {entry.status.value} → {status.value}")
            return updated

    def update_faculty_status(self, faculty_id: str, status: FacultyStatus) -> None:
        with self._lock:
            latest = self._read()
            member = latest.find_faculty(faculty_id)
            if member is None:
                raise KeyError(f"Dozent nicht gefunden: {faculty_id}")
            updated = member.model_copy(update={
                "status": status,
                "status_updated_at": datetime.now(timezone.utc),
            })
            self._commit(latest.model_copy(update={
                "faculty": [updated if f.id == member.id else f for f in latest.faculty],
            }))

    def add_classroom(self, classroom: Classroom) -> None:
        with self._lock:
            latest = self._read()
            if any(c.id == classroom.id or c.room_number == classroom.room_number
                   for c in latest.classrooms):
                raise KeyError(f"Raum existiert bereits: {classroom.room_number}")
            self._commit(latest.model_copy(update={
                "classrooms": latest.classrooms + [classroom],
            }))

    def deactivate_classroom(self, classroom_id: str) -> None:
        with self._lock:
            latest = self._read()
            room = latest.find_classroom(classroom_id)
            if room is None:
                raise KeyError(f"Raum nicht gefunden: {classroom_id}")
            self._commit(latest.model_copy(update={
                "classrooms": [
                    c.model_copy(update={"is_active": False}) if c.id == room.id else c
                    for c in latest.classrooms
                ],
            }))

    # ─── Intern ───

    def _check_opening_hours(self, entry: ScheduleEntry) -> None:
        oh = self.opening_hours
        if oh is None:
            return
        iv = entry.interval
        if iv.start_minutes < oh.start_minutes or iv.end_minutes > oh.end_minutes:
            raise OutsideOpeningHoursError(
                f"Zeitraum {iv} liegt außerhalb der Öffnungszeiten {oh}")

    def _read(self) -> CampusData:
        if not self.path.exists():
            return CampusData()
        return CampusData.load_json(self.path)

    def _commit(self, data: CampusData) -> None:
        data = data.model_copy(update={"revision": data.revision + 1})
        self._write_atomic(self.path, data)
        self._data = data

    @staticmethod
    def _write_atomic(path: Path, data: CampusData) -> None:
        """Schreibt über eine Temp-Datei + os.replace (nie halb geschriebene Datei)."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        os.close(fd)
        try:
            data.save_json(Path(tmp))
            os.replace(tmp, path)
        except Exception:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
