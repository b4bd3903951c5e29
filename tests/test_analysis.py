"""Tests für Raumstatus, freie Zeitfenster und Belegungs-Audit."""

import datetime as dt

import pytest

from analysis.conflict_audit import ConflictAuditor
from analysis.room_status import campus_status, classroom_status, free_intervals
from booking.conflicts import Booking, TimeInterval
from config.defaults import default_campus_config
from data.seed_data import SeedDataGenerator
from models.campus_data import CampusData
from models.classroom import Classroom
from models.faculty import Faculty
from models.schedule import ScheduleEntry, ScheduleStatus

DAY = dt.date(2026, 10, 19)
OPENING = TimeInterval(420, 1260)  # 07:00–21:00


def _b(id: str, start: int, end: int) -> Booking:
    return Booking(id=id, room_id="CR01", interval=TimeInterval(start, end), label=id)


def _entry(id, start, end, room="CR01", faculty="F01", **kw) -> ScheduleEntry:
    return ScheduleEntry(id=id, classroom_id=room, course_name=f"Kurs {id}",
                         faculty_id=faculty, date=DAY, start_time=start, end_time=end, **kw)


def _data(schedules) -> CampusData:
    return CampusData(
        classrooms=[
            Classroom(id="CR01", room_number="A101", building="Block A", capacity=30),
            Classroom(id="CR02", room_number="B201", building="Block B", capacity=50),
            Classroom(id="CR03", room_number="C301", building="Block C", capacity=40,
                      is_active=False),
        ],
        faculty=[
            Faculty(id="F01", name="Dr. John Smith", email="js@college.edu",
                    department="Computer Science"),
            Faculty(id="F02", name="Prof. Emily Davis", email="ed@college.edu",
                    department="Computer Science"),
        ],
        schedules=schedules,
    )


# ─── FREIE ZEITFENSTER ────────────────────────────────────────────────────────

class TestFreeIntervals:
    def test_empty_day(self):
        assert free_intervals([], OPENING) == [OPENING]

    def test_gaps_between_bookings(self):
        gaps = free_intervals([_b("A", 540, 630), _b("B", 780, 840)], OPENING)
        assert gaps == [TimeInterval(420, 540), TimeInterval(630, 780), TimeInterval(840, 1260)]

    def test_overlapping_bookings_merged(self):
        gaps = free_intervals([_b("A", 540, 630), _b("B", 600, 660)], OPENING)
        assert gaps == [TimeInterval(420, 540), TimeInterval(660, 1260)]

    def test_back_to_back_leaves_no_gap(self):
        gaps = free_intervals([_b("A", 540, 630), _b("B", 630, 720)], OPENING)
        assert TimeInterval(630, 630) not in gaps
        assert gaps == [TimeInterval(420, 540), TimeInterval(720, 1260)]

    def test_clamped_to_opening_hours(self):
        """Buchungen außerhalb der Öffnungszeiten erzeugen keine Lücken jenseits davon."""
        gaps = free_intervals([_b("A", 360, 480), _b("B", 1230, 1320)], OPENING)
        assert gaps == [TimeInterval(480, 1230)]

    def test_min_minutes(self):
        gaps = free_intervals([_b("A", 540, 630), _b("B", 645, 720)], OPENING, min_minutes=30)
        assert TimeInterval(630, 645) not in gaps


# ─── RAUMSTATUS ───────────────────────────────────────────────────────────────

class TestClassroomStatus:
    def test_available(self):
        st = classroom_status(_data([]), "CR02", DAY, OPENING)
        assert st.status == "available"
        assert st.message == "Heute keine Veranstaltungen"
        assert st.free_minutes == OPENING.duration

    def test_occupied(self):
        data = _data([_entry("S1", "09:00", "10:30"), _entry("S2", "13:00", "14:00")])
        st = classroom_status(data, "A101", DAY, OPENING)
        assert st.status == "occupied"
        assert st.message == "2 Veranstaltungen"
        assert st.free_minutes == OPENING.duration - 150

    def test_single_booking_message(self):
        st = classroom_status(_data([_entry("S1", "09:00", "10:30")]), "CR01", DAY, OPENING)
        assert st.message == "1 Veranstaltung"

    def test_cancelled_not_counted(self):
        data = _data([_entry("S1", "09:00", "10:30", status=ScheduleStatus.CANCELLED)])
        assert classroom_status(data, "CR01", DAY, OPENING).status == "available"

    def test_inactive(self):
        assert classroom_status(_data([]), "CR03", DAY, OPENING).status == "inactive"

    def test_unknown_room(self):
        with pytest.raises(KeyError):
            classroom_status(_data([]), "Z999", DAY, OPENING)

    def test_campus_status_sorted(self):
        result = campus_status(_data([]), DAY, OPENING)
        assert [s.room_number for s in result] == ["A101", "B201", "C301"]


# ─── AUDIT ────────────────────────────────────────────────────────────────────

class TestConflictAuditor:
    def test_clean(self):
        data = _data([_entry("S1", "09:00", "10:30"), _entry("S2", "10:30", "12:00")])
        report = ConflictAuditor().audit(data)
        assert report.is_clean
        assert report.checked_schedules == 2

    def test_room_double_booking_reported_once(self):
        data = _data([
            _entry("S1", "09:00", "10:30"),
            _entry("S2", "10:00", "11:00", faculty="F02"),
        ])
        report = ConflictAuditor().audit(data)
        rooms = report.by_type("classroom")
        assert len(rooms) == 1
        assert (rooms[0].schedule_id, rooms[0].other_id) == ("S2", "S1")
        assert "A101" in rooms[0].details
        assert report.by_type("faculty") == []

    def test_faculty_double_booking(self):
        data = _data([
            _entry("S1", "09:00", "10:30"),
            _entry("S2", "10:00", "11:00", room="CR02"),
        ])
        report = ConflictAuditor().audit(data)
        assert report.by_type("classroom") == []
        faculty = report.by_type("faculty")
        assert len(faculty) == 1
        assert "Dr. John Smith" in faculty[0].details

    def test_capacity(self):
        data = _data([_entry("S1", "09:00", "10:30", enrolled_students=45)])
        report = ConflictAuditor().audit(data)
        assert [c.conflict_type for c in report.conflicts] == ["room_capacity"]
        assert not report.is_clean

    def test_cancelled_ignored(self):
        data = _data([
            _entry("S1", "09:00", "10:30"),
            _entry("S2", "10:00", "11:00", faculty="F02", status=ScheduleStatus.CANCELLED),
        ])
        assert ConflictAuditor().audit(data).is_clean

    def test_day_filter(self):
        other_day = _entry("S2", "10:00", "11:00", faculty="F02").model_copy(
            update={"date": DAY + dt.timedelta(days=1)})
        data = _data([_entry("S1", "09:00", "10:30"), other_day])
        report = ConflictAuditor().audit(data, day=DAY)
        assert report.checked_schedules == 1
        assert report.is_clean

    def test_seed_data_clean(self):
        data = SeedDataGenerator(default_campus_config(), seed=42).generate(day=DAY)
        assert ConflictAuditor().audit(data).by_type("classroom") == []

    def test_injected_conflict_found(self):
        data = SeedDataGenerator(default_campus_config(), seed=42).generate(
            day=DAY, inject_conflict=True)
        report = ConflictAuditor().audit(data)
        clash = data.schedules[-1]
        assert clash.id in {c.schedule_id for c in report.by_type("classroom")}
        assert data.schedules[0].id in {c.other_id for c in report.by_type("classroom")}
