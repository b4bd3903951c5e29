"""Tests für Excel-Export, Import-Vorlage und Excel-Import."""

import datetime as dt

import openpyxl
import pytest

from booking.conflicts import TimeInterval
from config.defaults import default_campus_config
from data.excel_import import (
    SHEET_NAME,
    ExcelImporter,
    ExcelImportError,
    generate_template,
    import_from_excel,
)
from export.excel_export import DayPlanExporter
from export.helpers import COLORS, build_time_grid_rows, cell_color, entries_in_row
from models.campus_data import CampusData
from models.classroom import Classroom
from models.faculty import Faculty
from models.schedule import ScheduleEntry, ScheduleStatus

DAY = dt.date(2026, 10, 19)


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _entry(id, start, end, room="CR01", faculty="F01", **kw) -> ScheduleEntry:
    return ScheduleEntry(id=id, classroom_id=room, course_name=kw.pop("course", f"Kurs {id}"),
                         faculty_id=faculty, date=DAY, start_time=start, end_time=end, **kw)


def _make_data(schedules=None) -> CampusData:
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
        schedules=schedules if schedules is not None else [
            _entry("S1", "09:00", "10:30", course="Databases"),
        ],
    )


def _write_import_file(path, rows, sheet=SHEET_NAME):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = sheet
    ws.append(["Raum", "Datum", "Beginn", "Ende", "Kurs", "Kurs-ID",
               "Dozent", "Teilnehmer", "Notiz"])
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


# ─── HELPERS ──────────────────────────────────────────────────────────────────

class TestHelpers:
    def test_time_grid_covers_opening_hours(self):
        rules = default_campus_config().booking
        rows = build_time_grid_rows(rules)
        assert rows[0] == TimeInterval(420, 450)
        assert rows[-1].end_minutes == 1260
        assert len(rows) == (1260 - 420) // 30

    def test_time_grid_short_last_row(self):
        rules = default_campus_config().booking.model_copy(
            update={"grid_minutes": 45, "closing_time": "08:00"})
        rows = build_time_grid_rows(rules)
        assert rows == [TimeInterval(420, 465), TimeInterval(465, 480)]

    def test_entries_in_row_half_open(self):
        """Eine Belegung bis 10:30 liegt nicht in der Zeile 10:30–11:00."""
        entries = [_entry("S1", "09:00", "10:30")]
        assert entries_in_row(entries, TimeInterval(600, 630)) == entries
        assert entries_in_row(entries, TimeInterval(630, 660)) == []

    def test_cell_color(self):
        scheduled = _entry("S1", "09:00", "10:30")
        cancelled = _entry("S2", "09:00", "10:30", status=ScheduleStatus.CANCELLED)
        clash = _entry("S3", "10:00", "11:00")
        assert cell_color([]) == COLORS["free"]
        assert cell_color([scheduled]) == COLORS["scheduled"]
        assert cell_color([cancelled, scheduled]) == COLORS["scheduled"]
        assert cell_color([scheduled, clash]) == COLORS["conflict"]


# ─── TAGESPLAN-EXPORT ─────────────────────────────────────────────────────────

class TestDayPlanExporter:
    def test_sheets(self, tmp_path):
        path = tmp_path / "tagesplan.xlsx"
        DayPlanExporter(_make_data(), default_campus_config(), DAY).export(path)
        wb = openpyxl.load_workbook(path)
        # Inaktive Räume bekommen kein Blatt
        assert wb.sheetnames == ["Übersicht", "A101", "B201"]

    def test_overview_grid(self, tmp_path):
        path = tmp_path / "tagesplan.xlsx"
        DayPlanExporter(_make_data(), default_campus_config(), DAY).export(path)
        ws = openpyxl.load_workbook(path)["Übersicht"]
        assert ws.cell(row=1, column=2).value == "A101"
        assert ws.cell(row=2, column=1).value == "07:00–07:30"
        # Zeile 6 = 09:00–09:30
        assert ws.cell(row=6, column=2).value == "Databases"
        assert ws.cell(row=6, column=3).value is None

    def test_conflict_highlighted(self, tmp_path):
        data = _make_data([
            _entry("S1", "09:00", "10:30", course="Databases"),
            _entry("S2", "10:00", "11:00", course="AI", faculty="F02"),
        ])
        path = tmp_path / "tagesplan.xlsx"
        DayPlanExporter(data, default_campus_config(), DAY).export(path)
        ws = openpyxl.load_workbook(path)["Übersicht"]
        # Zeile 8 = 10:00–10:30
        cell = ws.cell(row=8, column=2)
        assert cell.value == "Databases\nAI"
        assert cell.fill.fgColor.rgb.endswith(COLORS["conflict"])

    def test_room_sheet_lists_cancelled(self, tmp_path):
        data = _make_data([
            _entry("S1", "09:00", "10:30", course="Databases"),
            _entry("S2", "11:00", "12:00", course="AI", status=ScheduleStatus.CANCELLED),
        ])
        path = tmp_path / "tagesplan.xlsx"
        DayPlanExporter(data, default_campus_config(), DAY).export(path)
        ws = openpyxl.load_workbook(path)["A101"]
        assert ws.cell(row=2, column=3).value == "Databases"
        assert ws.cell(row=2, column=5).value == "Dr. John Smith"
        assert ws.cell(row=3, column=7).value == "cancelled"


# ─── TEMPLATE ─────────────────────────────────────────────────────────────────

class TestTemplate:
    def test_template_structure(self, tmp_path):
        path = tmp_path / "vorlage.xlsx"
        generate_template(default_campus_config(), _make_data(), path)
        wb = openpyxl.load_workbook(path)
        assert wb.sheetnames == [SHEET_NAME, "Räume"]
        headers = [c.value for c in wb[SHEET_NAME][1]]
        assert headers[:4] == ["Raum", "Datum", "Beginn", "Ende"]
        assert wb[SHEET_NAME].cell(row=2, column=1).value == "A101"
        rooms = [r[0] for r in wb["Räume"].iter_rows(min_row=2, values_only=True)]
        assert rooms == ["A101", "B201", "C301"]

    def test_template_example_row_imports(self, tmp_path):
        """Die Beispielzeile der Vorlage ist selbst eine gültige Buchung."""
        path = tmp_path / "vorlage.xlsx"
        data = _make_data([])
        generate_template(default_campus_config(), data, path)
        entries, report = import_from_excel(path, default_campus_config(), data)
        assert report.errors == []
        assert len(entries) == 1


# ─── IMPORT ───────────────────────────────────────────────────────────────────

class TestExcelImport:
    def test_valid_rows(self, tmp_path):
        path = _write_import_file(tmp_path / "in.xlsx", [
            ["A101", DAY.isoformat(), "10:30", "12:00", "Linear Algebra", "MA201", "F01", 25, ""],
            ["b201", "19.10.2026", dt.time(9, 0), dt.time(10, 30), "Calculus I", None,
             "Prof. Emily Davis", 40, "Hörsaal"],
        ])
        entries, report = ExcelImporter(path, default_campus_config(), _make_data()).run()
        assert report.imported == 2
        assert report.errors == []
        assert entries[0].classroom_id == "CR01"
        assert entries[0].interval == TimeInterval(630, 720)
        assert entries[1].classroom_id == "CR02"
        assert entries[1].start_time == "09:00"
        assert entries[1].course_id == "UNSET"
        assert entries[1].faculty_id == "F02"
        assert entries[1].date == DAY

    def test_conflict_with_existing(self, tmp_path):
        path = _write_import_file(tmp_path / "in.xlsx", [
            ["A101", DAY.isoformat(), "10:00", "11:00", "AI", "", "F02", 20, ""],
        ])
        entries, report = ExcelImporter(path, default_campus_config(), _make_data()).run()
        assert entries == []
        assert "Zeitkonflikt" in report.errors[0]
        assert "Databases" in report.errors[0]

    def test_conflict_within_file(self, tmp_path):
        """Die zweite Zeile kollidiert mit der ersten, nicht mit dem Bestand."""
        path = _write_import_file(tmp_path / "in.xlsx", [
            ["B201", DAY.isoformat(), "13:00", "14:30", "AI", "", "F01", 20, ""],
            ["B201", DAY.isoformat(), "14:00", "15:00", "Web", "", "F02", 20, ""],
        ])
        entries, report = ExcelImporter(path, default_campus_config(), _make_data()).run()
        assert [e.course_name for e in entries] == ["AI"]
        assert report.errors[0].startswith("Zeile 3")

    def test_invalid_rows_skipped(self, tmp_path):
        path = _write_import_file(tmp_path / "in.xlsx", [
            ["Z999", DAY.isoformat(), "13:00", "14:00", "AI", "", "F01", 20, ""],
            ["B201", DAY.isoformat(), "9:00", "10:00", "AI", "", "F01", 20, ""],
            ["B201", DAY.isoformat(), "12:00", "11:00", "AI", "", "F01", 20, ""],
            ["B201", DAY.isoformat(), "06:00", "07:30", "AI", "", "F01", 20, ""],
            ["B201", DAY.isoformat(), "13:00", "14:00", "AI", "", "F99", 20, ""],
            ["C301", DAY.isoformat(), "13:00", "14:00", "AI", "", "F01", 20, ""],
            ["B201", "gestern", "13:00", "14:00", "AI", "", "F01", 20, ""],
        ])
        entries, report = ExcelImporter(path, default_campus_config(), _make_data()).run()
        assert entries == []
        assert len(report.errors) == 7

    def test_blank_rows_ignored(self, tmp_path):
        path = _write_import_file(tmp_path / "in.xlsx", [
            [None] * 9,
            ["B201", DAY.isoformat(), "13:00", "14:00", "AI", "", "F01", 20, ""],
        ])
        _, report = ExcelImporter(path, default_campus_config(), _make_data()).run()
        assert report.imported == 1
        assert report.errors == []

    def test_warnings(self, tmp_path):
        """Kapazität und Dozenten-Überschneidung sind Warnungen, keine Fehler."""
        path = _write_import_file(tmp_path / "in.xlsx", [
            ["B201", DAY.isoformat(), "10:00", "11:00", "AI", "", "F01", 80, ""],
        ])
        entries, report = ExcelImporter(path, default_campus_config(), _make_data()).run()
        assert len(entries) == 1
        assert len(report.warnings) == 2

    def test_missing_sheet(self, tmp_path):
        path = _write_import_file(tmp_path / "in.xlsx", [], sheet="Tabelle1")
        with pytest.raises(ExcelImportError, match="Belegungen"):
            ExcelImporter(path, default_campus_config(), _make_data()).run()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ExcelImportError):
            ExcelImporter(tmp_path / "fehlt.xlsx", default_campus_config(), _make_data()).run()

    def test_does_not_touch_input_data(self, tmp_path):
        data = _make_data()
        path = _write_import_file(tmp_path / "in.xlsx", [
            ["B201", DAY.isoformat(), "13:00", "14:00", "AI", "", "F01", 20, ""],
        ])
        ExcelImporter(path, default_campus_config(), data).run()
        assert [s.id for s in data.schedules] == ["S1"]

    @pytest.mark.parametrize("sheet, header", [
        ("Tabelle1", ["Raum", "Datum", "Beginn", "Ende", "Kurs", "Dozent"]),
        (SHEET_NAME, ["Raum", "Datum"]),
    ])
    def test_workbook_closed_on_error(self, tmp_path, monkeypatch, sheet, header):
        """Fehlendes Blatt / fehlende Spalten: die Datei wird trotzdem geschlossen."""
        path = tmp_path / "in.xlsx"
        wb = openpyxl.Workbook()
        wb.active.title = sheet
        wb.active.append(header)
        wb.save(path)

        closed = []
        real_load = openpyxl.load_workbook

        def tracking_load(*args, **kwargs):
            book = real_load(*args, **kwargs)
            real_close = book.close

            def close():
                closed.append(True)
                real_close()

            book.close = close
            return book

        monkeypatch.setattr(openpyxl, "load_workbook", tracking_load)
        with pytest.raises(ExcelImportError):
            ExcelImporter(path, default_campus_config(), _make_data()).run()
        assert closed == [True]
