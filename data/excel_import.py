"""Excel-Import und Template-Generator für Raumbelegungen.

Template-Generator: Leere Vorlage mit Blatt "Belegungen" und Raumliste.
Import-Funktion:    Excel → ScheduleEntry-Liste mit ImportReport.

Jede Zeile durchläuft dieselbe Prüfung wie eine Formular-Buchung
(Uhrzeit-Format, Zeitraum, Konflikte). Geprüft wird gegen den Bestand UND
gegen bereits übernommene Zeilen derselben Datei.
"""

import datetime as dt
from pathlib import Path

from pydantic import BaseModel

from booking.conflicts import find_conflicts
from booking.errors import BookingError
from booking.request import conflict_message, parse_request_interval
from booking.timeparse import format_minutes
from config.schema import CampusConfig
from data.store import new_schedule_id
from models.campus_data import CampusData
from models.schedule import ScheduleEntry


class ExcelImportError(Exception):
    """Fehler beim Excel-Import."""


SHEET_NAME = "Belegungen"

_COLUMNS = ["Raum", "Datum", "Beginn", "Ende", "Kurs", "Kurs-ID",
            "Dozent", "Teilnehmer", "Notiz"]


class ImportReport(BaseModel):
    """Ergebnis eines Imports."""

    imported: int = 0
    errors: list[str] = []     # Übersprungene Zeilen
    warnings: list[str] = []   # Übernommen, aber auffällig

    def print_rich(self) -> None:
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        lines = [f"[bold]{self.imported}[/bold] Belegung(en) übernommen"]
        if self.errors:
            lines.append("\n[red bold]Übersprungen:[/red bold]")
            lines += [f"  [red]• {e}[/red]" for e in self.errors]
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            lines += [f"  [yellow]• {w}[/yellow]" for w in self.warnings]
        console.print(Panel("\n".join(lines), title="Import", border_style="cyan"))


# ─── Zell-Konvertierung ───────────────────────────────────────────────────────

def _cell_text(v) -> str:
    return str(v).strip() if v is not None else ""


def _cell_time(v) -> str:
    """Excel-Uhrzeitzellen kommen als datetime.time, Textzellen bleiben Text."""
    if isinstance(v, dt.datetime):
        v = v.time()
    if isinstance(v, dt.time):
        return format_minutes(v.hour * 60 + v.minute)
    return _cell_text(v)


def _cell_date(v) -> dt.date:
    if isinstance(v, dt.datetime):
        return v.date()
    if isinstance(v, dt.date):
        return v
    text = _cell_text(v)
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return dt.datetime.strptime(text, "%d.%m.%Y").date()
    except ValueError:
        raise ValueError(f"Ungültiges Datum: {text!r} (erwartet JJJJ-MM-TT oder TT.MM.JJJJ)")


def _cell_int(v) -> int:
    text = _cell_text(v)
    if not text:
        return 0
    return int(float(text))


# ─── Template ─────────────────────────────────────────────────────────────────

def generate_template(config: CampusConfig, data: CampusData, output_path: Path) -> None:
    """Erzeugt eine Import-Vorlage mit Beispielzeile und Raumliste."""
    import openpyxl
    from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
    from openpyxl.utils import get_column_letter

    hdr_font = Font(bold=True, color="FFFFFF", size=11)
    hdr_fill = PatternFill("solid", fgColor="2E6DA4")
    ex_font = Font(italic=True, color="888888")
    thin = Side(style="thin", color="BBBBBB")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center")

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = SHEET_NAME
    for col, h in enumerate(_COLUMNS, 1):
        cell = ws.cell(row=1, column=col, value=h)
        cell.font = hdr_font
        cell.fill = hdr_fill
        cell.alignment = center
        cell.border = border
        ws.column_dimensions[get_column_letter(col)].width = 28 if h in ("Kurs", "Notiz") else 13

    rules = config.booking
    example_room = data.classrooms[0].room_number if data.classrooms else "A101"
    example_faculty = data.faculty[0].id if data.faculty else "F01"
    example = [example_room, dt.date.today().isoformat(), rules.default_start_time,
               rules.default_end_time, "Beispielkurs (Zeile löschen)", "CS101",
               example_faculty, 30, ""]
    for col, val in enumerate(example, 1):
        cell = ws.cell(row=2, column=col, value=val)
        cell.font = ex_font
        cell.border = border

    ws_rooms = wb.create_sheet("Räume")
    for col, h in enumerate(["Raum", "Gebäude", "Plätze", "Aktiv"], 1):
        cell = ws_rooms.cell(row=1, column=col, value=h)
        cell.font = hdr_font
        cell.fill = hdr_fill
    for r, room in enumerate(sorted(data.classrooms, key=lambda c: c.room_number), 2):
        ws_rooms.cell(row=r, column=1, value=room.room_number)
        ws_rooms.cell(row=r, column=2, value=room.building)
        ws_rooms.cell(row=r, column=3, value=room.capacity)
        ws_rooms.cell(row=r, column=4, value="ja" if room.is_active else "nein")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(output_path)


# ─── Import ───────────────────────────────────────────────────────────────────

class ExcelImporter:
    """Liest das Blatt "Belegungen" und prüft jede Zeile."""

    def __init__(self, path: Path, config: CampusConfig, data: CampusData) -> None:
        self.path = Path(path)
        self.config = config
        self.data = data

    def _rows(self) -> list[tuple[int, dict]]:
        """(Excel-Zeilennummer, {spalte: rohwert}) für alle nicht-leeren Zeilen."""
        try:
            import openpyxl
            wb = openpyxl.load_workbook(str(self.path), read_only=True, data_only=True)
        except FileNotFoundError:
            raise ExcelImportError(f"Datei nicht gefunden: {self.path}")
        except Exception as e:
            raise ExcelImportError(f"Fehler beim Öffnen der Excel-Datei: {e}")

        try:
            sheet = next((wb[n] for n in wb.sheetnames
                          if n.strip().lower() == SHEET_NAME.lower()), None)
            if sheet is None:
                raise ExcelImportError(f"Blatt '{SHEET_NAME}' fehlt in {self.path.name}")

            rows = list(sheet.iter_rows(values_only=True))
            if not rows:
                return []
            headers = [_cell_text(h).lower() for h in rows[0]]
            missing = [c for c in ("raum", "datum", "beginn", "ende", "kurs", "dozent")
                       if c not in headers]
            if missing:
                raise ExcelImportError(f"Spalten fehlen: {', '.join(missing)}")
        finally:
            wb.close()

        result = []
        for excel_row, row in enumerate(rows[1:], 2):
            if all(v is None or _cell_text(v) == "" for v in row):
                continue
            result.append((excel_row, dict(zip(headers, row))))
        return result

    def run(self) -> tuple[list[ScheduleEntry], ImportReport]:
        """Prüft alle Zeilen; gibt die übernehmbaren Belegungen zurück."""
        report = ImportReport()
        accepted: list[ScheduleEntry] = []
        working = self.data.model_copy(update={"schedules": list(self.data.schedules)})
        opening_hours = self.config.booking.opening_hours_or_none()

        for excel_row, row in self._rows():
            prefix = f"Zeile {excel_row}"
            room = working.find_classroom(_cell_text(row.get("raum")))
            if room is None or not room.is_active:
                report.errors.append(f"{prefix}: Raum '{_cell_text(row.get('raum'))}' unbekannt/inaktiv")
                continue
            lecturer = working.find_faculty(_cell_text(row.get("dozent")))
            if lecturer is None:
                report.errors.append(f"{prefix}: Dozent '{_cell_text(row.get('dozent'))}' unbekannt")
                continue
            course = _cell_text(row.get("kurs"))
            if not course:
                report.errors.append(f"{prefix}: Kursname fehlt")
                continue
            try:
                day = _cell_date(row.get("datum"))
                start, end = _cell_time(row.get("beginn")), _cell_time(row.get("ende"))
                interval = parse_request_interval(start, end, opening_hours)
                students = _cell_int(row.get("teilnehmer"))
            except (BookingError, ValueError) as e:
                report.errors.append(f"{prefix}: {e}")
                continue

            conflicts = find_conflicts(interval, working.bookings_for_room(room.id, day))
            if conflicts:
                report.errors.append(f"{prefix}: {conflict_message(conflicts)}")
                continue

            entry = ScheduleEntry(
                id=new_schedule_id(),
                classroom_id=room.id,
                course_name=course,
                course_id=_cell_text(row.get("kurs-id")) or "UNSET",
                faculty_id=lecturer.id,
                date=day,
                start_time=start,
                end_time=end,
                enrolled_students=max(students, 0),
                notes=_cell_text(row.get("notiz")),
            )
            if find_conflicts(interval, working.bookings_for_faculty(lecturer.id, day)):
                report.warnings.append(f"{prefix}: {lecturer.name} hat zeitgleich eine andere Veranstaltung")
            if entry.enrolled_students > room.capacity:
                report.warnings.append(
                    f"{prefix}: {entry.enrolled_students} Teilnehmer > {room.capacity} Plätze in {room.room_number}")
            if not lecturer.is_available:
                report.warnings.append(f"{prefix}: {lecturer.name} ist aktuell '{lecturer.status.value}'")

            working.schedules.append(entry)
            accepted.append(entry)

        report.imported = len(accepted)
        return accepted, report


def import_from_excel(path: Path, config: CampusConfig,
                      data: CampusData) -> tuple[list[ScheduleEntry], ImportReport]:
    """Bequemer Einstieg: ExcelImporter(path, config, data).run()."""
    return ExcelImporter(path, config, data).run()
