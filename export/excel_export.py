"""Excel-Export des Tagesplans (openpyxl)."""

import datetime as dt
from pathlib import Path

from config.schema import CampusConfig
from models.campus_data import CampusData
from models.classroom import Classroom

from export.helpers import (
    COLORS, build_time_grid_rows, cell_color, entries_in_row, today_str,
)


class DayPlanExporter:
    """Exportiert die Belegungen eines Tages: Übersicht + ein Blatt pro Raum."""

    COL_TIME_W = 14
    COL_ROOM_W = 26
    ROW_HEADER_H = 22

    def __init__(self, data: CampusData, config: CampusConfig, day: dt.date):
        self.data = data
        self.config = config
        self.day = day
        self.rooms = sorted(
            (c for c in data.classrooms if c.is_active), key=lambda c: c.room_number
        )

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)

        self._sheet_uebersicht(wb)
        for room in self.rooms:
            self._sheet_raum(wb, room)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header(self, ws, headers: list[str]) -> None:
        from openpyxl.styles import Alignment, Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border
        ws.row_dimensions[1].height = self.ROW_HEADER_H

    # ─── Blätter ──────────────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        """Rasterzeilen × Räume; Konflikte rot hinterlegt."""
        from openpyxl.styles import Alignment
        from openpyxl.utils import get_column_letter

        ws = wb.create_sheet("Übersicht")
        self._write_header(ws, ["Zeit"] + [r.room_number for r in self.rooms])
        ws.column_dimensions["A"].width = self.COL_TIME_W
        for col in range(2, 2 + len(self.rooms)):
            ws.column_dimensions[get_column_letter(col)].width = self.COL_ROOM_W

        per_room = {
            r.id: self.data.schedules_for_room(r.id, self.day, include_cancelled=True)
            for r in self.rooms
        }
        border = self._thin_border()
        for row_idx, slot in enumerate(build_time_grid_rows(self.config.booking), 2):
            ws.cell(row=row_idx, column=1, value=str(slot)).border = border
            for col, room in enumerate(self.rooms, 2):
                entries = entries_in_row(per_room[room.id], slot)
                text = "\n".join(e.course_name for e in entries)
                cell = ws.cell(row=row_idx, column=col, value=text or None)
                cell.fill = self._fill(cell_color(entries))
                cell.alignment = Alignment(wrap_text=True, vertical="center")
                cell.border = border

        last = ws.max_row + 2
        ws.cell(row=last, column=1,
                value=f"{self.config.campus_name} – Tagesplan {self.day.isoformat()} "
                      f"(erstellt {today_str()})")

    def _sheet_raum(self, wb, room: Classroom) -> None:
        """Liste aller Belegungen eines Raums (inkl. abgesagter)."""
        ws = wb.create_sheet(room.room_number[:31])
        headers = ["Beginn", "Ende", "Kurs", "Kurs-ID", "Dozent", "Teilnehmer", "Status", "Notiz"]
        self._write_header(ws, headers)
        for col, width in zip("ABCDEFGH", [9, 9, 30, 10, 24, 11, 12, 30]):
            ws.column_dimensions[col].width = width

        border = self._thin_border()
        entries = self.data.schedules_for_room(room.id, self.day, include_cancelled=True)
        for r, e in enumerate(entries, 2):
            member = self.data.find_faculty(e.faculty_id)
            values = [e.start_time, e.end_time, e.course_name, e.course_id,
                      member.name if member else e.faculty_id,
                      e.enrolled_students, e.status.value, e.notes]
            fill = self._fill(COLORS[e.status.value])
            for col, val in enumerate(values, 1):
                cell = ws.cell(row=r, column=col, value=val)
                cell.fill = fill
                cell.border = border
