"""Campus-Raumplaner — Haupt-CLI.

Verwendung:
  python main.py setup                        Ersteinrichtung (Default-Config)
  python main.py config show                  Konfiguration anzeigen
  python main.py config edit                  Konfiguration bearbeiten
  python main.py seed                         Seed-Daten (Räume, Dozenten, Belegungen)
  python main.py rooms                        Raumstatus des Tages
  python main.py room add|deactivate          Räume pflegen
  python main.py schedule [--room A101]       Belegungen auflisten
  python main.py check A101 09:00 10:30       Konfliktprüfung (ohne Buchung)
  python main.py book A101 09:00 10:30 ...    Raum buchen
  python main.py cancel <id>                  Belegung absagen
  python main.py free A101                    Freie Zeitfenster eines Raums
  python main.py faculty list|status          Dozenten und Anwesenheit
  python main.py audit                        Doppelbelegungen suchen
  python main.py template                     Excel-Import-Vorlage erzeugen
  python main.py import <datei.xlsx>          Belegungen aus Excel importieren
  python main.py export                       Tagesplan als Excel
"""

import datetime as dt
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

_DATE_TYPE = click.DateTime(formats=["%Y-%m-%d", "%d.%m.%Y"])


def _setup_logging(level: str) -> None:
    """Installiert einmalig einen RichHandler am Root-Logger."""
    root = logging.getLogger()
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    root.setLevel(level)


def _load_config_or_abort():
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py setup[/bold] aus."
        )
        sys.exit(1)
    try:
        config = mgr.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    ctx = click.get_current_context(silent=True)
    verbose = bool(ctx and ctx.find_root().params.get("verbose"))
    _setup_logging("DEBUG" if verbose else config.logging.level)
    return mgr, config


def _open_store(config):
    """Öffnet den Store (einmal pro Aufruf) mit den konfigurierten Öffnungszeiten."""
    from data.store import ScheduleStore
    return ScheduleStore(
        Path(config.storage.data_path),
        opening_hours=config.booking.opening_hours_or_none(),
    )


def _day(value) -> dt.date:
    return value.date() if value is not None else dt.date.today()


def _room_or_abort(data, key: str, bookable: bool = False):
    room = data.find_classroom(key)
    if room is None:
        console.print(f"[red]Raum nicht gefunden: {key}[/red]")
        sys.exit(1)
    if bookable and not room.is_active:
        console.print(f"[red]Raum nicht buchbar: {room.room_number}[/red]")
        sys.exit(1)
    return room


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
@click.option("--name", default=None, help="Name der Hochschule.")
@click.option("--force", is_flag=True, default=False,
              help="Bestehende Konfiguration ohne Rückfrage überschreiben.")
def cmd_setup(name: str, force: bool):
    """Ersteinrichtung: Default-Konfiguration anlegen."""
    from config.defaults import default_campus_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Verwenden Sie [bold]python main.py config edit[/bold] zum Bearbeiten."
        )
        if not click.confirm("Trotzdem neu einrichten?", default=False):
            return

    config = default_campus_config()
    if name:
        config = config.model_copy(update={"campus_name": name})
    mgr.save(config)
    console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
    console.print("Führen Sie jetzt [bold]python main.py seed[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder bearbeiten."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort()
    rules = config.booking

    console.print(Panel(
        f"[bold]{config.campus_name}[/bold]  |  Daten: {config.storage.data_path}",
        title="Campus-Konfiguration",
        border_style="cyan",
    ))
    table = Table(title="Buchungsregeln", box=box.ROUNDED)
    table.add_column("Parameter", style="bold")
    table.add_column("Wert")
    table.add_row("Öffnungszeiten", f"{rules.opening_time} – {rules.closing_time}")
    table.add_row("Formular-Vorbelegung", f"{rules.default_start_time} – {rules.default_end_time}")
    table.add_row("Raster", f"{rules.grid_minutes} min")
    table.add_row("Öffnungszeiten durchsetzen", "ja" if rules.enforce_opening_hours else "nein")
    table.add_row("Log-Level", config.logging.level)
    console.print(table)


@cmd_config.command("edit")
def config_edit():
    """Bearbeitet die Konfiguration interaktiv."""
    mgr, config = _load_config_or_abort()
    mgr.edit_interactive(config)


# ─── SEED ─────────────────────────────────────────────────────────────────────

@click.command("seed")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--date", "day", type=_DATE_TYPE, default=None,
              help="Tag der Belegungen (Standard: heute).")
@click.option("--per-room", default=3, help="Veranstaltungen pro Raum.")
@click.option("--with-conflict", is_flag=True, default=False,
              help="Absichtlich eine Doppelbelegung einbauen.")
@click.option("--force", is_flag=True, default=False,
              help="Vorhandene Daten ohne Rückfrage überschreiben.")
def cmd_seed(seed: int, day, per_room: int, with_conflict: bool, force: bool):
    """Erzeugt Seed-Daten und legt den Datensatz neu an."""
    mgr, config = _load_config_or_abort()
    from data.seed_data import SeedDataGenerator
    from data.store import ScheduleStore

    path = Path(config.storage.data_path)
    if path.exists() and not force:
        if not click.confirm(f"{path} existiert bereits. Überschreiben?", default=False):
            return

    gen = SeedDataGenerator(config, seed=seed)
    data = gen.generate(day=_day(day), per_room=per_room, inject_conflict=with_conflict)
    gen.print_summary(data)
    ScheduleStore.from_data(path, data)
    console.print(f"[green]✓[/green] Daten gespeichert: {path}")


# ─── ROOMS ────────────────────────────────────────────────────────────────────

@click.command("rooms")
@click.option("--date", "day", type=_DATE_TYPE, default=None, help="Tag (Standard: heute).")
def cmd_rooms(day):
    """Zeigt den Belegungsstatus aller Räume."""
    mgr, config = _load_config_or_abort()
    from analysis.room_status import campus_status
    from booking.timeparse import format_minutes

    store = _open_store(config)
    d = _day(day)
    table = Table(title=f"Räume am {d.isoformat()}", box=box.ROUNDED)
    table.add_column("Raum", style="bold")
    table.add_column("Gebäude")
    table.add_column("Plätze", justify="right")
    table.add_column("Status")
    table.add_column("Frei")
    colors = {"available": "green", "occupied": "yellow", "inactive": "dim"}
    for st in campus_status(store.data, d, config.booking.opening_hours):
        room = store.data.find_classroom(st.classroom_id)
        c = colors[st.status]
        table.add_row(room.room_number, room.building, str(room.capacity),
                      f"[{c}]{st.message}[/{c}]", format_minutes(st.free_minutes) + " h")
    console.print(table)


@click.group("room")
def cmd_room():
    """Räume anlegen oder stilllegen."""


@cmd_room.command("add")
@click.argument("room_number")
@click.option("--building", required=True, help="Gebäude.")
@click.option("--capacity", required=True, type=click.IntRange(min=1), help="Sitzplätze.")
@click.option("--amenity", "amenities", multiple=True, help="Ausstattung (mehrfach möglich).")
def room_add(room_number: str, building: str, capacity: int, amenities: tuple):
    """Legt einen neuen Raum an."""
    mgr, config = _load_config_or_abort()
    from models.classroom import Classroom

    store = _open_store(config)
    taken = {c.id for c in store.data.classrooms}
    n = len(taken) + 1
    while f"CR{n:02d}" in taken:
        n += 1
    room = Classroom(
        id=f"CR{n:02d}",
        room_number=room_number,
        building=building,
        capacity=capacity,
        amenities=list(amenities),
    )
    try:
        store.add_classroom(room)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        sys.exit(1)
    console.print(f"[green]✓[/green] Raum {room.display_name} angelegt (ID {room.id}).")


@cmd_room.command("deactivate")
@click.argument("room")
def room_deactivate(room: str):
    """Legt einen Raum still (keine neuen Buchungen mehr)."""
    mgr, config = _load_config_or_abort()
    store = _open_store(config)
    try:
        store.deactivate_classroom(room)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        sys.exit(1)
    console.print(f"[green]✓[/green] Raum {room} stillgelegt.")


# ─── SCHEDULE ─────────────────────────────────────────────────────────────────

@click.command("schedule")
@click.option("--date", "day", type=_DATE_TYPE, default=None, help="Tag (Standard: heute).")
@click.option("--room", default=None, help="Nur diesen Raum (ID oder Raumnummer).")
@click.option("--all", "show_all", is_flag=True, default=False,
              help="Auch abgesagte Belegungen anzeigen.")
def cmd_schedule(day, room: str, show_all: bool):
    """Listet die Belegungen eines Tages."""
    mgr, config = _load_config_or_abort()
    store = _open_store(config)
    data = store.data
    d = _day(day)

    rooms = [_room_or_abort(data, room)] if room else sorted(data.classrooms, key=lambda c: c.room_number)
    table = Table(title=f"Belegungen am {d.isoformat()}", box=box.ROUNDED)
    for col in ("ID", "Raum", "Zeit", "Kurs", "Dozent", "TN", "Status"):
        table.add_column(col)
    count = 0
    for r in rooms:
        for e in data.schedules_for_room(r.id, d, include_cancelled=show_all):
            member = data.find_faculty(e.faculty_id)
            table.add_row(e.id, r.room_number, str(e.interval), e.course_name,
                          member.name if member else e.faculty_id,
                          str(e.enrolled_students), e.status.value)
            count += 1
    if count == 0:
        console.print("[dim]Keine Belegungen.[/dim]")
        return
    console.print(table)


# ─── CHECK / BOOK ─────────────────────────────────────────────────────────────

@click.command("check")
@click.argument("room")
@click.argument("start")
@click.argument("end")
@click.option("--date", "day", type=_DATE_TYPE, default=None, help="Tag (Standard: heute).")
def cmd_check(room: str, start: str, end: str, day):
    """Prüft, ob ein Raum im Zeitraum START–END frei ist (ohne zu buchen)."""
    mgr, config = _load_config_or_abort()
    from booking.errors import BookingError
    from booking.request import check_request, conflict_message

    store = _open_store(config)
    r = _room_or_abort(store.data, room, bookable=True)
    d = _day(day)
    try:
        conflicts = check_request(
            start, end, store.data.bookings_for_room(r.id, d),
            opening_hours=config.booking.opening_hours_or_none(),
        )
    except BookingError as e:
        console.print(f"[red]Ungültige Eingabe:[/red] {e}")
        sys.exit(1)

    if conflicts:
        console.print(f"[red]✗[/red] {conflict_message(conflicts)}")
        sys.exit(1)
    console.print(f"[green]✓[/green] {r.room_number} ist am {d.isoformat()} von {start} bis {end} frei.")


@click.command("book")
@click.argument("room")
@click.argument("start")
@click.argument("end")
@click.option("--course", required=True, help="Kursname.")
@click.option("--faculty", "faculty_key", required=True, help="Dozent (ID oder Name).")
@click.option("--course-id", default="UNSET", help="Kurs-ID.")
@click.option("--date", "day", type=_DATE_TYPE, default=None, help="Tag (Standard: heute).")
@click.option("--students", default=0, help="Angemeldete Teilnehmer.")
@click.option("--notes", default="", help="Notiz.")
def cmd_book(room: str, start: str, end: str, course: str, faculty_key: str,
             course_id: str, day, students: int, notes: str):
    """Bucht einen Raum, wenn er im Zeitraum START–END frei ist."""
    mgr, config = _load_config_or_abort()
    from pydantic import ValidationError
    from booking.errors import BookingConflictError, BookingError
    from booking.request import conflict_message, parse_request_interval
    from data.store import new_schedule_id
    from models.schedule import ScheduleEntry

    store = _open_store(config)
    data = store.data
    r = _room_or_abort(data, room, bookable=True)
    member = data.find_faculty(faculty_key)
    if member is None:
        console.print(f"[red]Dozent nicht gefunden: {faculty_key}[/red]")
        sys.exit(1)

    try:
        parse_request_interval(start, end, config.booking.opening_hours_or_none())
        entry = ScheduleEntry(
            id=new_schedule_id(), classroom_id=r.id, course_name=course,
            course_id=course_id, faculty_id=member.id, date=_day(day),
            start_time=start, end_time=end, enrolled_students=students, notes=notes,
        )
    except (BookingError, ValidationError) as e:
        console.print(f"[red]Ungültige Eingabe:[/red] {e}")
        sys.exit(1)

    if not member.is_available:
        console.print(f"[yellow]Hinweis:[/yellow] {member.name} ist aktuell '{member.status.value}'.")
    clash = store.check_faculty(entry)
    if clash:
        console.print(f"[yellow]Hinweis:[/yellow] {member.name} hat zeitgleich: "
                      f"{', '.join(b.label for b in clash)}")
    if students > r.capacity:
        console.print(f"[yellow]Hinweis:[/yellow] {students} Teilnehmer > {r.capacity} Plätze.")

    try:
        stored = store.create(entry)
    except BookingConflictError as e:
        console.print(f"[red]✗[/red] {conflict_message(e.conflicts)}")
        sys.exit(1)
    except (BookingError, KeyError) as e:
        console.print(f"[red]Buchung fehlgeschlagen:[/red] {e}")
        sys.exit(1)
    console.print(f"[green]✓[/green] \"{course}\" gebucht: {r.room_number} "
                  f"{stored.date.isoformat()} {stored.interval} (ID {stored.id})")


@click.command("cancel")
@click.argument("schedule_id")
def cmd_cancel(schedule_id: str):
    """Sagt eine Belegung ab (der Raum wird wieder frei)."""
    mgr, config = _load_config_or_abort()
    from models.schedule import ScheduleStatus

    store = _open_store(config)
    try:
        entry = store.update_status(schedule_id, ScheduleStatus.CANCELLED)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        sys.exit(1)
    console.print(f"[green]✓[/green] \"{entry.course_name}\" ({entry.interval}) abgesagt.")


# ─── FREE ─────────────────────────────────────────────────────────────────────

@click.command("free")
@click.argument("room")
@click.option("--date", "day", type=_DATE_TYPE, default=None, help="Tag (Standard: heute).")
@click.option("--min", "min_minutes", default=30, help="Mindestlänge freier Fenster (Minuten).")
def cmd_free(room: str, day, min_minutes: int):
    """Zeigt die freien Zeitfenster eines Raums innerhalb der Öffnungszeiten."""
    mgr, config = _load_config_or_abort()
    from analysis.room_status import free_intervals

    store = _open_store(config)
    r = _room_or_abort(store.data, room, bookable=True)
    d = _day(day)
    gaps = free_intervals(store.data.bookings_for_room(r.id, d),
                          config.booking.opening_hours, min_minutes=min_minutes)
    if not gaps:
        console.print(f"[yellow]{r.room_number} ist am {d.isoformat()} ausgebucht.[/yellow]")
        return
    console.print(f"[bold]Frei in {r.room_number} am {d.isoformat()}:[/bold]")
    for g in gaps:
        console.print(f"  [green]{g}[/green]  ({g.duration} min)")


# ─── FACULTY ──────────────────────────────────────────────────────────────────

@click.group("faculty")
def cmd_faculty():
    """Dozenten und Anwesenheitsstatus."""


@cmd_faculty.command("list")
def faculty_list():
    """Listet alle Dozenten."""
    mgr, config = _load_config_or_abort()
    store = _open_store(config)
    table = Table(title="Dozenten", box=box.ROUNDED)
    for col in ("ID", "Name", "Fachbereich", "Status"):
        table.add_column(col)
    for f in store.data.faculty:
        c = "green" if f.is_available else "yellow"
        table.add_row(f.id, f.name, f.department, f"[{c}]{f.status.value}[/{c}]")
    console.print(table)


@cmd_faculty.command("status")
@click.argument("faculty_key")
@click.argument("status", type=click.Choice(["present", "absent", "leave", "unavailable"]))
def faculty_status(faculty_key: str, status: str):
    """Setzt den Anwesenheitsstatus eines Dozenten."""
    mgr, config = _load_config_or_abort()
    from models.faculty import FacultyStatus

    store = _open_store(config)
    try:
        store.update_faculty_status(faculty_key, FacultyStatus(status))
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        sys.exit(1)
    console.print(f"[green]✓[/green] Status von {faculty_key}: {status}")


# ─── AUDIT ────────────────────────────────────────────────────────────────────

@click.command("audit")
@click.option("--date", "day", type=_DATE_TYPE, default=None,
              help="Nur diesen Tag prüfen (Standard: alle Tage).")
def cmd_audit(day):
    """Sucht Doppelbelegungen (Raum, Dozent) und Überbuchungen."""
    mgr, config = _load_config_or_abort()
    from analysis.conflict_audit import ConflictAuditor

    store = _open_store(config)
    report = ConflictAuditor().audit(store.data, day.date() if day else None)
    report.print_rich()
    sys.exit(0 if report.is_clean else 1)


# ─── TEMPLATE / IMPORT ────────────────────────────────────────────────────────

@click.command("template")
@click.option("--output", "-o", default="output/import_vorlage.xlsx",
              help="Ausgabepfad für die Excel-Vorlage.")
def cmd_template(output: str):
    """Erzeugt eine Excel-Import-Vorlage."""
    mgr, config = _load_config_or_abort()
    from data.excel_import import generate_template

    store = _open_store(config)
    out_path = Path(output)
    generate_template(config, store.data, out_path)
    console.print(f"[green]✓[/green] Vorlage gespeichert: {out_path}")


@click.command("import")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.option("--dry-run", is_flag=True, default=False, help="Nur prüfen, nichts speichern.")
def cmd_import(datei: Path, dry_run: bool):
    """Importiert Belegungen aus einer Excel-Datei."""
    mgr, config = _load_config_or_abort()
    from booking.errors import BookingError
    from data.excel_import import ExcelImportError, import_from_excel

    store = _open_store(config)
    console.print(f"[bold]Importiere:[/bold] {datei}")
    try:
        entries, report = import_from_excel(datei, config, store.data)
    except ExcelImportError as e:
        console.print(f"[red bold]Import fehlgeschlagen:[/red bold]\n{e}")
        sys.exit(1)

    if not dry_run:
        written = 0
        for entry in entries:
            try:
                store.create(entry)
                written += 1
            except (BookingError, KeyError) as e:
                report.errors.append(f"{entry.course_name} ({entry.interval}): {e}")
        report.imported = written
    report.print_rich()
    sys.exit(0 if not report.errors else 1)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
@click.option("--date", "day", type=_DATE_TYPE, default=None, help="Tag (Standard: heute).")
@click.option("--output", "-o", default=None, help="Ausgabepfad (.xlsx).")
def cmd_export(day, output: str):
    """Exportiert den Tagesplan als Excel-Datei."""
    mgr, config = _load_config_or_abort()
    from export.excel_export import DayPlanExporter

    store = _open_store(config)
    d = _day(day)
    out_path = Path(output or f"output/tagesplan_{d.isoformat()}.xlsx")
    DayPlanExporter(store.data, config, d).export(out_path)
    console.print(f"[green]✓[/green] Tagesplan gespeichert: {out_path}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug-Logging.")
def cli(verbose: bool):
    """Campus-Raumplaner: Räume buchen ohne Doppelbelegung.

    Starten Sie mit: python main.py setup
    """


def main():
    """Einstiegspunkt."""
    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_seed)
cli.add_command(cmd_rooms)
cli.add_command(cmd_room)
cli.add_command(cmd_schedule)
cli.add_command(cmd_check)
cli.add_command(cmd_book)
cli.add_command(cmd_cancel)
cli.add_command(cmd_free)
cli.add_command(cmd_faculty)
cli.add_command(cmd_audit)
cli.add_command(cmd_template)
cli.add_command(cmd_import)
cli.add_command(cmd_export)


if __name__ == "__main__":
    main()
