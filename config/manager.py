"""Konfigurationsmanager: Laden, Speichern, Validieren und interaktives Bearbeiten.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import BookingRulesConfig, CampusConfig, LoggingConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Campus-Raumplaner — Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "booking": (
        "Buchungsregeln",
        "Zeiten im Format HH:MM. Angrenzende Buchungen (10:30 Ende / 10:30 Beginn)\n"
        "gelten NICHT als Konflikt.",
    ),
    "storage": (
        "Datenablage",
        None,
    ),
    "logging": (
        "Logging",
        "DEBUG, INFO, WARNING oder ERROR.",
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "campus_config.yaml"

    def __init__(self, path: Optional[Path] = None) -> None:
        if path is not None:
            self.DEFAULT_CONFIG = Path(path)

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> CampusConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py setup' aus, um den Campus einzurichten."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return CampusConfig.model_validate(dict(raw or {}))
        except ValidationError as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    # ─── Speichern ───

    def save(self, config: CampusConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: CampusConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        booking_map = CommentedMap(cm["booking"])
        booking_map.yaml_add_eol_comment("Minuten", "grid_minutes")
        cm["booking"] = booking_map

        return cm

    # ─── Interaktives Bearbeiten ───

    def edit_interactive(self, config: CampusConfig) -> CampusConfig:
        """Interaktives Bearbeitungsmenü für die Konfiguration."""
        while True:
            console.print()
            console.print(Panel(
                "[bold]Konfiguration bearbeiten[/bold]",
                border_style="cyan",
            ))
            console.print("  [bold]1.[/bold] Name der Hochschule")
            console.print("  [bold]2.[/bold] Buchungsregeln (Öffnungszeiten, Raster)")
            console.print("  [bold]3.[/bold] Datenablage")
            console.print("  [bold]4.[/bold] Log-Level")
            console.print("  [bold]0.[/bold] Speichern & Zurück")

            choice = Prompt.ask("\nAuswahl", default="0")

            if choice == "1":
                name = Prompt.ask("Name", default=config.campus_name)
                config = config.model_copy(update={"campus_name": name})
            elif choice == "2":
                config = config.model_copy(
                    update={"booking": self._edit_booking(config.booking)}
                )
            elif choice == "3":
                path = Prompt.ask("Pfad der JSON-Datei",
                                  default=config.storage.data_path)
                config = config.model_copy(update={
                    "storage": config.storage.model_copy(update={"data_path": path})
                })
            elif choice == "4":
                level = Prompt.ask("Log-Level", default=config.logging.level,
                                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
                config = config.model_copy(update={"logging": LoggingConfig(level=level)})
            elif choice == "0":
                self.save(config)
                break
            else:
                console.print("[yellow]Ungültige Auswahl.[/yellow]")

        return config

    def _edit_booking(self, rules: BookingRulesConfig) -> BookingRulesConfig:
        """Buchungsregeln abfragen; bei ungültiger Eingabe bleibt die alte Regel."""
        opening = Prompt.ask("Öffnungszeit (HH:MM)", default=rules.opening_time)
        closing = Prompt.ask("Schließzeit  (HH:MM)", default=rules.closing_time)
        grid = IntPrompt.ask("Raster (Minuten)", default=rules.grid_minutes)
        enforce = Confirm.ask("Öffnungszeiten durchsetzen?",
                              default=rules.enforce_opening_hours)
        try:
            return BookingRulesConfig(
                opening_time=opening,
                closing_time=closing,
                default_start_time=rules.default_start_time,
                default_end_time=rules.default_end_time,
                grid_minutes=grid,
                enforce_opening_hours=enforce,
            )
        except ValueError as e:
            console.print(f"[red]Ungültige Eingabe:[/red] {e}")
            return rules
