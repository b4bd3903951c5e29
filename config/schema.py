from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional

from booking.conflicts import TimeInterval
from booking.timeparse import parse_time_to_minutes


# ─── BUCHUNGSREGELN ───

class BookingRulesConfig(BaseModel):
    """Regeln für Raumbuchungen über das Formular bzw. die CLI."""
    # Frühester Beginn einer Buchung im Format "HH:MM"
    opening_time: str = Field("07:00",
        description="Öffnungszeit (HH:MM)")
    # Spätestes Ende einer Buchung im Format "HH:MM"
    closing_time: str = Field("21:00",
        description="Schließzeit (HH:MM)")
    # Vorbelegung des Buchungsformulars
    default_start_time: str = Field("09:00",
        description="Standard-Beginn im Formular")
    default_end_time: str = Field("10:30",
        description="Standard-Ende im Formular")
    # Raster für die Anzeige freier Zeiten und des Tagesplans
    grid_minutes: int = Field(30, ge=5, le=120,
        description="Rasterweite (Minuten) für freie Zeiten / Export")
    # Buchungen außerhalb der Öffnungszeiten ablehnen
    enforce_opening_hours: bool = Field(True,
        description="Buchungen außerhalb der Öffnungszeiten ablehnen")

    @field_validator("opening_time", "closing_time",
                     "default_start_time", "default_end_time")
    @classmethod
    def _check_time_format(cls, v: str) -> str:
        parse_time_to_minutes(v)
        return v

    @model_validator(mode='after')
    def _check_order(self):
        """Öffnung vor Schließung, Standard-Zeitraum nicht leer."""
        if parse_time_to_minutes(self.opening_time) >= parse_time_to_minutes(self.closing_time):
            raise ValueError(
                f"Öffnungszeit {self.opening_time} liegt nicht vor Schließzeit {self.closing_time}")
        if parse_time_to_minutes(self.default_start_time) >= parse_time_to_minutes(self.default_end_time):
            raise ValueError(
                f"Standard-Zeitraum {self.default_start_time}-{self.default_end_time} ist leer")
        return self

    @property
    def opening_hours(self) -> TimeInterval:
        """Öffnungszeiten als Intervall."""
        return TimeInterval.from_strings(self.opening_time, self.closing_time)

    def opening_hours_or_none(self) -> Optional[TimeInterval]:
        """Öffnungszeiten nur wenn sie durchgesetzt werden sollen."""
        return self.opening_hours if self.enforce_opening_hours else None


# ─── SPEICHER ───

class StorageConfig(BaseModel):
    """Ablage des Campus-Datensatzes."""
    # JSON-Datei mit Räumen, Dozenten und Belegungen
    data_path: str = Field("output/campus_data.json",
        description="Pfad zur JSON-Datendatei")


# ─── LOGGING ───

class LoggingConfig(BaseModel):
    """Log-Ausgabe der CLI."""
    # Log-Level (DEBUG, INFO, WARNING, ERROR)
    level: str = Field("WARNING",
        description="Log-Level")

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unbekanntes Log-Level: {v}")
        return v


# ─── GESAMT-CONFIG ───

class CampusConfig(BaseModel):
    """Gesamtkonfiguration des Campus-Raumplaners."""
    # Name der Hochschule
    campus_name: str = Field("Campus College",
        description="Name der Hochschule")
    # Buchungsregeln (Öffnungszeiten, Formular-Vorbelegung)
    booking: BookingRulesConfig = Field(default_factory=BookingRulesConfig)
    # Datenablage
    storage: StorageConfig = Field(default_factory=StorageConfig)
    # Logging
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
