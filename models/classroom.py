"""Datenmodell für einen Hörsaal / Seminarraum (Pydantic v2)."""

from pydantic import BaseModel, field_validator


class Classroom(BaseModel):
    """Repräsentiert einen buchbaren Raum."""

    id: str                      # "CR01"
    room_number: str             # "A101"
    building: str                # "Block A"
    capacity: int                # Sitzplätze
    amenities: list[str] = []    # "Projector", "WiFi", ...
    is_active: bool = True       # Inaktive Räume sind nicht buchbar

    @field_validator("room_number")
    @classmethod
    def normalize_room_number(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def display_name(self) -> str:
        return f"{self.room_number} ({self.building})"
