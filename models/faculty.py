"""Datenmodell für Dozenten (Pydantic v2)."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class FacultyStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LEAVE = "leave"
    UNAVAILABLE = "unavailable"


class Faculty(BaseModel):
    """Repräsentiert eine Lehrperson mit tagesaktuellem Anwesenheitsstatus."""

    id: str                                   # "F01"
    name: str                                 # "Dr. John Smith"
    email: str
    department: str
    specialization: list[str] = []
    status: FacultyStatus = FacultyStatus.PRESENT
    status_updated_at: Optional[datetime] = None

    @property
    def is_available(self) -> bool:
        """Nur anwesende Dozenten können neue Veranstaltungen übernehmen."""
        return self.status == FacultyStatus.PRESENT
