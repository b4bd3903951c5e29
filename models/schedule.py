"""Datenmodell für eine Raumbelegung (Pydantic v2)."""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from booking.conflicts import Booking, TimeInterval
from booking.timeparse import parse_time_to_minutes


class ScheduleStatus(str, Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"
    COMPLETED = "completed"


class ScheduleEntry(BaseModel):
    """Eine Veranstaltung in einem Raum an einem Tag.

    Uhrzeiten werden wie im Formular als "HH:MM" gespeichert; für die
    Konfliktprüfung wird daraus über to_booking() ein Booking.
    """

    id: str
    classroom_id: str
    course_name: str
    course_id: str = "UNSET"
    faculty_id: str
    date: dt.date
    start_time: str                  # "09:00"
    end_time: str                    # "10:30"
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    enrolled_students: int = Field(0, ge=0)
    notes: str = ""
    created_at: Optional[dt.datetime] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time(cls, v: str) -> str:
        parse_time_to_minutes(v)
        return v

    @model_validator(mode='after')
    def _check_interval(self):
        if parse_time_to_minutes(self.start_time) >= parse_time_to_minutes(self.end_time):
            raise ValueError(
                f"Beginn {self.start_time} muss vor Ende {self.end_time} liegen")
        return self

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(parse_time_to_minutes(self.start_time),
                            parse_time_to_minutes(self.end_time))

    @property
    def duration_minutes(self) -> int:
        return self.interval.duration

    @property
    def blocks_room(self) -> bool:
        """Abgesagte Veranstaltungen geben den Raum frei."""
        return self.status != ScheduleStatus.CANCELLED

    def to_booking(self) -> Booking:
        return Booking(
            id=self.id,
            room_id=self.classroom_id,
            interval=self.interval,
            label=self.course_name,
        )
