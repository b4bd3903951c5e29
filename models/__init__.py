from models.classroom import Classroom
from models.faculty import Faculty, FacultyStatus
from models.schedule import ScheduleEntry, ScheduleStatus
from models.campus_data import CampusData

__all__ = [
    "Classroom",
    "Faculty",
    "FacultyStatus",
    "ScheduleEntry",
    "ScheduleStatus",
    "CampusData",
]
