from config.schema import (
    BookingRulesConfig,
    CampusConfig,
    LoggingConfig,
    StorageConfig,
)


# Räume des Campus (Stammdaten für Seed-Daten)
DEFAULT_CLASSROOMS: list[dict] = [
    {"room_number": "A101", "building": "Block A", "capacity": 100,
     "amenities": ["Projector", "WiFi", "AC", "Whiteboard"]},
    {"room_number": "B201", "building": "Block B", "capacity": 50,
     "amenities": ["Projector", "WiFi", "Round Table"]},
    {"room_number": "C301", "building": "Block C", "capacity": 40,
     "amenities": ["Computers", "WiFi", "AC"]},
    {"room_number": "A102", "building": "Block A", "capacity": 30,
     "amenities": ["WiFi", "Whiteboard", "Projector"]},
]

# Dozenten (Stammdaten für Seed-Daten); status entspricht FacultyStatus
DEFAULT_FACULTY: list[dict] = [
    {"name": "Dr. John Smith", "email": "john.smith@college.edu",
     "department": "Computer Science", "specialization": ["Programming", "AI"],
     "status": "present"},
    {"name": "Prof. Sarah Johnson", "email": "sarah.johnson@college.edu",
     "department": "Mathematics", "specialization": ["Algebra", "Calculus"],
     "status": "present"},
    {"name": "Dr. Michael Brown", "email": "michael.brown@college.edu",
     "department": "Physics", "specialization": ["Quantum Physics", "Mechanics"],
     "status": "leave"},
    {"name": "Prof. Emily Davis", "email": "emily.davis@college.edu",
     "department": "Computer Science", "specialization": ["Web Development", "Databases"],
     "status": "present"},
]

# Kurse je Fachbereich: (Kurs-ID, Kursname, typische Teilnehmerzahl)
DEFAULT_COURSES: dict[str, list[tuple[str, str, int]]] = {
    "Computer Science": [
        ("CS101", "Introduction to Programming", 60),
        ("CS220", "Databases", 35),
        ("CS340", "Artificial Intelligence", 45),
        ("CS210", "Web Development", 30),
    ],
    "Mathematics": [
        ("MA101", "Calculus I", 80),
        ("MA201", "Linear Algebra", 40),
    ],
    "Physics": [
        ("PH101", "Mechanics", 55),
        ("PH301", "Quantum Physics", 25),
    ],
}


def default_booking_rules() -> BookingRulesConfig:
    """Standard-Buchungsregeln.

    Öffnungszeiten 07:00 - 21:00, Formular-Vorbelegung 09:00 - 10:30
    (eine Doppelstunde à 90 Minuten), Anzeigeraster 30 Minuten.
    """
    return BookingRulesConfig(
        opening_time="07:00",
        closing_time="21:00",
        default_start_time="09:00",
        default_end_time="10:30",
        grid_minutes=30,
        enforce_opening_hours=True,
    )


def default_campus_config() -> CampusConfig:
    """Vollständige Default-Konfiguration."""
    return CampusConfig(
        campus_name="Campus College",
        booking=default_booking_rules(),
        storage=StorageConfig(),
        logging=LoggingConfig(),
    )
