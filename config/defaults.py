from datetime import date

from config.schema import SemesterDef, TimetableConfig


# ─── SLOT-ZEIT-TABELLE ───
# Einige Einträge im Quelldatensatz haben kein AM/PM; Stunden < 8 gelten
# dann als Nachmittag (siehe models.timeslot.parse_time).
DEFAULT_SLOT_TIMES: dict[str, str] = {
    "T1": "8:30AM-9:55AM",
    "T2": "10:05AM-11:30AM",
    "T3": "11:40AM-1:05PM",
    "T4": "2:00-3:25",
    "T5": "3:35PM-5:00PM",
    "T6": "5:10PM-6:35PM",
}

DEFAULT_DAYS: list[str] = ["Monday", "Tuesday", "Wednesday"]

# Montag-Raster wiederholt sich am Donnerstag usw.
DEFAULT_DUPLICATE_DAYS: dict[str, str] = {
    "Monday": "Thursday",
    "Tuesday": "Friday",
    "Wednesday": "Saturday",
}


# ─── BEISPIELKATALOG ───

SAMPLE_CATALOG: dict[str, dict[str, list[str]]] = {
    "Monday": {
        "T1": ["Computer Systems Organisation", "Real Analysis"],
        "T2": ["Data Structures and Algorithms", "Introduction to Linguistics"],
        "T3": ["Probability and Statistics", "Digital Signal Processing (H1)"],
        "T4": ["Operating Systems and Networks"],
        "T5": ["Science Lab II (H2)", "Basics of Ethics"],
        "T6": [],
    },
    "Tuesday": {
        "T1": ["Discrete Structures", "Linear Algebra"],
        "T2": ["Computer Programming", "Thermodynamics (H1/H2)"],
        "T3": ["Software Systems", "Optimization Methods"],
        "T4": ["Machine, Data and Learning", "Introduction to Human Sciences"],
        "T5": ["Automata Theory"],
        "T6": ["Value Education (H1)"],
    },
    "Wednesday": {
        "T1": ["Embedded Systems Workshop"],
        "T2": ["Computer Vision", "Information Security"],
        "T3": ["Design and Analysis of Software Systems", "Robotics: Planning and Navigation"],
        "T4": ["Natural Language Processing", "Quantum Computing"],
        "T5": ["Distributed Systems"],
        "T6": ["Advanced NLP (H2)"],
    },
}


def default_semesters() -> list[SemesterDef]:
    """Standard-Semesterliste (neuestes Semester zuerst)."""
    return [
        SemesterDef(label="S26", catalog_file="data/catalogs/s26.json",
                    end_date=date(2026, 4, 25)),
        SemesterDef(label="M25", catalog_file="data/catalogs/m25.json",
                    end_date=date(2025, 11, 20)),
    ]


def default_timetable_config() -> TimetableConfig:
    """Vollständige Default-Konfiguration (Semester S26)."""
    return TimetableConfig(
        timetable_name="IIITH Timetable",
        days=list(DEFAULT_DAYS),
        slot_order=list(DEFAULT_SLOT_TIMES),
        slot_times=dict(DEFAULT_SLOT_TIMES),
        duplicate_days=dict(DEFAULT_DUPLICATE_DAYS),
        afternoon_threshold_hour=8,
        timezone="Asia/Kolkata",
        semesters=default_semesters(),
        default_semester="S26",
        state_file="output/state.json",
    )
