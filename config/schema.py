from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from models.timeslot import SlotTimeError, parse_slot_range


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


# ─── SEMESTER ───

class SemesterDef(BaseModel):
    """Ein Semester mit eigenem Kurskatalog."""
    # Kurzbezeichnung, z.B. "S26" (Spring 2026) oder "M25" (Monsoon 2025)
    label: str
    # Pfad zur Katalog-Datei (JSON: Tag → Slot → Kursnamen)
    catalog_file: str
    # Letzter Vorlesungstag; exklusive Obergrenze für Kalender-Wiederholungen
    end_date: date


# ─── GESAMT-CONFIG ───

class TimetableConfig(BaseModel):
    """Gesamtkonfiguration des Stundenplan-Baukastens."""
    # Anzeigename, auch Kalendername und Basis des Export-Dateinamens
    timetable_name: str = Field("IIITH Timetable",
        description="Name des Stundenplans")
    # Reguläre Unterrichtstage in Rasterreihenfolge
    days: list[str] = Field(
        default=["Monday", "Tuesday", "Wednesday"],
        description="Unterrichtstage (Zeilen des Rasters)")
    # Slot-Codes in Rasterreihenfolge
    slot_order: list[str] = Field(
        default=["T1", "T2", "T3", "T4", "T5", "T6"],
        description="Slot-Codes (Spalten des Rasters)")
    # Slot-Zeit-Tabelle: Slot-Code → "Beginn-Ende" im 12h-Format
    slot_times: dict[str, str] = Field(
        description="Slot-Code → Zeitbereich, z.B. '9:00AM-10:20AM'")
    # Beim Export wird jeder Tag auf den Partnertag dupliziert
    duplicate_days: dict[str, str] = Field(
        default={"Monday": "Thursday", "Tuesday": "Friday", "Wednesday": "Saturday"},
        description="Tag → Partnertag für die Export-Duplizierung")
    # Stunden ohne AM/PM unterhalb dieser Grenze gelten als Nachmittag
    afternoon_threshold_hour: int = Field(8, ge=0, le=12,
        description="Grenze für die AM/PM-Heuristik")
    # IANA-Zeitzone der Kalendereinträge
    timezone: str = Field("Asia/Kolkata",
        description="Zeitzone für den Kalender-Export")
    # Verfügbare Semester (neuestes zuerst)
    semesters: list[SemesterDef] = Field(
        description="Semester mit Katalog-Dateien")
    # Aktives Semester
    default_semester: str
    # Lokale Ablage für Auswahl und Theme
    state_file: str = Field("output/state.json",
        description="Datei für die gespeicherte Auswahl")

    @field_validator("days")
    @classmethod
    def validate_days(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("Mindestens ein Unterrichtstag erforderlich")
        if len(set(v)) != len(v):
            raise ValueError("Unterrichtstage sind nicht eindeutig")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unbekannte Zeitzone: '{v}'") from e
        return v

    @model_validator(mode='after')
    def validate_slot_table(self):
        """Prüft, dass jeder Slot eine lesbare Zeit hat und die Partnertage passen."""
        for slot in self.slot_order:
            if slot not in self.slot_times:
                raise ValueError(f"Slot '{slot}' hat keinen Eintrag in slot_times")
        for slot, text in self.slot_times.items():
            try:
                parse_slot_range(text, self.afternoon_threshold_hour)
            except SlotTimeError as e:
                raise ValueError(f"Slot '{slot}': {e}") from e
        for day in self.duplicate_days:
            if day not in self.days:
                raise ValueError(f"Duplizierungs-Tag '{day}' ist kein Unterrichtstag")
        labels = [s.label for s in self.semesters]
        if self.default_semester not in labels:
            raise ValueError(
                f"Semester '{self.default_semester}' nicht definiert. Verfügbar: {labels}")
        return self

    def get_semester(self, label: Optional[str] = None) -> SemesterDef:
        """Gibt das Semester zurück (Default: default_semester)."""
        target = label or self.default_semester
        for s in self.semesters:
            if s.label == target:
                return s
        raise KeyError(
            f"Semester '{target}' nicht gefunden. "
            f"Verfügbar: {[s.label for s in self.semesters]}")

