"""Gemeinsame Hilfsfunktionen für Kalender-Export und Terminal-Anzeige."""

import re
from datetime import date, timedelta
from typing import Iterable, Mapping

from models.offering import Offering

WEEKDAYS: list[str] = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
]


def weekday_index(day_name: str) -> int:
    """Wochentag-Name → Index (0=Montag). Groß/Kleinschreibung egal."""
    lookup = {d.lower(): i for i, d in enumerate(WEEKDAYS)}
    try:
        return lookup[day_name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unbekannter Wochentag: '{day_name}'") from None


def next_weekday(day_name: str, today: date) -> date:
    """Nächster Termin dieses Wochentags ab heute (heute selbst eingeschlossen)."""
    delta = (weekday_index(day_name) - today.weekday()) % 7
    return today + timedelta(days=delta)


def expand_duplicates(
    offerings: Iterable[Offering], duplicate_days: Mapping[str, str]
) -> list[Offering]:
    """Fügt zu jedem Angebot die Kopie am Partnertag hinzu.

    Montag → Donnerstag, Dienstag → Freitag, Mittwoch → Samstag (Default).
    Reihenfolge: Original, direkt gefolgt von seiner Kopie.
    """
    result: list[Offering] = []
    for o in offerings:
        result.append(o)
        partner = duplicate_days.get(o.day)
        if partner:
            result.append(o.on_day(partner))
    return result


def safe_filename(name: str) -> str:
    """Dateiname aus einem Anzeigenamen: nur Buchstaben, Ziffern, _ und -."""
    cleaned = re.sub(r"[^\w\- ]", "_", name).strip().replace(" ", "_")
    return cleaned or "timetable"


def slugify(text: str) -> str:
    """Kleinbuchstaben-Bezeichner für UIDs, z.B. "CS 101 (H1)" → "cs-101-h1"."""
    s = re.sub(r"[^a-z0-9]+", "-", text.lower())
    return s.strip("-") or "x"
