"""Kurskatalog laden: verschachtelter Katalog → flache Angebotsliste.

Katalogformat (JSON):
    {
      "Monday": {"T1": ["CS101", "MA101"], "T2": [...]},
      "Tuesday": {...}
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Optional, Sequence

from config.schema import TimetableConfig
from export.helpers import weekday_index
from models.offering import Offering

logger = logging.getLogger(__name__)

RawCatalog = Mapping[str, Optional[Mapping[str, Optional[Sequence[str]]]]]


class CatalogError(RuntimeError):
    """Raised when a catalog file cannot be read or references unknown slots."""


def flatten_catalog(raw: Optional[RawCatalog]) -> list[Offering]:
    """Flacht den Katalog zu einer Liste von Offerings ab.

    Reihenfolge: Tage, dann Slots, dann Kursnamen, jeweils wie im Katalog.
    Fehlende oder leere Ebenen bedeuten "keine Angebote" und sind kein Fehler.
    """
    offerings: list[Offering] = []
    for day, slots in (raw or {}).items():
        for slot, names in (slots or {}).items():
            for name in names or []:
                offerings.append(Offering(day=day, slot=slot, name=name))
    return offerings


def load_catalog_file(path: str | Path) -> dict:
    """Liest eine Katalog-Datei (JSON)."""
    path = Path(path)
    if not path.exists():
        raise CatalogError(f"Katalog-Datei nicht gefunden: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Katalog-Datei '{path}' ist kein gültiges JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise CatalogError(f"Katalog-Datei '{path}' muss ein Objekt Tag → Slot → Kurse enthalten")
    return raw


def validate_catalog(offerings: Sequence[Offering], config: TimetableConfig) -> list[str]:
    """Prüft die Angebote gegen die Konfiguration.

    Unbekannte Slot-Codes und Tage, die kein Wochentag sind (z.B. "Mon"),
    sind harte Fehler (CatalogError), da sie sich nicht exportieren lassen.
    Echte Wochentage außerhalb von ``config.days`` werden als Warnung
    zurückgegeben.
    """
    problems: list[str] = []
    missing_slots = sorted({o.slot for o in offerings if o.slot not in config.slot_times})
    if missing_slots:
        problems.append(
            f"Slot-Codes ohne Eintrag in der Slot-Zeit-Tabelle: {', '.join(missing_slots)}"
        )
    bad_days = sorted({o.day for o in offerings if not _is_weekday(o.day)})
    if bad_days:
        problems.append(f"Unbekannte Wochentage: {', '.join(bad_days)}")
    if problems:
        raise CatalogError("\n".join(problems))

    warnings = []
    for day in sorted({o.day for o in offerings if o.day not in config.days}):
        warnings.append(f"Tag '{day}' ist kein Unterrichtstag und erscheint nicht im Raster")
    return warnings


def _is_weekday(day: str) -> bool:
    try:
        weekday_index(day)
    except ValueError:
        return False
    return True


def load_offerings(config: TimetableConfig, semester: Optional[str] = None) -> list[Offering]:
    """Lädt, flacht und validiert den Katalog des (Default-)Semesters."""
    try:
        sem = config.get_semester(semester)
    except KeyError as exc:
        raise CatalogError(str(exc)) from exc
    offerings = flatten_catalog(load_catalog_file(sem.catalog_file))
    for warning in validate_catalog(offerings, config):
        logger.warning(warning)
    logger.info(f"Katalog {sem.label}: {len(offerings)} Angebote geladen")
    return offerings
