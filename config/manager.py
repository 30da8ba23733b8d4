"""Konfigurationsmanager: Laden, Speichern und Ersteinrichtung.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import SAMPLE_CATALOG, default_timetable_config
from config.schema import TimetableConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Stundenplan-Baukasten — Konfiguration
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "days": (
        "Raster",
        "Unterrichtstage (Zeilen) und Slot-Codes (Spalten).",
    ),
    "slot_times": (
        "Slot-Zeit-Tabelle",
        "Format 'Beginn-Ende' im 12h-Format. Ohne AM/PM gilt eine Stunde\n"
        "kleiner als afternoon_threshold_hour als Nachmittag.",
    ),
    "duplicate_days": (
        "Kalender-Export",
        "Jeder Kurs wird zusätzlich am Partnertag exportiert.",
    ),
    "semesters": (
        "Semester",
        "end_date ist die exklusive Obergrenze der wöchentlichen Wiederholung.",
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "timetable.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> TimetableConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py init' aus, um den Stundenplan einzurichten."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return TimetableConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    # ─── Speichern ───

    def save(self, config: TimetableConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: TimetableConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )
        return cm

    # ─── Ersteinrichtung ───

    def write_sample_catalog(self, config: TimetableConfig,
                             semester: Optional[str] = None) -> Path:
        """Schreibt den Beispielkatalog an den Katalog-Pfad des Semesters."""
        target = Path(config.get_semester(semester).catalog_file)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            json.dump(SAMPLE_CATALOG, f, indent=2, ensure_ascii=False)
        return target

    def initialize(self) -> TimetableConfig:
        """Legt Default-Config und Beispielkatalog an."""
        config = default_timetable_config()
        self.save(config)
        catalog_path = self.write_sample_catalog(config)
        console.print(f"[green]✓[/green] Beispielkatalog gespeichert: {catalog_path}")
        return config
