"""Lokale Ablage der Auswahl und des Farbschemas.

Die Engine greift nie direkt auf Dateien oder die Konsole zu; sie bekommt
eine Persistence- und eine ThemeSink-Implementierung injiziert.
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol

from pydantic import BaseModel

from config.schema import Theme
from models.offering import Offering

if TYPE_CHECKING:
    from rich.console import Console

logger = logging.getLogger(__name__)


class OfferingRecord(BaseModel):
    """Serialisierbare Form eines Offerings."""

    day: str
    slot: str
    name: str

    @classmethod
    def from_offering(cls, offering: Offering) -> "OfferingRecord":
        return cls(day=offering.day, slot=offering.slot, name=offering.name)

    def to_offering(self) -> Offering:
        return Offering(day=self.day, slot=self.slot, name=self.name)


class PersistedState(BaseModel):
    """Gespeicherter Zustand: ausgewählte Angebote + Theme."""

    selected: list[OfferingRecord] = []
    theme: Theme = Theme.LIGHT

    @property
    def offerings(self) -> list[Offering]:
        return [r.to_offering() for r in self.selected]


class Persistence(Protocol):
    def load(self) -> Optional[PersistedState]: ...

    def save(self, state: PersistedState) -> None: ...


class ThemeSink(Protocol):
    def apply(self, theme: Theme) -> None: ...


# ─── Implementierungen ───

class InMemoryPersistence:
    """Hält den Zustand nur im Speicher (Tests, Einmal-Sitzungen)."""

    def __init__(self, state: Optional[PersistedState] = None) -> None:
        self.state = state
        self.save_count = 0

    def load(self) -> Optional[PersistedState]:
        return self.state

    def save(self, state: PersistedState) -> None:
        self.state = state
        self.save_count += 1


class JsonFilePersistence:
    """Speichert den Zustand als JSON-Datei auf dem lokalen Gerät."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Optional[PersistedState]:
        """Lädt den Zustand. Fehlt die Datei, wird None zurückgegeben."""
        if not self.path.exists():
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return PersistedState.model_validate(data)

    def save(self, state: PersistedState) -> None:
        """Schreibt erst in eine Nachbardatei und ersetzt dann atomar."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(state.model_dump_json(indent=2))
        tmp.replace(self.path)

    def __repr__(self) -> str:
        return f"JsonFilePersistence({self.path})"


class NullThemeSink:
    def apply(self, theme: Theme) -> None:
        return None


class RichThemeSink:
    """Setzt das Farbschema einer Rich-Konsole."""

    STYLES: dict[Theme, dict[str, str]] = {
        Theme.LIGHT: {
            "course": "bold black on bright_white",
            "conflict": "red",
            "muted": "grey50",
            "header": "bold blue",
        },
        Theme.DARK: {
            "course": "bold white on grey23",
            "conflict": "bright_red",
            "muted": "grey62",
            "header": "bold cyan",
        },
    }

    def __init__(self, console: "Console") -> None:
        self.console = console
        self._pushed = False

    def apply(self, theme: Theme) -> None:
        from rich.theme import Theme as RichTheme

        if self._pushed:
            self.console.pop_theme()
        self.console.push_theme(RichTheme(self.STYLES[theme]))
        self._pushed = True
        logger.debug(f"Theme gesetzt: {theme.value}")
