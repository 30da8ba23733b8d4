"""Auswahl-Engine: Kursauswahl, abgeleitete Listen und lokale Ablage."""

from .selection import SearchHit, SelectionEngine, SelectionSnapshot
from .persistence import (
    InMemoryPersistence,
    JsonFilePersistence,
    NullThemeSink,
    PersistedState,
    RichThemeSink,
)

__all__ = [
    "SelectionEngine",
    "SelectionSnapshot",
    "SearchHit",
    "PersistedState",
    "InMemoryPersistence",
    "JsonFilePersistence",
    "NullThemeSink",
    "RichThemeSink",
]
