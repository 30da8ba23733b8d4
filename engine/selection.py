"""SelectionEngine – verwaltet die Kursauswahl und die abgeleiteten Listen.

Nach jeder Änderung der Auswahl werden ``available`` und ``conflicting``
vollständig aus dem Katalog neu berechnet (O(n)); die Kataloge sind klein
(zehn bis wenige hundert Angebote).

Belegt ein neu ausgewähltes Angebot eine bereits belegte Zelle (day, slot),
ersetzt es die bisherige Auswahl. Pro Zelle ist also höchstens ein Angebot
ausgewählt und ``find_selected`` ist eindeutig.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

from config.schema import Theme
from engine.persistence import (
    NullThemeSink,
    OfferingRecord,
    PersistedState,
    Persistence,
    ThemeSink,
)
from models.offering import Offering

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionSnapshot:
    """Unveränderlicher Stand nach einer Änderung."""

    selected: tuple[Offering, ...]
    available: tuple[Offering, ...]
    conflicting: tuple[Offering, ...]


@dataclass(frozen=True)
class SearchHit:
    """Suchtreffer; ``replaces`` ist die Auswahl, die er verdrängen würde."""

    offering: Offering
    replaces: Optional[Offering] = None

    @property
    def has_conflict(self) -> bool:
        return self.replaces is not None


Listener = Callable[[SelectionSnapshot], None]


def _matches(offering: Offering, term: str) -> bool:
    return term.lower() in offering.name.lower()


class SelectionEngine:
    """Kursauswahl mit abgeleiteten verfügbaren und kollidierenden Angeboten."""

    def __init__(
        self,
        offerings: Sequence[Offering],
        *,
        persistence: Optional[Persistence] = None,
        theme_sink: Optional[ThemeSink] = None,
    ) -> None:
        self._offerings: tuple[Offering, ...] = tuple(offerings)
        self._known: frozenset[Offering] = frozenset(self._offerings)
        # Insertion-Order = Auswahlreihenfolge
        self._selected: dict[tuple[str, str], Offering] = {}
        self._available: tuple[Offering, ...] = self._offerings
        self._conflicting: tuple[Offering, ...] = ()
        self._listeners: list[Listener] = []
        self._persistence = persistence
        self._theme_sink: ThemeSink = theme_sink or NullThemeSink()
        self._theme = Theme.LIGHT

        self._load_persisted()
        self._theme_sink.apply(self._theme)

    # ─── Lesender Zugriff ───

    @property
    def offerings(self) -> tuple[Offering, ...]:
        return self._offerings

    @property
    def theme(self) -> Theme:
        return self._theme

    def selected_snapshot(self) -> tuple[Offering, ...]:
        return tuple(self._selected.values())

    def available_snapshot(self) -> tuple[Offering, ...]:
        return self._available

    def conflicting_snapshot(self) -> tuple[Offering, ...]:
        return self._conflicting

    def snapshot(self) -> SelectionSnapshot:
        return SelectionSnapshot(
            selected=self.selected_snapshot(),
            available=self._available,
            conflicting=self._conflicting,
        )

    def is_selected(self, offering: Offering) -> bool:
        return self._selected.get(offering.cell) == offering

    def find_selected(self, day: str, slot: str) -> Optional[Offering]:
        """Gibt die Auswahl in der Rasterzelle (day, slot) zurück, sonst None."""
        return self._selected.get((day, slot))

    # ─── Filter ───

    def filter_available(self, term: str) -> list[Offering]:
        """Verfügbare Angebote, deren Name den Suchbegriff enthält (ohne Groß/Klein)."""
        return [o for o in self._available if _matches(o, term)]

    def filter_conflicting(self, term: str) -> list[Offering]:
        """Kollidierende Angebote, deren Name den Suchbegriff enthält."""
        return [o for o in self._conflicting if _matches(o, term)]

    def browse(self, day: Optional[str] = None, slot: Optional[str] = None) -> list[Offering]:
        """Katalog-Angebote eines Tages, eines Slots oder einer Zelle.

        Bereits ausgewählte Angebote werden ausgelassen. Ohne Filter: leer.
        """
        if day is None and slot is None:
            return []
        return [
            o for o in self._offerings
            if (day is None or o.day == day)
            and (slot is None or o.slot == slot)
            and not self.is_selected(o)
        ]

    def search(self, term: str, limit: int = 10) -> list[SearchHit]:
        """Schnellsuche über alle noch nicht ausgewählten Angebote.

        Jeder Treffer nennt die Auswahl, die er beim Auswählen ersetzen würde.
        Ein leerer Suchbegriff liefert keine Treffer.
        """
        if not term:
            return []
        hits: list[SearchHit] = []
        for o in self._offerings:
            if not _matches(o, term) or self.is_selected(o):
                continue
            hits.append(SearchHit(offering=o, replaces=self._selected.get(o.cell)))
            if len(hits) >= limit:
                break
        return hits

    # ─── Änderungen ───

    def select(self, offering: Offering) -> SelectionSnapshot:
        """Wählt ein Angebot aus; eine bisherige Auswahl in derselben Zelle wird ersetzt."""
        if offering not in self._known:
            logger.warning(f"Auswahl ignoriert, nicht im Katalog: {offering!r}")
            return self.snapshot()
        previous = self._selected.get(offering.cell)
        if previous == offering:
            return self.snapshot()
        if previous is not None:
            logger.info(f"{offering.day} {offering.slot}: '{previous.name}' ersetzt durch '{offering.name}'")
            del self._selected[offering.cell]
        else:
            logger.info(f"Ausgewählt: {offering}")
        self._selected[offering.cell] = offering
        return self._changed()

    def remove(self, offering: Offering) -> SelectionSnapshot:
        """Entfernt ein Angebot aus der Auswahl. Nicht ausgewählt → keine Änderung."""
        if not self.is_selected(offering):
            return self.snapshot()
        del self._selected[offering.cell]
        logger.info(f"Entfernt: {offering}")
        return self._changed()

    def clear(self) -> SelectionSnapshot:
        """Entfernt alle Auswahlen."""
        if not self._selected:
            return self.snapshot()
        self._selected.clear()
        logger.info("Auswahl geleert")
        return self._changed()

    def restore(self, initial: Iterable[Offering]) -> SelectionSnapshot:
        """Ersetzt die Auswahl durch gespeicherte Angebote.

        Angebote, die nicht (mehr) im Katalog stehen, werden verworfen; bei
        mehreren Angeboten in derselben Zelle gilt das letzte.
        """
        self._selected = self._normalize(initial)
        return self._changed()

    def set_theme(self, theme: Theme) -> Theme:
        if theme != self._theme:
            self._theme = theme
            self._theme_sink.apply(theme)
            self._save()
        return self._theme

    def toggle_theme(self) -> Theme:
        return self.set_theme(Theme.DARK if self._theme == Theme.LIGHT else Theme.LIGHT)

    # ─── Beobachter ───

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registriert einen Listener; gibt eine Abmelde-Funktion zurück."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ─── Intern ───

    def _normalize(self, initial: Iterable[Offering]) -> dict[tuple[str, str], Offering]:
        selected: dict[tuple[str, str], Offering] = {}
        for o in initial:
            if o not in self._known:
                logger.warning(f"Gespeicherte Auswahl verworfen, nicht im Katalog: {o!r}")
                continue
            if o.cell in selected:
                logger.warning(
                    f"Doppelte Auswahl in {o.day} {o.slot}: '{selected[o.cell].name}' "
                    f"ersetzt durch '{o.name}'"
                )
                del selected[o.cell]
            selected[o.cell] = o
        return selected

    def _recompute(self) -> None:
        occupied = self._selected
        self._available = tuple(o for o in self._offerings if o.cell not in occupied)
        self._conflicting = tuple(
            o for o in self._offerings
            if o.cell in occupied and occupied[o.cell].name != o.name
        )

    def _changed(self) -> SelectionSnapshot:
        self._recompute()
        self._save()
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)
        return snap

    def _save(self) -> None:
        if self._persistence is None:
            return
        state = PersistedState(
            selected=[OfferingRecord.from_offering(o) for o in self._selected.values()],
            theme=self._theme,
        )
        try:
            self._persistence.save(state)
        except OSError as e:
            logger.error(f"Auswahl konnte nicht gespeichert werden: {e}")

    def _load_persisted(self) -> None:
        if self._persistence is None:
            return
        try:
            state = self._persistence.load()
        except (OSError, ValueError) as e:
            logger.error(f"Gespeicherter Zustand nicht lesbar, starte leer: {e}")
            return
        if state is None:
            return
        self._theme = state.theme
        self._selected = self._normalize(state.offerings)
        self._recompute()
        logger.info(f"Zustand wiederhergestellt: {len(self._selected)} Kurse")

    def __repr__(self) -> str:
        return (f"SelectionEngine({len(self._offerings)} Angebote, "
                f"{len(self._selected)} ausgewählt)")
