"""Datenmodell für ein Kursangebot im Wochenraster."""

from dataclasses import dataclass
from enum import Enum


class CourseDuration(str, Enum):
    """Laufzeit eines Kurses innerhalb des Semesters."""

    FULL = "full"
    H1 = "h1"   # nur erste Semesterhälfte
    H2 = "h2"   # nur zweite Semesterhälfte


@dataclass(frozen=True)
class Offering:
    """Ein Kursangebot: Kombination aus Wochentag, Slot-Code und Kursname.

    Die Identität ist das Tripel (day, slot, name).
    Immutable (frozen=True) damit es als Dict-Key / Set-Element nutzbar ist.
    """

    # Wochentag, z.B. "Monday"
    day: str
    # Slot-Code aus der Slot-Zeit-Tabelle, z.B. "T1"
    slot: str
    # Kursname wie im Katalog
    name: str

    @property
    def cell(self) -> tuple[str, str]:
        """Rasterzelle (day, slot) des Angebots."""
        return self.day, self.slot

    @property
    def duration(self) -> CourseDuration:
        """Halbsemester-Kennung aus dem Namen: "(H1)", "(H2)", sonst ganzes Semester."""
        if "(H1)" in self.name:
            return CourseDuration.H1
        if "(H2)" in self.name and "(H1/H2)" not in self.name:
            return CourseDuration.H2
        return CourseDuration.FULL

    def on_day(self, day: str) -> "Offering":
        """Kopie desselben Kurses an einem anderen Wochentag."""
        return Offering(day=day, slot=self.slot, name=self.name)

    def __repr__(self) -> str:
        return f"Offering({self.day}, {self.slot}, {self.name!r})"

    def __str__(self) -> str:
        return f"{self.name} - {self.day} {self.slot}"
