"""Datenmodell für einen Zeitslot der Slot-Zeit-Tabelle."""

import re
from dataclasses import dataclass
from datetime import time

# Stunden ohne AM/PM unterhalb dieser Grenze gelten als Nachmittag
AFTERNOON_THRESHOLD_HOUR = 8

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])?\s*$")


class SlotTimeError(ValueError):
    """Wird geworfen, wenn eine Slot-Zeit fehlt oder nicht lesbar ist."""


@dataclass(frozen=True)
class SlotTime:
    """Beginn und Ende eines Slots als Uhrzeit (24h)."""

    start: time
    end: time

    def __str__(self) -> str:
        return f"{self.start:%H:%M}–{self.end:%H:%M}"


def parse_time(text: str, afternoon_threshold: int = AFTERNOON_THRESHOLD_HOUR) -> time:
    """Parst eine Uhrzeit im 12h-Format ("9:00AM", "2:00 pm", "1:00").

    Mit AM/PM wird normal umgerechnet. Ohne AM/PM gilt: eine Stunde kleiner
    als afternoon_threshold wird als Nachmittag gelesen (+12h), z.B.
    "1:00" → 13:00, "9:00" → 09:00.
    """
    match = _TIME_RE.match(text or "")
    if match is None:
        raise SlotTimeError(f"Ungültige Uhrzeit: '{text}'")
    hour, minute, meridiem = int(match.group(1)), int(match.group(2)), match.group(3)
    if minute > 59:
        raise SlotTimeError(f"Ungültige Minute in '{text}'")

    if meridiem:
        if not 1 <= hour <= 12:
            raise SlotTimeError(f"Ungültige Stunde für 12h-Format in '{text}'")
        hour = hour % 12
        if meridiem.upper() == "PM":
            hour += 12
    else:
        if hour > 23:
            raise SlotTimeError(f"Ungültige Stunde in '{text}'")
        if hour < afternoon_threshold:
            hour += 12

    return time(hour=hour, minute=minute)


def parse_slot_range(
    text: str, afternoon_threshold: int = AFTERNOON_THRESHOLD_HOUR
) -> SlotTime:
    """Parst einen Zeitbereich "Beginn-Ende", z.B. "9:00AM-10:20AM"."""
    parts = (text or "").split("-")
    if len(parts) != 2:
        raise SlotTimeError(f"Zeitbereich muss die Form 'Beginn-Ende' haben: '{text}'")
    start = parse_time(parts[0], afternoon_threshold)
    end = parse_time(parts[1], afternoon_threshold)
    if end <= start:
        raise SlotTimeError(f"Ende liegt nicht nach dem Beginn: '{text}'")
    return SlotTime(start=start, end=end)
