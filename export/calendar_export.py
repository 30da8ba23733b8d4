"""Kalender-Export: ausgewählte Angebote → wöchentlich wiederkehrende Termine (ics)."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from config.schema import TimetableConfig
from export.helpers import expand_duplicates, next_weekday, safe_filename, slugify
from export.ics_timezone import localize_times, vtimezone_lines
from models.offering import Offering
from models.timeslot import AFTERNOON_THRESHOLD_HOUR, SlotTime, SlotTimeError, parse_slot_range

logger = logging.getLogger(__name__)

NOTHING_TO_EXPORT = "Nothing to export: please select at least one course."


@dataclass(frozen=True)
class RecurringEvent:
    """Ein wöchentlich wiederkehrender Termin bis zum Semesterende."""

    summary: str
    day: str
    slot: str
    start: datetime
    end: datetime
    # Semesterende 00:00 Uhr; Termine an diesem Tag fallen weg
    until: datetime
    interval_days: int = 7

    @property
    def rrule(self) -> str:
        """RRULE-Wert, UNTIL in UTC."""
        until_utc = self.until.astimezone(timezone.utc)
        return (
            f"FREQ=WEEKLY;INTERVAL={self.interval_days // 7};"
            f"UNTIL={until_utc:%Y%m%dT%H%M%SZ}"
        )


class CalendarProjector:
    """Projiziert Angebote (Tag + Slot) auf konkrete Termine."""

    def __init__(
        self,
        slot_times: Mapping[str, str],
        semester_end: date,
        *,
        tz: str = "UTC",
        duplicate_days: Optional[Mapping[str, str]] = None,
        afternoon_threshold: int = AFTERNOON_THRESHOLD_HOUR,
    ) -> None:
        self.slot_times = dict(slot_times)
        self.semester_end = semester_end
        self.tzinfo = ZoneInfo(tz)
        self.duplicate_days = dict(duplicate_days or {})
        self.afternoon_threshold = afternoon_threshold

    @classmethod
    def from_config(cls, config: TimetableConfig,
                    semester: Optional[str] = None) -> "CalendarProjector":
        return cls(
            config.slot_times,
            config.get_semester(semester).end_date,
            tz=config.timezone,
            duplicate_days=config.duplicate_days,
            afternoon_threshold=config.afternoon_threshold_hour,
        )

    def slot_time(self, slot: str) -> SlotTime:
        """Slot-Code → Beginn/Ende. Fehlender Eintrag ist ein Konfigurationsfehler."""
        text = self.slot_times.get(slot)
        if text is None:
            raise SlotTimeError(f"Keine Zeit für Slot '{slot}' in der Slot-Zeit-Tabelle")
        return parse_slot_range(text, self.afternoon_threshold)

    def project_occurrence(self, offering: Offering, today: Optional[date] = None) -> RecurringEvent:
        """Ein Termin für genau diesen Tag/Slot, beginnend am nächsten passenden Wochentag."""
        today = today or date.today()
        st = self.slot_time(offering.slot)
        first = next_weekday(offering.day, today)
        return RecurringEvent(
            summary=offering.name,
            day=offering.day,
            slot=offering.slot,
            start=self._at(first, st.start),
            end=self._at(first, st.end),
            until=self._at(self.semester_end, time(0, 0)),
        )

    def project(self, offering: Offering, today: Optional[date] = None) -> list[RecurringEvent]:
        """Termin des Angebots plus Kopie am Partnertag (falls vorhanden)."""
        return [
            self.project_occurrence(o, today)
            for o in expand_duplicates([offering], self.duplicate_days)
        ]

    def project_all(self, offerings: Iterable[Offering],
                    today: Optional[date] = None) -> list[RecurringEvent]:
        today = today or date.today()
        events: list[RecurringEvent] = []
        for o in offerings:
            events.extend(self.project(o, today))
        return events

    def _at(self, day: date, t: time) -> datetime:
        return datetime.combine(day, t, tzinfo=self.tzinfo)


class ExportResult(BaseModel):
    """Ergebnis eines Export-Versuchs."""

    ok: bool
    message: str
    filename: Optional[str] = None
    content: Optional[str] = None
    event_count: int = 0

    def print_rich(self) -> None:
        """Gibt das Ergebnis formatiert über Rich aus."""
        from rich.console import Console

        console = Console()
        if self.ok:
            console.print(f"[green]✓[/green] {self.message}")
        else:
            console.print(f"[yellow]{self.message}[/yellow]")


class IcsExporter:
    """Erzeugt eine iCalendar-Datei aus der Kursauswahl."""

    UID_DOMAIN = "timetable.local"

    def __init__(self, config: TimetableConfig, semester: Optional[str] = None):
        self.config = config
        self.semester = config.get_semester(semester)
        self.projector = CalendarProjector.from_config(config, semester)

    @property
    def filename(self) -> str:
        return f"{safe_filename(self.config.timetable_name)}.ics"

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, selected: Sequence[Offering], today: Optional[date] = None) -> ExportResult:
        """Baut den Kalender. Leere Auswahl → ok=False, keine Datei."""
        if not selected:
            logger.info("Export übersprungen: keine Kurse ausgewählt")
            return ExportResult(ok=False, message=NOTHING_TO_EXPORT)

        try:
            events = self.projector.project_all(selected, today)
        except ValueError as exc:
            # SlotTimeError (fehlende/ungültige Slot-Zeit) und unbekannte Wochentage
            logger.error(f"Kalender-Export fehlgeschlagen: {exc}")
            return ExportResult(ok=False, message=f"Export fehlgeschlagen: {exc}")
        calendar = self.build_calendar(events)
        content = localize_times(
            "".join(calendar.serialize_iter()),
            self.config.timezone,
            vtimezone_lines(self.projector.tzinfo, events),
        )
        logger.info(f"Kalender-Export: {len(events)} Termine aus {len(selected)} Kursen")
        return ExportResult(
            ok=True,
            message=f"{len(events)} wiederkehrende Termine exportiert ({self.filename})",
            filename=self.filename,
            content=content,
            event_count=len(events),
        )

    def write(self, result: ExportResult, directory: Path) -> Optional[Path]:
        """Schreibt ein erfolgreiches Ergebnis nach directory/filename."""
        if not result.ok or result.content is None:
            return None
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / result.filename
        # ics liefert bereits CRLF-Zeilenenden
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(result.content)
        return path

    def build_calendar(self, events: Sequence[RecurringEvent]):
        """ics.Calendar mit einem VEVENT pro Termin."""
        from ics import Calendar, Event
        from ics.grammar.parse import ContentLine

        cal = Calendar(creator=self.config.timetable_name)
        cal.extra.append(ContentLine(name="X-WR-CALNAME", value=self.config.timetable_name))
        cal.extra.append(ContentLine(name="X-WR-TIMEZONE", value=self.config.timezone))
        for ev in events:
            event = Event(
                name=ev.summary,
                # Wandzeit ohne tzinfo; localize_times setzt danach TZID
                begin=ev.start.replace(tzinfo=None),
                end=ev.end.replace(tzinfo=None),
                uid=self._uid(ev),
                description=f"{ev.day} {ev.slot} · {self.semester.label}",
            )
            event.extra.append(ContentLine(name="RRULE", value=ev.rrule))
            cal.events.add(event)
        return cal

    def _uid(self, ev: RecurringEvent) -> str:
        return (f"{slugify(ev.summary)}-{ev.day.lower()}-{ev.slot.lower()}-"
                f"{self.semester.label.lower()}@{self.UID_DOMAIN}")
