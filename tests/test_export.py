"""Tests für den Kalender-Export (Projektion + ics) und die Raster-Anzeige."""

from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from config.schema import SemesterDef, TimetableConfig
from engine import SelectionEngine
from export.calendar_export import (
    NOTHING_TO_EXPORT,
    CalendarProjector,
    IcsExporter,
    RecurringEvent,
)
from export.helpers import expand_duplicates, next_weekday, safe_filename, weekday_index
from export.ics_timezone import localize_times, offset_transitions, vtimezone_lines
from export.tui_renderer import render_grid_rows, render_header
from models.offering import Offering
from models.timeslot import SlotTimeError

# 01.10.2025 ist ein Mittwoch
WEDNESDAY = date(2025, 10, 1)
SEMESTER_END = date(2025, 11, 20)

SLOT_TIMES = {"T1": "9:00-10:20", "T2": "2:00PM-3:20PM", "T3": "1:00-2:20"}


def _make_config() -> TimetableConfig:
    return TimetableConfig(
        timetable_name="Test Timetable",
        slot_times=dict(SLOT_TIMES),
        slot_order=["T1", "T2", "T3"],
        semesters=[SemesterDef(label="M25", catalog_file="m25.json", end_date=SEMESTER_END)],
        default_semester="M25",
        timezone="UTC",
    )


@pytest.fixture
def projector() -> CalendarProjector:
    return CalendarProjector.from_config(_make_config())


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

class TestHelpers:
    def test_weekday_index(self):
        assert weekday_index("Monday") == 0
        assert weekday_index("saturday") == 5

    def test_weekday_index_unknown(self):
        with pytest.raises(ValueError):
            weekday_index("Caturday")

    def test_next_weekday_today(self):
        """Ist heute der Zieltag, zählt heute."""
        assert next_weekday("Wednesday", WEDNESDAY) == WEDNESDAY

    def test_next_weekday_later_in_week(self):
        assert next_weekday("Saturday", WEDNESDAY) == date(2025, 10, 4)

    def test_next_weekday_wraps(self):
        assert next_weekday("Monday", WEDNESDAY) == date(2025, 10, 6)
        assert next_weekday("Tuesday", WEDNESDAY) == date(2025, 10, 7)

    def test_expand_duplicates(self):
        offerings = [Offering("Monday", "T1", "A"), Offering("Wednesday", "T2", "B")]
        result = expand_duplicates(offerings, {"Monday": "Thursday", "Wednesday": "Saturday"})
        assert result == [
            Offering("Monday", "T1", "A"),
            Offering("Thursday", "T1", "A"),
            Offering("Wednesday", "T2", "B"),
            Offering("Saturday", "T2", "B"),
        ]

    def test_expand_duplicates_unpaired_day(self):
        result = expand_duplicates([Offering("Friday", "T1", "A")], {"Monday": "Thursday"})
        assert result == [Offering("Friday", "T1", "A")]

    def test_safe_filename(self):
        assert safe_filename("IIITH Timetable") == "IIITH_Timetable"
        assert safe_filename("a/b: c") == "a_b__c"
        assert safe_filename("") == "timetable"


# ─── Projektion ───────────────────────────────────────────────────────────────

class TestCalendarProjector:
    def test_wednesday_yields_two_weekly_events(self, projector: CalendarProjector):
        """Mittwoch-Angebot → Mittwoch- und Samstag-Termin, beide bis 20.11.2025."""
        events = projector.project(Offering("Wednesday", "T1", "CS101"), today=WEDNESDAY)
        assert [e.day for e in events] == ["Wednesday", "Saturday"]
        assert events[0].start.date() == WEDNESDAY
        assert events[1].start.date() == date(2025, 10, 4)
        for e in events:
            assert e.interval_days == 7
            assert e.until.date() == SEMESTER_END
            assert e.summary == "CS101"
            assert e.start.time() == time(9, 0)
            assert e.end.time() == time(10, 20)

    def test_afternoon_heuristic_applied(self, projector: CalendarProjector):
        """'1:00-2:20' ohne AM/PM → 13:00–14:20."""
        ev = projector.project_occurrence(Offering("Monday", "T3", "X"), today=WEDNESDAY)
        assert (ev.start.time(), ev.end.time()) == (time(13, 0), time(14, 20))

    def test_pm_slot(self, projector: CalendarProjector):
        ev = projector.project_occurrence(Offering("Tuesday", "T2", "X"), today=WEDNESDAY)
        assert ev.start == datetime(2025, 10, 7, 14, 0, tzinfo=ev.start.tzinfo)
        assert ev.end.time() == time(15, 20)

    def test_project_all_counts(self, projector: CalendarProjector):
        offerings = [Offering("Monday", "T1", "A"), Offering("Tuesday", "T2", "B")]
        events = projector.project_all(offerings, today=WEDNESDAY)
        assert [(e.day, e.summary) for e in events] == [
            ("Monday", "A"), ("Thursday", "A"), ("Tuesday", "B"), ("Friday", "B"),
        ]

    def test_missing_slot_time_raises(self, projector: CalendarProjector):
        with pytest.raises(SlotTimeError):
            projector.project(Offering("Monday", "T9", "X"), today=WEDNESDAY)

    def test_rrule(self):
        ev = RecurringEvent(
            summary="X", day="Monday", slot="T1",
            start=datetime(2025, 10, 6, 9, 0, tzinfo=timezone.utc),
            end=datetime(2025, 10, 6, 10, 20, tzinfo=timezone.utc),
            until=datetime(2025, 11, 20, 0, 0, tzinfo=timezone.utc),
        )
        assert ev.rrule == "FREQ=WEEKLY;INTERVAL=1;UNTIL=20251120T000000Z"

    def test_timezone_applied(self):
        config = _make_config().model_copy(update={"timezone": "Asia/Kolkata"})
        ev = CalendarProjector.from_config(config).project_occurrence(
            Offering("Wednesday", "T1", "X"), today=WEDNESDAY)
        assert ev.start.utcoffset().total_seconds() == 5.5 * 3600
        assert "UNTIL=20251119T183000Z" in ev.rrule


# ─── ics-Export ───────────────────────────────────────────────────────────────

class TestIcsExporter:
    def test_empty_selection_nothing_to_export(self, tmp_path: Path):
        exporter = IcsExporter(_make_config())
        result = exporter.export([], today=WEDNESDAY)
        assert result.ok is False
        assert result.message == NOTHING_TO_EXPORT
        assert result.content is None
        assert exporter.write(result, tmp_path) is None
        assert list(tmp_path.iterdir()) == []

    def test_export_content(self):
        exporter = IcsExporter(_make_config())
        result = exporter.export([Offering("Wednesday", "T1", "CS101")], today=WEDNESDAY)
        assert result.ok is True
        assert result.event_count == 2
        assert result.filename == "Test_Timetable.ics"
        content = result.content
        assert content.count("BEGIN:VEVENT") == 2
        assert content.count("RRULE:FREQ=WEEKLY;INTERVAL=1;UNTIL=20251120T000000Z") == 2
        assert "SUMMARY:CS101" in content
        assert "X-WR-CALNAME:Test Timetable" in content

    def test_unknown_weekday_is_failed_result(self, tmp_path: Path):
        """Unbekannter Wochentag → ok=False, keine Exception, keine Datei."""
        exporter = IcsExporter(_make_config())
        result = exporter.export([Offering("Mon", "T1", "CS101")], today=WEDNESDAY)
        assert result.ok is False
        assert "Mon" in result.message
        assert exporter.write(result, tmp_path) is None

    def test_missing_slot_is_failed_result(self):
        result = IcsExporter(_make_config()).export(
            [Offering("Monday", "T9", "CS101")], today=WEDNESDAY)
        assert result.ok is False
        assert "T9" in result.message

    def test_local_times_with_tzid(self):
        content = IcsExporter(_make_config()).export(
            [Offering("Wednesday", "T1", "CS101")], today=WEDNESDAY).content
        assert "DTSTART;TZID=UTC:20251001T090000" in content
        assert "DTEND;TZID=UTC:20251001T102000" in content
        assert "BEGIN:VTIMEZONE" in content
        assert content.endswith("\r\n")

    def test_dst_zone_keeps_wall_clock(self):
        """Europe/Berlin: 09:00 bleibt 09:00, auch nach der Umstellung am 26.10.2025."""
        config = _make_config().model_copy(update={"timezone": "Europe/Berlin"})
        content = IcsExporter(config).export(
            [Offering("Wednesday", "T1", "CS101")], today=WEDNESDAY).content
        assert "DTSTART;TZID=Europe/Berlin:20251001T090000" in content
        assert "DTSTART;TZID=Europe/Berlin:20251004T090000" in content
        assert "DTSTART:20251001T070000Z" not in content
        for line in content.splitlines():
            if line.startswith("DTSTART") and "TZID" not in line:
                # nur Observance-Zeilen der VTIMEZONE tragen kein TZID
                assert not line.endswith("Z")
        # Semesterende 20.11.2025 00:00 MEZ = 19.11. 23:00 UTC
        assert "UNTIL=20251119T230000Z" in content
        assert "TZID:Europe/Berlin" in content
        assert "TZOFFSETFROM:+0200" in content
        assert "TZOFFSETTO:+0100" in content
        assert "DTSTART:20251026T030000" in content

    def test_unique_uids(self):
        exporter = IcsExporter(_make_config())
        events = exporter.projector.project_all(
            [Offering("Monday", "T1", "A"), Offering("Monday", "T2", "A")], today=WEDNESDAY)
        calendar = exporter.build_calendar(events)
        assert len({e.uid for e in calendar.events}) == 4

    def test_write_file(self, tmp_path: Path):
        exporter = IcsExporter(_make_config())
        result = exporter.export([Offering("Monday", "T2", "MA101")], today=WEDNESDAY)
        path = exporter.write(result, tmp_path / "out")
        assert path == tmp_path / "out" / "Test_Timetable.ics"
        text = path.read_text(encoding="utf-8")
        assert text.startswith("BEGIN:VCALENDAR")
        assert "SUMMARY:MA101" in text

    def test_export_from_engine(self):
        offerings = [Offering("Monday", "T1", "A"), Offering("Monday", "T1", "B"),
                     Offering("Tuesday", "T3", "C")]
        engine = SelectionEngine(offerings)
        engine.select(offerings[1])
        engine.select(offerings[2])
        result = IcsExporter(_make_config()).export(engine.selected_snapshot(), today=WEDNESDAY)
        assert result.event_count == 4
        assert "SUMMARY:A" not in result.content


# ─── Terminal-Raster ──────────────────────────────────────────────────────────

class TestGridRenderer:
    def test_rows(self):
        config = _make_config()
        engine = SelectionEngine([Offering("Monday", "T2", "MA101"),
                                  Offering("Wednesday", "T1", "CS101")])
        engine.select(Offering("Monday", "T2", "MA101"))
        rows = render_grid_rows(engine, config)
        assert rows == [
            ["Monday", "—", "MA101", "—"],
            ["Tuesday", "—", "—", "—"],
            ["Wednesday", "—", "—", "—"],
        ]

    def test_header(self):
        header = render_header(_make_config())
        assert header[0] == ""
        assert header[2] == "T2\n14:00–15:20"


# ─── Zeitzonen ────────────────────────────────────────────────────────────────

class TestIcsTimezone:
    def test_transition_berlin_autumn(self):
        tz = ZoneInfo("Europe/Berlin")
        start = datetime(2025, 10, 1, tzinfo=tz)
        end = datetime(2025, 11, 20, tzinfo=tz)
        transitions = offset_transitions(tz, start, end)
        assert len(transitions) == 1
        instant, before, after = transitions[0]
        assert instant == datetime(2025, 10, 26, 1, 0, tzinfo=timezone.utc)
        assert (before, after) == (timedelta(hours=2), timedelta(hours=1))

    def test_no_transition_without_dst(self):
        tz = ZoneInfo("Asia/Kolkata")
        start = datetime(2025, 1, 1, tzinfo=tz)
        assert offset_transitions(tz, start, datetime(2025, 12, 31, tzinfo=tz)) == []

    def test_vtimezone_single_observance(self):
        config = _make_config().model_copy(update={"timezone": "Asia/Kolkata"})
        projector = CalendarProjector.from_config(config)
        events = projector.project(Offering("Monday", "T1", "X"), today=WEDNESDAY)
        lines = vtimezone_lines(projector.tzinfo, events)
        assert lines[:2] == ["BEGIN:VTIMEZONE", "TZID:Asia/Kolkata"]
        assert lines.count("BEGIN:STANDARD") == 1
        assert "TZOFFSETTO:+0530" in lines
        assert lines[-1] == "END:VTIMEZONE"

    def test_localize_leaves_other_lines(self):
        text = ("BEGIN:VCALENDAR\r\nBEGIN:VEVENT\r\nDTSTART:20251001T090000Z\r\n"
                "SUMMARY:X\r\nEND:VEVENT\r\nEND:VCALENDAR\r\n")
        out = localize_times(text, "Europe/Berlin", ["BEGIN:VTIMEZONE", "END:VTIMEZONE"])
        assert out == ("BEGIN:VCALENDAR\r\nBEGIN:VTIMEZONE\r\nEND:VTIMEZONE\r\n"
                       "BEGIN:VEVENT\r\nDTSTART;TZID=Europe/Berlin:20251001T090000\r\n"
                       "SUMMARY:X\r\nEND:VEVENT\r\nEND:VCALENDAR\r\n")
