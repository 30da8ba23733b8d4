"""Ortszeit im iCalendar-Text: DTSTART/DTEND mit TZID plus passender VTIMEZONE.

ics schreibt DTSTART/DTEND immer als UTC (``…Z``). Eine wöchentliche RRULE an
einem UTC-Start verschiebt sich bei Sommer-/Winterzeit um eine Stunde, daher
werden die Zeilen nach dem Serialisieren auf Ortszeit mit TZID umgeschrieben.
"""

from datetime import datetime, time, timedelta, timezone
from typing import Sequence, TYPE_CHECKING
from zoneinfo import ZoneInfo

if TYPE_CHECKING:
    from export.calendar_export import RecurringEvent

_LOCAL_FMT = "%Y%m%dT%H%M%S"


def _fmt_offset(offset: timedelta) -> str:
    """timedelta → "+0530" / "-0400"."""
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, rest = divmod(abs(total), 3600)
    return f"{sign}{hours:02d}{rest // 60:02d}"


def _observance(kind: str, local_start: datetime, offset_from: timedelta,
                offset_to: timedelta, name: str) -> list[str]:
    return [
        f"BEGIN:{kind}",
        f"DTSTART:{local_start:{_LOCAL_FMT}}",
        f"TZOFFSETFROM:{_fmt_offset(offset_from)}",
        f"TZOFFSETTO:{_fmt_offset(offset_to)}",
        f"TZNAME:{name}",
        f"END:{kind}",
    ]


def offset_transitions(tz: ZoneInfo, start: datetime, end: datetime) -> list[tuple[datetime, timedelta, timedelta]]:
    """Zeitpunkte (UTC) zwischen start und end, an denen sich der UTC-Offset ändert.

    Stündliche Auflösung; liefert (Zeitpunkt, Offset vorher, Offset nachher).
    """
    t = start.astimezone(timezone.utc).replace(minute=0, second=0, microsecond=0)
    stop = end.astimezone(timezone.utc)
    previous = t.astimezone(tz).utcoffset()
    result = []
    while t < stop:
        t += timedelta(hours=1)
        offset = t.astimezone(tz).utcoffset()
        if offset != previous:
            result.append((t, previous, offset))
            previous = offset
    return result


def vtimezone_lines(tz: ZoneInfo, events: Sequence["RecurringEvent"]) -> list[str]:
    """VTIMEZONE-Block für den Zeitraum vom ersten Termin bis zum Semesterende."""
    if not events:
        return []
    first = min(e.start for e in events)
    last = max(max(e.until, e.end) for e in events)
    origin = datetime.combine(first.date(), time(0, 0), tzinfo=tz)

    lines = ["BEGIN:VTIMEZONE", f"TZID:{tz.key}"]
    initial = origin.utcoffset()
    kind = "DAYLIGHT" if origin.dst() else "STANDARD"
    lines += _observance(kind, origin.replace(tzinfo=None), initial, initial, origin.tzname())
    for instant, before, after in offset_transitions(tz, origin, last):
        local = instant.astimezone(tz)
        kind = "DAYLIGHT" if local.dst() else "STANDARD"
        # DTSTART einer Observance ist die Ortszeit im bisherigen Offset
        lines += _observance(kind, (instant + before).replace(tzinfo=None), before, after,
                             local.tzname())
    lines.append("END:VTIMEZONE")
    return lines


def localize_times(content: str, tzid: str, vtimezone: Sequence[str] = ()) -> str:
    """Schreibt DTSTART/DTEND der VEVENTs als Ortszeit mit TZID um.

    Erwartet, dass die Termine als Wandzeit (ohne tzinfo) an ics übergeben
    wurden; das ``Z`` am Ende wird entfernt. Der VTIMEZONE-Block wird vor dem
    ersten VEVENT eingefügt. Ergebnis mit CRLF-Zeilenenden.
    """
    out: list[str] = []
    inserted = False
    in_event = False
    for line in content.splitlines():
        if not line:
            continue
        if line == "BEGIN:VEVENT":
            in_event = True
            if not inserted:
                out.extend(vtimezone)
                inserted = True
        elif line == "END:VEVENT":
            in_event = False
        elif in_event and (line.startswith("DTSTART:") or line.startswith("DTEND:")):
            key, value = line.split(":", 1)
            line = f"{key};TZID={tzid}:{value.rstrip('Z')}"
        out.append(line)
    return "\r\n".join(out) + "\r\n"
