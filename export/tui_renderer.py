"""Renderer für das Wochenraster im Terminal (Rich).

Wird von cmd_show verwendet.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from config.schema import TimetableConfig
    from engine.selection import SelectionEngine


def render_grid_rows(
    engine: "SelectionEngine",
    config: "TimetableConfig",
) -> list[list[str]]:
    """Gibt Tabellenzeilen für das Wochenraster zurück.

    Jede Zeile: [Tag, T1, T2, ...]; leere Zellen als '—'.
    Kursnamen mit Halbsemester-Kennung behalten ihr "(H1)"/"(H2)".
    """
    rows: list[list[str]] = []
    for day in config.days:
        cells = [day]
        for slot in config.slot_order:
            course = engine.find_selected(day, slot)
            cells.append(course.name if course else "—")
        rows.append(cells)
    return rows


def render_header(config: "TimetableConfig") -> list[str]:
    """Kopfzeile: leere Ecke + Slot-Code mit Uhrzeit."""
    from models.timeslot import parse_slot_range

    header = [""]
    for slot in config.slot_order:
        st = parse_slot_range(config.slot_times[slot], config.afternoon_threshold_hour)
        header.append(f"{slot}\n{st}")
    return header


def build_grid_table(engine: "SelectionEngine", config: "TimetableConfig"):
    """Rich-Table des Wochenrasters."""
    from rich.table import Table
    from rich import box

    table = Table(title=config.timetable_name, box=box.ROUNDED, header_style="header")
    for i, label in enumerate(render_header(config)):
        table.add_column(label, style="bold" if i == 0 else "course", justify="center")
    for row in render_grid_rows(engine, config):
        table.add_row(*row)
    return table
