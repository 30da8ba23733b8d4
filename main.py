"""Stundenplan-Baukasten — Haupt-CLI.

Verwendung:
  python main.py init                          Config + Beispielkatalog anlegen
  python main.py config show                   Konfiguration anzeigen
  python main.py semesters                     Semester auflisten
  python main.py courses [-s TEXT]             Verfügbare Kurse (Suche)
  python main.py courses --conflicting         Kollidierende Kurse
  python main.py browse --day Monday           Kurse eines Tages/Slots
  python main.py select NAME -d DAY -t SLOT    Kurs auswählen
  python main.py remove NAME -d DAY -t SLOT    Kurs entfernen
  python main.py clear                         Auswahl leeren
  python main.py show                          Wochenraster anzeigen
  python main.py export [-o DIR]               iCalendar-Datei erzeugen
  python main.py theme [light|dark|toggle]     Farbschema setzen
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from models.offering import CourseDuration, Offering

console = Console()

_DURATION_LABELS = {
    CourseDuration.FULL: "Semester",
    CourseDuration.H1: "1. Hälfte",
    CourseDuration.H2: "2. Hälfte",
}


def _load_config_or_abort():
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py init[/bold] aus."
        )
        sys.exit(1)
    try:
        return mgr, mgr.load()
    except ValueError as e:
        console.print(f"[red bold]Konfiguration ungültig:[/red bold]\n{e}")
        sys.exit(1)


def _build_engine(semester: Optional[str] = None):
    """Config + Katalog laden und die Engine mit lokaler Ablage aufbauen."""
    from data.catalog_loader import CatalogError, load_offerings
    from engine import JsonFilePersistence, RichThemeSink, SelectionEngine

    _, config = _load_config_or_abort()
    try:
        offerings = load_offerings(config, semester)
    except CatalogError as e:
        console.print(f"[red bold]Katalog fehlerhaft:[/red bold]\n{e}")
        sys.exit(1)
    engine = SelectionEngine(
        offerings,
        persistence=JsonFilePersistence(Path(config.state_file)),
        theme_sink=RichThemeSink(console),
    )
    return config, engine


def _offering_table(title: str, offerings, style: str = "") -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Kurs", style=style or None)
    table.add_column("Tag")
    table.add_column("Slot")
    table.add_column("Dauer")
    for o in offerings:
        table.add_row(o.name, o.day, o.slot, _DURATION_LABELS[o.duration])
    return table


# ─── INIT ─────────────────────────────────────────────────────────────────────

@click.command("init")
def cmd_init():
    """Ersteinrichtung: Default-Config und Beispielkatalog anlegen."""
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print("[yellow]Eine Konfiguration existiert bereits.[/yellow]")
        if not click.confirm("Trotzdem überschreiben?", default=False):
            return
    mgr.initialize()
    console.print("Führen Sie jetzt [bold]python main.py courses[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    from models.timeslot import parse_slot_range

    mgr, config = _load_config_or_abort()
    sem = config.get_semester()
    console.print(Panel(
        f"[bold]{config.timetable_name}[/bold]  |  Semester {sem.label}  |  "
        f"Ende {sem.end_date.isoformat()}  |  {config.timezone}",
        title="Konfiguration",
        border_style="cyan",
    ))

    table = Table(title="Slot-Zeit-Tabelle", box=box.ROUNDED)
    table.add_column("Slot")
    table.add_column("Eintrag")
    table.add_column("Gelesen als")
    for slot in config.slot_order:
        text = config.slot_times[slot]
        table.add_row(slot, text, str(parse_slot_range(text, config.afternoon_threshold_hour)))
    console.print(table)

    pairs = ", ".join(f"{a} → {b}" for a, b in config.duplicate_days.items())
    console.print(f"\n[bold]Tage:[/bold] {', '.join(config.days)}")
    console.print(f"[bold]Export-Duplizierung:[/bold] {pairs}")


@click.command("semesters")
def cmd_semesters():
    """Listet alle konfigurierten Semester auf."""
    _, config = _load_config_or_abort()
    table = Table(title="Semester", box=box.ROUNDED)
    table.add_column("Semester", style="bold")
    table.add_column("Katalog")
    table.add_column("Ende")
    for s in config.semesters:
        marker = " *" if s.label == config.default_semester else ""
        table.add_row(s.label + marker, s.catalog_file, s.end_date.isoformat())
    console.print(table)


# ─── KURSE ────────────────────────────────────────────────────────────────────

@click.command("courses")
@click.option("--search", "-s", default="", help="Suchbegriff (Teil des Kursnamens).")
@click.option("--conflicting", is_flag=True, default=False,
              help="Kollidierende statt verfügbare Kurse anzeigen.")
@click.option("--semester", default=None, help="Semester (Default aus Config).")
def cmd_courses(search: str, conflicting: bool, semester: Optional[str]):
    """Zeigt verfügbare oder kollidierende Kurse."""
    _, engine = _build_engine(semester)
    if conflicting:
        found = engine.filter_conflicting(search)
        if not found:
            console.print("[dim]Keine kollidierenden Kurse gefunden.[/dim]")
            return
        console.print(_offering_table("Kollidierende Kurse", found, style="conflict"))
    else:
        found = engine.filter_available(search)
        if not found:
            console.print("[dim]Keine Kurse gefunden. Anderen Suchbegriff versuchen.[/dim]")
            return
        console.print(_offering_table("Verfügbare Kurse", found))


@click.command("browse")
@click.option("--day", "-d", default=None, help="Wochentag, z.B. Monday.")
@click.option("--slot", "-t", default=None, help="Slot-Code, z.B. T1.")
@click.option("--semester", default=None, help="Semester (Default aus Config).")
def cmd_browse(day: Optional[str], slot: Optional[str], semester: Optional[str]):
    """Kurse eines Tages, eines Slots oder einer Zelle (noch nicht ausgewählt)."""
    if day is None and slot is None:
        raise click.UsageError("Mindestens --day oder --slot angeben.")
    _, engine = _build_engine(semester)
    title = f"{day} - {slot}" if day and slot else (f"Kurse am {day}" if day else f"Kurse in {slot}")
    found = engine.browse(day=day, slot=slot)
    if not found:
        console.print("[dim]Keine verfügbaren Kurse gefunden.[/dim]")
        return
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Kurs")
    table.add_column("Tag")
    table.add_column("Slot")
    table.add_column("Ersetzt", style="conflict")
    for o in found:
        current = engine.find_selected(o.day, o.slot)
        table.add_row(o.name, o.day, o.slot, current.name if current else "")
    console.print(table)


# ─── AUSWAHL ──────────────────────────────────────────────────────────────────

def _resolve(engine, name: str, day: Optional[str], slot: Optional[str]) -> Optional[Offering]:
    """Kurs über Name (+ optional Tag/Slot) eindeutig bestimmen."""
    candidates = [
        o for o in engine.offerings
        if o.name.lower() == name.lower()
        and (day is None or o.day == day)
        and (slot is None or o.slot == slot)
    ]
    if len(candidates) == 1:
        return candidates[0]
    if not candidates:
        hits = engine.search(name, limit=5)
        console.print(f"[red]Kein Kurs '{name}' gefunden.[/red]")
        for hit in hits:
            console.print(f"  [dim]meinten Sie:[/dim] {hit.offering}")
        return None
    console.print(f"[yellow]'{name}' ist mehrdeutig, bitte --day/--slot angeben:[/yellow]")
    for o in candidates:
        console.print(f"  • {o}")
    return None


@click.command("select")
@click.argument("name")
@click.option("--day", "-d", default=None, help="Wochentag, z.B. Monday.")
@click.option("--slot", "-t", default=None, help="Slot-Code, z.B. T1.")
@click.option("--semester", default=None, help="Semester (Default aus Config).")
def cmd_select(name: str, day: Optional[str], slot: Optional[str], semester: Optional[str]):
    """Wählt einen Kurs aus (ersetzt eine Auswahl in derselben Zelle)."""
    _, engine = _build_engine(semester)
    offering = _resolve(engine, name, day, slot)
    if offering is None:
        sys.exit(1)
    previous = engine.find_selected(offering.day, offering.slot)
    snap = engine.select(offering)
    if previous is not None and previous != offering:
        console.print(f"[yellow]Ersetzt:[/yellow] {previous.name}")
    console.print(f"[green]✓[/green] Ausgewählt: {offering}")
    console.print(f"[dim]{len(snap.selected)} ausgewählt, "
                  f"{len(snap.conflicting)} kollidierend[/dim]")


@click.command("remove")
@click.argument("name")
@click.option("--day", "-d", default=None, help="Wochentag, z.B. Monday.")
@click.option("--slot", "-t", default=None, help="Slot-Code, z.B. T1.")
@click.option("--semester", default=None, help="Semester (Default aus Config).")
def cmd_remove(name: str, day: Optional[str], slot: Optional[str], semester: Optional[str]):
    """Entfernt einen Kurs aus der Auswahl."""
    _, engine = _build_engine(semester)
    selected = [
        o for o in engine.selected_snapshot()
        if o.name.lower() == name.lower()
        and (day is None or o.day == day)
        and (slot is None or o.slot == slot)
    ]
    if not selected:
        console.print(f"[dim]'{name}' ist nicht ausgewählt.[/dim]")
        return
    for o in selected:
        engine.remove(o)
        console.print(f"[green]✓[/green] Entfernt: {o}")


@click.command("clear")
@click.option("--semester", default=None, help="Semester (Default aus Config).")
def cmd_clear(semester: Optional[str]):
    """Entfernt alle ausgewählten Kurse."""
    _, engine = _build_engine(semester)
    engine.clear()
    console.print("[green]✓[/green] Auswahl geleert.")


@click.command("show")
@click.option("--semester", default=None, help="Semester (Default aus Config).")
def cmd_show(semester: Optional[str]):
    """Zeigt das Wochenraster der Auswahl."""
    from export.tui_renderer import build_grid_table

    config, engine = _build_engine(semester)
    console.print(build_grid_table(engine, config))
    conflicting = engine.conflicting_snapshot()
    if conflicting:
        console.print(f"[conflict]{len(conflicting)} kollidierende Kurse[/conflict] "
                      "– [bold]python main.py courses --conflicting[/bold]")


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
@click.option("--output", "-o", default="output", help="Ausgabeverzeichnis.")
@click.option("--semester", default=None, help="Semester (Default aus Config).")
def cmd_export(output: str, semester: Optional[str]):
    """Exportiert die Auswahl als iCalendar-Datei (.ics)."""
    from export.calendar_export import IcsExporter

    config, engine = _build_engine(semester)
    exporter = IcsExporter(config, semester)
    result = exporter.export(engine.selected_snapshot())
    result.print_rich()
    path = exporter.write(result, Path(output))
    if path is not None:
        console.print(f"[green]✓[/green] Gespeichert: {path}")


# ─── THEME ────────────────────────────────────────────────────────────────────

@click.command("theme")
@click.argument("mode", type=click.Choice(["light", "dark", "toggle"]), default="toggle")
def cmd_theme(mode: str):
    """Setzt das Farbschema der Terminal-Ausgabe."""
    from config.schema import Theme

    _, engine = _build_engine()
    theme = engine.toggle_theme() if mode == "toggle" else engine.set_theme(Theme(mode))
    console.print(f"[header]Farbschema:[/header] {theme.value}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Ausführliche Log-Ausgabe.")
def cli(verbose: bool):
    """Stundenplan-Baukasten: Kurse wählen, Konflikte sehen, Kalender exportieren.

    Starten Sie mit: python main.py init
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main():
    """Einstiegspunkt. Legt beim ersten Aufruf ohne Argumente die Config an."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen beim Stundenplan-Baukasten![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Default-Konfiguration und Beispielkatalog werden angelegt...",
            border_style="cyan",
        ))
        sys.argv.append("init")

    cli()


# Befehle registrieren
cli.add_command(cmd_init)
cli.add_command(cmd_config)
cli.add_command(cmd_semesters)
cli.add_command(cmd_courses)
cli.add_command(cmd_browse)
cli.add_command(cmd_select)
cli.add_command(cmd_remove)
cli.add_command(cmd_clear)
cli.add_command(cmd_show)
cli.add_command(cmd_export)
cli.add_command(cmd_theme)


if __name__ == "__main__":
    main()
