"""Raumbuchung — Haupt-CLI.

Verwendung:
  python main.py rooms                               Raumkatalog anzeigen
  python main.py show [--date 2099-01-10]            Tagesbelegung anzeigen
  python main.py add A101 --date … --start 09:00 --end 11:00 --by "Alice"
  python main.py edit A101 2099-01-10 09:00 --by "Alicia"
  python main.py remove A101 2099-01-10 09:00        Buchung löschen
  python main.py free A101 [--date …]                Freie Zeitfenster
  python main.py audit                               Konsistenz-Check
  python main.py session                             Interaktive Sitzung mit Auto-Save
  python main.py browse                              TUI-Browser (nur lesend)
  python main.py config show|init                    Einstellungen
"""

import datetime
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich import box

console = Console()
err_console = Console(stderr=True)

EXIT_FAILURE = 1
EXIT_STARTUP = 2


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _parse_date(ctx, param, value: Optional[str]) -> Optional[datetime.date]:
    if value is None:
        return None
    from models.timeslot import parse_date
    try:
        return parse_date(value)
    except ValueError:
        raise click.BadParameter(f"Datum im Format YYYY-MM-DD erwartet: {value}")


def _parse_time(ctx, param, value: Optional[str]) -> Optional[datetime.time]:
    if value is None:
        return None
    from models.timeslot import parse_time
    try:
        return parse_time(value)
    except ValueError:
        raise click.BadParameter(f"Volle Stunde im Format HH:00 erwartet: {value}")


def _parse_type(ctx, param, value: Optional[str]):
    if value is None:
        return None
    from models.reservation import ReservationType
    try:
        return ReservationType.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _open_context(data_file: Optional[str], load_data: bool = True):
    """Lädt Einstellungen, Katalog und Buchungsdatei oder bricht ab."""
    from config.manager import ConfigManager
    from booking.context import BookingContext
    from booking.store import ReservationSetError
    from data.resv_codec import PersistError

    try:
        config = ConfigManager().load()
    except ValueError as e:
        err_console.print(f"[red]{e}[/red]")
        sys.exit(EXIT_STARTUP)
    _setup_logging(config.log_level)

    if data_file:
        config = config.model_copy(update={"data_file": data_file})
    ctx = BookingContext.open(config)
    if load_data:
        try:
            ctx.load_if_exists()
        except (PersistError, ReservationSetError) as e:
            err_console.print(f"[red bold]Buchungsdatei fehlerhaft:[/red bold] {e}")
            sys.exit(EXIT_FAILURE)
    return ctx


def _save_or_abort(ctx) -> None:
    from data.resv_codec import PersistError
    try:
        ctx.save()
    except PersistError as e:
        err_console.print(f"[red bold]Speichern fehlgeschlagen:[/red bold] {e}")
        sys.exit(EXIT_FAILURE)


def _print_result(result, success: str) -> None:
    if result.is_ok:
        console.print(f"[green]✓[/green] {success}")
    else:
        console.print(f"[red]✗ {result.message}[/red]")
        sys.exit(EXIT_FAILURE)


def _print_grid(ctx, day: datetime.date) -> None:
    from export.grid import build_day_grid
    from export.tui_renderer import render_day_table
    grid = build_day_grid(ctx.catalogue, ctx.store.for_date(day), day)
    console.print(render_day_table(grid))


_file_option = click.option(
    "--file", "-f", "data_file", default=None,
    help="Buchungsdatei (.resv wird ergänzt). Standard aus den Einstellungen.")


# ─── ROOMS ────────────────────────────────────────────────────────────────────

@click.command("rooms")
def cmd_rooms():
    """Zeigt den Raumkatalog an."""
    from export.helpers import format_features

    ctx = _open_context(None, load_data=False)
    if not len(ctx.catalogue):
        console.print("[yellow]Raumkatalog ist leer.[/yellow]")
        return

    table = Table(title="Raumkatalog", box=box.ROUNDED)
    table.add_column("Raum", style="bold", no_wrap=True)
    table.add_column("Typ")
    table.add_column("Plätze", justify="right")
    table.add_column("Ausstattung")
    table.add_column("Dauer (h)")
    for room in ctx.catalogue.all():
        rule = room.duration_rule()
        table.add_row(
            room.name,
            room.room_type.display_name,
            str(room.capacity),
            format_features(room),
            f"{rule.min_hours}–{rule.max_hours} (Schritt {rule.increment})",
        )
    console.print(table)


# ─── SHOW ─────────────────────────────────────────────────────────────────────

@click.command("show")
@click.option("--date", "-d", "day", callback=_parse_date, default=None,
              help="Datum YYYY-MM-DD (Standard: heute).")
@_file_option
def cmd_show(day: Optional[datetime.date], data_file: Optional[str]):
    """Zeigt die Belegung eines Tages (Stunden × Räume)."""
    ctx = _open_context(data_file)
    _print_grid(ctx, day or datetime.date.today())


# ─── ADD ──────────────────────────────────────────────────────────────────────

@click.command("add")
@click.argument("room")
@click.option("--date", "-d", "day", callback=_parse_date, required=True,
              help="Datum YYYY-MM-DD.")
@click.option("--start", "start", callback=_parse_time, required=True, help="Beginn HH:00.")
@click.option("--end", "end", callback=_parse_time, required=True, help="Ende HH:00.")
@click.option("--by", "reserved_by", required=True, help="Name der buchenden Person.")
@click.option("--type", "-t", "rtype", callback=_parse_type, default="LESSON",
              help="LESSON, EXAM, CATCH_UP oder OTHER.")
@click.option("--attendees", type=int, default=None, help="Teilnehmerzahl (prüft Kapazität).")
@_file_option
def cmd_add(room, day, start, end, reserved_by, rtype, attendees, data_file):
    """Legt eine Buchung an."""
    ctx = _open_context(data_file)
    result = ctx.store.add(room, day, start, end, reserved_by, rtype, attendees=attendees)
    if result.is_ok:
        _save_or_abort(ctx)
    _print_result(result, f"Buchung angelegt: {result.key if result.is_ok else ''}")


# ─── EDIT ─────────────────────────────────────────────────────────────────────

@click.command("edit")
@click.argument("room")
@click.argument("date", callback=_parse_date)
@click.argument("start", callback=_parse_time)
@click.option("--date", "new_day", callback=_parse_date, default=None, help="Neues Datum.")
@click.option("--start", "new_start", callback=_parse_time, default=None, help="Neuer Beginn.")
@click.option("--end", "new_end", callback=_parse_time, default=None, help="Neues Ende.")
@click.option("--by", "reserved_by", default=None, help="Neuer Name.")
@click.option("--type", "-t", "rtype", callback=_parse_type, default=None, help="Neue Buchungsart.")
@_file_option
def cmd_edit(room, date, start, new_day, new_start, new_end, reserved_by, rtype, data_file):
    """Ändert eine Buchung (ROOM DATE START identifizieren sie; der Raum bleibt)."""
    from models.reservation import ReservationKey

    ctx = _open_context(data_file)
    key = ReservationKey(room, date, start)
    current = ctx.store.get(key)
    if current is None:
        console.print(f"[red]Keine Buchung gefunden: {key}[/red]")
        sys.exit(EXIT_FAILURE)

    result = ctx.store.edit(
        key,
        new_day or current.date,
        new_start or current.start_time,
        new_end or current.end_time,
        reserved_by if reserved_by is not None else current.reserved_by,
        rtype or current.type,
    )
    if result.is_ok:
        _save_or_abort(ctx)
    _print_result(result, f"Buchung geändert: {result.key if result.is_ok else ''}")


# ─── REMOVE ───────────────────────────────────────────────────────────────────

@click.command("remove")
@click.argument("room")
@click.argument("date", callback=_parse_date)
@click.argument("start", callback=_parse_time)
@_file_option
def cmd_remove(room, date, start, data_file):
    """Löscht eine Buchung. Nicht vorhandene Buchungen sind kein Fehler."""
    from models.reservation import ReservationKey

    ctx = _open_context(data_file)
    key = ReservationKey(room, date, start)
    if ctx.store.remove(key):
        _save_or_abort(ctx)
        console.print(f"[green]✓[/green] Buchung gelöscht: {key}")
    else:
        console.print(f"[dim]Keine Buchung gefunden: {key}[/dim]")


# ─── FREE ─────────────────────────────────────────────────────────────────────

@click.command("free")
@click.argument("room")
@click.option("--date", "-d", "day", callback=_parse_date, default=None,
              help="Datum YYYY-MM-DD (Standard: heute).")
@_file_option
def cmd_free(room, day, data_file):
    """Zeigt freie Startzeiten eines Raums mit möglichen Endzeiten."""
    from booking.availability import free_start_times
    from models.timeslot import format_date, format_time

    ctx = _open_context(data_file)
    room_obj = ctx.catalogue.get(room)
    if room_obj is None:
        console.print(f"[red]Unbekannter Raum: {room}[/red]")
        sys.exit(EXIT_FAILURE)
    day = day or datetime.date.today()

    free = free_start_times(ctx.store, room_obj, day)
    table = Table(title=f"Freie Zeiten {room} am {format_date(day)}", box=box.ROUNDED)
    table.add_column("Beginn", style="bold")
    table.add_column("Mögliche Enden")
    for start, ends in free.items():
        table.add_row(format_time(start), ", ".join(format_time(e) for e in ends))
    if not free:
        console.print(f"[yellow]{room} ist am {format_date(day)} ausgebucht.[/yellow]")
        return
    console.print(table)


# ─── AUDIT ────────────────────────────────────────────────────────────────────

@click.command("audit")
@_file_option
def cmd_audit(data_file):
    """Prüft eine Buchungsdatei gegen Katalog und Buchungsregeln."""
    from analysis.reservation_audit import ReservationAuditor
    from data import resv_codec
    from data.resv_codec import PersistError

    ctx = _open_context(data_file, load_data=False)
    try:
        reservations = resv_codec.load(ctx.data_file)
    except PersistError as e:
        err_console.print(f"[red bold]Buchungsdatei fehlerhaft:[/red bold] {e}")
        sys.exit(EXIT_FAILURE)

    report = ReservationAuditor(ctx.catalogue).audit(reservations)
    report.print_rich()
    sys.exit(0 if report.is_valid else EXIT_FAILURE)


# ─── SESSION ──────────────────────────────────────────────────────────────────

def _pick_reservation(ctx, day: datetime.date):
    """Nummerierte Auswahl einer Buchung des Tages (None bei Abbruch)."""
    from models.timeslot import format_time

    day_reservations = sorted(ctx.store.for_date(day), key=lambda r: (r.start_time, r.room))
    if not day_reservations:
        console.print("[dim]Keine Buchungen an diesem Tag.[/dim]")
        return None
    for i, r in enumerate(day_reservations, start=1):
        console.print(
            f"  [bold]{i}.[/bold] {r.room} {format_time(r.start_time)}–"
            f"{format_time(r.end_time)} {r.reserved_by} ({r.type.display_name})")
    idx = IntPrompt.ask("Nummer (0 = Abbruch)", default=0)
    if idx < 1 or idx > len(day_reservations):
        return None
    return day_reservations[idx - 1]


def _prompt_times(room, default_start=None, default_end=None):
    from models.timeslot import end_times_for, format_time, parse_time, start_times_for

    starts = [format_time(t) for t in start_times_for(room)]
    start = parse_time(Prompt.ask(
        "Beginn", choices=starts,
        default=format_time(default_start) if default_start else starts[0]))
    ends = [format_time(t) for t in end_times_for(room, start)]
    end = parse_time(Prompt.ask(
        "Ende", choices=ends,
        default=format_time(default_end) if default_end and format_time(default_end) in ends
        else ends[0]))
    return start, end


def _prompt_type(default=None):
    from models.reservation import ReservationType
    choices = [t.value for t in ReservationType]
    raw = Prompt.ask("Buchungsart", choices=choices,
                     default=(default or ReservationType.LESSON).value)
    return ReservationType(raw)


def _session_add(ctx, day: datetime.date) -> None:
    from export.helpers import format_room

    names = ctx.catalogue.names()
    if not names:
        console.print("[yellow]Raumkatalog ist leer.[/yellow]")
        return
    room_name = Prompt.ask("Raum", choices=names)
    room = ctx.catalogue.get(room_name)
    console.print(f"[dim]{format_room(room)}, Dauer: {room.duration_rule().describe()}[/dim]")
    start, end = _prompt_times(room)
    reserved_by = Prompt.ask("Gebucht von")
    rtype = _prompt_type()
    result = ctx.store.add(room_name, day, start, end, reserved_by, rtype)
    if result.is_ok:
        console.print(f"[green]✓[/green] Buchung angelegt: {result.key}")
    else:
        console.print(f"[red]✗ {result.message}[/red]")


def _session_edit(ctx, day: datetime.date) -> None:
    current = _pick_reservation(ctx, day)
    if current is None:
        return
    room = ctx.catalogue.get(current.room)
    console.print(f"Raum: [bold]{current.room}[/bold] (nicht änderbar)")
    start, end = _prompt_times(room, current.start_time, current.end_time)
    reserved_by = Prompt.ask("Gebucht von", default=current.reserved_by)
    rtype = _prompt_type(current.type)
    result = ctx.store.edit(current.key, current.date, start, end, reserved_by, rtype)
    if result.is_ok:
        console.print(f"[green]✓[/green] Buchung geändert: {result.key}")
    else:
        console.print(f"[red]✗ {result.message}[/red]")


def _session_remove(ctx, day: datetime.date) -> None:
    current = _pick_reservation(ctx, day)
    if current is None:
        return
    if Confirm.ask(f"Buchung {current.key} löschen?", default=False):
        ctx.store.remove(current.key)
        console.print("[green]✓[/green] Gelöscht.")


def _session_save(ctx) -> None:
    from data.resv_codec import PersistError, ensure_extension

    target = ensure_extension(Prompt.ask("Datei", default=str(ctx.data_file)))
    if target.exists():
        if not Confirm.ask(f"{target} existiert. Überschreiben?", default=False):
            return
    try:
        ctx.save(target)
    except PersistError as e:
        console.print(f"[red]Fehler beim Speichern: {e}[/red]")
        return
    console.print(f"[green]✓[/green] Gespeichert: {target}")


def _session_load(ctx) -> None:
    from booking.store import ReservationSetError
    from data.resv_codec import PersistError

    source = Prompt.ask("Datei", default=str(ctx.data_file))
    try:
        count = ctx.load(source)
    except (PersistError, ReservationSetError) as e:
        console.print(f"[red]Fehler beim Laden: {e}[/red]")
        return
    console.print(f"[green]✓[/green] {count} Buchungen geladen.")


@click.command("session")
@click.option("--date", "-d", "day", callback=_parse_date, default=None,
              help="Startdatum YYYY-MM-DD (Standard: heute).")
@_file_option
def cmd_session(day, data_file):
    """Interaktive Sitzung: Buchungen verwalten, Auto-Save läuft im Hintergrund."""
    from models.timeslot import change_date, format_date, parse_date

    ctx = _open_context(data_file)
    day = day or datetime.date.today()
    with ctx:
        while True:
            console.print()
            _print_grid(ctx, day)
            console.print(Panel(
                "[bold]1.[/bold] Buchen  [bold]2.[/bold] Ändern  [bold]3.[/bold] Löschen\n"
                "[bold]4.[/bold] Vortag  [bold]5.[/bold] Folgetag  [bold]6.[/bold] Datum wählen\n"
                "[bold]7.[/bold] Speichern  [bold]8.[/bold] Laden  [bold]0.[/bold] Beenden",
                title=f"Raumbuchung – {format_date(day)}",
                border_style="cyan",
            ))
            choice = Prompt.ask("Auswahl", default="0")

            if choice == "1":
                _session_add(ctx, day)
            elif choice == "2":
                _session_edit(ctx, day)
            elif choice == "3":
                _session_remove(ctx, day)
            elif choice == "4":
                day = change_date(day, -1)
            elif choice == "5":
                day = change_date(day, 1)
            elif choice == "6":
                raw = Prompt.ask("Datum (YYYY-MM-DD)", default=day.isoformat())
                try:
                    day = parse_date(raw)
                except ValueError:
                    console.print("[yellow]Ungültiges Datum.[/yellow]")
            elif choice == "7":
                _session_save(ctx)
            elif choice == "8":
                _session_load(ctx)
            elif choice == "0":
                if Confirm.ask(f"Änderungen in {ctx.data_file} speichern?", default=True):
                    _save_or_abort(ctx)
                break
            else:
                console.print("[yellow]Ungültige Auswahl.[/yellow]")


# ─── BROWSE ───────────────────────────────────────────────────────────────────

@click.command("browse")
@click.option("--date", "-d", "day", callback=_parse_date, default=None,
              help="Startdatum YYYY-MM-DD (Standard: heute).")
@_file_option
def cmd_browse(day, data_file):
    """Startet den TUI-Browser (Tag für Tag blättern, nur lesend)."""
    from export.tui_browser import BookingBrowserApp

    ctx = _open_context(data_file)
    BookingBrowserApp(ctx.catalogue, ctx.store, start_date=day).run()


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Einstellungen anzeigen oder anlegen."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuellen Einstellungen an."""
    from config.manager import ConfigManager

    mgr = ConfigManager()
    try:
        config = mgr.load()
    except ValueError as e:
        err_console.print(f"[red]{e}[/red]")
        sys.exit(EXIT_STARTUP)

    source = "Defaults" if mgr.first_run_check() else str(mgr.DEFAULT_CONFIG)
    table = Table(title=f"Einstellungen ({source})", box=box.ROUNDED)
    table.add_column("Parameter", style="bold")
    table.add_column("Wert")
    table.add_row("Raumkatalog", config.catalogue.rooms_file)
    table.add_row("Buchungsdatei", config.data_file)
    table.add_row("Auto-Save", "aktiv" if config.autosave.enabled else "aus")
    table.add_row("Auto-Save-Datei", config.autosave.path)
    table.add_row("Intervall", f"{config.autosave.interval_seconds:g}s")
    table.add_row("Wartezeit beim Beenden", f"{config.autosave.shutdown_timeout_seconds:g}s")
    table.add_row("Log-Level", config.log_level)
    console.print(table)


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False, help="Bestehende Datei überschreiben.")
def config_init(force: bool):
    """Schreibt die Default-Einstellungen nach config/settings.yaml."""
    from config.defaults import default_app_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Einstellungsdatei existiert bereits.[/yellow] "
            "Mit [bold]--force[/bold] überschreiben."
        )
        return
    mgr.save(default_app_config())


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
def cli():
    """Raumbuchung für Klassenräume und Labore.

    Starten Sie mit: python main.py rooms
    """


def main():
    """Einstiegspunkt."""
    cli()


# Befehle registrieren
cli.add_command(cmd_rooms)
cli.add_command(cmd_show)
cli.add_command(cmd_add)
cli.add_command(cmd_edit)
cli.add_command(cmd_remove)
cli.add_command(cmd_free)
cli.add_command(cmd_audit)
cli.add_command(cmd_session)
cli.add_command(cmd_browse)
cli.add_command(cmd_config)


if __name__ == "__main__":
    main()
