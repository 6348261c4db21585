"""Gemeinsamer Renderer für die Terminal-Anzeige des Tagesrasters.

Wird von cmd_show (Rich) und cmd_browse (Textual) verwendet.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rich.table import Table
    from export.grid import DayGrid


def render_day_rows(grid: "DayGrid") -> list[list[str]]:
    """Gibt Tabellenzeilen für das Tagesraster zurück.

    Jede Zeile: [zeit_label, Raum1, Raum2, ...]. Freie Zellen sind leer.
    """
    from export.helpers import format_reservation

    rows: list[list[str]] = []
    for row in grid.rows:
        rows.append([row.label] + [format_reservation(r) for r in row.cells])
    return rows


def render_day_table(grid: "DayGrid") -> "Table":
    """Rich-Tabelle des Tagesrasters mit Farben je Buchungsart."""
    from rich.table import Table
    from rich.text import Text
    from rich import box
    from export.helpers import format_reservation, rich_style
    from models.timeslot import format_date

    table = Table(title=f"Belegung {format_date(grid.date)}", box=box.ROUNDED,
                  show_lines=True)
    for col in grid.columns:
        table.add_column(col, justify="center")

    for row in grid.rows:
        cells = [Text(row.label)]
        for r in row.cells:
            cells.append(Text(format_reservation(r), style=rich_style(r)))
        table.add_row(*cells)
    return table
