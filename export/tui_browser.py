"""Textual TUI Browser für das Tagesraster.

Startet mit: python main.py browse
Navigation: n/→ nächster Tag, p/← vorheriger Tag, t=heute, q=Beenden, ?=Hilfe
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from booking.store import ReservationStore
    from models.catalogue import RoomCatalogue


class BookingBrowserApp:
    """Textual TUI App zum Durchblättern der Belegung (nur lesend).

    Lazy-importiert textual um Startzeit zu minimieren.
    """

    def __init__(
        self,
        catalogue: "RoomCatalogue",
        store: "ReservationStore",
        start_date: datetime.date | None = None,
    ) -> None:
        self.catalogue = catalogue
        self.store = store
        self.start_date = start_date or datetime.date.today()

    def run(self) -> None:
        """Startet die TUI Anwendung."""
        from textual.app import App, ComposeResult
        from textual.widgets import Header, Footer, DataTable, Label
        from textual.binding import Binding

        from export.grid import build_day_grid
        from export.tui_renderer import render_day_rows
        from models.timeslot import change_date, format_date

        catalogue = self.catalogue
        store = self.store
        start_date = self.start_date

        class _App(App):
            CSS = """
            DataTable { border: solid $secondary; }
            #date_label { padding: 0 1; text-style: bold; }
            """
            BINDINGS = [
                Binding("q", "quit", "Beenden"),
                Binding("escape", "quit", "Beenden"),
                Binding("n", "next_day", "Nächster Tag"),
                Binding("right", "next_day", "Nächster Tag", show=False),
                Binding("p", "prev_day", "Vorheriger Tag"),
                Binding("left", "prev_day", "Vorheriger Tag", show=False),
                Binding("t", "today", "Heute"),
                Binding("?", "show_help", "Hilfe"),
            ]

            def compose(self) -> ComposeResult:
                yield Header()
                yield Label("", id="date_label")
                yield DataTable(id="grid_table")
                yield Footer()

            def on_mount(self) -> None:
                self.current_date = start_date
                self._refresh_grid()

            def _refresh_grid(self) -> None:
                grid = build_day_grid(catalogue, store.for_date(self.current_date),
                                      self.current_date)
                self.query_one("#date_label", Label).update(
                    f"Belegung {format_date(self.current_date)}")
                table = self.query_one("#grid_table", DataTable)
                table.clear(columns=True)
                table.add_columns(*grid.columns)
                for row in render_day_rows(grid):
                    table.add_row(*row, height=2)

            def action_next_day(self) -> None:
                self.current_date = change_date(self.current_date, 1)
                self._refresh_grid()

            def action_prev_day(self) -> None:
                self.current_date = change_date(self.current_date, -1)
                self._refresh_grid()

            def action_today(self) -> None:
                self.current_date = datetime.date.today()
                self._refresh_grid()

            def action_show_help(self) -> None:
                self.notify(
                    "n/→: nächster Tag | p/←: vorheriger Tag | t: heute | q: Beenden",
                    title="Hilfe",
                )

        _App().run()
