"""Tagesraster: Stunden × Räume für ein Datum.

Zeilen sind die 10 Stunden 08:00 … 17:00, Spalten ``["Time", Raum1, Raum2, …]``
in Katalogreihenfolge. Zelle (h, r) ist die Buchung R mit
R.room == r und R.start ≤ h < R.end, sonst None.
"""

import datetime
from typing import Iterable, Optional

from models.catalogue import RoomCatalogue
from models.reservation import Reservation
from models.timeslot import grid_hours, is_same_day, slot_label

TIME_COLUMN = "Time"


class GridRow:
    """Eine Stundenzeile des Rasters."""

    def __init__(self, hour: datetime.time, cells: dict[str, Optional[Reservation]]) -> None:
        self.hour = hour
        self._cells = cells

    @property
    def label(self) -> str:
        return slot_label(self.hour)

    def column(self, room: str) -> Optional[Reservation]:
        """Buchung in Raumspalte ``room``. KeyError bei unbekanntem Raum."""
        return self._cells[room]

    @property
    def cells(self) -> list[Optional[Reservation]]:
        """Zellen in Spaltenreihenfolge (ohne Zeitspalte)."""
        return list(self._cells.values())

    def __repr__(self) -> str:
        booked = sum(1 for c in self._cells.values() if c is not None)
        return f"GridRow({self.label}, {booked} belegt)"


class DayGrid:
    """Nur-lesbare Projektion des Bestands für ein Datum."""

    def __init__(self, date: datetime.date, room_names: list[str], rows: list[GridRow]) -> None:
        self.date = date
        self.room_names = room_names
        self.rows = rows

    @property
    def columns(self) -> list[str]:
        return [TIME_COLUMN, *self.room_names]

    def row(self, hour: datetime.time) -> GridRow:
        for row in self.rows:
            if row.hour == hour:
                return row
        raise KeyError(f"Keine Rasterzeile für {hour}")

    def cell(self, hour: datetime.time, room: str) -> Optional[Reservation]:
        return self.row(hour).column(room)

    def reservations(self) -> list[Reservation]:
        """Alle sichtbaren Buchungen, jede genau einmal, nach Startzeit."""
        seen: dict = {}
        for row in self.rows:
            for r in row.cells:
                if r is not None:
                    seen.setdefault(r.key, r)
        return sorted(seen.values(), key=lambda r: (r.start_time, r.room))


def build_day_grid(
    catalogue: RoomCatalogue, reservations: Iterable[Reservation], date: datetime.date
) -> DayGrid:
    """Baut das Raster aus beliebigen Buchungen (z.B. ``store.for_date(date)``)."""
    room_names = catalogue.names()
    day_reservations = [r for r in reservations if is_same_day(r.date, date)]
    rows = []
    for hour in grid_hours():
        cells: dict[str, Optional[Reservation]] = {}
        for name in room_names:
            cells[name] = next(
                (r for r in day_reservations if r.room == name and r.covers(hour)),
                None,
            )
        rows.append(GridRow(hour, cells))
    return DayGrid(date, room_names, rows)
