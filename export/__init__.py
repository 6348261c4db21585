"""Export-Modul: Tagesraster und Terminal-Darstellung (rich, textual)."""

from export.grid import DayGrid, GridRow, build_day_grid

__all__ = ["DayGrid", "GridRow", "build_day_grid"]
