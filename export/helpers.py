"""Gemeinsame Hilfsfunktionen für die Raster-Darstellung."""

from typing import Optional

from models.reservation import Reservation, ReservationType
from models.room import Room

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    ReservationType.LESSON.value:   "87CEFA",   # Light Sky Blue
    ReservationType.EXAM.value:     "FFA07A",   # Light Salmon
    ReservationType.CATCH_UP.value: "90EE90",   # Light Green
    ReservationType.OTHER.value:    "FFFF99",   # Light Yellow
    "free":                         "F5F5F5",
}


def get_type_color(reservation: Optional[Reservation]) -> str:
    """Hex-Farbe einer Zelle anhand der Buchungsart (leer → "free")."""
    if reservation is None:
        return COLORS["free"]
    return COLORS.get(reservation.type.value, COLORS[ReservationType.OTHER.value])


def rich_style(reservation: Optional[Reservation]) -> str:
    """Rich-Style-String für eine Zelle, z.B. "black on #87CEFA"."""
    if reservation is None:
        return ""
    return f"grey23 on #{get_type_color(reservation)}"


# ─── Zelleninhalt-Formatierung ────────────────────────────────────────────────

def format_reservation(reservation: Optional[Reservation]) -> str:
    """Zelleninhalt: "Name\\nBuchungsart" oder leer."""
    if reservation is None:
        return ""
    return f"{reservation.reserved_by}\n{reservation.type.display_name}"


def format_room(room: Room) -> str:
    """Kurzbeschreibung: "A101 (Classroom, 30 Plätze)"."""
    return f"{room.name} ({room.room_type.display_name}, {room.capacity} Plätze)"


def format_features(room: Room) -> str:
    """Vorhandene Ausstattung, kommagetrennt (oder "—")."""
    present = [label for label, has in room.features().items() if has]
    return ", ".join(present) if present else "—"
