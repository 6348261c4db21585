"""Lesen und Schreiben von Buchungsdateien im .resv-Format.

Format (ein Block pro Buchung, Leerzeile als Trenner)::

    RESERVATION
    room=A101
    date=2099-01-10
    startTime=09:00
    endTime=11:00
    reservedBy=Alice
    type=LESSON
    END

Schreiben ist deterministisch (Reihenfolge des Snapshots, feste
Schlüsselreihenfolge). Beim Lesen wird die komplette Liste aufgebaut und
gegen den Raumkatalog aufgelöst, bevor irgendetwas zurückgegeben wird.
"""

import datetime
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from models.catalogue import RoomCatalogue
from models.reservation import Reservation, ReservationType
from models.timeslot import format_time, parse_time

logger = logging.getLogger(__name__)

RESERVATION_FILE_EXTENSION = ".resv"

BEGIN_MARKER = "RESERVATION"
END_MARKER = "END"

# Schlüssel in Schreibreihenfolge → Feldname im Modell
_KEYS = {
    "room": "room",
    "date": "date",
    "startTime": "start_time",
    "endTime": "end_time",
    "reservedBy": "reserved_by",
    "type": "type",
}


class PersistError(Exception):
    """Basisklasse für Fehler beim Lesen/Schreiben von Buchungsdateien."""


class PersistMalformed(PersistError):
    """Syntax- oder Inhaltsfehler in einer Buchungsdatei."""

    def __init__(self, line_number: int, reason: str) -> None:
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Zeile {line_number}: {reason}")


class PersistIoError(PersistError):
    """Ein-/Ausgabefehler beim Zugriff auf eine Buchungsdatei."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: {cause}")


def ensure_extension(path: Union[str, Path]) -> Path:
    """Hängt .resv an, falls der Dateiname nicht darauf endet."""
    path = Path(path)
    if not path.name.endswith(RESERVATION_FILE_EXTENSION):
        path = path.with_name(path.name + RESERVATION_FILE_EXTENSION)
    return path


# ─── Schreiben ────────────────────────────────────────────────────────────────

def _format_record(r: Reservation) -> str:
    lines = [
        BEGIN_MARKER,
        f"room={r.room}",
        f"date={r.date.isoformat()}",
        f"startTime={format_time(r.start_time)}",
        f"endTime={format_time(r.end_time)}",
        f"reservedBy={r.reserved_by}",
        f"type={r.type.value}",
        END_MARKER,
    ]
    return "\n".join(lines) + "\n"


def dumps(reservations: Iterable[Reservation]) -> str:
    """Serialisiert Buchungen; jeder Block endet mit END und einer Leerzeile."""
    return "".join(_format_record(r) + "\n" for r in reservations)


def save(path: Union[str, Path], reservations: Iterable[Reservation]) -> Path:
    """Schreibt den Snapshot nach ``path`` (.resv wird ergänzt).

    Gibt den tatsächlich geschriebenen Pfad zurück.
    """
    target = ensure_extension(path)
    text = dumps(reservations)
    try:
        if target.parent != Path(""):
            target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise PersistIoError(target, e) from e
    return target


# ─── Lesen ────────────────────────────────────────────────────────────────────

def _parse_value(key: str, value: str, line_number: int):
    try:
        if key == "date":
            return datetime.date.fromisoformat(value)
        if key in ("startTime", "endTime"):
            return parse_time(value)
        if key == "type":
            return ReservationType(value)
    except ValueError:
        raise PersistMalformed(line_number, f"ungültiger Wert für {key}: {value!r}") from None
    return value


def loads(text: str, catalogue: Optional[RoomCatalogue] = None) -> list[Reservation]:
    """Parst den Inhalt einer .resv-Datei.

    Mit ``catalogue`` muss jeder Raum im Katalog existieren, sonst
    PersistMalformed mit der Zeilennummer der room-Zeile.
    """
    reservations: list[Reservation] = []
    fields: Optional[dict] = None
    room_line = 0
    line_number = 0

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()

        if fields is None:
            if not line:
                continue
            if line != BEGIN_MARKER:
                raise PersistMalformed(line_number, f"{BEGIN_MARKER} erwartet, gefunden: {line!r}")
            fields = {}
            continue

        if line == END_MARKER:
            missing = [k for k in _KEYS if k not in fields]
            if missing:
                raise PersistMalformed(line_number, f"fehlende Schlüssel: {', '.join(missing)}")
            if catalogue is not None and fields["room"] not in catalogue:
                raise PersistMalformed(room_line, f"unbekannter Raum: {fields['room']!r}")
            reservations.append(Reservation(**{_KEYS[k]: v for k, v in fields.items()}))
            fields = None
            continue

        key, sep, value = line.partition("=")
        if not sep:
            raise PersistMalformed(line_number, f"Zeile ohne '=': {line!r}")
        key, value = key.strip(), value.strip()
        if key not in _KEYS:
            raise PersistMalformed(line_number, f"unbekannter Schlüssel: {key!r}")
        if key in fields:
            raise PersistMalformed(line_number, f"Schlüssel doppelt: {key!r}")
        if key == "room":
            room_line = line_number
        fields[key] = _parse_value(key, value, line_number)

    if fields is not None:
        raise PersistMalformed(line_number + 1, f"Dateiende vor {END_MARKER}")
    return reservations


def load(path: Union[str, Path], catalogue: Optional[RoomCatalogue] = None) -> list[Reservation]:
    """Liest eine .resv-Datei (.resv wird ergänzt) und gibt die Buchungen zurück."""
    source = ensure_extension(path)
    try:
        with open(source, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise PersistIoError(source, e) from e
    reservations = loads(text, catalogue)
    logger.info(f"{len(reservations)} Buchungen gelesen: {source}")
    return reservations
