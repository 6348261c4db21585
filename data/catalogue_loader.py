"""Laden des Raumkatalogs aus einer Textdatei.

Format: eine Zeile pro Raum, fünf kommagetrennte Felder

    name,typ,kapazität,merkmal1,merkmal2

``typ`` ist classroom/laboratory (Groß-/Kleinschreibung egal), die Merkmale
sind true/false. Leerzeilen werden übersprungen.

Klassenraum: merkmal1 = Whiteboard, merkmal2 = Beamer
Labor:       merkmal1 = PCs,        merkmal2 = Steckdosen
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from config.defaults import BUNDLED_ROOMS_FILE, DEFAULT_ROOMS_FILE
from models.catalogue import RoomCatalogue
from models.room import RoomType, make_room

logger = logging.getLogger(__name__)

_BOOL_LITERALS = {"true": True, "false": False}


class CatalogueMalformed(ValueError):
    """Fehlerhafte Zeile im Raumkatalog."""

    def __init__(self, line_number: int, reason: str) -> None:
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Raumkatalog Zeile {line_number}: {reason}")


def _parse_bool(raw: str, line_number: int) -> bool:
    try:
        return _BOOL_LITERALS[raw.strip().lower()]
    except KeyError:
        raise CatalogueMalformed(line_number, f"kein Wahrheitswert: {raw!r}") from None


def parse_catalogue(lines: Iterable[str]) -> RoomCatalogue:
    """Parst Katalogzeilen. Wirft CatalogueMalformed bei der ersten fehlerhaften Zeile."""
    rooms = []
    seen: set[str] = set()
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        parts = [p.strip() for p in line.split(",")]
        if len(parts) != 5:
            raise CatalogueMalformed(
                line_number, f"5 Felder erwartet, {len(parts)} gefunden")

        name, raw_type, raw_capacity, raw_flag1, raw_flag2 = parts
        try:
            room_type = RoomType(raw_type.lower())
        except ValueError:
            raise CatalogueMalformed(line_number, f"unbekannter Raumtyp: {raw_type!r}") from None
        try:
            capacity = int(raw_capacity)
        except ValueError:
            raise CatalogueMalformed(line_number, f"Kapazität keine Zahl: {raw_capacity!r}") from None
        flag1 = _parse_bool(raw_flag1, line_number)
        flag2 = _parse_bool(raw_flag2, line_number)

        if name in seen:
            raise CatalogueMalformed(line_number, f"Raum doppelt: {name!r}")
        try:
            room = make_room(name, room_type, capacity, flag1, flag2)
        except ValidationError as e:
            # Leerer Name oder Kapazität ≤ 0
            raise CatalogueMalformed(line_number, str(e.errors()[0]["msg"])) from e
        seen.add(name)
        rooms.append(room)
    return RoomCatalogue(rooms)


def read_catalogue(path: Path) -> RoomCatalogue:
    """Liest eine Katalogdatei. Ungültiges UTF-8 → CatalogueMalformed mit Zeilennummer,
    Lesefehler (OSError) gehen an den Aufrufer.
    """
    with open(path, "rb") as f:
        data = f.read()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        line_number = data[:e.start].count(b"\n") + 1
        raise CatalogueMalformed(line_number, "kein gültiges UTF-8") from e
    return parse_catalogue(text.splitlines())


def load_catalogue(
    path: Optional[Path] = None, fallback: Optional[Path] = None
) -> RoomCatalogue:
    """Lädt den Katalog: externe Datei → mitgelieferte Datei → leerer Katalog.

    CatalogueMalformed wird an den Aufrufer weitergereicht.
    """
    external = Path(path) if path is not None else DEFAULT_ROOMS_FILE
    bundled = Path(fallback) if fallback is not None else BUNDLED_ROOMS_FILE

    if external.exists():
        catalogue = read_catalogue(external)
        logger.info(f"Raumkatalog geladen: {external} ({len(catalogue)} Räume)")
        return catalogue
    if bundled.exists():
        catalogue = read_catalogue(bundled)
        logger.info(f"Mitgelieferter Raumkatalog geladen: {bundled} ({len(catalogue)} Räume)")
        return catalogue

    logger.warning(f"Raumkatalog nicht gefunden ({external}) – starte mit leerem Katalog")
    return RoomCatalogue()


def load_catalogue_or_empty(
    path: Optional[Path] = None, fallback: Optional[Path] = None
) -> RoomCatalogue:
    """Wie load_catalogue, aber ein fehlerhafter oder unlesbarer Katalog führt zu
    leerem Katalog."""
    try:
        return load_catalogue(path, fallback)
    except CatalogueMalformed as e:
        logger.error(f"{e} – starte mit leerem Katalog")
        return RoomCatalogue()
    except OSError as e:
        logger.error(f"Raumkatalog nicht lesbar: {e} – starte mit leerem Katalog")
        return RoomCatalogue()
