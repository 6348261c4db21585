"""Raumkatalog: feste, beim Start geladene Menge von Räumen."""

from typing import Iterable, Iterator, Optional

from models.room import Room


class RoomCatalogue:
    """Nur-lesbarer Katalog, Räume nach Name aufsteigend sortiert.

    Die Reihenfolge von ``all()`` ist die Spaltenreihenfolge des Tagesrasters.
    """

    def __init__(self, rooms: Iterable[Room] = ()) -> None:
        by_name: dict[str, Room] = {}
        for room in rooms:
            if room.name in by_name:
                raise ValueError(f"Raum doppelt im Katalog: {room.name}")
            by_name[room.name] = room
        self._rooms = by_name
        self._sorted = tuple(sorted(by_name.values(), key=lambda r: r.name))

    def get(self, name: str) -> Optional[Room]:
        return self._rooms.get(name)

    def all(self) -> list[Room]:
        return list(self._sorted)

    def names(self) -> list[str]:
        return [r.name for r in self._sorted]

    def __contains__(self, name: object) -> bool:
        return name in self._rooms

    def __iter__(self) -> Iterator[Room]:
        return iter(self._sorted)

    def __len__(self) -> int:
        return len(self._sorted)

    def __repr__(self) -> str:
        return f"RoomCatalogue({len(self)} rooms)"
