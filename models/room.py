"""Datenmodell für Räume: Klassenraum oder Labor (Pydantic v2).

Ein Raum ist eine getaggte Variante (Feld ``variant``). Der Raumtyp legt die
Buchungsdauer fest:

    Klassenraum  1–8 Stunden, Schrittweite 1
    Labor        2–4 Stunden, Schrittweite 2
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class RoomType(str, Enum):
    CLASSROOM = "classroom"
    LABORATORY = "laboratory"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class DurationRule(BaseModel):
    """Erlaubte Buchungsdauer in ganzen Stunden."""

    model_config = ConfigDict(frozen=True)

    min_hours: int
    max_hours: int
    increment: int

    def allows(self, hours: int) -> bool:
        return (
            self.min_hours <= hours <= self.max_hours
            and (hours - self.min_hours) % self.increment == 0
        )

    def describe(self) -> str:
        return f"Min: {self.min_hours}, Max: {self.max_hours}, Increment: {self.increment}"


CLASSROOM_RULE = DurationRule(min_hours=1, max_hours=8, increment=1)
LABORATORY_RULE = DurationRule(min_hours=2, max_hours=4, increment=2)


class _RoomBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    capacity: int = Field(gt=0)

    def duration_rule(self) -> DurationRule:
        raise NotImplementedError

    def is_valid_duration(self, hours: int) -> bool:
        return self.duration_rule().allows(hours)

    @property
    def room_type(self) -> RoomType:
        return RoomType(self.variant)

    def features(self) -> dict[str, bool]:
        """Ausstattungsmerkmale als Mapping Bezeichnung → vorhanden."""
        raise NotImplementedError

    def __str__(self) -> str:
        return f"Room {self.name} (Capacity: {self.capacity})"


class Classroom(_RoomBase):
    """Klassenraum mit Whiteboard/Beamer."""

    variant: Literal["classroom"] = "classroom"
    has_whiteboard: bool = False
    has_projector: bool = False

    def duration_rule(self) -> DurationRule:
        return CLASSROOM_RULE

    def features(self) -> dict[str, bool]:
        return {"Whiteboard": self.has_whiteboard, "Projector": self.has_projector}


class Laboratory(_RoomBase):
    """Labor mit PCs/Steckdosen."""

    variant: Literal["laboratory"] = "laboratory"
    has_pcs: bool = False
    has_electrical_outlets: bool = False

    def duration_rule(self) -> DurationRule:
        return LABORATORY_RULE

    def features(self) -> dict[str, bool]:
        return {"PCs": self.has_pcs, "Outlets": self.has_electrical_outlets}


Room = Annotated[Union[Classroom, Laboratory], Field(discriminator="variant")]


def make_room(
    name: str, room_type: RoomType, capacity: int, flag1: bool, flag2: bool
) -> Room:
    """Baut die passende Variante; flag1/flag2 in Katalog-Reihenfolge."""
    if room_type is RoomType.CLASSROOM:
        return Classroom(name=name, capacity=capacity,
                         has_whiteboard=flag1, has_projector=flag2)
    return Laboratory(name=name, capacity=capacity,
                      has_pcs=flag1, has_electrical_outlets=flag2)
