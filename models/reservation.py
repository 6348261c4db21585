"""Datenmodell für eine Raumbuchung (Pydantic v2)."""

import datetime
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

from models.timeslot import format_time, hours_between, is_on_the_hour


class ReservationType(str, Enum):
    """Buchungsart. Der Wert ist der Bezeichner im .resv-Format."""

    LESSON = "LESSON"
    EXAM = "EXAM"
    CATCH_UP = "CATCH_UP"
    OTHER = "OTHER"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, raw: str) -> "ReservationType":
        """Akzeptiert Bezeichner ("CATCH_UP") und Anzeigename ("Catch-up")."""
        token = raw.strip()
        for member in cls:
            if token.upper() == member.value or token.lower() == member.display_name.lower():
                return member
        raise ValueError(f"Unbekannte Buchungsart: {raw!r}")


_DISPLAY_NAMES = {
    ReservationType.LESSON: "Lesson",
    ReservationType.EXAM: "Exam",
    ReservationType.CATCH_UP: "Catch-up",
    ReservationType.OTHER: "Other",
}


class ReservationKey(NamedTuple):
    """Identität einer Buchung: (Raum, Datum, Startzeit). Eindeutig, da sich
    Buchungen desselben Raums am selben Tag nicht überlappen."""

    room: str
    date: datetime.date
    start_time: datetime.time

    def __str__(self) -> str:
        return f"{self.room} {self.date.isoformat()} {format_time(self.start_time)}"


class Reservation(BaseModel):
    """Eine einzelne Buchung.

    Wird nur vom ReservationStore erzeugt; die Feldprüfung übernimmt vorher
    ``booking.validation``. Der Raum wird per Name referenziert.
    """

    model_config = ConfigDict(frozen=True)

    room: str
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    reserved_by: str
    type: ReservationType

    @field_validator("start_time", "end_time")
    @classmethod
    def full_hour(cls, v: datetime.time) -> datetime.time:
        if not is_on_the_hour(v):
            raise ValueError(f"Zeit muss auf einer vollen Stunde liegen: {v}")
        return v

    @property
    def key(self) -> ReservationKey:
        return ReservationKey(self.room, self.date, self.start_time)

    @property
    def duration_hours(self) -> int:
        return hours_between(self.start_time, self.end_time)

    def overlaps(self, other: "Reservation") -> bool:
        """Halboffene Intervalle [start, end): Berühren ist keine Überlappung."""
        if self.date != other.date or self.room != other.room:
            return False
        return not (self.end_time <= other.start_time or self.start_time >= other.end_time)

    def covers(self, hour: datetime.time) -> bool:
        """True wenn ``hour`` in [start, end) liegt."""
        return self.start_time <= hour < self.end_time

    def __str__(self) -> str:
        return (
            f"Reservation: {self.date.isoformat()} - {format_time(self.start_time)} "
            f"to {format_time(self.end_time)} by {self.reserved_by} "
            f"for {self.type.display_name}"
        )
