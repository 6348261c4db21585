"""Prüfkette für Buchungsvorschläge.

Ergebnis ist ein Wert (``Ok`` oder ``Err``), keine Exception. Die Reihenfolge
der Prüfungen ist fest; die erste fehlschlagende Prüfung liefert ihre Meldung:

  1. Geschäftszeiten (Start und Ende in 08:00–18:00)
  2. Start vor Ende
  3. Dauer gemäß Raumtyp
  4. Datum nicht in der Vergangenheit
  5. Name (Pflicht, 2–50 Zeichen, erlaubte Zeichen)
  6. Keine Überschneidung mit bestehenden Buchungen desselben Raums/Tags
"""

import datetime
import re
from typing import Iterable, Optional, Union

from pydantic import BaseModel

from models.reservation import Reservation, ReservationKey, ReservationType
from models.room import Room
from models.timeslot import hours_between, is_past, is_within_business_hours

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
_NAME_PATTERN = re.compile(r"[A-Za-z0-9 .\-]+")

MSG_BUSINESS_HOURS = "Reservation must be within business hours (8:00-18:00)"
MSG_ORDER = "Start time must be before end time"
MSG_PAST_DATE = "Cannot make reservations for past dates"
MSG_NAME_REQUIRED = "Name is required"
MSG_NAME_TOO_SHORT = f"Name must be at least {MIN_NAME_LENGTH} characters long"
MSG_NAME_TOO_LONG = f"Name must not exceed {MAX_NAME_LENGTH} characters"
MSG_NAME_CHARS = "Name can only contain letters, numbers, spaces, dots, and hyphens"
MSG_CONFLICT = "This time slot conflicts with an existing reservation"
MSG_NO_ROOM = "Room must be selected"


class Ok(BaseModel):
    """Erfolgreiche Prüfung bzw. Operation. ``key`` ist bei add/edit gesetzt."""

    key: Optional[ReservationKey] = None

    @property
    def is_ok(self) -> bool:
        return True


class Err(BaseModel):
    """Abgelehnt mit nutzerlesbarer Meldung."""

    message: str

    @property
    def is_ok(self) -> bool:
        return False


ValidationResult = Union[Ok, Err]

OK = Ok()


# ─── Einzelprüfungen ──────────────────────────────────────────────────────────

def validate_reservation_time(
    room: Room,
    start: datetime.time,
    end: datetime.time,
    day: datetime.date,
    today: Optional[datetime.date] = None,
) -> ValidationResult:
    """Prüfungen 1–4: Geschäftszeiten, Reihenfolge, Dauer, Datum."""
    if not (is_within_business_hours(start) and is_within_business_hours(end)):
        return Err(message=MSG_BUSINESS_HOURS)

    if not start < end:
        return Err(message=MSG_ORDER)

    rule = room.duration_rule()
    if not room.is_valid_duration(hours_between(start, end)):
        return Err(message=f"Invalid duration for this room type. {rule.describe()}")

    if is_past(day, today):
        return Err(message=MSG_PAST_DATE)

    return OK


def validate_reserved_by(name: Optional[str]) -> ValidationResult:
    """Prüfung 5: Name der buchenden Person (getrimmt)."""
    if name is None or not name.strip():
        return Err(message=MSG_NAME_REQUIRED)

    name = name.strip()
    if len(name) < MIN_NAME_LENGTH:
        return Err(message=MSG_NAME_TOO_SHORT)
    if len(name) > MAX_NAME_LENGTH:
        return Err(message=MSG_NAME_TOO_LONG)
    if not _NAME_PATTERN.fullmatch(name):
        return Err(message=MSG_NAME_CHARS)

    return OK


def validate_no_conflict(
    candidate: Reservation,
    existing: Iterable[Reservation],
    excluding: Optional[Reservation] = None,
) -> ValidationResult:
    """Prüfung 6: Überschneidung mit Buchungen desselben Raums am selben Tag.

    ``excluding`` (die gerade bearbeitete Buchung) wird per Schlüssel ausgenommen.
    """
    skip = excluding.key if excluding is not None else None
    for other in existing:
        if other.room != candidate.room or other.date != candidate.date:
            continue
        if skip is not None and other.key == skip:
            continue
        if other.overlaps(candidate):
            return Err(message=MSG_CONFLICT)
    return OK


def validate_room(
    room: Optional[Room], required_capacity: Optional[int] = None
) -> ValidationResult:
    """Raumauswahl und optional Kapazität gegen Teilnehmerzahl."""
    if room is None:
        return Err(message=MSG_NO_ROOM)
    if required_capacity is not None and room.capacity < required_capacity:
        return Err(
            message=f"Room capacity ({room.capacity}) is less than required "
                    f"({required_capacity})"
        )
    return OK


# ─── Gesamtkette ──────────────────────────────────────────────────────────────

def validate_proposal(
    room: Room,
    day: datetime.date,
    start: datetime.time,
    end: datetime.time,
    reserved_by: Optional[str],
    reservation_type: ReservationType,
    *,
    existing: Iterable[Reservation],
    excluding: Optional[Reservation] = None,
    today: Optional[datetime.date] = None,
) -> ValidationResult:
    """Führt die Prüfungen 1–6 in fester Reihenfolge aus (Kurzschluss)."""
    result = validate_reservation_time(room, start, end, day, today)
    if not result.is_ok:
        return result

    result = validate_reserved_by(reserved_by)
    if not result.is_ok:
        return result

    candidate = Reservation(
        room=room.name,
        date=day,
        start_time=start,
        end_time=end,
        reserved_by=reserved_by.strip(),
        type=reservation_type,
    )
    return validate_no_conflict(candidate, existing, excluding)
