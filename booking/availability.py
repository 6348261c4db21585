"""Freie Zeitfenster eines Raums an einem Tag."""

import datetime

from booking.store import ReservationStore
from booking.validation import validate_no_conflict
from models.reservation import Reservation, ReservationType
from models.room import Room
from models.timeslot import end_times_for, start_times_for


def free_start_times(
    store: ReservationStore, room: Room, day: datetime.date
) -> dict[datetime.time, list[datetime.time]]:
    """Startzeit → konfliktfreie Endzeiten, nur Startzeiten mit mindestens einer Endzeit.

    Berücksichtigt Raumtyp (Dauerregel) und bestehende Buchungen, nicht das
    Datum (vergangene Tage liefern dieselben Fenster).
    """
    existing = store.for_date(day)
    free: dict[datetime.time, list[datetime.time]] = {}
    for start in start_times_for(room):
        ends = []
        for end in end_times_for(room, start):
            candidate = Reservation(
                room=room.name, date=day, start_time=start, end_time=end,
                reserved_by="-", type=ReservationType.OTHER,
            )
            if validate_no_conflict(candidate, existing).is_ok:
                ends.append(end)
        if ends:
            free[start] = ends
    return free
