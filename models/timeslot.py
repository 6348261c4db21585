"""Zeit- und Datumshilfen für das Buchungsraster.

Geschäftszeiten 08:00–18:00, stündliches Raster. Alle Zeiten sind lokale
Wanduhrzeiten ohne Zeitzone.
"""

import datetime
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from models.room import Room

OPENING_TIME = datetime.time(8, 0)
CLOSING_TIME = datetime.time(18, 0)

TIME_FORMAT = "%H:%M"
DATE_FORMAT = "%d/%m/%Y"


def available_time_slots() -> list[datetime.time]:
    """Alle vollen Stunden von 08:00 bis einschließlich 18:00."""
    return [datetime.time(h, 0) for h in range(OPENING_TIME.hour, CLOSING_TIME.hour + 1)]


def grid_hours() -> list[datetime.time]:
    """Startzeiten der Rasterzeilen: 08:00 … 17:00 (10 Zeilen)."""
    return [datetime.time(h, 0) for h in range(OPENING_TIME.hour, CLOSING_TIME.hour)]


def is_within_business_hours(t: datetime.time) -> bool:
    return OPENING_TIME <= t <= CLOSING_TIME


def is_valid_range(start: datetime.time, end: datetime.time) -> bool:
    """Beide Zeiten innerhalb der Geschäftszeiten und start < end."""
    return (
        is_within_business_hours(start)
        and is_within_business_hours(end)
        and start < end
    )


def hours_between(start: datetime.time, end: datetime.time) -> int:
    """Dauer in ganzen Stunden (Minuten werden ignoriert)."""
    return end.hour - start.hour


def is_past(day: datetime.date, today: Optional[datetime.date] = None) -> bool:
    return day < (today or datetime.date.today())


def is_same_day(a: datetime.date, b: datetime.date) -> bool:
    return a == b


def round_to_hour(t: datetime.time) -> datetime.time:
    """Schneidet Minuten und Sekunden ab (09:45 → 09:00)."""
    return datetime.time(t.hour, 0)


def is_on_the_hour(t: datetime.time) -> bool:
    return t.minute == 0 and t.second == 0 and t.microsecond == 0


def format_time(t: datetime.time) -> str:
    return t.strftime(TIME_FORMAT)


def format_date(day: datetime.date) -> str:
    return day.strftime(DATE_FORMAT)


def slot_label(hour: datetime.time) -> str:
    """Zeilenbeschriftung im Tagesraster, z.B. "09:00 - 10:00"."""
    return f"{hour.hour:02d}:00 - {hour.hour + 1:02d}:00"


def change_date(day: datetime.date, days: int) -> datetime.date:
    """Blättert um ``days`` Tage vor (positiv) oder zurück (negativ)."""
    return day + datetime.timedelta(days=days)


def parse_time(raw: str) -> datetime.time:
    """Parst "HH:00" (auch "H:00"). Wirft ValueError bei ungültiger Eingabe
    oder Minuten ungleich 0; Buchungen liegen immer auf vollen Stunden.
    """
    t = datetime.datetime.strptime(raw.strip(), TIME_FORMAT).time()
    if not is_on_the_hour(t):
        raise ValueError(f"Nur volle Stunden erlaubt: {raw.strip()!r}")
    return t


def parse_date(raw: str) -> datetime.date:
    """Parst ISO-Datum "YYYY-MM-DD"."""
    return datetime.date.fromisoformat(raw.strip())


# ─── Raster pro Raumtyp ───────────────────────────────────────────────────────

def start_times_for(room: "Room") -> list[datetime.time]:
    """Mögliche Startzeiten: die Mindestdauer muss bis 18:00 passen.

    Klassenraum: 08:00–17:00, Labor: 08:00–16:00.
    """
    rule = room.duration_rule()
    last_start = CLOSING_TIME.hour - rule.min_hours
    return [t for t in available_time_slots() if t.hour <= last_start]


def end_times_for(room: "Room", start: datetime.time) -> list[datetime.time]:
    """Erlaubte Endzeiten ab ``start`` gemäß Mindestdauer, Maximum und Schrittweite."""
    rule = room.duration_rule()
    ends = []
    hours = rule.min_hours
    while hours <= rule.max_hours and start.hour + hours <= CLOSING_TIME.hour:
        ends.append(datetime.time(start.hour + hours, 0))
        hours += rule.increment
    return ends
