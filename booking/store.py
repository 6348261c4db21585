"""ReservationStore – maßgeblicher Buchungsbestand im Speicher.

Alle Änderungen laufen über ein Lock. Lesezugriffe liefern Kopien
(Tupel eingefrorener Buchungen), nie die interne Liste. Dateizugriffe finden
außerhalb des Locks auf einem Snapshot statt.
"""

import datetime
import logging
import threading
from typing import Callable, Iterable, Optional

from analysis.reservation_audit import AuditReport, ReservationAuditor
from booking.validation import (
    Err,
    Ok,
    ValidationResult,
    validate_proposal,
    validate_room,
)
from models.catalogue import RoomCatalogue
from models.reservation import Reservation, ReservationKey, ReservationType
from models.timeslot import round_to_hour

logger = logging.getLogger(__name__)


class UnknownReservationError(KeyError):
    """Buchung mit diesem Schlüssel existiert nicht (Programmierfehler)."""


class ReservationSetError(ValueError):
    """replace_all: Bestand verletzt die Invarianten. Alter Bestand bleibt."""

    def __init__(self, report: AuditReport) -> None:
        self.report = report
        details = "; ".join(f"{v.entity}: {v.description}" for v in report.violations[:5])
        super().__init__(f"Ungültiger Buchungsbestand ({report.summary()}): {details}")


class ReservationStore:
    """Geordnete Liste von Buchungen (Einfügereihenfolge) mit Konfliktprüfung."""

    def __init__(
        self,
        catalogue: RoomCatalogue,
        today: Callable[[], datetime.date] = datetime.date.today,
    ) -> None:
        self.catalogue = catalogue
        self._today = today
        self._lock = threading.Lock()
        self._reservations: list[Reservation] = []

    # ─── Befehle ───

    def add(
        self,
        room: str,
        date: datetime.date,
        start_time: datetime.time,
        end_time: datetime.time,
        reserved_by: str,
        type: ReservationType = ReservationType.LESSON,
        attendees: Optional[int] = None,
    ) -> ValidationResult:
        """Prüft den Vorschlag gegen den aktuellen Bestand und hängt ihn an.

        Start und Ende werden auf volle Stunden abgerundet.
        """
        start_time, end_time = round_to_hour(start_time), round_to_hour(end_time)
        room_obj = self.catalogue.get(room) if room else None
        result = validate_room(room_obj, attendees)
        if not result.is_ok:
            return result

        with self._lock:
            result = validate_proposal(
                room_obj, date, start_time, end_time, reserved_by, type,
                existing=self._reservations, today=self._today(),
            )
            if not result.is_ok:
                logger.debug(f"Buchung abgelehnt ({room}, {date}): {result.message}")
                return result

            reservation = Reservation(
                room=room_obj.name,
                date=date,
                start_time=start_time,
                end_time=end_time,
                reserved_by=reserved_by.strip(),
                type=type,
            )
            self._reservations.append(reservation)

        logger.debug(f"Buchung angelegt: {reservation.key}")
        return Ok(key=reservation.key)

    def edit(
        self,
        key: ReservationKey,
        date: datetime.date,
        start_time: datetime.time,
        end_time: datetime.time,
        reserved_by: str,
        type: ReservationType,
    ) -> ValidationResult:
        """Ändert eine Buchung an ihrer Position. Der Raum bleibt unverändert.

        Wirft UnknownReservationError, wenn ``key`` nicht existiert.
        """
        start_time, end_time = round_to_hour(start_time), round_to_hour(end_time)
        with self._lock:
            index = self._index_of(key)
            if index is None:
                raise UnknownReservationError(key)
            current = self._reservations[index]
            room_obj = self.catalogue.get(current.room)
            if room_obj is None:
                return Err(message=f"Room '{current.room}' is no longer available")

            result = validate_proposal(
                room_obj, date, start_time, end_time, reserved_by, type,
                existing=self._reservations, excluding=current, today=self._today(),
            )
            if not result.is_ok:
                return result

            updated = current.model_copy(update={
                "date": date,
                "start_time": start_time,
                "end_time": end_time,
                "reserved_by": reserved_by.strip(),
                "type": type,
            })
            self._reservations[index] = updated

        logger.debug(f"Buchung geändert: {key} → {updated.key}")
        return Ok(key=updated.key)

    def remove(self, key: ReservationKey) -> bool:
        """Entfernt eine Buchung. Gibt True zurück wenn eine entfernt wurde."""
        with self._lock:
            index = self._index_of(key)
            if index is None:
                return False
            del self._reservations[index]
        return True

    def replace_all(self, reservations: Iterable[Reservation]) -> None:
        """Ersetzt den Bestand atomar (z.B. nach dem Laden einer Datei).

        Jede Buchung muss auf einen Katalograum verweisen und die Invarianten
        erfüllen; sonst ReservationSetError und der alte Bestand bleibt.
        """
        new_list = list(reservations)
        report = ReservationAuditor(self.catalogue).audit(new_list)
        if not report.is_valid:
            raise ReservationSetError(report)
        with self._lock:
            self._reservations = new_list
        logger.info(f"Bestand ersetzt: {len(new_list)} Buchungen")

    # ─── Abfragen ───

    def get(self, key: ReservationKey) -> Optional[Reservation]:
        with self._lock:
            index = self._index_of(key)
            return None if index is None else self._reservations[index]

    def for_date(self, date: datetime.date) -> tuple[Reservation, ...]:
        with self._lock:
            return tuple(r for r in self._reservations if r.date == date)

    def for_room(self, room: str) -> tuple[Reservation, ...]:
        with self._lock:
            return tuple(r for r in self._reservations if r.room == room)

    def snapshot(self) -> tuple[Reservation, ...]:
        """Kopie aller Buchungen in Einfügereihenfolge (für Persistenz)."""
        with self._lock:
            return tuple(self._reservations)

    def __len__(self) -> int:
        with self._lock:
            return len(self._reservations)

    def __repr__(self) -> str:
        return f"ReservationStore({len(self)} reservations)"

    def _index_of(self, key: ReservationKey) -> Optional[int]:
        for i, r in enumerate(self._reservations):
            if r.key == key:
                return i
        return None
