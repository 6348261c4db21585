"""Konsistenzprüfung eines Buchungsbestands.

Prüft eine beliebige Liste von Buchungen (z.B. frisch geladen) gegen die
Invarianten des Buchungsbestands, unabhängig davon, wie sie entstanden ist:

  unknown_room     Raum fehlt im Katalog
  business_hours   08:00 ≤ Start < Ende ≤ 18:00 verletzt
  duration         Dauer passt nicht zum Raumtyp
  overlap          zwei Buchungen desselben Raums/Tags überschneiden sich
  reserved_by      Name ungültig

Vergangene Daten sind erlaubt (Archivbestände).
"""

from collections import defaultdict
from typing import Iterable, Literal

from pydantic import BaseModel

from booking.validation import validate_reserved_by
from models.catalogue import RoomCatalogue
from models.reservation import Reservation
from models.timeslot import is_on_the_hour, is_valid_range


class AuditViolation(BaseModel):
    """Eine einzelne Invarianten-Verletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "overlap"
    description: str
    entity: str          # Buchungsschlüssel als Text


class AuditReport(BaseModel):
    """Ergebnis der Konsistenzprüfung."""

    violations: list[AuditViolation]
    checked: int

    @property
    def is_valid(self) -> bool:
        return not any(v.severity == "error" for v in self.violations)

    def summary(self) -> str:
        errors = sum(1 for v in self.violations if v.severity == "error")
        return f"{self.checked} Buchungen geprüft, {errors} Fehler"

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ KONSISTENT[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        console.print(Panel(f"{status}\n{self.summary()}",
                            title="Buchungs-Prüfung", border_style="cyan"))
        if not self.violations:
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=16)
        table.add_column("Buchung", width=24)
        table.add_column("Beschreibung")
        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(f"[{color}]{v.severity.upper()}[/{color}]",
                          v.constraint, v.entity, v.description)
        console.print(table)


class ReservationAuditor:
    """Prüft Buchungslisten gegen einen Raumkatalog."""

    def __init__(self, catalogue: RoomCatalogue) -> None:
        self.catalogue = catalogue

    def audit(self, reservations: Iterable[Reservation]) -> AuditReport:
        reservations = list(reservations)
        violations: list[AuditViolation] = []

        for r in reservations:
            violations.extend(self._check_single(r))
        violations.extend(self._check_overlaps(reservations))

        return AuditReport(violations=violations, checked=len(reservations))

    def _check_single(self, r: Reservation) -> list[AuditViolation]:
        found: list[AuditViolation] = []
        entity = str(r.key)

        room = self.catalogue.get(r.room)
        if room is None:
            found.append(AuditViolation(
                severity="error", constraint="unknown_room", entity=entity,
                description=f"Raum '{r.room}' ist nicht im Katalog.",
            ))

        if not (is_on_the_hour(r.start_time) and is_on_the_hour(r.end_time)):
            found.append(AuditViolation(
                severity="error", constraint="full_hour", entity=entity,
                description="Start und Ende müssen auf vollen Stunden liegen.",
            ))

        if not is_valid_range(r.start_time, r.end_time):
            found.append(AuditViolation(
                severity="error", constraint="business_hours", entity=entity,
                description="Zeitraum liegt nicht in 08:00–18:00 oder Start ≥ Ende.",
            ))
        elif room is not None and not room.is_valid_duration(r.duration_hours):
            found.append(AuditViolation(
                severity="error", constraint="duration", entity=entity,
                description=(
                    f"Dauer {r.duration_hours}h unzulässig für "
                    f"{room.room_type.display_name} ({room.duration_rule().describe()})."
                ),
            ))

        name_check = validate_reserved_by(r.reserved_by)
        if not name_check.is_ok:
            found.append(AuditViolation(
                severity="error", constraint="reserved_by", entity=entity,
                description=name_check.message,
            ))
        return found

    def _check_overlaps(self, reservations: list[Reservation]) -> list[AuditViolation]:
        by_room_day: dict[tuple, list[Reservation]] = defaultdict(list)
        for r in reservations:
            by_room_day[(r.room, r.date)].append(r)

        found: list[AuditViolation] = []
        for group in by_room_day.values():
            group.sort(key=lambda r: r.start_time)
            for i, a in enumerate(group):
                for b in group[i + 1:]:
                    if b.start_time >= a.end_time:
                        break
                    found.append(AuditViolation(
                        severity="error", constraint="overlap", entity=str(a.key),
                        description=f"Überschneidet sich mit {b.key}.",
                    ))
        return found
