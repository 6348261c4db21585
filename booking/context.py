"""BookingContext – verdrahtet Einstellungen, Katalog, Store und Auto-Save.

Reihenfolge beim Start: Katalog laden → Store anlegen → Auto-Save starten.
Beim Beenden wird zuerst der Auto-Save gestoppt (begrenzte Wartezeit).
"""

import logging
from pathlib import Path
from typing import Optional, Union

from booking.autosave import AutoSaveTask
from booking.store import ReservationStore
from config.defaults import default_app_config
from config.schema import AppConfig
from data import resv_codec
from data.catalogue_loader import load_catalogue_or_empty
from models.catalogue import RoomCatalogue

logger = logging.getLogger(__name__)


class BookingContext:
    """Laufzeitumgebung einer Sitzung."""

    def __init__(
        self,
        config: AppConfig,
        catalogue: RoomCatalogue,
        store: Optional[ReservationStore] = None,
    ) -> None:
        self.config = config
        self.catalogue = catalogue
        self.store = store or ReservationStore(catalogue)
        self.autosave: Optional[AutoSaveTask] = None
        if config.autosave.enabled:
            self.autosave = AutoSaveTask(
                self.store,
                path=config.autosave.path,
                interval_seconds=config.autosave.interval_seconds,
                shutdown_timeout=config.autosave.shutdown_timeout_seconds,
            )

    @classmethod
    def open(cls, config: Optional[AppConfig] = None) -> "BookingContext":
        """Lädt den Katalog gemäß Einstellungen (Fallback: mitgeliefert → leer)."""
        config = config or default_app_config()
        catalogue = load_catalogue_or_empty(Path(config.catalogue.rooms_file))
        return cls(config, catalogue)

    @property
    def data_file(self) -> Path:
        return resv_codec.ensure_extension(self.config.data_file)

    # ─── Persistenz ───

    def load(self, path: Union[str, Path, None] = None) -> int:
        """Lädt eine Buchungsdatei und ersetzt den Bestand.

        Bei PersistError oder ReservationSetError bleibt der alte Bestand.
        """
        source = path if path is not None else self.data_file
        reservations = resv_codec.load(source, self.catalogue)
        self.store.replace_all(reservations)
        return len(reservations)

    def load_if_exists(self, path: Union[str, Path, None] = None) -> int:
        """Wie load(), aber eine fehlende Datei bedeutet leeren Bestand."""
        source = resv_codec.ensure_extension(path if path is not None else self.data_file)
        if not source.exists():
            logger.info(f"Keine Buchungsdatei vorhanden: {source}")
            return 0
        return self.load(source)

    def save(self, path: Union[str, Path, None] = None) -> Path:
        """Schreibt einen Snapshot des Bestands."""
        target = resv_codec.save(
            path if path is not None else self.data_file, self.store.snapshot())
        logger.info(f"{len(self.store)} Buchungen gespeichert: {target}")
        return target

    # ─── Lebenszyklus ───

    def start_autosave(self) -> None:
        if self.autosave is not None and not self.autosave.is_running:
            self.autosave.start()

    def close(self) -> bool:
        """Stoppt den Auto-Save. True wenn er sauber beendet wurde."""
        if self.autosave is None:
            return True
        return self.autosave.stop()

    def __enter__(self) -> "BookingContext":
        self.start_autosave()
        return self

    def __exit__(self, *exc) -> None:
        self.close()
