"""AutoSaveTask – sichert den Buchungsbestand periodisch in eine Datei.

Ein einzelner Worker-Thread wartet jeweils ``interval_seconds`` und schreibt
dann einen Snapshot des Stores. Fehler beim Schreiben werden protokolliert,
nie an den Aufrufer weitergegeben. Beim Stoppen wird bis zu
``shutdown_timeout`` Sekunden auf eine laufende Sicherung gewartet.
"""

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from booking.store import ReservationStore
from config.defaults import AUTO_SAVE_INTERVAL_SECONDS, AUTO_SAVE_PATH, SHUTDOWN_TIMEOUT_SECONDS
from data import resv_codec
from data.resv_codec import PersistError
from models.reservation import Reservation

logger = logging.getLogger(__name__)

SaveFunc = Callable[[Path, Iterable[Reservation]], object]


class AutoSaveTask:
    """Periodische Sicherung mit genau einem Worker."""

    def __init__(
        self,
        store: ReservationStore,
        path: Union[str, Path] = AUTO_SAVE_PATH,
        interval_seconds: float = AUTO_SAVE_INTERVAL_SECONDS,
        shutdown_timeout: float = SHUTDOWN_TIMEOUT_SECONDS,
        save_func: SaveFunc = resv_codec.save,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds muss > 0 sein.")
        self.store = store
        self.path = resv_codec.ensure_extension(path)
        self.interval_seconds = interval_seconds
        self.shutdown_timeout = shutdown_timeout
        self._save_func = save_func
        self._stop_event = threading.Event()
        self._save_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self.save_count = 0
        self.error_count = 0
        self.last_saved_at: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Startet den Worker. Erste Sicherung nach einem Intervall."""
        if self.is_running:
            raise RuntimeError("Auto-Save läuft bereits.")
        # Eigenes Event pro Worker: ein aufgegebener Worker bleibt gestoppt
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_event,), name="autosave", daemon=True)
        self._thread.start()
        logger.info(f"Auto-Save gestartet: {self.path} alle {self.interval_seconds:g}s")

    def stop(self) -> bool:
        """Stoppt den Worker und wartet begrenzt auf eine laufende Sicherung.

        Gibt True zurück wenn der Worker sauber beendet wurde. Läuft er nach
        ``shutdown_timeout`` noch, wird er aufgegeben (Daemon-Thread) und
        False zurückgegeben.
        """
        thread = self._thread
        if thread is None:
            return True
        self._stop_event.set()
        thread.join(self.shutdown_timeout)
        self._thread = None
        if thread.is_alive():
            logger.warning(
                f"Auto-Save nach {self.shutdown_timeout:g}s nicht beendet – Worker wird aufgegeben")
            return False
        logger.info("Auto-Save gestoppt")
        return True

    def run_once(self) -> bool:
        """Sichert einen Snapshot sofort. Gibt False bei einem Fehler zurück."""
        with self._save_lock:
            snapshot = self.store.snapshot()
            try:
                self._save_func(self.path, snapshot)
            except PersistError as e:
                self.error_count += 1
                logger.error(f"Auto-Save fehlgeschlagen: {e}")
                return False
            self.save_count += 1
            self.last_saved_at = datetime.now()
        logger.debug(f"Auto-Save: {len(snapshot)} Buchungen → {self.path}")
        return True

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception:
                self.error_count += 1
                logger.exception("Unerwarteter Fehler im Auto-Save")

    def __enter__(self) -> "AutoSaveTask":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
