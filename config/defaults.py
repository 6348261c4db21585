from pathlib import Path

from config.schema import AppConfig, AutoSaveConfig, CatalogueConfig

# Externe Katalogdatei, relativ zum Arbeitsverzeichnis
DEFAULT_ROOMS_FILE = Path("config/rooms.txt")
# Mitgelieferter Katalog (Paketdaten neben diesem Modul)
BUNDLED_ROOMS_FILE = Path(__file__).resolve().parent / "rooms.txt"

AUTO_SAVE_PATH = Path("autosave.resv")
AUTO_SAVE_INTERVAL_SECONDS = 60.0
SHUTDOWN_TIMEOUT_SECONDS = 60.0

DEFAULT_DATA_FILE = Path("reservations.resv")


def default_autosave() -> AutoSaveConfig:
    """Sicherung jede Minute nach autosave.resv, 60 s Wartezeit beim Beenden."""
    return AutoSaveConfig(
        enabled=True,
        interval_seconds=AUTO_SAVE_INTERVAL_SECONDS,
        path=str(AUTO_SAVE_PATH),
        shutdown_timeout_seconds=SHUTDOWN_TIMEOUT_SECONDS,
    )


def default_app_config() -> AppConfig:
    """Komplette Default-Konfiguration."""
    return AppConfig(
        catalogue=CatalogueConfig(rooms_file=str(DEFAULT_ROOMS_FILE)),
        autosave=default_autosave(),
        data_file=str(DEFAULT_DATA_FILE),
        log_level="INFO",
    )
