from pydantic import BaseModel, Field, field_validator


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


# ─── RAUMKATALOG ───

class CatalogueConfig(BaseModel):
    """Wo der Raumkatalog liegt."""
    # Externe Katalogdatei (relativ zum Arbeitsverzeichnis). Fehlt sie,
    # wird die mitgelieferte config/rooms.txt verwendet.
    rooms_file: str = Field("config/rooms.txt",
        description="Pfad zur Raumkatalog-Datei")


# ─── AUTOMATISCHES SPEICHERN ───

class AutoSaveConfig(BaseModel):
    """Periodisches Sichern des Buchungsbestands."""
    # Auto-Save in interaktiven Sitzungen aktiv
    enabled: bool = Field(True,
        description="Auto-Save aktiv")
    # Intervall zwischen zwei Sicherungen in Sekunden
    interval_seconds: float = Field(60.0, gt=0,
        description="Intervall in Sekunden")
    # Zieldatei; .resv wird bei Bedarf ergänzt
    path: str = Field("autosave.resv",
        description="Datei für automatische Sicherungen")
    # Maximale Wartezeit beim Beenden auf eine laufende Sicherung
    shutdown_timeout_seconds: float = Field(60.0, ge=0,
        description="Wartezeit beim Beenden in Sekunden")


# ─── GESAMT-KONFIGURATION ───

class AppConfig(BaseModel):
    """Gesamte Anwendungskonfiguration."""
    catalogue: CatalogueConfig = Field(default_factory=CatalogueConfig)
    autosave: AutoSaveConfig = Field(default_factory=AutoSaveConfig)
    # Buchungsdatei, die von den CLI-Befehlen gelesen und geschrieben wird
    data_file: str = Field("reservations.resv",
        description="Standard-Buchungsdatei")
    # Log-Level für die Konsolenausgabe
    log_level: str = Field("INFO",
        description="DEBUG, INFO, WARNING oder ERROR")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in _LOG_LEVELS:
            raise ValueError(f"Ungültiges Log-Level: {v} (erlaubt: {', '.join(_LOG_LEVELS)})")
        return v
