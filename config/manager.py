"""Konfigurationsmanager: Laden, Speichern und Validieren der Einstellungen.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_app_config
from config.schema import AppConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Raumbuchung — Einstellungen
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "catalogue": (
        "Raumkatalog",
        "Fehlt die Datei, wird der mitgelieferte Katalog verwendet.",
    ),
    "autosave": (
        "Automatisches Speichern",
        "Intervall und Wartezeit in Sekunden.",
    ),
    "data_file": (
        "Buchungsdatei",
        None,
    ),
    "log_level": (
        "Protokollierung",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "settings.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Einstellungsdatei existiert."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> AppConfig:
        """Lade Einstellungen aus YAML. Ohne Datei gelten die Defaults."""
        target = Path(path) if path is not None else self.DEFAULT_CONFIG
        if not target.exists():
            return default_app_config()
        try:
            with open(target, "r", encoding="utf-8") as f:
                raw = yaml.load(f)
            return AppConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Einstellungsdatei ungültig: {target}\n"
                f"Fehler: {e}"
            ) from e

    # ─── Speichern ───

    def save(self, config: AppConfig, path: Optional[Path] = None) -> Path:
        """Speichere Einstellungen als YAML mit Kommentaren."""
        target = Path(path) if path is not None else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Einstellungen gespeichert: {target}")
        return target

    def _build_commented_yaml(self, config: AppConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        autosave_map = CommentedMap(cm["autosave"])
        autosave_map.yaml_add_eol_comment("Sekunden", "interval_seconds")
        cm["autosave"] = autosave_map

        return cm
