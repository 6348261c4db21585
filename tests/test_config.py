"""Tests für das Konfigurationssystem und die CLI."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.defaults import (
    AUTO_SAVE_INTERVAL_SECONDS,
    BUNDLED_ROOMS_FILE,
    default_app_config,
    default_autosave,
)
from config.manager import ConfigManager
from config.schema import AppConfig, AutoSaveConfig


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_app_config_valid(self):
        """Vollständige Default-Config ist valide."""
        config = default_app_config()
        assert config.catalogue.rooms_file == "config/rooms.txt"
        assert config.data_file == "reservations.resv"
        assert config.log_level == "INFO"

    def test_default_autosave(self):
        """Auto-Save: jede Minute nach autosave.resv."""
        auto = default_autosave()
        assert auto.enabled is True
        assert auto.interval_seconds == AUTO_SAVE_INTERVAL_SECONDS == 60.0
        assert auto.path == "autosave.resv"
        assert auto.shutdown_timeout_seconds == 60.0

    def test_bundled_rooms_file_shipped(self):
        assert BUNDLED_ROOMS_FILE.exists()


# ─── PYDANTIC-VALIDIERUNG ─────────────────────────────────────────────────────

class TestPydanticValidation:
    def test_log_level_normalized(self):
        assert AppConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_raises(self):
        with pytest.raises(ValidationError):
            AppConfig(log_level="LOUD")

    def test_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            AutoSaveConfig(interval_seconds=0)

    def test_negative_shutdown_timeout_raises(self):
        with pytest.raises(ValidationError):
            AutoSaveConfig(shutdown_timeout_seconds=-1)


# ─── CONFIG MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def _make_manager(self, tmp_path: Path) -> ConfigManager:
        mgr = ConfigManager()
        mgr.CONFIG_DIR = tmp_path
        mgr.DEFAULT_CONFIG = tmp_path / "settings.yaml"
        return mgr

    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren — vollständiger Roundtrip."""
        config = default_app_config().model_copy(update={"data_file": "archiv.resv"})
        config.autosave.interval_seconds = 15
        mgr = self._make_manager(tmp_path)

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load()
        assert loaded == config

    def test_saved_yaml_has_comments(self, tmp_path: Path):
        mgr = self._make_manager(tmp_path)
        mgr.save(default_app_config())
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "Automatisches Speichern" in text
        assert "interval_seconds: 60.0" in text

    def test_first_run_check(self, tmp_path: Path):
        mgr = self._make_manager(tmp_path)
        assert mgr.first_run_check() is True
        mgr.save(default_app_config())
        assert mgr.first_run_check() is False

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        mgr = self._make_manager(tmp_path)
        assert mgr.load() == default_app_config()

    def test_partial_file_fills_defaults(self, tmp_path: Path):
        mgr = self._make_manager(tmp_path)
        mgr.DEFAULT_CONFIG.write_text("autosave:\n  enabled: false\n", encoding="utf-8")
        config = mgr.load()
        assert config.autosave.enabled is False
        assert config.autosave.interval_seconds == 60.0

    def test_invalid_file_raises(self, tmp_path: Path):
        mgr = self._make_manager(tmp_path)
        mgr.DEFAULT_CONFIG.write_text("log_level: LOUD\n", encoding="utf-8")
        with pytest.raises(ValueError, match="ungültig"):
            mgr.load()


# ─── CLI ──────────────────────────────────────────────────────────────────────

ADD_ARGS = ["add", "A101", "--date", "2099-01-10", "--start", "09:00",
            "--end", "11:00", "--by", "Alice"]


class TestCli:
    def test_help(self):
        """main.py --help gibt Usage aus."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    @pytest.mark.parametrize("command", ["rooms", "show", "add", "edit", "remove",
                                         "free", "audit", "session", "browse"])
    def test_command_registered(self, command):
        from click.testing import CliRunner
        from main import cli
        result = CliRunner().invoke(cli, [command, "--help"])
        assert result.exit_code == 0

    def test_rooms_uses_bundled_catalogue(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["rooms"])
            assert result.exit_code == 0
            assert "LAB-IT1" in result.output

    def test_add_show_remove(self):
        """Buchung anlegen, Konflikt ablehnen, anzeigen, löschen."""
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("config").mkdir()
            Path("config/rooms.txt").write_text("A101,Classroom,30,true,true\n",
                                                encoding="utf-8")
            result = runner.invoke(cli, ADD_ARGS)
            assert result.exit_code == 0, result.output
            assert Path("reservations.resv").exists()

            clash = runner.invoke(cli, ADD_ARGS[:-1] + ["Eve"])
            assert clash.exit_code == 1
            assert "conflicts" in clash.output

            shown = runner.invoke(cli, ["show", "--date", "2099-01-10"])
            assert shown.exit_code == 0
            assert "Alice" in shown.output

            removed = runner.invoke(cli, ["remove", "A101", "2099-01-10", "09:00"])
            assert removed.exit_code == 0
            assert "Alice" not in Path("reservations.resv").read_text(encoding="utf-8")

    def test_edit(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ADD_ARGS)
            result = runner.invoke(cli, ["edit", "A101", "2099-01-10", "09:00",
                                         "--by", "Alicia", "--type", "exam"])
            assert result.exit_code == 0, result.output
            text = Path("reservations.resv").read_text(encoding="utf-8")
            assert "reservedBy=Alicia" in text
            assert "type=EXAM" in text

            missing = runner.invoke(cli, ["edit", "A101", "2099-01-10", "13:00", "--by", "X"])
            assert missing.exit_code == 1

    def test_add_rejects_lab_duration(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["add", "LAB-IT1", "--date", "2099-01-10",
                                         "--start", "08:00", "--end", "11:00", "--by", "Dana"])
            assert result.exit_code == 1
            assert "Invalid duration" in result.output
            assert not Path("reservations.resv").exists()

    def test_add_rejects_minutes(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["add", "A101", "--date", "2099-01-10",
                                         "--start", "09:30", "--end", "11:00", "--by", "Alice"])
            assert result.exit_code == 2
            assert not Path("reservations.resv").exists()

    def test_free(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["free", "LAB-IT1", "--date", "2099-01-10"])
            assert result.exit_code == 0
            assert "16:00" in result.output

    def test_audit_detects_overlap(self):
        from click.testing import CliRunner
        from main import cli
        record = ("RESERVATION\nroom=A101\ndate=2099-01-10\nstartTime=09:00\n"
                  "endTime=11:00\nreservedBy={}\ntype=LESSON\nEND\n\n")
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("reservations.resv").write_text(
                record.format("Alice") + record.format("Bob"), encoding="utf-8")
            result = runner.invoke(cli, ["audit"])
            assert result.exit_code == 1

    def test_malformed_data_file_exits_nonzero(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("reservations.resv").write_text("GARBAGE\n", encoding="utf-8")
            result = runner.invoke(cli, ["show"])
            assert result.exit_code == 1

    def test_invalid_settings_exit_2(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("config").mkdir()
            Path("config/settings.yaml").write_text("log_level: LOUD\n", encoding="utf-8")
            result = runner.invoke(cli, ["rooms"])
            assert result.exit_code == 2

    def test_config_init_and_show(self):
        from click.testing import CliRunner
        from main import cli
        runner = CliRunner()
        with runner.isolated_filesystem():
            shown = runner.invoke(cli, ["config", "show"])
            assert shown.exit_code == 0
            assert "Defaults" in shown.output

            created = runner.invoke(cli, ["config", "init"])
            assert created.exit_code == 0
            assert Path("config/settings.yaml").exists()

            again = runner.invoke(cli, ["config", "init"])
            assert "existiert bereits" in again.output
