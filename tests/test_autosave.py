"""Tests für den periodischen Auto-Save."""

import datetime
import logging
import threading
import time
from pathlib import Path

import pytest

from booking.autosave import AutoSaveTask
from booking.context import BookingContext
from booking.store import ReservationStore
from config.schema import AppConfig, AutoSaveConfig
from data import resv_codec
from data.resv_codec import PersistIoError
from models.catalogue import RoomCatalogue
from models.room import Classroom

DAY = datetime.date(2099, 1, 10)


def _make_store() -> ReservationStore:
    store = ReservationStore(RoomCatalogue([Classroom(name="C1", capacity=20)]))
    store.add("C1", DAY, datetime.time(9), datetime.time(11), "Alice")
    return store


def _failing_save(path, reservations):
    raise PersistIoError(Path(path), OSError("disk full"))


class TestRunOnce:
    def test_writes_snapshot(self, tmp_path: Path):
        store = _make_store()
        task = AutoSaveTask(store, path=tmp_path / "auto", interval_seconds=60)
        assert task.run_once() is True
        assert task.path == tmp_path / "auto.resv"
        assert resv_codec.load(task.path) == list(store.snapshot())
        assert task.save_count == 1
        assert task.last_saved_at is not None

    def test_error_is_logged_not_raised(self, tmp_path: Path, caplog):
        task = AutoSaveTask(_make_store(), path=tmp_path / "a.resv",
                            save_func=_failing_save)
        with caplog.at_level(logging.ERROR, logger="booking.autosave"):
            assert task.run_once() is False
        assert task.error_count == 1
        assert "disk full" in caplog.text

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            AutoSaveTask(_make_store(), interval_seconds=0)


class TestLifecycle:
    def test_periodic_save(self, tmp_path: Path):
        """Mit kurzem Intervall entsteht die Datei ohne expliziten Aufruf."""
        saved = threading.Event()

        def recording_save(path, reservations):
            result = resv_codec.save(path, reservations)
            saved.set()
            return result

        task = AutoSaveTask(_make_store(), path=tmp_path / "auto.resv",
                            interval_seconds=0.05, save_func=recording_save)
        task.start()
        try:
            assert task.is_running
            assert saved.wait(5)
        finally:
            assert task.stop() is True
        assert not task.is_running
        assert (tmp_path / "auto.resv").exists()

    def test_worker_survives_errors(self, tmp_path: Path):
        calls = []

        def flaky_save(path, reservations):
            calls.append(path)
            raise PersistIoError(Path(path), OSError("busy"))

        task = AutoSaveTask(_make_store(), path=tmp_path / "a.resv",
                            interval_seconds=0.02, save_func=flaky_save)
        with task:
            for _ in range(250):
                if len(calls) >= 3:
                    break
                time.sleep(0.02)
        assert len(calls) >= 3
        assert task.error_count >= 3

    def test_double_start_rejected(self, tmp_path: Path):
        task = AutoSaveTask(_make_store(), path=tmp_path / "a.resv", interval_seconds=60)
        task.start()
        try:
            with pytest.raises(RuntimeError):
                task.start()
        finally:
            task.stop()

    def test_stop_without_start(self):
        assert AutoSaveTask(_make_store(), interval_seconds=60).stop() is True

    def test_stop_timeout_abandons_worker(self, tmp_path: Path, caplog):
        """Hängt eine Sicherung länger als die Wartezeit, gibt stop() False zurück."""
        release = threading.Event()
        started = threading.Event()

        def slow_save(path, reservations):
            started.set()
            release.wait(5)

        task = AutoSaveTask(_make_store(), path=tmp_path / "a.resv",
                            interval_seconds=0.01, shutdown_timeout=0.05,
                            save_func=slow_save)
        task.start()
        assert started.wait(5)
        with caplog.at_level(logging.WARNING, logger="booking.autosave"):
            assert task.stop() is False
        assert "aufgegeben" in caplog.text
        release.set()

    def test_restart_after_abandoned_worker(self, tmp_path: Path):
        """Ein aufgegebener Worker läuft nach einem Neustart nicht wieder an."""
        release = threading.Event()
        started = threading.Event()

        def slow_save(path, reservations):
            started.set()
            release.wait(5)

        task = AutoSaveTask(_make_store(), path=tmp_path / "a.resv",
                            interval_seconds=0.01, shutdown_timeout=0.05,
                            save_func=slow_save)
        task.start()
        assert started.wait(5)
        old = task._thread
        assert task.stop() is False

        task.start()
        release.set()
        old.join(5)
        assert not old.is_alive()
        assert task.is_running
        assert task.stop() is True


class TestContextAutosave:
    def test_context_starts_and_stops(self, tmp_path: Path):
        config = AppConfig(autosave=AutoSaveConfig(
            enabled=True, interval_seconds=60, path=str(tmp_path / "auto.resv")))
        ctx = BookingContext(config, RoomCatalogue())
        assert ctx.autosave is not None
        ctx.start_autosave()
        assert ctx.autosave.is_running
        assert ctx.close() is True
        assert not ctx.autosave.is_running

    def test_with_block_runs_autosave(self, tmp_path: Path):
        config = AppConfig(autosave=AutoSaveConfig(
            enabled=True, interval_seconds=60, path=str(tmp_path / "auto.resv")))
        with BookingContext(config, RoomCatalogue()) as ctx:
            assert ctx.autosave.is_running
        assert not ctx.autosave.is_running
