"""Tests für das .resv-Dateiformat und das Laden über den BookingContext."""

import datetime
from pathlib import Path

import pytest

from booking.context import BookingContext
from booking.store import ReservationSetError, ReservationStore
from config.defaults import default_app_config
from data import resv_codec
from data.resv_codec import PersistIoError, PersistMalformed, ensure_extension
from models.catalogue import RoomCatalogue
from models.reservation import Reservation, ReservationType
from models.room import Classroom, Laboratory

DAY = datetime.date(2099, 1, 10)


def _t(hour: int) -> datetime.time:
    return datetime.time(hour, 0)


def _make_catalogue() -> RoomCatalogue:
    return RoomCatalogue([
        Classroom(name="C1", capacity=20, has_whiteboard=True, has_projector=True),
        Laboratory(name="L1", capacity=16, has_pcs=True, has_electrical_outlets=True),
    ])


def _make_store() -> ReservationStore:
    """Bestand aus S1 und den beiden erfolgreichen Buchungen aus S3."""
    store = ReservationStore(_make_catalogue())
    store.add("C1", DAY, _t(9), _t(11), "Alice", ReservationType.LESSON)
    store.add("C1", DAY, _t(11), _t(12), "Bob", ReservationType.LESSON)
    store.add("L1", DAY, _t(8), _t(10), "Dana", ReservationType.LESSON)
    store.add("L1", DAY, _t(10), _t(14), "Dana", ReservationType.LESSON)
    return store


RECORD = """\
RESERVATION
room=C1
date=2099-01-10
startTime=09:00
endTime=11:00
reservedBy=Alice
type=LESSON
END
"""


# ─── ROUNDTRIP ────────────────────────────────────────────────────────────────

class TestRoundTrip:
    def test_s4_roundtrip(self, tmp_path: Path):
        """S4: Speichern, in frischen Store laden, Snapshot identisch."""
        store = _make_store()
        original = store.snapshot()
        assert len(original) == 4

        path = resv_codec.save(tmp_path / "s4.resv", original)
        fresh = ReservationStore(_make_catalogue())
        fresh.replace_all(resv_codec.load(path, fresh.catalogue))
        assert fresh.snapshot() == original

    def test_dumps_exact_format(self):
        r = Reservation(room="C1", date=DAY, start_time=_t(9), end_time=_t(11),
                        reserved_by="Alice", type=ReservationType.LESSON)
        assert resv_codec.dumps([r]) == RECORD + "\n"

    def test_empty_store(self, tmp_path: Path):
        path = resv_codec.save(tmp_path / "empty", [])
        assert path.read_text(encoding="utf-8") == ""
        assert resv_codec.load(path) == []

    def test_catch_up_type_and_spaces(self, tmp_path: Path):
        r = Reservation(room="C1", date=DAY, start_time=_t(9), end_time=_t(11),
                        reserved_by="Dr. Jane Doe-Smith", type=ReservationType.CATCH_UP)
        path = resv_codec.save(tmp_path / "x", [r])
        assert resv_codec.load(path) == [r]


# ─── DATEINAMEN ───────────────────────────────────────────────────────────────

class TestExtension:
    def test_appended(self):
        assert ensure_extension("backup") == Path("backup.resv")
        assert ensure_extension("data.txt") == Path("data.txt.resv")

    def test_kept(self):
        assert ensure_extension("dir/backup.resv") == Path("dir/backup.resv")

    def test_save_appends(self, tmp_path: Path):
        written = resv_codec.save(tmp_path / "plain", [])
        assert written == tmp_path / "plain.resv"
        assert written.exists()

    def test_save_creates_parent(self, tmp_path: Path):
        written = resv_codec.save(tmp_path / "sub" / "dir" / "f.resv", [])
        assert written.exists()


# ─── FEHLERHAFTE DATEIEN ──────────────────────────────────────────────────────

class TestMalformed:
    @pytest.mark.parametrize("text, line", [
        ("GARBAGE\n", 1),
        ("\n\nRESERVATION\nroom C1\n", 4),
        (RECORD.replace("startTime=09:00", "startTime=9h"), 4),
        (RECORD.replace("startTime=09:00", "startTime=09:30"), 4),
        (RECORD.replace("endTime=11:00", "endTime=11:15"), 5),
        (RECORD.replace("date=2099-01-10", "date=10/01/2099"), 3),
        (RECORD.replace("type=LESSON", "type=PARTY"), 7),
        (RECORD.replace("reservedBy=Alice\n", ""), 7),
        (RECORD.replace("room=C1", "colour=red"), 2),
        (RECORD.replace("reservedBy=Alice", "room=C1"), 6),
        (RECORD.replace("END\n", ""), 8),
    ])
    def test_line_numbers(self, text, line):
        with pytest.raises(PersistMalformed) as exc:
            resv_codec.loads(text)
        assert exc.value.line_number == line

    def test_unknown_room_reports_room_line(self):
        text = RECORD + "\n" + RECORD.replace("room=C1", "room=Z9")
        with pytest.raises(PersistMalformed) as exc:
            resv_codec.loads(text, _make_catalogue())
        assert exc.value.line_number == 11
        assert "Z9" in str(exc.value)

    def test_unknown_room_without_catalogue(self):
        text = RECORD.replace("room=C1", "room=Z9")
        assert resv_codec.loads(text)[0].room == "Z9"

    def test_whitespace_tolerated(self):
        text = "\n".join("  " + line + "  " for line in RECORD.splitlines())
        assert len(resv_codec.loads(text)) == 1

    def test_missing_file_is_io_error(self, tmp_path: Path):
        with pytest.raises(PersistIoError):
            resv_codec.load(tmp_path / "nope.resv")

    def test_save_into_directory_is_io_error(self, tmp_path: Path):
        (tmp_path / "taken.resv").mkdir()
        with pytest.raises(PersistIoError):
            resv_codec.save(tmp_path / "taken.resv", [])


# ─── CONTEXT ──────────────────────────────────────────────────────────────────

class TestBookingContextPersistence:
    def _make_context(self, tmp_path: Path) -> BookingContext:
        config = default_app_config().model_copy(
            update={"data_file": str(tmp_path / "data.resv")})
        config.autosave.enabled = False
        return BookingContext(config, _make_catalogue())

    def test_save_and_load(self, tmp_path: Path):
        ctx = self._make_context(tmp_path)
        ctx.store.add("C1", DAY, _t(9), _t(11), "Alice")
        ctx.save()

        other = self._make_context(tmp_path)
        assert other.load() == 1
        assert other.store.snapshot() == ctx.store.snapshot()

    def test_load_if_exists_missing(self, tmp_path: Path):
        ctx = self._make_context(tmp_path)
        assert ctx.load_if_exists() == 0

    def test_failed_load_keeps_store(self, tmp_path: Path):
        """Fehlerhafte Datei: Bestand bleibt unverändert."""
        ctx = self._make_context(tmp_path)
        ctx.store.add("C1", DAY, _t(9), _t(11), "Alice")
        before = ctx.store.snapshot()

        bad = tmp_path / "bad.resv"
        bad.write_text(RECORD.replace("endTime=11:00", "endTime=xx"), encoding="utf-8")
        with pytest.raises(PersistMalformed):
            ctx.load(bad)
        assert ctx.store.snapshot() == before

    def test_overlapping_file_rejected(self, tmp_path: Path):
        ctx = self._make_context(tmp_path)
        ctx.store.add("C1", DAY, _t(15), _t(16), "Keeper")
        before = ctx.store.snapshot()

        clash = tmp_path / "clash.resv"
        clash.write_text(RECORD + "\n" + RECORD.replace("reservedBy=Alice", "reservedBy=Bob"),
                         encoding="utf-8")
        with pytest.raises(ReservationSetError):
            ctx.load(clash)
        assert ctx.store.snapshot() == before

    def test_no_autosave_when_disabled(self, tmp_path: Path):
        ctx = self._make_context(tmp_path)
        assert ctx.autosave is None
        assert ctx.close() is True
