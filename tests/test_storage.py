"""Tests for mimimatch.storage: stores, background writes, loading with fallback."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from mimimatch.decisions import DecisionState
from mimimatch.schemas import Category, PreferenceConfig
from mimimatch.storage import (
    LIKED_KEY,
    SEEN_KEY,
    SETTINGS_KEY,
    BackgroundWriter,
    JsonFileStore,
    MalformedPersistedStateError,
    MemoryStore,
    dump_liked,
    dump_preferences,
    dump_seen,
    load_decisions,
    load_preferences,
    parse_liked,
    parse_preferences,
    parse_seen,
)

# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class TestMemoryStore:
    def test_get_missing(self) -> None:
        assert MemoryStore().get("settings") is None

    def test_set_get(self) -> None:
        store = MemoryStore()
        store.set("liked", "[]")
        assert store.get("liked") == "[]"

    def test_initial_copied(self) -> None:
        initial = {"seen": "[]"}
        store = MemoryStore(initial)
        store.set("seen", '["Eva"]')
        assert initial == {"seen": "[]"}


class TestJsonFileStore:
    def test_get_missing(self, tmp_path: Path) -> None:
        assert JsonFileStore(tmp_path).get("settings") is None

    def test_creates_directory(self, tmp_path: Path) -> None:
        store = JsonFileStore(tmp_path / "nested" / "dir")
        store.set("liked", '["Eva"]')
        assert (tmp_path / "nested" / "dir" / "liked.json").read_text(
            encoding="utf-8"
        ) == '["Eva"]'

    def test_round_trip_unicode(self, tmp_path: Path) -> None:
        store = JsonFileStore(tmp_path)
        store.set("liked", '["Eliška"]')
        assert store.get("liked") == '["Eliška"]'

    def test_overwrite_leaves_no_tmp(self, tmp_path: Path) -> None:
        store = JsonFileStore(tmp_path)
        store.set("seen", "[]")
        store.set("seen", '["Jan"]')
        assert store.get("seen") == '["Jan"]'
        assert not list(tmp_path.glob("*.tmp"))

    def test_invalid_utf8_is_malformed(self, tmp_path: Path) -> None:
        (tmp_path / "seen.json").write_bytes(b'["\xff"]')
        with pytest.raises(MalformedPersistedStateError, match="not valid UTF-8"):
            JsonFileStore(tmp_path).get("seen")

    def test_failed_write_leaves_no_tmp(self, tmp_path: Path) -> None:
        store = JsonFileStore(tmp_path)
        with pytest.raises(UnicodeEncodeError):
            store.set("settings", '{"surname": "No\udcffvak"}')
        assert not list(tmp_path.glob("*.tmp"))
        assert store.get("settings") is None


class _FlakyStore(MemoryStore):
    """Fails the first write with a non-I/O error, then works."""

    def __init__(self) -> None:
        super().__init__()
        self.failed = False

    def set(self, key: str, value: str) -> None:
        if not self.failed:
            self.failed = True
            raise ValueError("boom")
        super().set(key, value)


class _FailingStore:
    def __init__(self) -> None:
        self.attempts = 0

    def get(self, key: str) -> str | None:
        raise OSError("disk gone")

    def set(self, key: str, value: str) -> None:
        self.attempts += 1
        raise OSError("disk full")


class TestBackgroundWriter:
    def test_writes_in_order(self) -> None:
        store = MemoryStore()
        writer = BackgroundWriter(store)
        for i in range(50):
            writer.submit("seen", json.dumps([f"N{i}"]))
        writer.close()
        assert store.get("seen") == '["N49"]'

    def test_flush(self) -> None:
        store = MemoryStore()
        writer = BackgroundWriter(store)
        writer.submit("liked", "[]")
        writer.flush()
        assert store.get("liked") == "[]"
        writer.close()

    def test_failures_logged_not_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        store = _FailingStore()
        writer = BackgroundWriter(store)
        with caplog.at_level(logging.WARNING, logger="mimimatch.storage"):
            writer.submit("liked", "[]")
            writer.flush()
        writer.close()
        assert store.attempts == 1
        assert "Failed to persist liked" in caplog.text

    def test_worker_survives_unexpected_error(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        store = _FlakyStore()
        writer = BackgroundWriter(store)
        with caplog.at_level(logging.WARNING, logger="mimimatch.storage"):
            writer.submit("liked", "[]")
            writer.flush()
        writer.submit("seen", '["Eva"]')
        writer.flush()
        writer.close()
        assert "Failed to persist liked: boom" in caplog.text
        assert store.get("liked") is None
        assert store.get("seen") == '["Eva"]'

    def test_submit_after_close(self) -> None:
        writer = BackgroundWriter(MemoryStore())
        writer.close()
        with pytest.raises(RuntimeError):
            writer.submit("liked", "[]")

    def test_close_twice(self) -> None:
        writer = BackgroundWriter(MemoryStore())
        writer.close()
        writer.close()


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestDump:
    def test_preferences(self) -> None:
        raw = dump_preferences(PreferenceConfig(surname="Nováková", category=Category.GIRL))
        assert json.loads(raw) == {"surname": "Nováková", "gender": "ZENA"}
        assert "Nováková" in raw

    def test_liked_keeps_order(self) -> None:
        state = DecisionState(kept=("Eva", "Anna"), decided=frozenset({"Eva", "Anna"}))
        assert json.loads(dump_liked(state)) == ["Eva", "Anna"]

    def test_seen_sorted(self) -> None:
        state = DecisionState(decided=frozenset({"Sam", "Eva", "Jan"}))
        assert json.loads(dump_seen(state)) == ["Eva", "Jan", "Sam"]


class TestParse:
    def test_preferences(self) -> None:
        prefs = parse_preferences('{"surname": "Novák", "gender": "MUZ"}')
        assert prefs == PreferenceConfig(surname="Novák", category=Category.BOY)

    def test_preferences_partial_uses_defaults(self) -> None:
        assert parse_preferences('{"surname": "Novák"}').category == Category.GIRL

    @pytest.mark.parametrize(
        "raw",
        ["not json", "[]", '{"gender": "X"}', '{"surname": 5}'],
    )
    def test_preferences_malformed(self, raw: str) -> None:
        with pytest.raises(MalformedPersistedStateError):
            parse_preferences(raw)

    def test_liked_dedupes(self) -> None:
        assert parse_liked('["Eva", "Anna", "Eva"]') == ("Eva", "Anna")

    def test_seen(self) -> None:
        assert parse_seen('["Eva", "Jan"]') == {"Eva", "Jan"}

    @pytest.mark.parametrize("raw", ["{", '{"a": 1}', '["Eva", 3]', "null"])
    def test_lists_malformed(self, raw: str) -> None:
        with pytest.raises(MalformedPersistedStateError):
            parse_liked(raw)
        with pytest.raises(MalformedPersistedStateError):
            parse_seen(raw)


# ---------------------------------------------------------------------------
# Loading with fallback
# ---------------------------------------------------------------------------


class TestLoadPreferences:
    def test_absent_uses_default(self) -> None:
        assert load_preferences(MemoryStore()) == PreferenceConfig()

    def test_stored(self) -> None:
        store = MemoryStore({SETTINGS_KEY: '{"surname": "Novák", "gender": "NEUTRALNI"}'})
        prefs = load_preferences(store)
        assert prefs.surname == "Novák"
        assert prefs.category == Category.NEUTRAL

    def test_malformed_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        store = MemoryStore({SETTINGS_KEY: "{broken"})
        with caplog.at_level(logging.WARNING, logger="mimimatch.storage"):
            assert load_preferences(store) == PreferenceConfig()
        assert "Malformed persisted state" in caplog.text

    def test_read_error_falls_back(self) -> None:
        assert load_preferences(_FailingStore()) == PreferenceConfig()

    def test_invalid_utf8_falls_back(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (tmp_path / "settings.json").write_bytes(b'{"surname": "\xff"}')
        with caplog.at_level(logging.WARNING, logger="mimimatch.storage"):
            assert load_preferences(JsonFileStore(tmp_path)) == PreferenceConfig()
        assert "not valid UTF-8" in caplog.text


class TestLoadDecisions:
    def test_absent_uses_empty(self) -> None:
        assert load_decisions(MemoryStore()) == DecisionState()

    def test_stored(self) -> None:
        store = MemoryStore({LIKED_KEY: '["Eva"]', SEEN_KEY: '["Eva", "Jan"]'})
        state = load_decisions(store)
        assert state.kept == ("Eva",)
        assert state.decided == {"Eva", "Jan"}

    def test_malformed_liked_only_affects_liked(self) -> None:
        store = MemoryStore({LIKED_KEY: "oops", SEEN_KEY: '["Jan"]'})
        state = load_decisions(store)
        assert state.kept == ()
        assert state.decided == {"Jan"}

    def test_malformed_seen_only_affects_seen(self) -> None:
        store = MemoryStore({LIKED_KEY: '["Eva"]', SEEN_KEY: "42"})
        state = load_decisions(store)
        assert state.kept == ("Eva",)
        assert state.decided == {"Eva"}

    def test_repairs_kept_missing_from_seen(self) -> None:
        store = MemoryStore({LIKED_KEY: '["Eva", "Anna"]', SEEN_KEY: '["Eva"]'})
        state = load_decisions(store)
        assert state.decided == {"Eva", "Anna"}

    def test_from_files(self, tmp_path: Path) -> None:
        (tmp_path / "liked.json").write_text('["Eliška"]', encoding="utf-8")
        (tmp_path / "seen.json").write_text('["Eliška", "Jan"]', encoding="utf-8")
        state = load_decisions(JsonFileStore(tmp_path))
        assert state.kept == ("Eliška",)
        assert state.decided == {"Eliška", "Jan"}

    def test_invalid_utf8_only_affects_its_key(self, tmp_path: Path) -> None:
        (tmp_path / "liked.json").write_text('["Eva"]', encoding="utf-8")
        (tmp_path / "seen.json").write_bytes(b'["\xff"]')
        state = load_decisions(JsonFileStore(tmp_path))
        assert state.kept == ("Eva",)
        assert state.decided == {"Eva"}
