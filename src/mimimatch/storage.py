"""Key-value persistence for mimimatch.

Three independent JSON string entries are kept in the store:
  - settings: {"surname": str, "gender": "MUZ" | "ZENA" | "NEUTRALNI"}
  - liked:    ordered list of kept names
  - seen:     list of decided names

A missing or malformed entry falls back to its default value without
affecting the other entries. Writes go through BackgroundWriter so the
caller never waits on disk I/O.
"""

from __future__ import annotations

import json
import logging
import os
import queue
import threading
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from mimimatch.decisions import DecisionState
from mimimatch.schemas import PreferenceConfig

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"
LIKED_KEY = "liked"
SEEN_KEY = "seen"


class MalformedPersistedStateError(ValueError):
    """Raised when a stored value cannot be parsed into its expected shape."""


class KeyValueStore(Protocol):
    """Durable string-keyed storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """Store each key as <directory>/<key>.json.

    The directory is created on first write. Writes are atomic
    (temp file + rename).
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise MalformedPersistedStateError(f"{key}: not valid UTF-8: {e}") from e

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise


class BackgroundWriter:
    """Fire-and-forget writer with a single worker thread.

    Writes are applied in submission order. Failures are logged and
    never reach the caller. Call close() before exit to flush.
    """

    _STOP = object()

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self._queue: queue.Queue[Any] = queue.Queue()
        self._worker = threading.Thread(
            target=self._run, name="mimimatch-writer", daemon=True
        )
        self._worker.start()
        self._closed = False

    def submit(self, key: str, value: str) -> None:
        """Queue a write and return immediately."""
        if self._closed:
            raise RuntimeError("BackgroundWriter is closed")
        self._queue.put((key, value))

    def flush(self) -> None:
        """Block until every queued write has been attempted."""
        self._queue.join()

    def close(self) -> None:
        """Flush pending writes and stop the worker thread."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(self._STOP)
        self._worker.join()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is self._STOP:
                    return
                key, value = item
                try:
                    self.store.set(key, value)
                    logger.debug("Persisted %s (%d bytes)", key, len(value))
                except Exception as e:  # noqa: BLE001
                    logger.warning("Failed to persist %s: %s", key, e)
            finally:
                self._queue.task_done()


# ── Serialization ─────────────────────────────────────────────


def dump_preferences(config: PreferenceConfig) -> str:
    return json.dumps(config.model_dump(mode="json", by_alias=True), ensure_ascii=False)


def dump_liked(state: DecisionState) -> str:
    return json.dumps(list(state.kept), ensure_ascii=False)


def dump_seen(state: DecisionState) -> str:
    return json.dumps(sorted(state.decided), ensure_ascii=False)


def _parse_json(key: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedPersistedStateError(f"{key}: invalid JSON: {e}") from e


def _parse_name_list(key: str, raw: str) -> list[str]:
    data = _parse_json(key, raw)
    if not isinstance(data, list) or not all(isinstance(n, str) for n in data):
        raise MalformedPersistedStateError(f"{key}: expected a list of names")
    return data


def parse_preferences(raw: str) -> PreferenceConfig:
    """Parse the settings entry.

    Raises:
        MalformedPersistedStateError: If the value is not a valid settings object.
    """
    data = _parse_json(SETTINGS_KEY, raw)
    if not isinstance(data, dict):
        raise MalformedPersistedStateError(f"{SETTINGS_KEY}: expected an object")
    try:
        return PreferenceConfig.model_validate(data)
    except ValidationError as e:
        raise MalformedPersistedStateError(f"{SETTINGS_KEY}: {e}") from e


def parse_liked(raw: str) -> tuple[str, ...]:
    """Parse the liked entry, dropping repeated names but keeping order."""
    return tuple(dict.fromkeys(_parse_name_list(LIKED_KEY, raw)))


def parse_seen(raw: str) -> frozenset[str]:
    """Parse the seen entry."""
    return frozenset(_parse_name_list(SEEN_KEY, raw))


# ── Loading with fallback ─────────────────────────────────────


def _read(store: KeyValueStore, key: str) -> str | None:
    try:
        return store.get(key)
    except MalformedPersistedStateError as e:
        logger.warning("Malformed persisted state, using default: %s", e)
        return None
    except OSError as e:
        logger.warning("Failed to read %s, using default: %s", key, e)
        return None


def load_preferences(store: KeyValueStore) -> PreferenceConfig:
    """Load preferences, falling back to defaults when absent or malformed."""
    raw = _read(store, SETTINGS_KEY)
    if raw is None:
        return PreferenceConfig()
    try:
        return parse_preferences(raw)
    except MalformedPersistedStateError as e:
        logger.warning("Malformed persisted state, using default: %s", e)
        return PreferenceConfig()


def load_decisions(store: KeyValueStore) -> DecisionState:
    """Load kept/decided sets; each entry falls back to empty on its own.

    Kept names missing from the decided set are added to it.
    """
    kept: tuple[str, ...] = ()
    decided: frozenset[str] = frozenset()

    raw_liked = _read(store, LIKED_KEY)
    if raw_liked is not None:
        try:
            kept = parse_liked(raw_liked)
        except MalformedPersistedStateError as e:
            logger.warning("Malformed persisted state, using default: %s", e)

    raw_seen = _read(store, SEEN_KEY)
    if raw_seen is not None:
        try:
            decided = parse_seen(raw_seen)
        except MalformedPersistedStateError as e:
            logger.warning("Malformed persisted state, using default: %s", e)

    missing = set(kept) - decided
    if missing:
        logger.info("Marking %d kept name(s) as seen", len(missing))
        decided = decided | missing

    return DecisionState(kept=kept, decided=decided)
