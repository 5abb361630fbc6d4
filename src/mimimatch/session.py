"""Curation session: the application state shared by the CLI and the TUI.

A session is built explicitly from storage (open_session) and owns the
SelectionEngine, the DecisionStore and the preferences. Every mutation
is persisted through a BackgroundWriter; only the entries affected by
the change are written.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from pathlib import Path

from mimimatch.config import AppConfig
from mimimatch.dataset import load_dataset
from mimimatch.decisions import (
    DEFAULT_SETTLE_DELAY,
    DecisionState,
    DecisionStore,
    Scheduler,
)
from mimimatch.preferences import (
    display_name,
    set_category,
    set_label,
    shortlist_name,
    shortlist_text,
)
from mimimatch.schemas import CandidateRecord, Category, PreferenceConfig
from mimimatch.selection import Progress, SelectionEngine
from mimimatch.storage import (
    LIKED_KEY,
    SEEN_KEY,
    SETTINGS_KEY,
    BackgroundWriter,
    JsonFileStore,
    KeyValueStore,
    dump_liked,
    dump_preferences,
    dump_seen,
    load_decisions,
    load_preferences,
)

logger = logging.getLogger(__name__)


class CurationSession:
    """Preferences, candidate order and decisions for one process run."""

    def __init__(
        self,
        dataset: Sequence[CandidateRecord],
        store: KeyValueStore,
        *,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        scheduler: Scheduler | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._preferences = load_preferences(store)
        initial = load_decisions(store)
        self._engine = SelectionEngine(dataset, rng=rng)
        self._writer = BackgroundWriter(store)
        self._decisions = DecisionStore(
            initial,
            settle_delay=settle_delay,
            scheduler=scheduler,
            on_change=self._persist_decisions,
        )
        logger.info(
            "Session opened: %d names, %d kept, %d seen",
            len(self._engine.dataset),
            len(self._decisions.kept),
            len(self._decisions.decided),
        )

    # ── Queries ───────────────────────────────────────────────

    @property
    def dataset(self) -> tuple[CandidateRecord, ...]:
        return self._engine.dataset

    @property
    def preferences(self) -> PreferenceConfig:
        return self._preferences

    @property
    def decisions(self) -> DecisionState:
        return self._decisions.state

    @property
    def kept(self) -> tuple[str, ...]:
        return self._decisions.kept

    @property
    def candidates(self) -> tuple[CandidateRecord, ...]:
        """Filtered, shuffled names for the current category."""
        return self._engine.candidates(self._preferences.category)

    @property
    def current_candidate(self) -> CandidateRecord | None:
        return self._engine.next_candidate(
            self._preferences.category, self._decisions.decided
        )

    @property
    def progress(self) -> Progress:
        return self._engine.progress(
            self._preferences.category, self._decisions.decided
        )

    @property
    def exhausted(self) -> bool:
        """True when every candidate of the current category is decided."""
        return self.current_candidate is None

    @property
    def transition_pending(self) -> bool:
        return self._decisions.transition_pending

    def display_name(self, name: str) -> str:
        return display_name(name, self._preferences.surname)

    def shortlist_name(self, name: str) -> str:
        return shortlist_name(name, self._preferences.surname)

    def shortlist_text(self) -> str:
        return shortlist_text(self.kept, self._preferences.surname)

    # ── Decisions ─────────────────────────────────────────────

    def like_current(self) -> bool:
        """Like the displayed candidate. Returns False if nothing happened."""
        candidate = self.current_candidate
        if candidate is None:
            return False
        return self._decisions.like(candidate.key)

    def discard_current(self) -> bool:
        """Discard the displayed candidate. Returns False if nothing happened."""
        candidate = self.current_candidate
        if candidate is None:
            return False
        return self._decisions.discard(candidate.key)

    def like(self, key: str) -> bool:
        return self._decisions.like(key)

    def discard(self, key: str) -> bool:
        return self._decisions.discard(key)

    def remove(self, key: str) -> None:
        self._decisions.remove(key)

    def reset_all(self) -> None:
        self._decisions.reset_all()

    def settle_pending(self) -> None:
        self._decisions.settle_pending()

    # ── Preferences ───────────────────────────────────────────

    def set_category(self, category: Category) -> None:
        """Change the category filter. Decided names stay decided."""
        self._update_preferences(set_category(self._preferences, category))

    def set_surname(self, surname: str) -> None:
        self._update_preferences(set_label(self._preferences, surname))

    def refresh_order(self) -> None:
        """Re-shuffle the candidates of the current category."""
        self._engine.refresh()

    # ── Lifecycle ─────────────────────────────────────────────

    def flush(self) -> None:
        """Wait until all queued writes have reached the store."""
        self._writer.flush()

    def close(self) -> None:
        """Apply a pending swipe, then flush and stop the writer."""
        self._decisions.settle_pending()
        self._writer.close()

    # ── Internal ──────────────────────────────────────────────

    def _update_preferences(self, new: PreferenceConfig) -> None:
        if new == self._preferences:
            return
        self._preferences = new
        self._writer.submit(SETTINGS_KEY, dump_preferences(new))

    def _persist_decisions(self, old: DecisionState, new: DecisionState) -> None:
        if new.kept != old.kept:
            self._writer.submit(LIKED_KEY, dump_liked(new))
        if new.decided != old.decided:
            self._writer.submit(SEEN_KEY, dump_seen(new))


def open_session(
    config: AppConfig,
    *,
    store: KeyValueStore | None = None,
    scheduler: Scheduler | None = None,
) -> CurationSession:
    """Build a session from config: load the dataset and the stored state.

    Raises:
        FileNotFoundError: If config.dataset_path does not exist.
        DatasetError: If the dataset file is malformed.
    """
    dataset_path = Path(config.dataset_path) if config.dataset_path else None
    dataset = load_dataset(dataset_path)
    rng = random.Random(config.shuffle_seed) if config.shuffle_seed is not None else None
    return CurationSession(
        dataset,
        store if store is not None else JsonFileStore(config.data_path),
        settle_delay=config.settle_delay,
        scheduler=scheduler,
        rng=rng,
    )
