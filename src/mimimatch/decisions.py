"""Decision tracking: kept and decided name sets.

DecisionState is an immutable snapshot and all pure transitions return
new instances. DecisionStore owns the current snapshot and adds the
swipe cooldown: like/discard are applied after a settle delay, and
repeated like/discard calls are ignored while one is pending.

Invariant: every kept key is also decided.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY = 0.4  # seconds, matches the card exit animation

Scheduler = Callable[[float, Callable[[], None]], object]
ChangeCallback = Callable[["DecisionState", "DecisionState"], None]
Transition = Callable[["DecisionState", str], "DecisionState"]


@dataclass(frozen=True, slots=True)
class DecisionState:
    """Kept names (in like order) and all decided names. Immutable."""

    kept: tuple[str, ...] = ()
    decided: frozenset[str] = field(default_factory=frozenset)

    def is_decided(self, key: str) -> bool:
        return key in self.decided

    def is_kept(self, key: str) -> bool:
        return key in self.kept


# ── Pure transitions ──────────────────────────────────────────


def apply_like(state: DecisionState, key: str) -> DecisionState:
    """Return new state with key kept and decided (idempotent)."""
    kept = state.kept if key in state.kept else (*state.kept, key)
    return DecisionState(kept=kept, decided=state.decided | {key})


def apply_discard(state: DecisionState, key: str) -> DecisionState:
    """Return new state with key decided but not kept."""
    return DecisionState(kept=state.kept, decided=state.decided | {key})


def apply_remove(state: DecisionState, key: str) -> DecisionState:
    """Return new state without key in either set.

    The name becomes a candidate again.
    """
    return DecisionState(
        kept=tuple(k for k in state.kept if k != key),
        decided=state.decided - {key},
    )


def apply_reset() -> DecisionState:
    """Return the empty state."""
    return DecisionState()


def thread_timer_scheduler(delay: float, callback: Callable[[], None]) -> object:
    """Run callback once after delay seconds on a daemon timer thread."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


# ── Store ─────────────────────────────────────────────────────


class DecisionStore:
    """Mutable holder of the DecisionState with the swipe cooldown.

    like() and discard() set transition_pending, then apply their change
    once the scheduler fires after settle_delay. remove() and reset_all()
    are applied at once and ignore the cooldown. If they target a pending
    transition (same key, or any key for reset) that transition is
    dropped, so the later call wins.

    All state changes go through one lock, so timers firing on another
    thread cannot lose updates. on_change(old, new) is invoked under the
    lock after every change, in mutation order.
    """

    def __init__(
        self,
        initial: DecisionState | None = None,
        *,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        scheduler: Scheduler | None = None,
        on_change: ChangeCallback | None = None,
    ) -> None:
        self._state = initial if initial is not None else DecisionState()
        self._settle_delay = settle_delay
        self._scheduler = scheduler if scheduler is not None else thread_timer_scheduler
        self._on_change = on_change
        self._lock = threading.RLock()
        self._tokens = itertools.count(1)
        self._pending: tuple[int, str, Transition] | None = None

    @property
    def state(self) -> DecisionState:
        with self._lock:
            return self._state

    @property
    def kept(self) -> tuple[str, ...]:
        return self.state.kept

    @property
    def decided(self) -> frozenset[str]:
        return self.state.decided

    @property
    def transition_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    @property
    def pending_key(self) -> str | None:
        """Key of the like/discard waiting for its settle delay, if any."""
        with self._lock:
            return self._pending[1] if self._pending is not None else None

    # ── Guarded transitions ───────────────────────────────────

    def like(self, key: str) -> bool:
        """Keep key after the settle delay. Returns False if ignored."""
        return self._begin(key, apply_like)

    def discard(self, key: str) -> bool:
        """Mark key decided after the settle delay. Returns False if ignored."""
        return self._begin(key, apply_discard)

    def settle_pending(self) -> None:
        """Apply a pending like/discard now instead of waiting for its timer."""
        with self._lock:
            if self._pending is not None:
                self._settle(self._pending[0])

    # ── Unguarded transitions ─────────────────────────────────

    def remove(self, key: str) -> None:
        """Drop key from kept and decided, regardless of the cooldown."""
        with self._lock:
            if self._pending is not None and self._pending[1] == key:
                logger.debug("Dropping pending transition for %s", key)
                self._pending = None
            self._commit(apply_remove(self._state, key))

    def reset_all(self) -> None:
        """Clear both sets, regardless of the cooldown."""
        with self._lock:
            if self._pending is not None:
                logger.debug("Dropping pending transition for %s", self._pending[1])
                self._pending = None
            self._commit(apply_reset())

    # ── Internal ──────────────────────────────────────────────

    def _begin(self, key: str, transition: Transition) -> bool:
        with self._lock:
            if self._pending is not None:
                logger.debug(
                    "Ignoring %s for %s: transition pending", transition.__name__, key
                )
                return False
            token = next(self._tokens)
            self._pending = (token, key, transition)
            if self._settle_delay <= 0:
                self._settle(token)
                return True
        self._scheduler(self._settle_delay, partial(self._settle, token))
        return True

    def _settle(self, token: int) -> None:
        with self._lock:
            if self._pending is None or self._pending[0] != token:
                return
            _, key, transition = self._pending
            self._pending = None
            self._commit(transition(self._state, key))

    def _commit(self, new: DecisionState) -> None:
        old = self._state
        if new == old:
            return
        self._state = new
        if self._on_change is not None:
            self._on_change(old, new)
