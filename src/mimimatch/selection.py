"""Candidate selection: category filtering, shuffling, next-candidate and progress.

All module-level functions are pure. SelectionEngine memoizes the
filtered and shuffled order per (dataset_version, category).
"""

from __future__ import annotations

import logging
import random
from collections.abc import Collection, Sequence
from dataclasses import dataclass
from typing import TypeVar

from mimimatch.schemas import CandidateRecord, Category

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Progress:
    """Seen/total counters for the current candidate list. Immutable."""

    seen: int
    total: int

    @property
    def remaining(self) -> int:
        """Number of candidates not decided yet."""
        return self.total - self.seen


# ── Pure helper functions ─────────────────────────────────────


def is_eligible(record: CandidateRecord, category: Category) -> bool:
    """Check whether a record is shown under the given category preference."""
    return (
        category == Category.NEUTRAL
        or record.category == Category.NEUTRAL
        or record.category == category
    )


def filter_by_category(
    dataset: Sequence[CandidateRecord], category: Category
) -> list[CandidateRecord]:
    """Return every record eligible under the category preference."""
    return [record for record in dataset if is_eligible(record, category)]


def shuffle(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Return a uniformly shuffled copy of items (Fisher-Yates).

    The input is never mutated.
    """
    rand = rng if rng is not None else random
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rand.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def next_candidate(
    shuffled: Sequence[CandidateRecord], decided: Collection[str]
) -> CandidateRecord | None:
    """Return the first record not yet decided, or None when exhausted."""
    for record in shuffled:
        if record.key not in decided:
            return record
    return None


def progress(
    shuffled: Sequence[CandidateRecord], decided: Collection[str]
) -> Progress:
    """Count how many records of the list are already decided."""
    seen = sum(1 for record in shuffled if record.key in decided)
    return Progress(seen=seen, total=len(shuffled))


# ── Memoized engine ───────────────────────────────────────────


class SelectionEngine:
    """Holds the dataset and the cached presentation order.

    The order is recomputed only when the dataset or the category
    changes, or when refresh() is called explicitly.
    """

    def __init__(
        self,
        dataset: Sequence[CandidateRecord],
        rng: random.Random | None = None,
    ) -> None:
        self._dataset = tuple(dataset)
        self._dataset_version = 0
        self._rng = rng
        self._cache_key: tuple[int, Category] | None = None
        self._order: tuple[CandidateRecord, ...] = ()

    @property
    def dataset(self) -> tuple[CandidateRecord, ...]:
        return self._dataset

    @property
    def dataset_version(self) -> int:
        return self._dataset_version

    def set_dataset(self, dataset: Sequence[CandidateRecord]) -> None:
        """Replace the dataset; the next lookup re-filters and re-shuffles."""
        self._dataset = tuple(dataset)
        self._dataset_version += 1

    def candidates(self, category: Category) -> tuple[CandidateRecord, ...]:
        """Return the filtered, shuffled order for the category (memoized)."""
        key = (self._dataset_version, category)
        if key != self._cache_key:
            self._order = tuple(
                shuffle(filter_by_category(self._dataset, category), self._rng)
            )
            self._cache_key = key
            logger.debug(
                "Shuffled %d candidates for %s (dataset v%d)",
                len(self._order),
                category.value,
                self._dataset_version,
            )
        return self._order

    def refresh(self) -> None:
        """Drop the cached order so the next lookup re-shuffles."""
        self._cache_key = None

    def next_candidate(
        self, category: Category, decided: Collection[str]
    ) -> CandidateRecord | None:
        return next_candidate(self.candidates(category), decided)

    def progress(self, category: Category, decided: Collection[str]) -> Progress:
        return progress(self.candidates(category), decided)
