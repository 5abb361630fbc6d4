"""Shared test fixtures for mimimatch tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from mimimatch.schemas import CandidateRecord, Category
from mimimatch.storage import MemoryStore


class ManualScheduler:
    """Scheduler that holds callbacks until the test fires them."""

    def __init__(self) -> None:
        self.calls: list[tuple[float, Callable[[], None]]] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> None:
        self.calls.append((delay, callback))

    def fire_all(self) -> None:
        calls, self.calls = self.calls, []
        for _, callback in calls:
            callback()


@pytest.fixture
def small_dataset() -> tuple[CandidateRecord, ...]:
    """Jan (boy), Eva (girl), Sam (neutral)."""
    return (
        CandidateRecord(category=Category.BOY, name="Jan"),
        CandidateRecord(category=Category.GIRL, name="Eva", fact="Hebrejsky život."),
        CandidateRecord(category=Category.NEUTRAL, name="Sam"),
    )


@pytest.fixture
def mixed_dataset() -> tuple[CandidateRecord, ...]:
    """Four names per category."""
    boys = [CandidateRecord(category=Category.BOY, name=f"Boy{i}") for i in range(4)]
    girls = [CandidateRecord(category=Category.GIRL, name=f"Girl{i}") for i in range(4)]
    both = [CandidateRecord(category=Category.NEUTRAL, name=f"Both{i}") for i in range(4)]
    return (*boys, *girls, *both)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def names_yaml(tmp_path: Path) -> Path:
    """A small dataset file in the YAML format."""
    path = tmp_path / "names.yaml"
    path.write_text(
        "names:\n"
        "  - {name: Jan, gender: MUZ}\n"
        "  - {name: Eva, gender: ZENA, fact: 'Hebrejsky život.'}\n"
        "  - {name: Sam, gender: NEUTRALNI}\n",
        encoding="utf-8",
    )
    return path
