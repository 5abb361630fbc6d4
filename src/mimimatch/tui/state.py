"""View state and pure helper functions for the swipe TUI."""

from __future__ import annotations

from enum import StrEnum

from mimimatch.selection import Progress


class View(StrEnum):
    """Screen area currently shown."""

    DISCOVERY = "discovery"
    SHORTLIST = "shortlist"
    SETTINGS = "settings"


class SwipeDirection(StrEnum):
    LEFT = "left"
    RIGHT = "right"


def toggle_view(current: View, target: View) -> View:
    """Open target, or go back to discovery if target is already open."""
    return View.DISCOVERY if current == target else target


def progress_label(progress: Progress) -> str:
    """Counter shown in the header, e.g. '3 z 20'."""
    return f"{progress.seen} z {progress.total}"


def clamp_index(index: int | None, count: int) -> int | None:
    """Keep a list cursor inside [0, count), or None for an empty list."""
    if count == 0:
        return None
    if index is None:
        return 0
    return max(0, min(index, count - 1))
