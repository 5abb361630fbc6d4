"""Custom widgets for the swipe TUI: ProgressHeader, NameCard, ShortlistPanel, ActionBar."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Container
from textual.widgets import OptionList, Static

from mimimatch.preferences import display_name, shortlist_name
from mimimatch.schemas import CandidateRecord
from mimimatch.selection import Progress
from mimimatch.tui.state import SwipeDirection, View, progress_label

APP_NAME = "MimiMatch"


class ProgressHeader(Static):
    """Top bar with the app name, seen/total counter and shortlist size."""

    def update_header(self, view: View, progress: Progress, kept_count: int) -> None:
        """Refresh the header text."""
        parts = [f" {APP_NAME}"]
        if view == View.DISCOVERY:
            parts.append(progress_label(progress))
        if kept_count and view != View.SHORTLIST:
            parts.append(f"♥ {kept_count}")
        self.update("  |  ".join(parts))


class NameCard(Container):
    """Central card showing the current candidate."""

    DEFAULT_CSS = """
    NameCard {
        height: 1fr;
        padding: 1 2;
        align: center middle;
    }
    #card-content {
        width: 1fr;
        content-align: center middle;
        text-align: center;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("", id="card-content", markup=False)

    def render_card_text(
        self,
        candidate: CandidateRecord | None,
        surname: str,
        swipe: SwipeDirection | None = None,
    ) -> str:
        """Build the display text for a candidate (pure function)."""
        if candidate is None:
            return "\n".join(
                [
                    "To je vše!",
                    "",
                    "Prošli jste všechna jména v této kategorii.",
                    "[Z] Začít znovu",
                ]
            )

        lines = []
        if swipe == SwipeDirection.RIGHT:
            lines.append("♥ LÍBÍ")
        elif swipe == SwipeDirection.LEFT:
            lines.append("✕ DALŠÍ")
        lines += ["", display_name(candidate.name, surname), ""]
        if candidate.fact:
            lines.append(candidate.fact)
        return "\n".join(lines)

    def update_card(
        self,
        candidate: CandidateRecord | None,
        surname: str,
        swipe: SwipeDirection | None = None,
    ) -> None:
        """Update the card with a new candidate."""
        content = self.query_one("#card-content", Static)
        content.update(self.render_card_text(candidate, surname, swipe))


class ShortlistPanel(Container):
    """List of kept names."""

    DEFAULT_CSS = """
    ShortlistPanel {
        height: 1fr;
        padding: 1 2;
    }
    #shortlist-title {
        height: 2;
    }
    #shortlist-options {
        height: 1fr;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("", id="shortlist-title", markup=False)
        yield OptionList(id="shortlist-options")

    def render_title(self, count: int) -> str:
        if count == 0:
            return "Můj výběr\nZatím jste nevybrali žádná jména."
        return f"Můj výběr\n{count} vybraných jmen"

    def update_shortlist(
        self, kept: tuple[str, ...], surname: str, highlighted: int | None
    ) -> None:
        """Replace the listed names and restore the cursor."""
        self.query_one("#shortlist-title", Static).update(self.render_title(len(kept)))
        options = self.query_one("#shortlist-options", OptionList)
        options.clear_options()
        options.add_options([shortlist_name(name, surname) for name in kept])
        options.highlighted = highlighted


_VIEW_ACTIONS = {
    View.DISCOVERY: " [L/→] Líbí  [D/←] Další  [M]íchat  [S]eznam  [O] Nastavení  [Q]uit",
    View.SHORTLIST: (
        " [X] Odebrat  [C] Kopírovat  [P] Sdílet  [Z] Smazat vše  [S] Zpět  [Q]uit"
    ),
    View.SETTINGS: " [Enter] Uložit  [Esc] Zpět",
}


class ActionBar(Static):
    """Bottom bar showing key bindings for the current view."""

    def update_actions(self, view: View) -> None:
        """Refresh the action bar text."""
        self.update(_VIEW_ACTIONS[view])
