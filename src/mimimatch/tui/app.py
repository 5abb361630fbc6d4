"""SwipeApp and SettingsScreen for the interactive name picker."""

from __future__ import annotations

from collections.abc import Callable

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.timer import Timer
from textual.widgets import Button, Input, OptionList, Static

from mimimatch.decisions import Scheduler
from mimimatch.schemas import Category, PreferenceConfig
from mimimatch.session import CurationSession
from mimimatch.share import ShareOutcome, ShareTarget, share_shortlist
from mimimatch.tui.state import SwipeDirection, View, clamp_index, toggle_view
from mimimatch.tui.widgets import ActionBar, NameCard, ProgressHeader, ShortlistPanel

_CATEGORY_LABELS = {
    Category.BOY: "Kluk",
    Category.GIRL: "Holka",
    Category.NEUTRAL: "Obojí",
}


class SettingsScreen(ModalScreen[PreferenceConfig | None]):
    """Modal screen for the surname and the category filter."""

    DEFAULT_CSS = """
    SettingsScreen {
        align: center middle;
    }
    #settings-dialog {
        width: 70;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }
    #settings-surname {
        margin-bottom: 1;
    }
    #settings-categories {
        height: 3;
        margin-bottom: 1;
    }
    """

    BINDINGS = [Binding("escape", "cancel", "Zpět")]

    def __init__(self, preferences: PreferenceConfig) -> None:
        self._initial_surname = preferences.surname
        self.selected_category = preferences.category
        super().__init__()

    def compose(self) -> ComposeResult:
        with Vertical(id="settings-dialog"):
            yield Static("Nastavení", classes="title")
            yield Static("Přizpůsobte si hledání jména.")
            yield Static("Příjmení rodiny:")
            yield Input(
                self._initial_surname,
                placeholder="Napište příjmení...",
                id="settings-surname",
            )
            yield Static("Pohlaví miminka:")
            with Horizontal(id="settings-categories"):
                for category, label in _CATEGORY_LABELS.items():
                    yield Button(
                        label,
                        id=f"category-{category.value.lower()}",
                        variant="primary" if category == self.selected_category else "default",
                    )
            yield Button("Pokračovat v objevování", id="settings-save", variant="success")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle category and save button clicks."""
        button_id = event.button.id or ""
        if button_id.startswith("category-"):
            self.selected_category = Category(button_id.removeprefix("category-").upper())
            for category in Category:
                button = self.query_one(f"#category-{category.value.lower()}", Button)
                button.variant = "primary" if category == self.selected_category else "default"
        elif button_id == "settings-save":
            self._save()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Enter in the surname field saves."""
        self._save()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def _save(self) -> None:
        surname = self.query_one("#settings-surname", Input).value
        self.dismiss(PreferenceConfig(surname=surname, category=self.selected_category))


class SwipeApp(App[None]):
    """Main TUI application for swiping through names."""

    TITLE = "MimiMatch"

    DEFAULT_CSS = """
    Screen {
        layout: vertical;
    }
    ProgressHeader {
        dock: top;
        height: 1;
        background: $accent;
        color: $text;
        padding: 0 1;
    }
    ActionBar {
        dock: bottom;
        height: 1;
        background: $accent;
        color: $text;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("l", "like", "Líbí"),
        Binding("right", "like", "Líbí", show=False),
        Binding("d", "discard", "Další"),
        Binding("left", "discard", "Další", show=False),
        Binding("m", "reshuffle", "Míchat"),
        Binding("s", "toggle_shortlist", "Seznam"),
        Binding("o", "open_settings", "Nastavení"),
        Binding("x", "remove_name", "Odebrat"),
        Binding("c", "copy_name", "Kopírovat"),
        Binding("p", "share_list", "Sdílet"),
        Binding("z", "reset_all", "Smazat vše"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(
        self,
        session_factory: Callable[[Scheduler], CurationSession],
        *,
        share_target: ShareTarget | None = None,
        show_settings: bool = True,
    ) -> None:
        self.current_view = View.DISCOVERY
        self.swipe_direction: SwipeDirection | None = None
        self.share_target = share_target
        self._show_settings = show_settings
        self.session = session_factory(self.schedule_settle)
        super().__init__()

    def compose(self) -> ComposeResult:
        yield ProgressHeader("", markup=False)
        yield NameCard()
        yield ShortlistPanel()
        yield ActionBar("", markup=False)

    def on_mount(self) -> None:
        """Initialize the UI after mounting."""
        self._refresh_ui()
        if self._show_settings:
            self.action_open_settings()

    def schedule_settle(self, delay: float, callback: Callable[[], None]) -> Timer:
        """Scheduler for the session's settle delay, run on the app's event loop."""

        def _settled() -> None:
            callback()
            if not self.session.transition_pending:
                self.swipe_direction = None
            self._refresh_ui()

        return self.set_timer(delay, _settled)

    # ── Actions ───────────────────────────────────────────

    def action_like(self) -> None:
        """Keep the current name."""
        if self.current_view == View.DISCOVERY and self.session.like_current():
            self._after_swipe(SwipeDirection.RIGHT)

    def action_discard(self) -> None:
        """Skip the current name."""
        if self.current_view == View.DISCOVERY and self.session.discard_current():
            self._after_swipe(SwipeDirection.LEFT)

    def action_reshuffle(self) -> None:
        """Shuffle the remaining names again."""
        if self.current_view == View.DISCOVERY:
            self.session.refresh_order()
            self._refresh_ui()

    def action_toggle_shortlist(self) -> None:
        """Switch between the card and the shortlist."""
        if self.current_view == View.SETTINGS:
            return
        self.current_view = toggle_view(self.current_view, View.SHORTLIST)
        self._refresh_ui()
        if self.current_view == View.SHORTLIST:
            self.query_one("#shortlist-options", OptionList).focus()

    def action_open_settings(self) -> None:
        """Open the settings modal."""
        if self.current_view == View.SETTINGS:
            return
        self.current_view = View.SETTINGS
        self.push_screen(
            SettingsScreen(self.session.preferences),
            callback=self._on_settings_closed,
        )

    def action_remove_name(self) -> None:
        """Remove the highlighted name from the shortlist."""
        name = self._highlighted_name()
        if name is not None:
            self.session.remove(name)
            self._refresh_ui()

    def action_copy_name(self) -> None:
        """Copy the highlighted full name to the clipboard."""
        name = self._highlighted_name()
        if name is not None:
            text = self.session.shortlist_name(name)
            self.copy_to_clipboard(text)
            self.notify(f"Zkopírováno: {text}")

    def action_share_list(self) -> None:
        """Share the shortlist, or copy it when sharing is unavailable."""
        if self.current_view != View.SHORTLIST or not self.session.kept:
            return
        outcome = share_shortlist(
            self.session.shortlist_text(),
            target=self.share_target,
            copy=self.copy_to_clipboard,
        )
        if outcome == ShareOutcome.COPIED:
            self.notify("Seznam zkopírován do schránky.")
        elif outcome == ShareOutcome.FAILED:
            self.notify("Sdílení se nezdařilo.", severity="error")

    def action_reset_all(self) -> None:
        """Forget every decision and start over."""
        if self.current_view == View.SETTINGS:
            return
        self.session.reset_all()
        self.swipe_direction = None
        self._refresh_ui()

    def action_quit_app(self) -> None:
        self.exit()

    # ── Internal ──────────────────────────────────────────

    def _after_swipe(self, direction: SwipeDirection) -> None:
        self.swipe_direction = direction if self.session.transition_pending else None
        self._refresh_ui()

    def _on_settings_closed(self, result: PreferenceConfig | None) -> None:
        """Handle settings modal result."""
        if result is not None:
            self.session.set_surname(result.surname)
            self.session.set_category(result.category)
        self.current_view = View.DISCOVERY
        self._refresh_ui()

    def _highlighted_name(self) -> str | None:
        if self.current_view != View.SHORTLIST:
            return None
        kept = self.session.kept
        options = self.query_one("#shortlist-options", OptionList)
        index = clamp_index(options.highlighted, len(kept))
        return kept[index] if index is not None else None

    def _refresh_ui(self) -> None:
        """Update all widgets to reflect the current session state."""
        if self.current_view == View.SETTINGS:
            return

        session = self.session
        surname = session.preferences.surname

        self.query_one(ProgressHeader).update_header(
            self.current_view, session.progress, len(session.kept)
        )
        self.query_one(ActionBar).update_actions(self.current_view)

        card = self.query_one(NameCard)
        shortlist = self.query_one(ShortlistPanel)
        card.display = self.current_view == View.DISCOVERY
        shortlist.display = self.current_view == View.SHORTLIST

        card.update_card(session.current_candidate, surname, self.swipe_direction)
        if self.current_view == View.SHORTLIST:
            options = self.query_one("#shortlist-options", OptionList)
            highlighted = clamp_index(options.highlighted, len(session.kept))
            shortlist.update_shortlist(session.kept, surname, highlighted)
