"""Interactive name picker TUI for mimimatch.

Public API: launch_swipe() runs the picker on a session built from config.
"""

from __future__ import annotations

from mimimatch.config import AppConfig
from mimimatch.session import open_session
from mimimatch.tui.app import SwipeApp


def launch_swipe(config: AppConfig, *, show_settings: bool = True) -> tuple[str, ...]:
    """Launch the interactive picker and return the kept names.

    The session is closed on exit, so a swipe still settling is applied
    and every pending write is flushed.
    """
    app = SwipeApp(
        lambda scheduler: open_session(config, scheduler=scheduler),
        show_settings=show_settings,
    )
    try:
        app.run()
    finally:
        app.session.close()
    return app.session.kept
