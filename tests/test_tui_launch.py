"""Tests for mimimatch.tui.__init__ (launch_swipe function)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from mimimatch.config import AppConfig

_CONFIG = AppConfig(settle_delay=0)


class TestLaunchSwipe:
    """Tests for launch_swipe in tui/__init__.py."""

    @patch("mimimatch.tui.SwipeApp")
    def test_returns_kept_names(self, mock_app_cls: MagicMock) -> None:
        mock_app = MagicMock()
        mock_app.session.kept = ("Eva", "Sam")
        mock_app_cls.return_value = mock_app

        from mimimatch.tui import launch_swipe

        assert launch_swipe(_CONFIG) == ("Eva", "Sam")
        mock_app.run.assert_called_once()
        mock_app.session.close.assert_called_once()

    @patch("mimimatch.tui.SwipeApp")
    def test_show_settings_passed(self, mock_app_cls: MagicMock) -> None:
        from mimimatch.tui import launch_swipe

        launch_swipe(_CONFIG, show_settings=False)
        assert mock_app_cls.call_args.kwargs["show_settings"] is False

    @patch("mimimatch.tui.open_session")
    @patch("mimimatch.tui.SwipeApp")
    def test_factory_opens_session_with_scheduler(
        self, mock_app_cls: MagicMock, mock_open: MagicMock
    ) -> None:
        from mimimatch.tui import launch_swipe

        launch_swipe(_CONFIG)
        factory = mock_app_cls.call_args.args[0]
        scheduler = MagicMock()
        assert factory(scheduler) is mock_open.return_value
        mock_open.assert_called_once_with(_CONFIG, scheduler=scheduler)

    @patch("mimimatch.tui.SwipeApp")
    def test_session_closed_on_error(self, mock_app_cls: MagicMock) -> None:
        mock_app = MagicMock()
        mock_app.run.side_effect = RuntimeError("boom")
        mock_app_cls.return_value = mock_app

        from mimimatch.tui import launch_swipe

        with pytest.raises(RuntimeError):
            launch_swipe(_CONFIG)
        mock_app.session.close.assert_called_once()
