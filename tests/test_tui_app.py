"""Tests for pskiller TUI application.

This module tests:
- PsKillerApp startup and the initial poll
- Key routing from the table and the overlays to the application state
- Overlays following the state (action menu, error and info popups)
- Quitting via Esc, Ctrl+C and termination signals
"""

import asyncio
import signal

import pytest

from conftest import FakeSnapshotProvider
from pskiller import __version__
from pskiller.actions import ActionDispatcher, ActionKind, ActionResult, MenuAction
from pskiller.config import Config, TUIConfig
from pskiller.models import Focus, ProcessSample
from pskiller.signals import SignalListener
from pskiller.state import AppState
from pskiller.tui import PsKillerApp
from pskiller.tui.screens import ActionMenuScreen, PopupKind, PopupScreen
from pskiller.tui.widgets import FilterBar, ProcessTable, SystemPanel

FAILING = MenuAction("Fail", ActionKind.SEND_SIGNAL, "false ")


class FailingDispatcher(ActionDispatcher):
    """Dispatcher whose commands always fail."""

    def run_command(self, command: str) -> ActionResult:
        return ActionResult(success=False, error=f"Failed to execute command: {command!r}, exit status: 1")


def _app(samples: list[ProcessSample], **kwargs: object) -> PsKillerApp:
    state = AppState(FakeSnapshotProvider(process_polls=[samples]))
    return PsKillerApp(state, **kwargs)  # type: ignore[arg-type]


class TestPsKillerAppInstantiation:
    """Tests for PsKillerApp instantiation."""

    def test_app_title(self, samples: list[ProcessSample]) -> None:
        """Test app has correct title and version."""
        app = _app(samples)
        assert app.TITLE == "pskiller"
        assert __version__ in app.SUB_TITLE


class TestPsKillerAppLifecycle:
    """Tests for startup and shutdown using Textual's pilot."""

    @pytest.mark.asyncio
    async def test_startup_polls_and_renders(self, samples: list[ProcessSample]) -> None:
        """Test the first poll happens on mount and fills the table."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.pause()
            assert app.state.provider.process_reads >= 1
            table = app.query_one(ProcessTable)
            assert table.row_count == 5
            assert table.has_focus
            assert len(app.query(SystemPanel)) == 1
            assert len(app.query(FilterBar)) == 1

    @pytest.mark.asyncio
    async def test_escape_quits_from_browse(self, samples: list[ProcessSample]) -> None:
        """Test Esc while browsing ends the app."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.press("escape")
            assert app.state.should_quit

    @pytest.mark.asyncio
    async def test_ctrl_c_quits(self, samples: list[ProcessSample]) -> None:
        """Test Ctrl+C ends the app."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.press("ctrl+c")
            assert app.state.should_quit

    @pytest.mark.asyncio
    async def test_signal_quits(self, samples: list[ProcessSample]) -> None:
        """Test a pending termination signal ends the app."""
        listener = SignalListener()
        app = _app(samples, signal_listener=listener)
        async with app.run_test():
            listener.notify(signal.SIGTERM)
            await asyncio.sleep(0.5)
            assert app.state.should_quit


class TestKeyRouting:
    """Tests for keys reaching the application state."""

    @pytest.mark.asyncio
    async def test_arrows_move_cursor(self, samples: list[ProcessSample]) -> None:
        """Test arrows move the state cursor and the table follows."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.press("down", "down")
            await pilot.pause()
            assert app.state.process_cursor == 2
            assert app.query_one(ProcessTable).cursor_row == 2

    @pytest.mark.asyncio
    async def test_tab_cycles_focus(self, samples: list[ProcessSample]) -> None:
        """Test Tab changes the state focus rather than the widget focus."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.press("tab")
            await pilot.pause()
            assert app.state.focus is Focus.SYSTEM_STATS
            assert app.query_one(SystemPanel).has_class("active")
            assert app.query_one(ProcessTable).has_focus

    @pytest.mark.asyncio
    async def test_typing_filters(self, samples: list[ProcessSample]) -> None:
        """Test Ctrl+F followed by text filters the table."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.press("ctrl+f", "g", "p", "u")
            await pilot.pause()
            assert app.state.focus is Focus.PROCESS_FILTER
            assert app.state.filter_text == "gpu"
            assert app.query_one(ProcessTable).row_count == 1

    @pytest.mark.asyncio
    async def test_grouping_key(self, samples: list[ProcessSample]) -> None:
        """Test G groups the table by executable."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.press("g")
            await pilot.pause()
            assert app.state.grouped
            assert app.query_one(ProcessTable).row_count == 4


class TestOverlays:
    """Tests for overlays following the state."""

    @pytest.mark.asyncio
    async def test_enter_opens_menu(self, samples: list[ProcessSample]) -> None:
        """Test Enter shows the action menu and Esc closes it."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.press("enter")
            await pilot.pause()
            assert app.state.focus is Focus.SIGNAL_PICK
            assert isinstance(app.screen, ActionMenuScreen)
            assert app.overlay_kind == "menu"

            await pilot.press("escape")
            await pilot.pause()
            assert app.state.focus is Focus.PROCESS_FILTER
            assert app.overlay_kind is None
            assert not isinstance(app.screen, ActionMenuScreen)

    @pytest.mark.asyncio
    async def test_menu_navigation(self, samples: list[ProcessSample]) -> None:
        """Test arrows inside the menu move the action cursor."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.press("enter", "down", "down")
            await pilot.pause()
            assert app.state.action_cursor == 2
            assert app.state.process_cursor == 0

    @pytest.mark.asyncio
    async def test_details_popup(self, samples: list[ProcessSample]) -> None:
        """Test running the details action shows the info popup."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.press("enter")
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()
            assert app.state.has_info
            assert isinstance(app.screen, PopupScreen)
            assert app.screen.kind is PopupKind.INFO
            assert app.state.focus is Focus.BROWSE

            await pilot.press("enter")
            await pilot.pause()
            assert not app.state.has_info
            assert app.overlay_kind is None

    @pytest.mark.asyncio
    async def test_help_popup_scrolls(self, samples: list[ProcessSample]) -> None:
        """Test ? opens help and arrows scroll it."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.press("question_mark")
            await pilot.pause()
            assert app.overlay_kind == "info"
            await pilot.press("down")
            await pilot.pause()
            assert app.state.info_scroll == 1
            assert app.state.process_cursor == 0

    @pytest.mark.asyncio
    async def test_error_popup(self, samples: list[ProcessSample]) -> None:
        """Test a failed signal shows the error popup over the table."""
        state = AppState(
            FakeSnapshotProvider(process_polls=[samples]),
            dispatcher=FailingDispatcher(),
            menu_actions=[FAILING],
        )
        app = PsKillerApp(state)
        async with app.run_test() as pilot:
            await pilot.press("enter")
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()
            assert state.has_error
            assert isinstance(app.screen, PopupScreen)
            assert app.screen.kind is PopupKind.ERROR

            await pilot.press("escape")
            await pilot.pause()
            assert not state.has_error
            assert not state.should_quit
            assert app.overlay_kind is None


class TestMouse:
    """Tests for row selection by mouse."""

    @pytest.mark.asyncio
    async def test_select_row(self, samples: list[ProcessSample]) -> None:
        """Test a clicked row becomes the selection."""
        app = _app(samples)
        async with app.run_test() as pilot:
            app.select_row(3)
            await pilot.pause()
            assert app.state.process_cursor == 3
            app.select_row(99)
            assert app.state.process_cursor == 4

    @pytest.mark.asyncio
    async def test_mouse_disabled(self, samples: list[ProcessSample]) -> None:
        """Test clicks are ignored when mouse support is off."""
        app = _app(samples, config=Config(tui=TUIConfig(mouse_enabled=False)))
        async with app.run_test() as pilot:
            app.select_row(3)
            await pilot.pause()
            assert app.state.process_cursor == 0

    @pytest.mark.asyncio
    async def test_click_ignored_in_menu(self, samples: list[ProcessSample]) -> None:
        """Test clicks do not move the selection while the menu is open."""
        app = _app(samples)
        async with app.run_test() as pilot:
            await pilot.press("enter")
            await pilot.pause()
            app.select_row(3)
            assert app.state.process_cursor == 0
