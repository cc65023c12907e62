"""Main Textual application for pskiller.

This module provides:
- PsKillerApp: The main application class
- run_app: Wire up the OS readers, the dispatcher and the signal listener,
  then run the app until the user quits

The app holds no state of its own. Keys are translated into input actions
and applied to AppState, timers poll the OS, and after every change the
whole view is redrawn from the state, including which overlay is shown.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import psutil
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical

from pskiller import __version__
from pskiller.actions import ActionDispatcher
from pskiller.collectors import PsutilSnapshotProvider
from pskiller.engine import clamp_cursor
from pskiller.keys import translate
from pskiller.models import Focus
from pskiller.signals import SignalListener
from pskiller.state import AppState
from pskiller.tui.screens import ActionMenuScreen, OverlayScreen, PopupKind, PopupScreen
from pskiller.tui.widgets import FilterBar, InfoPanel, ProcessTable, SystemPanel

if TYPE_CHECKING:
    from pskiller.config import Config

DEFAULT_INTERVAL = 2.0
SIGNAL_CHECK_INTERVAL = 0.2

# Overlay identifiers, topmost first
OVERLAY_ERROR = "error"
OVERLAY_INFO = "info"
OVERLAY_MENU = "menu"


class PsKillerApp(App[None]):
    """pskiller TUI application.

    Attributes:
        state: The session state every widget is drawn from
    """

    TITLE = "pskiller"
    SUB_TITLE = f"v{__version__}"

    CSS = """
    Screen {
        background: $surface;
    }

    #main {
        width: 100%;
        height: 100%;
    }

    #left {
        width: 1fr;
        height: 100%;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "request_quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        state: AppState,
        config: Config | None = None,
        signal_listener: SignalListener | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the application.

        Args:
            state: Session state; polled on mount if it has no data yet
            config: Configuration, for the poll interval and mouse support
            signal_listener: Source of termination signals to honour
            logger: Logger for the UI layer
        """
        super().__init__()
        self.state = state
        self._config = config
        self._signal_listener = signal_listener
        self._log = logger or logging.getLogger(__name__)
        self._interval = config.interval if config else DEFAULT_INTERVAL
        self._mouse_enabled = config.tui.mouse_enabled if config else True
        self._overlay: OverlayScreen | None = None
        self._overlay_kind: str | None = None
        self._table = ProcessTable(self.handle_key, self.select_row)
        self._filter_bar = FilterBar()
        self._system_panel = SystemPanel()

    @property
    def overlay_kind(self) -> str | None:
        """Identifier of the overlay currently shown, if any."""
        return self._overlay_kind

    def compose(self) -> ComposeResult:
        with Horizontal(id="main"):
            with Vertical(id="left"):
                yield InfoPanel()
                yield self._table
                yield self._filter_bar
            yield self._system_panel

    def on_mount(self) -> None:
        if self.state.system_history.current is None:
            self.state.start()
        self._table.focus()
        self.set_interval(self._interval, self._tick, name="poll")
        if self._signal_listener is not None:
            self.set_interval(SIGNAL_CHECK_INTERVAL, self._check_signals, name="signals")
        self._log.info("pskiller v%s started, polling every %ss", __version__, self._interval)
        self.refresh_view()
        # Column widths depend on the laid-out table size
        self.call_after_refresh(self.refresh_view)

    def _tick(self) -> None:
        try:
            self.state.poll()
        except (OSError, psutil.Error) as e:
            self._log.warning("Poll failed: %s", e)
            return
        self.refresh_view()

    def _check_signals(self) -> None:
        if self._signal_listener is None:
            return
        if self._signal_listener.poll() is not None:
            self.state.quit()
            self.refresh_view()

    def handle_key(self, key: str, character: str | None) -> None:
        """Apply a key press to the state and redraw.

        Args:
            key: Textual key name
            character: Printable character of the key, if any
        """
        translated = translate(key, character, self.state.focus)
        if translated is None:
            return
        action, text = translated
        self.state.handle(action, text)
        self.refresh_view()

    def select_row(self, row: int) -> None:
        """Move the process cursor to a clicked row."""
        state = self.state
        if not self._mouse_enabled or state.has_error or state.has_info:
            return
        if state.focus not in (Focus.BROWSE, Focus.PROCESS_FILTER):
            return
        state.process_cursor = clamp_cursor(row, len(state.processes))
        self.refresh_view()

    def action_request_quit(self) -> None:
        self.state.quit()
        self.refresh_view()

    def _wanted_overlay(self) -> str | None:
        if self.state.has_error:
            return OVERLAY_ERROR
        if self.state.has_info:
            return OVERLAY_INFO
        if self.state.focus is Focus.SIGNAL_PICK:
            return OVERLAY_MENU
        return None

    def _make_overlay(self, kind: str) -> OverlayScreen:
        if kind == OVERLAY_MENU:
            return ActionMenuScreen(self.state, self.handle_key)
        popup = PopupKind.ERROR if kind == OVERLAY_ERROR else PopupKind.INFO
        return PopupScreen(self.state, self.handle_key, popup)

    def _sync_overlay(self) -> None:
        wanted = self._wanted_overlay()
        if wanted == self._overlay_kind:
            if self._overlay is not None:
                self._overlay.refresh_content()
            return
        if self._overlay is not None:
            self.pop_screen()
            self._overlay = None
        self._overlay_kind = wanted
        if wanted is not None:
            self._overlay = self._make_overlay(wanted)
            self.push_screen(self._overlay)

    def refresh_view(self) -> None:
        """Redraw every panel and the overlay from the state."""
        if self.state.should_quit:
            self.exit()
            return
        self._table.show(self.state)
        self._filter_bar.show(self.state)
        self._system_panel.show(self.state)
        self._sync_overlay()


def run_app(config: Config, logger: logging.Logger | None = None) -> None:
    """Create and run the pskiller TUI.

    SIGINT and SIGTERM are caught for the lifetime of the app and turned
    into a clean quit.

    Args:
        config: Validated configuration
        logger: Application logger
    """
    log = logger or logging.getLogger(__name__)
    provider = PsutilSnapshotProvider(logger=log.getChild("collectors"))
    dispatcher = ActionDispatcher(
        timeout=config.actions.command_timeout,
        logger=log.getChild("actions"),
    )
    state = AppState(
        provider,
        dispatcher=dispatcher,
        menu_actions=config.menu_actions(),
        ordering=config.ordering,
        grouped=config.processes.group_by_exe,
        filter_text=config.processes.default_filter,
        logger=log.getChild("state"),
    )

    with SignalListener(logger=log.getChild("signals")) as listener:
        app = PsKillerApp(state, config=config, signal_listener=listener, logger=log.getChild("tui"))
        app.run(mouse=config.tui.mouse_enabled)
