"""Error and info popups.

Both show a block of text until Enter or Esc dismisses them. An info popup
scrolls with the movement keys; an error popup is drawn over it when both
are open.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from textual.app import ComposeResult
from textual.containers import Container
from textual.widgets import Label, Static

from pskiller.tui.screens.overlay import OverlayScreen

if TYPE_CHECKING:
    from pskiller.state import AppState
    from pskiller.tui.widgets import KeyHandler


class PopupKind(Enum):
    ERROR = "error"
    INFO = "info"


class PopupScreen(OverlayScreen):
    """Modal text popup for an error or an info message."""

    DEFAULT_CSS = """
    PopupScreen {
        align: center middle;
    }

    PopupScreen > Container {
        width: 80%;
        max-width: 100;
        height: auto;
        max-height: 80%;
        background: $background;
        padding: 0;
    }

    PopupScreen.error > Container {
        border: solid $error;
    }

    PopupScreen.info > Container {
        border: solid $primary;
    }

    PopupScreen .popup-title {
        dock: top;
        width: 100%;
        height: 1;
        color: $background;
        text-align: center;
        text-style: bold;
    }

    PopupScreen.error .popup-title {
        background: $error;
    }

    PopupScreen.info .popup-title {
        background: $primary;
    }

    PopupScreen .popup-body {
        width: 100%;
        height: auto;
        padding: 1 2;
    }

    PopupScreen .footer-text {
        dock: bottom;
        width: 100%;
        height: 1;
        text-align: center;
        color: $text-muted;
    }
    """

    def __init__(self, state: AppState, on_key_pressed: KeyHandler, kind: PopupKind) -> None:
        super().__init__(state, on_key_pressed)
        self.kind = kind
        self.add_class(kind.value)

    def compose(self) -> ComposeResult:
        title = "Error" if self.kind is PopupKind.ERROR else "Info"
        with Container():
            yield Label(title, classes="popup-title")
            yield Static("", markup=False, classes="popup-body", id="popup-body")
            yield Label("`Enter` OK", classes="footer-text")

    def message_lines(self) -> list[str]:
        if self.kind is PopupKind.ERROR:
            return (self.state.error_message or "").splitlines()
        lines = (self.state.info_message or "").splitlines()
        return lines[self.state.info_scroll :]

    def render_state(self) -> None:
        self.query_one("#popup-body", Static).update("\n".join(self.message_lines()))
