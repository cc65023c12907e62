"""Base class for pskiller's modal overlays."""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual import events
from textual.screen import ModalScreen

if TYPE_CHECKING:
    from pskiller.state import AppState
    from pskiller.tui.widgets import KeyHandler


class OverlayScreen(ModalScreen[None]):
    """Modal overlay drawn from the application state.

    Overlays have no bindings of their own. Keys are passed to the same
    handler as the main screen, and the app pushes or pops overlays as
    the state changes.
    """

    def __init__(self, state: AppState, on_key_pressed: KeyHandler) -> None:
        super().__init__()
        self.state = state
        self._on_key_pressed = on_key_pressed

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self._on_key_pressed(event.key, event.character)

    def on_mount(self) -> None:
        self.render_state()

    def refresh_content(self) -> None:
        """Redraw the overlay from the state, once its widgets exist."""
        if self.is_mounted:
            self.render_state()

    def render_state(self) -> None:
        """Fill the overlay's widgets from the state.

        Subclasses must override this; it is called on mount and after
        every state change while the overlay is shown.
        """
        raise NotImplementedError
