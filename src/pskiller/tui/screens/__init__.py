"""TUI screens module for pskiller.

This module provides:
- OverlayScreen: Base for modal overlays drawn from the application state
- ActionMenuScreen: Menu of actions for the selected process
- PopupScreen: Error and info popups
"""

from pskiller.tui.screens.action_menu import ActionMenuScreen
from pskiller.tui.screens.overlay import OverlayScreen
from pskiller.tui.screens.popup import PopupKind, PopupScreen

__all__ = [
    "ActionMenuScreen",
    "OverlayScreen",
    "PopupKind",
    "PopupScreen",
]
