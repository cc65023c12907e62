"""Action menu overlay for the selected process.

Lists the configured menu actions with the current choice highlighted.
Enter runs it, Esc steps back to the filter.
"""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.widgets import Label, Static

from pskiller.tui.screens.overlay import OverlayScreen


class ActionMenuScreen(OverlayScreen):
    """Modal menu of the actions available for the selected process."""

    DEFAULT_CSS = """
    ActionMenuScreen {
        align: center middle;
    }

    ActionMenuScreen > Container {
        width: 50;
        height: auto;
        max-height: 80%;
        background: $background;
        border: solid $accent;
        padding: 0;
    }

    ActionMenuScreen .menu-title {
        dock: top;
        width: 100%;
        height: 1;
        background: $accent;
        color: $background;
        text-align: center;
        text-style: bold;
    }

    ActionMenuScreen .menu-target {
        width: 100%;
        height: auto;
        padding: 1 2 0 2;
        color: $text-muted;
    }

    ActionMenuScreen .menu-items {
        width: 100%;
        height: auto;
        padding: 1 2;
    }

    ActionMenuScreen .footer-text {
        width: 100%;
        height: 1;
        text-align: center;
        color: $text-muted;
    }
    """

    def compose(self) -> ComposeResult:
        with Container():
            yield Label("Choose a command", classes="menu-title")
            yield Static("", markup=False, classes="menu-target", id="menu-target")
            yield Static("", classes="menu-items", id="menu-items")
            yield Label("`Enter` to execute, `Esc` to cancel", classes="footer-text")

    def render_state(self) -> None:
        target = self.state.action_target
        if target is None:
            description = ""
        elif target.is_group:
            description = f"{len(target.group_children)} processes: {target.display_name}"
        else:
            description = f"{target.pid}: {target.display_name}"
        self.query_one("#menu-target", Static).update(description)

        items = Text()
        for index, action in enumerate(self.state.menu_actions):
            if index:
                items.append("\n")
            if index == self.state.action_cursor:
                items.append(f"» {action.name}", style="bold reverse")
            else:
                items.append(f"  {action.name}")
        self.query_one("#menu-items", Static).update(items)
