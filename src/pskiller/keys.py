"""Key bindings.

Translates key events into the logical input actions the application state
understands. Which keys mean what depends on the focus: in filter mode
printable characters are typed into the filter instead of running commands.
"""

from __future__ import annotations

from enum import Enum

from pskiller.models import Focus


class InputAction(str, Enum):
    """Logical user inputs, independent of the key that produced them."""

    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    SCROLL_LEFT = "scroll_left"
    SCROLL_RIGHT = "scroll_right"
    FOCUS_NEXT = "focus_next"
    FOCUS_PREVIOUS = "focus_previous"
    ENTER_FILTER = "enter_filter"
    FILTER_APPEND = "filter_append"
    FILTER_BACKSPACE = "filter_backspace"
    FILTER_CLEAR = "filter_clear"
    TOGGLE_GROUPING = "toggle_grouping"
    CYCLE_SORT = "cycle_sort"
    SORT_BY_MEMORY = "sort_by_memory"
    SORT_BY_CPU = "sort_by_cpu"
    SORT_BY_UPTIME = "sort_by_uptime"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    QUIT = "quit"
    HELP = "help"
    REFRESH = "refresh"


# Keys that work in every focus
GLOBAL_KEYS: dict[str, InputAction] = {
    "up": InputAction.MOVE_UP,
    "down": InputAction.MOVE_DOWN,
    "pageup": InputAction.PAGE_UP,
    "pagedown": InputAction.PAGE_DOWN,
    "home": InputAction.HOME,
    "end": InputAction.END,
    "left": InputAction.SCROLL_LEFT,
    "right": InputAction.SCROLL_RIGHT,
    "tab": InputAction.FOCUS_NEXT,
    "shift+tab": InputAction.FOCUS_PREVIOUS,
    "backtab": InputAction.FOCUS_PREVIOUS,
    "enter": InputAction.CONFIRM,
    "escape": InputAction.CANCEL,
    "ctrl+c": InputAction.QUIT,
    "ctrl+f": InputAction.ENTER_FILTER,
    "f5": InputAction.REFRESH,
}

# Single-character commands, only outside text entry
COMMAND_CHARACTERS: dict[str, InputAction] = {
    "?": InputAction.HELP,
    "/": InputAction.ENTER_FILTER,
    "r": InputAction.REFRESH,
    "s": InputAction.CYCLE_SORT,
    "m": InputAction.SORT_BY_MEMORY,
    "c": InputAction.SORT_BY_CPU,
    "u": InputAction.SORT_BY_UPTIME,
    "g": InputAction.TOGGLE_GROUPING,
}

# Text editing keys in filter mode
FILTER_KEYS: dict[str, InputAction] = {
    "backspace": InputAction.FILTER_BACKSPACE,
    "ctrl+h": InputAction.FILTER_BACKSPACE,
    "ctrl+u": InputAction.FILTER_CLEAR,
}


def translate(key: str, character: str | None, focus: Focus) -> tuple[InputAction, str] | None:
    """Map a key event to an input action.

    Args:
        key: Key name as reported by the terminal (e.g. "up", "ctrl+f", "a")
        character: Printable character of the key, if any
        focus: Current focus

    Returns:
        (action, text) where text is the typed character for FILTER_APPEND,
        or None if the key means nothing in this focus
    """
    if key in GLOBAL_KEYS:
        return GLOBAL_KEYS[key], ""

    if focus is Focus.PROCESS_FILTER:
        if key in FILTER_KEYS:
            return FILTER_KEYS[key], ""
        if character and character.isprintable():
            return InputAction.FILTER_APPEND, character
        return None

    if focus in (Focus.BROWSE, Focus.SYSTEM_STATS) and character:
        action = COMMAND_CHARACTERS.get(character.lower())
        if action is not None:
            return action, ""

    return None
