"""Application state and the focus state machine.

AppState owns everything the screen shows: the snapshot history, the
derived stats, the visible process list, cursors, the filter, popups and
the current focus. The renderer only reads it; all changes go through the
operations below, usually via handle().

Focus transitions:

    Tab        BROWSE -> SYSTEM_STATS -> PROCESS_FILTER -> BROWSE
    Shift+Tab  the same cycle backwards
    Ctrl+F, /  BROWSE, SYSTEM_STATS -> PROCESS_FILTER
    Enter      BROWSE, PROCESS_FILTER -> SIGNAL_PICK (when a process is selected)
               SIGNAL_PICK -> runs the action -> BROWSE
    Esc        SIGNAL_PICK -> PROCESS_FILTER -> BROWSE -> quit

An open error or info popup is dismissed by Enter or Esc before anything
else happens, and an open info popup takes over vertical movement.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging

from pskiller.actions import DEFAULT_MENU_ACTIONS, ActionDispatcher, ActionKind, MenuAction
from pskiller.collectors.base import SnapshotProvider
from pskiller.engine import (
    SnapshotHistory,
    SummaryLine,
    apply,
    clamp_cursor,
    compute_process_stats,
    summarize,
    summarize_system,
)
from pskiller.keys import InputAction
from pskiller.models import (
    Focus,
    Ordering,
    ProcessSample,
    ProcessStat,
    SystemSample,
    SystemStat,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 10

# Order of Tab cycling; SIGNAL_PICK is only reached through Enter
FOCUS_CYCLE = [Focus.BROWSE, Focus.SYSTEM_STATS, Focus.PROCESS_FILTER]

# Inputs still accepted while a popup is open
POPUP_ACTIONS = frozenset(
    {
        InputAction.MOVE_UP,
        InputAction.MOVE_DOWN,
        InputAction.PAGE_UP,
        InputAction.PAGE_DOWN,
        InputAction.HOME,
        InputAction.END,
        InputAction.CONFIRM,
        InputAction.CANCEL,
        InputAction.QUIT,
    }
)

HELP_TEXT = """Keyboard controls:
`?` to show help.
`Ctrl+F` or `/` to filter processes.
Arrows `↑` and `↓` to navigate list.
`PgUp`, `PgDn`, `Home` and `End` to jump.
Arrows `←` and `→` to scroll process names.
`F5` or `R` to refresh list.
`S` to sort.
`M` to order by memory usage.
`C` to order by CPU usage.
`U` to order by uptime.
`G` group processes by executable path.
`Enter` to execute.
`Tab` to switch tab.
`Esc` to cancel.
`Ctrl+C` to quit."""


class AppState:
    """State of a pskiller session.

    Attributes:
        focus: Active interaction mode
        processes: Visible (filtered, grouped, sorted) process list
        all_processes: Every process from the latest poll
        system_stat: Latest system figures
        process_cursor: Selected row of the process list
        action_cursor: Selected entry of the action menu
        action_target: Process the action menu was opened for
        sysinfo_scroll: First visible line of the System panel
        horizontal_scroll: Characters hidden at the start of process names
        filter_text: Free-text process filter
        ordering: Active sort mode
        grouped: Whether processes are grouped by executable
        info_message: Text of the info popup, None when closed
        info_scroll: First visible line of the info popup
        error_message: Text of the error popup, None when closed
        should_quit: Set once the user asked to leave
    """

    def __init__(
        self,
        provider: SnapshotProvider,
        dispatcher: ActionDispatcher | None = None,
        menu_actions: Sequence[MenuAction] | None = None,
        ordering: Ordering = Ordering.BY_UPTIME,
        grouped: bool = False,
        filter_text: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the state. No OS reads happen until start().

        Args:
            provider: Source of process and system readings
            dispatcher: Runs menu actions (a default one is created if omitted)
            menu_actions: Action menu entries
            ordering: Initial sort mode
            grouped: Start with grouping by executable enabled
            filter_text: Initial filter
            logger: Logger for state changes
        """
        self._log = logger or logging.getLogger(__name__)
        self.provider = provider
        self.dispatcher = dispatcher or ActionDispatcher(logger=self._log)
        self.menu_actions: list[MenuAction] = list(menu_actions or DEFAULT_MENU_ACTIONS)

        self.system_history: SnapshotHistory[SystemSample] = SnapshotHistory()
        self.process_history: SnapshotHistory[list[ProcessSample]] = SnapshotHistory()
        self.system_stat = SystemStat()
        self.all_processes: list[ProcessStat] = []
        self.processes: list[ProcessStat] = []

        self.focus = Focus.BROWSE
        self.process_cursor = 0
        self.action_cursor = 0
        self.sysinfo_scroll = 0
        self.horizontal_scroll = 0
        self.filter_text = filter_text
        self.ordering = ordering
        self.grouped = grouped

        self.action_target: ProcessStat | None = None
        self.info_message: str | None = None
        self.info_scroll = 0
        self.error_message: str | None = None
        self.should_quit = False

    # Polling

    def start(self) -> None:
        """Take the first poll, which also becomes the session baseline."""
        self.poll()
        self._log.info("Started with %d processes", len(self.all_processes))

    def poll(self) -> None:
        """Read system counters, then processes, and rebuild the views."""
        self.refresh_system()
        self.refresh_processes()

    def refresh_system(self) -> None:
        """Take a new system reading and recompute system figures."""
        history = self.system_history
        history.advance(self.provider.read_system_sample())
        self.system_stat = summarize_system(history.current, history.previous, history.init)
        self.sysinfo_scroll = clamp_cursor(self.sysinfo_scroll, len(self.system_lines()))

    def refresh_processes(self) -> None:
        """Take a new process reading and rebuild the visible list."""
        history = self.process_history
        history.advance(self.provider.read_process_samples())
        total_memory = self.system_stat.memory.total
        if self.system_history.current is not None:
            total_memory = self.system_history.current.memory.total
        self.all_processes = compute_process_stats(history.current or [], history.previous, total_memory)
        self.filter_processes()

    def filter_processes(self) -> None:
        """Rebuild the visible list from the latest poll and clamp the cursor."""
        self.processes = apply(self.all_processes, self.filter_text, self.ordering, self.grouped)
        self.process_cursor = clamp_cursor(self.process_cursor, len(self.processes))

    # Popups

    @property
    def has_error(self) -> bool:
        return self.error_message is not None

    @property
    def has_info(self) -> bool:
        return self.info_message is not None

    def show_error(self, message: str) -> None:
        self.error_message = message

    def show_info(self, message: str) -> None:
        self.info_message = message
        self.info_scroll = 0

    def show_help(self) -> None:
        self.show_info(HELP_TEXT)

    def dismiss_popup(self) -> bool:
        """Close the topmost popup (error before info).

        Returns:
            True if a popup was closed
        """
        if self.error_message is not None:
            self.error_message = None
            return True
        if self.info_message is not None:
            self.info_message = None
            self.info_scroll = 0
            return True
        return False

    # Cursors

    def system_lines(self) -> list[SummaryLine]:
        return summarize(self.system_stat)

    def selected_process(self) -> ProcessStat | None:
        if 0 <= self.process_cursor < len(self.processes):
            return self.processes[self.process_cursor]
        return None

    def selected_action(self) -> MenuAction | None:
        if 0 <= self.action_cursor < len(self.menu_actions):
            return self.menu_actions[self.action_cursor]
        return None

    def move_cursor(self, delta: int) -> None:
        """Move whichever cursor the current focus (or info popup) controls.

        Args:
            delta: Rows to move, negative for up
        """
        if self.error_message is not None:
            return
        if self.info_message is not None:
            lines = len(self.info_message.splitlines())
            self.info_scroll = clamp_cursor(self.info_scroll + delta, lines)
        elif self.focus in (Focus.BROWSE, Focus.PROCESS_FILTER):
            self.process_cursor = clamp_cursor(self.process_cursor + delta, len(self.processes))
        elif self.focus is Focus.SIGNAL_PICK:
            self.action_cursor = clamp_cursor(self.action_cursor + delta, len(self.menu_actions))
        elif self.focus is Focus.SYSTEM_STATS:
            self.sysinfo_scroll = clamp_cursor(self.sysinfo_scroll + delta, len(self.system_lines()))

    def move_cursor_end(self, direction: int) -> None:
        """Jump to the first (direction < 0) or last position."""
        if self.info_message is not None:
            length = len(self.info_message.splitlines())
        elif self.focus in (Focus.BROWSE, Focus.PROCESS_FILTER):
            length = len(self.processes)
        elif self.focus is Focus.SIGNAL_PICK:
            length = len(self.menu_actions)
        else:
            length = len(self.system_lines())
        self.move_cursor(length if direction > 0 else -length)

    def move_horizontal_scroll(self, delta: int) -> None:
        self.horizontal_scroll = max(0, self.horizontal_scroll + delta)

    # Ordering, grouping, filter

    def switch_ordering(self) -> None:
        self.set_ordering(self.ordering.next())

    def set_ordering(self, ordering: Ordering) -> None:
        self.ordering = ordering
        self.filter_processes()
        self._log.debug("Ordering set to %s", ordering.value)

    def toggle_grouping(self) -> None:
        self.grouped = not self.grouped
        self.filter_processes()
        self._log.debug("Grouping by executable %s", "on" if self.grouped else "off")

    def filter_append(self, text: str) -> None:
        self.filter_text += text
        self.filter_processes()

    def filter_backspace(self) -> None:
        self.filter_text = self.filter_text[:-1]
        self.filter_processes()

    def filter_clear(self) -> None:
        self.filter_text = ""
        self.filter_processes()

    # Focus

    def focus_next(self) -> None:
        self._cycle_focus(1)

    def focus_previous(self) -> None:
        self._cycle_focus(-1)

    def _cycle_focus(self, step: int) -> None:
        if self.focus not in FOCUS_CYCLE:
            return
        idx = (FOCUS_CYCLE.index(self.focus) + step) % len(FOCUS_CYCLE)
        self._set_focus(FOCUS_CYCLE[idx])

    def _set_focus(self, focus: Focus) -> None:
        if focus is not self.focus:
            self._log.debug("Focus %s -> %s", self.focus.value, focus.value)
        self.focus = focus

    def enter_filter(self) -> None:
        if self.focus in (Focus.BROWSE, Focus.SYSTEM_STATS):
            self._set_focus(Focus.PROCESS_FILTER)

    def cancel(self) -> None:
        """Handle Esc: close a popup, step back one focus, or quit."""
        if self.dismiss_popup():
            return
        if self.focus is Focus.SIGNAL_PICK:
            self.action_target = None
            self._set_focus(Focus.PROCESS_FILTER)
        elif self.focus is Focus.PROCESS_FILTER:
            self._set_focus(Focus.BROWSE)
        else:
            self.quit()

    def confirm(self) -> None:
        """Handle Enter: close a popup, pick a process, or run an action."""
        if self.dismiss_popup():
            return
        if self.focus in (Focus.BROWSE, Focus.PROCESS_FILTER):
            self.confirm_process()
        elif self.focus is Focus.SIGNAL_PICK:
            self.confirm_action()

    def confirm_process(self) -> None:
        """Open the action menu for the selected process, if there is one."""
        target = self.selected_process()
        if target is None:
            return
        self.action_target = target
        self._set_focus(Focus.SIGNAL_PICK)
        self.action_cursor = 0

    def live_target(self) -> ProcessStat | None:
        """The process the menu was opened for, as far as it still runs.

        Polls keep reordering the list while the menu is open, so the
        target is the entry remembered by confirm_process(), never the row
        under the cursor. Group members that exited since are dropped.

        Returns:
            The target, or None if none of its processes is left
        """
        target = self.action_target
        if target is None:
            return None
        running = {stat.pid for stat in self.all_processes}
        if not target.is_group:
            return target if target.pid in running else None
        children = [child for child in target.group_children if child.pid in running]
        if not children:
            return None
        return target.model_copy(update={"group_children": children})

    def confirm_action(self) -> None:
        """Run the selected menu action against the menu's target process.

        Signal actions are followed by a process refresh whatever their
        outcome, so a killed process disappears and a survivor stays. A
        failure, or a target that exited while the menu was open, opens
        the error popup. Focus returns to BROWSE.
        """
        target = self.live_target()
        picked = self.action_target
        action = self.selected_action()
        self.action_target = None
        self._set_focus(Focus.BROWSE)
        if action is None or picked is None:
            return
        if target is None:
            self.show_error(f"Process {picked.pid} ({picked.display_name}) is no longer running")
            return

        result = self.dispatcher.execute(action, target, self.system_stat)
        if action.kind is ActionKind.SEND_SIGNAL:
            self.refresh_processes()

        if not result.success:
            self.show_error(result.error or "Action failed")
        elif result.details:
            self.show_info(result.details)

    def quit(self) -> None:
        self.should_quit = True
        self._log.info("Quit requested")

    # Input

    def handle(self, action: InputAction, text: str = "") -> None:
        """Apply one logical input.

        Args:
            action: The input to apply
            text: Typed text for FILTER_APPEND
        """
        if (self.has_error or self.has_info) and action not in POPUP_ACTIONS:
            return

        if action is InputAction.MOVE_UP:
            self.move_cursor(-1)
        elif action is InputAction.MOVE_DOWN:
            self.move_cursor(1)
        elif action is InputAction.PAGE_UP:
            self.move_cursor(-PAGE_SIZE)
        elif action is InputAction.PAGE_DOWN:
            self.move_cursor(PAGE_SIZE)
        elif action is InputAction.HOME:
            self.move_cursor_end(-1)
        elif action is InputAction.END:
            self.move_cursor_end(1)
        elif action is InputAction.SCROLL_LEFT:
            self.move_horizontal_scroll(-1)
        elif action is InputAction.SCROLL_RIGHT:
            self.move_horizontal_scroll(1)
        elif action is InputAction.FOCUS_NEXT:
            self.focus_next()
        elif action is InputAction.FOCUS_PREVIOUS:
            self.focus_previous()
        elif action is InputAction.ENTER_FILTER:
            self.enter_filter()
        elif action is InputAction.FILTER_APPEND:
            self.filter_append(text)
        elif action is InputAction.FILTER_BACKSPACE:
            self.filter_backspace()
        elif action is InputAction.FILTER_CLEAR:
            self.filter_clear()
        elif action is InputAction.TOGGLE_GROUPING:
            self.toggle_grouping()
        elif action is InputAction.CYCLE_SORT:
            self.switch_ordering()
        elif action is InputAction.SORT_BY_MEMORY:
            self.set_ordering(Ordering.BY_MEMORY)
        elif action is InputAction.SORT_BY_CPU:
            self.set_ordering(Ordering.BY_CPU)
        elif action is InputAction.SORT_BY_UPTIME:
            self.set_ordering(Ordering.BY_UPTIME)
        elif action is InputAction.CONFIRM:
            self.confirm()
        elif action is InputAction.CANCEL:
            self.cancel()
        elif action is InputAction.QUIT:
            self.quit()
        elif action is InputAction.HELP:
            self.show_help()
        elif action is InputAction.REFRESH:
            self.poll()
