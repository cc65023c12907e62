"""Panels of the main screen.

Each panel has a show() method that redraws it from the application state.
Panels never change the state themselves.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from rich.text import Text
from textual import events
from textual.widgets import DataTable, Static

from pskiller import __version__
from pskiller.formatting import apply_scroll, format_duration, format_percent, get_usage_color
from pskiller.models import Focus, Ordering

if TYPE_CHECKING:
    from pskiller.engine import SummaryLine
    from pskiller.state import AppState

KeyHandler = Callable[[str, "str | None"], None]
RowHandler = Callable[[int], None]

HINT_TEXT = "`Ctrl+F` to filter. `R` to refresh. `S` to sort. `Enter` to execute. `?` for more controls."

# Fixed column widths
UPTIME_WIDTH = 9
MEM_WIDTH = 7
CPU_WIDTH = 7
MIN_NAME_WIDTH = 10


class InfoPanel(Static):
    """Title and short usage hint."""

    DEFAULT_CSS = """
    InfoPanel {
        height: 3;
        border: round $secondary;
        padding: 0 1;
        color: $text-muted;
    }
    """

    def __init__(self) -> None:
        super().__init__(HINT_TEXT, markup=False)
        self.border_title = f"PSycho KILLer {__version__}"


class ProcessTable(DataTable):
    """The process list.

    Every key pressed while the table has focus is handed to the key
    handler and stopped there, so the table's own bindings (and the
    screen's Tab focus cycling) never run.
    """

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: round $secondary;
    }

    ProcessTable.active {
        border: round $accent;
    }
    """

    def __init__(self, on_key_pressed: KeyHandler, on_row_clicked: RowHandler) -> None:
        super().__init__(cursor_type="row", zebra_stripes=True)
        self._on_key_pressed = on_key_pressed
        self._on_row_clicked = on_row_clicked

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self._on_key_pressed(event.key, event.character)

    def on_click(self, event: events.Click) -> None:
        row = event.style.meta.get("row")
        if isinstance(row, int) and row >= 0:
            self._on_row_clicked(row)

    def _name_width(self, pid_width: int) -> int:
        # Each column has one cell of padding on both sides, plus borders and scrollbar
        fixed = pid_width + UPTIME_WIDTH + MEM_WIDTH + CPU_WIDTH + 5 * 2 + 3
        return max(MIN_NAME_WIDTH, self.size.width - fixed)

    def show(self, state: AppState) -> None:
        """Rebuild the table from the visible process list."""
        processes = state.processes
        pid_width = max([len("PID"), *(len(str(stat.pid)) for stat in processes)])
        arrow = "▲" if state.ordering is Ordering.BY_UPTIME else "▼"

        def label(name: str) -> str:
            return f"{name} {arrow}" if state.ordering.column == name else name

        self.clear(columns=True)
        self.add_column("PID", width=pid_width, key="pid")
        self.add_column("Name", width=self._name_width(pid_width), key="name")
        self.add_column(label("Uptime"), width=UPTIME_WIDTH, key="uptime")
        self.add_column(label("MEM"), width=MEM_WIDTH, key="mem")
        self.add_column(label("CPU"), width=CPU_WIDTH, key="cpu")

        for stat in processes:
            name = stat.display_name
            if stat.is_group:
                name = f"[{len(stat.group_children)}] {name}"
            self.add_row(
                Text(str(stat.pid), style="bright_cyan"),
                # Plain strings are parsed as markup; kernel threads look like tags
                Text(apply_scroll(name, state.horizontal_scroll)),
                format_duration(stat.run_time_seconds),
                Text(format_percent(stat.memory_usage), style=get_usage_color(stat.memory_usage)),
                Text(format_percent(stat.cpu_usage), style=get_usage_color(stat.cpu_usage)),
            )

        if processes:
            self.move_cursor(row=state.process_cursor)

        title = "Running Processes"
        if state.grouped:
            title += " (grouped by executable)"
        self.border_title = f"{title} [{len(processes)}/{len(state.all_processes)}]"
        self.set_class(state.focus in (Focus.BROWSE, Focus.PROCESS_FILTER), "active")


class FilterBar(Static):
    """Current filter text, with a cursor block while typing."""

    DEFAULT_CSS = """
    FilterBar {
        height: 3;
        border: round $secondary;
        padding: 0 1;
    }

    FilterBar.active {
        border: round $accent;
    }
    """

    def __init__(self) -> None:
        super().__init__("", markup=False)
        self.border_title = "Filter (Ctrl+F)"

    def show(self, state: AppState) -> None:
        editing = state.focus is Focus.PROCESS_FILTER
        self.update(state.filter_text + ("█" if editing else ""))
        self.set_class(editing, "active")


def render_summary_line(line: SummaryLine) -> Text:
    """Style one System panel line."""
    if line.header:
        return Text(line.label, style="bold bright_cyan")
    if line.is_blank:
        return Text("")
    value_style = "bright_yellow" if line.usage is None else get_usage_color(line.usage)
    return Text.assemble((f"{line.label}: ", "cyan"), (line.value, value_style))


class SystemPanel(Static):
    """System-wide figures."""

    DEFAULT_CSS = """
    SystemPanel {
        width: 44;
        height: 100%;
        border: round $secondary;
        padding: 0 1;
    }

    SystemPanel.active {
        border: round $accent;
    }
    """

    def __init__(self) -> None:
        super().__init__("")
        self.border_title = "System"

    def show(self, state: AppState) -> None:
        lines = state.system_lines()[state.sysinfo_scroll :]
        self.update(Text("\n").join(render_summary_line(line) for line in lines))
        self.set_class(state.focus is Focus.SYSTEM_STATS, "active")
