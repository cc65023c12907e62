"""Actions that can be run against the selected process.

Two kinds exist: showing a details text block, which has no side effect,
and sending a signal, which runs a shell command such as "kill -15 <pid>".
Command failures are returned as results, never raised.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
import logging
import subprocess
from typing import TYPE_CHECKING

from pskiller.formatting import format_bytes, format_duration, format_percent, format_rate

if TYPE_CHECKING:
    from pskiller.models import ProcessStat, SystemStat

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 10.0


class ActionKind(str, Enum):
    """What a menu action does."""

    SHOW_DETAILS = "show_details"
    SEND_SIGNAL = "send_signal"


@dataclass(frozen=True)
class MenuAction:
    """An entry of the action menu.

    Attributes:
        name: Label shown in the menu
        kind: What the action does
        template: Shell command prefix; the target pid(s) are appended
    """

    name: str
    kind: ActionKind
    template: str = ""

    def command_for(self, pids: Iterable[int]) -> str:
        """Build the shell command for the given pids."""
        return self.template + " ".join(str(pid) for pid in pids)


SHOW_DETAILS = MenuAction("Process details", ActionKind.SHOW_DETAILS)

SIGNAL_ACTIONS = [
    MenuAction("Interrupt: kill -2", ActionKind.SEND_SIGNAL, "kill -2 "),
    MenuAction("Terminate gracefully: kill -15", ActionKind.SEND_SIGNAL, "kill -15 "),
    MenuAction("Kill forcefully: kill -9", ActionKind.SEND_SIGNAL, "kill -9 "),
]

# -n makes sudo fail instead of prompting for a password inside the TUI
SUDO_ACTIONS = [
    MenuAction("Superuser Terminate: sudo kill -15", ActionKind.SEND_SIGNAL, "sudo -n kill -15 "),
    MenuAction("Superuser Kill: sudo kill -9", ActionKind.SEND_SIGNAL, "sudo -n kill -9 "),
]

DEFAULT_MENU_ACTIONS = [SHOW_DETAILS, *SIGNAL_ACTIONS, *SUDO_ACTIONS]


def build_menu_actions(
    sudo_actions: bool = True,
    extra: Sequence[tuple[str, str]] = (),
) -> list[MenuAction]:
    """Assemble the action menu.

    Args:
        sudo_actions: Include the sudo variants
        extra: Additional (name, template) signal commands

    Returns:
        Menu entries in display order
    """
    actions = [SHOW_DETAILS, *SIGNAL_ACTIONS]
    if sudo_actions:
        actions.extend(SUDO_ACTIONS)
    actions.extend(MenuAction(name, ActionKind.SEND_SIGNAL, template) for name, template in extra)
    return actions


@dataclass
class ActionResult:
    """Outcome of running a menu action.

    Attributes:
        success: Whether the action succeeded
        details: Text to show the user (show-details actions)
        error: Error text if the action failed
        command: Shell command that was run, if any
    """

    success: bool
    details: str | None = None
    error: str | None = None
    command: str | None = None

    def __post_init__(self) -> None:
        """Validate result consistency."""
        if not self.success and self.error is None:
            raise ValueError("Failed action must include error message")


def format_process_details(stat: ProcessStat, system: SystemStat | None = None) -> str:
    """Format everything known about a process as a text block.

    Args:
        stat: Process (or group) to describe
        system: Latest system figures, used to show total memory

    Returns:
        Multi-line text
    """
    memory = f"{format_bytes(stat.memory_bytes)} ({format_percent(stat.memory_usage)})"
    if system is not None and system.memory.total > 0:
        memory += f" of {format_bytes(system.memory.total)}"

    owner = stat.owner_name or "?"
    if stat.owner_uid is not None:
        owner += f" (uid {stat.owner_uid})"

    lines = [
        f"PID: {stat.pid}",
        f"Name: {stat.name}",
        f"Command: {stat.display_name}",
        f"Executable: {stat.exe_path or '?'}",
        f"Parent PID: {stat.parent_pid if stat.parent_pid is not None else '?'}",
        f"Owner: {owner}",
        f"Working directory: {stat.working_dir or '?'}",
        f"Status: {stat.status}",
        f"Uptime: {format_duration(stat.run_time_seconds)}",
        f"CPU: {format_percent(stat.cpu_usage)}",
        f"Memory: {memory}",
        f"Disk: {format_bytes(stat.disk_usage_bytes)} total, {format_rate(stat.disk_rate)}",
    ]
    if stat.group_children:
        pids = ", ".join(str(pid) for pid in sorted(stat.member_pids))
        lines.append(f"Group members ({len(stat.group_children)}): {pids}")
    return "\n".join(lines)


class ActionDispatcher:
    """Runs menu actions against processes.

    Signal commands run synchronously through `sh -c` and block the caller
    for at most `timeout` seconds.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            timeout: Maximum seconds a signal command may run
            logger: Logger for executed commands and failures
        """
        self._timeout = timeout
        self._log = logger or logging.getLogger(__name__)

    def execute(
        self,
        action: MenuAction,
        target: ProcessStat,
        system: SystemStat | None = None,
    ) -> ActionResult:
        """Run an action against a process.

        For a group entry, signals go to every member in one command.

        Args:
            action: Menu entry to run
            target: Selected process or group
            system: Latest system figures (for details)

        Returns:
            ActionResult describing the outcome
        """
        if action.kind is ActionKind.SHOW_DETAILS:
            return ActionResult(success=True, details=format_process_details(target, system))
        return self.run_command(action.command_for(target.member_pids))

    def run_command(self, command: str) -> ActionResult:
        """Run a shell command, capturing its output.

        Args:
            command: Command line passed to `sh -c`

        Returns:
            Successful result on exit status 0, failed result otherwise
        """
        self._log.info("Executing command: %r", command)
        try:
            completed = subprocess.run(
                ["sh", "-c", command],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            error = f"Command timed out after {self._timeout:g}s: {command!r}"
            self._log.warning(error)
            return ActionResult(success=False, error=error, command=command)
        except OSError as e:
            error = f"Failed to start command {command!r}: {e}"
            self._log.warning(error)
            return ActionResult(success=False, error=error, command=command)

        if completed.returncode != 0:
            error = (
                f"Failed to execute command: {command!r}, exit status: {completed.returncode}\n"
                f"{completed.stderr}\n{completed.stdout}"
            ).rstrip()
            self._log.warning(error)
            return ActionResult(success=False, error=error, command=command)

        return ActionResult(success=True, command=command)
