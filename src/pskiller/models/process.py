"""Per-process data models.

ProcessSample is the raw, immutable reading of one process at one poll.
ProcessStat is the derived view the user sees: CPU and disk rates come from
two consecutive samples, and grouped entries carry their members.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pskiller.models.base import counter_field, gauge_field


class ProcessSample(BaseModel):
    """One process at one poll.

    Attributes:
        pid: Process ID
        parent_pid: Parent process ID (None if unknown)
        name: Short process name (e.g. "chrome")
        exe_path: Full executable path, empty when unknown
        display_command: Full command line, or the name when it is unreadable
        cpu_time_seconds: Cumulative user+system CPU time [counter]
        cpu_usage_estimate: Lifetime average CPU usage, fraction of one core [gauge]
        resident_memory_bytes: Resident set size [gauge]
        disk_bytes_total: Cumulative bytes read and written [counter]
        run_time_seconds: Seconds since the process started [gauge]
        owner_uid: Real user ID of the owner
        owner_name: User name of the owner
        working_dir: Current working directory
        status: Process status (running, sleeping, ...)
        sample_time_ms: Wall-clock time of the reading in milliseconds
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    pid: int = Field(..., ge=0, description="Process ID")
    parent_pid: int | None = Field(default=None, description="Parent process ID")
    name: str = Field(default="", description="Process name")
    exe_path: str = Field(default="", description="Executable path")
    display_command: str = Field(default="", description="Command line for display")
    cpu_time_seconds: float = counter_field("Cumulative CPU time", default=0.0, ge=0.0)
    cpu_usage_estimate: float = gauge_field("Lifetime average CPU usage", default=0.0, ge=0.0)
    resident_memory_bytes: int = gauge_field("Resident set size in bytes", default=0, ge=0)
    disk_bytes_total: int = counter_field("Cumulative disk bytes", default=0, ge=0)
    run_time_seconds: int = gauge_field("Seconds since start", default=0, ge=0)
    owner_uid: int | None = Field(default=None, description="Owner user ID")
    owner_name: str = Field(default="", description="Owner user name")
    working_dir: str = Field(default="", description="Current working directory")
    status: str = Field(default="unknown", description="Process status")
    sample_time_ms: int = Field(..., ge=0, description="Sample wall-clock time (ms)")

    @property
    def display_name(self) -> str:
        """Command line if known, otherwise the short name."""
        return self.display_command or self.name


class ProcessStat(BaseModel):
    """Derived, user-facing view of a process or a group of processes.

    When group_children is non-empty the scalar metrics are the sums over
    the children (run time is the max) and pid/display_name only identify
    a representative member.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    pid: int = Field(..., ge=0)
    parent_pid: int | None = None
    name: str = ""
    display_name: str = ""
    exe_path: str = ""
    owner_uid: int | None = None
    owner_name: str = ""
    working_dir: str = ""
    status: str = "unknown"
    cpu_usage: float = gauge_field("CPU usage, fraction of one core", default=0.0, ge=0.0)
    memory_usage: float = gauge_field("Fraction of total RAM", default=0.0, ge=0.0)
    memory_bytes: int = gauge_field("Resident memory in bytes", default=0, ge=0)
    disk_usage_bytes: int = counter_field("Cumulative disk bytes", default=0, ge=0)
    disk_rate: float = gauge_field("Disk bytes per second", default=0.0, ge=0.0)
    run_time_seconds: int = gauge_field("Seconds since start", default=0, ge=0)
    group_children: list[ProcessStat] = Field(default_factory=list)

    def search_name(self) -> str:
        """Text the free-text filter is matched against."""
        return f"{self.pid} {self.display_name}"

    @property
    def is_group(self) -> bool:
        """Check if this entry aggregates several processes."""
        return bool(self.group_children)

    @property
    def member_pids(self) -> list[int]:
        """PIDs an action on this entry applies to."""
        if self.group_children:
            return [child.pid for child in self.group_children]
        return [self.pid]
