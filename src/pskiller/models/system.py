"""System-wide data models.

SystemSample holds cumulative counters as read from the OS at one poll.
SystemStat holds the figures shown in the System panel, derived from the
current sample, the previous one and the baseline taken at startup.
"""

from pydantic import BaseModel, ConfigDict, Field

from pskiller.models.base import counter_field, gauge_field


class MemorySample(BaseModel):
    """Memory and swap figures in bytes.

    Attributes:
        total: Total physical memory
        used: Memory in use (total minus available)
        free: Completely unused memory
        available: Memory available to new processes without swapping
        cache: Page cache
        buffers: Kernel buffers
        dirty: Pages waiting to be written back
        writeback: Pages being written back
        swap_total: Total swap space
        swap_used: Swap in use
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    total: int = gauge_field("Total physical memory", default=0, ge=0)
    used: int = gauge_field("Used memory", default=0, ge=0)
    free: int = gauge_field("Free memory", default=0, ge=0)
    available: int = gauge_field("Available memory", default=0, ge=0)
    cache: int = gauge_field("Page cache", default=0, ge=0)
    buffers: int = gauge_field("Kernel buffers", default=0, ge=0)
    dirty: int = gauge_field("Dirty pages", default=0, ge=0)
    writeback: int = gauge_field("Writeback pages", default=0, ge=0)
    swap_total: int = gauge_field("Total swap", default=0, ge=0)
    swap_used: int = gauge_field("Used swap", default=0, ge=0)


class MemoryStat(MemorySample):
    """Memory figures with usage fractions."""

    usage: float = gauge_field("Used fraction of physical memory", default=0.0, ge=0.0)
    swap_usage: float = gauge_field("Used fraction of swap", default=0.0, ge=0.0)


class PartitionUsage(BaseModel):
    """Space usage of one mounted filesystem."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    total_bytes: int = gauge_field("Partition size", default=0, ge=0)
    used_bytes: int = gauge_field("Used space", default=0, ge=0)

    @property
    def usage(self) -> float:
        """Used fraction of the partition."""
        if self.total_bytes <= 0:
            return 0.0
        return self.used_bytes / self.total_bytes


class SystemSample(BaseModel):
    """System-wide counters at one poll.

    CPU times, disk busy times and network byte counts are cumulative
    since boot; only differences between two samples are meaningful.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sample_time_ms: int = Field(..., ge=0, description="Sample wall-clock time (ms)")
    os_version: str = ""
    host_name: str = ""
    cpu_count: int = Field(default=1, ge=1)
    cpu_busy_time: float = counter_field("Cumulative busy CPU seconds", default=0.0, ge=0.0)
    cpu_total_time: float = counter_field("Cumulative CPU seconds", default=0.0, ge=0.0)
    load_average: tuple[float, float, float] = (0.0, 0.0, 0.0)
    memory: MemorySample = Field(default_factory=MemorySample)
    disk_read_ms: int = counter_field("Cumulative disk read busy time", default=0, ge=0)
    disk_write_ms: int = counter_field("Cumulative disk write busy time", default=0, ge=0)
    network_rx_bytes: int = counter_field("Cumulative bytes received", default=0, ge=0)
    network_tx_bytes: int = counter_field("Cumulative bytes sent", default=0, ge=0)
    partitions: dict[str, PartitionUsage] = Field(default_factory=dict)
    temperatures: dict[str, float] = Field(default_factory=dict)


class SystemStat(BaseModel):
    """Derived system figures for one poll."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    poll_time_ms: int = Field(default=0, ge=0)
    os_version: str = ""
    host_name: str = ""
    cpu_count: int = Field(default=1, ge=1)
    cpu_usage: float = gauge_field("Busy fraction of all cores", default=0.0, ge=0.0)
    load_average: tuple[float, float, float] = (0.0, 0.0, 0.0)
    memory: MemoryStat = Field(default_factory=MemoryStat)
    disk_read_utilization: float = gauge_field("Disk read busy fraction", default=0.0, ge=0.0)
    disk_write_utilization: float = gauge_field("Disk write busy fraction", default=0.0, ge=0.0)
    network_rx_rate: float = gauge_field("Bytes received per second", default=0.0, ge=0.0)
    network_tx_rate: float = gauge_field("Bytes sent per second", default=0.0, ge=0.0)
    network_rx_session: int = gauge_field("Bytes received since start", default=0, ge=0)
    network_tx_session: int = gauge_field("Bytes sent since start", default=0, ge=0)
    partitions: dict[str, PartitionUsage] = Field(default_factory=dict)
    temperatures: dict[str, float] = Field(default_factory=dict)
