"""Rate metrics computed from consecutive snapshots.

Raw OS counters (CPU time, disk bytes, network bytes, disk busy time) are
cumulative. The figures the user cares about are rates, so each poll is
compared against the previous one. Session totals are compared against the
baseline snapshot taken at startup instead.

All counters are treated as monotonic: a negative difference (counter
reset, reboot, pid reuse) counts as zero.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
from typing import Generic, TypeVar

from pskiller.models import (
    MemoryStat,
    ProcessSample,
    ProcessStat,
    SystemSample,
    SystemStat,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def counter_delta(current: float, previous: float) -> float:
    """Difference between two readings of a cumulative counter, never negative."""
    return max(current - previous, 0)


def rate(delta: float, elapsed_ms: int) -> float:
    """Convert a counter delta into a per-second rate.

    Args:
        delta: Counter difference
        elapsed_ms: Milliseconds between the two readings

    Returns:
        Units per second, 0.0 when no time has elapsed
    """
    if elapsed_ms <= 0:
        return 0.0
    return delta * 1000 / elapsed_ms


def index_by_pid(samples: Iterable[ProcessSample]) -> dict[int, ProcessSample]:
    """Index a poll's samples by pid for delta lookups."""
    return {sample.pid: sample for sample in samples}


def compute_cpu_usage(current: ProcessSample, previous: ProcessSample) -> float:
    """CPU usage between two samples of the same process.

    Returns:
        Fraction of one core (1.0 = one full core); 0.0 when both samples
        carry the same timestamp.
    """
    elapsed_ms = current.sample_time_ms - previous.sample_time_ms
    if elapsed_ms <= 0:
        return 0.0
    delta = counter_delta(current.cpu_time_seconds, previous.cpu_time_seconds)
    return delta * 1000 / elapsed_ms


def compute_process_stat(
    current: ProcessSample,
    previous: Mapping[int, ProcessSample] | Iterable[ProcessSample],
    total_memory_bytes: int,
) -> ProcessStat:
    """Derive the user-facing stat for one process.

    The previous poll is matched by pid. A process with no match is new:
    its CPU usage is the OS's own single-sample estimate and its disk rate
    is zero.

    Args:
        current: Sample from this poll
        previous: Previous poll's samples, indexed by pid or as a plain list
        total_memory_bytes: Physical memory size for the memory fraction

    Returns:
        A freshly built ProcessStat
    """
    if not isinstance(previous, Mapping):
        previous = index_by_pid(previous)

    before = previous.get(current.pid)
    if before is None:
        cpu_usage = current.cpu_usage_estimate
        disk_rate = 0.0
    else:
        cpu_usage = compute_cpu_usage(current, before)
        disk_rate = rate(
            counter_delta(current.disk_bytes_total, before.disk_bytes_total),
            current.sample_time_ms - before.sample_time_ms,
        )

    memory_usage = 0.0
    if total_memory_bytes > 0:
        memory_usage = current.resident_memory_bytes / total_memory_bytes

    return ProcessStat(
        pid=current.pid,
        parent_pid=current.parent_pid,
        name=current.name,
        display_name=current.display_name,
        exe_path=current.exe_path,
        owner_uid=current.owner_uid,
        owner_name=current.owner_name,
        working_dir=current.working_dir,
        status=current.status,
        cpu_usage=cpu_usage,
        memory_usage=memory_usage,
        memory_bytes=current.resident_memory_bytes,
        disk_usage_bytes=current.disk_bytes_total,
        disk_rate=disk_rate,
        run_time_seconds=current.run_time_seconds,
    )


def compute_process_stats(
    current: Iterable[ProcessSample],
    previous: Iterable[ProcessSample] | None,
    total_memory_bytes: int,
) -> list[ProcessStat]:
    """Derive stats for a whole poll.

    Args:
        current: This poll's samples
        previous: Previous poll's samples (None on the first poll)
        total_memory_bytes: Physical memory size

    Returns:
        One ProcessStat per current sample, in input order
    """
    by_pid = index_by_pid(previous or ())
    return [compute_process_stat(sample, by_pid, total_memory_bytes) for sample in current]


def _memory_stat(sample: SystemSample) -> MemoryStat:
    memory = sample.memory
    usage = memory.used / memory.total if memory.total > 0 else 0.0
    swap_usage = memory.swap_used / memory.swap_total if memory.swap_total > 0 else 0.0
    return MemoryStat(**memory.model_dump(), usage=usage, swap_usage=swap_usage)


def summarize_system(
    current: SystemSample,
    previous: SystemSample | None,
    init: SystemSample | None,
) -> SystemStat:
    """Derive system-wide figures.

    Args:
        current: This poll's sample
        previous: Previous poll's sample, for instantaneous rates
        init: Baseline sample from startup, for session totals

    Returns:
        SystemStat for this poll; rates are zero without a previous sample
    """
    cpu_usage = 0.0
    disk_read = 0.0
    disk_write = 0.0
    rx_rate = 0.0
    tx_rate = 0.0

    if previous is not None:
        elapsed_ms = current.sample_time_ms - previous.sample_time_ms
        total = counter_delta(current.cpu_total_time, previous.cpu_total_time)
        if total > 0:
            busy = counter_delta(current.cpu_busy_time, previous.cpu_busy_time)
            cpu_usage = min(busy / total, 1.0)
        if elapsed_ms > 0:
            disk_read = counter_delta(current.disk_read_ms, previous.disk_read_ms) / elapsed_ms
            disk_write = counter_delta(current.disk_write_ms, previous.disk_write_ms) / elapsed_ms
        rx_rate = rate(counter_delta(current.network_rx_bytes, previous.network_rx_bytes), elapsed_ms)
        tx_rate = rate(counter_delta(current.network_tx_bytes, previous.network_tx_bytes), elapsed_ms)

    baseline = init if init is not None else current
    rx_session = int(counter_delta(current.network_rx_bytes, baseline.network_rx_bytes))
    tx_session = int(counter_delta(current.network_tx_bytes, baseline.network_tx_bytes))

    cores = max(current.cpu_count, 1)
    one, five, fifteen = current.load_average

    return SystemStat(
        poll_time_ms=current.sample_time_ms,
        os_version=current.os_version,
        host_name=current.host_name,
        cpu_count=cores,
        cpu_usage=cpu_usage,
        load_average=(one / cores, five / cores, fifteen / cores),
        memory=_memory_stat(current),
        disk_read_utilization=disk_read,
        disk_write_utilization=disk_write,
        network_rx_rate=rx_rate,
        network_tx_rate=tx_rate,
        network_rx_session=rx_session,
        network_tx_session=tx_session,
        partitions=dict(current.partitions),
        temperatures=dict(current.temperatures),
    )


class SnapshotHistory(Generic[T]):
    """The three snapshots a delta computation needs.

    - init: first snapshot ever recorded, never replaced
    - previous: snapshot before the current one
    - current: latest snapshot

    Example:
        history = SnapshotHistory[SystemSample]()
        history.advance(provider.read_system_sample())
        stat = summarize_system(history.current, history.previous, history.init)
    """

    def __init__(self) -> None:
        self._init: T | None = None
        self._previous: T | None = None
        self._current: T | None = None

    @property
    def init(self) -> T | None:
        return self._init

    @property
    def previous(self) -> T | None:
        return self._previous

    @property
    def current(self) -> T | None:
        return self._current

    def advance(self, snapshot: T) -> None:
        """Make `snapshot` current, shifting the old current to previous."""
        self._previous = self._current
        self._current = snapshot
        if self._init is None:
            self._init = snapshot
            logger.debug("Baseline snapshot recorded")
