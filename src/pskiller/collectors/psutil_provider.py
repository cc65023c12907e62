"""Snapshot provider backed by psutil.

Processes that vanish or turn into zombies while being read are skipped.
Any other metric that cannot be read on a given poll is replaced by zero
(or an empty value) and the poll carries on; the failure is logged at debug
level only, since permission errors on other users' processes are routine.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path
import platform
import time
from typing import Any, TypeVar

import psutil

from pskiller.collectors.base import SnapshotProvider
from pskiller.models import MemorySample, PartitionUsage, ProcessSample, SystemSample

logger = logging.getLogger(__name__)

T = TypeVar("T")

MEMINFO_PATH = "/proc/meminfo"

# Loopback traffic is not network transfer
LOOPBACK_INTERFACES = frozenset({"lo", "lo0"})


def _now_ms() -> int:
    return int(time.time() * 1000)


def parse_meminfo(content: str, log: logging.Logger | None = None) -> dict[str, int]:
    """Parse /proc/meminfo into a dict of byte values.

    Lines look like "Dirty:           1234 kB". Lines that do not follow
    that shape are logged and skipped.

    Args:
        content: File content
        log: Logger for malformed lines

    Returns:
        Mapping of field name to bytes
    """
    log = log or logger
    values: dict[str, int] = {}
    for line in content.splitlines():
        if not line.strip():
            continue
        key, sep, rest = line.partition(":")
        parts = rest.split()
        if not sep or not parts:
            log.debug("Skipping malformed meminfo line: %r", line)
            continue
        try:
            amount = int(parts[0])
        except ValueError:
            log.debug("Skipping malformed meminfo line: %r", line)
            continue
        if len(parts) > 1 and parts[1].lower() == "kb":
            amount *= 1024
        values[key.strip()] = amount
    return values


class PsutilSnapshotProvider(SnapshotProvider):
    """Reads processes and system counters through psutil.

    Class Attributes:
        PROCESS_ATTRS: Process attributes fetched in one pass
    """

    PROCESS_ATTRS = [
        "pid",
        "ppid",
        "name",
        "exe",
        "cmdline",
        "cpu_times",
        "memory_info",
        "io_counters",
        "create_time",
        "uids",
        "username",
        "cwd",
        "status",
    ]

    def __init__(
        self,
        logger: logging.Logger | None = None,
        meminfo_path: str = MEMINFO_PATH,
    ) -> None:
        """Initialize the provider.

        Args:
            logger: Logger for read failures (defaults to the module logger)
            meminfo_path: Location of the kernel meminfo file
        """
        self._log = logger or logging.getLogger(__name__)
        self._meminfo_path = Path(meminfo_path)

    def _read(self, metric: str, reader: Callable[[], T], default: T) -> T:
        """Run one OS read, substituting `default` if it fails."""
        try:
            return reader()
        except (psutil.Error, OSError, AttributeError, ValueError) as e:
            self._log.debug("Could not read %s: %s", metric, e)
            return default

    # Processes

    def read_process_samples(self) -> list[ProcessSample]:
        """Read every visible process.

        Returns:
            One sample per readable process
        """
        sample_time_ms = _now_ms()
        now = sample_time_ms / 1000
        samples: list[ProcessSample] = []

        # io_counters and friends do not exist on every platform
        attrs = [attr for attr in self.PROCESS_ATTRS if hasattr(psutil.Process, attr)]
        for proc in psutil.process_iter(attrs=attrs, ad_value=None):
            try:
                info = proc.info
                if info is None:
                    continue
                samples.append(self._build_process_sample(info, now, sample_time_ms))
            except (psutil.NoSuchProcess, psutil.ZombieProcess):
                # Process went away while being read
                continue
            except (psutil.AccessDenied, ValueError) as e:
                self._log.debug("Skipping process %s: %s", getattr(proc, "pid", "?"), e)
                continue

        return samples

    def _build_process_sample(
        self,
        info: dict[str, Any],
        now: float,
        sample_time_ms: int,
    ) -> ProcessSample:
        name = info.get("name") or ""

        cmdline = info.get("cmdline")
        command = " ".join(cmdline) if cmdline else ""

        cpu_times = info.get("cpu_times")
        cpu_time = 0.0
        if cpu_times is not None:
            cpu_time = (getattr(cpu_times, "user", 0.0) or 0.0) + (
                getattr(cpu_times, "system", 0.0) or 0.0
            )

        memory_info = info.get("memory_info")
        rss = 0
        if memory_info is not None:
            rss = getattr(memory_info, "rss", 0) or 0

        io = info.get("io_counters")
        disk_bytes = 0
        if io is not None:
            disk_bytes = (getattr(io, "read_bytes", 0) or 0) + (getattr(io, "write_bytes", 0) or 0)

        create_time = info.get("create_time") or 0.0
        elapsed = now - create_time if create_time > 0 else 0.0
        run_time = int(elapsed)

        # Average over the lifetime; psutil.cpu_percent() reads 0.0 on a first call
        estimate = cpu_time / elapsed if elapsed > 0 else 0.0

        uids = info.get("uids")
        owner_uid = getattr(uids, "real", None) if uids is not None else None

        return ProcessSample(
            pid=info.get("pid", 0) or 0,
            parent_pid=info.get("ppid"),
            name=name,
            exe_path=info.get("exe") or "",
            display_command=command or name,
            cpu_time_seconds=max(cpu_time, 0.0),
            cpu_usage_estimate=max(estimate, 0.0),
            resident_memory_bytes=rss,
            disk_bytes_total=disk_bytes,
            run_time_seconds=max(run_time, 0),
            owner_uid=owner_uid,
            owner_name=info.get("username") or "",
            working_dir=info.get("cwd") or "",
            status=info.get("status") or "unknown",
            sample_time_ms=sample_time_ms,
        )

    # System

    def read_system_sample(self) -> SystemSample:
        """Read system-wide counters.

        Returns:
            SystemSample for the current moment
        """
        busy, total = self._read("cpu times", self._cpu_times, (0.0, 0.0))
        disk_read_ms, disk_write_ms = self._read("disk io", self._disk_busy_ms, (0, 0))
        rx, tx = self._read("network io", self._network_bytes, (0, 0))

        return SystemSample(
            sample_time_ms=_now_ms(),
            os_version=self._read("os version", self._os_version, ""),
            host_name=self._read("host name", platform.node, ""),
            cpu_count=self._read("cpu count", lambda: psutil.cpu_count() or 1, 1),
            cpu_busy_time=busy,
            cpu_total_time=total,
            load_average=self._read("load average", psutil.getloadavg, (0.0, 0.0, 0.0)),
            memory=self._read("memory", self._memory, MemorySample()),
            disk_read_ms=disk_read_ms,
            disk_write_ms=disk_write_ms,
            network_rx_bytes=rx,
            network_tx_bytes=tx,
            partitions=self._read("partitions", self._partitions, {}),
            temperatures=self._read("temperatures", self._temperatures, {}),
        )

    @staticmethod
    def _os_version() -> str:
        return f"{platform.system()} {platform.release()}".strip()

    @staticmethod
    def _cpu_times() -> tuple[float, float]:
        times = psutil.cpu_times()
        # guest time is already accounted in user time on Linux
        total = sum(times) - getattr(times, "guest", 0.0) - getattr(times, "guest_nice", 0.0)
        idle = times.idle + getattr(times, "iowait", 0.0)
        return max(total - idle, 0.0), max(total, 0.0)

    @staticmethod
    def _disk_busy_ms() -> tuple[int, int]:
        counters = psutil.disk_io_counters()
        if counters is None:
            return 0, 0
        return int(counters.read_time), int(counters.write_time)

    @staticmethod
    def _network_bytes() -> tuple[int, int]:
        rx = 0
        tx = 0
        for nic, counters in psutil.net_io_counters(pernic=True).items():
            if nic in LOOPBACK_INTERFACES:
                continue
            rx += counters.bytes_recv
            tx += counters.bytes_sent
        return rx, tx

    def _memory(self) -> MemorySample:
        vm = psutil.virtual_memory()
        swap = self._read("swap", psutil.swap_memory, None)
        extra: dict[str, int] = {}
        if self._meminfo_path.exists():
            extra = parse_meminfo(self._meminfo_path.read_text(), self._log)

        return MemorySample(
            total=vm.total,
            used=max(vm.total - vm.available, 0),
            free=vm.free,
            available=vm.available,
            cache=getattr(vm, "cached", 0) or 0,
            buffers=getattr(vm, "buffers", 0) or 0,
            dirty=extra.get("Dirty", 0),
            writeback=extra.get("Writeback", 0),
            swap_total=swap.total if swap is not None else 0,
            swap_used=swap.used if swap is not None else 0,
        )

    def _partitions(self) -> dict[str, PartitionUsage]:
        partitions: dict[str, PartitionUsage] = {}
        for partition in psutil.disk_partitions(all=False):
            mount = partition.mountpoint
            usage = self._read(f"disk usage of {mount}", lambda m=mount: psutil.disk_usage(m), None)
            if usage is None:
                continue
            partitions[mount] = PartitionUsage(total_bytes=usage.total, used_bytes=usage.used)
        return partitions

    @staticmethod
    def _temperatures() -> dict[str, float]:
        sensors = getattr(psutil, "sensors_temperatures", None)
        if sensors is None:
            return {}
        temperatures: dict[str, float] = {}
        for chip, entries in sensors().items():
            for index, entry in enumerate(entries):
                if entry.label:
                    label = f"{chip} {entry.label}"
                elif len(entries) == 1:
                    label = chip
                else:
                    label = f"{chip} {index}"
                temperatures[label] = float(entry.current)
        return temperatures
