"""Tests for the psutil snapshot provider."""

import logging
from pathlib import Path
import subprocess
import sys
import time
from types import SimpleNamespace
from typing import Any
from unittest.mock import patch

import psutil
import pytest

from pskiller.collectors import PsutilSnapshotProvider, SnapshotProvider, parse_meminfo
from pskiller.models import ProcessSample, SystemSample

MEMINFO = """MemTotal:       16318256 kB
MemFree:         1234567 kB
Dirty:               128 kB
Writeback:            64 kB
HugePages_Total:       0
"""


class FakeProcess:
    """Stand-in for psutil.Process as yielded by process_iter."""

    def __init__(self, info: dict[str, Any]) -> None:
        self.pid = info.get("pid")
        self.info = info


class VanishingProcess:
    """Process that exits while its attributes are read."""

    pid = 99

    @property
    def info(self) -> dict[str, Any]:
        raise psutil.NoSuchProcess(self.pid)


class DeniedProcess:
    """Process the current user may not inspect."""

    pid = 98

    @property
    def info(self) -> dict[str, Any]:
        raise psutil.AccessDenied(self.pid)


def _info(pid: int = 10, **kwargs: Any) -> dict[str, Any]:
    info: dict[str, Any] = {
        "pid": pid,
        "ppid": 1,
        "name": "worker",
        "exe": "/usr/bin/worker",
        "cmdline": ["/usr/bin/worker", "--jobs", "4"],
        "cpu_times": SimpleNamespace(user=1.5, system=0.5),
        "memory_info": SimpleNamespace(rss=4096),
        "io_counters": SimpleNamespace(read_bytes=100, write_bytes=50),
        "create_time": 0.0,
        "uids": SimpleNamespace(real=1000),
        "username": "alice",
        "cwd": "/srv",
        "status": "running",
    }
    info.update(kwargs)
    return info


class TestParseMeminfo:
    """Tests for parse_meminfo."""

    def test_kilobytes_to_bytes(self) -> None:
        """Test kB values are converted to bytes."""
        values = parse_meminfo(MEMINFO)
        assert values["Dirty"] == 128 * 1024
        assert values["Writeback"] == 64 * 1024

    def test_unitless_values(self) -> None:
        """Test counts without a unit are kept as is."""
        assert parse_meminfo(MEMINFO)["HugePages_Total"] == 0

    def test_malformed_lines_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test malformed lines are logged and skipped."""
        content = "garbage line\nDirty: lots kB\nWriteback: 8 kB\n"
        log = logging.getLogger("test.meminfo")
        with caplog.at_level(logging.DEBUG, logger="test.meminfo"):
            values = parse_meminfo(content, log)
        assert values == {"Writeback": 8 * 1024}
        assert "malformed" in caplog.text


class TestReadProcessSamples:
    """Tests for reading processes."""

    def test_is_snapshot_provider(self) -> None:
        """Test the provider implements the provider interface."""
        provider = PsutilSnapshotProvider()
        assert isinstance(provider, SnapshotProvider)

    def test_sample_fields(self) -> None:
        """Test psutil attributes map onto a ProcessSample."""
        with (
            patch("psutil.process_iter", return_value=[FakeProcess(_info(create_time=996.0))]),
            patch("pskiller.collectors.psutil_provider.time.time", return_value=1000.0),
        ):
            samples = PsutilSnapshotProvider().read_process_samples()
        assert len(samples) == 1
        sample = samples[0]
        assert isinstance(sample, ProcessSample)
        assert sample.pid == 10
        assert sample.parent_pid == 1
        assert sample.exe_path == "/usr/bin/worker"
        assert sample.display_command == "/usr/bin/worker --jobs 4"
        assert sample.cpu_time_seconds == pytest.approx(2.0)
        assert sample.run_time_seconds == 4
        assert sample.cpu_usage_estimate == pytest.approx(0.5)
        assert sample.resident_memory_bytes == 4096
        assert sample.disk_bytes_total == 150
        assert sample.owner_uid == 1000
        assert sample.owner_name == "alice"
        assert sample.working_dir == "/srv"

    def test_unreadable_attributes(self) -> None:
        """Test attributes psutil could not read become empty values."""
        info = _info(
            exe=None,
            cmdline=None,
            cpu_times=None,
            memory_info=None,
            io_counters=None,
            create_time=None,
            uids=None,
            username=None,
            cwd=None,
        )
        with patch("psutil.process_iter", return_value=[FakeProcess(info)]):
            sample = PsutilSnapshotProvider().read_process_samples()[0]
        assert sample.exe_path == ""
        assert sample.display_command == "worker"
        assert sample.cpu_time_seconds == 0.0
        assert sample.resident_memory_bytes == 0
        assert sample.disk_bytes_total == 0
        assert sample.run_time_seconds == 0
        assert sample.cpu_usage_estimate == 0.0
        assert sample.owner_uid is None

    def test_vanished_processes_skipped(self) -> None:
        """Test processes that exit or deny access are left out."""
        procs = [VanishingProcess(), FakeProcess(_info(pid=11)), DeniedProcess()]
        with patch("psutil.process_iter", return_value=procs):
            samples = PsutilSnapshotProvider().read_process_samples()
        assert [sample.pid for sample in samples] == [11]

    def test_shared_sample_time(self) -> None:
        """Test every sample of a poll carries the same timestamp."""
        procs = [FakeProcess(_info(pid=1)), FakeProcess(_info(pid=2))]
        with patch("psutil.process_iter", return_value=procs):
            samples = PsutilSnapshotProvider().read_process_samples()
        assert samples[0].sample_time_ms == samples[1].sample_time_ms

    def test_real_processes(self) -> None:
        """Test the current process shows up in a real poll."""
        samples = PsutilSnapshotProvider().read_process_samples()
        assert psutil.Process().pid in [sample.pid for sample in samples]

    def test_new_busy_process_estimate(self) -> None:
        """Test a busy process seen for the first time does not read as idle."""
        child = subprocess.Popen([sys.executable, "-c", "while True: pass"])
        try:
            time.sleep(1.5)
            samples = PsutilSnapshotProvider().read_process_samples()
        finally:
            child.kill()
            child.wait()
        sample = next(sample for sample in samples if sample.pid == child.pid)
        assert sample.cpu_time_seconds > 0.2
        assert sample.cpu_usage_estimate > 0.1


class TestReadSystemSample:
    """Tests for reading system counters."""

    def test_real_sample(self) -> None:
        """Test a real system sample is plausible."""
        sample = PsutilSnapshotProvider().read_system_sample()
        assert isinstance(sample, SystemSample)
        assert sample.sample_time_ms > 0
        assert sample.cpu_count >= 1
        assert sample.cpu_total_time >= sample.cpu_busy_time
        assert sample.memory.total > 0

    def test_failed_read_defaults(self) -> None:
        """Test a failing OS read is replaced by a default value."""
        with patch("psutil.getloadavg", side_effect=OSError("not supported")):
            sample = PsutilSnapshotProvider().read_system_sample()
        assert sample.load_average == (0.0, 0.0, 0.0)

    def test_meminfo_extras(self, tmp_path: Path) -> None:
        """Test dirty and writeback come from the meminfo file."""
        meminfo = tmp_path / "meminfo"
        meminfo.write_text(MEMINFO)
        sample = PsutilSnapshotProvider(meminfo_path=str(meminfo)).read_system_sample()
        assert sample.memory.dirty == 128 * 1024
        assert sample.memory.writeback == 64 * 1024

    def test_missing_meminfo(self, tmp_path: Path) -> None:
        """Test a missing meminfo file leaves dirty pages at zero."""
        provider = PsutilSnapshotProvider(meminfo_path=str(tmp_path / "absent"))
        assert provider.read_system_sample().memory.dirty == 0

    def test_loopback_excluded(self) -> None:
        """Test loopback traffic is not counted."""
        counters = {
            "lo": SimpleNamespace(bytes_recv=10_000, bytes_sent=10_000),
            "eth0": SimpleNamespace(bytes_recv=300, bytes_sent=200),
        }
        with patch("psutil.net_io_counters", return_value=counters):
            sample = PsutilSnapshotProvider().read_system_sample()
        assert sample.network_rx_bytes == 300
        assert sample.network_tx_bytes == 200
