"""Shared fixtures for pskiller tests."""

from collections.abc import Sequence

import pytest

from pskiller.collectors import SnapshotProvider
from pskiller.models import MemorySample, ProcessSample, SystemSample

GIB = 1024**3


def make_sample(pid: int, **kwargs: object) -> ProcessSample:
    """Build a ProcessSample with sensible defaults."""
    values: dict[str, object] = {
        "name": f"proc{pid}",
        "exe_path": f"/usr/bin/proc{pid}",
        "display_command": f"/usr/bin/proc{pid} --flag",
        "sample_time_ms": 1000,
        "run_time_seconds": pid,
    }
    values.update(kwargs)
    return ProcessSample(pid=pid, **values)


def make_system(sample_time_ms: int = 1000, **kwargs: object) -> SystemSample:
    """Build a SystemSample with 16 GiB of RAM."""
    values: dict[str, object] = {
        "os_version": "Linux 6.1",
        "host_name": "testhost",
        "cpu_count": 4,
        "memory": MemorySample(total=16 * GIB, used=4 * GIB, free=8 * GIB, available=12 * GIB),
    }
    values.update(kwargs)
    return SystemSample(sample_time_ms=sample_time_ms, **values)


class FakeSnapshotProvider(SnapshotProvider):
    """Provider that replays scripted polls.

    Each read returns the next scripted poll; the last one repeats once the
    script runs out.
    """

    def __init__(
        self,
        process_polls: Sequence[Sequence[ProcessSample]] | None = None,
        system_polls: Sequence[SystemSample] | None = None,
    ) -> None:
        self.process_polls = [list(poll) for poll in (process_polls or [[]])]
        self.system_polls = list(system_polls or [make_system()])
        self.process_reads = 0
        self.system_reads = 0

    def read_process_samples(self) -> list[ProcessSample]:
        poll = self.process_polls[min(self.process_reads, len(self.process_polls) - 1)]
        self.process_reads += 1
        return list(poll)

    def read_system_sample(self) -> SystemSample:
        sample = self.system_polls[min(self.system_reads, len(self.system_polls) - 1)]
        self.system_reads += 1
        return sample


@pytest.fixture
def samples() -> list[ProcessSample]:
    """Five processes; pids 3 and 4 share an executable."""
    return [
        make_sample(1, name="init", exe_path="/sbin/init", display_command="/sbin/init", run_time_seconds=5000),
        make_sample(2, name="bash", exe_path="/bin/bash", display_command="bash", run_time_seconds=300),
        make_sample(
            3,
            name="chrome",
            exe_path="/opt/chrome/chrome",
            display_command="/opt/chrome/chrome --type=renderer",
            resident_memory_bytes=2 * GIB,
            run_time_seconds=100,
        ),
        make_sample(
            4,
            name="chrome",
            exe_path="/opt/chrome/chrome",
            display_command="/opt/chrome/chrome --type=gpu",
            resident_memory_bytes=GIB,
            run_time_seconds=200,
        ),
        make_sample(5, name="python", exe_path="/usr/bin/python3", display_command="python3 app.py", run_time_seconds=50),
    ]


@pytest.fixture
def provider(samples: list[ProcessSample]) -> FakeSnapshotProvider:
    """Provider returning the sample processes on every poll."""
    return FakeSnapshotProvider(process_polls=[samples])
