"""Tests for the System panel lines."""

from pskiller.engine import SummaryLine, summarize
from pskiller.models import MemoryStat, PartitionUsage, SystemStat

GIB = 1024**3


def _labels(lines: list[SummaryLine]) -> list[str]:
    return [line.label for line in lines]


def _line(lines: list[SummaryLine], label: str) -> SummaryLine:
    return next(line for line in lines if line.label == label)


class TestSummarize:
    """Tests for summarize."""

    def test_identity_first(self) -> None:
        """Test OS and host open the panel."""
        lines = summarize(SystemStat(os_version="Linux 6.1", host_name="box"))
        assert lines[0] == SummaryLine("OS", "Linux 6.1")
        assert lines[1] == SummaryLine("Host", "box")

    def test_section_headers(self) -> None:
        """Test the always-present sections appear in order."""
        headers = [line.label for line in summarize(SystemStat()) if line.header]
        assert headers == ["# Memory", "# CPU", "# Disk IO utilization", "# Network"]

    def test_blank_line_between_sections(self) -> None:
        """Test each header is preceded by a blank line."""
        lines = summarize(SystemStat())
        for index, line in enumerate(lines):
            if line.header:
                assert lines[index - 1].is_blank

    def test_memory_usage(self) -> None:
        """Test the used memory line carries its usage fraction."""
        stat = SystemStat(memory=MemoryStat(total=16 * GIB, used=4 * GIB, usage=0.25))
        used = _line(summarize(stat), "Used")
        assert used.value == "4.00G / 16.0G (25.0%)"
        assert used.usage == 0.25

    def test_swap_only_when_present(self) -> None:
        """Test the swap line needs swap space."""
        assert "Swap" not in _labels(summarize(SystemStat()))
        stat = SystemStat(memory=MemoryStat(swap_total=GIB, swap_used=GIB // 4, swap_usage=0.25))
        assert "Swap" in _labels(summarize(stat))

    def test_cpu_lines(self) -> None:
        """Test core count, usage and the three load averages."""
        stat = SystemStat(cpu_count=8, cpu_usage=0.5, load_average=(0.25, 0.5, 0.75))
        lines = summarize(stat)
        assert _line(lines, "Cores").value == "8"
        assert _line(lines, "Usage").value == "50.00% / 100%"
        assert _line(lines, "1m Load average").value == "25.00% / 100%"
        assert _line(lines, "15m Load average").usage == 0.75

    def test_partitions_sorted(self) -> None:
        """Test partitions are listed by mount point."""
        stat = SystemStat(
            partitions={
                "/home": PartitionUsage(total_bytes=100, used_bytes=50),
                "/": PartitionUsage(total_bytes=100, used_bytes=10),
            }
        )
        labels = _labels(summarize(stat))
        start = labels.index("# Disk space usage")
        assert labels[start + 1 : start + 3] == ["/", "/home"]

    def test_network_lines(self) -> None:
        """Test rates and session totals."""
        stat = SystemStat(network_rx_rate=2048, network_tx_session=1024)
        lines = summarize(stat)
        assert _line(lines, "Receiving").value == "2.00K/s"
        assert _line(lines, "Transmitted so far").value == "1.00K"

    def test_temperatures(self) -> None:
        """Test temperatures appear only when sensors exist."""
        assert "# Temperatures" not in _labels(summarize(SystemStat()))
        lines = summarize(SystemStat(temperatures={"coretemp": 54.6}))
        assert _line(lines, "coretemp").value == "55°C"
