"""Tests for pskiller data models."""

from pydantic import ValidationError
import pytest

from pskiller.models import (
    Focus,
    MetricType,
    Ordering,
    PartitionUsage,
    ProcessSample,
    ProcessStat,
    SystemSample,
    SystemStat,
)


class TestOrdering:
    """Tests for the Ordering enum."""

    def test_cycle(self) -> None:
        """Test next() cycles uptime -> memory -> cpu -> uptime."""
        assert Ordering.BY_UPTIME.next() is Ordering.BY_MEMORY
        assert Ordering.BY_MEMORY.next() is Ordering.BY_CPU
        assert Ordering.BY_CPU.next() is Ordering.BY_UPTIME

    def test_column_names(self) -> None:
        """Test each ordering maps to its table column."""
        assert Ordering.BY_UPTIME.column == "Uptime"
        assert Ordering.BY_MEMORY.column == "MEM"
        assert Ordering.BY_CPU.column == "CPU"

    def test_from_config_value(self) -> None:
        """Test orderings are built from their config strings."""
        assert Ordering("cpu") is Ordering.BY_CPU


class TestFocus:
    """Tests for the Focus enum."""

    def test_four_modes(self) -> None:
        """Test exactly four interaction modes exist."""
        assert set(Focus) == {
            Focus.BROWSE,
            Focus.PROCESS_FILTER,
            Focus.SIGNAL_PICK,
            Focus.SYSTEM_STATS,
        }


class TestProcessSample:
    """Tests for ProcessSample."""

    def test_display_name_prefers_command(self) -> None:
        """Test the command line is shown when known."""
        sample = ProcessSample(pid=1, name="sh", display_command="sh -c true", sample_time_ms=0)
        assert sample.display_name == "sh -c true"

    def test_display_name_falls_back_to_name(self) -> None:
        """Test the short name is shown without a command line."""
        sample = ProcessSample(pid=1, name="kworker", sample_time_ms=0)
        assert sample.display_name == "kworker"

    def test_frozen(self) -> None:
        """Test samples cannot be modified."""
        sample = ProcessSample(pid=1, sample_time_ms=0)
        with pytest.raises(ValidationError):
            sample.pid = 2  # type: ignore[misc]

    def test_negative_pid_rejected(self) -> None:
        """Test negative pids fail validation."""
        with pytest.raises(ValidationError):
            ProcessSample(pid=-1, sample_time_ms=0)

    def test_unknown_field_rejected(self) -> None:
        """Test extra fields are forbidden."""
        with pytest.raises(ValidationError):
            ProcessSample(pid=1, sample_time_ms=0, color="red")  # type: ignore[call-arg]

    def test_metric_types(self) -> None:
        """Test counters and gauges are annotated in the JSON schema."""
        properties = ProcessSample.model_json_schema()["properties"]
        assert properties["cpu_time_seconds"]["metric_type"] == MetricType.COUNTER.value
        assert properties["resident_memory_bytes"]["metric_type"] == MetricType.GAUGE.value
        assert "metric_type" not in properties["name"]


class TestProcessStat:
    """Tests for ProcessStat."""

    def test_search_name(self) -> None:
        """Test the filter haystack is "{pid} {display_name}"."""
        stat = ProcessStat(pid=42, display_name="/usr/bin/vim notes.txt")
        assert stat.search_name() == "42 /usr/bin/vim notes.txt"

    def test_single_process_members(self) -> None:
        """Test a plain entry targets only its own pid."""
        stat = ProcessStat(pid=7)
        assert not stat.is_group
        assert stat.member_pids == [7]

    def test_group_members(self) -> None:
        """Test a group entry targets every child."""
        children = [ProcessStat(pid=3), ProcessStat(pid=9)]
        stat = ProcessStat(pid=3, group_children=children)
        assert stat.is_group
        assert stat.member_pids == [3, 9]


class TestSystemModels:
    """Tests for system-wide models."""

    def test_partition_usage(self) -> None:
        """Test partition usage fraction."""
        assert PartitionUsage(total_bytes=200, used_bytes=50).usage == 0.25

    def test_empty_partition_usage(self) -> None:
        """Test a zero-sized partition reports no usage."""
        assert PartitionUsage().usage == 0.0

    def test_system_stat_defaults(self) -> None:
        """Test SystemStat can be built before the first poll."""
        stat = SystemStat()
        assert stat.cpu_usage == 0.0
        assert stat.memory.total == 0
        assert stat.partitions == {}

    def test_system_sample_counters(self) -> None:
        """Test cumulative system fields are counters."""
        properties = SystemSample.model_json_schema()["properties"]
        assert properties["cpu_busy_time"]["metric_type"] == MetricType.COUNTER.value
        assert properties["network_rx_bytes"]["metric_type"] == MetricType.COUNTER.value
        assert "metric_type" not in properties["host_name"]
