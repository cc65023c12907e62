"""Text lines of the System panel."""

from __future__ import annotations

from dataclasses import dataclass

from pskiller.formatting import format_bytes, format_percent, format_rate
from pskiller.models import SystemStat


@dataclass(frozen=True)
class SummaryLine:
    """One line of the system summary.

    Attributes:
        label: Section title for headers, field name otherwise
        value: Formatted value (empty for headers and blank lines)
        usage: Fraction used to color the value, None for neutral values
        header: Whether this line starts a section
    """

    label: str = ""
    value: str = ""
    usage: float | None = None
    header: bool = False

    @property
    def is_blank(self) -> bool:
        return not self.label and not self.value


BLANK = SummaryLine()


def _section(lines: list[SummaryLine], title: str) -> None:
    if lines:
        lines.append(BLANK)
    lines.append(SummaryLine(title, header=True))


def summarize(stat: SystemStat) -> list[SummaryLine]:
    """Build the System panel content for a poll.

    Sections without data (no swap, no partitions, no sensors) are left out.

    Args:
        stat: Derived system figures

    Returns:
        Lines in display order
    """
    lines = [
        SummaryLine("OS", stat.os_version),
        SummaryLine("Host", stat.host_name),
    ]

    memory = stat.memory
    _section(lines, "# Memory")
    lines.append(
        SummaryLine(
            "Used",
            f"{format_bytes(memory.used)} / {format_bytes(memory.total)} "
            f"({format_percent(memory.usage)})",
            usage=memory.usage,
        )
    )
    lines.append(SummaryLine("Cache", format_bytes(memory.cache)))
    lines.append(SummaryLine("Buffers", format_bytes(memory.buffers)))
    lines.append(SummaryLine("Dirty & Writeback", format_bytes(memory.dirty + memory.writeback)))
    if memory.swap_total > 0:
        lines.append(
            SummaryLine(
                "Swap",
                f"{format_bytes(memory.swap_used)} / {format_bytes(memory.swap_total)} "
                f"({format_percent(memory.swap_usage)})",
                usage=memory.swap_usage,
            )
        )

    _section(lines, "# CPU")
    lines.append(SummaryLine("Cores", str(stat.cpu_count)))
    lines.append(
        SummaryLine("Usage", f"{format_percent(stat.cpu_usage, 2)} / 100%", usage=stat.cpu_usage)
    )
    for period, load in zip(("1m", "5m", "15m"), stat.load_average):
        lines.append(
            SummaryLine(f"{period} Load average", f"{format_percent(load, 2)} / 100%", usage=load)
        )

    if stat.partitions:
        _section(lines, "# Disk space usage")
        for mount in sorted(stat.partitions):
            partition = stat.partitions[mount]
            lines.append(
                SummaryLine(
                    mount,
                    f"{format_bytes(partition.used_bytes)} / {format_bytes(partition.total_bytes)} "
                    f"({format_percent(partition.usage)})",
                    usage=partition.usage,
                )
            )

    _section(lines, "# Disk IO utilization")
    lines.append(
        SummaryLine("Reading", format_percent(stat.disk_read_utilization), usage=stat.disk_read_utilization)
    )
    lines.append(
        SummaryLine("Writing", format_percent(stat.disk_write_utilization), usage=stat.disk_write_utilization)
    )

    _section(lines, "# Network")
    lines.append(SummaryLine("Receiving", format_rate(stat.network_rx_rate)))
    lines.append(SummaryLine("Transmitting", format_rate(stat.network_tx_rate)))
    lines.append(SummaryLine("Received so far", format_bytes(stat.network_rx_session)))
    lines.append(SummaryLine("Transmitted so far", format_bytes(stat.network_tx_session)))

    if stat.temperatures:
        _section(lines, "# Temperatures")
        for label in sorted(stat.temperatures):
            lines.append(SummaryLine(label, f"{stat.temperatures[label]:.0f}°C"))

    return lines
