"""Grouping of processes that run the same executable."""

from __future__ import annotations

from collections.abc import Sequence

from pskiller.models import ProcessStat


def merge_group(members: Sequence[ProcessStat]) -> ProcessStat:
    """Build one synthetic entry for processes sharing an executable.

    CPU, memory and disk figures are summed; run time is the longest among
    the members since uptime does not add up. Identity and context come from
    the member with the lowest pid so the representative stays the same
    across polls.

    Args:
        members: Non-empty list of processes with the same exe_path

    Returns:
        A new ProcessStat whose group_children are the members
    """
    if not members:
        raise ValueError("Cannot merge an empty group")

    representative = min(members, key=lambda member: member.pid)
    return representative.model_copy(
        update={
            "cpu_usage": sum(member.cpu_usage for member in members),
            "memory_usage": sum(member.memory_usage for member in members),
            "memory_bytes": sum(member.memory_bytes for member in members),
            "disk_usage_bytes": sum(member.disk_usage_bytes for member in members),
            "disk_rate": sum(member.disk_rate for member in members),
            "run_time_seconds": max(member.run_time_seconds for member in members),
            "group_children": list(members),
        }
    )


def group_by_executable(stats: Sequence[ProcessStat]) -> list[ProcessStat]:
    """Merge processes that share an executable path.

    Processes whose path is unknown are never merged with each other; they
    stay in the output as they are. So do executables with a single running
    process. Entries appear in the order their executable is first seen.

    Args:
        stats: Per-process stats (not modified)

    Returns:
        New list with one entry per executable
    """
    slots: list[ProcessStat | str] = []
    partitions: dict[str, list[ProcessStat]] = {}

    for stat in stats:
        if not stat.exe_path:
            slots.append(stat)
            continue
        members = partitions.get(stat.exe_path)
        if members is None:
            members = partitions[stat.exe_path] = []
            slots.append(stat.exe_path)
        members.append(stat)

    result: list[ProcessStat] = []
    for slot in slots:
        if isinstance(slot, ProcessStat):
            result.append(slot)
            continue
        members = partitions[slot]
        result.append(members[0] if len(members) == 1 else merge_group(members))
    return result
