"""Filtering, grouping and sorting of the process list.

The visible list is always built in the same order: filter, then group
(when enabled), then sort. Groups therefore only contain processes that
matched the filter.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pskiller.engine.aggregate import group_by_executable
from pskiller.models import Ordering, ProcessStat


def filter_tokens(filter_text: str) -> list[str]:
    """Split filter text into lowercase words."""
    return filter_text.lower().split()


def matches_filter(stat: ProcessStat, tokens: Sequence[str]) -> bool:
    """Check if a process matches every filter word.

    Args:
        stat: Process to check
        tokens: Lowercase filter words; empty matches everything

    Returns:
        True if each word occurs in the lowercased "{pid} {display_name}"
    """
    haystack = stat.search_name().lower()
    return all(token in haystack for token in tokens)


def filter_processes(stats: Iterable[ProcessStat], filter_text: str) -> list[ProcessStat]:
    """Keep processes matching all words of `filter_text`."""
    tokens = filter_tokens(filter_text)
    if not tokens:
        return list(stats)
    return [stat for stat in stats if matches_filter(stat, tokens)]


def sort_processes(stats: Iterable[ProcessStat], ordering: Ordering) -> list[ProcessStat]:
    """Sort processes for display.

    Every ordering breaks ties by descending pid, so entries with equal
    metrics keep their relative position from one poll to the next.

    - BY_UPTIME: shortest run time first
    - BY_MEMORY: highest memory usage first
    - BY_CPU: highest CPU usage first

    Args:
        stats: Processes to sort
        ordering: Active sort mode

    Returns:
        New sorted list
    """
    if ordering is Ordering.BY_UPTIME:
        return sorted(stats, key=lambda s: (s.run_time_seconds, -s.pid))
    elif ordering is Ordering.BY_MEMORY:
        return sorted(stats, key=lambda s: (-s.memory_usage, -s.pid))
    elif ordering is Ordering.BY_CPU:
        return sorted(stats, key=lambda s: (-s.cpu_usage, -s.pid))
    raise ValueError(f"Unknown ordering: {ordering!r}")


def apply(
    stats: Iterable[ProcessStat],
    filter_text: str,
    ordering: Ordering,
    grouped: bool,
) -> list[ProcessStat]:
    """Build the visible process list.

    Args:
        stats: All processes from the latest poll
        filter_text: Free-text filter (AND of whitespace separated words)
        ordering: Active sort mode
        grouped: Merge processes by executable path

    Returns:
        Filtered, optionally grouped, sorted list
    """
    visible = filter_processes(stats, filter_text)
    if grouped:
        visible = group_by_executable(visible)
    return sort_processes(visible, ordering)


def clamp_cursor(cursor: int, length: int) -> int:
    """Clamp a list cursor into [0, length - 1], or 0 for an empty list."""
    if length <= 0:
        return 0
    return max(0, min(cursor, length - 1))
