"""Metrics and list-building engine for pskiller.

This module provides:
- delta: Rates from consecutive snapshots and snapshot retention
- aggregate: Grouping of processes by executable path
- view: Filtering, grouping and sorting of the visible list
- summary: System panel lines
"""

from pskiller.engine.aggregate import group_by_executable, merge_group
from pskiller.engine.delta import (
    SnapshotHistory,
    compute_cpu_usage,
    compute_process_stat,
    compute_process_stats,
    counter_delta,
    index_by_pid,
    rate,
    summarize_system,
)
from pskiller.engine.summary import SummaryLine, summarize
from pskiller.engine.view import (
    apply,
    clamp_cursor,
    filter_processes,
    matches_filter,
    sort_processes,
)

__all__ = [
    "SnapshotHistory",
    "SummaryLine",
    "apply",
    "clamp_cursor",
    "compute_cpu_usage",
    "compute_process_stat",
    "compute_process_stats",
    "counter_delta",
    "filter_processes",
    "group_by_executable",
    "index_by_pid",
    "matches_filter",
    "merge_group",
    "rate",
    "sort_processes",
    "summarize",
    "summarize_system",
]
