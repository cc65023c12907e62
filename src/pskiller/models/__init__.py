"""Pydantic data models for pskiller.

This module provides the core data models used throughout pskiller:
- ProcessSample / ProcessStat: Raw and derived per-process data
- SystemSample / SystemStat: Raw and derived system-wide data
- Ordering, Focus: Sort modes and interaction modes
- MetricType, counter_field, gauge_field: Metric type metadata helpers
"""

from pskiller.models.base import (
    Focus,
    MetricType,
    Ordering,
    counter_field,
    gauge_field,
)
from pskiller.models.process import ProcessSample, ProcessStat
from pskiller.models.system import (
    MemorySample,
    MemoryStat,
    PartitionUsage,
    SystemSample,
    SystemStat,
)

__all__ = [
    # Process models
    "ProcessSample",
    "ProcessStat",
    # System models
    "MemorySample",
    "MemoryStat",
    "PartitionUsage",
    "SystemSample",
    "SystemStat",
    # Enums
    "Focus",
    "MetricType",
    "Ordering",
    # Field factories
    "counter_field",
    "gauge_field",
]
