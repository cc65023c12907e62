"""Base Pydantic helpers and enums for pskiller data types.

This module defines the building blocks shared by all pskiller models:
- MetricType: Enum for semantic metric types (counter, gauge)
- counter_field, gauge_field: Field factories carrying metric type metadata
- Ordering: Sort modes for the process list
- Focus: Interaction modes of the application state machine
"""

from enum import Enum
from typing import Any

from pydantic import Field


class MetricType(str, Enum):
    """Semantic types for metrics following Prometheus conventions.

    Attributes:
        COUNTER: Monotonically increasing value that only goes up (may reset to zero).
                 Used for: cumulative CPU time, bytes read, bytes received.
                 Rates are computed as delta/time between two snapshots.
        GAUGE: Value that can go up and down, representing current state.
               Used for: resident memory, uptime, temperature.
    """

    COUNTER = "counter"
    GAUGE = "gauge"


class Ordering(str, Enum):
    """Sort modes for the process list.

    Attributes:
        BY_UPTIME: Youngest processes first
        BY_MEMORY: Largest memory users first
        BY_CPU: Busiest processes first
    """

    BY_UPTIME = "uptime"
    BY_MEMORY = "memory"
    BY_CPU = "cpu"

    def next(self) -> "Ordering":
        """Cycle to the next ordering.

        Returns:
            The next ordering in the cycle: UPTIME -> MEMORY -> CPU -> UPTIME
        """
        orderings = list(Ordering)
        idx = (orderings.index(self) + 1) % len(orderings)
        return orderings[idx]

    @property
    def column(self) -> str:
        """Name of the table column this ordering sorts by."""
        if self is Ordering.BY_MEMORY:
            return "MEM"
        if self is Ordering.BY_CPU:
            return "CPU"
        return "Uptime"


class Focus(str, Enum):
    """Interaction modes of the application.

    Exactly one focus is active at a time. It decides which keys are
    interpreted and which cursor moves.
    """

    BROWSE = "browse"
    PROCESS_FILTER = "process_filter"
    SIGNAL_PICK = "signal_pick"
    SYSTEM_STATS = "system_stats"


def _metric_field(
    metric_type: MetricType,
    description: str = "",
    **kwargs: Any,
) -> Any:
    """Create a Pydantic Field with metric type metadata.

    Args:
        metric_type: The semantic type of this metric
        description: Human-readable description of the metric
        **kwargs: Additional Field arguments (ge, le, default, etc.)

    Returns:
        A Pydantic Field with json_schema_extra containing metric_type
    """
    extra = kwargs.pop("json_schema_extra", {})
    if isinstance(extra, dict):
        extra = {**extra, "metric_type": metric_type.value}
    else:
        extra = {"metric_type": metric_type.value}

    return Field(description=description, json_schema_extra=extra, **kwargs)


def counter_field(description: str = "", **kwargs: Any) -> Any:
    """Create a counter metric field.

    Counters are cumulative values that only go up (and may reset to zero
    when the process or machine restarts).

    Example:
        cpu_time_seconds: float = counter_field("Cumulative CPU time")
    """
    return _metric_field(MetricType.COUNTER, description, **kwargs)


def gauge_field(description: str = "", **kwargs: Any) -> Any:
    """Create a gauge metric field.

    Example:
        resident_memory_bytes: int = gauge_field("Resident set size", ge=0)
    """
    return _metric_field(MetricType.GAUGE, description, **kwargs)

