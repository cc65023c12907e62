"""Snapshot providers for pskiller."""

from pskiller.collectors.base import SnapshotProvider
from pskiller.collectors.psutil_provider import PsutilSnapshotProvider, parse_meminfo

__all__ = [
    "PsutilSnapshotProvider",
    "SnapshotProvider",
    "parse_meminfo",
]
