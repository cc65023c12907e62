"""Abstract base class for snapshot providers.

A snapshot provider takes point-in-time readings of the OS. It does no
arithmetic on them: turning counters into rates is the engine's job.
"""

from abc import ABC, abstractmethod

from pskiller.models import ProcessSample, SystemSample


class SnapshotProvider(ABC):
    """Source of process and system readings.

    Both reads are cheap and side-effect free apart from the read itself.
    The two calls are not atomic with respect to each other, which is close
    enough for human-scale monitoring.

    Example:
        class StaticProvider(SnapshotProvider):
            def read_process_samples(self) -> list[ProcessSample]:
                return [ProcessSample(pid=1, name="init", sample_time_ms=0)]

            def read_system_sample(self) -> SystemSample:
                return SystemSample(sample_time_ms=0)
    """

    @abstractmethod
    def read_process_samples(self) -> list[ProcessSample]:
        """Read every visible process.

        Returns:
            One sample per process that could be read
        """
        ...

    @abstractmethod
    def read_system_sample(self) -> SystemSample:
        """Read system-wide counters.

        Returns:
            SystemSample for the current moment
        """
        ...
