"""Shutdown on SIGINT / SIGTERM.

The handlers only drop the signal number into a single-slot queue. The UI
loop drains it without blocking and shuts down in an orderly way. Python
runs signal handlers on the main thread, so install() must be called
from there.
"""

from __future__ import annotations

import contextlib
import logging
import queue
import signal
from types import FrameType
from typing import Any

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SignalListener:
    """Turns shutdown signals into a pollable notification."""

    def __init__(
        self,
        signals: tuple[signal.Signals, ...] = SHUTDOWN_SIGNALS,
        logger: logging.Logger | None = None,
    ) -> None:
        self._signals = signals
        self._queue: queue.Queue[int] = queue.Queue(maxsize=1)
        self._previous: dict[signal.Signals, Any] = {}
        self._log = logger or logging.getLogger(__name__)

    @property
    def installed(self) -> bool:
        return bool(self._previous)

    def install(self) -> None:
        """Register the handlers, remembering the ones they replace."""
        for signum in self._signals:
            self._previous[signum] = signal.signal(signum, self._handle)
        self._log.debug("Signal handlers installed for %s", [s.name for s in self._signals])

    def uninstall(self) -> None:
        """Restore the handlers that were active before install()."""
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def _handle(self, signum: int, frame: FrameType | None) -> None:
        self.notify(signum)

    def notify(self, signum: int) -> None:
        """Record a signal; extra signals are dropped while one is pending."""
        with contextlib.suppress(queue.Full):
            self._queue.put_nowait(signum)

    def poll(self) -> int | None:
        """Return a pending signal number, or None."""
        try:
            signum = self._queue.get_nowait()
        except queue.Empty:
            return None
        self._log.info("Received signal %s, shutting down", signum)
        return signum

    def __enter__(self) -> SignalListener:
        self.install()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.uninstall()
