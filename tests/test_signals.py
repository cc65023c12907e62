"""Tests for the shutdown signal listener."""

import logging
import os
import signal

import pytest

from pskiller.signals import SHUTDOWN_SIGNALS, SignalListener


class TestNotify:
    """Tests for the single-slot notification queue."""

    def test_nothing_pending(self) -> None:
        """Test poll returns None without a signal."""
        assert SignalListener().poll() is None

    def test_notify_then_poll(self) -> None:
        """Test a notified signal is returned once."""
        listener = SignalListener()
        listener.notify(signal.SIGTERM)
        assert listener.poll() == signal.SIGTERM
        assert listener.poll() is None

    def test_single_slot(self) -> None:
        """Test a second signal is dropped while one is pending."""
        listener = SignalListener()
        listener.notify(signal.SIGTERM)
        listener.notify(signal.SIGINT)
        assert listener.poll() == signal.SIGTERM
        assert listener.poll() is None

    def test_poll_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test draining a signal is logged."""
        listener = SignalListener(logger=logging.getLogger("test.signals"))
        listener.notify(signal.SIGINT)
        with caplog.at_level(logging.INFO, logger="test.signals"):
            listener.poll()
        assert "shutting down" in caplog.text


class TestInstall:
    """Tests for installing and restoring handlers."""

    def test_default_signals(self) -> None:
        """Test SIGINT and SIGTERM are handled by default."""
        assert set(SHUTDOWN_SIGNALS) == {signal.SIGINT, signal.SIGTERM}

    def test_install_and_uninstall(self) -> None:
        """Test previous handlers come back after uninstall."""
        before = signal.getsignal(signal.SIGTERM)
        listener = SignalListener()
        listener.install()
        try:
            assert listener.installed
            assert signal.getsignal(signal.SIGTERM) != before
        finally:
            listener.uninstall()
        assert not listener.installed
        assert signal.getsignal(signal.SIGTERM) == before

    def test_context_manager(self) -> None:
        """Test the with block installs and restores handlers."""
        before = signal.getsignal(signal.SIGINT)
        with SignalListener() as listener:
            assert listener.installed
        assert signal.getsignal(signal.SIGINT) == before

    def test_real_signal(self) -> None:
        """Test a delivered signal ends up in the queue."""
        with SignalListener(signals=(signal.SIGUSR1,)) as listener:
            os.kill(os.getpid(), signal.SIGUSR1)
            assert listener.poll() == signal.SIGUSR1
