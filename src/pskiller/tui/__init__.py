"""Terminal UI for pskiller, built on Textual."""

from pskiller.tui.app import PsKillerApp, run_app

__all__ = [
    "PsKillerApp",
    "run_app",
]
