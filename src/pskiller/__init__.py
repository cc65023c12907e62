"""pskiller - PSycho KILLer, an interactive terminal process monitor and killer."""

__version__ = "0.1.0"
