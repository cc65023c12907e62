"""Default configuration values for pskiller.

This module defines the configuration used when no config file exists or
when values are not specified. All options are documented here.

Environment Variables:
    PSKILLER_CONFIG_PATH: Override default config file path
    Any config value can reference environment variables using ${VAR} syntax

Config File Locations (in order of precedence):
    1. Path specified via --config CLI flag
    2. Path specified via PSKILLER_CONFIG_PATH environment variable
    3. ~/.config/pskiller/config.yaml (XDG default)
    4. ~/.pskiller/config.yaml (legacy location)
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "interval": 2.0,  # Seconds between polls
    # Process list
    "processes": {
        "default_sort": "uptime",  # uptime, memory or cpu
        "group_by_exe": False,  # Merge processes running the same executable
        "default_filter": "",  # Initial filter text
    },
    # Action menu
    "actions": {
        "command_timeout": 10.0,  # Seconds a signal command may run
        "sudo_actions": True,  # Offer "sudo -n kill" variants
        # Extra signal commands; the pid is appended to the template
        # e.g. {"name": "Hang up: kill -1", "template": "kill -1 "}
        "extra": [],
    },
    # TUI settings
    "tui": {
        "mouse_enabled": True,
    },
    # Logging goes to a file since the terminal belongs to the TUI
    "logging": {
        "enabled": False,
        "level": "INFO",  # DEBUG, INFO, WARNING, ERROR
        "file": "~/.pskiller/pskiller.log",
    },
}
