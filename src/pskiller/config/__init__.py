"""Configuration module for pskiller.

This module provides:
- Pydantic models for configuration validation
- YAML config file loading and discovery
- Default configuration values
- Environment variable expansion
- Clear error messages for config issues
"""

from pskiller.config.defaults import DEFAULT_CONFIG
from pskiller.config.loader import (
    ActionsConfig,
    Config,
    ConfigError,
    ConfigSyntaxError,
    ConfigValidationError,
    CustomActionConfig,
    LoggingConfig,
    ProcessesConfig,
    TUIConfig,
    get_config_path,
    load_config,
)

__all__ = [
    "ActionsConfig",
    "Config",
    "ConfigError",
    "ConfigSyntaxError",
    "ConfigValidationError",
    "CustomActionConfig",
    "DEFAULT_CONFIG",
    "LoggingConfig",
    "ProcessesConfig",
    "TUIConfig",
    "get_config_path",
    "load_config",
]
