"""Configuration loading and validation for pskiller.

This module provides:
- Pydantic models for configuration validation
- YAML config file discovery and loading
- Environment variable expansion in config values
- Merging of config file, defaults and CLI overrides
- User-friendly error messages for config issues
"""

from difflib import get_close_matches
import os
from pathlib import Path
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
import yaml

from pskiller.actions import MenuAction, build_menu_actions
from pskiller.config.defaults import DEFAULT_CONFIG
from pskiller.models import Ordering

CONFIG_PATH_ENV = "PSKILLER_CONFIG_PATH"


class ConfigError(Exception):
    """Base exception for configuration errors.

    Attributes:
        message: The main error message
        file_path: Path to the config file (if applicable)
        line_number: Line number where the error occurred (if known)
        column: Column of the error (if known)
        suggestion: Helpful suggestion for fixing the error
        context_lines: Offending source lines
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        line_number: int | None = None,
        column: int | None = None,
        suggestion: str | None = None,
        context_lines: list[str] | None = None,
    ) -> None:
        self.message = message
        self.file_path = file_path
        self.line_number = line_number
        self.column = column
        self.suggestion = suggestion
        self.context_lines = context_lines
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with location, context and suggestion."""
        if self.file_path:
            location = f"Error in {self.file_path}"
            if self.line_number:
                location += f" line {self.line_number}"
            parts = [location + ":"]
        else:
            parts = ["Configuration error:"]

        parts.append(f"  {self.message}")

        if self.context_lines and self.column:
            parts.append("")
            parts.extend(f"    {line}" for line in self.context_lines)
            parts.append(" " * (self.column + 3) + "^")

        if self.suggestion:
            parts.append("")
            parts.append(f"  Suggestion: {self.suggestion}")

        return "\n".join(parts)


class ConfigSyntaxError(ConfigError):
    """Error for YAML syntax issues."""


class ConfigValidationError(ConfigError):
    """Error for configuration value validation failures."""


# Known keys per section, for "did you mean" suggestions
VALID_KEYS: dict[tuple[str, ...], set[str]] = {
    (): {"interval", "processes", "actions", "tui", "logging"},
    ("processes",): {"default_sort", "group_by_exe", "default_filter"},
    ("actions",): {"command_timeout", "sudo_actions", "extra"},
    ("tui",): {"mouse_enabled"},
    ("logging",): {"enabled", "level", "file"},
}

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")

# YAML error text -> suggestion
YAML_HINTS = [
    ("could not find expected ':'", "Check for missing colons after keys (e.g., 'key: value')"),
    ("found character '\\t'", "Use spaces instead of tabs for indentation"),
    ("mapping values are not allowed", "Check your indentation - nested keys must be indented"),
    ("found undefined alias", "Check that all YAML anchors (&name) are defined before aliases"),
]


def _suggest_key(unknown_key: str, valid_keys: set[str]) -> str | None:
    """Suggest a similar valid key for an unknown key."""
    matches = get_close_matches(unknown_key, sorted(valid_keys), n=1, cutoff=0.6)
    if matches:
        return f"Did you mean '{matches[0]}'?"
    return None


def _describe(value: Any) -> str:
    """Get a human-readable type description for a value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return f'string "{value}"'
    if isinstance(value, list):
        return "list"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _lookup(data: Any, loc: tuple[Any, ...]) -> Any:
    """Follow a pydantic error location through raw config data."""
    for key in loc:
        if isinstance(data, dict):
            data = data.get(key)
        elif isinstance(data, list) and isinstance(key, int) and key < len(data):
            data = data[key]
        else:
            return None
    return data


def _format_pydantic_error(
    error: ValidationError,
    config_data: dict[str, Any],
    file_path: str | None = None,
) -> ConfigValidationError:
    """Convert a Pydantic ValidationError to a ConfigValidationError.

    Only the first error is reported, with the dotted path of the key.

    Args:
        error: The Pydantic validation error
        config_data: The merged config data, for the offending value
        file_path: Path to the config file

    Returns:
        A ConfigValidationError with message and suggestion
    """
    errors = error.errors()
    if not errors:
        return ConfigValidationError("Configuration validation failed", file_path=file_path)

    first = errors[0]
    loc = tuple(first.get("loc", ()))
    error_type = first.get("type", "")
    ctx = first.get("ctx") or {}
    path = ".".join(str(part) for part in loc)
    value = _lookup(config_data, loc)
    suggestion = None

    if error_type == "literal_error":
        message = f"Invalid value for '{path}': got {_describe(value)}"
        suggestion = f"Expected one of: {ctx.get('expected', '')}"
    elif error_type in ("greater_than_equal", "less_than_equal"):
        message = f"Value for '{path}' is out of range: {value}"
        if error_type == "greater_than_equal":
            suggestion = f"Value must be at least {ctx.get('ge')}"
        else:
            suggestion = f"Value must be at most {ctx.get('le')}"
    elif error_type in ("int_parsing", "float_parsing"):
        message = f"Invalid number for '{path}': got {_describe(value)}"
        suggestion = "Please provide a valid number"
    elif error_type in ("bool_type", "bool_parsing"):
        message = f"Expected boolean for '{path}': got {_describe(value)}"
        suggestion = "Use 'true' or 'false'"
    elif error_type == "list_type":
        message = f"Expected list for '{path}': got {_describe(value)}"
    elif error_type == "extra_forbidden":
        message = f"Unknown configuration key '{path}'"
        valid = VALID_KEYS.get(loc[:-1])
        if valid and loc:
            suggestion = _suggest_key(str(loc[-1]), valid)
        suggestion = suggestion or "Check the documentation for valid configuration options"
    else:
        message = f"Invalid value for '{path}': {first.get('msg', 'Invalid value')}"

    return ConfigValidationError(message, file_path=file_path, suggestion=suggestion)


def _format_yaml_error(
    error: yaml.YAMLError,
    file_path: str | None = None,
    content: str | None = None,
) -> ConfigSyntaxError:
    """Convert a YAML error to a ConfigSyntaxError with position and hint."""
    line_number = None
    column = None
    context_lines = None

    mark = getattr(error, "problem_mark", None)
    if mark is not None:
        line_number = mark.line + 1
        column = mark.column + 1
        if content:
            lines = content.splitlines()
            if 0 <= mark.line < len(lines):
                context_lines = [lines[mark.line]]

    error_text = str(error).lower()
    suggestion = next((hint for needle, hint in YAML_HINTS if needle in error_text), None)

    problem = getattr(error, "problem", None)
    message = f"YAML syntax error: {problem}" if problem else "Invalid YAML syntax"

    return ConfigSyntaxError(
        message,
        file_path=file_path,
        line_number=line_number,
        column=column,
        context_lines=context_lines,
        suggestion=suggestion,
    )


def expand_env_vars(value: Any) -> Any:
    """Recursively expand ${VAR} and ${VAR:-default} in config values.

    Unknown variables without a default are left as written.
    """
    if isinstance(value, str):

        def replace_env_var(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            return match.group(0)

        return ENV_VAR_PATTERN.sub(replace_env_var, value)
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# Pydantic Configuration Models


class ProcessesConfig(BaseModel):
    """Process list configuration."""

    model_config = ConfigDict(extra="forbid")

    default_sort: Literal["uptime", "memory", "cpu"] = "uptime"
    group_by_exe: bool = False
    default_filter: str = ""


class CustomActionConfig(BaseModel):
    """A user-defined signal command."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    template: str = Field(..., min_length=1)


class ActionsConfig(BaseModel):
    """Action menu configuration."""

    model_config = ConfigDict(extra="forbid")

    command_timeout: float = Field(default=10.0, ge=0.1, le=600)
    sudo_actions: bool = True
    extra: list[CustomActionConfig] = Field(default_factory=list)


class TUIConfig(BaseModel):
    """TUI-specific configuration."""

    model_config = ConfigDict(extra="forbid")

    mouse_enabled: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    file: str = "~/.pskiller/pskiller.log"


class Config(BaseModel):
    """Main configuration model for pskiller.

    Loaded from YAML and overridable by CLI flags.
    """

    model_config = ConfigDict(extra="forbid")

    interval: float = Field(default=2.0, ge=0.1, le=3600)

    processes: ProcessesConfig = Field(default_factory=ProcessesConfig)
    actions: ActionsConfig = Field(default_factory=ActionsConfig)
    tui: TUIConfig = Field(default_factory=TUIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def ordering(self) -> Ordering:
        """Initial sort mode."""
        return Ordering(self.processes.default_sort)

    def menu_actions(self) -> list[MenuAction]:
        """Action menu entries built from the actions section."""
        return build_menu_actions(
            sudo_actions=self.actions.sudo_actions,
            extra=[(action.name, action.template) for action in self.actions.extra],
        )


def get_config_path(custom_path: str | None = None) -> Path | None:
    """Determine the configuration file path.

    Checks locations in this order:
    1. Custom path (if provided via --config flag)
    2. PSKILLER_CONFIG_PATH environment variable
    3. ~/.config/pskiller/config.yaml (XDG standard)
    4. ~/.pskiller/config.yaml (legacy location)

    Args:
        custom_path: Optional custom config path from CLI

    Returns:
        Path to config file if found, None otherwise

    Raises:
        FileNotFoundError: If the custom path does not exist
    """
    if custom_path:
        path = Path(custom_path).expanduser()
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {custom_path}")

    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        path = Path(env_path).expanduser()
        return path if path.exists() else None

    xdg_path = Path.home() / ".config" / "pskiller" / "config.yaml"
    if xdg_path.exists():
        return xdg_path

    legacy_path = Path.home() / ".pskiller" / "config.yaml"
    if legacy_path.exists():
        return legacy_path

    return None


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
    raise_on_error: bool = True,
) -> Config:
    """Load and validate configuration.

    Configuration is merged in this order (later overrides earlier):
    1. Default configuration
    2. Config file (if found)
    3. CLI overrides (if provided)

    Args:
        config_path: Optional custom config file path
        cli_overrides: Optional dict of CLI argument overrides
        raise_on_error: If True, raise ConfigError on issues; if False, fall
            back to defaults

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If custom config path doesn't exist
        ConfigSyntaxError: If config file has invalid YAML syntax
        ConfigValidationError: If config values are invalid
    """
    config_data = DEFAULT_CONFIG.copy()
    resolved_path: Path | None = get_config_path(config_path)

    if resolved_path:
        content = resolved_path.read_text()
        try:
            file_config = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            if raise_on_error:
                raise _format_yaml_error(e, str(resolved_path), content) from e
            file_config = {}
        if not isinstance(file_config, dict):
            if raise_on_error:
                raise ConfigSyntaxError(
                    "Top level of the config file must be a mapping",
                    file_path=str(resolved_path),
                    suggestion="Write settings as 'key: value' pairs",
                )
            file_config = {}
        config_data = deep_merge(config_data, file_config)

    if cli_overrides:
        config_data = deep_merge(config_data, cli_overrides)

    config_data = expand_env_vars(config_data)

    try:
        return Config(**config_data)
    except ValidationError as e:
        if raise_on_error:
            raise _format_pydantic_error(
                e,
                config_data,
                str(resolved_path) if resolved_path else None,
            ) from e
        return Config(**DEFAULT_CONFIG)
