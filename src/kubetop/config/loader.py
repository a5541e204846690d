"""Configuration loading and validation for kubetop.

This module provides:
- Pydantic models for configuration validation
- YAML config file discovery and loading
- Environment variable expansion in config values
- Merging of config file with defaults and CLI overrides
- User-friendly error messages for config issues
"""

from difflib import get_close_matches
import os
from pathlib import Path
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
import yaml

from kubetop.config.defaults import DEFAULT_CONFIG
from kubetop.errors import KubetopError

CONFIG_ENV_VAR = "KUBETOP_CONFIG_PATH"


class ConfigError(KubetopError):
    """Base exception for configuration errors.

    Attributes:
        message: The main error message
        file_path: Path to the config file (if applicable)
        line_number: Line number where the error occurred (if known)
        suggestion: Helpful suggestion for fixing the error
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


class ConfigKeyError(ConfigError):
    """Error for unknown or invalid configuration keys."""


# Known valid keys per section, used for "did you mean" suggestions
VALID_KEYS: dict[tuple[str, ...], set[str]] = {
    (): {
        "default_mode",
        "interval",
        "namespace",
        "system_namespace",
        "kubeconfig",
        "request_timeout",
        "failure_policy",
        "sources",
        "display",
        "cli",
        "tui",
        "logging",
    },
    ("sources",): {"nodes", "pods", "services", "deployments"},
    ("display",): {"colors", "show_status_line", "show_borders"},
    ("cli",): {"default_format", "pretty_print"},
    ("tui",): {"mouse_enabled"},
    ("logging",): {"enabled", "level", "file"},
}

SOURCE_KEYS = {"enabled", "timeout", "max_attempts", "retry_base_delay"}

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def _suggest_key(unknown_key: str, valid_keys: set[str]) -> str | None:
    """Suggest a similar valid key for an unknown key."""
    matches = get_close_matches(unknown_key, list(valid_keys), n=1, cutoff=0.6)
    if matches:
        return f"Did you mean '{matches[0]}'?"
    return None


def _describe_value(value: Any) -> str:
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
    for key in loc:
        if isinstance(data, dict):
            data = data.get(key)
        else:
            return None
    return data


def _format_pydantic_error(
    error: ValidationError,
    config_data: dict[str, Any],
    file_path: str | None = None,
) -> ConfigError:
    """Convert a Pydantic ValidationError into a ConfigError with a suggestion.

    Args:
        error: The Pydantic validation error
        config_data: The merged config data, for reporting the offending value
        file_path: Path to the config file

    Returns:
        ConfigKeyError for unknown keys, ConfigValidationError otherwise
    """
    errors = error.errors()
    if not errors:
        return ConfigValidationError("Configuration validation failed", file_path=file_path)

    first = errors[0]
    loc = tuple(first.get("loc", ()))
    error_type = first.get("type", "")
    ctx = first.get("ctx", {}) or {}
    path = ".".join(str(part) for part in loc)
    actual = _lookup(config_data, loc)

    if error_type == "extra_forbidden":
        parent = loc[:-1]
        if len(parent) == 2 and parent[0] == "sources":
            valid = SOURCE_KEYS
        else:
            valid = VALID_KEYS.get(parent, set())
        suggestion = _suggest_key(str(loc[-1]), valid) if loc else None
        return ConfigKeyError(
            f"Unknown configuration key '{path}'",
            file_path=file_path,
            suggestion=suggestion or "Check the documentation for valid configuration options",
        )

    suggestion = None
    if error_type == "literal_error":
        message = f"Invalid value for '{path}': got {_describe_value(actual)}"
        suggestion = f"Expected one of: {ctx.get('expected', '')}"
    elif error_type in ("greater_than_equal", "greater_than"):
        message = f"Value for '{path}' is out of range: {actual}"
        suggestion = f"Value must be at least {ctx.get('ge', ctx.get('gt'))}"
    elif error_type in ("less_than_equal", "less_than"):
        message = f"Value for '{path}' is out of range: {actual}"
        suggestion = f"Value must be at most {ctx.get('le', ctx.get('lt'))}"
    elif error_type in ("int_parsing", "float_parsing", "int_from_float"):
        message = f"Invalid number for '{path}': got {_describe_value(actual)}"
        suggestion = "Please provide a valid number"
    elif error_type in ("bool_type", "bool_parsing"):
        message = f"Expected boolean for '{path}': got {_describe_value(actual)}"
        suggestion = "Use 'true' or 'false'"
    elif error_type == "string_type":
        message = f"Expected string for '{path}': got {_describe_value(actual)}"
        suggestion = "Please provide a text value"
    else:
        message = f"Invalid value for '{path}': {first.get('msg', 'Invalid value')}"

    return ConfigValidationError(message, file_path=file_path, suggestion=suggestion)


def _format_yaml_error(
    error: yaml.YAMLError,
    file_path: str | None = None,
    content: str | None = None,
) -> ConfigSyntaxError:
    """Convert a YAML error to a ConfigSyntaxError with position and context."""
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

    error_str = str(error).lower()
    suggestion = None
    if "could not find expected ':'" in error_str:
        suggestion = "Check for missing colons after keys (e.g., 'key: value')"
    elif "found character" in error_str and "tab" in error_str:
        suggestion = "Use spaces instead of tabs for indentation"
    elif "mapping values are not allowed" in error_str:
        suggestion = "Check your indentation - make sure nested keys are properly indented"

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
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax. Unset variables without a
    default are left as-is.
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
    """Deep merge two dictionaries, with override taking precedence.

    Neither input is modified.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# Pydantic Configuration Models


class SourceConfig(BaseModel):
    """Configuration for one snapshot source."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    timeout: float = Field(default=5.0, gt=0, le=300)
    max_attempts: int = Field(default=1, ge=1, le=10)
    retry_base_delay: float = Field(default=0.1, ge=0, le=60)


class SourcesConfig(BaseModel):
    """Per-source configuration."""

    model_config = ConfigDict(extra="forbid")

    nodes: SourceConfig = Field(default_factory=SourceConfig)
    pods: SourceConfig = Field(default_factory=SourceConfig)
    services: SourceConfig = Field(default_factory=SourceConfig)
    deployments: SourceConfig = Field(default_factory=SourceConfig)


class DisplayConfig(BaseModel):
    """Display preferences configuration."""

    model_config = ConfigDict(extra="forbid")

    colors: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CONFIG["display"]["colors"])
    )
    show_status_line: bool = True
    show_borders: bool = False


class CLIConfig(BaseModel):
    """CLI-specific configuration."""

    model_config = ConfigDict(extra="forbid")

    default_format: Literal["table", "json"] = "table"
    pretty_print: bool = True


class TUIConfig(BaseModel):
    """TUI-specific configuration."""

    model_config = ConfigDict(extra="forbid")

    mouse_enabled: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    file: str = "~/.kubetop/kubetop.log"


class Config(BaseModel):
    """Main configuration model for kubetop.

    Loaded from YAML files and overridable by CLI flags.
    """

    model_config = ConfigDict(extra="forbid")

    # Core settings
    default_mode: Literal["cli", "tui"] = "cli"
    interval: float = Field(default=0.5, ge=0.1, le=3600)
    namespace: str | None = None
    system_namespace: str = "kube-system"
    kubeconfig: str | None = None
    request_timeout: float = Field(default=10.0, gt=0, le=600)
    failure_policy: Literal["skip", "fatal"] = "skip"

    # Section configs
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    cli: CLIConfig = Field(default_factory=CLIConfig)
    tui: TUIConfig = Field(default_factory=TUIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def get_source_config(self, source_name: str) -> SourceConfig:
        """Get configuration for a source by name (default if unknown)."""
        config = getattr(self.sources, source_name, None)
        return config if isinstance(config, SourceConfig) else SourceConfig()


def get_config_path(custom_path: str | None = None) -> Path | None:
    """Determine the configuration file path.

    Checks locations in this order:
    1. Custom path (if provided via --config flag)
    2. KUBETOP_CONFIG_PATH environment variable
    3. ~/.config/kubetop/config.yaml (XDG standard)
    4. ~/.kubetop/config.yaml (legacy location)

    Args:
        custom_path: Optional custom config path from CLI

    Returns:
        Path to config file if found, None otherwise

    Raises:
        FileNotFoundError: If a custom path was given and does not exist
    """
    if custom_path:
        path = Path(custom_path).expanduser()
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {custom_path}")

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path).expanduser()
        return path if path.exists() else None

    for candidate in (
        Path.home() / ".config" / "kubetop" / "config.yaml",
        Path.home() / ".kubetop" / "config.yaml",
    ):
        if candidate.exists():
            return candidate

    return None


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> Config:
    """Load and validate configuration.

    Configuration is merged in this order (later overrides earlier):
    1. Default configuration
    2. Config file (if found)
    3. CLI overrides (if provided)

    Args:
        config_path: Optional custom config file path
        cli_overrides: Optional dict of CLI argument overrides

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If custom config path doesn't exist
        ConfigSyntaxError: If config file has invalid YAML syntax
        ConfigValidationError: If config values are invalid
        ConfigKeyError: If the config file contains unknown keys
    """
    config_data: dict[str, Any] = DEFAULT_CONFIG.copy()
    resolved_path = get_config_path(config_path)

    if resolved_path is not None:
        content = resolved_path.read_text()
        try:
            file_config = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise _format_yaml_error(e, str(resolved_path), content) from e
        if not isinstance(file_config, dict):
            raise ConfigValidationError(
                "Top level of the config file must be a mapping",
                file_path=str(resolved_path),
            )
        config_data = deep_merge(config_data, file_config)

    if cli_overrides:
        config_data = deep_merge(config_data, cli_overrides)

    config_data = expand_env_vars(config_data)

    try:
        return Config(**config_data)
    except ValidationError as e:
        raise _format_pydantic_error(
            e,
            config_data,
            str(resolved_path) if resolved_path else None,
        ) from e
