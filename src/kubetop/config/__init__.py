"""Configuration module for kubetop.

This module provides:
- Pydantic models for configuration validation
- YAML config file loading and discovery
- Default configuration values
- Environment variable expansion
- Clear error messages for config issues
"""

from kubetop.config.defaults import DEFAULT_CONFIG
from kubetop.config.loader import (
    CLIConfig,
    Config,
    ConfigError,
    ConfigKeyError,
    ConfigSyntaxError,
    ConfigValidationError,
    DisplayConfig,
    LoggingConfig,
    SourceConfig,
    SourcesConfig,
    TUIConfig,
    get_config_path,
    load_config,
)

__all__ = [
    "Config",
    "CLIConfig",
    "ConfigError",
    "ConfigKeyError",
    "ConfigSyntaxError",
    "ConfigValidationError",
    "DisplayConfig",
    "LoggingConfig",
    "SourceConfig",
    "SourcesConfig",
    "TUIConfig",
    "DEFAULT_CONFIG",
    "get_config_path",
    "load_config",
]
