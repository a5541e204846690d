"""Default configuration values for kubetop.

This module defines the default configuration used when no config file exists
or when config values are not specified. All configuration options are documented
here for reference.

Environment Variables:
    KUBETOP_CONFIG_PATH: Override default config file path
    KUBECONFIG: Cluster credentials file (when no kubeconfig is configured)
    Any config value can reference environment variables using ${VAR} syntax

Config File Locations (in order of precedence):
    1. Path specified via --config CLI flag
    2. Path specified via KUBETOP_CONFIG_PATH environment variable
    3. ~/.config/kubetop/config.yaml (XDG default)
    4. ~/.kubetop/config.yaml (legacy location)
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    # Core settings
    "default_mode": "cli",  # "cli" (redrawn table) or "tui" (Textual dashboard)
    "interval": 0.5,  # Pause between refresh rounds in seconds
    "namespace": None,  # Restrict pods/services/deployments to one namespace
    "system_namespace": "kube-system",  # Hidden from pods/services/deployments
    "kubeconfig": None,  # Path to kubeconfig; falls back to $KUBECONFIG, ~/.kube/config
    "request_timeout": 10.0,  # Timeout passed to every cluster API call
    "failure_policy": "skip",  # "skip": failed source shows no rows; "fatal": exit
    # Per-source settings
    "sources": {
        "nodes": {
            "enabled": True,
            "timeout": 5.0,  # Max seconds for one fetch attempt
            "max_attempts": 1,  # Total attempts per round (1 = no retry)
            "retry_base_delay": 0.1,
        },
        "pods": {
            "enabled": True,
            "timeout": 5.0,
            "max_attempts": 1,
            "retry_base_delay": 0.1,
        },
        "services": {
            "enabled": True,
            "timeout": 5.0,
            "max_attempts": 1,
            "retry_base_delay": 0.1,
        },
        "deployments": {
            "enabled": True,
            "timeout": 5.0,
            "max_attempts": 1,
            "retry_base_delay": 0.1,
        },
    },
    # Display preferences
    "display": {
        "colors": {  # Rich style per resource kind
            "node": "yellow",
            "pod": "cyan",
            "service": "blue",
            "deployment": "magenta",
            "failed": "red",
        },
        "show_status_line": True,  # Show failed sources under the table
        "show_borders": False,
    },
    # CLI settings
    "cli": {
        "default_format": "table",  # Output format: table, json
        "pretty_print": True,  # Pretty-print JSON output
    },
    # TUI settings
    "tui": {
        "mouse_enabled": True,
    },
    # Logging configuration (for debugging)
    "logging": {
        "enabled": False,
        "level": "INFO",  # DEBUG, INFO, WARNING, ERROR
        "file": "~/.kubetop/kubetop.log",
    },
}
