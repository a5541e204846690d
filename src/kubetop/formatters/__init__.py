"""Formatters package for kubetop.

This package contains the renderers that draw a round:

- TableFormatter: Redrawn, color-coded terminal table
- JsonFormatter: JSON output for machine-readable data
"""

from kubetop.formatters.json_formatter import JsonFormatter
from kubetop.formatters.table import DEFAULT_STYLES, TableFormatter, validate_rows

__all__ = [
    "DEFAULT_STYLES",
    "JsonFormatter",
    "TableFormatter",
    "validate_rows",
]
