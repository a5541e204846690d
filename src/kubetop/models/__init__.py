"""Pydantic data models for kubetop.

This module provides the core data models used throughout kubetop:
- ResourceRow: Six-field normalized display record
- ResourceKind: Category tag of a row
- ResourceKey: Explicit identity of a cluster object
- RoundSnapshot: Ordered result of one refresh round
- SourceFailure: A source that failed for a round
"""

from kubetop.models.base import (
    HEADER,
    ResourceKey,
    ResourceKind,
    ResourceRow,
    RoundSnapshot,
    SourceFailure,
)

__all__ = [
    "HEADER",
    "ResourceKey",
    "ResourceKind",
    "ResourceRow",
    "RoundSnapshot",
    "SourceFailure",
]
