"""JSON output for a single kubetop round.

Produces a machine-readable document for ``kubetop --json``:

    {
      "timestamp": "2024-01-15T10:30:00+00:00",
      "header": ["Type", "Namespace", "Name", "Status", "IPs", "Age"],
      "rows": [{"Type": "node", "Namespace": "", "Name": "worker-1", ...}],
      "failures": [{"source": "pods", "error": "...", "consecutive_failures": 1}]
    }
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console

from kubetop.models.base import RoundSnapshot


class JsonFormatter:
    """Formats round snapshots as JSON.

    Attributes:
        pretty_print: Whether to format with indentation (default: True)
    """

    def __init__(self, pretty_print: bool = True, console: Console | None = None) -> None:
        self.pretty_print = pretty_print
        self.console = console or Console()

    def to_dict(self, snapshot: RoundSnapshot) -> dict[str, Any]:
        """Convert a snapshot into plain JSON-compatible data."""
        header = list(snapshot.header)
        return {
            "timestamp": snapshot.timestamp.isoformat(),
            "header": header,
            "rows": [dict(zip(header, fields, strict=True)) for fields in snapshot.field_rows()],
            "failures": [failure.model_dump(mode="json") for failure in snapshot.failures],
        }

    def format(self, snapshot: RoundSnapshot) -> str:
        """Format a snapshot as a JSON string."""
        output = self.to_dict(snapshot)
        if self.pretty_print:
            return json.dumps(output, indent=2, ensure_ascii=False)
        return json.dumps(output, ensure_ascii=False, separators=(",", ":"))

    def render(self, snapshot: RoundSnapshot) -> None:
        """Print a snapshot as JSON to the console's output."""
        self.console.out(self.format(snapshot), highlight=False)
