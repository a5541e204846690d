"""Base Pydantic models for kubetop data types.

This module defines the data shared by every part of the refresh pipeline:
- ResourceKind: Closed set of category tags (node, pod, service, deployment)
- ResourceKey: Explicit identity of a cluster object within a round
- ResourceRow: The six-field normalized display record all sources produce
- SourceFailure: A source that contributed no rows to a round
- RoundSnapshot: The ordered result of one refresh round
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from kubetop.errors import RowShapeError

HEADER: tuple[str, ...] = ("Type", "Namespace", "Name", "Status", "IPs", "Age")
"""Column header shared by every renderer; every row has exactly this many fields."""


def _utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


class ResourceKind(str, Enum):
    """Category tag of a row, used for display and styling.

    Attributes:
        NODE: Cluster node (never namespace-filtered)
        POD: Pod in any namespace
        SERVICE: Service in any namespace
        DEPLOYMENT: Deployment in any namespace
    """

    NODE = "node"
    POD = "pod"
    SERVICE = "service"
    DEPLOYMENT = "deployment"


class ResourceKey(BaseModel):
    """Identity of a cluster object within one round.

    Holds the untruncated name even when the displayed name is abbreviated.
    """

    model_config = ConfigDict(frozen=True)

    kind: ResourceKind
    namespace: str = ""
    name: str


class ResourceRow(BaseModel):
    """A normalized display row.

    Exactly six textual fields in header order. The ``key`` attribute is not
    one of the fields: it carries the object's identity and is excluded from
    serialization and ordering.

    Attributes:
        type: Category tag of the object
        namespace: Namespace of the object ("" for nodes)
        name: Display name (may be truncated for pods)
        status: Human-readable status summary
        ips: Whitespace-joined address summary (may be empty)
        age: Short human duration since creation
        key: Untruncated object identity
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: ResourceKind
    namespace: str = ""
    name: str
    status: str = ""
    ips: str = ""
    age: str = ""
    key: ResourceKey | None = Field(default=None, exclude=True)

    @classmethod
    def from_fields(
        cls,
        fields: Sequence[str],
        key: ResourceKey | None = None,
    ) -> "ResourceRow":
        """Build a row from a sequence of field values in header order.

        Args:
            fields: Six values: type, namespace, name, status, ips, age
            key: Optional object identity

        Returns:
            The constructed ResourceRow

        Raises:
            RowShapeError: If the sequence does not have exactly six values
        """
        if len(fields) != len(HEADER):
            raise RowShapeError(len(HEADER), len(fields))
        kind, namespace, name, status, ips, age = fields
        return cls(
            type=ResourceKind(kind),
            namespace=namespace,
            name=name,
            status=status,
            ips=ips,
            age=age,
            key=key,
        )

    def fields(self) -> tuple[str, str, str, str, str, str]:
        """Return the six display fields in header order."""
        return (self.type.value, self.namespace, self.name, self.status, self.ips, self.age)

    def sort_key(self) -> str:
        """Return the lexicographic ordering key: the fields joined by single spaces.

        The space sorts below every character allowed in Kubernetes names, so
        rows group by type, then namespace, then name.
        """
        return " ".join(self.fields())

    @property
    def identity(self) -> ResourceKey:
        """Object identity, derived from the display fields when no key was given."""
        if self.key is not None:
            return self.key
        return ResourceKey(kind=self.type, namespace=self.namespace, name=self.name)


class SourceFailure(BaseModel):
    """A snapshot source that failed for a round and contributed no rows.

    Attributes:
        source: Name of the failed source
        error: Error message surfaced on the status line
        consecutive_failures: How many rounds in a row this source has failed
    """

    model_config = ConfigDict(frozen=True)

    source: str
    error: str
    consecutive_failures: int = Field(default=1, ge=1)


class RoundSnapshot(BaseModel):
    """Complete, ordered result of one refresh round.

    Built fresh every round and discarded once rendered.

    Attributes:
        timestamp: When the round started (UTC)
        rows: Merged rows, sorted by ResourceRow.sort_key()
        failures: Sources that contributed no rows this round
        duration_ms: Wall-clock time of the round in milliseconds
    """

    timestamp: datetime = Field(default_factory=_utcnow)
    rows: list[ResourceRow] = Field(default_factory=list)
    failures: list[SourceFailure] = Field(default_factory=list)
    duration_ms: float = Field(default=0.0, ge=0.0)

    @property
    def header(self) -> tuple[str, ...]:
        """The fixed six-column header."""
        return HEADER

    def field_rows(self) -> list[tuple[str, ...]]:
        """Return every row as a tuple of its display fields."""
        return [row.fields() for row in self.rows]
