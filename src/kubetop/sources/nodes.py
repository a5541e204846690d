"""Node snapshot source.

Lists every node in the cluster. Nodes have no namespace and are never
hidden by the system-namespace rule.
"""

from datetime import datetime
from typing import Any

from kubetop.collectors.base import SnapshotSource
from kubetop.models.base import ResourceKey, ResourceKind, ResourceRow
from kubetop.sources.normalize import age_since, status_summary, unique_in_order


class NodeSource(SnapshotSource):
    """Snapshot source for cluster nodes.

    Status is the node phase (if any) followed by the true-valued condition
    names. IPs are the node's reported addresses with duplicates collapsed.
    """

    name = "nodes"
    kind = ResourceKind.NODE
    timeout = 5.0

    async def fetch(self) -> list[ResourceRow]:
        """List nodes and normalize them into rows."""
        nodes = await self.client.list_nodes()
        now = self.now()
        return [self.to_row(node, now) for node in nodes]

    def to_row(self, node: Any, now: datetime) -> ResourceRow:
        """Map one node object to a row."""
        metadata = node.metadata
        status = node.status
        namespace = metadata.namespace or ""
        addresses = unique_in_order(addr.address for addr in status.addresses or [])
        return ResourceRow(
            type=self.kind,
            namespace=namespace,
            name=metadata.name,
            status=status_summary(status.phase, status.conditions),
            ips=" ".join(addresses),
            age=age_since(metadata.creation_timestamp, now),
            key=ResourceKey(kind=self.kind, namespace=namespace, name=metadata.name),
        )
