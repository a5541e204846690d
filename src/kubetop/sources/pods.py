"""Pod snapshot source."""

from datetime import datetime
from typing import Any

from kubetop.collectors.base import SnapshotSource
from kubetop.models.base import ResourceKey, ResourceKind, ResourceRow
from kubetop.sources.normalize import age_since, status_summary, truncate_name


class PodSource(SnapshotSource):
    """Snapshot source for pods in all (or one) namespaces.

    The displayed name is abbreviated with truncate_name(); the row key keeps
    the full name.
    """

    name = "pods"
    kind = ResourceKind.POD
    timeout = 5.0

    async def fetch(self) -> list[ResourceRow]:
        """List pods and normalize every pod outside the system namespace."""
        pods = await self.client.list_pods(self.namespace)
        now = self.now()
        return [
            self.to_row(pod, now)
            for pod in pods
            if not self.is_hidden_namespace(pod.metadata.namespace)
        ]

    def to_row(self, pod: Any, now: datetime) -> ResourceRow:
        """Map one pod object to a row."""
        metadata = pod.metadata
        status = pod.status
        return ResourceRow(
            type=self.kind,
            namespace=metadata.namespace or "",
            name=truncate_name(metadata.name),
            status=status_summary(status.phase, status.conditions),
            ips=status.pod_ip or "",
            age=age_since(metadata.creation_timestamp, now),
            key=ResourceKey(
                kind=self.kind,
                namespace=metadata.namespace or "",
                name=metadata.name,
            ),
        )
