"""Deployment snapshot source."""

from datetime import datetime
from typing import Any

from kubetop.collectors.base import SnapshotSource
from kubetop.errors import DataIntegrityError, describe_object
from kubetop.models.base import ResourceKey, ResourceKind, ResourceRow
from kubetop.sources.normalize import age_since, true_conditions


class DeploymentSource(SnapshotSource):
    """Snapshot source for deployments in all (or one) namespaces.

    Status reads "DES=<desired> CUR=<current> AVA=<available>" followed by the
    true-valued condition names. The IPs column is always empty.
    """

    name = "deployments"
    kind = ResourceKind.DEPLOYMENT
    timeout = 5.0

    async def fetch(self) -> list[ResourceRow]:
        """List deployments and normalize every one outside the system namespace.

        Raises:
            FetchError: If the cluster API call failed
            DataIntegrityError: If a deployment has no desired replica count
        """
        deployments = await self.client.list_deployments(self.namespace)
        now = self.now()
        return [
            self.to_row(deployment, now)
            for deployment in deployments
            if not self.is_hidden_namespace(deployment.metadata.namespace)
        ]

    def to_row(self, deployment: Any, now: datetime) -> ResourceRow:
        """Map one deployment object to a row."""
        metadata = deployment.metadata
        desired = deployment.spec.replicas if deployment.spec is not None else None
        if desired is None:
            raise DataIntegrityError(self.name, "spec.replicas", describe_object(deployment))

        status = deployment.status
        current = (status.replicas if status is not None else None) or 0
        available = (status.available_replicas if status is not None else None) or 0
        conditions = true_conditions(status.conditions if status is not None else None)

        summary = f"DES={desired} CUR={current} AVA={available}"
        if conditions:
            summary = f"{summary} {' '.join(conditions)}"

        return ResourceRow(
            type=self.kind,
            namespace=metadata.namespace or "",
            name=metadata.name,
            status=summary,
            ips="",
            age=age_since(metadata.creation_timestamp, now),
            key=ResourceKey(kind=self.kind, namespace=metadata.namespace or "", name=metadata.name),
        )
