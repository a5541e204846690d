"""Service snapshot source."""

from datetime import datetime
from typing import Any

from kubetop.collectors.base import SnapshotSource
from kubetop.models.base import ResourceKey, ResourceKind, ResourceRow
from kubetop.sources.normalize import age_since


class ServiceSource(SnapshotSource):
    """Snapshot source for services in all (or one) namespaces.

    Status lists the load-balancer ingress entries as "IP hostname" pairs
    joined by commas. IPs holds the external IPs, then the cluster IP, then
    the port names.
    """

    name = "services"
    kind = ResourceKind.SERVICE
    timeout = 5.0

    async def fetch(self) -> list[ResourceRow]:
        """List services and normalize every service outside the system namespace."""
        services = await self.client.list_services(self.namespace)
        now = self.now()
        return [
            self.to_row(service, now)
            for service in services
            if not self.is_hidden_namespace(service.metadata.namespace)
        ]

    def to_row(self, service: Any, now: datetime) -> ResourceRow:
        """Map one service object to a row."""
        metadata = service.metadata
        spec = service.spec
        return ResourceRow(
            type=self.kind,
            namespace=metadata.namespace or "",
            name=metadata.name,
            status=",".join(_ingress_entries(service)),
            ips=_address_summary(spec),
            age=age_since(metadata.creation_timestamp, now),
            key=ResourceKey(kind=self.kind, namespace=metadata.namespace or "", name=metadata.name),
        )


def _ingress_entries(service: Any) -> list[str]:
    status = service.status
    load_balancer = status.load_balancer if status is not None else None
    ingress = load_balancer.ingress if load_balancer is not None else None
    return [f"{entry.ip or ''} {entry.hostname or ''}" for entry in ingress or []]


def _address_summary(spec: Any) -> str:
    ips = list(spec.external_i_ps or [])
    if spec.cluster_ip:
        ips.append(spec.cluster_ip)
    ports = [port.name for port in spec.ports or [] if port.name]
    return " ".join(part for part in (" ".join(ips), " ".join(ports)) if part)
