"""Snapshot sources for kubetop.

One source per resource type:

- NodeSource: cluster nodes (never namespace-filtered)
- PodSource: pods, name abbreviated for display
- ServiceSource: services with ingress and address summary
- DeploymentSource: deployments with replica summary
"""

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from kubetop.collectors.base import SnapshotSource
from kubetop.sources.deployments import DeploymentSource
from kubetop.sources.nodes import NodeSource
from kubetop.sources.pods import PodSource
from kubetop.sources.services import ServiceSource

if TYPE_CHECKING:
    from kubetop.cluster.client import ClusterClient
    from kubetop.config import Config

BUILTIN_SOURCES: dict[str, type[SnapshotSource]] = {
    "nodes": NodeSource,
    "pods": PodSource,
    "services": ServiceSource,
    "deployments": DeploymentSource,
}


def build_sources(
    client: "ClusterClient",
    config: "Config",
    clock: Callable[[], datetime] | None = None,
) -> list[SnapshotSource]:
    """Create every enabled source, configured from ``config``.

    Args:
        client: Cluster API client shared by all sources
        config: Application configuration
        clock: Optional clock override (for tests)

    Returns:
        Sources in a fixed order: nodes, pods, services, deployments
    """
    sources: list[SnapshotSource] = []
    for name, source_class in BUILTIN_SOURCES.items():
        source_config = config.get_source_config(name)
        if not source_config.enabled:
            continue
        kwargs = {"clock": clock} if clock is not None else {}
        sources.append(
            source_class(
                client,
                namespace=config.namespace,
                system_namespace=config.system_namespace,
                timeout=source_config.timeout,
                **kwargs,
            )
        )
    return sources


__all__ = [
    "BUILTIN_SOURCES",
    "DeploymentSource",
    "NodeSource",
    "PodSource",
    "ServiceSource",
    "build_sources",
]
