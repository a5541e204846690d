"""Cluster API access for kubetop."""

from kubetop.cluster.client import (
    ClusterClient,
    ClusterConfigError,
    KubernetesClusterClient,
    load_cluster_client,
    resolve_kubeconfig_path,
)

__all__ = [
    "ClusterClient",
    "ClusterConfigError",
    "KubernetesClusterClient",
    "load_cluster_client",
    "resolve_kubeconfig_path",
]
