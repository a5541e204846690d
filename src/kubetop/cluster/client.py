"""Cluster API client used by the snapshot sources.

The sources depend only on the ClusterClient protocol: four read-only list
operations that return Kubernetes objects. KubernetesClusterClient implements
it on top of the official ``kubernetes`` package, running each blocking call
in a worker thread so the four listings proceed in parallel.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
import os
from pathlib import Path
from typing import Any, Protocol

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError as TransportError

from kubetop.errors import FetchError, KubetopError

logger = logging.getLogger(__name__)

DEFAULT_KUBECONFIG = Path("~/.kube/config")
DEFAULT_REQUEST_TIMEOUT = 10.0


class ClusterConfigError(KubetopError):
    """The kubeconfig could not be found or loaded."""


class ClusterClient(Protocol):
    """Read-only list operations required by the snapshot sources.

    ``namespace=None`` lists across all namespaces.
    """

    async def list_nodes(self) -> list[Any]: ...

    async def list_pods(self, namespace: str | None = None) -> list[Any]: ...

    async def list_services(self, namespace: str | None = None) -> list[Any]: ...

    async def list_deployments(self, namespace: str | None = None) -> list[Any]: ...


class KubernetesClusterClient:
    """ClusterClient backed by the kubernetes CoreV1Api and AppsV1Api.

    Attributes:
        core_api: API for nodes, pods and services
        apps_api: API for deployments
        request_timeout: Timeout in seconds passed to every API call
    """

    def __init__(
        self,
        core_api: k8s_client.CoreV1Api,
        apps_api: k8s_client.AppsV1Api,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.core_api = core_api
        self.apps_api = apps_api
        self.request_timeout = request_timeout

    async def list_nodes(self) -> list[Any]:
        """List all nodes."""
        return await self._list("nodes", self.core_api.list_node)

    async def list_pods(self, namespace: str | None = None) -> list[Any]:
        """List pods in one namespace, or all namespaces when None."""
        if namespace:
            return await self._list("pods", self.core_api.list_namespaced_pod, namespace)
        return await self._list("pods", self.core_api.list_pod_for_all_namespaces)

    async def list_services(self, namespace: str | None = None) -> list[Any]:
        """List services in one namespace, or all namespaces when None."""
        if namespace:
            return await self._list("services", self.core_api.list_namespaced_service, namespace)
        return await self._list("services", self.core_api.list_service_for_all_namespaces)

    async def list_deployments(self, namespace: str | None = None) -> list[Any]:
        """List deployments in one namespace, or all namespaces when None."""
        if namespace:
            return await self._list(
                "deployments", self.apps_api.list_namespaced_deployment, namespace
            )
        return await self._list("deployments", self.apps_api.list_deployment_for_all_namespaces)

    async def _list(self, resource: str, call: Callable[..., Any], *args: Any) -> list[Any]:
        """Run a blocking list call in a thread and return its items.

        Raises:
            FetchError: If the API call or transport failed
        """
        try:
            result = await asyncio.to_thread(
                call, *args, _request_timeout=self.request_timeout
            )
        except ApiException as e:
            raise FetchError(resource, f"API error {e.status}: {e.reason}") from e
        except TransportError as e:
            raise FetchError(resource, f"connection failed: {e}") from e
        except OSError as e:
            raise FetchError(resource, f"{type(e).__name__}: {e}") from e
        return list(result.items or [])


def resolve_kubeconfig_path(explicit: str | None = None) -> Path:
    """Determine which kubeconfig file to use.

    Checks, in order: the explicit path, the first entry of $KUBECONFIG,
    then ~/.kube/config.
    """
    if explicit:
        return Path(explicit).expanduser()
    env_value = os.environ.get("KUBECONFIG", "")
    for entry in env_value.split(os.pathsep):
        if entry:
            return Path(entry).expanduser()
    return DEFAULT_KUBECONFIG.expanduser()


def load_cluster_client(
    kubeconfig: str | None = None,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> KubernetesClusterClient:
    """Build an authenticated cluster client from a kubeconfig file.

    Args:
        kubeconfig: Explicit kubeconfig path (see resolve_kubeconfig_path)
        request_timeout: Timeout in seconds for each API call

    Returns:
        A ready KubernetesClusterClient

    Raises:
        ClusterConfigError: If the kubeconfig is missing or invalid
    """
    path = resolve_kubeconfig_path(kubeconfig)
    if not path.exists():
        raise ClusterConfigError(f"kubeconfig not found: {path}")

    logger.info("Using kubeconfig %s", path)
    try:
        api_client = k8s_config.new_client_from_config(config_file=str(path))
    except (ConfigException, OSError, ValueError) as e:
        raise ClusterConfigError(f"cannot load kubeconfig {path}: {e}") from e

    return KubernetesClusterClient(
        core_api=k8s_client.CoreV1Api(api_client),
        apps_api=k8s_client.AppsV1Api(api_client),
        request_timeout=request_timeout,
    )
