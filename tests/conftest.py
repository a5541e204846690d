"""Shared fixtures for kubetop tests.

Cluster objects are SimpleNamespace trees shaped like the models returned by
the kubernetes client, so sources can be exercised without a cluster.
"""

import asyncio
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from typing import Any

import pytest

FIXED_NOW = datetime(2024, 1, 15, 10, 30, 0, tzinfo=UTC)


def fixed_clock() -> datetime:
    """Clock that always returns FIXED_NOW."""
    return FIXED_NOW


def make_meta(
    name: str,
    namespace: str | None = None,
    age: timedelta | None = timedelta(hours=2),
) -> SimpleNamespace:
    """Object metadata created ``age`` before FIXED_NOW (None for no timestamp)."""
    created = FIXED_NOW - age if age is not None else None
    return SimpleNamespace(name=name, namespace=namespace, creation_timestamp=created)


def make_conditions(**statuses: bool) -> list[SimpleNamespace]:
    """Conditions keyed by type, e.g. make_conditions(Ready=True, DiskPressure=False)."""
    return [
        SimpleNamespace(type=kind, status="True" if value else "False")
        for kind, value in statuses.items()
    ]


def make_node(
    name: str = "worker-1",
    addresses: list[str] | None = None,
    phase: str | None = None,
    conditions: list[SimpleNamespace] | None = None,
    age: timedelta | None = timedelta(days=3),
) -> SimpleNamespace:
    return SimpleNamespace(
        metadata=make_meta(name, None, age),
        status=SimpleNamespace(
            phase=phase,
            conditions=conditions if conditions is not None else make_conditions(Ready=True),
            addresses=[
                SimpleNamespace(address=address, type="InternalIP")
                for address in (addresses if addresses is not None else ["10.0.0.1"])
            ],
        ),
    )


def make_pod(
    name: str = "web-1",
    namespace: str = "default",
    phase: str | None = "Running",
    conditions: list[SimpleNamespace] | None = None,
    pod_ip: str | None = "10.1.0.5",
    age: timedelta | None = timedelta(minutes=5),
) -> SimpleNamespace:
    return SimpleNamespace(
        metadata=make_meta(name, namespace, age),
        status=SimpleNamespace(
            phase=phase,
            conditions=conditions if conditions is not None else make_conditions(Ready=True),
            pod_ip=pod_ip,
        ),
    )


def make_service(
    name: str = "web",
    namespace: str = "default",
    cluster_ip: str | None = "10.96.0.10",
    external_ips: list[str] | None = None,
    port_names: list[str | None] | None = None,
    ingress: list[tuple[str | None, str | None]] | None = None,
    age: timedelta | None = timedelta(hours=1),
) -> SimpleNamespace:
    load_balancer = SimpleNamespace(
        ingress=(
            [SimpleNamespace(ip=ip, hostname=hostname) for ip, hostname in ingress]
            if ingress is not None
            else None
        )
    )
    return SimpleNamespace(
        metadata=make_meta(name, namespace, age),
        spec=SimpleNamespace(
            cluster_ip=cluster_ip,
            external_i_ps=external_ips,
            ports=[SimpleNamespace(name=port, port=80) for port in port_names or []],
        ),
        status=SimpleNamespace(load_balancer=load_balancer),
    )


def make_deployment(
    name: str = "web",
    namespace: str = "default",
    desired: int | None = 3,
    current: int | None = 3,
    available: int | None = 3,
    conditions: list[SimpleNamespace] | None = None,
    age: timedelta | None = timedelta(days=1),
) -> SimpleNamespace:
    return SimpleNamespace(
        metadata=make_meta(name, namespace, age),
        spec=SimpleNamespace(replicas=desired),
        status=SimpleNamespace(
            replicas=current,
            available_replicas=available,
            conditions=conditions if conditions is not None else [],
        ),
    )


class FakeClusterClient:
    """In-memory ClusterClient.

    Attributes:
        errors: Exception to raise per resource ("nodes", "pods", ...)
        delays: Seconds to sleep before answering, per resource
        calls: Log of (resource, namespace) for every list call
    """

    def __init__(
        self,
        nodes: list[Any] | None = None,
        pods: list[Any] | None = None,
        services: list[Any] | None = None,
        deployments: list[Any] | None = None,
    ) -> None:
        self.objects: dict[str, list[Any]] = {
            "nodes": nodes or [],
            "pods": pods or [],
            "services": services or [],
            "deployments": deployments or [],
        }
        self.errors: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self.calls: list[tuple[str, str | None]] = []

    async def _answer(self, resource: str, namespace: str | None) -> list[Any]:
        self.calls.append((resource, namespace))
        if resource in self.delays:
            await asyncio.sleep(self.delays[resource])
        if resource in self.errors:
            raise self.errors[resource]
        objects = self.objects[resource]
        if namespace:
            objects = [obj for obj in objects if obj.metadata.namespace == namespace]
        return list(objects)

    async def list_nodes(self) -> list[Any]:
        return await self._answer("nodes", None)

    async def list_pods(self, namespace: str | None = None) -> list[Any]:
        return await self._answer("pods", namespace)

    async def list_services(self, namespace: str | None = None) -> list[Any]:
        return await self._answer("services", namespace)

    async def list_deployments(self, namespace: str | None = None) -> list[Any]:
        return await self._answer("deployments", namespace)


@pytest.fixture
def fake_client() -> FakeClusterClient:
    """A cluster with one object of each kind plus a hidden system pod."""
    return FakeClusterClient(
        nodes=[make_node()],
        pods=[make_pod(), make_pod("coredns-abc", namespace="kube-system")],
        services=[make_service(port_names=["http"])],
        deployments=[make_deployment()],
    )
