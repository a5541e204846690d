"""Tests for the Kubernetes cluster client."""

import os
from pathlib import Path
import tempfile
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
import pytest
from urllib3.exceptions import ProtocolError

from kubetop.cluster import (
    ClusterConfigError,
    KubernetesClusterClient,
    load_cluster_client,
    resolve_kubeconfig_path,
)
from kubetop.errors import FetchError


def make_client(timeout: float = 3.0) -> tuple[KubernetesClusterClient, MagicMock, MagicMock]:
    core_api = MagicMock()
    apps_api = MagicMock()
    return KubernetesClusterClient(core_api, apps_api, request_timeout=timeout), core_api, apps_api


class TestKubernetesClusterClient:
    """Tests for KubernetesClusterClient."""

    @pytest.mark.asyncio
    async def test_list_nodes(self) -> None:
        """Test nodes are listed with the request timeout."""
        client, core_api, _ = make_client(timeout=3.0)
        core_api.list_node.return_value = SimpleNamespace(items=["n1", "n2"])

        assert await client.list_nodes() == ["n1", "n2"]
        core_api.list_node.assert_called_once_with(_request_timeout=3.0)

    @pytest.mark.asyncio
    async def test_all_namespaces(self) -> None:
        """Test namespaced resources use the all-namespaces calls by default."""
        client, core_api, apps_api = make_client()
        for call in (
            core_api.list_pod_for_all_namespaces,
            core_api.list_service_for_all_namespaces,
            apps_api.list_deployment_for_all_namespaces,
        ):
            call.return_value = SimpleNamespace(items=[])

        await client.list_pods()
        await client.list_services()
        await client.list_deployments()

        core_api.list_pod_for_all_namespaces.assert_called_once()
        core_api.list_service_for_all_namespaces.assert_called_once()
        apps_api.list_deployment_for_all_namespaces.assert_called_once()
        core_api.list_namespaced_pod.assert_not_called()

    @pytest.mark.asyncio
    async def test_single_namespace(self) -> None:
        """Test a namespace restriction uses the namespaced calls."""
        client, core_api, apps_api = make_client(timeout=1.0)
        core_api.list_namespaced_pod.return_value = SimpleNamespace(items=["p"])
        core_api.list_namespaced_service.return_value = SimpleNamespace(items=["s"])
        apps_api.list_namespaced_deployment.return_value = SimpleNamespace(items=["d"])

        assert await client.list_pods("prod") == ["p"]
        assert await client.list_services("prod") == ["s"]
        assert await client.list_deployments("prod") == ["d"]
        core_api.list_namespaced_pod.assert_called_once_with("prod", _request_timeout=1.0)
        apps_api.list_namespaced_deployment.assert_called_once_with("prod", _request_timeout=1.0)

    @pytest.mark.asyncio
    async def test_none_items(self) -> None:
        """Test a response without items is an empty list."""
        client, core_api, _ = make_client()
        core_api.list_node.return_value = SimpleNamespace(items=None)
        assert await client.list_nodes() == []

    @pytest.mark.asyncio
    async def test_api_exception(self) -> None:
        """Test API errors become FetchError with status and reason."""
        client, core_api, _ = make_client()
        core_api.list_pod_for_all_namespaces.side_effect = ApiException(
            status=403, reason="Forbidden"
        )

        with pytest.raises(FetchError) as exc_info:
            await client.list_pods()
        assert exc_info.value.source == "pods"
        assert exc_info.value.message == "API error 403: Forbidden"

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        """Test connection failures become FetchError."""
        client, _, apps_api = make_client()
        error = ProtocolError("Connection aborted")
        apps_api.list_deployment_for_all_namespaces.side_effect = error

        with pytest.raises(FetchError) as exc_info:
            await client.list_deployments()
        assert exc_info.value.message.startswith("connection failed")

    @pytest.mark.asyncio
    async def test_os_error(self) -> None:
        """Test socket errors become FetchError."""
        client, core_api, _ = make_client()
        core_api.list_node.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(FetchError, match="ConnectionRefusedError"):
            await client.list_nodes()


class TestResolveKubeconfigPath:
    """Tests for resolve_kubeconfig_path."""

    def test_explicit_path(self) -> None:
        """Test an explicit path wins."""
        with patch.dict(os.environ, {"KUBECONFIG": "/env/config"}):
            assert resolve_kubeconfig_path("/explicit/config") == Path("/explicit/config")

    def test_env_first_entry(self) -> None:
        """Test the first entry of KUBECONFIG is used."""
        value = os.pathsep.join(["/first/config", "/second/config"])
        with patch.dict(os.environ, {"KUBECONFIG": value}):
            assert resolve_kubeconfig_path() == Path("/first/config")

    def test_default_path(self) -> None:
        """Test ~/.kube/config is the fallback."""
        env = os.environ.copy()
        env.pop("KUBECONFIG", None)
        with patch.dict(os.environ, env, clear=True):
            assert resolve_kubeconfig_path() == Path("~/.kube/config").expanduser()


class TestLoadClusterClient:
    """Tests for load_cluster_client."""

    def test_missing_file(self) -> None:
        """Test a missing kubeconfig raises ClusterConfigError."""
        with pytest.raises(ClusterConfigError, match="kubeconfig not found"):
            load_cluster_client("/nonexistent/kubeconfig")

    def test_invalid_file(self) -> None:
        """Test a kubeconfig the client cannot load raises ClusterConfigError."""
        with tempfile.NamedTemporaryFile(suffix=".yaml", delete=False, mode="w") as f:
            f.write("apiVersion: v1\n")
            temp_path = f.name

        try:
            with (
                patch(
                    "kubetop.cluster.client.k8s_config.new_client_from_config",
                    side_effect=ConfigException("Invalid kube-config file"),
                ),
                pytest.raises(ClusterConfigError, match="cannot load kubeconfig"),
            ):
                load_cluster_client(temp_path)
        finally:
            os.unlink(temp_path)

    def test_success(self) -> None:
        """Test a loadable kubeconfig yields a client."""
        with tempfile.NamedTemporaryFile(suffix=".yaml", delete=False, mode="w") as f:
            f.write("apiVersion: v1\n")
            temp_path = f.name

        try:
            with patch(
                "kubetop.cluster.client.k8s_config.new_client_from_config",
                return_value=MagicMock(),
            ) as new_client:
                client = load_cluster_client(temp_path, request_timeout=4.0)
            new_client.assert_called_once_with(config_file=temp_path)
            assert isinstance(client, KubernetesClusterClient)
            assert client.request_timeout == 4.0
        finally:
            os.unlink(temp_path)
