"""Tests for K8sConfigMapClient: reads, missing config maps, single-key read-modify-write."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.exceptions import ApiException

from admin_ack_verifier.clients.k8s_config_maps import K8sConfigMapClient
from admin_ack_verifier.config import CLUSTER_MAP


def _make_mock_config_map(data: dict[str, str] | None, resource_version: str = "12345") -> MagicMock:
    cm = MagicMock()
    cm.metadata.resource_version = resource_version
    cm.data = data
    return cm


@pytest.fixture
def client() -> K8sConfigMapClient:
    return K8sConfigMapClient(CLUSTER_MAP["dev-east"])


class TestGetConfigMapData:
    async def test_returns_data(self, client: K8sConfigMapClient) -> None:
        mock_api = MagicMock()
        mock_api.read_namespaced_config_map.return_value = _make_mock_config_map({"ack-4.12-x": "desc"})

        with patch.object(client, "_get_api", return_value=mock_api):
            data = await client.get_config_map_data("openshift-config-managed", "admin-gates")

        assert data == {"ack-4.12-x": "desc"}
        mock_api.read_namespaced_config_map.assert_called_once_with("admin-gates", "openshift-config-managed")

    async def test_none_data_is_empty_dict(self, client: K8sConfigMapClient) -> None:
        mock_api = MagicMock()
        mock_api.read_namespaced_config_map.return_value = _make_mock_config_map(None)

        with patch.object(client, "_get_api", return_value=mock_api):
            data = await client.get_config_map_data("openshift-config", "admin-acks")

        assert data == {}

    async def test_missing_ok_returns_none(self, client: K8sConfigMapClient) -> None:
        mock_api = MagicMock()
        mock_api.read_namespaced_config_map.side_effect = ApiException(status=404, reason="Not Found")

        with patch.object(client, "_get_api", return_value=mock_api):
            data = await client.get_config_map_data("openshift-config-managed", "admin-gates", missing_ok=True)

        assert data is None

    async def test_missing_raises_by_default(self, client: K8sConfigMapClient) -> None:
        mock_api = MagicMock()
        mock_api.read_namespaced_config_map.side_effect = ApiException(status=404, reason="Not Found")

        with patch.object(client, "_get_api", return_value=mock_api), pytest.raises(ApiException):
            await client.get_config_map_data("openshift-config", "admin-acks")

    async def test_other_api_errors_raise_even_when_missing_ok(self, client: K8sConfigMapClient) -> None:
        mock_api = MagicMock()
        mock_api.read_namespaced_config_map.side_effect = ApiException(status=403, reason="Forbidden")

        with patch.object(client, "_get_api", return_value=mock_api), pytest.raises(ApiException, match="Forbidden"):
            await client.get_config_map_data("openshift-config-managed", "admin-gates", missing_ok=True)

    async def test_non_api_errors_raise(self, client: K8sConfigMapClient) -> None:
        mock_api = MagicMock()
        mock_api.read_namespaced_config_map.side_effect = Exception("connection reset")

        with patch.object(client, "_get_api", return_value=mock_api), pytest.raises(Exception, match="connection reset"):
            await client.get_config_map_data("openshift-config", "admin-acks", missing_ok=True)


class TestSetConfigMapKey:
    async def test_updates_single_key(self, client: K8sConfigMapClient) -> None:
        cm = _make_mock_config_map({"ack-4.11-old": "true", "ack-4.12-x": ""})
        mock_api = MagicMock()
        mock_api.read_namespaced_config_map.return_value = cm

        with patch.object(client, "_get_api", return_value=mock_api):
            await client.set_config_map_key("openshift-config", "admin-acks", "ack-4.12-x", "true")

        mock_api.replace_namespaced_config_map.assert_called_once_with("admin-acks", "openshift-config", cm)
        assert cm.data == {"ack-4.11-old": "true", "ack-4.12-x": "true"}
        assert cm.metadata.resource_version == "12345"

    async def test_creates_data_when_absent(self, client: K8sConfigMapClient) -> None:
        cm = _make_mock_config_map(None)
        mock_api = MagicMock()
        mock_api.read_namespaced_config_map.return_value = cm

        with patch.object(client, "_get_api", return_value=mock_api):
            await client.set_config_map_key("openshift-config", "admin-acks", "ack-4.12-x", "")

        assert cm.data == {"ack-4.12-x": ""}

    async def test_conflict_raises(self, client: K8sConfigMapClient) -> None:
        mock_api = MagicMock()
        mock_api.read_namespaced_config_map.return_value = _make_mock_config_map({})
        mock_api.replace_namespaced_config_map.side_effect = ApiException(status=409, reason="Conflict")

        with patch.object(client, "_get_api", return_value=mock_api), pytest.raises(ApiException, match="Conflict"):
            await client.set_config_map_key("openshift-config", "admin-acks", "ack-4.12-x", "true")

    async def test_read_failure_skips_replace(self, client: K8sConfigMapClient) -> None:
        mock_api = MagicMock()
        mock_api.read_namespaced_config_map.side_effect = ApiException(status=404, reason="Not Found")

        with patch.object(client, "_get_api", return_value=mock_api), pytest.raises(ApiException):
            await client.set_config_map_key("openshift-config", "admin-acks", "ack-4.12-x", "true")

        mock_api.replace_namespaced_config_map.assert_not_called()
