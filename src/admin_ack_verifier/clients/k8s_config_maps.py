"""Kubernetes Core API wrapper for the admin-gates and admin-acks config maps."""

from __future__ import annotations

import asyncio
import threading

import structlog
from kubernetes import client as k8s_client
from kubernetes.client.exceptions import ApiException

from admin_ack_verifier.clients import load_k8s_api_client
from admin_ack_verifier.config import ClusterConfig

log = structlog.get_logger()


class K8sConfigMapClient:
    """Wrapper around the Kubernetes Core V1 API for config map reads and single-key updates."""

    def __init__(self, cluster_config: ClusterConfig) -> None:
        self._cluster_config = cluster_config
        self._api: k8s_client.CoreV1Api | None = None
        self._lock = threading.Lock()

    def _get_api(self) -> k8s_client.CoreV1Api:
        with self._lock:
            if self._api is None:
                api_client = load_k8s_api_client(self._cluster_config.kubeconfig_context)
                self._api = k8s_client.CoreV1Api(api_client)
            return self._api

    async def get_config_map_data(
        self,
        namespace: str,
        name: str,
        missing_ok: bool = False,
    ) -> dict[str, str] | None:
        """Read a config map's data.

        Args:
            namespace: Namespace of the config map.
            name: Name of the config map.
            missing_ok: Return None instead of raising when the config map does not exist.

        Returns the config map's ``data`` (empty dict when it has none), or None
        when it is absent and ``missing_ok`` is set.
        """
        api = self._get_api()
        try:
            config_map = await asyncio.to_thread(api.read_namespaced_config_map, name, namespace)
        except ApiException as e:
            if missing_ok and e.status == 404:
                log.info(
                    "config_map_not_found",
                    cluster=self._cluster_config.cluster_id,
                    namespace=namespace,
                    name=name,
                )
                return None
            log.error(
                "failed_to_read_config_map",
                cluster=self._cluster_config.cluster_id,
                namespace=namespace,
                name=name,
                status=e.status,
            )
            raise
        except Exception:
            log.error(
                "failed_to_read_config_map",
                cluster=self._cluster_config.cluster_id,
                namespace=namespace,
                name=name,
            )
            raise
        return dict(config_map.data or {})

    async def set_config_map_key(self, namespace: str, name: str, key: str, value: str) -> None:
        """Set one key of a config map with a read-modify-write update.

        The object read is sent back with its resourceVersion, so a concurrent
        writer causes a 409 Conflict instead of a lost update. Other keys are
        left untouched.
        """
        api = self._get_api()
        try:
            config_map = await asyncio.to_thread(api.read_namespaced_config_map, name, namespace)
            data = dict(config_map.data or {})
            data[key] = value
            config_map.data = data
            await asyncio.to_thread(api.replace_namespaced_config_map, name, namespace, config_map)
        except Exception:
            log.error(
                "failed_to_update_config_map",
                cluster=self._cluster_config.cluster_id,
                namespace=namespace,
                name=name,
                key=key,
            )
            raise
        log.info(
            "config_map_key_set",
            cluster=self._cluster_config.cluster_id,
            namespace=namespace,
            name=name,
            key=key,
            value=value,
        )
