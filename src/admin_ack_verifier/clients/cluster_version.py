"""OpenShift ClusterVersion wrapper — update history and status conditions."""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import structlog
from kubernetes import client as k8s_client

from admin_ack_verifier.clients import load_k8s_api_client
from admin_ack_verifier.config import ClusterConfig
from admin_ack_verifier.models import ClusterVersionStatus

log = structlog.get_logger()

CONFIG_GROUP = "config.openshift.io"
CONFIG_VERSION = "v1"
CLUSTER_VERSIONS_PLURAL = "clusterversions"


class ClusterVersionClient:
    """Reads the cluster-scoped ClusterVersion object through the Custom Objects API."""

    def __init__(self, cluster_config: ClusterConfig, name: str = "version") -> None:
        self._cluster_config = cluster_config
        self._name = name
        self._api: k8s_client.CustomObjectsApi | None = None
        self._lock = threading.Lock()

    def _get_api(self) -> k8s_client.CustomObjectsApi:
        with self._lock:
            if self._api is None:
                api_client = load_k8s_api_client(self._cluster_config.kubeconfig_context)
                self._api = k8s_client.CustomObjectsApi(api_client)
            return self._api

    async def get_status(self) -> ClusterVersionStatus:
        """Fetch the ClusterVersion and return its history and conditions."""
        api = self._get_api()
        try:
            obj: dict[str, Any] = await asyncio.to_thread(
                api.get_cluster_custom_object,
                CONFIG_GROUP,
                CONFIG_VERSION,
                CLUSTER_VERSIONS_PLURAL,
                self._name,
            )
        except Exception:
            log.error("failed_to_get_cluster_version", cluster=self._cluster_config.cluster_id, name=self._name)
            raise

        status = obj.get("status") or {}
        return ClusterVersionStatus.model_validate(
            {
                "history": status.get("history") or [],
                "conditions": status.get("conditions") or [],
            }
        )
