"""Shared test fixtures for all test modules."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from admin_ack_verifier.config import ALL_CLUSTER_IDS, CLUSTER_MAP, AdminAckSettings, ClusterConfig

TEST_CLUSTERS = {
    "dev-east": ClusterConfig(
        cluster_id="dev-east",
        environment="dev",
        kubeconfig_context="admin/api-dev-east-example-com:6443",
    ),
    "prod-east": ClusterConfig(
        cluster_id="prod-east",
        environment="prod",
        kubeconfig_context="admin/api-prod-east-example-com:6443",
        acks_namespace="custom-acks",
    ),
}


@pytest.fixture(autouse=True)
def cluster_map() -> Iterator[dict[str, ClusterConfig]]:
    """Populate the module-level cluster map for the duration of a test."""
    saved_map = dict(CLUSTER_MAP)
    saved_ids = list(ALL_CLUSTER_IDS)
    CLUSTER_MAP.clear()
    CLUSTER_MAP.update(TEST_CLUSTERS)
    ALL_CLUSTER_IDS.clear()
    ALL_CLUSTER_IDS.extend(TEST_CLUSTERS)
    yield CLUSTER_MAP
    CLUSTER_MAP.clear()
    CLUSTER_MAP.update(saved_map)
    ALL_CLUSTER_IDS.clear()
    ALL_CLUSTER_IDS.extend(saved_ids)


@pytest.fixture
def fast_settings() -> AdminAckSettings:
    """Settings with polling bounds short enough for unit tests."""
    return AdminAckSettings(
        gates_namespace="openshift-config-managed",
        gates_config_map="admin-gates",
        acks_namespace="openshift-config",
        acks_config_map="admin-acks",
        cluster_version_name="version",
        poll_interval_seconds=0.01,
        poll_timeout_seconds=0.2,
    )
