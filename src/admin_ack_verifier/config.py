"""Cluster configuration, admin-ack settings, and environment variable overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from admin_ack_verifier.validation import validate_namespace


@dataclass(frozen=True)
class AdminAckSettings:
    """Locations of the admin-ack objects and polling bounds, with environment variable overrides."""

    gates_namespace: str = field(
        default_factory=lambda: os.environ.get("ADMIN_ACK_GATES_NAMESPACE", "openshift-config-managed")
    )
    gates_config_map: str = field(default_factory=lambda: os.environ.get("ADMIN_ACK_GATES_CONFIG_MAP", "admin-gates"))
    acks_namespace: str = field(default_factory=lambda: os.environ.get("ADMIN_ACK_NAMESPACE", "openshift-config"))
    acks_config_map: str = field(default_factory=lambda: os.environ.get("ADMIN_ACK_ACKS_CONFIG_MAP", "admin-acks"))
    cluster_version_name: str = field(default_factory=lambda: os.environ.get("ADMIN_ACK_CLUSTER_VERSION", "version"))
    poll_interval_seconds: float = field(
        default_factory=lambda: float(os.environ.get("ADMIN_ACK_POLL_INTERVAL_SECONDS", "10"))
    )
    poll_timeout_seconds: float = field(
        default_factory=lambda: float(os.environ.get("ADMIN_ACK_POLL_TIMEOUT_SECONDS", "180"))
    )


@dataclass(frozen=True)
class ClusterConfig:
    """Configuration for a single OpenShift cluster."""

    cluster_id: str
    environment: str
    kubeconfig_context: str
    acks_namespace: str | None = None


_REQUIRED_FIELDS = ("environment", "kubeconfig_context")


def _parse_cluster_entry(cluster_id: str, entry: Any) -> ClusterConfig:
    """Build one ClusterConfig from its YAML mapping, rejecting missing or malformed fields."""
    if not isinstance(entry, dict):
        msg = f"Cluster '{cluster_id}' must be a mapping, got {type(entry).__name__}."
        raise ValueError(msg)

    missing = [f for f in _REQUIRED_FIELDS if f not in entry]
    if missing:
        msg = f"Cluster '{cluster_id}' is missing required fields: {', '.join(missing)}."
        raise ValueError(msg)

    acks_namespace = entry.get("acks_namespace")
    return ClusterConfig(
        cluster_id=cluster_id,
        environment=str(entry["environment"]),
        kubeconfig_context=str(entry["kubeconfig_context"]),
        acks_namespace=None if acks_namespace is None else str(acks_namespace),
    )


def _load_cluster_map(path: Path) -> dict[str, ClusterConfig]:
    """Read the clusters YAML file at ``path`` into a mapping of cluster ID to ClusterConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If there is no non-empty ``clusters`` mapping or an entry is invalid.
    """
    if not path.exists():
        msg = (
            f"Cluster configuration file not found: {path}. "
            "Copy clusters.example.yaml to clusters.yaml and fill in your kubeconfig contexts, "
            "or set ADMIN_ACK_CLUSTERS to point to your config file."
        )
        raise FileNotFoundError(msg)

    raw = yaml.safe_load(path.read_text())
    if not isinstance(raw, dict) or "clusters" not in raw:
        msg = f"Cluster config file {path} must contain a top-level 'clusters' key."
        raise ValueError(msg)

    clusters_raw: Any = raw["clusters"]
    if not isinstance(clusters_raw, dict) or not clusters_raw:
        msg = f"Cluster config file {path} has an empty or invalid 'clusters' section."
        raise ValueError(msg)

    return {str(cid): _parse_cluster_entry(str(cid), entry) for cid, entry in clusters_raw.items()}


CLUSTER_MAP: dict[str, ClusterConfig] = {}
ALL_CLUSTER_IDS: list[str] = []


def load_cluster_map() -> dict[str, ClusterConfig]:
    """Load cluster configuration from YAML and populate module-level globals.

    Reads the file path from the ``ADMIN_ACK_CLUSTERS`` environment variable,
    defaulting to ``clusters.yaml`` in the current working directory.

    Returns:
        The loaded cluster map.
    """
    path = Path(os.environ.get("ADMIN_ACK_CLUSTERS", "clusters.yaml"))
    loaded = _load_cluster_map(path)
    CLUSTER_MAP.clear()
    CLUSTER_MAP.update(loaded)
    ALL_CLUSTER_IDS.clear()
    ALL_CLUSTER_IDS.extend(loaded.keys())
    return CLUSTER_MAP


def resolve_cluster(cluster_id: str) -> ClusterConfig:
    """Resolve a cluster ID to its full configuration.

    Raises:
        ValueError: If the cluster_id is not found in CLUSTER_MAP.
    """
    if cluster_id not in CLUSTER_MAP:
        valid = ", ".join(sorted(CLUSTER_MAP.keys()))
        msg = f"Unknown cluster '{cluster_id}'. Valid clusters: {valid}"
        raise ValueError(msg)
    return CLUSTER_MAP[cluster_id]


def validate_cluster_config() -> None:
    """Validate all cluster configurations at startup.

    Raises RuntimeError if a kubeconfig context is empty or an acks namespace
    override is not a valid namespace name.
    """
    errors: list[str] = []
    for cluster_id, config in CLUSTER_MAP.items():
        if not config.kubeconfig_context:
            errors.append(f"{cluster_id}: kubeconfig_context is empty")
        if config.acks_namespace is not None:
            try:
                validate_namespace(config.acks_namespace)
            except ValueError:
                errors.append(f"{cluster_id}: acks_namespace {config.acks_namespace!r} is not a valid namespace")

    if errors:
        detail = "; ".join(errors)
        msg = f"Cluster configuration errors: {detail}. Fix before running against a cluster."
        raise RuntimeError(msg)


def get_settings() -> AdminAckSettings:
    """Return admin-ack settings with environment variable overrides applied."""
    return AdminAckSettings()


def acks_namespace_for(cluster_config: ClusterConfig, settings: AdminAckSettings) -> str:
    """Return the namespace holding the acks config map for a cluster."""
    return cluster_config.acks_namespace or settings.acks_namespace
