"""get_admin_ack_status — read-only report of gates, acks, and the Upgradeable condition."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import structlog

from admin_ack_verifier.clients.cluster_version import ClusterVersionClient
from admin_ack_verifier.clients.k8s_config_maps import K8sConfigMapClient
from admin_ack_verifier.conditions import admin_ack_required_with_message, snapshot_upgradeable
from admin_ack_verifier.config import ALL_CLUSTER_IDS, acks_namespace_for, get_settings, resolve_cluster
from admin_ack_verifier.models import (
    AdminAckError,
    AdminAckStatusOutput,
    ClusterVersionStatus,
    GateStatus,
    ToolError,
)
from admin_ack_verifier.validation import validate_gate
from admin_ack_verifier.versions import current_version, gate_applicable

log = structlog.get_logger()


async def get_admin_ack_status_handler(cluster_id: str) -> AdminAckStatusOutput:
    """Core handler for get_admin_ack_status on a single cluster.

    Nothing is written. Malformed gates are listed with an error instead of
    failing the report, and unreadable objects become partial-data errors.
    """
    config = resolve_cluster(cluster_id)
    settings = get_settings()
    acks_namespace = acks_namespace_for(config, settings)
    config_maps = K8sConfigMapClient(config)
    cv_client = ClusterVersionClient(config, settings.cluster_version_name)
    errors: list[ToolError] = []
    gates_source = f"{settings.gates_namespace}/{settings.gates_config_map}"

    gates_data: dict[str, str] | None = None
    gates_unreadable = False
    try:
        gates_data = await config_maps.get_config_map_data(
            settings.gates_namespace, settings.gates_config_map, missing_ok=True
        )
    except Exception:
        gates_unreadable = True
        errors.append(
            ToolError(
                error=f"Failed to read configmap {gates_source}",
                source="k8s-api",
                cluster=cluster_id,
                partial_data=True,
            )
        )

    acks_data: dict[str, str] = {}
    try:
        acks_data = await config_maps.get_config_map_data(acks_namespace, settings.acks_config_map) or {}
    except Exception:
        errors.append(
            ToolError(
                error=f"Failed to read configmap {acks_namespace}/{settings.acks_config_map}",
                source="k8s-api",
                cluster=cluster_id,
                partial_data=True,
            )
        )

    status: ClusterVersionStatus | None = None
    try:
        status = await cv_client.get_status()
    except Exception:
        errors.append(
            ToolError(
                error="Failed to get cluster version",
                source="k8s-api",
                cluster=cluster_id,
                partial_data=True,
            )
        )

    version = current_version(status.history) if status else ""
    gates: list[GateStatus] = []
    for name in sorted(gates_data or {}):
        description = (gates_data or {})[name]
        acked = acks_data.get(name) == "true"
        try:
            gate = validate_gate(name, description, gates_source)
        except AdminAckError as e:
            gates.append(
                GateStatus(
                    gate=name,
                    description=description,
                    valid=False,
                    applicable=False,
                    acked=acked,
                    blocking=False,
                    error=e.detail,
                )
            )
            continue
        blocking = status is not None and admin_ack_required_with_message(status, gate.description)
        gates.append(
            GateStatus(
                gate=gate.name,
                description=gate.description,
                valid=True,
                applicable=gate_applicable(gate.version, version) if status else False,
                acked=acked,
                blocking=blocking,
            )
        )

    upgradeable = snapshot_upgradeable(status) if status else None
    applicable = [g for g in gates if g.applicable]
    pending = [g for g in applicable if not g.acked]
    if gates_unreadable:
        summary = f"{cluster_id}: could not read {gates_source}"
    elif not gates_data:
        summary = f"{cluster_id}: no admin-ack gates published"
    else:
        summary = f"{cluster_id} at {version or 'unknown version'}: {len(applicable)} applicable gates"
        if pending:
            summary += f", {len(pending)} awaiting ack"
    if upgradeable is not None:
        summary += f". {upgradeable.describe()}"

    return AdminAckStatusOutput(
        cluster=cluster_id,
        current_version=version,
        gates_present=bool(gates_data),
        gates=gates,
        upgradeable=upgradeable,
        summary=summary,
        timestamp=datetime.now(tz=UTC).isoformat(),
        errors=errors,
    )


async def get_admin_ack_status_all() -> list[AdminAckStatusOutput]:
    """Fan-out get_admin_ack_status to all clusters concurrently."""
    tasks = [get_admin_ack_status_handler(cid) for cid in ALL_CLUSTER_IDS]
    results = await asyncio.gather(*tasks, return_exceptions=True)
    outputs: list[AdminAckStatusOutput] = []
    for cid, result in zip(ALL_CLUSTER_IDS, results, strict=True):
        if isinstance(result, BaseException):
            log.error("fan_out_cluster_failed", tool="get_admin_ack_status", cluster=cid, error=str(result))
        else:
            outputs.append(result)
    return outputs
