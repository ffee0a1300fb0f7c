"""verify_admin_ack — walk the admin-ack gates and verify Upgradeable follows each ack."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import structlog

from admin_ack_verifier.clients.cluster_version import ClusterVersionClient
from admin_ack_verifier.clients.k8s_config_maps import K8sConfigMapClient
from admin_ack_verifier.conditions import (
    admin_ack_required_with_message,
    snapshot_upgradeable,
    upgradeable_explicitly_false,
)
from admin_ack_verifier.config import (
    ALL_CLUSTER_IDS,
    AdminAckSettings,
    acks_namespace_for,
    get_settings,
    resolve_cluster,
)
from admin_ack_verifier.models import (
    AdminAckError,
    AdminAckErrorKind,
    AdminAckVerificationOutput,
    ClusterVersionStatus,
    GateDefinition,
    GateOutcome,
    ToolError,
)
from admin_ack_verifier.polling import PollTimeoutError, poll_until
from admin_ack_verifier.validation import validate_gate
from admin_ack_verifier.versions import current_version, gate_applicable

log = structlog.get_logger()

ACKED = "true"


class AdminAckVerifier:
    """Acknowledges every applicable admin-ack gate and checks the Upgradeable condition reacts.

    For each gate applicable to the current minor version: an existing ack is
    first cleared, Upgradeable must then report AdminAckRequired with the gate's
    description, and the gate is acked again. After the last gate, Upgradeable
    must stop being explicitly False. The first failure raises AdminAckError.
    """

    def __init__(
        self,
        config_maps: K8sConfigMapClient,
        cluster_version: ClusterVersionClient,
        settings: AdminAckSettings,
        cluster_id: str,
        acks_namespace: str | None = None,
    ) -> None:
        self._config_maps = config_maps
        self._cluster_version = cluster_version
        self._settings = settings
        self._cluster_id = cluster_id
        self._acks_namespace = acks_namespace or settings.acks_namespace
        self._log = log.bind(cluster=cluster_id)

    @property
    def _gates_source(self) -> str:
        return f"{self._settings.gates_namespace}/{self._settings.gates_config_map}"

    @property
    def _acks_source(self) -> str:
        return f"{self._acks_namespace}/{self._settings.acks_config_map}"

    async def run(self) -> AdminAckVerificationOutput:
        gates_data = await self._get_gates()
        if not gates_data:
            self._log.info(
                "admin_ack_skipped",
                detail="Admin ack is not in this baseline or contains no gates.",
            )
            return AdminAckVerificationOutput(
                cluster=self._cluster_id,
                skipped=True,
                summary=f"{self._cluster_id}: no admin-ack gates published, nothing to verify",
                timestamp=datetime.now(tz=UTC).isoformat(),
            )

        acks_data = await self._get_acks()
        version = current_version((await self._get_status()).history)

        # All gates are validated before anything is written.
        gates = [validate_gate(name, gates_data[name], self._gates_source) for name in sorted(gates_data)]

        outcomes: list[GateOutcome] = []
        for gate in gates:
            if not gate_applicable(gate.version, version):
                self._log.debug("gate_not_applicable", gate=gate.name, current_version=version)
                outcomes.append(
                    GateOutcome(
                        gate=gate.name,
                        description=gate.description,
                        applicable=False,
                        skipped_reason=f"not applicable to {version or 'unknown version'}",
                    )
                )
                continue
            outcomes.append(await self._verify_gate(gate, acks_data.get(gate.name) == ACKED))

        await self._wait_for_upgradeable()
        final = snapshot_upgradeable(await self._get_status())
        acked = sum(1 for o in outcomes if o.acked)
        self._log.info("admin_ack_verified", gates=len(outcomes), acked=acked, current_version=version)
        return AdminAckVerificationOutput(
            cluster=self._cluster_id,
            current_version=version,
            gates=outcomes,
            upgradeable=final,
            summary=f"{self._cluster_id}: admin ack verified, {acked} of {len(outcomes)} gates acked",
            timestamp=datetime.now(tz=UTC).isoformat(),
        )

    async def _verify_gate(self, gate: GateDefinition, previously_acked: bool) -> GateOutcome:
        outcome = GateOutcome(
            gate=gate.name,
            description=gate.description,
            applicable=True,
            previously_acked=previously_acked,
        )
        if previously_acked:
            status = await self._get_status()
            if upgradeable_explicitly_false(status):
                if admin_ack_required_with_message(status, gate.description):
                    msg = (
                        f"Gate {gate.name} has been ack'ed but Upgradeable is false with reason "
                        f'AdminAckRequired and message "{gate.description}".'
                    )
                    raise AdminAckError(AdminAckErrorKind.CONTRADICTION, msg)
                self._log.warning(
                    "gate_acked_upgradeable_false_elsewhere",
                    gate=gate.name,
                    upgradeable=snapshot_upgradeable(status).describe(),
                )
            await self._set_ack(gate.name, "")
            outcome.ack_cleared = True

        await self._wait_for_admin_ack_required(gate.description)
        await self._set_ack(gate.name, ACKED)
        outcome.acked = True
        return outcome

    async def _get_gates(self) -> dict[str, str] | None:
        try:
            return await self._config_maps.get_config_map_data(
                self._settings.gates_namespace,
                self._settings.gates_config_map,
                missing_ok=True,
            )
        except Exception as e:
            msg = f"Error accessing configmap {self._gates_source}, err={e}"
            raise AdminAckError(AdminAckErrorKind.RETRIEVAL, msg) from e

    async def _get_acks(self) -> dict[str, str]:
        try:
            data = await self._config_maps.get_config_map_data(self._acks_namespace, self._settings.acks_config_map)
        except Exception as e:
            msg = f"Error accessing configmap {self._acks_source}, err={e}"
            raise AdminAckError(AdminAckErrorKind.RETRIEVAL, msg) from e
        return data or {}

    async def _get_status(self) -> ClusterVersionStatus:
        try:
            return await self._cluster_version.get_status()
        except Exception as e:
            msg = f"Error getting cluster version, err={e}"
            raise AdminAckError(AdminAckErrorKind.RETRIEVAL, msg) from e

    async def _set_ack(self, gate_name: str, value: str) -> None:
        try:
            await self._config_maps.set_config_map_key(
                self._acks_namespace,
                self._settings.acks_config_map,
                gate_name,
                value,
            )
        except Exception as e:
            msg = f"Unable to update configmap {self._acks_source}, err={e}."
            raise AdminAckError(AdminAckErrorKind.UPDATE, msg) from e

    async def _describe_upgradeable(self) -> str:
        """Describe Upgradeable for a timeout message; a failed read must not replace the timeout."""
        try:
            return snapshot_upgradeable(await self._get_status()).describe()
        except AdminAckError as e:
            self._log.warning("upgradeable_snapshot_failed", error=e.detail)
            return "Upgradeable unknown"

    async def _wait_for_admin_ack_required(self, message: str) -> None:
        self._log.info("waiting_for_admin_ack_required", message=message)

        async def _check() -> bool:
            return admin_ack_required_with_message(await self._get_status(), message)

        try:
            await poll_until(
                _check,
                interval=self._settings.poll_interval_seconds,
                timeout=self._settings.poll_timeout_seconds,
                description="Upgradeable AdminAckRequired",
            )
        except PollTimeoutError as e:
            msg = (
                f'Error while waiting for Upgradeable to go AdminAckRequired with message "{message}", err={e} '
                f"{await self._describe_upgradeable()}"
            )
            raise AdminAckError(AdminAckErrorKind.TIMEOUT, msg) from e

    async def _wait_for_upgradeable(self) -> None:
        self._log.info("waiting_for_upgradeable")

        async def _check() -> bool:
            return not upgradeable_explicitly_false(await self._get_status())

        try:
            await poll_until(
                _check,
                interval=self._settings.poll_interval_seconds,
                timeout=self._settings.poll_timeout_seconds,
                description="Upgradeable not False",
            )
        except PollTimeoutError as e:
            msg = f"Error while waiting for Upgradeable to go true, err={e} {await self._describe_upgradeable()}"
            raise AdminAckError(AdminAckErrorKind.TIMEOUT, msg) from e


async def verify_admin_ack_handler(cluster_id: str) -> AdminAckVerificationOutput:
    """Core handler for verify_admin_ack on a single cluster."""
    config = resolve_cluster(cluster_id)
    settings = get_settings()
    verifier = AdminAckVerifier(
        K8sConfigMapClient(config),
        ClusterVersionClient(config, settings.cluster_version_name),
        settings,
        cluster_id,
        acks_namespace=acks_namespace_for(config, settings),
    )
    try:
        return await verifier.run()
    except AdminAckError as e:
        log.error("admin_ack_failed", cluster=cluster_id, kind=e.kind.value, error=e.detail)
        raise


async def verify_admin_ack_all() -> list[AdminAckVerificationOutput]:
    """Fan-out verify_admin_ack to all clusters concurrently."""
    tasks = [verify_admin_ack_handler(cid) for cid in ALL_CLUSTER_IDS]
    results = await asyncio.gather(*tasks, return_exceptions=True)
    outputs: list[AdminAckVerificationOutput] = []
    for cid, result in zip(ALL_CLUSTER_IDS, results, strict=True):
        if isinstance(result, BaseException):
            log.error("fan_out_cluster_failed", tool="verify_admin_ack", cluster=cid, error=str(result))
            source = result.kind.value if isinstance(result, AdminAckError) else "internal"
            outputs.append(
                AdminAckVerificationOutput(
                    cluster=cid,
                    summary=f"{cid}: admin ack verification failed",
                    timestamp=datetime.now(tz=UTC).isoformat(),
                    errors=[ToolError(error=str(result), source=source, cluster=cid)],
                )
            )
        else:
            outputs.append(result)
    return outputs
