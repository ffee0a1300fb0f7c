"""ClusterVersion condition inspection."""

from __future__ import annotations

from admin_ack_verifier.models import ClusterVersionStatus, StatusCondition, UpgradeableSnapshot

UPGRADEABLE = "Upgradeable"
ADMIN_ACK_REQUIRED = "AdminAckRequired"


def find_condition(conditions: list[StatusCondition], condition_type: str) -> StatusCondition | None:
    """Return the first condition of the given type. Order of ``conditions`` is not significant."""
    for condition in conditions:
        if condition.type == condition_type:
            return condition
    return None


def upgradeable_condition(status: ClusterVersionStatus) -> StatusCondition | None:
    return find_condition(status.conditions, UPGRADEABLE)


def upgradeable_explicitly_false(status: ClusterVersionStatus) -> bool:
    """True only when an Upgradeable condition exists with status False."""
    cond = upgradeable_condition(status)
    return cond is not None and cond.status == "False"


def admin_ack_required_with_message(status: ClusterVersionStatus, message: str) -> bool:
    """True when Upgradeable's reason contains AdminAckRequired and its message contains ``message``."""
    cond = upgradeable_condition(status)
    return cond is not None and ADMIN_ACK_REQUIRED in cond.reason and message in cond.message


def snapshot_upgradeable(status: ClusterVersionStatus) -> UpgradeableSnapshot:
    cond = upgradeable_condition(status)
    if cond is None:
        return UpgradeableSnapshot(present=False)
    return UpgradeableSnapshot(present=True, status=cond.status, reason=cond.reason, message=cond.message)
