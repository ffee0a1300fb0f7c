"""Tests for ClusterVersion condition inspection."""

from __future__ import annotations

from admin_ack_verifier.conditions import (
    admin_ack_required_with_message,
    find_condition,
    snapshot_upgradeable,
    upgradeable_explicitly_false,
)
from admin_ack_verifier.models import ClusterVersionStatus, StatusCondition


def _status(*conditions: StatusCondition) -> ClusterVersionStatus:
    return ClusterVersionStatus(conditions=list(conditions))


AVAILABLE = StatusCondition(type="Available", status="True", reason="", message="Done applying 4.12.3")
BLOCKED = StatusCondition(
    type="Upgradeable",
    status="False",
    reason="AdminAckRequired",
    message="Kubernetes 1.26 and therefore OpenShift 4.13 remove several APIs",
)


class TestFindCondition:
    def test_finds_regardless_of_order(self) -> None:
        assert find_condition([AVAILABLE, BLOCKED], "Upgradeable") is BLOCKED
        assert find_condition([BLOCKED, AVAILABLE], "Upgradeable") is BLOCKED

    def test_first_match_returned(self) -> None:
        other = StatusCondition(type="Upgradeable", status="True")
        assert find_condition([BLOCKED, other], "Upgradeable") is BLOCKED

    def test_missing(self) -> None:
        assert find_condition([AVAILABLE], "Upgradeable") is None
        assert find_condition([], "Upgradeable") is None


class TestUpgradeableChecks:
    def test_explicitly_false(self) -> None:
        assert upgradeable_explicitly_false(_status(AVAILABLE, BLOCKED)) is True

    def test_unknown_is_not_false(self) -> None:
        unknown = StatusCondition(type="Upgradeable", status="Unknown")
        assert upgradeable_explicitly_false(_status(unknown)) is False

    def test_absent_is_not_false(self) -> None:
        assert upgradeable_explicitly_false(_status(AVAILABLE)) is False

    def test_admin_ack_required_substring_match(self) -> None:
        assert admin_ack_required_with_message(_status(BLOCKED), "OpenShift 4.13 remove") is True

    def test_admin_ack_required_reason_contains(self) -> None:
        multi = StatusCondition(
            type="Upgradeable",
            status="False",
            reason="MultipleReasons",
            message="AdminAckRequired: x",
        )
        assert admin_ack_required_with_message(_status(multi), "x") is False
        multi_reason = multi.model_copy(update={"reason": "AdminAckRequired_ClusterOperatorsNotUpgradeable"})
        assert admin_ack_required_with_message(_status(multi_reason), "x") is True

    def test_admin_ack_required_wrong_message(self) -> None:
        assert admin_ack_required_with_message(_status(BLOCKED), "unrelated") is False

    def test_admin_ack_required_missing_condition(self) -> None:
        assert admin_ack_required_with_message(_status(AVAILABLE), "") is False


class TestSnapshot:
    def test_present(self) -> None:
        snap = snapshot_upgradeable(_status(BLOCKED))
        assert snap.present is True
        assert snap.describe() == (
            'Upgradeable: Status=False, Reason=AdminAckRequired, Message="'
            'Kubernetes 1.26 and therefore OpenShift 4.13 remove several APIs".'
        )

    def test_absent(self) -> None:
        snap = snapshot_upgradeable(_status(AVAILABLE))
        assert snap.present is False
        assert snap.describe() == "Upgradeable nil"
