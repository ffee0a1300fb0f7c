"""Cluster version resolution and gate applicability."""

from __future__ import annotations

from admin_ack_verifier.models import VersionHistoryEntry


def current_version(history: list[VersionHistoryEntry]) -> str:
    """Return the cluster's current version from its update history.

    The history is newest first. The first Completed entry wins; when nothing has
    completed yet, the oldest entry (the originally installed version) is used.
    An empty history, seen only early in cluster startup, yields "".
    """
    for entry in history:
        if entry.state == "Completed":
            return entry.version
    if history:
        return history[-1].version
    return ""


def effective_minor(version: str) -> str:
    """Return the second dot-delimited component of a version, or "" if there is none."""
    splits = version.split(".")
    if len(splits) < 2:
        return ""
    return splits[1]


def gate_applicable(gate_version: str, cluster_version: str) -> bool:
    """Whether a gate's ``<major>.<minor>`` applies to the given cluster version.

    Unparseable versions on both sides compare equal.
    """
    return effective_minor(gate_version) == effective_minor(cluster_version)
