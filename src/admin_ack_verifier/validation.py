"""Validation helpers for admin-ack gate names and Kubernetes identifiers."""

from __future__ import annotations

import re

from admin_ack_verifier.models import AdminAckError, AdminAckErrorKind, GateDefinition

# Gate keys look like ack-4.12-kube-1.26-api-removals-in-4.13. Only the prefix is
# anchored; everything after the first suffix character is free-form.
ADMIN_ACK_GATE_FORMAT = "^ack-[4-5][.]([0-9]{1,})-[^-]"
_ADMIN_ACK_GATE_RE = re.compile(ADMIN_ACK_GATE_FORMAT)

# RFC 1123 label: lowercase alphanumeric and hyphens, 1-63 chars, starts/ends with alphanumeric
_NAMESPACE_RE = re.compile(r"^[a-z0-9]([a-z0-9\-]{0,61}[a-z0-9])?$")


def match_gate(name: str) -> str:
    """Return the matched ``ack-<major>.<minor>-<c>`` prefix of a gate name, or "" if it does not match."""
    match = _ADMIN_ACK_GATE_RE.match(name)
    return match.group(0) if match else ""


def validate_gate(name: str, description: str, source: str) -> GateDefinition:
    """Validate one admin-gates entry and return it as a GateDefinition.

    Args:
        name: The config map key.
        description: The config map value.
        source: ``<namespace>/<name>`` of the config map, used in error messages.

    Raises:
        AdminAckError: With kind VALIDATION when the name is malformed or the
            description is empty. The name is checked first.
    """
    prefix = match_gate(name)
    if not prefix:
        msg = f"Configmap {source} gate {name} has invalid format; must comply with {ADMIN_ACK_GATE_FORMAT!r}."
        raise AdminAckError(AdminAckErrorKind.VALIDATION, msg)
    if not description:
        msg = f"Configmap {source} gate {name} does not contain description."
        raise AdminAckError(AdminAckErrorKind.VALIDATION, msg)
    return GateDefinition(name=name, description=description, version=prefix.split("-")[1])


def validate_namespace(namespace: str | None) -> None:
    """Validate a Kubernetes namespace name against RFC 1123."""
    if namespace is None:
        return
    if not _NAMESPACE_RE.match(namespace):
        msg = f"Invalid namespace: {namespace!r}. Must be a valid RFC 1123 label."
        raise ValueError(msg)
