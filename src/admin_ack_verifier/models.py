"""Pydantic v2 models for cluster state, tool outputs, and errors."""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# --- Errors ---


class AdminAckErrorKind(StrEnum):
    """Closed set of ways an admin-ack verification can fail."""

    RETRIEVAL = "retrieval"
    VALIDATION = "validation"
    CONTRADICTION = "contradiction"
    TIMEOUT = "timeout"
    UPDATE = "update"


class AdminAckError(Exception):
    """Terminal failure of an admin-ack verification run."""

    def __init__(self, kind: AdminAckErrorKind, detail: str) -> None:
        super().__init__(detail)
        self.kind = kind
        self.detail = detail

    def __repr__(self) -> str:
        return f"AdminAckError(kind={self.kind.value!r}, detail={self.detail!r})"


class ToolError(BaseModel):
    """Structured error returned by the tools for partial results."""

    error: str
    source: str
    cluster: str
    partial_data: bool = False


# --- Output scrubbing ---

_IP_PATTERN = re.compile(r"\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b")
_API_SERVER_PATTERN = re.compile(r"https?://api(-int)?\.[\w.-]+(:\d+)?", re.IGNORECASE)
_APPS_HOST_PATTERN = re.compile(r"\b[\w.-]+\.apps\.[\w.-]+\.[a-z]{2,}\b", re.IGNORECASE)


def scrub_sensitive_values(text: str) -> str:
    """Remove internal IPs, API server URLs, and ingress hostnames from text.

    Gate names and descriptions are preserved.
    """
    if not text:
        return text
    result = _API_SERVER_PATTERN.sub("[REDACTED_API_SERVER]", text)
    result = _APPS_HOST_PATTERN.sub("[REDACTED_HOST]", result)
    result = _IP_PATTERN.sub("[REDACTED_IP]", result)
    return result


# --- Cluster state ---


class StatusCondition(BaseModel):
    """A single ClusterVersion status condition."""

    model_config = ConfigDict(extra="ignore")

    type: str
    status: Literal["True", "False", "Unknown"]
    reason: str = ""
    message: str = ""


class VersionHistoryEntry(BaseModel):
    """One entry of the ClusterVersion update history, newest first."""

    model_config = ConfigDict(extra="ignore")

    version: str
    state: Literal["Completed", "Partial"]


class ClusterVersionStatus(BaseModel):
    """The parts of ClusterVersion status the admin-ack protocol reads."""

    model_config = ConfigDict(extra="ignore")

    history: list[VersionHistoryEntry] = Field(default_factory=list)
    conditions: list[StatusCondition] = Field(default_factory=list)


class UpgradeableSnapshot(BaseModel):
    """Point-in-time view of the Upgradeable condition, used in diagnostics."""

    present: bool
    status: str | None = None
    reason: str | None = None
    message: str | None = None

    def describe(self) -> str:
        if not self.present:
            return "Upgradeable nil"
        return f'Upgradeable: Status={self.status}, Reason={self.reason}, Message="{self.message}".'


class GateDefinition(BaseModel):
    """A validated admin-ack gate from the admin-gates config map."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    version: str


# --- Verification output ---


class GateOutcome(BaseModel):
    """What happened to one gate during a verification run."""

    gate: str
    description: str
    applicable: bool
    previously_acked: bool = False
    ack_cleared: bool = False
    acked: bool = False
    skipped_reason: str | None = None


class AdminAckVerificationOutput(BaseModel):
    """Output for verify_admin_ack."""

    cluster: str
    skipped: bool = False
    current_version: str = ""
    gates: list[GateOutcome] = Field(default_factory=list)
    upgradeable: UpgradeableSnapshot | None = None
    summary: str
    timestamp: str
    errors: list[ToolError] = Field(default_factory=list)


# --- Status report output ---


class GateStatus(BaseModel):
    """Current state of one gate, as reported by get_admin_ack_status."""

    gate: str
    description: str
    valid: bool
    applicable: bool
    acked: bool
    blocking: bool
    error: str | None = None


class AdminAckStatusOutput(BaseModel):
    """Output for get_admin_ack_status."""

    cluster: str
    current_version: str = ""
    gates_present: bool
    gates: list[GateStatus] = Field(default_factory=list)
    upgradeable: UpgradeableSnapshot | None = None
    summary: str
    timestamp: str
    errors: list[ToolError] = Field(default_factory=list)
