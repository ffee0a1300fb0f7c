"""MCP server entry point and tool registration."""

from __future__ import annotations

import sys
import time

import structlog
from mcp.server.fastmcp import FastMCP

from admin_ack_verifier.config import load_cluster_map, validate_cluster_config
from admin_ack_verifier.models import scrub_sensitive_values
from admin_ack_verifier.tools.admin_ack import verify_admin_ack_all, verify_admin_ack_handler
from admin_ack_verifier.tools.admin_ack_status import get_admin_ack_status_all, get_admin_ack_status_handler

# Configure structlog for JSON output to stderr
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
)

log = structlog.get_logger()

mcp = FastMCP("Admin Ack Verifier")


@mcp.tool()
async def verify_admin_ack(cluster: str) -> str:
    """Verify the admin-ack upgrade gates of an OpenShift cluster end to end.

    For every gate in openshift-config-managed/admin-gates that applies to the
    cluster's current minor version, clears any existing ack, waits for the
    ClusterVersion Upgradeable condition to report AdminAckRequired for the gate,
    then writes the ack to admin-acks. Finally waits for Upgradeable to stop being
    False. This modifies the admin-acks config map. Can take several minutes per gate.

    Args:
        cluster: Cluster ID (e.g., 'prod-east') or 'all' for fleet-wide verification.
    """
    start = time.monotonic()
    try:
        if cluster == "all":
            results = await verify_admin_ack_all()
            output = "\n\n".join(scrub_sensitive_values(r.model_dump_json(indent=2)) for r in results)
        else:
            result = await verify_admin_ack_handler(cluster)
            output = scrub_sensitive_values(result.model_dump_json(indent=2))
        log.info("tool_completed", tool="verify_admin_ack", cluster=cluster, latency_ms=_elapsed_ms(start))
        return output
    except Exception as e:
        sanitised = scrub_sensitive_values(str(e))
        log.error("tool_failed", tool="verify_admin_ack", cluster=cluster, error=sanitised)
        raise RuntimeError(sanitised) from None


@mcp.tool()
async def get_admin_ack_status(cluster: str) -> str:
    """Report admin-ack gates, their ack state, and the Upgradeable condition without changing anything.

    Lists every gate with whether it is well formed, applies to the current minor
    version, has been acked, and is the gate currently blocking Upgradeable.
    Use this before an upgrade to see which acknowledgements are still required.

    Args:
        cluster: Cluster ID (e.g., 'prod-east') or 'all' for fleet-wide query.
    """
    start = time.monotonic()
    try:
        if cluster == "all":
            results = await get_admin_ack_status_all()
            output = "\n\n".join(scrub_sensitive_values(r.model_dump_json(indent=2)) for r in results)
        else:
            result = await get_admin_ack_status_handler(cluster)
            output = scrub_sensitive_values(result.model_dump_json(indent=2))
        log.info("tool_completed", tool="get_admin_ack_status", cluster=cluster, latency_ms=_elapsed_ms(start))
        return output
    except Exception as e:
        sanitised = scrub_sensitive_values(str(e))
        log.error("tool_failed", tool="get_admin_ack_status", cluster=cluster, error=sanitised)
        raise RuntimeError(sanitised) from None


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


if __name__ == "__main__":
    load_cluster_map()
    validate_cluster_config()
    mcp.run(transport="stdio")
