"""Verification of the OpenShift admin-ack upgrade gating protocol."""
