"""
Flow graph snapshots.
"""

from projectstore.kernel.flows.flow_store import FlowStore

__all__ = ["FlowStore"]
