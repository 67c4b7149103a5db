"""
Project audit trail.
"""

from projectstore.kernel.events.event_log import EventLog, new_event

__all__ = ["EventLog", "new_event"]
