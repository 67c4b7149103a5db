"""
Storage kernel.

Models and services behind the project metadata store. Every service runs
each operation as one transaction against the session factory it is given;
no state is shared between calls.
"""

from projectstore.kernel.events import EventLog
from projectstore.kernel.flows import FlowStore
from projectstore.kernel.models import EventType, Permission
from projectstore.kernel.permissions import PermissionRegistry
from projectstore.kernel.projects import ProjectStore
from projectstore.kernel.properties import PropertyStore
from projectstore.kernel.versions import ArtifactTransport, VersionStore

__all__ = [
    "ArtifactTransport",
    "EventLog",
    "EventType",
    "FlowStore",
    "Permission",
    "PermissionRegistry",
    "ProjectStore",
    "PropertyStore",
    "VersionStore",
]
