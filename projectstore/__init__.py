"""
Multi-version project metadata store for a workflow orchestrator.

    from projectstore import ProjectStore
    store = ProjectStore()
"""

from projectstore.errors import (
    ConstraintViolationError,
    DuplicateNameError,
    DuplicateVersionError,
    NotFoundError,
    ProjectManagerError,
    StorageError,
    VersionOrderingError,
)
from projectstore.kernel import (
    ArtifactTransport,
    EventLog,
    EventType,
    FlowStore,
    Permission,
    PermissionRegistry,
    ProjectStore,
    PropertyStore,
    VersionStore,
)
from projectstore.schemas import Flow, Project, ProjectFileHandler, ProjectLogEvent, Props

__version__ = "0.1.0"

__all__ = [
    "ArtifactTransport",
    "ConstraintViolationError",
    "DuplicateNameError",
    "DuplicateVersionError",
    "EventLog",
    "EventType",
    "Flow",
    "FlowStore",
    "NotFoundError",
    "Permission",
    "PermissionRegistry",
    "Project",
    "ProjectFileHandler",
    "ProjectLogEvent",
    "ProjectManagerError",
    "ProjectStore",
    "PropertyStore",
    "Props",
    "StorageError",
    "VersionOrderingError",
    "VersionStore",
]
