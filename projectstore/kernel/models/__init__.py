"""
Kernel Data Models

SQLAlchemy models for projects, their versions and per-version artifacts.
"""

from projectstore.kernel.models.base import Base, TimestampMixin, utcnow
from projectstore.kernel.models.project import (
    Project,
    NAME_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    USER_MAX_LENGTH,
)
from projectstore.kernel.models.version import ProjectVersion
from projectstore.kernel.models.permission import Permission, ProjectPermission, permission_names
from projectstore.kernel.models.property import ProjectProperty
from projectstore.kernel.models.flow import ProjectFlow
from projectstore.kernel.models.event_log import EventType, ProjectEvent

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "utcnow",
    # Project
    "Project",
    "NAME_MAX_LENGTH",
    "DESCRIPTION_MAX_LENGTH",
    "USER_MAX_LENGTH",
    # Versions
    "ProjectVersion",
    # Permissions
    "Permission",
    "ProjectPermission",
    "permission_names",
    # Artifacts
    "ProjectProperty",
    "ProjectFlow",
    # Event Log
    "EventType",
    "ProjectEvent",
]
